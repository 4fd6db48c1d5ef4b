"""Tests for the httpx page fetcher."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from changelog_feed.core.errors import FetchError
from changelog_feed.fetch import fetcher
from changelog_feed.fetch.fetcher import CURRENT_PERIOD, FetchResult, fetch_document, period_url


@pytest.fixture(autouse=True)
def no_backoff(monkeypatch):
    async def _no_sleep(_seconds):
        return None

    monkeypatch.setattr(fetcher.asyncio, "sleep", _no_sleep)


def test_period_url():
    base = "https://github.blog/changelog/"
    assert period_url(base, 2024) == "https://github.blog/changelog/2024/"
    assert period_url(base, "2025") == "https://github.blog/changelog/2025/"
    assert period_url(base, CURRENT_PERIOD) == base


def test_fetch_document_returns_body_and_sends_user_agent():
    seen_headers = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen_headers["user-agent"] = request.headers.get("user-agent")
        return httpx.Response(200, text="<html>ok</html>")

    result = asyncio.run(
        fetch_document(
            "https://github.blog/changelog/2025/",
            timeout=5,
            retries=0,
            user_agent="changelog-feed-test",
            transport=httpx.MockTransport(handler),
        )
    )

    assert result == FetchResult(
        url="https://github.blog/changelog/2025/", status_code=200, text="<html>ok</html>", error=None
    )
    assert seen_headers["user-agent"] == "changelog-feed-test"


def test_fetch_document_retries_then_succeeds():
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request.url)
        if len(attempts) < 3:
            return httpx.Response(503)
        return httpx.Response(200, text="recovered")

    result = asyncio.run(
        fetch_document("https://github.blog/changelog/", timeout=5, retries=2, transport=httpx.MockTransport(handler))
    )

    assert len(attempts) == 3
    assert result.text == "recovered"
    assert result.error is None


def test_fetch_document_reports_status_error_after_retries():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404)

    result = asyncio.run(
        fetch_document("https://github.blog/changelog/1999/", timeout=5, retries=1, transport=httpx.MockTransport(handler))
    )

    assert result.text is None
    assert result.status_code == 404
    assert result.error == "HTTP 404: Not Found"
    with pytest.raises(FetchError, match="404") as exc_info:
        result.raise_for_error()
    assert exc_info.value.status_code == 404


def test_fetch_document_reports_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    result = asyncio.run(
        fetch_document("https://github.blog/changelog/", timeout=5, retries=0, transport=httpx.MockTransport(handler))
    )

    assert result.status_code is None
    assert result.error.startswith("ConnectError")


def test_raise_for_error_returns_text_on_success():
    result = FetchResult(url="https://github.blog/changelog/", status_code=200, text="<html/>", error=None)

    assert result.raise_for_error() == "<html/>"
