"""
HTTP fetching of changelog pages.

The changelog is published as one page per reporting period: the current
page lives at the base URL and earlier years at {base_url}{year}/. Fetching
uses an async httpx client with retry logic and environment proxy support.
"""

from __future__ import annotations

from dataclasses import dataclass
import asyncio

import httpx

from ..core.errors import FetchError

CURRENT_PERIOD = "current"


@dataclass
class FetchResult:
    """Result of an HTTP fetch operation.

    Either text will be populated (success) or error will be populated (failure),
    but never both. status_code may be None for network-level failures.

    Attributes:
        url: The URL that was fetched
        status_code: HTTP status code, or None if request failed before getting response
        text: The response body text, or None on error
        error: Error message if fetch failed, None on success
    """
    url: str
    status_code: int | None
    text: str | None
    error: str | None

    def raise_for_error(self) -> str:
        """Return the body text, or raise FetchError for a failed fetch."""
        if self.error is not None or self.text is None:
            raise FetchError(
                f"Failed to fetch changelog: {self.error or 'empty response'}",
                url=self.url,
                status_code=self.status_code,
            )
        return self.text


def period_url(base_url: str, period: str | int) -> str:
    """Return the page URL of a reporting period.

    Examples:
        >>> period_url("https://github.blog/changelog/", 2024)
        'https://github.blog/changelog/2024/'
        >>> period_url("https://github.blog/changelog/", CURRENT_PERIOD)
        'https://github.blog/changelog/'
    """
    if str(period) == CURRENT_PERIOD:
        return base_url
    return f"{base_url}{period}/"


async def fetch_document(
    url: str,
    timeout: float,
    retries: int,
    user_agent: str | None = None,
    trust_env: bool = True,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FetchResult:
    """Fetch a URL using httpx with retry logic.

    Uses an async HTTP client that follows redirects and respects system
    proxy settings when trust_env is enabled. Any non-2xx response counts
    as a failed attempt.

    Args:
        url: The URL to fetch
        timeout: Request timeout in seconds
        retries: Number of retry attempts after initial failure
        user_agent: User-Agent header string
        trust_env: Whether to respect system proxy settings from environment
        transport: Optional httpx transport, used to stub the network in tests

    Returns:
        FetchResult with text on success or error message on failure
    """
    headers = {"User-Agent": user_agent} if user_agent else {}
    last_error: str | None = None
    last_status: int | None = None

    for attempt in range(retries + 1):
        try:
            async with httpx.AsyncClient(
                timeout=timeout,
                headers=headers,
                follow_redirects=True,
                trust_env=trust_env,
                transport=transport,
            ) as client:
                resp = await client.get(url)
            if resp.is_success:
                return FetchResult(url=url, status_code=resp.status_code, text=resp.text, error=None)
            last_status = resp.status_code
            last_error = f"HTTP {resp.status_code}: {resp.reason_phrase}"
        except httpx.TimeoutException as exc:
            last_status = None
            last_error = f"TimeoutError: {exc}"
        except httpx.HTTPError as exc:
            last_status = None
            last_error = f"{type(exc).__name__}: {exc}"

        if attempt < retries:
            # Linear backoff: 0.5s, 1.0s, 1.5s...
            await asyncio.sleep(0.5 * (attempt + 1))

    return FetchResult(url=url, status_code=last_status, text=None, error=last_error)
