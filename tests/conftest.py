"""Shared fixtures: synthetic changelog pages and a scriptable page fetcher."""

from __future__ import annotations

from datetime import date

import pytest

from changelog_feed.config import AppConfig
from changelog_feed.runner import ChangelogService


def build_page(*entries: tuple[str, str, str]) -> str:
    """Render a changelog page from (heading, title, category) tuples."""
    blocks = []
    for heading, title, category in entries:
        slug = title.lower().replace(" ", "-")
        blocks.append(
            f"<h3>{heading}</h3>\n"
            f'<div class="post">'
            f'<a href="/changelog/{slug}/">{title}</a> '
            f'<a href="/changelog/label/{category.lower()}/">{category}</a>'
            f"</div>"
        )
    return "<html><body><main>\n" + "\n".join(blocks) + "\n</main></body></html>"


class FakeFetcher:
    """Async page fetcher serving canned pages (or raising) per period."""

    def __init__(self, pages: dict[str, str | Exception]):
        self.pages = pages
        self.calls: list[str] = []

    async def __call__(self, period: str) -> str:
        self.calls.append(period)
        page = self.pages[period]
        if isinstance(page, Exception):
            raise page
        return page


CURRENT_PAGE = build_page(
    ("Sep. 02 Release", "Actions larger runners", "ACTIONS"),
    ("Sep. 02 Improvement", "Actions cache improvements", "ACTIONS"),
    ("Aug. 28 Improvement", "Copilot code review", "COPILOT"),
)
PREVIOUS_PAGE = build_page(
    ("Dec. 20 Retired", "Legacy projects", "Projects"),
)


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    return FakeFetcher({"2025": CURRENT_PAGE, "2024": PREVIOUS_PAGE})


@pytest.fixture
def service(fake_fetcher: FakeFetcher) -> ChangelogService:
    return ChangelogService(AppConfig(), fetch=fake_fetcher, today=lambda: date(2025, 10, 1))


@pytest.fixture
def page():
    return build_page


@pytest.fixture
def make_fetcher():
    return FakeFetcher
