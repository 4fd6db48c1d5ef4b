"""
HTML parser for the server-rendered changelog page.

The changelog page is a loose sequence of blocks. Each entry is announced by
an <h3> heading of the form "Sep. 02 Improvement" followed by a content
block holding the entry link and, usually, a category link:

    <h3>Sep. 02 <span>Improvement</span></h3>
    <div>
        <a href="/changelog/2025-09-02-some-entry/">Some entry</a>
        <a href="/changelog/label/copilot/">COPILOT</a>
    </div>

Headings that do not match the pattern are ignored. A matching heading
whose content block is missing or lacks a usable entry link is skipped
silently. Only a month abbreviation outside the known table is fatal, since
it means the page no longer looks the way this parser expects.
"""

from __future__ import annotations

from datetime import date
import logging
import re
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from .core.entry import record_id
from .core.errors import ExtractionError
from .core.types import UNCATEGORIZED, ChangeType, ChangelogRecord

DEFAULT_ORIGIN = "https://github.blog"

# Matches whitespace-stripped heading text such as "Sep.02Improvement"
HEADING_RE = re.compile(r"^([A-Za-z]{3})\.([0-9]{2})(Improvement|Release|Retired)$", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")

MONTHS = {
    "JAN": 1, "FEB": 2, "MAR": 3, "APR": 4, "MAY": 5, "JUN": 6,
    "JUL": 7, "AUG": 8, "SEP": 9, "OCT": 10, "NOV": 11, "DEC": 12,
}

logger = logging.getLogger("changelog_feed.parser")


def extract(document: str, year: int | None = None, origin: str = DEFAULT_ORIGIN) -> list[ChangelogRecord]:
    """Parse a changelog page into records, newest first.

    Args:
        document: The raw HTML of one changelog page
        year: Year the page reports on; headings only carry month and day.
              Defaults to the current calendar year.
        origin: Origin used to absolutize relative links

    Returns:
        Records sorted by published_date descending. Records sharing a date
        keep their document order.

    Raises:
        ExtractionError: If a matching heading uses an unknown month abbreviation
    """
    if year is None:
        year = date.today().year

    soup = BeautifulSoup(document, "html.parser")
    records: list[ChangelogRecord] = []

    for heading in soup.find_all("h3"):
        parsed = parse_heading(heading.get_text())
        if parsed is None:
            continue
        month_abbr, day, change_type = parsed

        published = _resolve_date(month_abbr, day, year)
        if published is None:
            logger.debug("Skipping heading with impossible date: %s.%02d/%d", month_abbr, day, year)
            continue

        record = _build_record(heading, published, change_type, origin)
        if record is not None:
            records.append(record)

    # sorted() is stable, and stays stable with reverse=True
    return sorted(records, key=lambda r: r.published_date, reverse=True)


def parse_heading(text: str) -> tuple[str, int, ChangeType] | None:
    """Classify heading text as an entry boundary.

    All whitespace is removed before matching, so " Sep . 02 Improvement "
    is accepted.

    Returns:
        (upper-cased month abbreviation, day, change type), or None when
        the text is not an entry heading
    """
    match = HEADING_RE.match(_WHITESPACE_RE.sub("", text))
    if not match:
        return None
    month_abbr, day, type_word = match.groups()
    return month_abbr.upper(), int(day), ChangeType.parse(type_word)


def _resolve_date(month_abbr: str, day: int, year: int) -> date | None:
    month = MONTHS.get(month_abbr)
    if month is None:
        raise ExtractionError(f"Invalid month abbreviation: {month_abbr}")
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _build_record(
    heading: Tag, published: date, change_type: ChangeType, origin: str
) -> ChangelogRecord | None:
    """Build a record from the content block that follows a heading.

    Returns None when the block is missing or its first link lacks text or
    a target.
    """
    content = heading.find_next_sibling()
    if content is None:
        logger.debug("Skipping heading without content block: %s", heading.get_text(" ", strip=True))
        return None

    links = content.find_all("a", limit=2)
    if not links:
        return None

    title = links[0].get_text().strip()
    href = (links[0].get("href") or "").strip()
    if not title or not href:
        return None

    category = UNCATEGORIZED
    category_url = ""
    if len(links) > 1:
        category = links[1].get_text().strip() or UNCATEGORIZED
        category_href = (links[1].get("href") or "").strip()
        if category_href:
            category_url = _absolute(category_href, origin)

    return ChangelogRecord(
        id=record_id(title, published, change_type),
        title=title,
        url=_absolute(href, origin),
        published_date=published,
        change_type=change_type,
        category=category,
        category_url=category_url,
    )


def _absolute(url: str, origin: str) -> str:
    if url.startswith(("http://", "https://")):
        return url
    return urljoin(origin, url)
