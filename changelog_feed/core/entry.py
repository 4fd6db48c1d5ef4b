"""Identifier derivation for changelog records.

Record identifiers are a pure function of the published date, the change
type and the title, so re-parsing identical feed content always yields the
same identifiers regardless of when the feed was fetched.
"""

from __future__ import annotations

import re
from datetime import date

from .types import ChangeType

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """Convert text to URL-safe slug.

    Args:
        text: The text to slugify

    Returns:
        A lowercase slug where every run of characters outside [a-z0-9]
        is collapsed into a single hyphen, without leading/trailing hyphens

    Examples:
        >>> slugify("Copilot code review: now GA!")
        'copilot-code-review-now-ga'
    """
    slug = _NON_ALNUM_RE.sub("-", text.lower())
    return slug.strip("-")


def record_id(title: str, published_date: date, change_type: ChangeType) -> str:
    """Return the deterministic identifier of a changelog record.

    Examples:
        >>> record_id("Actions: New runners", date(2025, 9, 2), ChangeType.RELEASE)
        '2025-09-02-release-actions-new-runners'
    """
    return f"{published_date.isoformat()}-{change_type.value.lower()}-{slugify(title)}"
