"""
Core data types for the changelog feed.

This module defines the fundamental data structures used throughout the pipeline:
- ChangeType: The closed set of change kinds a changelog heading can announce
- ChangelogRecord: One parsed changelog entry
- FilterSpec: Optional, independent constraints applied by the query engine
- QueryResult: Filtered records plus the category list of the full record set
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Iterable

UNCATEGORIZED = "Uncategorized"


class ChangeType(str, Enum):
    IMPROVEMENT = "IMPROVEMENT"
    RELEASE = "RELEASE"
    RETIRED = "RETIRED"

    @classmethod
    def parse(cls, text: str) -> ChangeType:
        """Normalize a change-type word (any case) into a ChangeType.

        Raises:
            ValueError: If the word is not one of the known change types
        """
        try:
            return cls(text.strip().upper())
        except (AttributeError, ValueError):
            raise ValueError(f"Unknown change type: {text!r}") from None


@dataclass(frozen=True)
class ChangelogRecord:
    """Represents one changelog entry parsed from the feed.

    Attributes:
        id: Deterministic identifier derived from date, change type and title
        title: The entry headline
        url: Absolute URL of the entry
        published_date: Calendar date the entry was published
        change_type: Kind of change announced by the entry
        category: Product area label, "Uncategorized" when the feed has none
        category_url: Absolute URL of the category page, or "" when absent
    """
    id: str
    title: str
    url: str
    published_date: date
    change_type: ChangeType
    category: str = UNCATEGORIZED
    category_url: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "date": self.published_date.isoformat(),
            "type": self.change_type.value,
            "category": self.category,
            "category_url": self.category_url,
        }


@dataclass(frozen=True)
class FilterSpec:
    """Independent constraints combined with logical AND.

    Within ``categories`` and ``change_types`` membership is logical OR.
    A field left as None (or an empty set / empty string) places no
    constraint on that dimension.

    Attributes:
        start_date: Inclusive lower bound on published_date
        end_date: Inclusive upper bound on published_date
        categories: Category names, matched case-insensitively
        change_types: Accepted change types
        search_term: Case-insensitive substring of title or category
    """
    start_date: date | None = None
    end_date: date | None = None
    categories: frozenset[str] | None = None
    change_types: frozenset[ChangeType] | None = None
    search_term: str | None = None

    @classmethod
    def build(
        cls,
        start_date: date | None = None,
        end_date: date | None = None,
        categories: Iterable[str] | None = None,
        change_types: Iterable[ChangeType | str] | None = None,
        search_term: str | None = None,
    ) -> FilterSpec:
        """Build a FilterSpec from loose iterables, normalizing change types."""
        return cls(
            start_date=start_date,
            end_date=end_date,
            categories=frozenset(categories) if categories else None,
            change_types=(
                frozenset(ChangeType.parse(t) if isinstance(t, str) else t for t in change_types)
                if change_types
                else None
            ),
            search_term=search_term or None,
        )

    def is_empty(self) -> bool:
        return not (
            self.start_date
            or self.end_date
            or self.categories
            or self.change_types
            or self.search_term
        )


@dataclass(frozen=True)
class QueryResult:
    """Outcome of a query over the merged record set.

    Attributes:
        records: Filtered records, newest published_date first
        total_count: Number of filtered records before any caller limit
        categories: Distinct categories of the unfiltered set, sorted
    """
    records: tuple[ChangelogRecord, ...]
    total_count: int
    categories: tuple[str, ...]

    def limited(self, limit: int | None) -> tuple[ChangelogRecord, ...]:
        if limit is None:
            return self.records
        return self.records[:limit]
