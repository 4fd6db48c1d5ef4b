"""
Filtering and search over an in-memory set of changelog records.

Filtering is an ordered pipeline of independent stages. Each stage narrows
the candidate records along one FilterSpec dimension and is a no-op when
that dimension is unset:

1. start_date: published_date >= start_date
2. end_date: published_date <= end_date
3. categories: case-insensitive equality with any requested category
4. change_types: membership in the requested change types
5. search_term: case-insensitive substring of title or category

Stages never mutate records and preserve input order.
"""

from __future__ import annotations

from typing import Callable, Iterable, Sequence

from .types import ChangelogRecord, FilterSpec, QueryResult

Stage = Callable[[list[ChangelogRecord], FilterSpec], list[ChangelogRecord]]


def _by_start_date(records: list[ChangelogRecord], spec: FilterSpec) -> list[ChangelogRecord]:
    if spec.start_date is None:
        return records
    return [r for r in records if r.published_date >= spec.start_date]


def _by_end_date(records: list[ChangelogRecord], spec: FilterSpec) -> list[ChangelogRecord]:
    if spec.end_date is None:
        return records
    return [r for r in records if r.published_date <= spec.end_date]


def _by_categories(records: list[ChangelogRecord], spec: FilterSpec) -> list[ChangelogRecord]:
    if not spec.categories:
        return records
    wanted = {c.lower() for c in spec.categories}
    return [r for r in records if r.category.lower() in wanted]


def _by_change_types(records: list[ChangelogRecord], spec: FilterSpec) -> list[ChangelogRecord]:
    if not spec.change_types:
        return records
    return [r for r in records if r.change_type in spec.change_types]


def _by_search_term(records: list[ChangelogRecord], spec: FilterSpec) -> list[ChangelogRecord]:
    if not spec.search_term:
        return records
    needle = spec.search_term.lower()
    return [r for r in records if needle in r.title.lower() or needle in r.category.lower()]


STAGES: tuple[Stage, ...] = (
    _by_start_date,
    _by_end_date,
    _by_categories,
    _by_change_types,
    _by_search_term,
)


def filter_records(
    records: Iterable[ChangelogRecord], spec: FilterSpec | None = None
) -> list[ChangelogRecord]:
    """Apply every filter stage to the records.

    Args:
        records: Records in the order they should be returned
        spec: Constraints to apply; None behaves like an empty FilterSpec

    Returns:
        A new list holding the records that survive every stage
    """
    filtered = list(records)
    if spec is None or spec.is_empty():
        return filtered
    for stage in STAGES:
        filtered = stage(filtered, spec)
        if not filtered:
            break
    return filtered


def derive_categories(records: Iterable[ChangelogRecord]) -> list[str]:
    """Return the distinct categories, sorted by code point (not locale)."""
    return sorted({r.category for r in records})


def query(records: Sequence[ChangelogRecord], spec: FilterSpec | None = None) -> QueryResult:
    """Filter records and describe the categories of the full set.

    The categories list reflects what exists in ``records`` before
    filtering, not what matched.
    """
    matched = filter_records(records, spec)
    return QueryResult(
        records=tuple(matched),
        total_count=len(matched),
        categories=tuple(derive_categories(records)),
    )
