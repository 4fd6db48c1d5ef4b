"""Tests for the filter/query engine."""

from __future__ import annotations

from datetime import date

from changelog_feed.core.entry import record_id, slugify
from changelog_feed.core.query import derive_categories, filter_records, query
from changelog_feed.core.types import ChangeType, ChangelogRecord, FilterSpec


def _record(title: str, day: date, category: str = "ACTIONS", change_type: ChangeType = ChangeType.RELEASE) -> ChangelogRecord:
    return ChangelogRecord(
        id=record_id(title, day, change_type),
        title=title,
        url=f"https://github.blog/changelog/{slugify(title)}/",
        published_date=day,
        change_type=change_type,
        category=category,
    )


RECORDS = [
    _record("Larger runners", date(2025, 9, 2), "ACTIONS", ChangeType.RELEASE),
    _record("Cache improvements", date(2025, 9, 2), "ACTIONS", ChangeType.IMPROVEMENT),
    _record("Copilot code review", date(2025, 8, 28), "COPILOT", ChangeType.IMPROVEMENT),
    _record("Secret scanning push protection", date(2025, 8, 1), "Security", ChangeType.RELEASE),
    _record("Legacy projects", date(2024, 12, 20), "Projects", ChangeType.RETIRED),
]


def test_slugify_collapses_and_trims():
    assert slugify("  Copilot -- code review: GA!! ") == "copilot-code-review-ga"
    assert slugify("***") == ""


def test_empty_spec_returns_everything_in_order():
    result = query(RECORDS, FilterSpec())

    assert list(result.records) == RECORDS
    assert result.total_count == len(RECORDS)


def test_none_spec_behaves_like_empty_spec():
    assert filter_records(RECORDS, None) == RECORDS
    assert FilterSpec().is_empty()
    assert FilterSpec.build(categories=[], change_types=[], search_term="").is_empty()


def test_date_range_is_inclusive_at_both_ends():
    spec = FilterSpec(start_date=date(2025, 8, 28), end_date=date(2025, 9, 2))

    titles = [r.title for r in filter_records(RECORDS, spec)]

    assert titles == ["Larger runners", "Cache improvements", "Copilot code review"]


def test_start_after_end_matches_nothing():
    spec = FilterSpec(start_date=date(2025, 9, 3), end_date=date(2025, 9, 1))

    assert filter_records(RECORDS, spec) == []


def test_category_filter_is_case_insensitive():
    spec = FilterSpec.build(categories=["copilot"])

    assert [r.title for r in filter_records(RECORDS, spec)] == ["Copilot code review"]


def test_categories_within_dimension_are_ored():
    spec = FilterSpec.build(categories=["copilot", "SECURITY"])

    titles = [r.title for r in filter_records(RECORDS, spec)]

    assert titles == ["Copilot code review", "Secret scanning push protection"]


def test_category_and_type_are_anded():
    records = [
        _record("Release entry", date(2025, 9, 2), "ACTIONS", ChangeType.RELEASE),
        _record("Improvement entry", date(2025, 9, 1), "ACTIONS", ChangeType.IMPROVEMENT),
    ]
    spec = FilterSpec.build(categories=["ACTIONS"], change_types=["RELEASE"])

    result = query(records, spec)

    assert [r.title for r in result.records] == ["Release entry"]
    assert result.total_count == 1


def test_change_type_filter():
    spec = FilterSpec.build(change_types=[ChangeType.RETIRED, ChangeType.IMPROVEMENT])

    titles = [r.title for r in filter_records(RECORDS, spec)]

    assert titles == ["Cache improvements", "Copilot code review", "Legacy projects"]


def test_search_term_matches_title_or_category_case_insensitively():
    assert [r.title for r in filter_records(RECORDS, FilterSpec(search_term="CODE REVIEW"))] == [
        "Copilot code review"
    ]
    assert [r.title for r in filter_records(RECORDS, FilterSpec(search_term="secur"))] == [
        "Secret scanning push protection"
    ]


def test_query_is_idempotent():
    spec = FilterSpec.build(start_date=date(2025, 1, 1), search_term="a")

    first = query(RECORDS, spec)
    second = query(first.records, spec)

    assert second.records == first.records


def test_categories_come_from_unfiltered_set_and_are_sorted_by_code_point():
    result = query(RECORDS, FilterSpec(search_term="copilot"))

    assert result.total_count == 1
    assert result.categories == ("ACTIONS", "COPILOT", "Projects", "Security")


def test_derive_categories_keeps_distinct_case_variants():
    records = [
        _record("One", date(2025, 1, 1), "copilot"),
        _record("Two", date(2025, 1, 2), "COPILOT"),
        _record("Three", date(2025, 1, 3), "COPILOT"),
    ]

    assert derive_categories(records) == ["COPILOT", "copilot"]
    assert len(filter_records(records, FilterSpec.build(categories=["Copilot"]))) == 3


def test_query_never_mutates_input():
    records = list(RECORDS)

    query(records, FilterSpec.build(categories=["ACTIONS"]))

    assert records == RECORDS


def test_limited_slices_without_changing_total():
    result = query(RECORDS)

    assert result.limited(2) == tuple(RECORDS[:2])
    assert result.limited(None) == tuple(RECORDS)
    assert result.total_count == len(RECORDS)


def test_filter_records_with_empty_spec_returns_a_copy():
    records = [_record("Runners", date(2025, 9, 2))]

    filtered = filter_records(records, FilterSpec.build(categories=[], search_term=""))

    assert filtered == records
    assert filtered is not records
