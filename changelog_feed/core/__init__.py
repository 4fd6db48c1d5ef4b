"""
Core domain models and business logic.

This package contains data types and query logic that is
independent of fetching and parsing.
"""

from .types import ChangeType, ChangelogRecord, FilterSpec, QueryResult, UNCATEGORIZED
from .entry import record_id, slugify
from .errors import (
    ChangelogError,
    ExtractionError,
    FetchError,
    InvalidArgumentError,
    UnknownToolError,
)
from .query import derive_categories, filter_records, query

__all__ = [
    "ChangeType",
    "ChangelogRecord",
    "FilterSpec",
    "QueryResult",
    "UNCATEGORIZED",
    "record_id",
    "slugify",
    "ChangelogError",
    "ExtractionError",
    "FetchError",
    "InvalidArgumentError",
    "UnknownToolError",
    "derive_categories",
    "filter_records",
    "query",
]
