"""
Changelog Feed - filtered, searchable views of the GitHub changelog.

This package fetches the server-rendered GitHub changelog pages for the
current and previous year, parses them into structured records and serves
filtered/searchable views of those records through named tools.

Main entry point is the CLI via the `changelog-feed` command.

Example:
    $ changelog-feed recent --count 5
    $ changelog-feed serve
"""

__all__ = [
    "__version__",
    "ChangeType",
    "ChangelogRecord",
    "ChangelogService",
    "ChangelogTools",
    "FilterSpec",
    "QueryResult",
    "TTLCache",
    "extract",
    "query",
]
__version__ = "0.1.0"

from .cache import TTLCache
from .core.query import query
from .core.types import ChangeType, ChangelogRecord, FilterSpec, QueryResult
from .parser import extract
from .runner import ChangelogService
from .tools import ChangelogTools
