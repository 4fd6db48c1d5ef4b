"""
Changelog page fetching.

This package handles HTTP fetching of the per-period changelog pages.
"""

from .fetcher import CURRENT_PERIOD, FetchResult, fetch_document, period_url

__all__ = [
    "CURRENT_PERIOD",
    "FetchResult",
    "fetch_document",
    "period_url",
]
