"""
Fetch orchestration for the changelog feed.

This module coordinates the retrieval of the two reporting periods the feed
serves:
1. Resolve the current year (required) and the previous year (best effort)
2. For each period, serve the cached records or fetch and parse the page
3. Run both periods concurrently and join them
4. Merge: current-year records followed by previous-year records

A failure of the required period fails the whole call. A failure of the
best-effort period is logged and contributes no records.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import date
import logging
from typing import Awaitable, Callable, Sequence

from .cache import TTLCache
from .config import AppConfig
from .core.errors import FetchError
from .core.query import query
from .core.types import ChangelogRecord, FilterSpec, QueryResult
from .fetch.fetcher import fetch_document, period_url
from .logging_utils import get_logger, log_event
from .parser import extract

DocumentFetcher = Callable[[str], Awaitable[str]]


@dataclass(frozen=True)
class PeriodSource:
    """One reporting period to fetch and how its failure is treated.

    Attributes:
        key: Period identifier, a year label or CURRENT_PERIOD
        year: Year the period's headings belong to; None means the current year
        required: Whether a failure of this period fails the whole request
    """
    key: str
    year: int | None
    required: bool

    @property
    def cache_key(self) -> str:
        return f"changelog_{self.key}"


class ChangelogService:
    """Serves merged changelog records backed by a per-period TTL cache.

    The cache lives exactly as long as the service instance.
    """

    def __init__(
        self,
        cfg: AppConfig | None = None,
        fetch: DocumentFetcher | None = None,
        clock: Callable[[], float] | None = None,
        today: Callable[[], date] = date.today,
        logger: logging.Logger | None = None,
    ):
        """Initialize the service.

        Args:
            cfg: Application configuration; defaults apply when None
            fetch: Async callable returning the page text of a period
                   identifier. Defaults to an HTTP GET against cfg.fetch.base_url.
            clock: Monotonic clock for the cache, injectable for tests
            today: Provider of the current date, used to resolve periods
            logger: Logger for events; defaults to the package logger
        """
        self.cfg = cfg or AppConfig()
        self._fetch = fetch or self._fetch_over_http
        self._today = today
        self.logger = logger or get_logger()
        cache_kwargs = {"clock": clock} if clock is not None else {}
        self._cache = TTLCache(
            default_ttl=self.cfg.cache.ttl_seconds,
            check_period=self.cfg.cache.check_period_seconds,
            **cache_kwargs,
        )

    @property
    def cache(self) -> TTLCache:
        return self._cache

    def periods(self) -> list[PeriodSource]:
        """Return the current year (required) and previous year (best effort)."""
        year = self._today().year
        return [
            PeriodSource(key=str(year), year=year, required=True),
            PeriodSource(key=str(year - 1), year=year - 1, required=False),
        ]

    async def get_period_records(self, source: PeriodSource) -> list[ChangelogRecord]:
        """Return the records of one period, from cache or a fresh fetch.

        Raises:
            FetchError: If the page cannot be retrieved
            ExtractionError: If the page no longer matches the extraction pattern
        """
        cached = self._cache.get(source.cache_key)
        if cached is not None:
            log_event(
                self.logger,
                "Cache hit",
                event="cache_hit",
                period=source.key,
                count=len(cached),
                hits=self._cache.stats().hits,
            )
            return list(cached)

        log_event(self.logger, "Fetch start", event="fetch_start", period=source.key)
        document = await self._fetch(source.key)
        records = extract(document, year=source.year, origin=self.cfg.fetch.origin)
        self._cache.set(source.cache_key, tuple(records), ttl=self.cfg.cache.ttl_seconds)
        log_event(
            self.logger,
            "Extract done",
            event="extract_done",
            period=source.key,
            count=len(records),
        )
        return records

    async def get_merged_records(self, timeout: float | None = None) -> list[ChangelogRecord]:
        """Fetch both periods concurrently and merge them.

        Args:
            timeout: Upper bound in seconds for the whole call; defaults to
                     cfg.fetch.total_timeout_seconds. On timeout both fetches
                     are cancelled and no partial result is returned.

        Returns:
            Current-year records followed by previous-year records

        Raises:
            FetchError: If the required period fails or the call times out
            ExtractionError: If the required period's page cannot be parsed
        """
        if timeout is None:
            timeout = self.cfg.fetch.total_timeout_seconds
        sources = self.periods()
        gathered = asyncio.gather(
            *(self.get_period_records(source) for source in sources),
            return_exceptions=True,
        )
        try:
            results = await asyncio.wait_for(gathered, timeout)
        except asyncio.TimeoutError:
            log_event(
                self.logger,
                "Fetch timed out",
                level=logging.ERROR,
                event="fetch_timeout",
                timeout=timeout,
            )
            raise FetchError(f"Timed out after {timeout}s fetching changelog periods") from None
        return self._merge(sources, results)

    async def query(self, spec: FilterSpec | None = None, timeout: float | None = None) -> QueryResult:
        """Filter the merged records of both periods."""
        records = await self.get_merged_records(timeout=timeout)
        return query(records, spec)

    def clear_cache(self) -> None:
        self._cache.clear_all()
        log_event(self.logger, "Cache cleared", event="cache_cleared")

    def _merge(
        self, sources: Sequence[PeriodSource], results: Sequence[list[ChangelogRecord] | BaseException]
    ) -> list[ChangelogRecord]:
        merged: list[ChangelogRecord] = []
        for source, result in zip(sources, results):
            if isinstance(result, BaseException):
                if source.required or not isinstance(result, Exception):
                    log_event(
                        self.logger,
                        "Fetch failed",
                        level=logging.ERROR,
                        event="fetch_failed",
                        period=source.key,
                        error=f"{type(result).__name__}: {result}",
                    )
                    raise result
                log_event(
                    self.logger,
                    "Best-effort period skipped",
                    level=logging.WARNING,
                    event="period_skipped",
                    period=source.key,
                    error=f"{type(result).__name__}: {result}",
                )
                continue
            merged.extend(result)
        return merged

    async def _fetch_over_http(self, period: str) -> str:
        fetch_cfg = self.cfg.fetch
        result = await fetch_document(
            period_url(fetch_cfg.base_url, period),
            timeout=fetch_cfg.timeout_seconds,
            retries=fetch_cfg.retries,
            user_agent=fetch_cfg.user_agent,
            trust_env=fetch_cfg.trust_env,
        )
        return result.raise_for_error()
