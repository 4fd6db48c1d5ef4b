"""
In-memory time-bounded cache for parsed changelog periods.

Entries expire lazily: every read checks the entry's expiry and drops it
when stale. A periodic sweep also removes expired entries, but it only
runs opportunistically on cache access and is housekeeping; nothing relies
on it for correctness. Nothing is persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
import time
from typing import Any, Callable, Hashable


@dataclass
class CacheStats:
    """Counters describing cache activity since creation or the last clear.

    Attributes:
        hits: Reads that returned a live entry
        misses: Reads that found nothing or an expired entry
        sets: Writes
        expired: Entries dropped because their TTL elapsed
    """
    hits: int = 0
    misses: int = 0
    sets: int = 0
    expired: int = 0


@dataclass
class CacheEntry:
    value: Any
    expires_at: float


class TTLCache:
    """Key/value store with per-entry expiry and manual invalidation.

    Attributes:
        default_ttl: Lifetime in seconds applied when set() gets no ttl
        check_period: Minimum seconds between housekeeping sweeps; <= 0 disables them
    """

    def __init__(
        self,
        default_ttl: float = 3600,
        check_period: float = 600,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.default_ttl = default_ttl
        self.check_period = check_period
        self._clock = clock
        self._entries: dict[Hashable, CacheEntry] = {}
        self._last_sweep = clock()
        self._stats = CacheStats()

    def get(self, key: Hashable) -> Any | None:
        """Return the live value for key, or None when absent or expired."""
        now = self._clock()
        self._maybe_sweep(now)
        entry = self._entries.get(key)
        if entry is None:
            self._stats.misses += 1
            return None
        if entry.expires_at <= now:
            del self._entries[key]
            self._stats.expired += 1
            self._stats.misses += 1
            return None
        self._stats.hits += 1
        return entry.value

    def set(self, key: Hashable, value: Any, ttl: float | None = None) -> None:
        """Store value under key, replacing any previous entry wholesale."""
        now = self._clock()
        self._maybe_sweep(now)
        lifetime = self.default_ttl if ttl is None else ttl
        self._entries[key] = CacheEntry(value=value, expires_at=now + lifetime)
        self._stats.sets += 1

    def clear_all(self) -> None:
        """Remove every entry immediately, regardless of TTL."""
        self._entries.clear()
        self._stats = CacheStats()

    def sweep(self) -> int:
        """Drop every expired entry and return how many were removed."""
        now = self._clock()
        self._last_sweep = now
        stale = [key for key, entry in self._entries.items() if entry.expires_at <= now]
        for key in stale:
            del self._entries[key]
        self._stats.expired += len(stale)
        return len(stale)

    def keys(self) -> list[Hashable]:
        return list(self._entries)

    def stats(self) -> CacheStats:
        return CacheStats(**vars(self._stats))

    def __len__(self) -> int:
        return len(self._entries)

    def _maybe_sweep(self, now: float) -> None:
        if self.check_period > 0 and now - self._last_sweep >= self.check_period:
            self.sweep()
