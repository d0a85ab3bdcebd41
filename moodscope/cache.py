"""Bounded in-memory cache with per-entry TTL and LFU/LRU eviction.

Expiry is checked lazily on every read, and an optional asyncio sweeper
deletes expired entries on a fixed interval so keys that are never read
again do not pin memory.  When the cache is full, ``set`` evicts the entry
with the fewest accesses, breaking ties by the oldest last access.

Single-threaded: all methods are synchronous and each write
replaces one whole entry, so coroutines sharing a cache need no locking.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_SIZE = 50
DEFAULT_TTL_SECONDS = 5 * 60.0
DEFAULT_SWEEP_INTERVAL_SECONDS = 60.0


def make_cache_key(prefix: str, params: Mapping[str, Any]) -> str:
    """Deterministic key: ``prefix:a:<json>|b:<json>`` with params sorted by name."""
    parts = [
        f"{name}:{json.dumps(params[name], sort_keys=True, default=str)}"
        for name in sorted(params)
    ]
    return f"{prefix}:{'|'.join(parts)}"


@dataclass
class CacheEntry(Generic[T]):
    data: T
    inserted_at: float
    access_count: int
    last_accessed: float


@dataclass(frozen=True)
class CacheStats:
    size: int
    hits: int
    misses: int
    hit_rate: float  # 0–1
    max_size: int


class MemoryCache(Generic[T]):
    """Key -> value store with TTL expiry and bounded size."""

    def __init__(
        self,
        max_size: int = DEFAULT_MAX_SIZE,
        ttl: float = DEFAULT_TTL_SECONDS,
        *,
        name: str = "cache",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_size < 1:
            raise ValueError(f"max_size must be at least 1, got {max_size}")
        self.max_size = max_size
        self.ttl = ttl
        self.name = name
        self._clock = clock
        self._entries: dict[str, CacheEntry[T]] = {}
        self._hits = 0
        self._misses = 0
        self._sweeper: asyncio.Task[None] | None = None

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        """Membership without touching hit/miss counters or access stats."""
        entry = self._entries.get(key)  # type: ignore[arg-type]
        return entry is not None and not self._expired(entry, self._clock())

    def _expired(self, entry: CacheEntry[T], now: float) -> bool:
        return now - entry.inserted_at > self.ttl

    def keys(self) -> Iterator[str]:
        return iter(list(self._entries))

    def get(self, key: str) -> T | None:
        entry = self._entries.get(key)
        now = self._clock()
        if entry is None:
            self._misses += 1
            return None
        if self._expired(entry, now):
            del self._entries[key]
            self._misses += 1
            logger.debug("%s: expired %s", self.name, key)
            return None
        entry.access_count += 1
        entry.last_accessed = now
        self._hits += 1
        return entry.data

    def set(self, key: str, value: T) -> None:
        """Insert or replace *key*; a replaced entry starts over at one access."""
        if key in self._entries:
            del self._entries[key]
        elif len(self._entries) >= self.max_size:
            self._evict_one()
        now = self._clock()
        self._entries[key] = CacheEntry(
            data=value, inserted_at=now, access_count=1, last_accessed=now
        )

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def delete_matching(self, predicate: Callable[[str], bool]) -> int:
        """Delete every key for which *predicate* is true; return how many."""
        doomed = [k for k in self._entries if predicate(k)]
        for key in doomed:
            del self._entries[key]
        return len(doomed)

    def clear(self) -> None:
        """Drop all entries and reset the hit/miss counters."""
        self._entries.clear()
        self._hits = 0
        self._misses = 0

    def stats(self) -> CacheStats:
        total = self._hits + self._misses
        return CacheStats(
            size=len(self._entries),
            hits=self._hits,
            misses=self._misses,
            hit_rate=self._hits / total if total else 0.0,
            max_size=self.max_size,
        )

    def _evict_one(self) -> None:
        victim: str | None = None
        victim_entry: CacheEntry[T] | None = None
        for key, entry in self._entries.items():
            if victim_entry is None or (entry.access_count, entry.last_accessed) < (
                victim_entry.access_count,
                victim_entry.last_accessed,
            ):
                victim, victim_entry = key, entry
        if victim is not None:
            del self._entries[victim]
            logger.debug("%s: evicted %s", self.name, victim)

    def sweep(self) -> int:
        """Delete every expired entry now; return how many were removed."""
        now = self._clock()
        removed = self.delete_matching(lambda k: self._expired(self._entries[k], now))
        if removed:
            logger.debug("%s: swept %d expired entries", self.name, removed)
        return removed

    # -- background sweeper -------------------------------------------------

    async def _sweep_forever(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            self.sweep()

    def start_sweeper(self, interval: float = DEFAULT_SWEEP_INTERVAL_SECONDS) -> None:
        """Start the periodic sweep on the running event loop (idempotent)."""
        if self._sweeper is not None and not self._sweeper.done():
            return
        self._sweeper = asyncio.get_running_loop().create_task(
            self._sweep_forever(interval), name=f"{self.name}-sweeper"
        )

    async def stop_sweeper(self) -> None:
        task, self._sweeper = self._sweeper, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    @property
    def sweeper_running(self) -> bool:
        return self._sweeper is not None and not self._sweeper.done()
