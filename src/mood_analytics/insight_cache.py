"""
Insight Cache.

Keyed in-memory cache of generated insights with single-flight
coordination. Entries are keyed by the analysis window (start, end), and
are valid while the data version they were computed from is current.
Every write to the mood or context stores bumps the version.

Concurrent callers for the same (key, force_refresh) share one
computation. A non-forced caller also joins an in-flight forced one for
the same key. Computations run as tasks shielded from caller
cancellation so a refresh always completes.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

from .models import SmartInsight

logger = logging.getLogger(__name__)

CacheKey = Tuple[date, date]


class CacheStatus(str, Enum):
    """State of a cache key."""

    MISSING = "missing"
    VALID = "valid"
    STALE = "stale"
    IN_FLIGHT = "in_flight"


@dataclass
class CacheEntry:
    """Insights computed for one window at one data version."""

    key: CacheKey
    insights: List[SmartInsight]
    version: int
    generated_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        return {
            "window_start": self.key[0].isoformat(),
            "window_end": self.key[1].isoformat(),
            "insight_count": len(self.insights),
            "version": self.version,
            "generated_at": self.generated_at.isoformat(),
        }


@dataclass
class _Flight:
    task: asyncio.Task
    version: int


class InsightCache:
    """Version-validated insight cache with per-key single-flight."""

    def __init__(self):
        self._entries: Dict[CacheKey, CacheEntry] = {}
        self._in_flight: Dict[Tuple[CacheKey, bool], _Flight] = {}
        self._version = 0
        self.hits = 0
        self.misses = 0

    @property
    def version(self) -> int:
        return self._version

    def invalidate(self) -> int:
        """Mark every entry stale by advancing the data version."""
        self._version += 1
        logger.debug(f"[CACHE] Data version advanced to {self._version}")
        return self._version

    def status(self, key: CacheKey) -> CacheStatus:
        if (key, True) in self._in_flight or (key, False) in self._in_flight:
            return CacheStatus.IN_FLIGHT
        entry = self._entries.get(key)
        if entry is None:
            return CacheStatus.MISSING
        if entry.version == self._version:
            return CacheStatus.VALID
        return CacheStatus.STALE

    def get(self, key: CacheKey) -> Optional[CacheEntry]:
        """Return the entry for a key if it is still valid."""
        entry = self._entries.get(key)
        if entry is not None and entry.version == self._version:
            return entry
        return None

    async def get_or_compute(
        self,
        key: CacheKey,
        compute: Callable[[], Awaitable[List[SmartInsight]]],
        force_refresh: bool = False,
    ) -> List[SmartInsight]:
        """
        Return cached insights for a key, computing them at most once.

        Args:
            key: Analysis window (start, end)
            compute: Coroutine factory producing fresh insights
            force_refresh: Skip the cached entry and recompute

        Returns:
            List of insights (a new list on each call)
        """
        if not force_refresh:
            entry = self.get(key)
            if entry is not None:
                self.hits += 1
                logger.debug(f"[CACHE] Hit for {key[0]}..{key[1]}")
                return list(entry.insights)

        flight = self._joinable_flight(key, force_refresh)
        if flight is None:
            self.misses += 1
            flight = self._start(key, compute, force_refresh)
        else:
            logger.debug(f"[CACHE] Joining in-flight computation for {key[0]}..{key[1]}")

        insights = await asyncio.shield(flight.task)
        return list(insights)

    def _joinable_flight(self, key: CacheKey, force_refresh: bool) -> Optional[_Flight]:
        forced = self._in_flight.get((key, True))
        if forced is not None and forced.version == self._version:
            return forced
        if force_refresh:
            return None
        plain = self._in_flight.get((key, False))
        if plain is not None and plain.version == self._version:
            return plain
        return None

    def _start(
        self,
        key: CacheKey,
        compute: Callable[[], Awaitable[List[SmartInsight]]],
        force_refresh: bool,
    ) -> _Flight:
        version = self._version
        flight_key = (key, force_refresh)

        async def run() -> List[SmartInsight]:
            insights = await compute()
            existing = self._entries.get(key)
            if existing is None or existing.version <= version:
                self._entries[key] = CacheEntry(
                    key=key, insights=list(insights), version=version
                )
                self._evict_before(key)
            logger.info(
                f"[CACHE] Stored {len(insights)} insights for {key[0]}..{key[1]} "
                f"(version {version})"
            )
            return insights

        task = asyncio.ensure_future(run())
        flight = _Flight(task=task, version=version)
        self._in_flight[flight_key] = flight

        def done(finished: asyncio.Task) -> None:
            if self._in_flight.get(flight_key) is flight:
                del self._in_flight[flight_key]
            if not finished.cancelled() and finished.exception() is not None:
                logger.error(f"[CACHE] Computation failed: {finished.exception()}")

        task.add_done_callback(done)
        return flight

    def _evict_before(self, key: CacheKey) -> None:
        """Drop entries for windows that ended before this one."""
        stale = [k for k in self._entries if k[1] < key[1]]
        for old_key in stale:
            del self._entries[old_key]
        if stale:
            logger.debug(f"[CACHE] Evicted {len(stale)} stale windows before {key[1]}")

    def clear(self) -> None:
        self._entries.clear()

    def get_stats(self) -> Dict:
        """Get cache statistics."""
        return {
            "version": self._version,
            "entries": [e.to_dict() for e in self._entries.values()],
            "in_flight": len(self._in_flight),
            "hits": self.hits,
            "misses": self.misses,
        }
