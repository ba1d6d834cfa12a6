"""
In-memory TTL cache.

Entries expire lazily: ``get`` treats an expired entry as absent and drops
it. ``CacheSweeper`` runs ``cleanup`` periodically on the event loop so
memory stays bounded when expired keys are never read again.
"""

import asyncio
import json
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from repolens.logging import get_logger, log_cache_event

logger = get_logger("cache")

DEFAULT_TTL = 300.0


def _approximate_size(value: Any) -> int:
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        value = to_dict()
    return len(json.dumps(value, default=str))


@dataclass
class CacheEntry:
    """A cached value with its expiry bookkeeping."""

    key: str
    value: Any
    created_at: float
    ttl: float

    @property
    def expires_at(self) -> float:
        return self.created_at + self.ttl

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


@dataclass(frozen=True)
class CacheStats:
    """Snapshot of cache occupancy."""

    total_entries: int
    expired_entries: int
    approximate_size: int
    average_item_size: int

    def to_dict(self) -> dict[str, int]:
        return {
            "totalEntries": self.total_entries,
            "expiredEntries": self.expired_entries,
            "approximateSize": self.approximate_size,
            "averageItemSize": self.average_item_size,
        }


class TTLCache:
    """
    Key/value store with per-entry time-to-live.

    Absence is a normal result: ``get`` returns None for missing and
    expired keys alike. All operations hold an ``RLock`` so the cache can
    be shared with worker threads.
    """

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize the cache.

        Args:
            default_ttl: TTL in seconds used when ``set`` is called without one
            clock: Source of the current time in seconds
        """
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.has(key)

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """
        Store a value, replacing any existing entry for the key.

        Args:
            key: Cache key
            value: Value to cache
            ttl: Time to live in seconds (default: ``default_ttl``)
        """
        ttl = self.default_ttl if ttl is None else ttl
        with self._lock:
            self._entries[key] = CacheEntry(
                key=key, value=value, created_at=self._clock(), ttl=ttl
            )
        log_cache_event("set", key, ttl)

    def get(self, key: str) -> Any | None:
        """
        Get a value if present and unexpired.

        Args:
            key: Cache key

        Returns:
            Cached value, or None if missing or expired
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                log_cache_event("miss", key)
                return None
            if entry.is_expired(self._clock()):
                del self._entries[key]
                log_cache_event("expire", key)
                return None
        log_cache_event("hit", key)
        return entry.value

    def has(self, key: str) -> bool:
        """Return True if the key holds an unexpired value."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return False
            if entry.is_expired(self._clock()):
                del self._entries[key]
                return False
            return True

    def delete(self, key: str) -> bool:
        """
        Remove a key unconditionally.

        Returns:
            True if an entry was removed
        """
        with self._lock:
            removed = self._entries.pop(key, None) is not None
        if removed:
            log_cache_event("delete", key)
        return removed

    def clear(self) -> None:
        """Remove every entry."""
        with self._lock:
            self._entries.clear()
        logger.debug("Cleared all entries")

    def cleanup(self) -> int:
        """
        Sweep all expired entries.

        Returns:
            Number of entries removed
        """
        with self._lock:
            now = self._clock()
            expired = [
                key for key, entry in self._entries.items() if entry.is_expired(now)
            ]
            for key in expired:
                del self._entries[key]
        logger.debug(f"Cleaned up {len(expired)} expired entries")
        return len(expired)

    def stats(self) -> CacheStats:
        """
        Report entry counts and approximate payload size.

        Size is the length of each value's JSON encoding. Records with a
        ``to_dict`` method are measured through it; other values that are
        not JSON-serializable only contribute the length of their ``str``,
        a rough estimate.
        """
        with self._lock:
            now = self._clock()
            entries = list(self._entries.values())

        total_size = 0
        expired_count = 0
        for entry in entries:
            total_size += _approximate_size(entry.value)
            if entry.is_expired(now):
                expired_count += 1

        count = len(entries)
        return CacheStats(
            total_entries=count,
            expired_entries=expired_count,
            approximate_size=total_size,
            average_item_size=round(total_size / count) if count else 0,
        )


class CacheSweeper:
    """Runs ``TTLCache.cleanup`` on a fixed interval as an asyncio task."""

    def __init__(self, cache: TTLCache, interval: float = 300.0) -> None:
        """
        Initialize the sweeper.

        Args:
            cache: Cache to sweep
            interval: Seconds between sweeps
        """
        self.cache = cache
        self.interval = interval
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start sweeping on the running event loop. Idempotent."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.debug(f"Cache sweeper started (interval={self.interval:g}s)")

    async def stop(self) -> None:
        """Cancel the sweep task and wait for it to finish."""
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.debug("Cache sweeper stopped")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            removed = self.cache.cleanup()
            if removed:
                logger.info(f"Cache sweep removed {removed} expired entries")
