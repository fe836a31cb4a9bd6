# src/cache/memory_store.py — v1
"""In-process TTL cache store.

Entries live for ``ttl_seconds`` after their last write. Expired entries
are evicted lazily by ``get`` (or eagerly via ``purge_expired``). All
access goes through one lock so the store can be shared by every
orchestrator task and thread in the process.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable

from agrosight.cache.base_cache_store import BaseCacheStore
from agrosight.cache.models import CacheEntry, CacheStats

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 30 * 60


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MemoryCacheStore(BaseCacheStore):
    """Dict-backed cache with a fixed time-to-live.

    Args:
        ttl_seconds: Entry lifetime.
        clock: Returns the current time; injectable for tests.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock or _utcnow
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def get(self, fingerprint: str) -> str | None:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(fingerprint)
            if entry is None:
                self._misses += 1
                return None
            if now - entry.created_at >= self._ttl:
                del self._entries[fingerprint]
                self._evictions += 1
                self._misses += 1
                return None
            self._hits += 1
        logger.debug("Cache hit for %s", fingerprint)
        return entry.payload

    def put(self, fingerprint: str, payload: str) -> None:
        entry = CacheEntry(
            fingerprint=fingerprint, payload=payload, created_at=self._clock()
        )
        with self._lock:
            self._entries[fingerprint] = entry

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def stats(self) -> CacheStats:
        with self._lock:
            return self._stats_unlocked()

    def clear(self) -> CacheStats:
        with self._lock:
            previous = self._stats_unlocked()
            self._entries.clear()
            self._hits = 0
            self._misses = 0
            self._evictions = 0
        logger.info("Cache cleared (%d entries dropped)", previous.size)
        return previous

    def purge_expired(self) -> int:
        """Evict every expired entry now. Returns the number removed."""
        now = self._clock()
        with self._lock:
            expired = [
                key for key, entry in self._entries.items()
                if now - entry.created_at >= self._ttl
            ]
            for key in expired:
                del self._entries[key]
            self._evictions += len(expired)
        return len(expired)

    def _stats_unlocked(self) -> CacheStats:
        return CacheStats(
            size=len(self._entries),
            hits=self._hits,
            misses=self._misses,
            evictions=self._evictions,
        )
