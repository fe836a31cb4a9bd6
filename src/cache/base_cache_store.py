# src/cache/base_cache_store.py — v2
"""Abstract cache store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from agrosight.cache.models import CacheStats


class BaseCacheStore(ABC):
    """Unified interface for insight cache backends."""

    @abstractmethod
    def get(self, fingerprint: str) -> str | None:
        """Return the cached payload, or None if missing or expired."""

    @abstractmethod
    def put(self, fingerprint: str, payload: str) -> None:
        """Insert or overwrite the payload for *fingerprint*."""

    @abstractmethod
    def size(self) -> int:
        """Number of entries currently held."""

    @abstractmethod
    def clear(self) -> CacheStats:
        """Drop every entry and return the stats from before the clear."""

    @abstractmethod
    def stats(self) -> CacheStats:
        """Current counters."""
