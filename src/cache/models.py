# src/cache/models.py — v1
"""Cache domain models: CacheEntry, CacheStats."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class CacheEntry(BaseModel):
    """Single cache entry linking a request fingerprint to provider text."""

    model_config = ConfigDict(frozen=True)

    fingerprint: str
    payload: str
    created_at: datetime


class CacheStats(BaseModel):
    """Point-in-time counters of a cache store, for diagnostics display."""

    size: int
    hits: int = 0
    misses: int = 0
    evictions: int = 0
