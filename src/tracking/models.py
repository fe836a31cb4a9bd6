# src/tracking/models.py — v2
"""Tracking domain models: InsightCallRecord, UsageStats."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel

QuotaLevel = Literal["ok", "moderate", "low", "exhausted"]


class InsightCallRecord(BaseModel):
    """One orchestrator run, whatever its outcome."""

    call_id: str
    timestamp: datetime
    category: str
    fingerprint: str
    source: Literal["cache", "live", "fallback"]
    variant: Literal["single_shot", "session"] | None = None
    provider: str | None = None
    model: str | None = None
    input_tokens: int = 0
    output_tokens: int = 0
    latency_ms: int = 0
    error_type: str | None = None


class UsageStats(BaseModel):
    """Diagnostics snapshot consumed by the usage panel."""

    cache_size: int
    daily_calls: int
    max_calls: int
    remaining_calls: int
    can_make_call: bool
    level: QuotaLevel
    message: str
