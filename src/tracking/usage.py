# src/tracking/usage.py — v1
"""Quota status classification for the usage panel.

Thresholds mirror the dashboard warning banner: fewer than 15 remaining
calls is worth monitoring, fewer than 5 is low, none is exhausted.
"""

from __future__ import annotations

from agrosight.tracking.models import QuotaLevel, UsageStats

MODERATE_THRESHOLD = 15
LOW_THRESHOLD = 5

_MESSAGES: dict[str, str] = {
    "exhausted": "Daily limit reached - Using cached responses only",
    "low": "Low API quota - Consider reducing usage",
    "moderate": "Moderate API usage - Monitor consumption",
    "ok": "API quota available",
}


def quota_level(remaining: int, can_make_call: bool) -> QuotaLevel:
    """Classify remaining quota."""
    if not can_make_call:
        return "exhausted"
    if remaining < LOW_THRESHOLD:
        return "low"
    if remaining < MODERATE_THRESHOLD:
        return "moderate"
    return "ok"


def build_usage_stats(
    cache_size: int,
    daily_calls: int,
    max_calls: int,
    remaining_calls: int,
    can_make_call: bool,
) -> UsageStats:
    """Assemble a UsageStats snapshot from live counters."""
    level = quota_level(remaining_calls, can_make_call)
    return UsageStats(
        cache_size=cache_size,
        daily_calls=daily_calls,
        max_calls=max_calls,
        remaining_calls=remaining_calls,
        can_make_call=can_make_call,
        level=level,
        message=_MESSAGES[level],
    )
