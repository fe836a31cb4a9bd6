# src/limits/quota_tracker.py — v1
"""Daily call budget for the metered AI provider.

Counts successful live provider calls for the current calendar day
against a fixed maximum. The day-rollover check runs under the same lock
as every read and increment, so a rollover racing an increment can never
lose a count, and resetting twice is harmless.
"""

from __future__ import annotations

import logging
import threading
from datetime import date
from typing import Callable

from pydantic import BaseModel

logger = logging.getLogger(__name__)

DEFAULT_MAX_DAILY_CALLS = 50


class QuotaState(BaseModel):
    """Snapshot of the quota counter."""

    day: date
    count: int
    max_calls: int

    @property
    def remaining(self) -> int:
        return max(0, self.max_calls - self.count)


class QuotaTracker:
    """Process-wide daily call counter.

    Args:
        max_calls: Live calls permitted per calendar day.
        today: Returns the current date; injectable to simulate rollover.
    """

    def __init__(
        self,
        max_calls: int = DEFAULT_MAX_DAILY_CALLS,
        today: Callable[[], date] | None = None,
    ) -> None:
        if max_calls < 0:
            raise ValueError("max_calls must be >= 0")
        self._max = max_calls
        self._today = today or date.today
        self._lock = threading.Lock()
        self._day = self._today()
        self._count = 0

    @property
    def max_calls(self) -> int:
        return self._max

    def daily_limit_reached(self) -> bool:
        """True iff today's count has reached the maximum."""
        with self._lock:
            self._roll_over()
            reached = self._count >= self._max
        if reached:
            logger.warning(
                "Daily API limit (%d) reached; serving fallback content", self._max,
            )
        return reached

    def record_call(self) -> int:
        """Count one successful live call. Returns today's new total."""
        with self._lock:
            self._roll_over()
            self._count += 1
            count = self._count
        logger.info("API calls today: %d/%d", count, self._max)
        return count

    def daily_calls(self) -> int:
        with self._lock:
            self._roll_over()
            return self._count

    def remaining(self) -> int:
        with self._lock:
            self._roll_over()
            return max(0, self._max - self._count)

    def snapshot(self) -> QuotaState:
        with self._lock:
            self._roll_over()
            return QuotaState(day=self._day, count=self._count, max_calls=self._max)

    def reset(self) -> None:
        """Zero today's counter."""
        with self._lock:
            self._day = self._today()
            self._count = 0

    def _roll_over(self) -> None:
        """Reset the counter on the first observation of a new day (lock held)."""
        today = self._today()
        if today != self._day:
            logger.info(
                "Quota day rolled over %s -> %s (%d calls yesterday)",
                self._day, today, self._count,
            )
            self._day = today
            self._count = 0
