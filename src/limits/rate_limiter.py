# src/limits/rate_limiter.py — v2
"""Minimum spacing between consecutive outbound provider calls.

Each caller reserves its admission slot under a ``threading.Lock``:
``slot = max(now, last + interval)`` and ``last = slot`` happen atomically,
then the caller sleeps until its slot outside the lock. Nothing here is
bound to an event loop, so one limiter can pace callers from several
loops and threads.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

DEFAULT_MIN_INTERVAL_S = 2.0


class RateLimiter:
    """Paces admission of provider calls.

    Args:
        min_interval: Seconds required between two admissions.
        clock: Monotonic clock in seconds; injectable for tests.
        sleep: Async sleep used to wait; injectable for tests.
    """

    def __init__(
        self,
        min_interval: float = DEFAULT_MIN_INTERVAL_S,
        clock: Callable[[], float] | None = None,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        if min_interval < 0:
            raise ValueError("min_interval must be >= 0")
        self._interval = min_interval
        self._clock = clock or time.monotonic
        self._sleep = sleep or asyncio.sleep
        self._lock = threading.Lock()
        self._last_call_at: float | None = None

    @property
    def min_interval(self) -> float:
        return self._interval

    @property
    def last_call_at(self) -> float | None:
        return self._last_call_at

    def _reserve(self) -> tuple[float, float | None]:
        with self._lock:
            previous = self._last_call_at
            now = self._clock()
            slot = now if previous is None else max(now, previous + self._interval)
            self._last_call_at = slot
            return slot, previous

    def _release(self, slot: float, previous: float | None) -> None:
        # Only the newest reservation can be handed back.
        with self._lock:
            if self._last_call_at == slot:
                self._last_call_at = previous

    async def await_turn(self) -> float:
        """Wait for this caller's admission slot.

        Returns:
            The admission time (clock seconds) reserved for this caller.
        """
        slot, previous = self._reserve()
        remaining = slot - self._clock()
        if remaining > 0:
            logger.debug("Rate limiting: waiting %.0fms", remaining * 1000)
        try:
            # Timers may fire marginally early; keep sleeping until due.
            while remaining > 0:
                await self._sleep(remaining)
                remaining = slot - self._clock()
        except asyncio.CancelledError:
            self._release(slot, previous)
            raise
        return slot
