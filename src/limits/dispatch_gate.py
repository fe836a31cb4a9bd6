# src/limits/dispatch_gate.py — v1
"""One-at-a-time gate for provider calls, usable from any event loop.

``asyncio.Lock`` binds to the first loop that waits on it. The gate keeps
its state under a ``threading.Lock`` instead and wakes the next waiter on
that waiter's own loop via ``call_soon_threadsafe``. Waiters are served in
arrival order.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections import deque

logger = logging.getLogger(__name__)


def _wake(future: asyncio.Future) -> None:
    if not future.done():
        future.set_result(None)


class DispatchGate:
    """FIFO mutual exclusion shared across event loops and threads."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._busy = False
        self._waiters: deque[tuple[asyncio.AbstractEventLoop, asyncio.Future]] = deque()

    @property
    def busy(self) -> bool:
        return self._busy

    async def acquire(self) -> None:
        loop = asyncio.get_running_loop()
        with self._lock:
            if not self._busy:
                self._busy = True
                return
            future = loop.create_future()
            entry = (loop, future)
            self._waiters.append(entry)
        try:
            await future
        except asyncio.CancelledError:
            with self._lock:
                if entry in self._waiters:
                    self._waiters.remove(entry)
                    raise
            # Ownership was handed over before the cancellation landed.
            self.release()
            raise

    def release(self) -> None:
        with self._lock:
            while self._waiters:
                loop, future = self._waiters.popleft()
                try:
                    loop.call_soon_threadsafe(_wake, future)
                    return
                except RuntimeError:
                    logger.debug("Dropping gate waiter on a closed event loop")
            self._busy = False

    async def __aenter__(self) -> DispatchGate:
        await self.acquire()
        return self

    async def __aexit__(self, *exc: object) -> None:
        self.release()
