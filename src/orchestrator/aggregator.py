# src/orchestrator/aggregator.py — v1
"""Concurrent fan-out of insight requests with per-request isolation.

Every descriptor runs in its own task. A task that fails unexpectedly
yields that category's fallback result and never cancels its siblings.
Tasks are shielded from the caller: if a render is abandoned, in-flight
requests still complete and populate the cache for the next render.
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Iterable

from agrosight.core.models import InsightResult, RequestDescriptor
from agrosight.orchestrator.orchestrator import InsightOrchestrator

logger = logging.getLogger(__name__)


class InsightAggregator:
    """Runs many descriptors through one shared orchestrator."""

    def __init__(self, orchestrator: InsightOrchestrator) -> None:
        self._orchestrator = orchestrator
        # Strong refs so abandoned tasks are not garbage collected mid-flight.
        self._in_flight: set[asyncio.Task] = set()

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    async def run_all(
        self, descriptors: Iterable[RequestDescriptor]
    ) -> dict[str, InsightResult]:
        """Run all descriptors concurrently; map category to result.

        When two descriptors share a category, the later one wins the slot
        in the mapping. Both are still run.
        """
        tasks = [self._spawn(d) for d in descriptors]
        if not tasks:
            return {}
        results = await asyncio.shield(asyncio.gather(*tasks))
        return {r.category: r for r in results}

    async def iter_results(
        self, descriptors: Iterable[RequestDescriptor]
    ) -> AsyncIterator[InsightResult]:
        """Yield results as they complete."""
        tasks = [self._spawn(d) for d in descriptors]
        for next_done in asyncio.as_completed(tasks):
            yield await next_done

    async def drain(self) -> None:
        """Wait for every in-flight task, including abandoned ones."""
        if self._in_flight:
            await asyncio.gather(*list(self._in_flight))

    def _spawn(self, descriptor: RequestDescriptor) -> asyncio.Task:
        task = asyncio.create_task(
            self._run_isolated(descriptor),
            name=f"insight:{descriptor.category}",
        )
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return task

    async def _run_isolated(self, descriptor: RequestDescriptor) -> InsightResult:
        try:
            return await self._orchestrator.run(descriptor)
        except Exception as e:
            logger.exception("Insight task for %s failed", descriptor.category)
            return self._orchestrator.degraded(descriptor, error=f"unknown: {e}")
