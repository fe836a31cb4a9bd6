# src/api/facade.py — v2
"""Public API facade — single entry point for insight requests.

Usage:
    from agrosight.api.facade import generate_insight
    result = await generate_insight("crop_health", {"crop": "wheat", ...})

All calls share one process-wide orchestrator so the cache, daily quota
and rate limiter apply across every caller.
"""

from __future__ import annotations

import logging
import threading
from datetime import date
from typing import Any, Sequence

from agrosight.config.settings import Settings
from agrosight.core.models import (
    CropHealthSnapshot,
    FarmContext,
    InsightResult,
    RequestDescriptor,
    WeatherDay,
)
from agrosight.dashboard.render import DashboardReport, render_dashboard
from agrosight.llm.base_client import BaseLLMClient
from agrosight.llm.client_factory import create_llm_client
from agrosight.orchestrator.aggregator import InsightAggregator
from agrosight.orchestrator.orchestrator import InsightOrchestrator
from agrosight.tracking.call_logger import CallLogger
from agrosight.tracking.models import UsageStats

logger = logging.getLogger(__name__)

_default: InsightOrchestrator | None = None
_default_aggregator: InsightAggregator | None = None
_default_lock = threading.Lock()


def build_orchestrator(
    settings: Settings | None = None,
    client: BaseLLMClient | None = None,
    call_logger: CallLogger | None = None,
) -> InsightOrchestrator:
    """Wire an orchestrator from settings.

    Args:
        settings: Global settings. Loaded from .env if None.
        client: Provider client. Created from settings if None.
        call_logger: Optional per-run record sink.
    """
    settings = settings or Settings()
    if client is None:
        client = create_llm_client(
            settings.llm_provider, settings.gemini_model, settings
        )
    logger.info(
        "Orchestrator ready: provider=%s, model=%s, max_daily_calls=%d, ttl=%.0fs",
        settings.llm_provider, settings.gemini_model,
        settings.max_daily_calls, settings.cache_ttl_seconds,
    )
    return InsightOrchestrator(client, settings=settings, call_logger=call_logger)


def get_orchestrator() -> InsightOrchestrator:
    """Return the process-wide orchestrator, creating it on first use."""
    global _default, _default_aggregator
    with _default_lock:
        if _default is None:
            _default = build_orchestrator()
            _default_aggregator = InsightAggregator(_default)
        return _default


def set_orchestrator(orchestrator: InsightOrchestrator | None) -> None:
    """Replace the process-wide orchestrator (None resets to lazy creation)."""
    global _default, _default_aggregator
    with _default_lock:
        _default = orchestrator
        _default_aggregator = InsightAggregator(orchestrator) if orchestrator else None


def _aggregator() -> InsightAggregator:
    get_orchestrator()
    with _default_lock:
        assert _default_aggregator is not None
        return _default_aggregator


async def generate_insight(
    category: str, params: dict[str, Any] | None = None
) -> InsightResult:
    """Run one insight request through the shared orchestrator."""
    descriptor = RequestDescriptor(category=category, params=params or {})
    return await get_orchestrator().run(descriptor)


async def generate_dashboard(
    farm: FarmContext | None,
    health: CropHealthSnapshot | None = None,
    weather: Sequence[WeatherDay] | None = None,
    today: date | None = None,
) -> DashboardReport:
    """Render every dashboard panel through the shared orchestrator."""
    orchestrator = get_orchestrator()
    return await render_dashboard(
        orchestrator, farm, health, weather, today=today, aggregator=_aggregator(),
    )


def usage() -> UsageStats:
    return get_orchestrator().usage()


def clear_cache() -> str:
    return get_orchestrator().clear_cache()
