# src/dashboard/render.py — v1
"""Dashboard render: five panels, each pairing agronomy data with AI text.

One render issues the five panel requests concurrently through the
aggregator, computes the deterministic panel data alongside, and returns
a single report. Repeated renders with unchanged inputs are served from
cache without touching the provider.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Callable, Sequence, TypeVar, Union

from pydantic import BaseModel

from agrosight.agronomy import heuristics
from agrosight.agronomy.models import (
    FertilizerPlan,
    IrrigationDay,
    PestDiseasePlan,
    WeedPlan,
    YieldPrediction,
)
from agrosight.core.models import (
    DASHBOARD_CATEGORIES,
    CropHealthSnapshot,
    FarmContext,
    InsightResult,
    WeatherDay,
)
from agrosight.insights.descriptors import dashboard_requests
from agrosight.logging.context import set_render_context
from agrosight.orchestrator.aggregator import InsightAggregator
from agrosight.orchestrator.orchestrator import InsightOrchestrator
from agrosight.tracking.models import UsageStats

logger = logging.getLogger(__name__)

PanelData = Union[
    FertilizerPlan, list[IrrigationDay], YieldPrediction, PestDiseasePlan, WeedPlan
]

T = TypeVar("T")


class DashboardPanel(BaseModel):
    category: str
    insight: InsightResult
    data: PanelData
    standard_data: bool = False


class DashboardReport(BaseModel):
    """Everything one dashboard render shows."""

    render_id: str
    generated_on: date
    panels: dict[str, DashboardPanel]
    usage: UsageStats

    def panel(self, category: str) -> DashboardPanel:
        return self.panels[category]

    @property
    def fallback_categories(self) -> list[str]:
        return [c for c, p in self.panels.items() if p.insight.is_fallback]


def _build(category: str, build: Callable[[], T], standard: Callable[[], T]) -> tuple[T, bool]:
    """Run a panel heuristic, degrading to its standard data on failure."""
    try:
        return build(), False
    except Exception:
        logger.exception("Panel data for %s failed; using standard data", category)
        return standard(), True


def panel_data(
    farm: FarmContext | None,
    health: CropHealthSnapshot | None,
    weather: Sequence[WeatherDay] | None,
    today: date,
) -> dict[str, tuple[PanelData, bool]]:
    """Deterministic data for every dashboard panel.

    Panels that need satellite data (fertilizer, yield) or a forecast
    (irrigation) use standard data when that input is absent.
    """
    data: dict[str, tuple[PanelData, bool]] = {}

    if health is None:
        data["fertilizer"] = (heuristics.standard_fertilizer_plan(), True)
        data["yield"] = (heuristics.standard_yield_prediction(today), True)
    else:
        data["fertilizer"] = _build(
            "fertilizer",
            lambda: heuristics.fertilizer_plan(farm, health),
            heuristics.standard_fertilizer_plan,
        )
        data["yield"] = _build(
            "yield",
            lambda: heuristics.yield_prediction(farm, health, today),
            lambda: heuristics.standard_yield_prediction(today),
        )

    if not weather:
        data["irrigation"] = (heuristics.standard_irrigation_schedule(today), True)
    else:
        data["irrigation"] = _build(
            "irrigation",
            lambda: heuristics.irrigation_schedule(farm, health, weather, today),
            lambda: heuristics.standard_irrigation_schedule(today),
        )

    data["pest_disease"] = _build(
        "pest_disease",
        lambda: heuristics.pest_disease_plan(farm, weather),
        heuristics.standard_pest_disease_plan,
    )
    data["weed"] = _build(
        "weed", lambda: heuristics.weed_plan(farm), heuristics.standard_weed_plan
    )
    return data


async def render_dashboard(
    orchestrator: InsightOrchestrator,
    farm: FarmContext | None,
    health: CropHealthSnapshot | None = None,
    weather: Sequence[WeatherDay] | None = None,
    today: date | None = None,
    aggregator: InsightAggregator | None = None,
) -> DashboardReport:
    """Render all dashboard panels for one field.

    Args:
        orchestrator: Shared orchestrator; owns cache, quota and pacing.
        farm: Field identity and crop.
        health: Satellite health indices, if available.
        weather: Daily forecast, if available.
        today: Reference date for schedules and ages. Defaults to today.
        aggregator: Reuse an aggregator across renders to keep abandoned
            requests tracked. A fresh one is created if None.
    """
    today = today or date.today()
    render_id = uuid.uuid4().hex[:12]
    set_render_context(render_id)
    aggregator = aggregator or InsightAggregator(orchestrator)

    descriptors = dashboard_requests(farm, health, weather, today=today)
    logger.info("Rendering dashboard with %d panels", len(descriptors))
    insights = await aggregator.run_all(descriptors)
    data = panel_data(farm, health, weather, today)

    panels = {}
    for category in DASHBOARD_CATEGORIES:
        values, standard = data[category]
        panels[category] = DashboardPanel(
            category=category,
            insight=insights[category],
            data=values,
            standard_data=standard,
        )

    report = DashboardReport(
        render_id=render_id,
        generated_on=today,
        panels=panels,
        usage=orchestrator.usage(),
    )
    if report.fallback_categories:
        logger.warning(
            "Dashboard served fallback text for: %s",
            ", ".join(report.fallback_categories),
        )
    return report
