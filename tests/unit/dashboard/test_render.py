# tests/unit/dashboard/test_render.py — v1
"""Tests for dashboard/render.py — panels pair agronomy data with AI text."""

from __future__ import annotations

from datetime import date
from unittest.mock import patch

import pytest

from agrosight.agronomy.models import FertilizerPlan, IrrigationDay
from agrosight.core.models import DASHBOARD_CATEGORIES
from agrosight.dashboard.render import panel_data, render_dashboard

TODAY = date(2026, 10, 19)


class TestRenderDashboard:
    @pytest.mark.asyncio
    async def test_all_panels_live(self, orchestrator, farm, health, weather):
        report = await render_dashboard(orchestrator, farm, health, weather, today=TODAY)
        assert list(report.panels) == list(DASHBOARD_CATEGORIES)
        assert report.generated_on == TODAY
        assert report.fallback_categories == []
        assert report.panel("yield").insight.source == "live"
        assert isinstance(report.panel("fertilizer").data, FertilizerPlan)
        assert report.usage.daily_calls == 5

    @pytest.mark.asyncio
    async def test_rerender_uses_cache(self, orchestrator, fake_client, farm, health, weather):
        await render_dashboard(orchestrator, farm, health, weather, today=TODAY)
        report = await render_dashboard(orchestrator, farm, health, weather, today=TODAY)
        assert all(p.insight.source == "cache" for p in report.panels.values())
        assert len(fake_client.calls) == 5
        assert report.usage.cache_size == 5

    @pytest.mark.asyncio
    async def test_render_ids_differ(self, orchestrator, farm):
        a = await render_dashboard(orchestrator, farm, today=TODAY)
        b = await render_dashboard(orchestrator, farm, today=TODAY)
        assert a.render_id != b.render_id

    @pytest.mark.asyncio
    async def test_exhausted_quota_reports_fallbacks(self, make_client, settings, farm):
        from agrosight.orchestrator.orchestrator import InsightOrchestrator

        orch = InsightOrchestrator(
            make_client(), settings=settings.model_copy(update={"max_daily_calls": 0}),
        )
        report = await render_dashboard(orch, farm, today=TODAY)
        assert sorted(report.fallback_categories) == sorted(DASHBOARD_CATEGORIES)
        assert report.usage.level == "exhausted"


class TestPanelData:
    def test_uses_heuristics_with_inputs(self, farm, health, weather):
        data = panel_data(farm, health, weather, TODAY)
        assert set(data) == set(DASHBOARD_CATEGORIES)
        assert not any(standard for _, standard in data.values())
        irrigation, _ = data["irrigation"]
        assert all(isinstance(d, IrrigationDay) for d in irrigation)

    def test_standard_data_without_inputs(self, farm):
        data = panel_data(farm, None, None, TODAY)
        assert data["fertilizer"][1] is True
        assert data["yield"][1] is True
        assert data["irrigation"][1] is True
        assert data["weed"][1] is False

    def test_failing_heuristic_degrades(self, farm, health, weather):
        with patch(
            "agrosight.agronomy.heuristics.weed_plan", side_effect=RuntimeError("bad"),
        ):
            data = panel_data(farm, health, weather, TODAY)
        plan, standard = data["weed"]
        assert standard is True
        assert plan.potential_weeds[0].name == "Amaranthus"
