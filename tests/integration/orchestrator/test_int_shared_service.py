# tests/integration/orchestrator/test_int_shared_service.py — v1
"""Integration: one orchestrator shared by several event loops and threads."""

from __future__ import annotations

import asyncio
import threading
import time

import pytest

from agrosight.api import facade
from agrosight.config.settings import Settings
from agrosight.core.models import RequestDescriptor
from agrosight.orchestrator.orchestrator import InsightOrchestrator

pytestmark = pytest.mark.integration

INTERVAL = 0.05
JITTER = 0.01


def _settings(**overrides):
    base = {"_env_file": None, "rate_limit_interval_s": INTERVAL, "provider_timeout_s": 1.0}
    base.update(overrides)
    return Settings(**base)


def _run_in_threads(target, n):
    threads = [threading.Thread(target=target, args=(i,)) for i in range(n)]
    for t in threads:
        t.start()
    deadline = time.monotonic() + 10
    for t in threads:
        t.join(timeout=max(deadline - time.monotonic(), 0))
    assert not any(t.is_alive() for t in threads)


@pytest.fixture
def shared(make_client):
    client = make_client()
    orch = InsightOrchestrator(client, settings=_settings())
    facade.set_orchestrator(orch)
    yield orch, client
    facade.set_orchestrator(None)


class TestSequentialEventLoops:
    def test_second_dashboard_render_goes_live(self, shared, farm, health, weather):
        orch, client = shared
        asyncio.run(facade.generate_dashboard(farm, health, weather))
        rice = farm.model_copy(update={"crop": "Rice"})
        report = asyncio.run(facade.generate_dashboard(rice, health, weather))

        assert {p.insight.source for p in report.panels.values()} == {"live"}
        assert all(p.insight.error is None for p in report.panels.values())
        assert orch.daily_calls() == 10
        assert len(client.calls) == 10

    @pytest.mark.parametrize("mode", ["throttle", "serialize"])
    def test_direct_runs_from_fresh_loops(self, make_client, mode):
        orch = InsightOrchestrator(make_client(), settings=_settings(rate_limit_mode=mode))
        for i in range(3):
            d = RequestDescriptor(category="chat", params={"message": f"q{i}"})
            assert asyncio.run(orch.run(d)).source == "live"


class TestThreads:
    @pytest.mark.parametrize("mode", ["throttle", "serialize"])
    def test_threads_share_pacing_and_budget(self, make_client, mode):
        client = make_client(delay=0.01)
        orch = InsightOrchestrator(client, settings=_settings(rate_limit_mode=mode))
        sources: list[str] = []

        def worker(i):
            d = RequestDescriptor(category="chat", params={"message": f"thread {i}"})
            sources.append(asyncio.run(orch.run(d)).source)

        _run_in_threads(worker, 4)

        assert sources == ["live"] * 4
        assert orch.daily_calls() == 4
        starts = sorted(client.started_at)
        assert all(b - a >= INTERVAL - JITTER for a, b in zip(starts, starts[1:]))

    def test_serialize_mode_exact_budget_across_threads(self, make_client):
        client = make_client(delay=0.01)
        orch = InsightOrchestrator(
            client, settings=_settings(rate_limit_mode="serialize", max_daily_calls=2),
        )
        sources: list[str] = []

        def worker(i):
            d = RequestDescriptor(category="chat", params={"message": f"thread {i}"})
            sources.append(asyncio.run(orch.run(d)).source)

        _run_in_threads(worker, 4)

        assert sorted(sources) == ["fallback", "fallback", "live", "live"]
        assert orch.daily_calls() == 2
