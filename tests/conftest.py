# tests/conftest.py — v2
"""Shared test fixtures for all unit and integration tests.

Provides a scripted fake LLM client, sample farm inputs and a fully wired
orchestrator with no pacing delay. No external dependencies — provider
I/O is faked.
"""

from __future__ import annotations

import asyncio
import time
from datetime import date
from typing import Any
from unittest.mock import AsyncMock

import pytest

from agrosight.config.settings import Settings
from agrosight.core.models import CropHealthSnapshot, FarmContext, WeatherDay
from agrosight.fallback.provider import FallbackProvider
from agrosight.llm.base_client import BaseLLMClient
from agrosight.llm.models import LLMResponse, Message
from agrosight.orchestrator.orchestrator import InsightOrchestrator
from agrosight.tracking.call_logger import CallLogger

TODAY = date(2026, 10, 19)


class FakeLLMClient(BaseLLMClient):
    """Scripted provider: fixed text, optional delay, optional failure.

    ``errors`` maps a category keyword found in the prompt to an exception,
    so one client can fail for some requests and succeed for others.
    """

    def __init__(
        self,
        text: str = "AI insight text",
        delay: float = 0.0,
        error: BaseException | None = None,
        errors: dict[str, BaseException] | None = None,
    ) -> None:
        self.text = text
        self.delay = delay
        self.error = error
        self.errors = errors or {}
        self.calls: list[dict[str, Any]] = []
        self.started_at: list[float] = []

    async def complete(
        self,
        messages: list[Message],
        system: str | None = None,
        max_tokens: int = 1024,
        temperature: float = 0.4,
    ) -> LLMResponse:
        self.started_at.append(time.monotonic())
        self.calls.append({
            "messages": messages,
            "system": system,
            "max_tokens": max_tokens,
            "temperature": temperature,
        })
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        prompt = messages[-1].content
        for keyword, error in self.errors.items():
            if keyword in prompt:
                raise error
        return LLMResponse(
            content=self.text,
            input_tokens=12,
            output_tokens=34,
            model="fake-model",
            provider="fake",
            latency_ms=5,
        )

    @property
    def provider_name(self) -> str:
        return "fake"


# === FIXTURES: Settings & collaborators ===


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from any local .env, with no pacing delay."""
    return Settings(
        _env_file=None,
        gemini_api_key="test-key",
        rate_limit_interval_s=0.0,
        provider_timeout_s=1.0,
    )


@pytest.fixture
def make_client() -> type[FakeLLMClient]:
    """The FakeLLMClient class, for tests that script their own provider."""
    return FakeLLMClient


@pytest.fixture
def fake_client() -> FakeLLMClient:
    return FakeLLMClient()


@pytest.fixture
def mock_llm_response() -> LLMResponse:
    return LLMResponse(
        content="Mocked insight",
        input_tokens=100,
        output_tokens=50,
        model="gemini-1.5-flash",
        provider="google",
        latency_ms=200,
    )


@pytest.fixture
def mock_llm_client(mock_llm_response: LLMResponse) -> AsyncMock:
    """AsyncMock LLM client returning mock_llm_response."""
    client = AsyncMock()
    client.complete = AsyncMock(return_value=mock_llm_response)
    client.provider_name = "google"
    return client


@pytest.fixture
def fallback() -> FallbackProvider:
    return FallbackProvider(today=lambda: TODAY)


@pytest.fixture
def call_logger() -> CallLogger:
    return CallLogger()


@pytest.fixture
def orchestrator(
    fake_client: FakeLLMClient,
    settings: Settings,
    fallback: FallbackProvider,
    call_logger: CallLogger,
) -> InsightOrchestrator:
    return InsightOrchestrator(
        fake_client, settings=settings, fallback=fallback, call_logger=call_logger,
    )


# === FIXTURES: Farm inputs ===


@pytest.fixture
def farm() -> FarmContext:
    return FarmContext(
        field_id="F-001", crop="Wheat", location="Ludhiana", field_area=4200.0,
    )


@pytest.fixture
def health() -> CropHealthSnapshot:
    return CropHealthSnapshot(
        health={
            "ndvi": {"2026-10-15": 0.62, "2026-10-01": 0.55},
            "evi": {"2026-10-15": 0.41},
            "lai": {"2026-10-15": 2.4},
            "ndmi": {"2026-10-15": 0.35},
            "soc": {"2026-10-15": "2.8"},
        },
        field_area=4200.0,
        crop_code="WHT",
        sowing_date=date(2026, 8, 20),
    )


@pytest.fixture
def weather() -> list[WeatherDay]:
    return [
        WeatherDay(
            description="clear sky", temp_min_k=290.15, temp_max_k=303.65,
            pop=0.1, humidity=55, wind_speed=3.2, uvi=7.1,
        ),
        WeatherDay(
            description="light rain", temp_min_k=289.15, temp_max_k=297.15,
            pop=0.8, humidity=85, wind_speed=4.0, uvi=3.0, rain_mm=6.5,
        ),
        WeatherDay(
            description="scattered clouds", temp_min_k=288.15, temp_max_k=299.15,
            pop=0.45, humidity=70, wind_speed=2.1, uvi=5.5,
        ),
    ]
