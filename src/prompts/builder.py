# src/prompts/builder.py — v1
"""Turn a request descriptor into a concrete provider call.

Templates live next to this module as ``<category>.txt`` and are filled
from the descriptor params; missing or null params render as ``N/A``.

Chat routing: ``chat_advanced`` is sent as a multi-turn session while its
history is short. Once the history exceeds ``chat_history_limit`` turns it
is downgraded to the single-shot ``chat`` prompt with only the last few
turns inlined, and that answer is not cached.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel

from agrosight.config.settings import Settings
from agrosight.core.models import RequestDescriptor
from agrosight.llm.models import Message

logger = logging.getLogger(__name__)

_PROMPT_DIR = Path(__file__).parent

SYSTEM_PROMPT = (
    "You are an expert agricultural assistant. Give practical, "
    "farmer-friendly advice grounded in the farm data provided."
)


class ProviderCall(BaseModel):
    """Everything needed to invoke the provider once."""

    messages: list[Message]
    system: str | None = SYSTEM_PROMPT
    max_tokens: int
    temperature: float
    variant: Literal["single_shot", "session"] = "single_shot"
    cacheable: bool = True


class _NA(dict):
    """format_map mapping that renders unknown or None values as N/A."""

    def __missing__(self, key: str) -> str:
        return "N/A"


class PromptBuilder:
    """Builds ProviderCall plans from descriptors.

    Args:
        settings: Token limits and chat routing bounds. Defaults apply if None.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or Settings()
        self._templates: dict[str, str] = {}

    def plan(self, descriptor: RequestDescriptor) -> ProviderCall:
        """Build the provider call for *descriptor*."""
        category = descriptor.category
        if category == "chat_advanced":
            return self._plan_chat_advanced(descriptor)
        if category == "chat":
            return self._single_shot(self._chat_prompt(descriptor))
        if category == "farming_insights" and descriptor.param("user_query"):
            return self._single_shot(str(descriptor.params["user_query"]))
        return self._single_shot(self._render(category, descriptor))

    # --- chat ---

    def _plan_chat_advanced(self, descriptor: RequestDescriptor) -> ProviderCall:
        s = self._settings
        history = _history(descriptor)
        if len(history) > s.chat_history_limit:
            logger.debug(
                "History of %d turns exceeds %d; using single-shot chat",
                len(history), s.chat_history_limit,
            )
            call = self._single_shot(self._chat_prompt(descriptor))
            return call.model_copy(update={"cacheable": False})

        window = history[-s.chat_session_history_window:]
        messages = [Message(role=t["role"], content=t["content"]) for t in window]
        messages.append(
            Message(role="user", content=self._render("chat_advanced", descriptor))
        )
        return ProviderCall(
            messages=messages,
            max_tokens=s.chat_session_max_tokens,
            temperature=s.chat_session_temperature,
            variant="session",
            cacheable=False,
        )

    def _chat_prompt(self, descriptor: RequestDescriptor) -> str:
        window = self._settings.chat_prompt_history_window
        history = _history(descriptor)[-window:] if window else []
        lines = "\n".join(f"{t['role']}: {t['content']}" for t in history)
        return self._render("chat", descriptor, history=lines or "(none)")

    # --- helpers ---

    def _single_shot(self, prompt: str) -> ProviderCall:
        return ProviderCall(
            messages=[Message(role="user", content=prompt)],
            max_tokens=self._settings.default_max_tokens,
            temperature=self._settings.default_temperature,
        )

    def _render(self, name: str, descriptor: RequestDescriptor, **extra: Any) -> str:
        values = _NA(
            {k: v for k, v in descriptor.params.items() if v is not None}
        )
        values["weather"] = format_weather(
            descriptor.params.get("weather") or [],
            detailed=name == "weather_recs",
        )
        values["indices"] = format_indices(descriptor.params.get("indices") or {})
        values.update(extra)
        return self._load(name).format_map(values).strip()

    def _load(self, name: str) -> str:
        """Load and cache prompt template."""
        if name not in self._templates:
            path = _PROMPT_DIR / f"{name}.txt"
            self._templates[name] = path.read_text(encoding="utf-8")
        return self._templates[name]


def _history(descriptor: RequestDescriptor) -> list[dict[str, str]]:
    return list(descriptor.params.get("history") or [])


def format_weather(days: list[dict[str, Any]], detailed: bool = False) -> str:
    """Render a list of day summaries, one entry per day."""
    if not days:
        return "Weather data unavailable"
    lines = []
    for i, day in enumerate(days, start=1):
        if detailed:
            entry = (
                f"Day {i}:\n"
                f"- Weather: {day.get('description', 'N/A')}\n"
                f"- Temperature: {day.get('temp_min_c', 'N/A')}°C to "
                f"{day.get('temp_max_c', 'N/A')}°C\n"
                f"- Rain Probability: {day.get('rain_pct', 'N/A')}%\n"
                f"- Wind Speed: {day.get('wind_speed', 'N/A')} m/s\n"
                f"- Humidity: {day.get('humidity', 'N/A')}%\n"
                f"- UV Index: {day.get('uvi', 'N/A')}"
            )
            if day.get("rain_mm"):
                entry += f"\n- Expected Rainfall: {day['rain_mm']}mm"
        else:
            entry = f"Day {i}: {day.get('description', 'N/A')}"
            if "temp_max_c" in day:
                entry += f", Temp: {day['temp_max_c']}°C"
            if "rain_pct" in day:
                entry += f", Rain: {day['rain_pct']}%"
            if "humidity" in day:
                entry += f", Humidity: {day['humidity']}%"
        lines.append(entry)
    return "\n".join(lines)


def format_indices(indices: dict[str, Any]) -> str:
    """Render health indices as a bullet list."""
    if not indices:
        return "- N/A"
    return "\n".join(
        f"- {name.upper()}: {'N/A' if value is None else value}"
        for name, value in sorted(indices.items())
    )
