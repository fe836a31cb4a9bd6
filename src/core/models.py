# src/core/models.py — v2
"""Shared Pydantic domain models used across modules.

No module redefines these types — all imports come from core.models.
"""

from __future__ import annotations

import copy
import math
from collections.abc import Mapping
from datetime import date
from types import MappingProxyType
from typing import Any, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


# === CATEGORIES ===

InsightCategory = Literal[
    "farming_insights",
    "chat",
    "chat_advanced",
    "crop_health",
    "weather_recs",
    "fertilizer",
    "irrigation",
    "yield",
    "pest_disease",
    "weed",
]

ALL_CATEGORIES: tuple[str, ...] = get_args(InsightCategory)

# Panels requested together on every dashboard render.
DASHBOARD_CATEGORIES: tuple[str, ...] = (
    "fertilizer",
    "irrigation",
    "yield",
    "pest_disease",
    "weed",
)

CHAT_CATEGORIES: frozenset[str] = frozenset({"chat", "chat_advanced"})

ResultSource = Literal["cache", "live", "fallback"]


def round_half_up(value: float) -> int:
    """Round to the nearest integer; halves go up (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def freeze(value: Any) -> Any:
    """Read-only deep view: mappings to MappingProxyType, lists to tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    return value


def thaw(value: Any) -> Any:
    """Plain deep copy of *value*: mappings to dicts, sequences to lists."""
    if isinstance(value, Mapping):
        return {k: thaw(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [thaw(v) for v in value]
    return copy.deepcopy(value)


# === REQUEST / RESULT ===


class RequestDescriptor(BaseModel):
    """One insight request: a category plus its parameter mapping.

    Params are deep-copied and frozen on construction: mappings become
    read-only ``MappingProxyType`` views and lists become tuples, so neither
    the caller nor a consumer can change the request (or its fingerprint)
    afterwards. ``model_dump`` returns plain dicts and lists again.
    """

    model_config = ConfigDict(frozen=True)

    category: InsightCategory
    params: Mapping[str, Any] = Field(default_factory=dict, validate_default=True)

    @field_validator("params", mode="before")
    @classmethod
    def copy_params(cls, v: Any) -> Any:  # noqa: N805
        if v is None:
            return {}
        return thaw(v)

    @field_validator("params", mode="after")
    @classmethod
    def freeze_params(cls, v: Mapping[str, Any]) -> Mapping[str, Any]:  # noqa: N805
        return freeze(v)

    @field_serializer("params")
    def dump_params(self, v: Mapping[str, Any]) -> dict[str, Any]:
        return thaw(v)

    def param(self, name: str, default: Any = None) -> Any:
        """Return a single param, falling back to *default* when missing or None."""
        value = self.params.get(name)
        return default if value is None else value


class InsightResult(BaseModel):
    """Text returned by the orchestrator, labelled with where it came from."""

    model_config = ConfigDict(frozen=True)

    category: InsightCategory
    text: str
    source: ResultSource
    fingerprint: str
    error: str | None = None

    @property
    def is_fallback(self) -> bool:
        return self.source == "fallback"


class ChatTurn(BaseModel):
    """A prior message in a chat conversation."""

    role: Literal["user", "assistant"]
    content: str


# === FARM INPUTS (supplied by dashboard collaborators) ===


class FarmContext(BaseModel):
    """Identity and location of the field an insight is about."""

    field_id: str | None = None
    crop: str | None = None
    location: str | None = None
    field_area: float | None = None


class CropHealthSnapshot(BaseModel):
    """Satellite health indices for a field.

    ``health`` maps an index name (ndvi, evi, lai, ndmi, soc, ...) to a
    mapping of observation date to value, latest observation first.
    """

    health: dict[str, dict[str, float | str]] = {}
    field_area: float | None = None
    crop_code: str | None = None
    sowing_date: date | None = None

    def latest(self, index: str) -> float | None:
        """Latest value for *index* as float, or None if unavailable."""
        series = self.health.get(index)
        if not series:
            return None
        raw = next(iter(series.values()))
        try:
            return float(raw)
        except (TypeError, ValueError):
            return None

    def latest_indices(self) -> dict[str, float | None]:
        """Latest value for every index present."""
        return {name: self.latest(name) for name in self.health}


_KELVIN = 273.15


class WeatherDay(BaseModel):
    """One day of forecast. Temperatures are in Kelvin as delivered upstream."""

    description: str = "unknown"
    temp_min_k: float = _KELVIN
    temp_max_k: float = _KELVIN
    pop: float = 0.0
    humidity: float = 0.0
    wind_speed: float = 0.0
    uvi: float = 0.0
    rain_mm: float | None = None

    @property
    def temp_max_c(self) -> int:
        return round_half_up(self.temp_max_k - _KELVIN)

    @property
    def temp_min_c(self) -> int:
        return round_half_up(self.temp_min_k - _KELVIN)

    @property
    def rain_pct(self) -> int:
        return round_half_up(self.pop * 100)
