# tests/unit/core/test_models.py — v2
"""Tests for core/models.py — descriptors, results, farm inputs."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from agrosight.cache.fingerprint import compute_fingerprint
from agrosight.core.models import (
    ALL_CATEGORIES,
    DASHBOARD_CATEGORIES,
    CropHealthSnapshot,
    InsightResult,
    RequestDescriptor,
    WeatherDay,
    round_half_up,
)


class TestRequestDescriptor:
    def test_params_copied(self):
        params = {"crop": "wheat", "weather": [{"d": 1}]}
        d = RequestDescriptor(category="weed", params=params)
        params["crop"] = "rice"
        params["weather"][0]["d"] = 2
        assert d.model_dump()["params"] == {"crop": "wheat", "weather": [{"d": 1}]}

    def test_params_read_only(self):
        d = RequestDescriptor(category="weed", params={"crop": "rice", "weather": [{"d": 1}]})
        before = compute_fingerprint(d)
        with pytest.raises(TypeError):
            d.params["crop"] = "wheat"  # type: ignore[index]
        with pytest.raises(TypeError):
            d.params["weather"][0]["d"] = 2  # type: ignore[index]
        with pytest.raises(AttributeError):
            d.params["weather"].append({"d": 3})  # type: ignore[attr-defined]
        assert compute_fingerprint(d) == before

    def test_dump_round_trips_to_equal_descriptor(self):
        d = RequestDescriptor(category="weed", params={"crop": "rice", "tags": ["a"]})
        again = RequestDescriptor(**d.model_dump())
        assert compute_fingerprint(again) == compute_fingerprint(d)

    def test_frozen(self):
        d = RequestDescriptor(category="weed")
        with pytest.raises(ValidationError):
            d.category = "yield"  # type: ignore[misc]

    def test_unknown_category_rejected(self):
        with pytest.raises(ValidationError):
            RequestDescriptor(category="horoscope")

    def test_none_params_become_empty(self):
        assert RequestDescriptor(category="weed", params=None).params == {}

    def test_param_default(self):
        d = RequestDescriptor(category="weed", params={"crop": None})
        assert d.param("crop", "crop") == "crop"
        assert d.param("missing") is None


class TestInsightResult:
    def test_is_fallback(self):
        r = InsightResult(category="weed", text="t", source="fallback", fingerprint="weed:x")
        assert r.is_fallback

    def test_invalid_source(self):
        with pytest.raises(ValidationError):
            InsightResult(category="weed", text="t", source="disk", fingerprint="f")


class TestCategories:
    def test_dashboard_subset(self):
        assert set(DASHBOARD_CATEGORIES) <= set(ALL_CATEGORIES)
        assert len(ALL_CATEGORIES) == 10


class TestCropHealthSnapshot:
    def test_latest_is_first_entry(self):
        h = CropHealthSnapshot(health={"ndvi": {"2026-10-15": 0.7, "2026-10-01": 0.4}})
        assert h.latest("ndvi") == 0.7

    def test_latest_parses_strings(self):
        h = CropHealthSnapshot(health={"soc": {"d": "2.5"}})
        assert h.latest("soc") == 2.5

    def test_latest_missing_or_bad(self):
        h = CropHealthSnapshot(health={"ndvi": {}, "evi": {"d": "n/a"}})
        assert h.latest("ndvi") is None
        assert h.latest("evi") is None
        assert h.latest("lai") is None


class TestWeatherDay:
    def test_celsius_conversion(self):
        day = WeatherDay(temp_min_k=288.15, temp_max_k=303.15, pop=0.456)
        assert day.temp_max_c == 30
        assert day.temp_min_c == 15
        assert day.rain_pct == 46

    def test_halves_round_up(self):
        assert WeatherDay(pop=0.125).rain_pct == 13
        assert WeatherDay(pop=0.625).rain_pct == 63

    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(-2.5) == -2
        assert round_half_up(2.4999) == 2
