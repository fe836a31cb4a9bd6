# tests/unit/fallback/test_provider.py — v1
"""Tests for fallback/provider.py — per-category degraded content."""

from __future__ import annotations

from datetime import date

import pytest

from agrosight.core.models import ALL_CATEGORIES, RequestDescriptor
from agrosight.fallback.provider import FallbackProvider


@pytest.fixture
def provider():
    return FallbackProvider(today=lambda: date(2026, 10, 19))


class TestFallbackProvider:
    @pytest.mark.parametrize("category", ALL_CATEGORIES)
    def test_every_category_non_empty(self, provider, category):
        text = provider.fallback_for(RequestDescriptor(category=category))
        assert text.strip()

    def test_covers_all_categories(self, provider):
        assert set(provider.categories()) == set(ALL_CATEGORIES)

    def test_crop_personalised(self, provider):
        text = provider.fallback_for(
            RequestDescriptor(category="fertilizer", params={"crop": "Rice"})
        )
        assert "Rice field" in text

    def test_missing_crop_uses_generic_word(self, provider):
        text = provider.fallback_for(RequestDescriptor(category="weed"))
        assert "your crop field" in text

    def test_chat_message_truncated(self, provider):
        message = "x" * 80
        text = provider.fallback_for(
            RequestDescriptor(category="chat", params={"message": message})
        )
        assert f'"{"x" * 50}..."' in text
        assert "x" * 51 not in text

    def test_chat_advanced_shares_chat_text(self, provider):
        params = {"message": "When to sow?"}
        chat = provider.fallback_for(RequestDescriptor(category="chat", params=params))
        adv = provider.fallback_for(
            RequestDescriptor(category="chat_advanced", params=params)
        )
        assert chat == adv

    def test_date_stamp(self, provider):
        text = provider.fallback_for(RequestDescriptor(category="yield"))
        assert text.endswith("_Data as of 2026-10-19._")

    def test_farming_insights_standard_guidance(self, provider):
        text = provider.fallback_for(RequestDescriptor(category="farming_insights"))
        assert text.startswith("Based on standard agronomic guidance:")

    def test_deterministic(self, provider):
        d = RequestDescriptor(category="irrigation", params={"crop": "Corn"})
        assert provider.fallback_for(d) == provider.fallback_for(d)

    def test_broken_date_source_still_returns_text(self):
        def broken():
            raise RuntimeError("clock down")

        text = FallbackProvider(today=broken).fallback_for(
            RequestDescriptor(category="weed")
        )
        assert "unknown date" in text
