# tests/unit/config/test_settings.py — v1
"""Tests for config/settings.py — defaults, env loading, validation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from agrosight.config.settings import ConfigurationError, Settings, load_settings


class TestDefaults:
    def test_defaults(self):
        s = Settings(_env_file=None)
        assert s.llm_provider == "google"
        assert s.gemini_model == "gemini-1.5-flash"
        assert s.cache_ttl_seconds == 1800
        assert s.max_daily_calls == 50
        assert s.rate_limit_interval_s == 2.0
        assert s.rate_limit_mode == "throttle"
        assert s.chat_history_limit == 5
        assert s.chat_session_history_window == 4
        assert s.chat_prompt_history_window == 3
        assert s.manual_mode is False
        assert s.log_file is None

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("MAX_DAILY_CALLS", "10")
        monkeypatch.setenv("RATE_LIMIT_MODE", "serialize")
        s = Settings(_env_file=None)
        assert s.max_daily_calls == 10
        assert s.rate_limit_mode == "serialize"

    def test_env_file(self, tmp_path):
        env = tmp_path / ".env"
        env.write_text("GEMINI_API_KEY=abc\nCACHE_TTL_SECONDS=60\n")
        s = Settings(_env_file=env)
        assert s.gemini_api_key == "abc"
        assert s.cache_ttl_seconds == 60

    def test_load_settings_overrides(self):
        s = load_settings(_env_file=None, max_daily_calls=7)
        assert s.max_daily_calls == 7


class TestValidation:
    def test_negative_max_calls(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, max_daily_calls=-1)

    def test_zero_ttl(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, cache_ttl_seconds=0)

    def test_zero_timeout(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, provider_timeout_s=0)

    def test_unknown_mode(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, rate_limit_mode="burst")

    def test_negative_interval(self):
        with pytest.raises(ConfigurationError, match="RATE_LIMIT_INTERVAL_S"):
            Settings(_env_file=None, rate_limit_interval_s=-0.5)

    def test_session_window_at_least_one(self):
        with pytest.raises(ConfigurationError, match="CHAT_SESSION_HISTORY_WINDOW"):
            Settings(_env_file=None, chat_session_history_window=0)

    def test_errors_are_joined(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Settings(_env_file=None, rate_limit_interval_s=-1, default_max_tokens=0)
        assert ";" in str(exc_info.value)
