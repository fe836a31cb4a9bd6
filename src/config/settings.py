# src/config/settings.py — v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for provider credentials, cache/quota/rate-limit
tuning, chat routing bounds and logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === LLM PROVIDER ===
    llm_provider: str = "google"
    gemini_api_key: str = ""
    gemini_model: str = "gemini-1.5-flash"
    default_max_tokens: int = 1024
    default_temperature: float = 0.4
    provider_timeout_s: float = 30.0

    # === Cache ===
    cache_ttl_seconds: float = 30 * 60

    # === Quota ===
    max_daily_calls: int = 50

    # === Rate limiting ===
    rate_limit_interval_s: float = 2.0
    # "throttle": space call starts only; "serialize": one call in flight
    rate_limit_mode: Literal["throttle", "serialize"] = "throttle"

    # === Chat routing ===
    chat_history_limit: int = 5
    chat_session_history_window: int = 4
    chat_prompt_history_window: int = 3
    chat_session_max_tokens: int = 500
    chat_session_temperature: float = 0.7

    # === Dispatch ===
    manual_mode: bool = False

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 5

    # --- Validators ---

    @field_validator("max_daily_calls", "chat_history_limit")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:  # noqa: N805
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    @field_validator("cache_ttl_seconds", "provider_timeout_s")
    @classmethod
    def validate_positive(cls, v: float) -> float:  # noqa: N805
        if v <= 0:
            raise ValueError("must be > 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.rate_limit_interval_s < 0:
            errors.append("RATE_LIMIT_INTERVAL_S must be >= 0")

        if self.chat_session_history_window < 1:
            errors.append("CHAT_SESSION_HISTORY_WINDOW must be >= 1")

        if self.chat_prompt_history_window < 0:
            errors.append("CHAT_PROMPT_HISTORY_WINDOW must be >= 0")

        if self.chat_session_max_tokens < 1 or self.default_max_tokens < 1:
            errors.append("Token limits must be >= 1")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-deployment config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
