# src/llm/errors.py — v1
"""Provider failure taxonomy.

Every failure of an outbound call is recovered by the orchestrator; these
types exist so the failure can be classified and logged.
"""

from __future__ import annotations


class ProviderError(Exception):
    """The provider call failed (network, non-2xx, SDK exception)."""


class ProviderTimeout(ProviderError):
    """The provider call exceeded its time budget."""


class EmptyResponseError(ProviderError):
    """The provider answered without usable text."""


def classify_error(error: BaseException) -> str:
    """Classify an exception into a coarse error type for logs and records."""
    if isinstance(error, (ProviderTimeout, TimeoutError)):
        return "timeout"
    if isinstance(error, EmptyResponseError):
        return "parse_error"

    msg = str(error).lower()
    name = type(error).__name__.lower()

    if "429" in msg or "rate" in msg or "quota" in msg or "resourceexhausted" in name:
        return "rate_limit"
    if "timeout" in name or "timeout" in msg or "deadline" in msg:
        return "timeout"
    if any(c in msg for c in ("500", "502", "503", "504", "server", "unavailable")):
        return "server_error"
    if "json" in msg or "parse" in msg or "decode" in msg:
        return "parse_error"
    if "token" in msg and ("limit" in msg or "exceed" in msg):
        return "token_limit"
    return "unknown"
