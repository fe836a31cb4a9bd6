# src/logging/context.py — v2
"""Contextual logging support — attach render_id, category, fingerprint to log records.

Context variables are task-local under asyncio, so each fanned-out
orchestrator task logs with its own category and fingerprint.
"""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

_render_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "render_id", default=None
)
_category: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "category", default=None
)
_fingerprint: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "fingerprint", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    render_id: str | None = None
    category: str | None = None
    fingerprint: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        render_id=_render_id.get(),
        category=_category.get(),
        fingerprint=_fingerprint.get(),
    )


def set_render_context(render_id: str) -> None:
    """Set dashboard-render context (called once per aggregate run)."""
    _render_id.set(render_id)


def set_request_context(category: str, fingerprint: str | None = None) -> None:
    """Set per-request context (called by the orchestrator per run)."""
    _category.set(category)
    _fingerprint.set(fingerprint)


def clear_context() -> None:
    """Reset all context variables."""
    _render_id.set(None)
    _category.set(None)
    _fingerprint.set(None)
