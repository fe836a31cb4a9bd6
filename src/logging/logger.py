# src/logging/logger.py — v3
"""Formatters and setup for the ``agrosight`` logger tree.

Every record carries the insight context of the task that emitted it
(dashboard render, category, request fingerprint). Orchestrator records
may also carry an outcome via ``extra={"source": ..., "error_type": ...}``.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from agrosight.logging.context import get_context

ROOT_LOGGER = "agrosight"

# Provider SDK transports; chatty at INFO.
NOISY_LOGGERS = ("httpx", "grpc", "google.auth", "urllib3")

_OUTCOME_FIELDS = ("source", "error_type")


def _outcome(record: logging.LogRecord) -> dict[str, Any]:
    return {
        name: getattr(record, name)
        for name in _OUTCOME_FIELDS
        if getattr(record, name, None) is not None
    }


class JsonFormatter(logging.Formatter):
    """One JSON object per line; insight context fields sit at top level."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(get_context().as_dict())
        entry.update(_outcome(record))
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Console lines: ``time [LEVEL] logger <render> [category#fp] (source) — msg``."""

    def format(self, record: logging.LogRecord) -> str:
        ctx = get_context()
        parts = [
            datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S"),
            f"[{record.levelname:8s}]",
            record.name,
        ]
        if ctx.render_id:
            parts.append(f"<{ctx.render_id}>")
        if ctx.category:
            tag = ctx.category
            if ctx.fingerprint:
                # Digest prefix is enough to tell requests apart.
                tag += "#" + ctx.fingerprint.rsplit(":", 1)[-1][:8]
            parts.append(f"[{tag}]")
        outcome = _outcome(record)
        if outcome:
            parts.append("(" + ", ".join(str(v) for v in outcome.values()) + ")")
        parts.append(f"— {record.getMessage()}")
        line = " ".join(parts)
        if record.exc_info and record.exc_info[1] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    log_file: str | None = None,
    rotation: str = "10MB",
    retention: int = 5,
) -> None:
    """Configure the agrosight logger tree.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        log_format: Output format ("json" or "text").
        log_file: Path to log file (None = stderr only).
        rotation: Max file size before rotation (e.g. "10MB").
        retention: Number of rotated files to keep.
    """
    root_logger = logging.getLogger(ROOT_LOGGER)
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers.clear()

    formatter: logging.Formatter = (
        JsonFormatter() if log_format == "json" else TextFormatter()
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        from agrosight.logging.handlers import create_rotating_handler

        file_handler = create_rotating_handler(
            log_file, rotation=rotation, retention=retention
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def quiet_third_party(level: int = logging.WARNING) -> None:
    """Raise the threshold of provider SDK transport loggers."""
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(level)
