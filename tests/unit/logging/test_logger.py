# tests/unit/logging/test_logger.py — v2
"""Tests for logging/ — formatters, context variables, rotating handler."""

from __future__ import annotations

import json
import logging
from logging.handlers import RotatingFileHandler

import pytest

from agrosight.logging.context import (
    clear_context,
    get_context,
    set_render_context,
    set_request_context,
)
from agrosight.logging.handlers import create_rotating_handler, parse_size
from agrosight.logging.logger import (
    NOISY_LOGGERS,
    ROOT_LOGGER,
    JsonFormatter,
    TextFormatter,
    quiet_third_party,
    setup_logging,
)


@pytest.fixture(autouse=True)
def _reset_context():
    clear_context()
    yield
    clear_context()


def _record(msg="hello", **extra):
    record = logging.LogRecord("agrosight.test", logging.INFO, __file__, 1, msg, (), None)
    for k, v in extra.items():
        setattr(record, k, v)
    return record


class TestContext:
    def test_empty_by_default(self):
        assert get_context().as_dict() == {}

    def test_request_context(self):
        set_render_context("r1")
        set_request_context("yield", "yield:abc")
        assert get_context().as_dict() == {
            "render_id": "r1", "category": "yield", "fingerprint": "yield:abc",
        }


class TestJsonFormatter:
    def test_basic_fields(self):
        entry = json.loads(JsonFormatter().format(_record()))
        assert entry["level"] == "INFO"
        assert entry["logger"] == "agrosight.test"
        assert entry["message"] == "hello"
        assert "category" not in entry

    def test_context_at_top_level(self):
        set_render_context("r9")
        set_request_context("weed", "weed:1")
        entry = json.loads(JsonFormatter().format(_record()))
        assert entry["render_id"] == "r9"
        assert entry["category"] == "weed"
        assert entry["fingerprint"] == "weed:1"

    def test_outcome_extras(self):
        entry = json.loads(
            JsonFormatter().format(_record(source="fallback", error_type="timeout"))
        )
        assert entry["source"] == "fallback"
        assert entry["error_type"] == "timeout"


class TestTextFormatter:
    def test_includes_render_and_category(self):
        set_render_context("abc123")
        set_request_context("irrigation")
        line = TextFormatter().format(_record("done"))
        assert "<abc123>" in line
        assert "[irrigation]" in line
        assert line.endswith("done")

    def test_fingerprint_digest_prefix_and_outcome(self):
        set_request_context("yield", "yield:0123456789abcdef")
        line = TextFormatter().format(_record("served", source="cache"))
        assert "[yield#01234567]" in line
        assert "(cache)" in line


class TestSetupLogging:
    def test_quiet_third_party(self):
        quiet_third_party()
        assert all(
            logging.getLogger(name).level == logging.WARNING for name in NOISY_LOGGERS
        )

    def test_installs_single_console_handler(self):
        setup_logging("DEBUG", "text")
        setup_logging("DEBUG", "text")
        root = logging.getLogger(ROOT_LOGGER)
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, TextFormatter)
        assert root.level == logging.DEBUG
        root.handlers.clear()

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "agrosight.log"
        setup_logging("INFO", "json", log_file=str(log_file))
        root = logging.getLogger(ROOT_LOGGER)
        try:
            assert any(isinstance(h, RotatingFileHandler) for h in root.handlers)
            assert log_file.parent.is_dir()
        finally:
            for h in root.handlers:
                h.close()
            root.handlers.clear()


class TestHandlers:
    @pytest.mark.parametrize(
        "text,expected",
        [("10MB", 10 * 1024**2), ("512kb", 512 * 1024), ("1 GB", 1024**3)],
    )
    def test_parse_size(self, text, expected):
        assert parse_size(text) == expected

    def test_parse_size_invalid(self):
        with pytest.raises(ValueError):
            parse_size("ten megs")

    def test_rotating_handler(self, tmp_path):
        handler = create_rotating_handler(tmp_path / "a" / "x.log", "1KB", 2)
        try:
            assert handler.maxBytes == 1024
            assert handler.backupCount == 2
        finally:
            handler.close()
