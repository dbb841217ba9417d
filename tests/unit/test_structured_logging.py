"""
Tests for structured logging configuration.

Validates:
  1. configure_logging() is idempotent (safe to call twice)
  2. The root log level follows the argument
  3. Rejections from the validation engine reach the handler
  4. JSON output mode produces valid JSON
"""

from __future__ import annotations

import io
import json
import logging

import structlog

from permission_translation.checks import validate_hex
from permission_translation.core.logging import configure_logging
from permission_translation.descriptor import CapabilityDescriptor


def _capture_root_handler() -> io.StringIO:
    """Point the configured root handler at an in-memory stream."""
    stream = io.StringIO()
    for h in logging.getLogger().handlers:
        if isinstance(h.formatter, structlog.stdlib.ProcessorFormatter):
            h.setStream(stream)  # type: ignore[attr-defined]
    return stream


class TestConfigureLogging:
    """configure_logging() sets up structlog + stdlib correctly."""

    def setup_method(self) -> None:
        """Reset logging state between tests."""
        logging.getLogger().handlers.clear()
        structlog.reset_defaults()

    def teardown_method(self) -> None:
        logging.getLogger().handlers.clear()
        structlog.reset_defaults()

    def test_idempotent_double_call(self) -> None:
        configure_logging(level="DEBUG")
        handler_count_1 = len(logging.getLogger().handlers)

        configure_logging(level="DEBUG")
        handler_count_2 = len(logging.getLogger().handlers)

        assert handler_count_1 == handler_count_2
        assert handler_count_1 >= 1

    def test_sets_root_log_level(self) -> None:
        configure_logging(level="WARNING")
        assert logging.getLogger().level == logging.WARNING

        configure_logging(level="DEBUG")
        assert logging.getLogger().level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self) -> None:
        configure_logging(level="CHATTY")
        assert logging.getLogger().level == logging.INFO

    def test_json_output_is_parseable(self) -> None:
        configure_logging(level="DEBUG", json_output=True)
        stream = _capture_root_handler()

        structlog.get_logger("test.json").info("test_event", key="value", count=42)

        line = stream.getvalue().strip().splitlines()[-1]
        entry = json.loads(line)
        assert entry["event"] == "test_event"
        assert entry["key"] == "value"
        assert entry["count"] == 42
        assert entry["level"] == "info"
        assert "timestamp" in entry

    def test_rejection_is_logged_at_debug(self) -> None:
        configure_logging(level="DEBUG", json_output=True)
        stream = _capture_root_handler()

        d = CapabilityDescriptor({"Read": 0x1, "Write": 0x2})
        validate_hex(0x8, d)

        entries = [json.loads(line) for line in stream.getvalue().splitlines() if line.strip()]
        rejected = [e for e in entries if e["event"] == "permission_rejected"]
        assert len(rejected) == 1
        assert rejected[0]["reason_code"] == "INVALID_BITS"
        assert rejected[0]["value"] == "0x8"

    def test_valid_value_not_logged(self) -> None:
        configure_logging(level="DEBUG", json_output=True)
        stream = _capture_root_handler()

        validate_hex(0x1, CapabilityDescriptor({"Read": 0x1}))

        assert "permission_rejected" not in stream.getvalue()

    def test_rejection_hidden_at_info(self) -> None:
        configure_logging(level="INFO", json_output=True)
        stream = _capture_root_handler()

        validate_hex(0x8, CapabilityDescriptor({"Read": 0x1}))

        assert "permission_rejected" not in stream.getvalue()
