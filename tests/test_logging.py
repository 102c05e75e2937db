"""
Tests for structured JSON logging.
"""

import json
import logging

from codex_runtime.logging import JSONFormatter, get_logger, setup_logging


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_extra_fields_merged(self):
        """Test that structured fields land at the top level of the JSON line."""
        record = logging.LogRecord("codex_runtime.test", logging.WARNING, __file__, 1, "Reflex blocked", None, None)
        record.extra_fields = {"event": "reflex.blocked", "reflex_id": "hallucination", "score": 0.81}

        entry = json.loads(JSONFormatter().format(record))

        assert entry["level"] == "WARNING"
        assert entry["logger"] == "codex_runtime.test"
        assert entry["message"] == "Reflex blocked"
        assert entry["event"] == "reflex.blocked"
        assert entry["score"] == 0.81


class TestStructuredLogger:
    """Tests for domain log methods."""

    def test_handshake_fields_ignored(self, caplog):
        """Test the coercion warning carries the ignored values."""
        logger = get_logger("codex_runtime.test")

        with caplog.at_level(logging.WARNING, logger="codex_runtime.test"):
            logger.handshake_fields_ignored({"stakes": "extreme", "mode": "turbo"})

        record = caplog.records[-1]
        assert record.getMessage() == "Handshake update ignored invalid values for: mode, stakes"
        assert record.extra_fields["event"] == "handshake.fields_ignored"


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_installs_single_json_handler(self, monkeypatch):
        """Test that the root logger gets a JSON handler at the configured level."""
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        monkeypatch.setattr("codex_runtime.logging.settings.log_level", "debug")

        try:
            setup_logging()

            assert root.level == logging.DEBUG
            json_handlers = [h for h in root.handlers if isinstance(h.formatter, JSONFormatter)]
            assert len(json_handlers) == 1
        finally:
            root.handlers = saved_handlers
            root.setLevel(saved_level)

    def test_repeated_setup_keeps_foreign_handlers(self):
        """Test that calling setup twice leaves one JSON handler and other handlers intact."""
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        app_handler = logging.NullHandler()
        root.addHandler(app_handler)

        try:
            setup_logging()
            setup_logging()

            json_handlers = [h for h in root.handlers if isinstance(h.formatter, JSONFormatter)]
            assert len(json_handlers) == 1
            assert app_handler in root.handlers
        finally:
            root.handlers = saved_handlers
            root.setLevel(saved_level)
