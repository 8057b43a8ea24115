"""Tests for structured logging behavior."""

from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path
import unittest

from prompt_mentions.coordinator import MentionCoordinator
from prompt_mentions.entities import Entity
from prompt_mentions.logging_utils import AppLoggerFilter, JsonFormatter, configure_logging
from prompt_mentions.providers import StaticEntityProvider


class LoggingTests(unittest.TestCase):
    """Validate log format and engine event emission."""

    def test_session_events_emitted(self) -> None:
        coordinator = MentionCoordinator(
            StaticEntityProvider({"agent": [Entity(id="alice-1", name="Alice")]})
        )
        with self.assertLogs("prompt_mentions.session", level="DEBUG") as logs:
            coordinator.buffer_changed("hi @al")
            coordinator.handle_key("enter")

        events = [getattr(record, "event", "") for record in logs.records]
        self.assertEqual(
            events,
            ["mention.session.opened", "mention.session.committed", "mention.session.closed"],
        )
        self.assertEqual(logs.records[-1].reason, "committed")

    def test_submission_event_carries_counts(self) -> None:
        coordinator = MentionCoordinator(StaticEntityProvider())
        with self.assertLogs("prompt_mentions.coordinator", level="INFO") as logs:
            coordinator.prepare_submission("plain")
        record = logs.records[0]
        self.assertEqual(record.event, "mention.submission.prepared")
        self.assertEqual(record.counts, {"agent": 0, "methodology": 0, "skill": 0})

    def test_json_formatter_includes_structured_fields(self) -> None:
        formatter = JsonFormatter()
        record = logging.LogRecord(
            name="prompt_mentions.test",
            level=logging.INFO,
            pathname=__file__,
            lineno=1,
            msg="mention.session.closed",
            args=(),
            exc_info=None,
        )
        record.event = "mention.session.closed"
        record.trigger = "agent"
        record.counts = {"agent": 1}

        data = json.loads(formatter.format(record))
        self.assertEqual(data["event"], "mention.session.closed")
        self.assertEqual(data["trigger"], "agent")
        self.assertEqual(data["counts"], {"agent": 1})
        self.assertEqual(data["level"], "INFO")

    def test_app_filter_matches_package_tree_only(self) -> None:
        app_filter = AppLoggerFilter()

        def record(name: str) -> logging.LogRecord:
            return logging.LogRecord(name, logging.INFO, "", 0, "x", (), None)

        self.assertTrue(app_filter.filter(record("prompt_mentions")))
        self.assertTrue(app_filter.filter(record("prompt_mentions.session")))
        self.assertFalse(app_filter.filter(record("prompt_mentions_other")))
        self.assertFalse(app_filter.filter(record("textual")))


class ConfigureLoggingTests(unittest.TestCase):
    """Validate configure_logging() handler setup behavior."""

    def setUp(self) -> None:
        # Preserve root logger state so tests do not pollute each other.
        root = logging.getLogger()
        self._original_level = root.level
        self._original_handlers = list(root.handlers)

    def tearDown(self) -> None:
        root = logging.getLogger()
        root.setLevel(self._original_level)
        root.handlers.clear()
        root.handlers.extend(self._original_handlers)

    def test_configure_logging_adds_stderr_handler(self) -> None:
        configure_logging({"level": "DEBUG", "structured": False, "log_to_file": False})
        root = logging.getLogger()
        stream_handlers = [
            h
            for h in root.handlers
            if isinstance(h, logging.StreamHandler)
            and not isinstance(h, logging.FileHandler)
        ]
        self.assertTrue(len(stream_handlers) >= 1)

    def test_configure_logging_structured_uses_json_formatter(self) -> None:
        configure_logging({"level": "DEBUG", "structured": True, "log_to_file": False})
        root = logging.getLogger()
        formatters = [h.formatter for h in root.handlers]
        self.assertTrue(any(isinstance(f, JsonFormatter) for f in formatters))

    def test_configure_logging_plain_formatter_when_not_structured(self) -> None:
        configure_logging({"level": "DEBUG", "structured": False, "log_to_file": False})
        root = logging.getLogger()
        formatters = [h.formatter for h in root.handlers]
        self.assertFalse(any(isinstance(f, JsonFormatter) for f in formatters))

    def test_configure_logging_sets_root_level(self) -> None:
        configure_logging({"level": "DEBUG", "structured": False, "log_to_file": False})
        root = logging.getLogger()
        self.assertEqual(root.level, logging.DEBUG)

    def test_configure_logging_noisy_loggers_set_to_warning(self) -> None:
        configure_logging({"level": "DEBUG", "structured": False, "log_to_file": False})
        for name in ("textual", "asyncio"):
            self.assertEqual(logging.getLogger(name).level, logging.WARNING)

    def test_configure_logging_file_handler_created(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            log_path = str(Path(tmp) / "test.log")
            configure_logging(
                {
                    "level": "DEBUG",
                    "structured": False,
                    "log_to_file": True,
                    "log_file_path": log_path,
                }
            )
            root = logging.getLogger()
            file_handlers = [
                h for h in root.handlers if isinstance(h, logging.FileHandler)
            ]
            self.assertTrue(len(file_handlers) >= 1)
            self.assertTrue(Path(log_path).exists())

    def test_configure_logging_stderr_handler_filters_to_prompt_mentions(self) -> None:
        configure_logging({"level": "DEBUG", "structured": False, "log_to_file": False})
        root = logging.getLogger()
        stream_handlers = [
            h
            for h in root.handlers
            if isinstance(h, logging.StreamHandler)
            and not isinstance(h, logging.FileHandler)
        ]
        self.assertTrue(len(stream_handlers) >= 1)
        handler = stream_handlers[0]
        # Filters may be stored as callables (plain functions) or Filter objects.
        # logging.Handler.filter() applies all filters correctly regardless.
        app_record = logging.LogRecord(
            name="prompt_mentions.session",
            level=logging.INFO,
            pathname="",
            lineno=0,
            msg="ok",
            args=(),
            exc_info=None,
        )
        other_record = logging.LogRecord(
            name="textual",
            level=logging.INFO,
            pathname="",
            lineno=0,
            msg="noise",
            args=(),
            exc_info=None,
        )
        # handler.filter() returns truthy when all filters pass.
        self.assertTrue(handler.filter(app_record))
        self.assertFalse(handler.filter(other_record))


if __name__ == "__main__":
    unittest.main()
