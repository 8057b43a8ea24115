"""Logging bootstrap for the mention engine and its Textual host."""

from __future__ import annotations

from datetime import datetime, timezone
import json
import logging
import os
from pathlib import Path
from typing import Any

APP_LOGGER_PREFIX = "prompt_mentions"
DEFAULT_LOG_FILE = "~/.local/state/prompt-mentions/app.log"
PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# Libraries whose INFO/DEBUG chatter would drown the engine's own events.
QUIET_LOGGERS = ("textual", "asyncio")

_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"asctime", "message"}


class JsonFormatter(logging.Formatter):
    """One JSON object per record; ``extra=`` fields are emitted as keys."""

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        data.update(
            (key, value)
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS
        )
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False, separators=(",", ":"), default=str)


class AppLoggerFilter(logging.Filter):
    """Pass only records from the ``prompt_mentions`` logger tree."""

    def __init__(self, prefix: str = APP_LOGGER_PREFIX) -> None:
        super().__init__()
        self.prefix = prefix

    def filter(self, record: logging.LogRecord) -> bool:
        return record.name == self.prefix or record.name.startswith(f"{self.prefix}.")


def _build_formatter(structured: bool) -> logging.Formatter:
    if structured:
        return JsonFormatter()
    return logging.Formatter(PLAIN_FORMAT)


def _attach_file_handler(
    root: logging.Logger, path: str, level: int, formatter: logging.Formatter
) -> None:
    target = Path(path).expanduser()
    target.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(target, encoding="utf-8")
    handler.setFormatter(formatter)
    handler.setLevel(level)
    root.addHandler(handler)
    if os.name != "posix":
        return
    try:
        target.chmod(0o600)
    except OSError:
        logging.getLogger(__name__).warning(
            "Unable to enforce 0600 permissions for %s", target
        )


def configure_logging(logging_config: dict[str, Any]) -> None:
    """Install handlers on the root logger from the ``[logging]`` section.

    The terminal belongs to the TUI, so stderr only carries engine warnings
    and errors; everything at the configured level goes to the optional file.
    """
    level_name = str(logging_config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)
    formatter = _build_formatter(bool(logging_config.get("structured", True)))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    for name in QUIET_LOGGERS:
        library_logger = logging.getLogger(name)
        library_logger.setLevel(logging.WARNING)
        library_logger.propagate = True

    stderr_handler = logging.StreamHandler()
    stderr_handler.setFormatter(formatter)
    stderr_handler.setLevel(max(level, logging.WARNING))
    stderr_handler.addFilter(AppLoggerFilter())
    root.addHandler(stderr_handler)

    if logging_config.get("log_to_file", False):
        _attach_file_handler(
            root,
            str(logging_config.get("log_file_path", DEFAULT_LOG_FILE)),
            level,
            formatter,
        )
