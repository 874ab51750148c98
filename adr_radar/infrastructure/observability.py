"""Structured Logging — formatters and one-call setup for every entry point.

Invariants:
    - Each line carries the record's own time, level, logger name and message
    - Sync context (blip_id, adr_id, outcome, error_code, path, kind) is kept when
      passed through extra=, in both formats
    - setup_logging() is idempotent: calling it again replaces its handler
    - The interactive TUI logs to a file, never to the terminal it draws on

Design Decisions:
    - Formatters built on stdlib logging: the JSON shape is small and fixed
    - SQLAlchemy and aiosqlite loggers held at WARNING unless the root level is DEBUG
"""

import json
import logging
from datetime import datetime, timezone

EXTRA_FIELDS: tuple[str, ...] = (
    "blip_id", "adr_id", "outcome", "error_code", "path", "kind",
)

_NOISY_LOGGERS = ("sqlalchemy.engine", "aiosqlite")

_HANDLER_NAME = "adr-radar"


def _extras(record: logging.LogRecord) -> dict[str, object]:
    return {
        key: record.__dict__[key]
        for key in EXTRA_FIELDS
        if record.__dict__.get(key) is not None
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_extras(record),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable lines with extras appended as key=value."""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)-7s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = _extras(record)
        if extras:
            line += " " + " ".join(f"{k}={v}" for k, v in extras.items())
        return line


def setup_logging(
    level: str = "INFO", fmt: str = "json", log_file: str | None = None,
) -> logging.Handler:
    """Install the adr-radar handler on the root logger and return it."""
    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root.removeHandler(existing)
            existing.close()

    if log_file:
        handler: logging.Handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(JSONFormatter() if fmt == "json" else TextFormatter())
    root.addHandler(handler)

    numeric = logging.getLevelName(level.upper())
    root.setLevel(numeric if isinstance(numeric, int) else logging.INFO)
    quiet = logging.DEBUG if root.level == logging.DEBUG else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(quiet)
    return handler
