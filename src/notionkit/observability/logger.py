"""JSON-lines logging for notionkit.

Each record becomes one JSON object on one line::

    {"ts": "2026-10-16T12:00:00.123456+00:00", "level": "WARNING",
     "logger": "notionkit.transport", "message": "Retrying request",
     "method": "GET", "path": "/users/me", "status": 503, "retry": 1}

Structured fields travel in ``extra={"extra_fields": {...}}``.  String
fields are passed through :func:`~notionkit.utils.redact.redact_text`
before they are written, so a stray ``Bearer`` credential in a message
never reaches the log sink.

The level of every notionkit logger defaults to ``WARNING`` and can be
raised or lowered with the ``NOTIONKIT_LOG_LEVEL`` environment variable.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import IO, Any

from notionkit.utils.redact import redact_text

LOG_LEVEL_ENV = "NOTIONKIT_LOG_LEVEL"
DEFAULT_LEVEL = logging.WARNING

_handled: set[str] = set()


def _scrub(value: Any) -> Any:
    return redact_text(value) if isinstance(value, str) else value


class StructuredFormatter(logging.Formatter):
    """Render a :class:`logging.LogRecord` as a single JSON line.

    The keys ``ts``, ``level``, ``logger`` and ``message`` are always
    present; ``exception`` and ``stack_info`` appear when the record carries
    them.  ``ts`` is the record's creation time in UTC.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": _scrub(record.getMessage()),
        }
        fields = getattr(record, "extra_fields", None) or {}
        entry.update({key: _scrub(value) for key, value in fields.items()})

        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = _scrub(self.formatException(record.exc_info))
        if record.stack_info:
            entry["stack_info"] = self.formatStack(record.stack_info)
        return json.dumps(entry, default=str)


def _resolve_level(level: int | str | None) -> int:
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV) or DEFAULT_LEVEL
    if isinstance(level, str):
        resolved = logging.getLevelName(level.strip().upper())
        if not isinstance(resolved, int):
            raise ValueError(f"unknown log level {level!r}")
        return resolved
    return level


def get_logger(
    name: str = "notionkit",
    *,
    level: int | str | None = None,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Return the logger *name*, attaching a JSON handler on first use.

    *level* and *stream* only take effect the first time a given name is
    requested; later calls return the same logger untouched.  When *level*
    is omitted it comes from ``NOTIONKIT_LOG_LEVEL``, falling back to
    ``WARNING``.  The handler writes to *stream* (default ``sys.stderr``)
    and the logger does not propagate to the root logger.
    """
    logger = logging.getLogger(name)
    if name in _handled:
        return logger

    logger.setLevel(_resolve_level(level))
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())
    logger.addHandler(handler)
    logger.propagate = False
    _handled.add(name)
    return logger
