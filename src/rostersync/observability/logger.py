"""Structured JSON logging for rostersync.

Each record is rendered as one JSON object per line so roster activity
(snapshots, queued diffs, replays, deprecation notices) can be shipped to
a log pipeline without extra parsing.

Typical output::

    {"ts": "2026-01-05T09:12:44.104211+00:00", "level": "DEBUG",
     "logger": "rostersync.presence", "message": "diff queued",
     "op": "diff", "pending": 2}

Usage::

    from rostersync.observability import get_logger

    log = get_logger("rostersync.presence")
    log.debug("diff queued", extra={"extra_fields": {"pending": 2}})
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any


class StructuredFormatter(logging.Formatter):
    """Render a :class:`logging.LogRecord` as a single-line JSON object.

    Guaranteed keys are ``ts`` (UTC, ISO-8601), ``level``, ``logger`` and
    ``message``.  A mapping passed as ``extra={"extra_fields": {...}}`` is
    merged into the top level; ``exception`` and ``stack_info`` are added
    when the record carries them.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        fields: dict[str, Any] | None = getattr(record, "extra_fields", None)
        if fields is not None:
            payload.update(fields)

        if record.exc_info and record.exc_info[1] is not None:
            payload["exception"] = self.formatException(record.exc_info)

        if record.stack_info:
            payload["stack_info"] = self.formatStack(record.stack_info)

        # Metas may hold arbitrary application values; fall back to str().
        return json.dumps(payload, default=str)


# Names that already have a structured handler attached.
_configured_loggers: set[str] = set()


def get_logger(
    name: str = "rostersync",
    *,
    level: int | str = logging.DEBUG,
    stream: Any | None = None,
) -> logging.Logger:
    """Return a logger that writes structured JSON lines.

    Parameters
    ----------
    name:
        Logger name, ``"rostersync"`` by default.  The library uses
        ``"rostersync.presence"`` and ``"rostersync.diff"``.
    level:
        Initial level, as an ``int`` or a case-insensitive level name.
        Defaults to ``DEBUG``; per-event records are only emitted when the
        tracker runs with ``debug_dump_diff=True``.
    stream:
        Destination of the handler, ``sys.stderr`` when omitted.

    Returns
    -------
    logging.Logger
        The named logger.  Only the first call for a given *name* sets the
        level and attaches a handler; later calls return it untouched.
    """
    logger = logging.getLogger(name)

    if name in _configured_loggers:
        return logger

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logger.setLevel(level)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())
    logger.addHandler(handler)
    logger.propagate = False

    _configured_loggers.add(name)
    return logger
