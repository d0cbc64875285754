"""Logging configuration for the analytics service.

Two output shapes, picked by LOG_JSON:

  _ContainerFormatter: one readable line per record for local dev, with
    the request ID (when there is one) after the logger name.  WARNING
    and above carry the source location so a skipped join or a malformed
    stored collection can be traced back to its guard clause.

  _JsonFormatter: JSON Lines for log aggregation.  Request context
    (request_id, path, duration) and report context (report,
    course_filter, rows) are lifted to top-level keys so they can be
    filtered on directly.

Timestamps are UTC, like every date the reports compare against.
"""

from __future__ import annotations

import json
import logging
import sys
import time
from contextvars import ContextVar

# Set per request by RequestContextMiddleware; "-" outside a request.
request_id_var: ContextVar[str] = ContextVar("request_id", default="-")

_CONTEXT_FIELDS = (
    "request_id",
    "method",
    "path",
    "status_code",
    "duration_ms",
    "report",
    "course_filter",
    "rows",
)


class _RequestContextFilter(logging.Filter):
    """Stamp the current request ID on records that do not carry one."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = request_id_var.get()  # type: ignore[attr-defined]
        return True


class _UtcFormatter(logging.Formatter):
    converter = time.gmtime
    default_time_format = "%Y-%m-%dT%H:%M:%S"
    default_msec_format = "%s.%03dZ"


class _ContainerFormatter(_UtcFormatter):
    """Single-line formatter tuned for container stdout."""

    def format(self, record: logging.LogRecord) -> str:
        line = f"{self.formatTime(record)} {record.levelname:<8} {record.name}"
        request_id = getattr(record, "request_id", "-")
        if request_id != "-":
            line += f" [{request_id}]"
        line += f"  {record.getMessage()}"
        if record.levelno >= logging.WARNING:
            line += f"  [{record.filename}:{record.lineno}]"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class _JsonFormatter(_UtcFormatter):
    """JSON Lines formatter; one object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (key, value)
            for key in _CONTEXT_FIELDS
            if (value := getattr(record, key, None)) not in (None, "-")
        )
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(level_name: str, *, json_format: bool = False) -> None:
    """Route every logger to one stdout handler.

    Args:
        level_name: debug/info/warning/error; anything else means info.
        json_format: emit JSON Lines instead of readable lines.
    """
    level = getattr(logging, level_name.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_JsonFormatter() if json_format else _ContainerFormatter())
    handler.addFilter(_RequestContextFilter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    # Server and HTTP-client libraries stay at WARNING even when we debug.
    for name in ("uvicorn", "uvicorn.access", "uvicorn.error", "httpcore", "httpx"):
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
