"""Structured JSON logging configuration.

When ENCODED_COLUMNS_DEBUG=true, logs in human-readable format for local
development.  Otherwise logs as single-line JSON for log aggregators.

Modules log to children of the ``encoded_columns`` logger and configure
nothing on import.  Applications that want these records formatted call
``setup_logging()``, which configures that logger alone.
"""

import json
import logging
import sys
from datetime import datetime, timezone

from encoded_columns.config import get_settings

# Extra attributes passed via ``logger.debug(..., extra={...})`` that are
# copied into the JSON payload.
EXTRA_FIELDS = ("model", "column", "backend")

LOGGER_NAME = "encoded_columns"


class JSONFormatter(logging.Formatter):
    """Emit log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0] is not None:
            payload["exception"] = self.formatException(record.exc_info)

        for field in EXTRA_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                payload[field] = value

        return json.dumps(payload, default=str)


class _LibraryHandler(logging.StreamHandler):
    """Marks the handler ``setup_logging()`` owns so a second call replaces it."""


class PlainFormatter(logging.Formatter):
    """Human-readable lines, with ``model.column (backend)`` when the record has them."""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)-8s [%(name)s] %(message)s", datefmt="%H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        model = getattr(record, "model", None)
        column = getattr(record, "column", None)
        if model is None or column is None:
            return line
        backend = getattr(record, "backend", None)
        suffix = f" {model}.{column}" + (f" ({backend})" if backend else "")
        return line + suffix


def setup_logging(stream=None) -> logging.Logger:
    """Configure the ``encoded_columns`` logger from the debug and log_level settings.

    Only this library's logger is touched: handlers of the root logger and of
    other libraries are left to the application.  Records stop at this logger,
    so they are not emitted twice when the application logs to the root too.
    """
    settings = get_settings()

    library_logger = logging.getLogger(LOGGER_NAME)
    library_logger.setLevel(logging.DEBUG if settings.debug else settings.log_level.upper())
    for handler in [h for h in library_logger.handlers if isinstance(h, _LibraryHandler)]:
        library_logger.removeHandler(handler)

    handler = _LibraryHandler(stream or sys.stdout)
    handler.setFormatter(PlainFormatter() if settings.debug else JSONFormatter())
    library_logger.addHandler(handler)
    library_logger.propagate = False
    return library_logger
