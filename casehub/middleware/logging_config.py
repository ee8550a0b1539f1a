"""
Logging setup for CaseHub.

Two renderings of the same records:
    readable  coloured one-liners for a developer terminal
    json      one object per line for log shipping

LOG_FORMAT picks one explicitly; otherwise production gets JSON and
development / testing get the readable form. LOG_LEVEL sets the level.

Records emitted while a request is being served carry its request id
and, for /test-runs/<id> routes, the run id (see RequestContextFilter).
"""

import json
import logging
import sys
from datetime import datetime, timezone

from flask import g, has_request_context, request

# Attributes copied from ``extra=`` / the context filter into JSON output
_EXTRA_FIELDS = (
    "method",
    "path",
    "status",
    "duration_ms",
    "remote_addr",
    "request_id",
    "test_run_id",
)

_NOISY_LOGGERS = ("urllib3", "werkzeug", "sqlalchemy.engine", "alembic.runtime.migration")


class RequestContextFilter(logging.Filter):
    """Stamp request_id / test_run_id onto records logged inside a request."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not has_request_context():
            return True
        if getattr(record, "request_id", None) is None:
            record.request_id = g.get("request_id")
        if getattr(record, "test_run_id", None) is None:
            view_args = request.view_args or {}
            record.test_run_id = view_args.get("run_id")
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno,
        }
        entry.update(
            (key, getattr(record, key))
            for key in _EXTRA_FIELDS
            if getattr(record, key, None) is not None
        )
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class ReadableFormatter(logging.Formatter):
    """``HH:MM:SS LEVEL    logger: message [12ms] (req abc123)``"""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelname, "")
        stamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        line = (
            f"{color}{stamp} {record.levelname:<8}{self.RESET} "
            f"{record.name}: {record.getMessage()}"
        )
        duration = getattr(record, "duration_ms", None)
        if duration is not None:
            line += f" [{duration:.0f}ms]"
        request_id = getattr(record, "request_id", None)
        if request_id:
            line += f" (req {request_id})"
        if record.exc_info and record.exc_info[0] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


def _pick_formatter(app) -> logging.Formatter:
    fmt = (app.config.get("LOG_FORMAT") or "").lower()
    if fmt == "json":
        return JSONFormatter()
    if fmt == "readable":
        return ReadableFormatter()
    is_prod = not app.config.get("DEBUG") and not app.config.get("TESTING")
    return JSONFormatter() if is_prod else ReadableFormatter()


def configure_logging(app):
    """Install a single stderr handler on the root logger for this app."""
    level_name = app.config.get("LOG_LEVEL") or ("DEBUG" if app.config.get("DEBUG") else "INFO")
    level = getattr(logging, level_name.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_pick_formatter(app))
    handler.addFilter(RequestContextFilter())
    handler.setLevel(level)

    root = logging.getLogger()
    # repeated create_app() calls replace the handler instead of stacking
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    app.logger.setLevel(level)

    if not app.config.get("TESTING"):
        app.logger.info(
            "Logging configured: level=%s format=%s",
            logging.getLevelName(level), type(handler.formatter).__name__,
        )
