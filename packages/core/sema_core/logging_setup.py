"""JSON log records with refresh-tick context, plus crash hooks."""

from __future__ import annotations

import faulthandler
import json
import logging
import logging.handlers
import sys
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .config import config_root


_LOGGER_NAME = "sema"
_LOG_FILE = "sema.log"

# Keys callers pass through ``extra=``; anything else is left off the record.
_CONTEXT_FIELDS = (
    "event",
    "slot",
    "state",
    "tick",
    "tick_s",
    "degraded_slots",
    "refreshes",
    "crash_id",
    "exit_code",
)


def log_dir() -> Path:
    path = config_root() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


class JsonFormatter(logging.Formatter):
    """One JSON object per line.

    Indicator context (scheduler state, tick number and duration, the slots
    that fell back) goes under ``ctx`` so refresh history can be filtered
    without parsing ``msg``.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts_utc": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "msg": record.getMessage(),
        }
        ctx = {name: getattr(record, name) for name in _CONTEXT_FIELDS if hasattr(record, name)}
        if isinstance(ctx.get("tick_s"), float):
            ctx["tick_s"] = round(ctx["tick_s"], 4)
        if ctx:
            payload["ctx"] = ctx
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True, default=str)


def _file_handler(keep_files: int) -> logging.Handler:
    handler = logging.handlers.TimedRotatingFileHandler(
        filename=str(log_dir() / _LOG_FILE),
        when="midnight",
        backupCount=max(2, keep_files),
        encoding="utf-8",
    )
    handler.setFormatter(JsonFormatter())
    return handler


def configure_logging(keep_files: int = 7, console: bool = True, verbose: bool = False) -> logging.Logger:
    logger = logging.getLogger(_LOGGER_NAME)
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.addHandler(_file_handler(keep_files))
    if console:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(logging.Formatter("%(levelname)s %(name)s %(message)s"))
        logger.addHandler(stream_handler)

    logger.info("logging configured", extra={"event": "logging_configured"})
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    return logging.getLogger(f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME)


def _report_crash(event: str, exc_info) -> str:
    crash_id = str(uuid.uuid4())
    get_logger().critical(
        f"{event.replace('_', ' ')} crash_id={crash_id}",
        exc_info=exc_info,
        extra={"event": event, "crash_id": crash_id},
    )
    return crash_id


def install_crash_hooks() -> None:
    """Route uncaught exceptions from any thread into the log, and native faults to ``fault.log``."""
    sys.excepthook = lambda exc_type, exc, tb: _report_crash("uncaught_exception", (exc_type, exc, tb))
    threading.excepthook = lambda args: _report_crash(
        "thread_exception", (args.exc_type, args.exc_value, args.exc_traceback)
    )

    fault_log = (log_dir() / "fault.log").open("a", encoding="utf-8")
    faulthandler.enable(file=fault_log, all_threads=True)
    get_logger().info("fault handler enabled", extra={"event": "fault_handler_enabled"})
