"""
Logging Module - Process-wide logging for the doctor
====================================================

Every module logs through ``get_logger`` under the ``doctor`` logger.
``setup_logging`` attaches the handlers once per process:

- colored console output on stderr
- ``doctor.log`` with every record (plain text or JSON lines)
- ``errors.log`` with errors only, always JSON lines

Records carry context fields in ``extra_data``: fields bound to a
logger with ``get_logger(name, **fields)`` plus the current thread's
context from ``set_log_context`` (the web layer sets the session id).
"""

import json
import logging
import sys
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Dict, Any


ROOT_LOGGER = "doctor"

PLAIN_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s%(context)s"

_local = threading.local()
_configured = False


def _thread_context() -> Dict[str, Any]:
    return getattr(_local, "context", {})


class JSONFormatter(logging.Formatter):
    """Formats each record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "line": record.lineno,
        }
        if record.extra_data:
            entry["context"] = record.extra_data
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class ColoredFormatter(logging.Formatter):
    """Console formatter with the level name highlighted."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        line = (
            f"{color}{record.levelname:<8}{self.RESET} "
            f"{self.formatTime(record, '%H:%M:%S')} {record.name}: "
            f"{record.getMessage()}{record.context}"
        )
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class ContextFilter(logging.Filter):
    """
    Merges thread-local context into ``record.extra_data``.

    Also renders the merged fields as ``record.context``
    (`` | key=value ...``) for the text formatters.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        data = dict(_thread_context())
        data.update(getattr(record, "extra_data", None) or {})
        record.extra_data = data
        record.context = (
            " | " + " ".join(f"{k}={v}" for k, v in data.items()) if data else ""
        )
        return True


class LoggerAdapter(logging.LoggerAdapter):
    """Adds the fields bound at ``get_logger`` time to every record."""

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        if self.extra:
            extra = dict(kwargs.get("extra") or {})
            extra["extra_data"] = {**self.extra, **extra.get("extra_data", {})}
            kwargs["extra"] = extra
        return msg, kwargs


def _add_handler(
    logger: logging.Logger,
    handler: logging.Handler,
    level: int,
    formatter: logging.Formatter
) -> None:
    handler.setLevel(level)
    handler.addFilter(ContextFilter())
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def setup_logging(
    log_dir: Optional[str] = None,
    log_level: str = "INFO",
    json_format: bool = False,
    console_output: bool = True
) -> None:
    """
    Configure the ``doctor`` logger. Only the first call has an effect.

    Args:
        log_dir: Directory for ``doctor.log`` and ``errors.log`` (no files when None)
        log_level: Minimum level to record
        json_format: Write ``doctor.log`` as JSON lines
        console_output: Log to stderr
    """
    global _configured

    if _configured:
        return

    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    root.handlers.clear()

    if console_output:
        _add_handler(root, logging.StreamHandler(sys.stderr), logging.DEBUG, ColoredFormatter())

    if log_dir:
        log_path = Path(log_dir).expanduser()
        log_path.mkdir(parents=True, exist_ok=True)

        _add_handler(
            root,
            logging.FileHandler(log_path / "doctor.log", encoding="utf-8"),
            logging.DEBUG,
            JSONFormatter() if json_format else logging.Formatter(PLAIN_FORMAT),
        )
        _add_handler(
            root,
            logging.FileHandler(log_path / "errors.log", encoding="utf-8"),
            logging.ERROR,
            JSONFormatter(),
        )

    _configured = True


def get_logger(name: str, **fields) -> LoggerAdapter:
    """
    Get a logger under the ``doctor`` namespace.

    Args:
        name: Dotted module path, e.g. ``"rules.engine"``
        **fields: Context added to every record from this logger

    Example:
        logger = get_logger("services.sessions", component="sessions")
        logger.info("Evicted session")
    """
    prefix = f"{ROOT_LOGGER}."
    if name != ROOT_LOGGER and not name.startswith(prefix):
        name = prefix + name
    return LoggerAdapter(logging.getLogger(name), fields)


def set_log_context(**fields) -> None:
    """
    Add fields to the current thread's log context.

    Example:
        set_log_context(session_id="3f2a")
        logger.info("Reply sent")  # ... | session_id=3f2a
    """
    _local.context = {**_thread_context(), **fields}


def clear_log_context() -> None:
    """Clear the current thread's log context."""
    _local.context = {}
