"""
Centralized logging configuration for the journal.
All modules should use get_logger(__name__) to get their logger.

Features:
- Rotating file logs (5MB x 5 files)
- Separate error log file
- JSON logging for production (LOG_JSON=true)
- Console output for development
- Helpers for storage and user-action log lines
"""
import logging
import os
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Optional, Dict, Any

from pythonjsonlogger import jsonlogger

# Configuration from environment
LOG_DIR = os.environ.get("LOG_DIR", "logs")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.environ.get(
    "LOG_FORMAT",
    "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
)
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_JSON = os.environ.get("LOG_JSON", "false").lower() == "true"
LOG_CONSOLE = os.environ.get("LOG_CONSOLE", "false").lower() == "true"

os.makedirs(LOG_DIR, exist_ok=True)

LOG_FILE = os.path.join(LOG_DIR, "app.log")
ERROR_LOG_FILE = os.path.join(LOG_DIR, "error.log")

_standard_formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
_detailed_formatter = logging.Formatter(
    "%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | %(message)s",
    datefmt=LOG_DATE_FORMAT
)


class JournalJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter that adds the fields our log shipping expects."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record['timestamp'] = datetime.now(timezone.utc).isoformat()
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['function'] = record.funcName
        log_record['line'] = record.lineno


def _create_file_handler(filepath: str, level: int = logging.DEBUG) -> RotatingFileHandler:
    """Create a rotating file handler."""
    handler = RotatingFileHandler(
        filepath,
        maxBytes=5 * 1024 * 1024,  # 5MB per file
        backupCount=5,
        encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(JournalJsonFormatter() if LOG_JSON else _standard_formatter)
    return handler


def _create_error_handler() -> RotatingFileHandler:
    """Create a handler for error-level logs only."""
    handler = RotatingFileHandler(
        ERROR_LOG_FILE,
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8"
    )
    handler.setLevel(logging.ERROR)
    handler.setFormatter(_detailed_formatter)
    return handler


def _create_console_handler() -> logging.StreamHandler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(_standard_formatter)
    return handler


_file_handler = _create_file_handler(LOG_FILE)
_error_handler = _create_error_handler()
_console_handler = _create_console_handler()

_loggers: Dict[str, logging.Logger] = {}


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with consistent configuration.

    Usage:
        from utils.logger import get_logger
        logger = get_logger(__name__)
        logger.info("Message here")

    Args:
        name: Usually __name__ of the calling module

    Returns:
        Configured logger instance
    """
    if name in _loggers:
        return _loggers[name]

    logger = logging.getLogger(name)
    logger.setLevel(LOG_LEVEL)

    if not logger.handlers:
        logger.addHandler(_file_handler)
        logger.addHandler(_error_handler)
        if LOG_LEVEL == "DEBUG" or LOG_CONSOLE:
            logger.addHandler(_console_handler)

    # Prevent propagation to root logger
    logger.propagate = False

    _loggers[name] = logger
    return logger


def log_user_action(
    logger: logging.Logger,
    user_id: int,
    action: str,
    details: str = "",
    extra: Optional[Dict[str, Any]] = None
) -> None:
    """
    Log a user action with consistent format.

    Args:
        logger: Logger instance
        user_id: Telegram chat or user id
        action: Action being performed (e.g., "thought_saved", "thought_archived")
        details: Additional details
        extra: Extra fields for JSON logging
    """
    msg = f"[User:{user_id}] {action}"
    if details:
        msg += f" | {details}"

    if extra and LOG_JSON:
        logger.info(msg, extra=extra)
    else:
        logger.info(msg)


def log_error(
    logger: logging.Logger,
    error: Exception,
    context: str = "",
    extra: Optional[Dict[str, Any]] = None
) -> None:
    """
    Log an error with consistent format and traceback.

    Args:
        logger: Logger instance
        error: The exception that occurred
        context: Where the error occurred, e.g. "storage.set key=..."
        extra: Extra fields for JSON logging
    """
    parts = []
    if context:
        parts.append(f"[{context}]")
    parts.append(f"{type(error).__name__}: {error}")
    msg = " ".join(parts)

    if extra and LOG_JSON:
        logger.error(msg, exc_info=error, extra=extra)
    else:
        logger.error(msg, exc_info=error)


def log_storage_operation(
    logger: logging.Logger,
    operation: str,
    key: Optional[str] = None,
    count: Optional[int] = None,
    success: bool = True
) -> None:
    """
    Log a key-value storage operation.

    Successful operations go to DEBUG, failures to WARNING.

    Args:
        logger: Logger instance
        operation: get, set, remove, list, batch_get, batch_remove
        key: Storage key, when the operation targets one
        count: Number of keys, for batch operations
        success: Whether operation succeeded
    """
    parts = [f"KV:{operation.upper()}"]
    if key:
        parts.append(f"key={key}")
    if count is not None:
        parts.append(f"count={count}")
    parts.append(f"status={'OK' if success else 'FAILED'}")

    msg = " | ".join(parts)
    if success:
        logger.debug(msg)
    else:
        logger.warning(msg)


logging.basicConfig(
    level=logging.WARNING,
    format=LOG_FORMAT,
    datefmt=LOG_DATE_FORMAT
)

# Silence noisy third-party loggers
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("telegram").setLevel(logging.WARNING)
logging.getLogger("apscheduler").setLevel(logging.WARNING)
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
