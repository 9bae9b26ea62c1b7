"""
Logging utilities for the ads publisher.

Provides colourised console logging for interactive runs, a structured JSON
formatter for CI/cron runs, a per-run identifier, and an entry/exit decorator
used on the validate and publish stages.

Features:
    - Structured JSON logging when LOG_FORMAT=json
    - Run ID tracking so every line of one publish run can be grouped
    - Entry/exit decorator with timing
    - Colorized console output via coloredlogs

Example usage:
    >>> from ads_publisher.utils.logging import get_logger, log_function_call
    >>>
    >>> logger = get_logger(__name__)
    >>>
    >>> @log_function_call
    >>> def discover(media_dir: str) -> list:
    >>>     logger.info("Scanning media", extra={"media_dir": media_dir})
    >>>     return []
"""

import logging
import functools
import json
import os
import uuid
from typing import Any, Callable, TypeVar, cast, Optional, Dict
from datetime import datetime, timezone
from contextvars import ContextVar

import coloredlogs

# Type variable for generic decorator typing
F = TypeVar("F", bound=Callable[..., Any])

_run_id: ContextVar[Optional[str]] = ContextVar("run_id", default=None)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Attributes present on every LogRecord; anything else came in via extra=
_RESERVED_RECORD_ATTRS = frozenset(
    [
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "taskName",
        "exc_info",
        "exc_text",
        "stack_info",
        "message",
        "asctime",
    ]
)


# ============================================================================
# Run ID Management
# ============================================================================

def get_run_id() -> str:
    """
    Get the current run ID, generating one on first use.

    Returns:
        Run ID for the current context
    """
    run_id = _run_id.get()
    if run_id is None:
        run_id = uuid.uuid4().hex[:12]
        _run_id.set(run_id)
    return run_id


def set_run_id(run_id: str) -> None:
    """Set the run ID for the current context."""
    _run_id.set(run_id)


def clear_run_id() -> None:
    """Clear the run ID for the current context."""
    _run_id.set(None)


# ============================================================================
# JSON Formatter
# ============================================================================

class JSONFormatter(logging.Formatter):
    """
    JSON log formatter for structured logging.

    Example output:
        {
            "timestamp": "2026-10-18T09:30:15.123456Z",
            "level": "INFO",
            "logger": "ads_publisher.publisher.publisher",
            "message": "Uploaded game1-trailer.mp4",
            "run_id": "3f2a9c0d1b7e",
            "extra": {"key": "ads/media/game1-trailer.mp4"}
        }
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "run_id": get_run_id(),
        }

        extra_fields = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_RECORD_ATTRS
        }
        if extra_fields:
            log_data["extra"] = extra_fields

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(log_data, default=str)


def setup_logging(level: str = "INFO", enable_colors: bool = True) -> None:
    """
    Configure global logging settings for the application.

    Uses the JSON formatter when the LOG_FORMAT environment variable is
    ``json``, colourised text otherwise.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        enable_colors: Whether to enable colorized console output (default: True)

    Example:
        >>> setup_logging(level="DEBUG")
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    json_output = os.getenv("LOG_FORMAT", "text").lower() == "json"

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)

    if json_output:
        console_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(console_handler)
    elif enable_colors:
        coloredlogs.install(
            level=log_level,
            fmt=LOG_FORMAT,
            datefmt=LOG_DATE_FORMAT,
            logger=root_logger,
        )
    else:
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        root_logger.addHandler(console_handler)

    # botocore is very chatty at DEBUG
    logging.getLogger("botocore").setLevel(max(log_level, logging.INFO))
    logging.getLogger("urllib3").setLevel(max(log_level, logging.INFO))


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the specified name.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)


def log_function_call(func: F) -> F:
    """
    Decorator that logs function entry and exit with timing.

    Entry and exit are logged at DEBUG with the call arguments and return
    value; exceptions are logged at ERROR with traceback and re-raised.

    Args:
        func: Function to be decorated

    Returns:
        Wrapped function with logging

    Example:
        >>> @log_function_call
        >>> def validate_manifest(manifest: dict) -> None:
        >>>     ...
        >>>
        >>> # 2026-10-18 10:30:15 - module - DEBUG - ENTER validate_manifest(...)
        >>> # 2026-10-18 10:30:15 - module - DEBUG - EXIT validate_manifest -> None (0.00s)
    """
    logger = get_logger(func.__module__)

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        run_id = get_run_id()

        arg_names = func.__code__.co_varnames[: func.__code__.co_argcount]
        args_repr = [f"{name}={_short_repr(value)}" for name, value in zip(arg_names, args)]
        kwargs_repr = [f"{key}={_short_repr(value)}" for key, value in kwargs.items()]
        all_args = ", ".join(args_repr + kwargs_repr)

        logger.debug(
            f"ENTER {func.__name__}({all_args})",
            extra={
                "function": func.__name__,
                "run_id": run_id,
                "event": "function_entry",
            },
        )

        start_time = datetime.now()

        try:
            result = func(*args, **kwargs)
        except Exception as error:
            execution_time = (datetime.now() - start_time).total_seconds()
            logger.error(
                f"ERROR {func.__name__} raised {type(error).__name__}: {error}",
                extra={
                    "function": func.__name__,
                    "duration_seconds": execution_time,
                    "run_id": run_id,
                    "event": "function_error",
                    "error_type": type(error).__name__,
                },
                exc_info=True,
            )
            raise

        execution_time = (datetime.now() - start_time).total_seconds()
        logger.debug(
            f"EXIT {func.__name__} -> {_short_repr(result)} ({execution_time:.2f}s)",
            extra={
                "function": func.__name__,
                "duration_seconds": execution_time,
                "run_id": run_id,
                "event": "function_exit",
            },
        )
        return result

    return cast(F, wrapper)


def _short_repr(value: Any, limit: int = 120) -> str:
    # Manifests can be large; keep entry/exit lines readable
    text = repr(value)
    if len(text) > limit:
        return text[: limit - 3] + "..."
    return text
