"""
Centralized logging utilities for task streaming.

This module provides the structlog setup and helpers shared by submission,
streaming and the action entry point:
- Structured logging with contextual information
- Credential redaction applied to every log event
- Operation timing via decorator or async context manager
- Error classification for the final failure report
"""

from __future__ import annotations

import functools
import logging
import sys
import time
from collections.abc import Awaitable, Callable, MutableMapping
from contextlib import asynccontextmanager
from typing import Any, ParamSpec, TypeVar

import httpx
import structlog
from pydantic import ValidationError

from .exceptions import (
    ConfigurationError,
    StreamConnectionError,
    SubmissionError,
    TransportError,
)
from .sanitize import redact_credentials

# Type variables for generic decorators
P = ParamSpec("P")
T = TypeVar("T")
AsyncCallable = Callable[P, Awaitable[T]]


def redact_event_dict(
    _logger: Any, _method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """structlog processor that strips bearer tokens from string values."""
    for key, value in event_dict.items():
        if isinstance(value, str):
            event_dict[key] = redact_credentials(value)
    return event_dict


def configure_structlog(*, colors: bool = False) -> None:
    """Install the structlog processor chain."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            redact_event_dict,
            structlog.dev.ConsoleRenderer(colors=colors),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(level: str | int = "INFO", *, colors: bool = False) -> None:
    """Configure stdlib logging for the action run, then structlog."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(
        level=level, format="%(message)s", stream=sys.stdout, force=True
    )
    configure_structlog(colors=colors)


# Configure structured logging
configure_structlog()

logger = structlog.get_logger(__name__)


def classify_error(error: Exception) -> str:
    """
    Classify an error into a category for structured failure logs.

    Args:
        error: The exception to classify

    Returns:
        Error category name
    """
    if isinstance(error, StreamConnectionError):
        return "stream_connection_error"
    if isinstance(error, SubmissionError):
        return "submission_error"
    if isinstance(error, TransportError | httpx.HTTPError):
        return "transport_error"
    if isinstance(error, ConfigurationError | ValidationError):
        return "configuration_error"
    if isinstance(error, TimeoutError):
        return "timeout_error"
    if isinstance(error, ConnectionError | OSError):
        return "connection_error"
    return "unknown_error"


def _elapsed_ms(start_time: float) -> float:
    return round((time.perf_counter() - start_time) * 1000, 2)


def log_operation(
    operation: str,
    *,
    context: dict[str, Any] | None = None,
) -> Callable[[AsyncCallable[P, T]], AsyncCallable[P, T]]:
    """
    Decorator for logging async operations with structured context.

    Args:
        operation: Description of the operation being performed
        context: Additional context to include in logs

    Returns:
        Decorated function with logging and timing
    """
    def decorator(func: AsyncCallable[P, T]) -> AsyncCallable[P, T]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            operation_logger = logger.bind(
                operation=operation,
                function=func.__name__,
                **(context or {}),
            )
            operation_logger.debug("Operation started")
            start_time = time.perf_counter()

            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                operation_logger.error(
                    "Operation failed",
                    error_type=type(e).__name__,
                    error_message=str(e),
                    duration_ms=_elapsed_ms(start_time),
                )
                raise

            operation_logger.debug(
                "Operation completed successfully",
                duration_ms=_elapsed_ms(start_time),
            )
            return result

        return wrapper
    return decorator


@asynccontextmanager
async def operation_context(
    operation: str,
    *,
    context: dict[str, Any] | None = None,
):
    """
    Async context manager for operation logging.

    Args:
        operation: Description of the operation
        context: Additional context for logging

    Yields:
        Bound logger for the operation
    """
    operation_logger = logger.bind(
        operation=operation,
        **(context or {}),
    )

    operation_logger.debug("Operation started")
    start_time = time.perf_counter()

    try:
        yield operation_logger
    except Exception as e:
        operation_logger.error(
            "Operation failed",
            error_type=type(e).__name__,
            error_message=str(e),
            duration_ms=_elapsed_ms(start_time),
        )
        raise

    operation_logger.debug(
        "Operation completed successfully", duration_ms=_elapsed_ms(start_time)
    )
