"""Structured logging configuration for sanctionwatch.

Provides structured JSON logging with context propagation and log level
management using structlog.
"""
# ruff: noqa: ARG001  # Processor signatures required by structlog API

import logging
import sys
from typing import Any, Literal

import structlog
from structlog.types import Processor

from sanctionwatch.config.settings import get_settings

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def add_environment_info(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Add environment information to log entries."""
    settings = get_settings()
    event_dict["environment"] = settings.environment
    return event_dict


def setup_logging(
    log_level: LogLevel | None = None,
    json_format: bool | None = None,
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for the application.

    Args:
        log_level: Override log level (default from settings)
        json_format: Use JSON output (default: True in production, False otherwise)
        add_timestamp: Include timestamp in log entries
    """
    settings = get_settings()

    effective_level = log_level or settings.log_level
    effective_json = (
        json_format if json_format is not None else settings.environment == "production"
    )

    numeric_level = getattr(logging, effective_level.upper(), logging.INFO)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        add_environment_info,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if add_timestamp:
        shared_processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    renderer: Processor
    if effective_json:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[structlog.stdlib.add_logger_name, *shared_processors],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    # Route standard library logging through the same renderer
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(numeric_level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (uses caller module if None)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


class LogContext:
    """Context manager for adding temporary log context.

    Example:
        with LogContext(operation="refresh", list_id="OFAC-SDN"):
            logger.info("refresh_started")
            # All logs in this block will include operation and list_id
    """

    def __init__(self, **kwargs: Any):
        """Initialize with context values to add."""
        self.context = kwargs

    def __enter__(self) -> "LogContext":
        """Enter context and bind values."""
        structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit context and unbind values."""
        structlog.contextvars.unbind_contextvars(*self.context.keys())


def log_exception(
    logger: structlog.stdlib.BoundLogger,
    exc: Exception,
    **kwargs: Any,
) -> None:
    """Log an exception with full context."""
    logger.exception(
        "exception_occurred",
        error_type=type(exc).__name__,
        error_message=str(exc),
        **kwargs,
    )
