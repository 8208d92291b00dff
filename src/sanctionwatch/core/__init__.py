"""Core services and utilities for sanctionwatch."""

from .logging import LogContext, get_logger, log_exception, setup_logging

__all__ = [
    "LogContext",
    "get_logger",
    "log_exception",
    "setup_logging",
]
