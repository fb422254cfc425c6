"""Logging helpers for the file transport.

Wraps Python's ``logging`` with stdout defaults and contextvar-bound fields.
"""

from .config import (
    ContextFilter,
    PACKAGE_LOGGER,
    JsonFormatter,
    PlainFormatter,
    configure_logging,
    configure_logging_from_settings,
    get_logger,
    summarize_event,
)
from .context import bind_context, clear_context, get_context, log_context

__all__ = [
    "bind_context",
    "clear_context",
    "configure_logging",
    "configure_logging_from_settings",
    "ContextFilter",
    "get_context",
    "get_logger",
    "JsonFormatter",
    "log_context",
    "PACKAGE_LOGGER",
    "PlainFormatter",
    "summarize_event",
]
