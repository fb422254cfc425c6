"""Stdout logging setup for hosts embedding the file transport.

The transport emits two events through ``get_logger``: ``file_response`` at
DEBUG once a response is synthesized, and ``file_request_failed`` at WARNING
before an error is re-raised. ``configure_logging`` attaches a handler to the
package logger only; the host's root logger is left alone.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from string import Formatter
from typing import TYPE_CHECKING, Any

from . import fields
from .context import bind_context, get_context

if TYPE_CHECKING:
    from packages.simplefiletx.config import LoggingSettings

PACKAGE_LOGGER = __name__.rsplit(".", 2)[0]

_EVENT_SUMMARIES = {
    fields.FILE_RESPONSE_EVENT: (
        "{method} {url} -> {path} ({content_length} bytes via {length_source})"
    ),
    fields.FILE_REQUEST_FAILED_EVENT: "{method} {url} failed with {error_type}: {error}",
}


def _ordered(context: dict[str, object]) -> dict[str, object]:
    """Request fields in canonical order, then the rest sorted by name."""
    ordered = {key: context[key] for key in fields.REQUEST_FIELDS if key in context}
    ordered.update(
        {key: context[key] for key in sorted(context) if key not in ordered}
    )
    return ordered


def summarize_event(context: dict[str, object]) -> tuple[str, set[str]]:
    """Render the bound event as one phrase.

    Returns the phrase and the field names it consumed. Unknown events, or
    events missing a field their phrase needs, render as ``""``.
    """
    template = _EVENT_SUMMARIES.get(str(context.get(fields.EVENT, "")))
    if template is None:
        return "", set()
    names = {name for _, name, _, _ in Formatter().parse(template) if name}
    if not names.issubset(context):
        return "", set()
    return template.format_map(context), names | {fields.EVENT}


class ContextFilter(logging.Filter):
    """Attach the bound request fields to each record as ``record.context``."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.context = get_context()
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line; request fields follow the core fields in order."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            fields.TIMESTAMP: datetime.now(UTC).isoformat(),
            fields.LEVEL: record.levelname,
            fields.LOGGER: record.name,
            fields.MESSAGE: record.getMessage(),
        }
        context = getattr(record, "context", None)
        if isinstance(context, dict):
            payload.update(_ordered(context))
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, separators=(",", ":"))


class PlainFormatter(logging.Formatter):
    """Readable lines: message, an event summary, then leftover ``key=value``.

    ``File response synthesized: GET file:/a -> /srv/a (12 bytes via stat)``
    """

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = getattr(record, "context", None)
        if not isinstance(context, dict) or not context:
            return line
        summary, consumed = summarize_event(context)
        if summary:
            line = f"{line}: {summary}"
        rest = [
            f"{key}={value}"
            for key, value in _ordered(context).items()
            if key not in consumed
        ]
        return " ".join([line, *rest])


class _TransportHandler(logging.StreamHandler):
    """Stdout handler owned by ``configure_logging``."""


def configure_logging(
    *,
    level: str = "INFO",
    json_output: bool = True,
    service: str | None = None,
    environment: str | None = None,
) -> logging.Logger:
    """Route package logs to stdout and return the package logger.

    A handler from an earlier call is replaced; handlers the host added are
    kept. Records stop propagating to the root logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in [h for h in logger.handlers if isinstance(h, _TransportHandler)]:
        logger.removeHandler(handler)
    logger.setLevel(level.upper())

    handler = _TransportHandler(stream=sys.stdout)
    handler.addFilter(ContextFilter())
    handler.setFormatter(JsonFormatter() if json_output else PlainFormatter())
    logger.addHandler(handler)
    logger.propagate = False

    bind_context(**{fields.SERVICE: service, fields.ENVIRONMENT: environment})
    return logger


def configure_logging_from_settings(settings: LoggingSettings) -> logging.Logger:
    """Apply one ``logging`` settings section."""
    return configure_logging(
        level=settings.level,
        json_output=settings.json_output,
        service=settings.service,
        environment=settings.environment,
    )


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger from the standard logging hierarchy."""
    return logging.getLogger(name)
