"""Per-request logging fields carried on a ``contextvars`` variable.

Sync requests on worker threads and async requests on one event loop each see
their own fields. Values keep their native types until a formatter renders
them, so ``content_length`` stays an integer in JSON output.
"""

from __future__ import annotations

from contextvars import ContextVar, Token
from typing import Mapping

_LOG_CONTEXT: ContextVar[dict[str, object]] = ContextVar(
    "simplefiletx_log_context", default={}
)


def _merged(values: Mapping[str, object]) -> dict[str, object]:
    current = dict(_LOG_CONTEXT.get())
    current.update({str(key): value for key, value in values.items() if value is not None})
    return current


def get_context() -> dict[str, object]:
    """Return a shallow copy of the bound logging fields."""
    return dict(_LOG_CONTEXT.get())


def bind_context(**values: object) -> None:
    """Bind values into the current context; ``None`` is skipped."""
    _LOG_CONTEXT.set(_merged(values))


def clear_context(*keys: str) -> None:
    """Drop selected keys, or every key when none are named."""
    if not keys:
        _LOG_CONTEXT.set({})
        return
    _LOG_CONTEXT.set(
        {key: value for key, value in _LOG_CONTEXT.get().items() if key not in keys}
    )


class log_context:
    """Bind fields for one ``with`` block and restore the outer set on exit.

    Exceptions leaving the block are never touched, so the caller receives
    exactly what was raised inside it.
    """

    def __init__(self, values: Mapping[str, object]) -> None:
        self._values = values
        self._tokens: list[Token[dict[str, object]]] = []

    def __enter__(self) -> None:
        self._tokens.append(_LOG_CONTEXT.set(_merged(self._values)))

    def __exit__(self, *_: object) -> None:
        _LOG_CONTEXT.reset(self._tokens.pop())
