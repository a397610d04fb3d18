"""Task-local structured logging context.

Fields bound here are attached to every record emitted by the Grove loggers
through ``ContextFilter``. Each asyncio task sees its own copy.
"""

from __future__ import annotations

from contextvars import ContextVar, Token
from types import TracebackType
from typing import Mapping

_LOG_CONTEXT: ContextVar[dict[str, str]] = ContextVar("grove_log_context", default={})


def get_context() -> dict[str, str]:
    """Return a copy of the fields bound in the current task."""
    return dict(_LOG_CONTEXT.get())


def bind_context(**values: object) -> None:
    """Bind stringified values for the rest of the current task.

    ``None`` values are skipped.
    """
    current = _LOG_CONTEXT.get().copy()
    current.update(
        {key: str(value) for key, value in values.items() if value is not None}
    )
    _LOG_CONTEXT.set(current)


def clear_context() -> None:
    """Drop every field bound in the current task."""
    _LOG_CONTEXT.set({})


class LogContext:
    """Scope binding fields for the duration of a ``with`` block.

    Exceptions leaving the block are passed through untouched, so frozen
    exception instances keep their type.
    """

    def __init__(self, values: Mapping[str, object]) -> None:
        self._values = {
            key: value for key, value in values.items() if value is not None
        }
        self._token: Token[dict[str, str]] | None = None

    def __enter__(self) -> None:
        current = _LOG_CONTEXT.get().copy()
        current.update({key: str(value) for key, value in self._values.items()})
        self._token = _LOG_CONTEXT.set(current)

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool:
        if self._token is not None:
            _LOG_CONTEXT.reset(self._token)
            self._token = None
        return False


def log_context(values: Mapping[str, object]) -> LogContext:
    """Bind ``values`` until the returned scope exits."""
    return LogContext(values)
