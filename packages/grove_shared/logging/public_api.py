"""Invocation logging helpers for public SDK methods.

``public_api_logged`` wraps one public method (sync or ``async``) and emits a
structured invocation record before the call and a completion record after
it, carrying duration and a one-line error summary on failure. Exceptions are
always re-raised unchanged.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from functools import wraps
from time import perf_counter
from typing import Any, Callable, Mapping

from . import fields
from .context import log_context


@dataclass(frozen=True)
class InvocationContext:
    """Structured metadata describing one public API invocation."""

    component_id: str
    api_name: str
    references: Mapping[str, str]


@dataclass(frozen=True)
class CompletionContext:
    """Structured metadata describing one completed public API invocation."""

    invocation: InvocationContext
    success: bool
    duration_ms: float
    errors: list[str]


class PublicApiLoggingConcern:
    """Logging concern implementation for invocation/completion events."""

    def __init__(self, *, logger: Any) -> None:
        self._logger = logger

    def on_invocation(self, context: InvocationContext) -> None:
        """Emit standardized structured invocation-start log."""
        with log_context(_invocation_log_context(context)):
            self._logger.info("Public API invocation")

    def on_completion(self, context: CompletionContext) -> None:
        """Emit standardized structured completion log."""
        payload = _invocation_log_context(context.invocation)
        payload.update(
            {
                fields.EVENT: fields.PUBLIC_API_COMPLETION_EVENT,
                fields.SUCCESS: context.success,
                fields.DURATION_MS: context.duration_ms,
                fields.ERRORS: context.errors,
            }
        )
        with log_context(payload):
            if context.success:
                self._logger.info("Public API completion")
            else:
                self._logger.warning("Public API completion")


def public_api_logged(
    *,
    logger: Any,
    component_id: str,
    api_name: str | None = None,
    id_fields: tuple[str, ...] = (),
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorate one public API method with invocation/completion logging.

    ``id_fields`` names arguments whose values are attached to both records as
    references; they are matched against keyword arguments first and then
    against positional arguments by signature position.
    """
    concern = PublicApiLoggingConcern(logger=logger)

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        method_name = api_name or func.__name__
        signature = inspect.signature(func)

        def _invocation(args: tuple[Any, ...], kwargs: dict[str, Any]) -> InvocationContext:
            return InvocationContext(
                component_id=component_id,
                api_name=method_name,
                references=_references(signature, id_fields, args, kwargs),
            )

        def _complete(
            invocation: InvocationContext, started: float, exc: Exception | None
        ) -> None:
            errors = [] if exc is None else [f"{type(exc).__name__}: {exc}"]
            concern.on_completion(
                CompletionContext(
                    invocation=invocation,
                    success=exc is None,
                    duration_ms=round((perf_counter() - started) * 1000.0, 3),
                    errors=errors,
                )
            )

        if inspect.iscoroutinefunction(func):

            @wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                invocation = _invocation(args, kwargs)
                concern.on_invocation(invocation)
                started = perf_counter()
                try:
                    result = await func(*args, **kwargs)
                except Exception as exc:
                    _complete(invocation, started, exc)
                    raise
                _complete(invocation, started, None)
                return result

            return async_wrapper

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            invocation = _invocation(args, kwargs)
            concern.on_invocation(invocation)
            started = perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                _complete(invocation, started, exc)
                raise
            _complete(invocation, started, None)
            return result

        return wrapper

    return decorator


def _references(
    signature: inspect.Signature,
    id_fields: tuple[str, ...],
    args: tuple[Any, ...],
    kwargs: Mapping[str, Any],
) -> dict[str, str]:
    """Collect non-empty identifier arguments for log references."""
    if not id_fields:
        return {}
    try:
        bound = signature.bind_partial(*args, **kwargs)
    except TypeError:
        bound = None
    values = dict(bound.arguments) if bound is not None else dict(kwargs)
    return {
        name: str(values[name])
        for name in id_fields
        if values.get(name) not in (None, "")
    }


def _invocation_log_context(context: InvocationContext) -> dict[str, object]:
    """Build common structured fields for one invocation event."""
    return {
        fields.EVENT: fields.PUBLIC_API_INVOCATION_EVENT,
        fields.COMPONENT_ID: context.component_id,
        fields.API_NAME: context.api_name,
        **context.references,
    }
