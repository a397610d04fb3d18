"""Public logging API for Grove packages.

This package wraps Python's ``logging`` module with task-local structured
context, an opt-in stdout handler and public API invocation logging.
"""

from .config import ContextFilter, StructuredFormatter, configure_logging, get_logger
from .context import LogContext, bind_context, clear_context, get_context, log_context
from .public_api import (
    CompletionContext,
    InvocationContext,
    PublicApiLoggingConcern,
    public_api_logged,
)

__all__ = [
    "bind_context",
    "clear_context",
    "CompletionContext",
    "configure_logging",
    "ContextFilter",
    "get_context",
    "get_logger",
    "InvocationContext",
    "log_context",
    "LogContext",
    "PublicApiLoggingConcern",
    "public_api_logged",
    "StructuredFormatter",
]
