"""Stdout logging setup for applications embedding the Grove SDK.

Library modules only call ``get_logger``. An application opts in to Grove's
structured output by calling ``configure_logging`` with its
``LoggingSettings``; handlers it installed itself are left alone.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import IO, Any

from packages.grove_shared.config import LoggingSettings

from . import fields
from .context import bind_context, get_context

HANDLER_NAME = "grove"


class ContextFilter(logging.Filter):
    """Attach the task-local structured context to each record as ``context``."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.context = get_context()
        return True


class StructuredFormatter(logging.Formatter):
    """Render records as one JSON object per line or as ``key=value`` text."""

    def __init__(self, *, json_output: bool = True) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )
        self.json_output = json_output

    def format(self, record: logging.LogRecord) -> str:
        context = getattr(record, "context", None) or {}
        if self.json_output:
            return self._format_json(record, context)
        message = super().format(record)
        if not context:
            return message
        suffix = " ".join(f"{key}={value}" for key, value in sorted(context.items()))
        return f"{message} {suffix}"

    def _format_json(self, record: logging.LogRecord, context: dict[str, str]) -> str:
        payload: dict[str, Any] = {
            fields.TIMESTAMP: datetime.now(UTC).isoformat(),
            fields.LEVEL: record.levelname,
            fields.LOGGER: record.name,
            fields.MESSAGE: record.getMessage(),
            **context,
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, separators=(",", ":"))


def configure_logging(
    settings: LoggingSettings | None = None, *, stream: IO[str] | None = None
) -> logging.Handler:
    """Install (or replace) the Grove stdout handler on the root logger.

    Service and environment names from ``settings`` are bound into the
    logging context of the calling task.
    """
    resolved = settings or LoggingSettings()
    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == HANDLER_NAME:
            root.removeHandler(existing)

    handler = logging.StreamHandler(stream=stream or sys.stdout)
    handler.set_name(HANDLER_NAME)
    handler.setLevel(resolved.level)
    handler.addFilter(ContextFilter())
    handler.setFormatter(StructuredFormatter(json_output=resolved.json_output))
    root.addHandler(handler)
    root.setLevel(resolved.level)

    bind_context(
        **{fields.SERVICE: resolved.service, fields.ENVIRONMENT: resolved.environment}
    )
    return handler


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger using Python's standard logging hierarchy."""
    return logging.getLogger(name)
