"""Tests for structured logging helpers and public API invocation logging."""

from __future__ import annotations

import asyncio
import io
import json
import logging
from dataclasses import dataclass

import pytest

from packages.grove_shared.config import LoggingSettings
from packages.grove_shared.logging import (
    ContextFilter,
    StructuredFormatter,
    bind_context,
    clear_context,
    configure_logging,
    get_context,
    log_context,
    public_api_logged,
)
from packages.grove_shared.logging.config import HANDLER_NAME

LOGGER_NAME = "tests.grove.public_api"


@dataclass(frozen=True)
class _FrozenError(Exception):
    message: str


class _Uploader:
    @public_api_logged(
        logger=logging.getLogger(LOGGER_NAME),
        component_id="uploader",
        id_fields=("storage_key",),
    )
    async def upload(self, storage_key: str, *, fail: bool = False) -> str:
        if fail:
            raise RuntimeError("backend down")
        return storage_key.upper()

    @public_api_logged(logger=logging.getLogger(LOGGER_NAME), component_id="uploader")
    def resolve(self, storage_key: str) -> str:
        return f"https://gateway.test/{storage_key}"


def _records(caplog: pytest.LogCaptureFixture) -> list[logging.LogRecord]:
    return [record for record in caplog.records if record.name == LOGGER_NAME]


def test_log_context_restores_previous_values() -> None:
    """Nested context scopes should be undone on exit."""
    clear_context()
    bind_context(service="grove", skipped=None)
    with log_context({"storage_key": "abc", "progress": 50}):
        assert get_context() == {
            "service": "grove",
            "storage_key": "abc",
            "progress": "50",
        }
    assert get_context() == {"service": "grove"}
    clear_context()


def test_log_context_passes_frozen_exceptions_through() -> None:
    """Frozen dataclass exceptions should leave the scope with their own type."""
    clear_context()

    with pytest.raises(_FrozenError) as exc_info:
        with log_context({"storage_key": "abc"}):
            raise _FrozenError(message="denied")

    assert exc_info.value.message == "denied"
    assert get_context() == {}


def test_log_context_passes_frozen_exceptions_through_async_tasks() -> None:
    """Frozen errors raised in a coroutine scope should reach ``asyncio.run``."""

    async def _run() -> None:
        with log_context({"action": "delete"}):
            await asyncio.sleep(0)
            raise _FrozenError(message="unauthorized")

    with pytest.raises(_FrozenError, match="unauthorized"):
        asyncio.run(_run())


def test_public_api_logged_emits_invocation_and_completion(
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Async calls should log invocation and successful completion with references."""
    caplog.set_level(logging.INFO, logger=LOGGER_NAME)
    filter_ = ContextFilter()
    logging.getLogger(LOGGER_NAME).addFilter(filter_)
    try:
        result = asyncio.run(_Uploader().upload("abc"))
    finally:
        logging.getLogger(LOGGER_NAME).removeFilter(filter_)

    assert result == "ABC"
    invocation, completion = _records(caplog)
    assert invocation.getMessage() == "Public API invocation"
    assert invocation.context["api_name"] == "upload"
    assert invocation.context["storage_key"] == "abc"
    assert completion.levelno == logging.INFO
    assert completion.context["success"] == "True"
    assert completion.context["errors"] == "[]"


def test_public_api_logged_reraises_and_logs_failure(
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Failures should be logged as warnings and re-raised unchanged."""
    caplog.set_level(logging.INFO, logger=LOGGER_NAME)
    filter_ = ContextFilter()
    logging.getLogger(LOGGER_NAME).addFilter(filter_)
    try:
        with pytest.raises(RuntimeError, match="backend down"):
            asyncio.run(_Uploader().upload(storage_key="abc", fail=True))
    finally:
        logging.getLogger(LOGGER_NAME).removeFilter(filter_)

    completion = _records(caplog)[-1]
    assert completion.levelno == logging.WARNING
    assert completion.context["success"] == "False"
    assert completion.context["errors"] == "['RuntimeError: backend down']"


def test_public_api_logged_wraps_sync_functions(
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Synchronous methods should stay synchronous when decorated."""
    caplog.set_level(logging.INFO, logger=LOGGER_NAME)

    assert _Uploader().resolve("abc") == "https://gateway.test/abc"
    assert [record.getMessage() for record in _records(caplog)] == [
        "Public API invocation",
        "Public API completion",
    ]


def test_structured_formatter_renders_context_in_both_modes() -> None:
    """JSON and plain output should both include bound context fields."""
    record = logging.LogRecord(
        name="grove.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="uploaded %s",
        args=("abc",),
        exc_info=None,
    )
    record.context = {"storage_key": "abc"}

    payload = json.loads(StructuredFormatter(json_output=True).format(record))
    plain = StructuredFormatter(json_output=False).format(record)

    assert payload["message"] == "uploaded abc"
    assert payload["level"] == "INFO"
    assert payload["storage_key"] == "abc"
    assert plain.endswith("uploaded abc storage_key=abc")


def test_configure_logging_replaces_only_its_own_handler() -> None:
    """Repeated setup should keep one Grove handler next to foreign handlers."""
    root = logging.getLogger()
    previous_handlers, previous_level = list(root.handlers), root.level
    foreign = logging.NullHandler()
    root.addHandler(foreign)
    stream = io.StringIO()
    settings = LoggingSettings(level="DEBUG", service="uploader", environment="test")
    try:
        configure_logging(settings, stream=stream)
        configure_logging(settings, stream=stream)
        logging.getLogger("grove.test").debug("configured")

        names = [handler.get_name() for handler in root.handlers]
        assert names.count(HANDLER_NAME) == 1
        assert foreign in root.handlers
        payload = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert payload["message"] == "configured"
        assert payload["service"] == "uploader"
        assert payload["environment"] == "test"
    finally:
        root.handlers[:] = previous_handlers
        root.setLevel(previous_level)
        clear_context()
