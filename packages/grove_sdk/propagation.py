"""Polling for asynchronous backend propagation of writes."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Collection

from packages.grove_sdk.errors import PropagationError, PropagationTimeoutError
from packages.grove_sdk.types import Status, StatusResponse
from packages.grove_shared.logging import fields, get_logger, log_context

logger = get_logger(__name__)

StatusFetcher = Callable[[str], Awaitable[StatusResponse]]


async def wait_until_status(
    fetch_status: StatusFetcher,
    *,
    storage_key: str,
    uri: str,
    timeout_seconds: float,
    interval_seconds: float,
    targets: Collection[Status] = (Status.DONE,),
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> StatusResponse:
    """Poll ``fetch_status`` until the resource reaches one of ``targets``.

    A failure status (``error_*`` or ``unauthorized``) ends polling at once.
    Errors raised by ``fetch_status`` propagate without retry. When the time
    since the first query exceeds ``timeout_seconds`` before a terminal status
    is seen, ``PropagationTimeoutError`` is raised.
    """
    started = clock()
    with log_context({fields.STORAGE_KEY: storage_key}):
        while True:
            current = await fetch_status(storage_key)
            with log_context(
                {fields.STATUS: current.status.value, fields.PROGRESS: current.progress}
            ):
                logger.debug("Polled status")

            if current.status in targets:
                return current
            if current.status.is_failure:
                raise PropagationError(
                    message=f"Propagation of {uri} failed with status '{current.status.value}'",
                    storage_key=storage_key,
                    uri=uri,
                    status=current.status.value,
                )

            elapsed = clock() - started
            remaining = timeout_seconds - elapsed
            if remaining <= 0:
                raise PropagationTimeoutError(
                    message=(
                        f"Timed out after {elapsed:.2f}s waiting for {uri} to propagate "
                        f"(last status '{current.status.value}')"
                    ),
                    storage_key=storage_key,
                    uri=uri,
                    status=current.status.value,
                    elapsed_seconds=elapsed,
                )
            await sleep(min(interval_seconds, remaining))
