"""Backend request helpers mapping HTTP failures to SDK errors."""

from __future__ import annotations

from typing import Any

import httpx

from packages.grove_sdk.errors import BackendError
from packages.grove_shared.http import AsyncHttpClient, HttpRequestError
from packages.grove_shared.logging import fields, get_logger, log_context

logger = get_logger(__name__)


async def send(
    http: AsyncHttpClient,
    method: str,
    url: str,
    *,
    error_type: type[BackendError],
    allow_error: bool = False,
    **kwargs: Any,
) -> httpx.Response:
    """Issue one backend request.

    Transport failures raise ``error_type`` chained to the cause. Non-success
    responses raise ``error_type`` built from the response unless
    ``allow_error`` is set, in which case the response is returned as is.
    """
    with log_context({fields.METHOD: method, fields.URL: url}):
        try:
            response = await http.request(method, url, **kwargs)
        except HttpRequestError as exc:
            logger.debug("Backend request failed: %s", exc)
            raise error_type.from_exception(exc) from exc
        logger.debug("Backend responded %d", response.status_code)

    if response.is_error and not allow_error:
        raise error_type.from_response(response)
    return response


def read_json(response: httpx.Response, *, error_type: type[BackendError]) -> Any:
    """Decode a successful response body, mapping undecodable bodies to ``error_type``."""
    try:
        return response.json()
    except ValueError as exc:
        raise error_type.from_response(response) from exc
