"""Shared asynchronous HTTP client over httpx.

Responses come back whatever their status; callers decide which statuses
are failures. Only transport failures are raised, as ``HttpRequestError``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx

from .errors import HttpRequestError


def response_text(response: httpx.Response) -> str:
    """Return response text without raising secondary decode errors."""
    try:
        return response.text
    except (httpx.ResponseNotRead, UnicodeDecodeError, LookupError):
        return ""


class AsyncHttpClient:
    """Owns (or borrows) one ``httpx.AsyncClient`` for a storage client."""

    def __init__(
        self,
        *,
        timeout_seconds: float = 30.0,
        headers: Mapping[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Wrap ``client`` when given, else create one closed by ``aclose``."""
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout_seconds,
            headers=dict(headers or {}),
            transport=transport,
        )

    async def aclose(self) -> None:
        """Close underlying transport resources when owned."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> AsyncHttpClient:
        """Enter async context manager scope."""
        return self

    async def __aexit__(self, *_: object) -> None:
        """Exit async context manager scope and close client."""
        await self.aclose()

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Issue one request; transport failures raise ``HttpRequestError``."""
        try:
            return await self._client.request(method=method, url=url, **kwargs)
        except httpx.RequestError as exc:
            raise HttpRequestError(
                message=f"HTTP request failed for {method.upper()} {url}",
                method=method.upper(),
                url=url,
                cause=exc,
            ) from exc
