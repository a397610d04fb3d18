"""Typed errors for the shared asynchronous HTTP client."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class HttpError(Exception):
    """Base error type for shared HTTP helper failures."""

    message: str

    def __str__(self) -> str:
        """Return the human-readable error message."""
        return self.message


@dataclass(frozen=True)
class HttpRequestError(HttpError):
    """Request never produced a response (connect, timeout, protocol failure)."""

    method: str
    url: str
    cause: Exception
