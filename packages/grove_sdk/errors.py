"""Error models for Grove storage client failures."""

from __future__ import annotations

from dataclasses import dataclass
from typing import NoReturn

import httpx

from packages.grove_shared.http import response_text


@dataclass(frozen=True)
class StorageSdkError(Exception):
    """Base error type for Grove SDK failures."""

    message: str

    def __str__(self) -> str:
        """Return human-readable error message."""
        return self.message


@dataclass(frozen=True)
class InvariantError(StorageSdkError):
    """A logical condition assumed to hold at all times was violated."""


@dataclass(frozen=True)
class BackendError(StorageSdkError):
    """Non-success response or transport failure talking to the backend."""

    status_code: int = 0
    response_body: str = ""

    @classmethod
    def from_response(cls, response: httpx.Response) -> BackendError:
        """Build one error from the decoded ``message`` or the raw body."""
        body = response_text(response)
        message = body
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict) and isinstance(payload.get("message"), str):
            message = payload["message"]
        return cls(
            message=message,
            status_code=response.status_code,
            response_body=body,
        )

    @classmethod
    def from_exception(cls, exc: BaseException) -> BackendError:
        """Build one error whose message joins the exception cause chain."""
        messages: list[str] = []
        current: BaseException | None = exc
        while current is not None:
            messages.append(str(current))
            current = current.__cause__
        return cls(message=" due to ".join(messages))


@dataclass(frozen=True)
class StorageClientError(BackendError):
    """Upload, edit, delete, status or allocation request failed."""


@dataclass(frozen=True)
class AuthorizationError(BackendError):
    """Challenge request or signed-challenge submission was rejected."""


@dataclass(frozen=True)
class PropagationError(StorageSdkError):
    """Resource did not reach the expected status."""

    storage_key: str = ""
    uri: str = ""
    status: str | None = None


@dataclass(frozen=True)
class PropagationTimeoutError(PropagationError):
    """Resource did not reach a terminal status within the timeout."""

    elapsed_seconds: float = 0.0


def invariant(condition: object, message: str) -> None:
    """Raise ``InvariantError`` when ``condition`` is falsy."""
    if not condition:
        raise InvariantError(message=message)


def never(message: str = "Unexpected call to never()") -> NoReturn:
    """Raise ``InvariantError`` for a branch that must be unreachable."""
    raise InvariantError(message=message)
