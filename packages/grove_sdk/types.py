"""Value types shared across Grove SDK modules."""

from __future__ import annotations

import json
import mimetypes
from collections.abc import AsyncIterator
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Any, Literal, Protocol

LENS_SCHEME = "lens"
LENS_URI_PREFIX = f"{LENS_SCHEME}://"

DEFAULT_CONTENT_TYPE = "application/octet-stream"
DEFAULT_CHUNK_SIZE = 64 * 1024

Action = Literal["edit", "delete"]


@dataclass(frozen=True, slots=True)
class Resource:
    """One allocated storage slot with its public URI and gateway URL."""

    uri: str
    storage_key: str
    gateway_url: str

    @classmethod
    def for_key(cls, storage_key: str, *, backend: str) -> Resource:
        """Derive URI and gateway URL from one storage key."""
        return cls(
            uri=f"{LENS_URI_PREFIX}{storage_key}",
            storage_key=storage_key,
            gateway_url=f"{backend}/{storage_key}",
        )


def extract_storage_key(storage_key_or_uri: str) -> str:
    """Return the bare storage key for a key or ``lens://`` URI."""
    if storage_key_or_uri.startswith(LENS_URI_PREFIX):
        return storage_key_or_uri[len(LENS_URI_PREFIX) :]
    return storage_key_or_uri


@dataclass(frozen=True, slots=True)
class File:
    """One upload payload held in memory or read from disk in chunks."""

    name: str
    content: bytes | Path
    content_type: str = DEFAULT_CONTENT_TYPE

    @classmethod
    def from_path(cls, path: str | Path, *, content_type: str | None = None) -> File:
        """Reference one file on disk; content type is guessed when omitted."""
        resolved = Path(path)
        guessed, _ = mimetypes.guess_type(resolved.name)
        return cls(
            name=resolved.name,
            content=resolved,
            content_type=content_type or guessed or DEFAULT_CONTENT_TYPE,
        )

    @classmethod
    def from_json(cls, value: Any, *, name: str = "data.json") -> File:
        """Serialize one JSON value into an ``application/json`` file."""
        return cls(
            name=name,
            content=json.dumps(value, separators=(",", ":")).encode("utf-8"),
            content_type="application/json",
        )

    @property
    def size(self) -> int:
        """Return the content length in bytes."""
        if isinstance(self.content, Path):
            return self.content.stat().st_size
        return len(self.content)

    def read_bytes(self) -> bytes:
        """Return the whole content as bytes."""
        if isinstance(self.content, Path):
            return self.content.read_bytes()
        return self.content

    async def chunks(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> AsyncIterator[bytes]:
        """Yield the content in chunks without loading disk files whole."""
        if not isinstance(self.content, Path):
            if self.content:
                yield self.content
            return
        with self.content.open("rb") as handle:
            while chunk := handle.read(chunk_size):
                yield chunk


class Status(StrEnum):
    """Backend-reported persistence status for one resource."""

    NEW = "new"
    PENDING = "pending"
    IDLE = "idle"
    AVAILABLE = "available"
    DIRTY = "dirty"
    DONE = "done"
    ERROR_UPLOAD = "error_upload"
    ERROR_EDIT = "error_edit"
    ERROR_DELETE = "error_delete"
    UNAUTHORIZED = "unauthorized"

    @property
    def is_failure(self) -> bool:
        """Return whether this status ends propagation unsuccessfully."""
        return self in FAILURE_STATUSES

    @property
    def is_terminal(self) -> bool:
        """Return whether polling can stop on this status."""
        return self is Status.DONE or self.is_failure


FAILURE_STATUSES: frozenset[Status] = frozenset(
    {
        Status.ERROR_UPLOAD,
        Status.ERROR_EDIT,
        Status.ERROR_DELETE,
        Status.UNAUTHORIZED,
    }
)


@dataclass(frozen=True, slots=True)
class StatusResponse:
    """One status read; ``progress`` is 0-100 and may jump or regress."""

    storage_key: str
    status: Status
    progress: float


@dataclass(frozen=True, slots=True)
class Authorization:
    """Single-use token accompanying one edit or delete request."""

    challenge_id: str
    secret: str

    def as_params(self) -> dict[str, str]:
        """Return the query parameters expected by mutating endpoints."""
        return {"challenge_cid": self.challenge_id, "secret_random": self.secret}


@dataclass(frozen=True, slots=True)
class DeleteResponse:
    """Outcome of one delete request."""

    success: bool


class Signer(Protocol):
    """External capability proving control over a signing key."""

    async def sign_message(self, message: str) -> str:
        """Return a signature over ``message``."""
