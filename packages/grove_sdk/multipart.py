"""Multipart request bodies for create and update requests.

Parts are assembled as plain immutable values and then encoded one of two
ways, picked once per process by ``detect_capabilities``:

- ``StreamingMultipartBody`` frames every part itself and streams the result
  through an async generator with a ``Content-Length`` known up front.
- ``BufferedMultipartBody`` hands the same parts to httpx ``files=`` and lets
  httpx produce the framing.
"""

from __future__ import annotations

import secrets
from collections.abc import AsyncIterator, Callable, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from packages.grove_sdk.acl import ACL_FILE_NAME, AclPolicy, acl_file
from packages.grove_sdk.errors import invariant
from packages.grove_sdk.types import File, Resource
from packages.grove_shared.logging import get_logger

logger = get_logger(__name__)

INDEX_FILE_NAME = "index.json"
CRLF = b"\r\n"

IndexFactory = Callable[[list[Resource]], Any]
IndexOption = bool | File | IndexFactory


@dataclass(frozen=True, slots=True)
class MultipartPart:
    """One named form-data part."""

    name: str
    file: File


def acl_part(policy: AclPolicy) -> MultipartPart:
    """Return the fixed-name part carrying the ACL document."""
    return MultipartPart(name=ACL_FILE_NAME, file=acl_file(policy))


def bind_files(
    resources: Sequence[Resource], files: Sequence[File]
) -> tuple[MultipartPart, ...]:
    """Bind files, in order, to the pre-allocated resources' storage keys."""
    parts: list[MultipartPart] = []
    for position, file in enumerate(files):
        invariant(
            position < len(resources),
            f"No key available for file {file.name!r} "
            f"({len(files)} files, {len(resources)} keys)",
        )
        parts.append(MultipartPart(name=resources[position].storage_key, file=file))
    return tuple(parts)


def index_file(index: IndexOption, resources: Sequence[Resource]) -> File:
    """Build the folder ``index.json`` from a file, a factory or the default listing."""
    if isinstance(index, File):
        file = index
    elif callable(index):
        file = File.from_json(index(list(resources)), name=INDEX_FILE_NAME)
    else:
        file = File.from_json(
            {"files": [resource.storage_key for resource in resources]},
            name=INDEX_FILE_NAME,
        )
    invariant(
        file.name == INDEX_FILE_NAME,
        f"Index file must be named {INDEX_FILE_NAME!r}, got {file.name!r}",
    )
    return file


def new_boundary() -> str:
    """Return one random multipart boundary token."""
    return f"----GroveFormBoundary{secrets.token_hex(12)}"


class MultipartBody(Protocol):
    """Transport body contract shared by both encodings."""

    boundary: str
    parts: tuple[MultipartPart, ...]

    def request_kwargs(self) -> dict[str, Any]:
        """Return the httpx request arguments carrying this body."""


@dataclass(frozen=True, slots=True)
class StreamingMultipartBody:
    """Client-framed multipart body emitted incrementally."""

    boundary: str
    parts: tuple[MultipartPart, ...]

    @property
    def content_type(self) -> str:
        return f"multipart/form-data; boundary={self.boundary}"

    @property
    def content_length(self) -> int:
        """Return the exact number of bytes ``stream`` will yield."""
        total = len(self._closing())
        for part in self.parts:
            total += len(self._part_header(part)) + part.file.size + len(CRLF)
        return total

    async def stream(self) -> AsyncIterator[bytes]:
        """Yield the framed body part by part."""
        for part in self.parts:
            yield self._part_header(part)
            async for chunk in part.file.chunks():
                yield chunk
            yield CRLF
        yield self._closing()

    def request_kwargs(self) -> dict[str, Any]:
        return {
            "content": self.stream(),
            "headers": {
                "Content-Type": self.content_type,
                "Content-Length": str(self.content_length),
            },
        }

    def _part_header(self, part: MultipartPart) -> bytes:
        return (
            f"--{self.boundary}\r\n"
            f'Content-Disposition: form-data; name="{part.name}"; '
            f'filename="{part.file.name}"\r\n'
            f"Content-Type: {part.file.content_type}\r\n\r\n"
        ).encode("utf-8")

    def _closing(self) -> bytes:
        return f"--{self.boundary}--\r\n".encode("utf-8")


@dataclass(frozen=True, slots=True)
class BufferedMultipartBody:
    """Multipart body framed by httpx from in-memory parts."""

    boundary: str
    parts: tuple[MultipartPart, ...]

    def request_kwargs(self) -> dict[str, Any]:
        # httpx reuses the boundary declared in an explicit Content-Type header.
        files = [
            (
                part.name,
                (part.file.name, part.file.read_bytes(), part.file.content_type),
            )
            for part in self.parts
        ]
        return {
            "files": files,
            "headers": {
                "Content-Type": f"multipart/form-data; boundary={self.boundary}"
            },
        }


@dataclass(frozen=True, slots=True)
class TransportCapabilities:
    """What the HTTP stack can do with request bodies."""

    streaming_uploads: bool


def build_multipart_body(
    parts: Sequence[MultipartPart],
    capabilities: TransportCapabilities,
    *,
    boundary: str | None = None,
) -> MultipartBody:
    """Encode ``parts`` with the encoding ``capabilities`` allows."""
    names = [part.name for part in parts]
    invariant(len(names) == len(set(names)), f"Duplicate multipart part names: {names}")
    resolved_boundary = boundary or new_boundary()
    if capabilities.streaming_uploads:
        return StreamingMultipartBody(boundary=resolved_boundary, parts=tuple(parts))
    return BufferedMultipartBody(boundary=resolved_boundary, parts=tuple(parts))


_PROBE_PAYLOAD = (b"grove-", b"streaming-", b"probe")
_streaming_supported: bool | None = None


async def detect_capabilities() -> TransportCapabilities:
    """Probe once per process whether the installed httpx streams request bodies.

    A small body is sent as an async byte stream through an ``httpx`` client
    backed by an in-process echo ``MockTransport``; the capability holds when
    the echoed bytes match. This checks the httpx request-body machinery only.
    The network transport a ``StorageClient`` is configured with is never
    contacted, so a server or proxy rejecting chunked or streamed bodies is not
    detected here; force buffering with ``storage.streaming_uploads=disabled``
    for such deployments. Concurrent first calls may each probe; the result is
    the same.
    """
    global _streaming_supported
    if _streaming_supported is None:
        _streaming_supported = await _probe_streaming_uploads()
        logger.debug("Streaming upload capability: %s", _streaming_supported)
    return TransportCapabilities(streaming_uploads=_streaming_supported)


def reset_capabilities() -> None:
    """Forget the memoized probe result."""
    global _streaming_supported
    _streaming_supported = None


async def _probe_streaming_uploads() -> bool:
    expected = b"".join(_PROBE_PAYLOAD)

    async def _chunks() -> AsyncIterator[bytes]:
        for chunk in _PROBE_PAYLOAD:
            yield chunk

    async def _echo(request: httpx.Request) -> httpx.Response:
        if not isinstance(request.stream, httpx.AsyncByteStream):
            return httpx.Response(417, request=request)
        return httpx.Response(200, content=await request.aread(), request=request)

    try:
        async with httpx.AsyncClient(transport=httpx.MockTransport(_echo)) as client:
            response = await client.post(
                "http://capability.probe/echo",
                content=_chunks(),
                headers={"Content-Length": str(len(expected))},
            )
    except (httpx.HTTPError, TypeError) as exc:
        logger.debug("Streaming upload probe failed: %s", exc)
        return False
    return response.status_code == 200 and response.content == expected
