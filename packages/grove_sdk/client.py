"""Asynchronous Grove storage client."""

from __future__ import annotations

from collections.abc import Collection, Sequence
from typing import Any

import httpx

from packages.grove_sdk import propagation
from packages.grove_sdk.acl import AclPolicy, ImmutableAcl, resolve_acl
from packages.grove_sdk.allocator import ResourceAllocator, parse_resources
from packages.grove_sdk.authorization import AuthorizationService
from packages.grove_sdk.config import (
    PRODUCTION,
    EnvironmentConfig,
    environment_from_settings,
)
from packages.grove_sdk.errors import StorageClientError
from packages.grove_sdk.multipart import (
    IndexOption,
    MultipartPart,
    TransportCapabilities,
    acl_part,
    bind_files,
    build_multipart_body,
    detect_capabilities,
    index_file,
)
from packages.grove_sdk.records import StatusRecord, parse_record
from packages.grove_sdk.responses import FileUploadResponse, UploadFolderResponse
from packages.grove_sdk.transport import read_json, send
from packages.grove_sdk.types import (
    DeleteResponse,
    File,
    Resource,
    Signer,
    Status,
    StatusResponse,
    extract_storage_key,
)
from packages.grove_shared.config import GroveSettings, load_settings
from packages.grove_shared.http import AsyncHttpClient
from packages.grove_shared.logging import get_logger, public_api_logged

logger = get_logger(__name__)

COMPONENT_ID = "grove_storage_client"

_STREAMING_OVERRIDES: dict[str, TransportCapabilities | None] = {
    "auto": None,
    "enabled": TransportCapabilities(streaming_uploads=True),
    "disabled": TransportCapabilities(streaming_uploads=False),
}


class StorageClient:
    """Uploads, edits, deletes and tracks resources on one Grove environment.

    Addresses accept either a bare storage key or a ``lens://`` URI.
    """

    def __init__(
        self,
        *,
        environment: EnvironmentConfig = PRODUCTION,
        http: AsyncHttpClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        capabilities: TransportCapabilities | None = None,
    ) -> None:
        """Create one client; ``capabilities`` skips the streaming probe when given."""
        self.env = environment
        self._owns_http = http is None
        self._http = http or AsyncHttpClient(
            timeout_seconds=environment.request_timeout_seconds,
            transport=transport,
        )
        self._capabilities = capabilities
        self._allocator = ResourceAllocator(http=self._http, env=environment)
        self._authorization = AuthorizationService(http=self._http, env=environment)

    @classmethod
    def from_settings(
        cls,
        settings: GroveSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> StorageClient:
        """Create one client from loaded settings (or ``load_settings()``)."""
        resolved = load_settings() if settings is None else settings
        return cls(
            environment=environment_from_settings(resolved),
            transport=transport,
            capabilities=_STREAMING_OVERRIDES[resolved.storage.streaming_uploads],
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client when owned."""
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> StorageClient:
        """Enter async context manager scope."""
        return self

    async def __aexit__(self, *_: object) -> None:
        """Exit async context manager scope and close owned resources."""
        await self.aclose()

    @public_api_logged(logger=logger, component_id=COMPONENT_ID)
    async def upload_file(
        self, file: File, *, acl: AclPolicy | None = None
    ) -> FileUploadResponse:
        """Upload one file; without ``acl`` the file is immutable on the default chain."""
        resolved = resolve_acl(acl, self.env.default_chain_id)
        if isinstance(resolved, ImmutableAcl):
            resource = await self._upload_immutable_file(file, resolved)
        else:
            resource = await self._upload_mutable_file(file, resolved)
        return FileUploadResponse(resource=resource, client=self)

    async def upload_as_json(
        self,
        data: Any,
        *,
        name: str = "data.json",
        acl: AclPolicy | None = None,
    ) -> FileUploadResponse:
        """Serialize ``data`` to JSON and upload it as ``name``."""
        return await self.upload_file(File.from_json(data, name=name), acl=acl)

    @public_api_logged(logger=logger, component_id=COMPONENT_ID)
    async def upload_folder(
        self,
        files: Sequence[File],
        *,
        index: IndexOption | None = None,
        acl: AclPolicy | None = None,
    ) -> UploadFolderResponse:
        """Upload ``files`` as one folder, optionally served through ``index.json``.

        ``index`` may be ``True`` for the default ``{"files": [...]}`` listing,
        a prebuilt ``index.json`` file, or a factory called with the file
        resources whose JSON-serializable result becomes the index.
        """
        files = list(files)
        needs_index = bool(index)
        if isinstance(index, File):
            index_file(index, ())

        folder, *resources = await self._allocator.allocate(
            len(files) + (2 if needs_index else 1)
        )
        file_resources = resources[: len(files)]
        parts = list(bind_files(file_resources, files))

        index_resource: Resource | None = None
        if needs_index:
            index_resource = resources[len(files)]
            parts.extend(
                bind_files([index_resource], [index_file(index, file_resources)])
            )
        parts.append(acl_part(resolve_acl(acl, self.env.default_chain_id)))

        await self._multipart_request(
            "POST", f"{self.env.backend}/{folder.storage_key}", parts
        )
        return UploadFolderResponse(
            folder=folder,
            files=file_resources,
            index=index_resource,
            client=self,
        )

    def resolve(self, storage_key_or_uri: str) -> str:
        """Return the gateway URL of a storage key or ``lens://`` URI."""
        return f"{self.env.backend}/{extract_storage_key(storage_key_or_uri)}"

    @public_api_logged(
        logger=logger, component_id=COMPONENT_ID, id_fields=("storage_key_or_uri",)
    )
    async def edit_file(
        self,
        storage_key_or_uri: str,
        file: File,
        signer: Signer,
        *,
        acl: AclPolicy | None = None,
    ) -> FileUploadResponse:
        """Replace the content of a mutable file after proving authorization."""
        storage_key = extract_storage_key(storage_key_or_uri)
        authorization = await self._authorization.authorize("edit", storage_key, signer)

        resource = Resource.for_key(storage_key, backend=self.env.backend)
        parts = [
            *bind_files([resource], [file]),
            acl_part(resolve_acl(acl, self.env.default_chain_id)),
        ]
        await self._multipart_request(
            "PUT",
            f"{self.env.backend}/{storage_key}",
            parts,
            params=authorization.as_params(),
        )
        return FileUploadResponse(resource=resource, client=self)

    async def update_json(
        self,
        storage_key_or_uri: str,
        data: Any,
        signer: Signer,
        *,
        name: str = "data.json",
        acl: AclPolicy | None = None,
    ) -> FileUploadResponse:
        """Serialize ``data`` to JSON and replace the resource content with it."""
        return await self.edit_file(
            storage_key_or_uri, File.from_json(data, name=name), signer, acl=acl
        )

    @public_api_logged(
        logger=logger, component_id=COMPONENT_ID, id_fields=("storage_key_or_uri",)
    )
    async def delete(self, storage_key_or_uri: str, signer: Signer) -> DeleteResponse:
        """Delete a mutable resource after proving authorization."""
        storage_key = extract_storage_key(storage_key_or_uri)
        authorization = await self._authorization.authorize(
            "delete", storage_key, signer
        )
        response = await send(
            self._http,
            "DELETE",
            f"{self.env.backend}/{storage_key}",
            error_type=StorageClientError,
            allow_error=True,
            params=authorization.as_params(),
        )
        return DeleteResponse(success=response.is_success)

    @public_api_logged(
        logger=logger, component_id=COMPONENT_ID, id_fields=("storage_key_or_uri",)
    )
    async def status(self, storage_key_or_uri: str) -> StatusResponse:
        """Return the current persistence status of one resource."""
        return await self._fetch_status(extract_storage_key(storage_key_or_uri))

    @public_api_logged(
        logger=logger, component_id=COMPONENT_ID, id_fields=("storage_key_or_uri",)
    )
    async def wait_until_status(
        self,
        storage_key_or_uri: str,
        targets: Collection[Status] = (Status.DONE,),
        *,
        timeout_seconds: float | None = None,
    ) -> StatusResponse:
        """Poll until the resource reaches one of ``targets`` or fails."""
        storage_key = extract_storage_key(storage_key_or_uri)
        return await propagation.wait_until_status(
            self._fetch_status,
            storage_key=storage_key,
            uri=Resource.for_key(storage_key, backend=self.env.backend).uri,
            targets=targets,
            timeout_seconds=(
                self.env.propagation_timeout_seconds
                if timeout_seconds is None
                else timeout_seconds
            ),
            interval_seconds=self.env.status_polling_interval_seconds,
        )

    async def wait_for_propagation(self, storage_key_or_uri: str) -> StatusResponse:
        """Wait until the resource is ``done`` within the environment's timeout."""
        return await self.wait_until_status(storage_key_or_uri, (Status.DONE,))

    @public_api_logged(
        logger=logger, component_id=COMPONENT_ID, id_fields=("storage_key_or_uri",)
    )
    async def download(
        self,
        storage_key_or_uri: str,
        *,
        byte_range: tuple[int, int] | None = None,
    ) -> bytes:
        """Fetch resource content; ``byte_range`` is an inclusive ``(start, end)``."""
        headers: dict[str, str] = {}
        if byte_range is not None:
            start, end = byte_range
            headers["Range"] = f"bytes={start}-{end}"
        response = await send(
            self._http,
            "GET",
            self.resolve(storage_key_or_uri),
            error_type=StorageClientError,
            headers=headers,
        )
        return response.content

    async def exists(self, storage_key_or_uri: str) -> bool:
        """Return whether the gateway serves the resource."""
        response = await send(
            self._http,
            "HEAD",
            self.resolve(storage_key_or_uri),
            error_type=StorageClientError,
            allow_error=True,
        )
        if response.status_code == 404:
            return False
        if response.is_error:
            raise StorageClientError.from_response(response)
        return True

    async def _upload_immutable_file(self, file: File, acl: ImmutableAcl) -> Resource:
        capabilities = await self._transport_capabilities()
        content = file.chunks() if capabilities.streaming_uploads else file.read_bytes()
        response = await send(
            self._http,
            "POST",
            f"{self.env.backend}/",
            error_type=StorageClientError,
            params={"chain_id": acl.chain_id},
            content=content,
            headers={
                "Content-Type": file.content_type,
                "Content-Length": str(file.size),
            },
        )
        payload = read_json(response, error_type=StorageClientError)
        return parse_resources(payload, backend=self.env.backend)[0]

    async def _upload_mutable_file(self, file: File, acl: AclPolicy) -> Resource:
        [resource] = await self._allocator.allocate(1)
        parts = [*bind_files([resource], [file]), acl_part(acl)]
        await self._multipart_request(
            "POST", f"{self.env.backend}/{resource.storage_key}", parts
        )
        return resource

    async def _fetch_status(self, storage_key: str) -> StatusResponse:
        response = await send(
            self._http,
            "GET",
            f"{self.env.backend}/status/{storage_key}",
            error_type=StorageClientError,
        )
        record = parse_record(
            StatusRecord, read_json(response, error_type=StorageClientError)
        )
        return StatusResponse(
            storage_key=record.storage_key,
            status=record.status,
            progress=record.progress,
        )

    async def _multipart_request(
        self,
        method: str,
        url: str,
        parts: Sequence[MultipartPart],
        *,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        body = build_multipart_body(parts, await self._transport_capabilities())
        return await send(
            self._http,
            method,
            url,
            error_type=StorageClientError,
            params=params,
            **body.request_kwargs(),
        )

    async def _transport_capabilities(self) -> TransportCapabilities:
        if self._capabilities is None:
            return await detect_capabilities()
        return self._capabilities
