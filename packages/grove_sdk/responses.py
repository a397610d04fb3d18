"""Upload responses carrying a handle back to the issuing client."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from packages.grove_sdk.types import Resource, StatusResponse

if TYPE_CHECKING:
    from packages.grove_sdk.client import StorageClient


@dataclass(frozen=True)
class FileUploadResponse:
    """One uploaded or edited file."""

    resource: Resource
    client: StorageClient = field(repr=False, compare=False)

    @property
    def uri(self) -> str:
        return self.resource.uri

    @property
    def storage_key(self) -> str:
        return self.resource.storage_key

    @property
    def gateway_url(self) -> str:
        return self.resource.gateway_url

    async def wait_for_propagation(self) -> StatusResponse:
        """Wait until the file is fully propagated; edits and deletes need this first."""
        return await self.client.wait_for_propagation(self.resource.storage_key)


@dataclass(frozen=True)
class UploadFolderResponse:
    """One uploaded folder, its files and its optional index file."""

    folder: Resource
    files: list[Resource]
    client: StorageClient = field(repr=False, compare=False)
    index: Resource | None = None

    async def wait_for_propagation(self) -> StatusResponse:
        """Wait until the folder is fully propagated."""
        return await self.client.wait_for_propagation(self.folder.storage_key)
