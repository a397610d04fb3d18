"""Allocation of fresh storage keys ahead of an upload."""

from __future__ import annotations

from typing import Any

from packages.grove_sdk.config import EnvironmentConfig
from packages.grove_sdk.errors import StorageClientError, invariant
from packages.grove_sdk.records import ResourceRecord, parse_record
from packages.grove_sdk.transport import read_json, send
from packages.grove_sdk.types import Resource
from packages.grove_shared.http import AsyncHttpClient
from packages.grove_shared.logging import get_logger

logger = get_logger(__name__)


class ResourceAllocator:
    """Requests storage slots from ``POST /link/new``."""

    def __init__(self, *, http: AsyncHttpClient, env: EnvironmentConfig) -> None:
        self._http = http
        self._env = env

    async def allocate(self, amount: int) -> list[Resource]:
        """Return exactly ``amount`` fresh resources in allocation order."""
        invariant(
            isinstance(amount, int) and amount > 0,
            f"Amount must be greater than 0, got {amount!r}",
        )
        response = await send(
            self._http,
            "POST",
            f"{self._env.backend}/link/new",
            error_type=StorageClientError,
            params={"amount": amount},
        )
        payload = read_json(response, error_type=StorageClientError)
        resources = parse_resources(payload, backend=self._env.backend)
        invariant(
            len(resources) == amount,
            f"Requested {amount} storage keys, backend returned {len(resources)}",
        )
        logger.debug("Allocated %d storage keys", amount)
        return resources


def parse_resources(payload: Any, *, backend: str) -> list[Resource]:
    """Map a list of resource records into ``Resource`` values.

    Gateway URLs are always derived from the storage key; a ``gateway_url``
    returned by the backend is not used.
    """
    invariant(
        isinstance(payload, list) and len(payload) > 0,
        f"Expected a non-empty list of resources in response: {payload!r}",
    )
    resources: list[Resource] = []
    for item in payload:
        record = parse_record(ResourceRecord, item)
        resource = Resource.for_key(record.storage_key, backend=backend)
        invariant(
            record.uri == resource.uri,
            f"URI {record.uri!r} does not address storage key {record.storage_key!r}",
        )
        resources.append(resource)
    return resources
