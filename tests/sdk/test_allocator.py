"""Unit tests for storage key allocation."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from packages.grove_sdk.allocator import ResourceAllocator, parse_resources
from packages.grove_sdk.errors import InvariantError, StorageClientError
from packages.grove_sdk.types import Resource
from packages.grove_shared.http import AsyncHttpClient
from tests.sdk.helpers import BACKEND, TEST_ENV, FakeBackend


def _allocate(backend: FakeBackend, amount: int) -> list[Resource]:
    async def _scenario() -> list[Resource]:
        async with AsyncHttpClient(transport=backend.transport()) as http:
            return await ResourceAllocator(http=http, env=TEST_ENV).allocate(amount)

    return asyncio.run(_scenario())


def test_allocate_returns_requested_resources(backend: FakeBackend) -> None:
    """Allocation should request ``amount`` keys and derive URIs and gateway URLs."""
    resources = _allocate(backend, 3)

    assert [resource.storage_key for resource in resources] == [
        "key0001",
        "key0002",
        "key0003",
    ]
    assert resources[0].uri == "lens://key0001"
    assert resources[0].gateway_url == f"{BACKEND}/key0001"
    [request] = backend.requests_to("POST", "/link/new")
    assert request.url.params["amount"] == "3"


@pytest.mark.parametrize("amount", [0, -1])
def test_allocate_rejects_non_positive_amount(
    backend: FakeBackend, amount: int
) -> None:
    """Non-positive amounts should fail without contacting the backend."""
    with pytest.raises(InvariantError, match="greater than 0"):
        _allocate(backend, amount)

    assert backend.requests == []


def test_allocate_maps_backend_failure(backend: FakeBackend) -> None:
    """Non-success allocation responses should raise ``StorageClientError``."""
    backend.fail("POST", "/link/new", httpx.Response(503, json={"message": "busy"}))

    with pytest.raises(StorageClientError) as exc_info:
        _allocate(backend, 1)

    assert exc_info.value.status_code == 503
    assert exc_info.value.message == "busy"


def test_allocate_rejects_short_response(backend: FakeBackend) -> None:
    """Receiving fewer keys than requested should be an invariant failure."""
    backend.fail(
        "POST",
        "/link/new",
        httpx.Response(
            200,
            json=[{"storage_key": "only", "uri": "lens://only"}],
        ),
    )

    with pytest.raises(InvariantError, match="Requested 2"):
        _allocate(backend, 2)


def test_parse_resources_ignores_backend_gateway_url() -> None:
    """Gateway URLs should always be derived from the storage key."""
    [resource] = parse_resources(
        [
            {
                "storage_key": "abc",
                "uri": "lens://abc",
                "gateway_url": "https://elsewhere.test/abc",
            }
        ],
        backend=BACKEND,
    )

    assert resource.gateway_url == f"{BACKEND}/abc"


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"storage_key": "abc"},
        [{"uri": "lens://abc"}],
        [{"storage_key": "abc", "uri": "lens://other"}],
    ],
)
def test_parse_resources_rejects_malformed_payloads(payload: object) -> None:
    """Empty, non-list, incomplete or inconsistent payloads should fail."""
    with pytest.raises(InvariantError):
        parse_resources(payload, backend=BACKEND)
