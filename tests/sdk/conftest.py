"""Shared fixtures for Grove SDK test modules."""

from __future__ import annotations

from typing import Iterator

import pytest

from packages.grove_sdk import multipart
from tests.sdk.helpers import FakeBackend, StubSigner


@pytest.fixture
def backend() -> FakeBackend:
    """Return one fresh fake backend."""
    return FakeBackend()


@pytest.fixture
def signer() -> StubSigner:
    """Return one stub signer."""
    return StubSigner()


@pytest.fixture(autouse=True)
def _reset_capability_probe() -> Iterator[None]:
    """Isolate the memoized streaming probe between tests."""
    multipart.reset_capabilities()
    yield
    multipart.reset_capabilities()
