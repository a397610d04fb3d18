"""Test doubles for Grove SDK tests.

``FakeBackend`` is an in-memory stand-in for the storage backend driven
through ``httpx.MockTransport``; it records every request it receives.
"""

from __future__ import annotations

import json
from collections import deque
from dataclasses import dataclass, field
from typing import Any

import httpx

from packages.grove_sdk.config import EnvironmentConfig

BACKEND = "https://grove.test"

TEST_ENV = EnvironmentConfig(
    name="test",
    backend=BACKEND,
    default_chain_id=37111,
    propagation_timeout_seconds=2.0,
    status_polling_interval_seconds=0.01,
)


@dataclass
class FakeBackend:
    """In-memory storage backend speaking the Grove HTTP surface."""

    requests: list[httpx.Request] = field(default_factory=list)
    uploads: dict[str, bytes] = field(default_factory=dict)
    statuses: dict[str, deque[str]] = field(default_factory=dict)
    failures: dict[tuple[str, str], httpx.Response] = field(default_factory=dict)
    signatures: list[str] = field(default_factory=list)
    challenge_cid: str = "challenge-cid-1"
    secret_random: str = "secret-random-1"
    _next_key: int = 0

    def transport(self) -> httpx.MockTransport:
        """Return one mock transport routed to this backend."""
        return httpx.MockTransport(self.handle)

    def fail(self, method: str, path: str, response: httpx.Response) -> None:
        """Answer ``method path`` with ``response`` from now on."""
        self.failures[(method, path)] = response

    def script_status(self, storage_key: str, *statuses: str) -> None:
        """Queue status values returned by successive status reads."""
        self.statuses[storage_key] = deque(statuses)

    def new_key(self) -> str:
        self._next_key += 1
        return f"key{self._next_key:04d}"

    def requests_to(self, method: str, path: str) -> list[httpx.Request]:
        return [
            request
            for request in self.requests
            if request.method == method and request.url.path == path
        ]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        method, path = request.method, request.url.path
        if (method, path) in self.failures:
            return self.failures[(method, path)]

        if method == "POST" and path == "/link/new":
            amount = int(request.url.params["amount"])
            return httpx.Response(200, json=[self._record() for _ in range(amount)])
        if method == "POST" and path == "/challenge/new":
            payload = json.loads(request.content)
            return httpx.Response(
                200,
                json={
                    "message": f"{payload['action']}:{payload['storage_key']}",
                    "secret_random": self.secret_random,
                },
            )
        if method == "POST" and path == "/challenge/sign":
            payload = json.loads(request.content)
            self.signatures.append(payload["signature"])
            return httpx.Response(200, json={"challenge_cid": self.challenge_cid})
        if method == "GET" and path.startswith("/status/"):
            storage_key = path.removeprefix("/status/")
            # The last scripted status repeats once the queue drains.
            queue = self.statuses.get(storage_key, deque(["done"]))
            status = queue.popleft() if len(queue) > 1 else queue[0]
            return httpx.Response(
                200,
                json={"storage_key": storage_key, "status": status, "progress": 50},
            )
        if method == "POST" and path == "/":
            record = self._record()
            self.uploads[record["storage_key"]] = request.content
            return httpx.Response(200, json=[record])

        storage_key = path.lstrip("/")
        if method in {"POST", "PUT"}:
            self.uploads[storage_key] = request.content
            return httpx.Response(201 if method == "POST" else 200, json={})
        if method == "DELETE":
            self.uploads.pop(storage_key, None)
            return httpx.Response(200, json={})
        if method in {"GET", "HEAD"}:
            if storage_key not in self.uploads:
                return httpx.Response(404, json={"message": "not found"})
            content = self.uploads[storage_key]
            range_header = request.headers.get("Range")
            if range_header:
                start, end = range_header.removeprefix("bytes=").split("-")
                content = content[int(start) : int(end) + 1]
            return httpx.Response(200, content=b"" if method == "HEAD" else content)
        return httpx.Response(405, text="unsupported")

    def _record(self) -> dict[str, Any]:
        storage_key = self.new_key()
        return {
            "storage_key": storage_key,
            "uri": f"lens://{storage_key}",
            "gateway_url": f"{BACKEND}/{storage_key}",
        }


class StubSigner:
    """Signer returning one fixed signature and recording messages."""

    def __init__(self, signature: str = "0xsignature") -> None:
        self.signature = signature
        self.messages: list[str] = []

    async def sign_message(self, message: str) -> str:
        self.messages.append(message)
        return self.signature
