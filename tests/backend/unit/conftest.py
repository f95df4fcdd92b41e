from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from giftexchange.backend.store import EventStore, InMemoryLocalBackend, RemoteEventBackend

BLOB_BASE = "https://blobs.test/api/jsonBlob"


class FakeBlobServer:
    """In-process stand-in for the remote JSON blob API."""

    def __init__(self) -> None:
        self.blobs: dict[str, Any] = {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "POST":
            blob_id = f"blob-{len(self.blobs) + 1}"
            self.blobs[blob_id] = json.loads(request.content)
            return httpx.Response(201, headers={"Location": f"{BLOB_BASE}/{blob_id}"})

        blob_id = request.url.path.rsplit("/", 1)[-1]
        if blob_id not in self.blobs:
            return httpx.Response(404)
        if request.method == "GET":
            return httpx.Response(200, json=self.blobs[blob_id])
        if request.method == "PUT":
            self.blobs[blob_id] = json.loads(request.content)
            return httpx.Response(200, json=self.blobs[blob_id])
        return httpx.Response(405)


class UnreachableServer:
    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        raise httpx.ConnectError("network down", request=request)


@pytest.fixture
def blob_server() -> FakeBlobServer:
    return FakeBlobServer()


@pytest.fixture
def unreachable_server() -> UnreachableServer:
    return UnreachableServer()


@pytest.fixture
def remote_store(blob_server: FakeBlobServer) -> EventStore:
    remote = RemoteEventBackend(base_url=BLOB_BASE, transport=httpx.MockTransport(blob_server))
    return EventStore(local=InMemoryLocalBackend(), remote=remote)


@pytest.fixture
def offline_store(unreachable_server: UnreachableServer) -> EventStore:
    remote = RemoteEventBackend(base_url=BLOB_BASE, transport=httpx.MockTransport(unreachable_server))
    return EventStore(local=InMemoryLocalBackend(), remote=remote)


@pytest.fixture
def local_store() -> EventStore:
    return EventStore(local=InMemoryLocalBackend())
