from __future__ import annotations

import json
import unittest

import httpx
from fastapi.testclient import TestClient

from giftexchange.backend.api import create_app
from giftexchange.backend.config import BackendSettings
from giftexchange.backend.store import EventStore, InMemoryLocalBackend, RemoteEventBackend


class BlobServer:
    def __init__(self):
        self.blobs: dict[str, bytes] = {}
        self.methods: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.methods.append(request.method)
        if request.method == "POST":
            blob_id = f"b{len(self.blobs) + 1}"
            self.blobs[blob_id] = request.content
            return httpx.Response(201, headers={"Location": f"https://blobs.test/api/jsonBlob/{blob_id}"})
        blob_id = request.url.path.rsplit("/", 1)[-1]
        if blob_id not in self.blobs:
            return httpx.Response(404)
        if request.method == "PUT":
            self.blobs[blob_id] = request.content
            return httpx.Response(200)
        return httpx.Response(200, content=self.blobs[blob_id], headers={"Content-Type": "application/json"})


class MagicLinkFlowTests(unittest.TestCase):
    def setUp(self):
        self.server = BlobServer()
        remote = RemoteEventBackend(base_url="https://blobs.test/api/jsonBlob", transport=httpx.MockTransport(self.server))
        settings = BackendSettings(
            remote_url="https://blobs.test/api/jsonBlob",
            database_url=None,
            public_url="https://gifts.test/",
            host="127.0.0.1",
            port=8000,
            remote_timeout_s=5.0,
            log_level="INFO",
        )
        self.client = TestClient(create_app(store=EventStore(local=InMemoryLocalBackend(), remote=remote), settings=settings))

    def test_every_participant_link_opens_their_own_assignment(self):
        created = self.client.post("/api/events", json={"names": ["Ann", "Bo", "Cy", "Di"]}).json()

        self.assertEqual(created["event_id"], "b1")
        self.assertFalse(created["is_local"])

        receivers = []
        for participant in created["participants"]:
            token = httpx.URL(participant["link"]).params["token"]
            response = self.client.get(
                f"/api/events/{created['event_id']}/me",
                params={"uid": participant["id"], "token": token},
            )
            self.assertEqual(response.status_code, 200)
            view = response.json()
            self.assertEqual(view["me"]["id"], participant["id"])
            self.assertNotEqual(view["assignee"]["id"], participant["id"])
            receivers.append(view["assignee"]["id"])

        self.assertEqual(sorted(receivers), sorted(p["id"] for p in created["participants"]))

    def test_wishlist_and_password_writes_go_to_remote(self):
        created = self.client.post("/api/events", json={"names": ["Ann", "Bo", "Cy"]}).json()
        ann = created["participants"][0]
        token = httpx.URL(ann["link"]).params["token"]

        self.client.post(f"/api/events/b1/participants/{ann['id']}/password", json={"password": "pw"})
        self.client.put(
            f"/api/events/b1/participants/{ann['id']}/wishlist",
            json={"token": token, "wishlist": ["candles"]},
        )

        self.assertEqual(self.server.methods.count("PUT"), 2)
        stored = json.loads(self.server.blobs["b1"])
        self.assertEqual(stored["participants"][0]["password"], "pw")
        self.assertEqual(stored["participants"][0]["wishlist"], ["candles"])

    def test_unknown_remote_event_is_not_found(self):
        response = self.client.get("/api/events/missing")

        self.assertEqual(response.status_code, 404)


if __name__ == "__main__":
    unittest.main()
