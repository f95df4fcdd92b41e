"""Persistence for events: remote blob store first, local storage as fallback.

Identifiers carry their namespace. Local identifiers start with
``LOCAL_PREFIX`` and never touch the network; remote identifiers never fall
back to local storage. Only ``create`` degrades silently: an event created
while offline stays local for its whole life.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
import json
from typing import Any, Protocol

import httpx
import structlog

from giftexchange.backend.config import BackendSettings
from giftexchange.backend.errors import (
    EventNotFound,
    LocalStorageError,
    MalformedEventRecord,
    StoreUnreachable,
)
from giftexchange.backend.models import Event, event_from_payload, event_to_payload
from giftexchange.backend.security import generate_local_event_id, is_local_event_id

logger = structlog.get_logger(__name__)

JSON_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}


class LocalEventBackend(Protocol):
    def read(self, key: str) -> str | None:
        """Return the serialized event stored under key, if any."""

    def write(self, key: str, value: str) -> None:
        """Store the serialized event under key, replacing any previous value."""


@dataclass
class InMemoryLocalBackend:
    def __post_init__(self) -> None:
        self._records: dict[str, str] = {}

    def read(self, key: str) -> str | None:
        return self._records.get(key)

    def write(self, key: str, value: str) -> None:
        self._records[key] = value


@dataclass
class PostgresLocalBackend:
    database_url: str

    def _connect(self) -> Any:
        import psycopg

        return psycopg.connect(self.database_url)

    def read(self, key: str) -> str | None:
        import psycopg

        try:
            with self._connect() as conn:
                with conn.cursor() as cur:
                    cur.execute("SELECT payload FROM local_events WHERE id = %s", (key,))
                    row = cur.fetchone()
        except psycopg.Error as exc:
            raise LocalStorageError(f"Could not read local event {key}") from exc

        if row is None:
            return None
        (payload,) = row
        return payload if isinstance(payload, str) else json.dumps(payload)

    def write(self, key: str, value: str) -> None:
        import psycopg

        now = datetime.now(timezone.utc)
        try:
            with self._connect() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        INSERT INTO local_events (id, payload, created_at, updated_at)
                        VALUES (%s, %s::jsonb, %s, %s)
                        ON CONFLICT (id) DO UPDATE
                        SET payload = EXCLUDED.payload, updated_at = EXCLUDED.updated_at
                        """,
                        (key, value, now, now),
                    )
                conn.commit()
        except psycopg.Error as exc:
            raise LocalStorageError(f"Could not write local event {key}") from exc


@dataclass
class RemoteEventBackend:
    """Client for an opaque JSON blob API (POST / GET / PUT)."""

    base_url: str
    timeout_s: float = 10.0
    transport: httpx.AsyncBaseTransport | None = field(default=None, repr=False)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout_s, headers=JSON_HEADERS, transport=self.transport)

    def _url(self, event_id: str) -> str:
        return f"{self.base_url.rstrip('/')}/{event_id}"

    async def create(self, payload: dict[str, Any]) -> str:
        try:
            async with self._client() as client:
                response = await client.post(self.base_url, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise StoreUnreachable(f"Remote create failed: {exc}") from exc

        location = response.headers.get("Location", "")
        event_id = httpx.URL(location).path.rsplit("/", 1)[-1] if location else ""
        if not event_id:
            raise StoreUnreachable("Remote create returned no event location")
        if is_local_event_id(event_id):
            raise StoreUnreachable(f"Remote identifier {event_id} collides with the local namespace")
        return event_id

    async def fetch(self, event_id: str) -> dict[str, Any]:
        try:
            async with self._client() as client:
                response = await client.get(self._url(event_id))
        except httpx.HTTPError as exc:
            raise StoreUnreachable(f"Remote fetch failed: {exc}") from exc

        if response.status_code == 404:
            raise EventNotFound(event_id)
        if not response.is_success:
            raise StoreUnreachable(f"Remote fetch returned {response.status_code}")
        try:
            return response.json()
        except ValueError as exc:
            raise MalformedEventRecord(f"Remote event {event_id} is not valid JSON") from exc

    async def replace(self, event_id: str, payload: dict[str, Any]) -> None:
        try:
            async with self._client() as client:
                response = await client.put(self._url(event_id), json=payload)
        except httpx.HTTPError as exc:
            raise StoreUnreachable(f"Remote update failed: {exc}") from exc

        if response.status_code == 404:
            raise EventNotFound(event_id)
        if not response.is_success:
            raise StoreUnreachable(f"Remote update returned {response.status_code}")


@dataclass
class EventStore:
    local: LocalEventBackend
    remote: RemoteEventBackend | None = None

    @staticmethod
    def is_local(event_id: str | None) -> bool:
        return is_local_event_id(event_id)

    async def create(self, event: Event) -> str:
        payload = event_to_payload(event)
        if self.remote is not None:
            try:
                event_id = await self.remote.create(payload)
            except StoreUnreachable as exc:
                logger.warning("remote_create_failed_using_local", error=str(exc))
            else:
                logger.info("event_created", event_id=event_id, namespace="remote")
                return event_id

        event_id = generate_local_event_id()
        self.local.write(event_id, json.dumps(payload))
        logger.info("event_created", event_id=event_id, namespace="local")
        return event_id

    async def get(self, event_id: str) -> Event:
        if self.is_local(event_id):
            raw = self.local.read(event_id)
            if raw is None:
                raise EventNotFound(event_id)
            try:
                payload = json.loads(raw)
            except ValueError as exc:
                raise MalformedEventRecord(f"Local event {event_id} is not valid JSON") from exc
        else:
            if self.remote is None:
                raise StoreUnreachable(f"No remote store configured for {event_id}")
            try:
                payload = await self.remote.fetch(event_id)
            except (EventNotFound, StoreUnreachable, MalformedEventRecord) as exc:
                logger.error("remote_get_failed", event_id=event_id, error=str(exc))
                raise

        event = self._decode(event_id, payload)
        if _needs_backfill(payload):
            # Back-filled values must be stored before any link is built from them.
            await self.update(event_id, event)
            logger.info("legacy_event_backfilled", event_id=event_id)
        return event

    async def update(self, event_id: str, event: Event) -> None:
        payload = event_to_payload(event)
        if self.is_local(event_id):
            self.local.write(event_id, json.dumps(payload))
            return

        if self.remote is None:
            raise StoreUnreachable(f"No remote store configured for {event_id}")
        try:
            await self.remote.replace(event_id, payload)
        except (EventNotFound, StoreUnreachable) as exc:
            logger.error("remote_update_failed", event_id=event_id, error=str(exc))
            raise

    @staticmethod
    def _decode(event_id: str, payload: Any) -> Event:
        try:
            return event_from_payload(payload)
        except (KeyError, TypeError, ValueError) as exc:
            raise MalformedEventRecord(f"Event {event_id} has an unexpected shape") from exc


def _needs_backfill(payload: dict[str, Any]) -> bool:
    if not payload.get("createdAt"):
        return True
    return any(not participant.get("secretToken") for participant in payload["participants"])


def create_store(settings: BackendSettings) -> EventStore:
    local: LocalEventBackend
    if settings.database_url:
        local = PostgresLocalBackend(database_url=settings.database_url)
    else:
        local = InMemoryLocalBackend()
    remote = None
    if settings.remote_url:
        remote = RemoteEventBackend(base_url=settings.remote_url, timeout_s=settings.remote_timeout_s)
    return EventStore(local=local, remote=remote)
