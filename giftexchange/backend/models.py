"""Domain models for gift exchange events and their JSON persistence form."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from giftexchange.backend.security import generate_token


class Stage(str, Enum):
    SETUP = "SETUP"
    ACTIVE = "ACTIVE"


@dataclass(frozen=True)
class Participant:
    id: str
    name: str
    secret_token: str
    assignee_id: str | None = None
    wishlist: tuple[str, ...] = ()
    is_claimed: bool = False
    password: str | None = None


@dataclass(frozen=True)
class Event:
    stage: Stage
    participants: tuple[Participant, ...]
    created_at: str

    def find(self, participant_id: str | None) -> Participant | None:
        for participant in self.participants:
            if participant.id == participant_id:
                return participant
        return None


@dataclass(frozen=True)
class PersonalView:
    """What one authenticated participant may see: themselves and their assignee."""

    me: Participant
    assignee: Participant


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def participant_to_payload(participant: Participant) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": participant.id,
        "name": participant.name,
        "assigneeId": participant.assignee_id,
        "wishlist": list(participant.wishlist),
        "isClaimed": participant.is_claimed,
        "secretToken": participant.secret_token,
    }
    if participant.password is not None:
        payload["password"] = participant.password
    return payload


def participant_from_payload(payload: dict[str, Any]) -> Participant:
    # Records written before tokens and claiming existed lack those keys.
    return Participant(
        id=str(payload["id"]),
        name=str(payload["name"]),
        secret_token=payload.get("secretToken") or generate_token(),
        assignee_id=payload.get("assigneeId"),
        wishlist=tuple(str(item) for item in payload.get("wishlist") or ()),
        is_claimed=bool(payload.get("isClaimed", False)),
        password=payload.get("password") or None,
    )


def event_to_payload(event: Event) -> dict[str, Any]:
    return {
        "stage": event.stage.value,
        "participants": [participant_to_payload(p) for p in event.participants],
        "createdAt": event.created_at,
    }


def event_from_payload(payload: dict[str, Any]) -> Event:
    return Event(
        stage=Stage(payload["stage"]),
        participants=tuple(participant_from_payload(p) for p in payload["participants"]),
        created_at=payload.get("createdAt") or utc_now_iso(),
    )
