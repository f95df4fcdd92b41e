"""Pure transformations over event values.

Every function returns a new ``Event``; nothing here mutates its input.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace

from giftexchange.backend.errors import UnknownParticipant
from giftexchange.backend.models import Event, Participant, Stage, utc_now_iso


def build_event(participants: Iterable[Participant], stage: Stage = Stage.ACTIVE) -> Event:
    return Event(stage=stage, participants=tuple(participants), created_at=utc_now_iso())


def replace_participant(event: Event, participant: Participant) -> Event:
    if event.find(participant.id) is None:
        raise UnknownParticipant(participant.id)
    participants = tuple(participant if p.id == participant.id else p for p in event.participants)
    return replace(event, participants=participants)


def clean_wishlist(items: Iterable[str]) -> tuple[str, ...]:
    return tuple(item.strip() for item in items if item and item.strip())


def with_wishlist(event: Event, participant_id: str, wishlist: Iterable[str]) -> Event:
    participant = event.find(participant_id)
    if participant is None:
        raise UnknownParticipant(participant_id)
    return replace_participant(event, replace(participant, wishlist=clean_wishlist(wishlist)))
