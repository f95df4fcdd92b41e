"""Assignment generation: who gives a gift to whom."""

from __future__ import annotations

import random
from collections.abc import Iterable, Sequence

from giftexchange.backend.errors import DuplicateParticipantNames, InsufficientParticipants
from giftexchange.backend.models import Event, Participant, Stage
from giftexchange.backend.security import generate_participant_id, generate_token
from giftexchange.backend.state import build_event


MIN_PARTICIPANTS = 3


def validate_names(raw_names: Iterable[str]) -> list[str]:
    """Strip and de-blank entered names, rejecting duplicates and short lists."""
    names = [name.strip() for name in raw_names if name and name.strip()]
    seen: set[str] = set()
    duplicates: list[str] = []
    for name in names:
        if name in seen and name not in duplicates:
            duplicates.append(name)
        seen.add(name)
    if duplicates:
        raise DuplicateParticipantNames(duplicates)
    if len(names) < MIN_PARTICIPANTS:
        raise InsufficientParticipants(required=MIN_PARTICIPANTS, received=len(names))
    return names


def create_assignment(names: Sequence[str], rng: random.Random | None = None) -> Event:
    """Create an active event whose gift chain is one cycle through everyone.

    Participants are shuffled and each gives to the next one in shuffled order,
    the last giving to the first. The result can never assign anyone to
    themselves, so no retry is needed.
    """
    if len(names) < MIN_PARTICIPANTS:
        raise InsufficientParticipants(required=MIN_PARTICIPANTS, received=len(names))
    rng = rng if rng is not None else random.SystemRandom()

    ids: list[str] = []
    for _ in names:
        participant_id = generate_participant_id()
        while participant_id in ids:
            participant_id = generate_participant_id()
        ids.append(participant_id)

    order = list(range(len(names)))
    rng.shuffle(order)
    assignee_index = {giver: order[(position + 1) % len(order)] for position, giver in enumerate(order)}

    participants = [
        Participant(
            id=ids[index],
            name=name.strip(),
            secret_token=generate_token(),
            assignee_id=ids[assignee_index[index]],
        )
        for index, name in enumerate(names)
    ]
    return build_event(participants, stage=Stage.ACTIVE)


def assignment_cycle(event: Event) -> list[str]:
    """Follow the gift chain from the first participant back to the start."""
    if not event.participants:
        return []
    start = event.participants[0]
    chain = [start.id]
    current = event.find(start.assignee_id)
    while current is not None and current.id != start.id and len(chain) <= len(event.participants):
        chain.append(current.id)
        current = event.find(current.assignee_id)
    return chain
