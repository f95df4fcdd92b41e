"""Per-participant access: password setup, password login and magic links.

A participant is UNCLAIMED until a password is set up, then CLAIMED for good.
Magic links work in either state. Nothing here writes to an event; callers
persist the participant returned by ``submit_setup``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from enum import Enum

import structlog

from giftexchange.backend.errors import (
    AccountAlreadyClaimed,
    AccountNotClaimed,
    EmptyPassword,
    UnknownParticipant,
)
from giftexchange.backend.models import Participant, PersonalView
from giftexchange.backend.security import verify_secret

logger = structlog.get_logger(__name__)


class AccessMode(str, Enum):
    SETUP = "setup"
    LOGIN = "login"


class DenialReason(str, Enum):
    INCORRECT_PASSWORD = "incorrect_password"


@dataclass(frozen=True)
class AccessGranted:
    view: PersonalView


@dataclass(frozen=True)
class AccessDenied:
    reason: DenialReason


AccessDecision = AccessGranted | AccessDenied


def mode_for(participant: Participant) -> AccessMode:
    return AccessMode.LOGIN if participant.password is not None else AccessMode.SETUP


def personal_view(participants: Iterable[Participant], me: Participant) -> PersonalView | None:
    for candidate in participants:
        if candidate.id == me.assignee_id:
            return PersonalView(me=me, assignee=candidate)
    return None


def submit_setup(participant: Participant, password: str) -> Participant:
    """Claim an unclaimed participant by setting their password."""
    if mode_for(participant) is not AccessMode.SETUP:
        raise AccountAlreadyClaimed(f"{participant.id} already has a password")
    if not password or not password.strip():
        raise EmptyPassword("Please enter a password")
    logger.info("participant_claimed", participant_id=participant.id)
    return replace(participant, password=password, is_claimed=True)


def submit_login(participants: Iterable[Participant], participant: Participant, password: str) -> AccessDecision:
    if mode_for(participant) is not AccessMode.LOGIN:
        raise AccountNotClaimed(f"{participant.id} has no password yet")
    if not verify_secret(password, participant.password):
        logger.info("login_denied", participant_id=participant.id)
        return AccessDenied(reason=DenialReason.INCORRECT_PASSWORD)
    view = personal_view(participants, participant)
    if view is None:
        raise UnknownParticipant(participant.assignee_id)
    return AccessGranted(view=view)


def resolve_magic_link(
    participants: Iterable[Participant],
    uid: str | None,
    token: str | None,
) -> PersonalView | None:
    """Return the personal view for a matching uid and token, else ``None``."""
    participants = list(participants)
    for participant in participants:
        if participant.id == uid and verify_secret(token, participant.secret_token):
            return personal_view(participants, participant)
    logger.info("magic_link_rejected", participant_id=uid)
    return None
