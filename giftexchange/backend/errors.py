"""Error types for the gift exchange backend.

Store and assignment errors are raised; an incorrect password is a result,
not an exception (see ``access.AccessDenied``).
"""

from __future__ import annotations


class GiftExchangeError(Exception):
    """Base exception for the gift exchange backend."""


class InsufficientParticipants(GiftExchangeError):
    """Fewer names than an exchange needs."""

    def __init__(self, required: int, received: int) -> None:
        super().__init__(f"Need at least {required} participants, got {received}")
        self.required = required
        self.received = received


class DuplicateParticipantNames(GiftExchangeError):
    """The same display name was entered more than once."""

    def __init__(self, names: list[str]) -> None:
        super().__init__(f"Participant names must be unique: {', '.join(names)}")
        self.names = names


class EventStoreError(GiftExchangeError):
    """Persistence failures for events."""


class EventNotFound(EventStoreError):
    def __init__(self, event_id: str) -> None:
        super().__init__(f"Event not found: {event_id}")
        self.event_id = event_id


class StoreUnreachable(EventStoreError):
    """Remote store transport or protocol failure."""


class LocalStorageError(EventStoreError):
    """The local backend could not read or write a record."""


class MalformedEventRecord(EventStoreError):
    """A stored record could not be decoded into an event."""


class AccessError(GiftExchangeError):
    """Caller routed a participant to the wrong access operation."""


class AccountAlreadyClaimed(AccessError):
    pass


class AccountNotClaimed(AccessError):
    pass


class EmptyPassword(AccessError):
    pass


class UnknownParticipant(AccessError):
    def __init__(self, participant_id: str | None) -> None:
        super().__init__(f"Unknown participant: {participant_id}")
        self.participant_id = participant_id


class SessionStateError(GiftExchangeError):
    """Operation not valid in the session's current state."""
