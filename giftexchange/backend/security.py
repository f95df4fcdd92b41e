"""Identifier and secret helpers for events and participants.

Tokens and passwords are stored and compared in plain form; anyone able to
read the store can already read every assignment.
"""

from __future__ import annotations

import secrets


TOKEN_BYTES = 16
PARTICIPANT_ID_BYTES = 4
LOCAL_ID_BYTES = 8
LOCAL_PREFIX = "local_"


def generate_token() -> str:
    """Generate a URL-safe secret token for magic links."""
    return secrets.token_urlsafe(TOKEN_BYTES)


def generate_participant_id() -> str:
    return secrets.token_hex(PARTICIPANT_ID_BYTES)


def generate_local_event_id() -> str:
    """Generate an event identifier in the local namespace."""
    return f"{LOCAL_PREFIX}{secrets.token_hex(LOCAL_ID_BYTES)}"


def is_local_event_id(event_id: str | None) -> bool:
    return bool(event_id) and event_id.startswith(LOCAL_PREFIX)


def verify_secret(submitted: str | None, expected: str | None) -> bool:
    """Exact-match comparison of a submitted secret against the stored one."""
    if submitted is None or expected is None:
        return False
    return secrets.compare_digest(submitted.encode("utf-8"), expected.encode("utf-8"))
