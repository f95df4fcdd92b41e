"""Backend package for the gift exchange."""

from .access import AccessDenied, AccessGranted, AccessMode, resolve_magic_link, submit_login, submit_setup
from .assignment import create_assignment, validate_names
from .config import BackendSettings, configure_logging, load_settings
from .models import Event, Participant, PersonalView, Stage
from .session import EntryParams, EventSession, SessionState
from .store import EventStore, InMemoryLocalBackend, PostgresLocalBackend, RemoteEventBackend, create_store

__all__ = [
    "AccessDenied",
    "AccessGranted",
    "AccessMode",
    "BackendSettings",
    "configure_logging",
    "create_assignment",
    "create_store",
    "EntryParams",
    "Event",
    "EventSession",
    "EventStore",
    "InMemoryLocalBackend",
    "load_settings",
    "Participant",
    "PersonalView",
    "PostgresLocalBackend",
    "RemoteEventBackend",
    "resolve_magic_link",
    "SessionState",
    "Stage",
    "submit_login",
    "submit_setup",
    "validate_names",
]
