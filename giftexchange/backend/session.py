"""One browsing session over one event.

The session holds the current ``Event`` value, replaces it with a new value on
every change and writes the whole event back to the store. Writes from other
sessions on the same event are last-write-wins.
"""

from __future__ import annotations

import random
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from urllib.parse import parse_qs, urlencode, urlsplit, urlunsplit

import structlog

from giftexchange.backend import access
from giftexchange.backend.assignment import create_assignment
from giftexchange.backend.config import DEFAULT_PUBLIC_URL
from giftexchange.backend.errors import EventStoreError, SessionStateError, UnknownParticipant
from giftexchange.backend.models import Event, Participant, PersonalView
from giftexchange.backend.state import replace_participant, with_wishlist
from giftexchange.backend.store import EventStore
from giftexchange.backend.suggestions import GiftSuggester, GiftSuggestion, NoSuggestions, safe_suggest

logger = structlog.get_logger(__name__)


class SessionState(str, Enum):
    SETUP = "setup"
    LOBBY = "lobby"
    PERSONAL = "personal"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class EntryParams:
    event_id: str | None = None
    uid: str | None = None
    token: str | None = None

    @classmethod
    def from_query(cls, query: str | Mapping[str, str]) -> EntryParams:
        if isinstance(query, str):
            parsed = parse_qs(query.lstrip("?"))
            values = {key: items[0] for key, items in parsed.items() if items}
        else:
            values = dict(query)
        return cls(
            event_id=values.get("event") or None,
            uid=values.get("uid") or None,
            token=values.get("token") or None,
        )

    @property
    def wants_magic_link(self) -> bool:
        return self.uid is not None and self.token is not None


class EventSession:
    def __init__(
        self,
        store: EventStore,
        public_url: str = DEFAULT_PUBLIC_URL,
        suggester: GiftSuggester | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.store = store
        self.public_url = public_url
        self.suggester = suggester if suggester is not None else NoSuggestions()
        self.rng = rng
        self.state = SessionState.SETUP
        self.event_id: str | None = None
        self.event: Event | None = None
        self.view: PersonalView | None = None
        self.failure: EventStoreError | None = None

    @property
    def is_local(self) -> bool:
        return self.store.is_local(self.event_id)

    async def start(self, entry: EntryParams) -> SessionState:
        self.event_id = None
        self.event = None
        self.view = None
        self.failure = None
        if entry.event_id is None:
            self.state = SessionState.SETUP
            return self.state

        self.event_id = entry.event_id
        try:
            self.event = await self.store.get(entry.event_id)
        except EventStoreError as exc:
            logger.warning("event_unavailable", event_id=entry.event_id, error=str(exc))
            self.failure = exc
            self.state = SessionState.NOT_FOUND
            return self.state

        self.state = SessionState.LOBBY
        if entry.wants_magic_link:
            view = access.resolve_magic_link(self.event.participants, entry.uid, entry.token)
            if view is not None:
                self.view = view
                self.state = SessionState.PERSONAL
        return self.state

    async def create_event(self, names: Sequence[str]) -> str:
        if self.state is not SessionState.SETUP:
            raise SessionStateError("Reset the session before creating another event")
        event = create_assignment(names, rng=self.rng)
        self.event_id = await self.store.create(event)
        self.event = event
        self.state = SessionState.LOBBY
        return self.event_id

    def participant(self, participant_id: str) -> Participant:
        event = self.require_event()
        participant = event.find(participant_id)
        if participant is None:
            raise UnknownParticipant(participant_id)
        return participant

    def choose(self, participant_id: str) -> access.AccessMode:
        return access.mode_for(self.participant(participant_id))

    async def submit_password(self, participant_id: str, password: str) -> access.AccessDecision:
        participant = self.participant(participant_id)
        if access.mode_for(participant) is access.AccessMode.SETUP:
            claimed = access.submit_setup(participant, password)
            await self._commit(replace_participant(self.require_event(), claimed))
            view = access.personal_view(self.require_event().participants, claimed)
            if view is None:
                raise UnknownParticipant(claimed.assignee_id)
            decision: access.AccessDecision = access.AccessGranted(view=view)
        else:
            decision = access.submit_login(self.require_event().participants, participant, password)

        if isinstance(decision, access.AccessGranted):
            self.view = decision.view
            self.state = SessionState.PERSONAL
        return decision

    async def update_wishlist(self, participant_id: str, wishlist: Iterable[str]) -> Event:
        event = with_wishlist(self.require_event(), participant_id, wishlist)
        await self._commit(event)
        return event

    async def add_wish(self, item: str) -> Event:
        me = self.require_view().me
        return await self.update_wishlist(me.id, [*me.wishlist, item])

    async def remove_wish(self, index: int) -> Event:
        me = self.require_view().me
        return await self.update_wishlist(me.id, [w for i, w in enumerate(me.wishlist) if i != index])

    async def save(self) -> None:
        """Write the current event again, e.g. after a failed update."""
        if self.event_id is None:
            raise SessionStateError("No event to save")
        await self.store.update(self.event_id, self.require_event())

    def logout(self) -> None:
        self.view = None
        if self.state is SessionState.PERSONAL:
            self.state = SessionState.LOBBY

    def reset(self) -> None:
        """Forget the current event; the stored record is left as it is."""
        self.state = SessionState.SETUP
        self.event_id = None
        self.event = None
        self.view = None
        self.failure = None

    def share_link(self, participant: Participant) -> str:
        if self.event_id is None:
            raise SessionStateError("Event has not been stored yet")
        scheme, netloc, path, query, fragment = urlsplit(self.public_url)
        params = urlencode({"event": self.event_id, "uid": participant.id, "token": participant.secret_token})
        query = f"{query}&{params}" if query else params
        return urlunsplit((scheme, netloc, path, query, fragment))

    def suggest_gifts(self, lang: str | None = None) -> list[GiftSuggestion]:
        assignee = self.require_view().assignee
        return safe_suggest(self.suggester, assignee.name, assignee.wishlist, lang)

    async def _commit(self, event: Event) -> None:
        if self.event_id is None:
            raise SessionStateError("Event has not been stored yet")
        self.event = event
        if self.view is not None:
            me = event.find(self.view.me.id)
            assignee = event.find(self.view.assignee.id)
            if me is not None and assignee is not None:
                self.view = PersonalView(me=me, assignee=assignee)
        await self.store.update(self.event_id, event)

    def require_event(self) -> Event:
        if self.event is None:
            raise SessionStateError("No event loaded")
        return self.event

    def require_view(self) -> PersonalView:
        if self.view is None:
            raise SessionStateError("No participant is signed in")
        return self.view

    def require_event_id(self) -> str:
        if self.event_id is None:
            raise SessionStateError("Event has not been stored yet")
        return self.event_id
