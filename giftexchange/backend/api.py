"""FastAPI endpoints for creating events, the lobby and personal views."""

from __future__ import annotations

from typing import Any, NoReturn

from fastapi import Depends, FastAPI, HTTPException, Query
from pydantic import BaseModel, Field

from .access import AccessDenied
from .assignment import validate_names
from .config import BackendSettings, load_settings
from .errors import (
    AccessError,
    DuplicateParticipantNames,
    EventStoreError,
    InsufficientParticipants,
    LocalStorageError,
    StoreUnreachable,
    UnknownParticipant,
)
from .models import Participant
from .session import EntryParams, EventSession, SessionState
from .store import EventStore, create_store
from .suggestions import GiftSuggester, NoSuggestions


class CreateEventRequest(BaseModel):
    names: list[str] = Field(min_length=1, max_length=200)


class ParticipantLink(BaseModel):
    id: str
    name: str
    link: str


class CreateEventResponse(BaseModel):
    event_id: str
    is_local: bool
    participants: list[ParticipantLink]


class LobbyParticipant(BaseModel):
    id: str
    name: str
    is_claimed: bool
    mode: str


class LobbyResponse(BaseModel):
    event_id: str
    stage: str
    is_local: bool
    created_at: str
    participants: list[LobbyParticipant]


class PersonResponse(BaseModel):
    id: str
    name: str
    wishlist: list[str]


class PersonalViewResponse(BaseModel):
    event_id: str
    me: PersonResponse
    assignee: PersonResponse
    is_claimed: bool
    link: str


class PasswordEnvelope(BaseModel):
    password: str = Field(min_length=1, max_length=200)


class WishlistEnvelope(BaseModel):
    token: str = Field(min_length=1)
    wishlist: list[str] = Field(max_length=100)


class SuggestionResponse(BaseModel):
    item: str
    reason: str
    estimated_price: str


def _person(participant: Participant) -> PersonResponse:
    return PersonResponse(id=participant.id, name=participant.name, wishlist=list(participant.wishlist))


def _personal_view_response(session: EventSession) -> PersonalViewResponse:
    view = session.require_view()
    me = view.me
    return PersonalViewResponse(
        event_id=session.require_event_id(),
        me=_person(me),
        assignee=_person(view.assignee),
        is_claimed=me.is_claimed,
        link=session.share_link(me),
    )


def _raise_for_store_error(exc: EventStoreError | None) -> NoReturn:
    if isinstance(exc, StoreUnreachable):
        raise HTTPException(status_code=503, detail="Event storage unreachable")
    if isinstance(exc, LocalStorageError):
        raise HTTPException(status_code=503, detail="Event storage unavailable")
    raise HTTPException(status_code=404, detail="Event not found")


def create_app(
    store: EventStore | None = None,
    settings: BackendSettings | None = None,
    suggester: GiftSuggester | None = None,
) -> FastAPI:
    app = FastAPI(title="Gift Exchange API", version="0.1.0")
    app_settings = settings if settings is not None else load_settings()
    event_store = store if store is not None else create_store(app_settings)
    gift_suggester = suggester if suggester is not None else NoSuggestions()

    def get_session() -> EventSession:
        return EventSession(store=event_store, public_url=app_settings.public_url, suggester=gift_suggester)

    async def open_event(session: EventSession, entry: EntryParams) -> SessionState:
        state = await session.start(entry)
        if state is SessionState.NOT_FOUND:
            _raise_for_store_error(session.failure)
        return state

    @app.post("/api/events", response_model=CreateEventResponse)
    async def create_event(
        payload: CreateEventRequest,
        session: EventSession = Depends(get_session),
    ) -> CreateEventResponse:
        try:
            names = validate_names(payload.names)
        except (DuplicateParticipantNames, InsufficientParticipants) as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        try:
            event_id = await session.create_event(names)
        except EventStoreError as exc:
            _raise_for_store_error(exc)
        event = session.require_event()
        return CreateEventResponse(
            event_id=event_id,
            is_local=session.is_local,
            participants=[
                ParticipantLink(id=p.id, name=p.name, link=session.share_link(p)) for p in event.participants
            ],
        )

    @app.get("/api/events/{event_id}", response_model=LobbyResponse)
    async def get_lobby(
        event_id: str,
        session: EventSession = Depends(get_session),
    ) -> LobbyResponse:
        await open_event(session, EntryParams(event_id=event_id))
        event = session.require_event()
        return LobbyResponse(
            event_id=event_id,
            stage=event.stage.value,
            is_local=session.is_local,
            created_at=event.created_at,
            participants=[
                LobbyParticipant(id=p.id, name=p.name, is_claimed=p.is_claimed, mode=session.choose(p.id).value)
                for p in event.participants
            ],
        )

    @app.get("/api/events/{event_id}/me", response_model=PersonalViewResponse)
    async def get_magic_link_view(
        event_id: str,
        uid: str = Query(min_length=1),
        token: str = Query(min_length=1),
        session: EventSession = Depends(get_session),
    ) -> PersonalViewResponse:
        state = await open_event(session, EntryParams(event_id=event_id, uid=uid, token=token))
        if state is not SessionState.PERSONAL:
            raise HTTPException(status_code=403, detail="Invalid access link")
        return _personal_view_response(session)

    @app.post("/api/events/{event_id}/participants/{uid}/password", response_model=PersonalViewResponse)
    async def submit_password(
        event_id: str,
        uid: str,
        payload: PasswordEnvelope,
        session: EventSession = Depends(get_session),
    ) -> PersonalViewResponse:
        await open_event(session, EntryParams(event_id=event_id))
        try:
            decision = await session.submit_password(uid, payload.password)
        except UnknownParticipant as exc:
            raise HTTPException(status_code=404, detail="Participant not found") from exc
        except AccessError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except EventStoreError as exc:
            _raise_for_store_error(exc)
        if isinstance(decision, AccessDenied):
            raise HTTPException(status_code=403, detail="Incorrect password")
        return _personal_view_response(session)

    @app.put("/api/events/{event_id}/participants/{uid}/wishlist", response_model=PersonalViewResponse)
    async def put_wishlist(
        event_id: str,
        uid: str,
        payload: WishlistEnvelope,
        session: EventSession = Depends(get_session),
    ) -> PersonalViewResponse:
        state = await open_event(session, EntryParams(event_id=event_id, uid=uid, token=payload.token))
        if state is not SessionState.PERSONAL:
            raise HTTPException(status_code=403, detail="Wishlist update not allowed")
        try:
            await session.update_wishlist(uid, payload.wishlist)
        except EventStoreError as exc:
            _raise_for_store_error(exc)
        return _personal_view_response(session)

    @app.get(
        "/api/events/{event_id}/participants/{uid}/suggestions",
        response_model=list[SuggestionResponse],
    )
    async def get_suggestions(
        event_id: str,
        uid: str,
        token: str = Query(min_length=1),
        lang: str = Query(default="en"),
        session: EventSession = Depends(get_session),
    ) -> list[dict[str, Any]]:
        state = await open_event(session, EntryParams(event_id=event_id, uid=uid, token=token))
        if state is not SessionState.PERSONAL:
            raise HTTPException(status_code=403, detail="Suggestions not allowed")
        return [
            {"item": s.item, "reason": s.reason, "estimated_price": s.estimated_price}
            for s in session.suggest_gifts(lang)
        ]

    return app


app = create_app()
