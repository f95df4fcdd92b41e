"""Command line entry point: create events, inspect them and serve the API."""

from __future__ import annotations

import argparse
import asyncio
import sys

from giftexchange.backend.assignment import validate_names
from giftexchange.backend.config import BackendSettings, configure_logging, load_settings
from giftexchange.backend.errors import GiftExchangeError
from giftexchange.backend.session import EntryParams, EventSession, SessionState
from giftexchange.backend.store import create_store


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="giftexchange", description="Gift exchange organiser")
    commands = parser.add_subparsers(dest="command", required=True)

    create = commands.add_parser("create", help="draw assignments and print share links")
    create.add_argument("names", nargs="+")

    show = commands.add_parser("show", help="show an event lobby or a personal view")
    show.add_argument("--event", required=True)
    show.add_argument("--uid", default=None)
    show.add_argument("--token", default=None)

    serve = commands.add_parser("serve", help="run the HTTP API")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)

    commands.add_parser("migrate", help="apply the local storage schema to PostgreSQL")
    return parser.parse_args(argv)


def _session(settings: BackendSettings) -> EventSession:
    return EventSession(store=create_store(settings), public_url=settings.public_url)


async def run_create(settings: BackendSettings, names: list[str]) -> int:
    session = _session(settings)
    event_id = await session.create_event(validate_names(names))
    event = session.require_event()
    print(f"Event: {event_id}")
    if session.is_local:
        print("Stored locally only: links work on this machine, not across devices.")
    for participant in event.participants:
        print(f"{participant.name}: {session.share_link(participant)}")
    return 0


async def run_show(settings: BackendSettings, event_id: str, uid: str | None, token: str | None) -> int:
    session = _session(settings)
    state = await session.start(EntryParams(event_id=event_id, uid=uid, token=token))
    if state is SessionState.NOT_FOUND:
        print(f"Event not found: {event_id}", file=sys.stderr)
        return 1
    if state is SessionState.PERSONAL:
        view = session.require_view()
        assignee = view.assignee
        print(f"{view.me.name}, you are giving a gift to {assignee.name}.")
        for item in assignee.wishlist:
            print(f"  - {item}")
        return 0

    if uid is not None or token is not None:
        print("Access link not valid; showing the lobby instead.", file=sys.stderr)
    for participant in session.require_event().participants:
        status = "claimed" if participant.is_claimed else "open"
        print(f"{participant.id}  {participant.name} ({status})")
    return 0


def run_serve(settings: BackendSettings, host: str | None, port: int | None) -> int:
    import uvicorn

    uvicorn.run(
        "giftexchange.backend.api:app",
        host=host or settings.host,
        port=port or settings.port,
        log_level=settings.log_level.lower(),
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = load_settings()
    configure_logging(settings.log_level)

    try:
        if args.command == "create":
            return asyncio.run(run_create(settings, args.names))
        if args.command == "show":
            return asyncio.run(run_show(settings, args.event, args.uid, args.token))
        if args.command == "serve":
            return run_serve(settings, args.host, args.port)
        from giftexchange.backend.migrate import main as migrate

        migrate()
        return 0
    except GiftExchangeError as exc:
        print(str(exc), file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
