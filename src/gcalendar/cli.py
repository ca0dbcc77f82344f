"""CLI for gcalendar - Google Calendar from the command line.

Usage:
    gcalendar status                                   # Show configured credentials
    gcalendar login                                    # Check that login works
    gcalendar calendars [--own]                        # List calendars
    gcalendar create-calendar TITLE --timezone TZ --color C --location L
    gcalendar delete-calendar HANDLE
    gcalendar events HANDLE [--max N] [--from DATE] [--to DATE]
    gcalendar event HANDLE ID [--etag ETAG]            # Get one event
    gcalendar find HANDLE QUERY [--max N]              # Full text search
    gcalendar add-event HANDLE --quick DETAILS         # Quick-add
    gcalendar add-event HANDLE --title T --start S --end E --location L
    gcalendar update-event HANDLE ID PATH [--etag ETAG]
    gcalendar delete-event HANDLE ID [--etag ETAG]
    gcalendar acl-add HANDLE [--role R] [--scope S] [--scope-type T]

Credentials are read from GCALENDAR_EMAIL and GCALENDAR_PASSWORD (or .env).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any


def cmd_status() -> int:
    """Show configured credentials."""
    from gcalendar.config import get_credential_status

    status = get_credential_status()

    print("=" * 60)
    print("GCALENDAR CREDENTIAL STATUS")
    print("=" * 60)
    print()
    print(f"Repository: {status['repo_root']}")
    print(f".env:       {'[x]' if status['env_file'] else '[ ]'}")
    print()
    print(f"  email:      {status['email'] or '[ ] not set'}")
    print(f"  password:   {'[x]' if status['password'] else '[ ]'}")
    print(f"  source:     {status['source']}")
    print(f"  timeout:    {status['timeout']}s")
    print(f"  verify TLS: {'yes' if status['verify_tls'] else 'NO'}")
    print()

    return 0 if status["email"] and status["password"] else 1


def _connect():
    """Create and authenticate a client, or print why that failed."""
    from gcalendar.calendar import CalendarClient

    client = CalendarClient()
    if not client.authenticate():
        print("Error: login failed - check GCALENDAR_EMAIL and GCALENDAR_PASSWORD")
        client.close()
        return None
    return client


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, list):
        return [_to_jsonable(v) for v in value]
    if hasattr(value, "as_dict"):
        return value.as_dict()
    return value


def _print_result(result) -> int:
    """Print a Result as JSON and map it to an exit code."""
    from gcalendar.calendar import CalendarError, Unchanged

    if isinstance(result, Unchanged):
        print("Unchanged")
        return 0

    try:
        value = result.unwrap()
    except CalendarError as e:
        print(f"Error: {e}")
        return 1

    print(json.dumps(_to_jsonable(value), indent=2, ensure_ascii=False))
    return 0


def _print_flag(ok: bool, success: str) -> int:
    print(success if ok else "Error: request failed")
    return 0 if ok else 1


def cmd_login() -> int:
    """Check that the configured credentials can log in."""
    client = _connect()
    if client is None:
        return 1
    with client:
        print(f"Logged in as {client.email}")
    return 0


def cmd_calendars(own: bool) -> int:
    client = _connect()
    if client is None:
        return 1
    with client:
        result = client.get_own_calendars() if own else client.get_all_calendars()
        return _print_result(result)


def cmd_create_calendar(args: argparse.Namespace) -> int:
    client = _connect()
    if client is None:
        return 1
    with client:
        result = client.create_calendar(
            title=args.title,
            details=args.details,
            timezone=args.timezone,
            hidden=args.hidden,
            color=args.color,
            location=args.location,
        )
        return _print_result(result)


def cmd_delete_calendar(handle: str) -> int:
    client = _connect()
    if client is None:
        return 1
    with client:
        return _print_flag(client.delete_calendar(handle), f"Deleted calendar {handle}")


def cmd_events(args: argparse.Namespace) -> int:
    client = _connect()
    if client is None:
        return 1
    with client:
        result = client.get_events(
            args.handle, max_results=args.max, start_min=args.start, start_max=args.end
        )
        return _print_result(result)


def cmd_event(args: argparse.Namespace) -> int:
    client = _connect()
    if client is None:
        return 1
    with client:
        if args.etag:
            result = client.get_event(args.handle, args.id, args.etag)
        else:
            result = client.get_event_by_id(args.handle, args.id)
        return _print_result(result)


def cmd_find(args: argparse.Namespace) -> int:
    client = _connect()
    if client is None:
        return 1
    with client:
        return _print_result(client.find_event(args.handle, args.query, max_results=args.max))


def cmd_add_event(args: argparse.Namespace) -> int:
    client = _connect()
    if client is None:
        return 1
    with client:
        if args.quick:
            result = client.create_event(args.handle, quick=True, details=args.quick)
        else:
            result = client.create_event(
                args.handle,
                quick=False,
                details=args.details,
                title=args.title,
                transparency=args.transparency,
                status=args.status,
                location=args.location,
                start=args.start,
                end=args.end,
            )
        return _print_result(result)


def cmd_update_event(args: argparse.Namespace) -> int:
    source = Path(args.path).expanduser()
    if not source.exists():
        print(f"Error: File not found: {source}")
        return 1

    client = _connect()
    if client is None:
        return 1
    with client:
        result = client.update_event(args.handle, args.id, args.etag, source.read_text())
        return _print_result(result)


def cmd_delete_event(args: argparse.Namespace) -> int:
    client = _connect()
    if client is None:
        return 1
    with client:
        deleted = client.delete_event(args.handle, args.id, args.etag)
        return _print_flag(deleted, f"Deleted event {args.id}")


def cmd_acl_add(args: argparse.Namespace) -> int:
    client = _connect()
    if client is None:
        return 1
    with client:
        result = client.add_user_to_acl(
            args.handle, role=args.role, scope=args.scope, scope_type=args.scope_type
        )
        return _print_result(result)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gcalendar",
        description="Google Calendar (GData v2.1) from the command line",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Command")

    subparsers.add_parser("status", help="Show configured credentials")
    subparsers.add_parser("login", help="Check that login works")

    calendars_parser = subparsers.add_parser("calendars", help="List calendars")
    calendars_parser.add_argument("--own", action="store_true", help="Only owned calendars")

    create_parser = subparsers.add_parser("create-calendar", help="Create a calendar")
    create_parser.add_argument("title", help="Calendar title")
    create_parser.add_argument("--details", default="", help="Description")
    create_parser.add_argument("--timezone", required=True, help="e.g. Europe/Stockholm")
    create_parser.add_argument("--color", default="#2952A3", help="Calendar color")
    create_parser.add_argument("--location", required=True, help="Geographic location")
    create_parser.add_argument("--hidden", action="store_true", help="Hide the calendar")

    delete_cal_parser = subparsers.add_parser("delete-calendar", help="Delete a calendar")
    delete_cal_parser.add_argument("handle", help="Calendar handle")

    events_parser = subparsers.add_parser("events", help="List events")
    events_parser.add_argument("handle", help="Calendar handle")
    events_parser.add_argument("--max", type=int, default=25, help="Maximum events")
    events_parser.add_argument("--from", dest="start", help="Earliest start (ISO date)")
    events_parser.add_argument("--to", dest="end", help="Latest start (ISO date)")

    event_parser = subparsers.add_parser("event", help="Get one event")
    event_parser.add_argument("handle", help="Calendar handle")
    event_parser.add_argument("id", help="Event ID")
    event_parser.add_argument("--etag", help="Only fetch if changed since this ETag")

    find_parser = subparsers.add_parser("find", help="Search events")
    find_parser.add_argument("handle", help="Calendar handle")
    find_parser.add_argument("query", help="Search text")
    find_parser.add_argument("--max", type=int, default=25, help="Maximum events")

    add_parser = subparsers.add_parser("add-event", help="Create an event")
    add_parser.add_argument("handle", help="Calendar handle")
    add_parser.add_argument("--quick", metavar="TEXT", help="Quick-add from free text")
    add_parser.add_argument("--title", help="Event title")
    add_parser.add_argument("--details", default="", help="Description")
    add_parser.add_argument("--transparency", default="opaque", help="opaque/transparent")
    add_parser.add_argument("--status", default="confirmed", help="Event status")
    add_parser.add_argument("--location", help="Event location")
    add_parser.add_argument("--start", help="Start (ISO date-time)")
    add_parser.add_argument("--end", help="End (ISO date-time)")

    update_parser = subparsers.add_parser("update-event", help="Replace an event")
    update_parser.add_argument("handle", help="Calendar handle")
    update_parser.add_argument("id", help="Event ID")
    update_parser.add_argument("path", help="Path to the event JSON")
    update_parser.add_argument("--etag", help="Only update if unchanged since this ETag")

    delete_event_parser = subparsers.add_parser("delete-event", help="Delete an event")
    delete_event_parser.add_argument("handle", help="Calendar handle")
    delete_event_parser.add_argument("id", help="Event ID")
    delete_event_parser.add_argument("--etag", help="Only delete if unchanged since this ETag")

    acl_parser = subparsers.add_parser("acl-add", help="Share a calendar")
    acl_parser.add_argument("handle", help="Calendar handle")
    acl_parser.add_argument("--role", default="read", help="root/owner/editor/freebusy/read/none")
    acl_parser.add_argument("--scope", help="E-mail address or domain")
    acl_parser.add_argument("--scope-type", default="default", help="user/domain/default")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv if argv is not None else sys.argv[1:])

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "status":
        return cmd_status()
    if args.command == "login":
        return cmd_login()
    if args.command == "calendars":
        return cmd_calendars(args.own)
    if args.command == "create-calendar":
        return cmd_create_calendar(args)
    if args.command == "delete-calendar":
        return cmd_delete_calendar(args.handle)
    if args.command == "events":
        return cmd_events(args)
    if args.command == "event":
        return cmd_event(args)
    if args.command == "find":
        return cmd_find(args)
    if args.command == "add-event":
        return cmd_add_event(args)
    if args.command == "update-event":
        return cmd_update_event(args)
    if args.command == "delete-event":
        return cmd_delete_event(args)
    if args.command == "acl-add":
        return cmd_acl_add(args)

    return 0


if __name__ == "__main__":
    sys.exit(main())
