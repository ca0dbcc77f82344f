"""Google Calendar Data API client with ClientLogin authentication.

Usage:
    from gcalendar.calendar import CalendarClient

    client = CalendarClient(email="me@example.com", password="secret")
    if client.authenticate():
        calendars = client.get_own_calendars()

        events = client.get_events("me@example.com", max_results=10)

        created = client.create_event(
            "me@example.com", quick=True, details="Lunch with Bob tomorrow 12:30"
        )

Every operation returns a Result: Data, Empty or Unchanged on success and a
falsy Failure otherwise. delete_calendar() and delete_event() return a bool.
"""

from __future__ import annotations

from gcalendar.calendar.client import CalendarClient
from gcalendar.calendar.exceptions import (
    CalendarAPIError,
    CalendarError,
    CalendarTransportError,
    InvalidArgumentError,
    NotAuthenticatedError,
)
from gcalendar.calendar.models import (
    CALENDAR_COLORS,
    CalendarInfo,
    Data,
    Empty,
    Failure,
    FailureKind,
    Result,
    Unchanged,
    normalize_etag,
)

__all__ = [
    "CalendarClient",
    "CalendarInfo",
    "CALENDAR_COLORS",
    "Result",
    "Data",
    "Empty",
    "Unchanged",
    "Failure",
    "FailureKind",
    "normalize_etag",
    "CalendarError",
    "CalendarAPIError",
    "CalendarTransportError",
    "InvalidArgumentError",
    "NotAuthenticatedError",
]
