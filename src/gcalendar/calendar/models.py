"""Calendar data types and result variants."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum
from typing import Any

from gcalendar.calendar.exceptions import (
    CalendarAPIError,
    CalendarError,
    CalendarTransportError,
    InvalidArgumentError,
    NotAuthenticatedError,
)

DEFAULT_MAX_EVENTS = 25

# Colors accepted by the provider for new calendars
CALENDAR_COLORS = (
    "#A32929", "#B1365F", "#7A367A", "#5229A3", "#29527A", "#2952A3", "#1B887A",
    "#28754E", "#0D7813", "#528800", "#88880E", "#AB8B00", "#BE6D00", "#B1440E",
    "#865A5A", "#705770", "#4E5D6C", "#5A6986", "#4A716C", "#6E6E41", "#8D6F47",
    "#853104", "#691426", "#5C1158", "#23164E", "#182C57", "#060D5E", "#125A12",
    "#2F6213", "#2F6309", "#5F6B02", "#8C500B", "#754916", "#6B3304",
    "#5B123B", "#42104A", "#113F47", "#333333", "#0F4B38", "#856508",
)  # fmt: skip


@dataclass(frozen=True)
class CalendarInfo:
    """A calendar as returned by the calendar listing feeds."""

    title: str
    handle: str

    def as_dict(self) -> dict[str, str]:
        return {"title": self.title, "handle": self.handle}


class FailureKind(Enum):
    """Why an operation failed."""

    PRECONDITION = "precondition"
    AUTHENTICATION = "authentication"
    TRANSPORT = "transport"
    REMOTE = "remote"


class Result:
    """Base class for operation outcomes.

    Successful outcomes are truthy, failures are falsy. Callers that need to
    tell an event apart from "unchanged" should branch on the type.
    """

    ok = True

    def __bool__(self) -> bool:
        return self.ok

    def unwrap(self) -> Any:
        """Return the payload, or raise for a failure."""
        return None


@dataclass(frozen=True)
class Data(Result):
    """Decoded response payload."""

    value: Any

    def unwrap(self) -> Any:
        return self.value


@dataclass(frozen=True)
class Empty(Result):
    """The request succeeded but the response carried no content."""

    def unwrap(self) -> Any:
        return {}


@dataclass(frozen=True)
class Unchanged(Result):
    """The event has not changed since the ETag was issued."""

    def unwrap(self) -> Any:
        return True


@dataclass(frozen=True)
class Failure(Result):
    """A failed operation."""

    kind: FailureKind
    reason: str
    status_code: int | None = None

    ok = False

    def unwrap(self) -> Any:
        self.raise_error()

    def raise_error(self) -> None:
        """Raise the CalendarError matching this failure."""
        if self.kind is FailureKind.TRANSPORT:
            raise CalendarTransportError(self.reason)
        if self.kind is FailureKind.REMOTE:
            raise CalendarAPIError(self.reason, status_code=self.status_code)
        if self.kind is FailureKind.AUTHENTICATION:
            raise NotAuthenticatedError(self.reason)
        if self.kind is FailureKind.PRECONDITION:
            raise InvalidArgumentError(self.reason)
        raise CalendarError(self.reason)


def normalize_etag(etag: str) -> str:
    """Wrap an ETag in double quotes unless it already is.

    >>> normalize_etag('abc'), normalize_etag('"abc"'), normalize_etag('abc"')
    ('"abc"', '"abc"', '"abc"')
    """
    if not etag.startswith('"'):
        etag = '"' + etag
    if not etag.endswith('"') or len(etag) == 1:
        etag += '"'
    return etag


def if_match_header(etag: str | None) -> str:
    """If-Match value for a conditional write; ``*`` overwrites unconditionally."""
    return normalize_etag(etag) if etag else "*"


def coerce_max_results(value: Any) -> int:
    """Use the value if it is numeric, else the default page size."""
    if isinstance(value, bool):
        return DEFAULT_MAX_EVENTS
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return DEFAULT_MAX_EVENTS


def to_iso8601(value: datetime | date | str) -> str:
    """Format a date/time as ISO-8601 with a UTC offset.

    Strings are parsed as ISO dates or date-times. Naive values are taken to
    be in the local timezone.

    Raises:
        InvalidArgumentError: If a string cannot be parsed.
    """
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError as e:
            raise InvalidArgumentError(f"Invalid date/time: {value!r}") from e
    elif isinstance(value, date) and not isinstance(value, datetime):
        value = datetime.combine(value, time())

    if value.tzinfo is None:
        value = value.astimezone()
    return value.isoformat(timespec="seconds")
