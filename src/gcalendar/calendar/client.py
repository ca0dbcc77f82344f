"""Google Calendar Data API client with ClientLogin authentication.

Talks to the GData v2.1 calendar feeds using their JSON-C representation.
Every public operation is total: expected problems (missing arguments, no
session, rejected or unreachable remote) come back as a falsy ``Failure``
instead of an exception.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from gcalendar.calendar.exceptions import CalendarTransportError, InvalidArgumentError
from gcalendar.calendar.models import (
    CALENDAR_COLORS,
    DEFAULT_MAX_EVENTS,
    CalendarInfo,
    Data,
    Empty,
    Failure,
    FailureKind,
    Result,
    Unchanged,
    coerce_max_results,
    if_match_header,
    normalize_etag,
    to_iso8601,
)
from gcalendar.config import get_settings
from gcalendar.google.client_login import GDATA_VERSION, ClientLogin, Credentials, Session
from gcalendar.google.exceptions import BadCredentialsError, GoogleAuthError

logger = logging.getLogger(__name__)


class CalendarClient:
    """Google Calendar client authenticated with ClientLogin.

    Example:
        >>> client = CalendarClient(email="me@example.com", password="secret")
        >>> if client.authenticate():
        ...     calendars = client.get_own_calendars()
        ...     for calendar in calendars.unwrap():
        ...         print(calendar.title, calendar.handle)
    """

    FEEDS_URL = "https://www.google.com/calendar/feeds"
    JSON_HEADERS = {"Content-Type": "application/json"}

    def __init__(
        self,
        email: str | None = None,
        password: str | None = None,
        source: str | None = None,
        timeout: float | None = None,
        verify: bool | None = None,
        transport: httpx.BaseTransport | None = None,
        login_url: str | None = None,
    ):
        """Initialize Calendar client.

        Args:
            email: Google account email. If None, reads from GCALENDAR_EMAIL.
            password: Account password. If None, reads from GCALENDAR_PASSWORD.
            source: Application identifier sent at login. If None, reads from
                GCALENDAR_SOURCE.
            timeout: Request timeout in seconds (default: 30).
            verify: Verify TLS certificates (default: True).
            transport: Custom httpx transport, mostly for tests.
            login_url: Override for the ClientLogin endpoint.
        """
        settings = get_settings()
        self._credentials = Credentials(
            email=email if email is not None else settings.email,
            password=password if password is not None else settings.password,
        )
        self._login = ClientLogin(source=source or settings.source, login_url=login_url)
        self._client = httpx.Client(
            timeout=timeout if timeout is not None else settings.timeout,
            verify=verify if verify is not None else settings.verify_tls,
            transport=transport,
        )
        self._session: Session | None = None

    @property
    def email(self) -> str:
        return self._credentials.email

    @property
    def session(self) -> Session | None:
        """The session created by authenticate(), if any."""
        return self._session

    # =========================================================================
    # Authentication
    # =========================================================================

    def authenticate(self) -> bool:
        """Log in with ClientLogin.

        Returns True straight away if the client is already authenticated.

        Returns:
            True if a session is available, False otherwise.
        """
        if self._session is not None:
            return True
        if not self._credentials.is_complete:
            logger.warning("Cannot authenticate: email and password are required")
            return False

        try:
            session = self._login.login(self._client, self._credentials)
        except BadCredentialsError as e:
            logger.warning(str(e))
            return False
        except GoogleAuthError as e:
            logger.error(f"Authentication failed: {e}")
            return False

        self._session = session
        return True

    def is_authenticated(self) -> bool:
        """Check if client holds a session."""
        return self._session is not None

    # =========================================================================
    # Calendars
    # =========================================================================

    def get_all_calendars(self) -> Result:
        """List every calendar visible to the account.

        Returns:
            Data holding a list of CalendarInfo, or Failure.
        """
        return self._list_calendars("allcalendars")

    def get_own_calendars(self) -> Result:
        """List the calendars owned by the account.

        Returns:
            Data holding a list of CalendarInfo, or Failure.
        """
        return self._list_calendars("owncalendars")

    def _list_calendars(self, feed: str) -> Result:
        if self._session is None:
            return self._not_authenticated()

        url = f"{self.FEEDS_URL}/default/{feed}/full"
        try:
            response = self._send("GET", url, params={"alt": "jsonc"}, follow_redirects=True)
        except (CalendarTransportError, InvalidArgumentError) as e:
            return self._request_failed(e)

        result = self._json_result(response, 200)
        if not result:
            return result
        if not isinstance(result.value, dict):
            return Failure(FailureKind.REMOTE, "Calendar feed is not a JSON object", 200)

        data = result.value.get("data")
        items = data.get("items") if isinstance(data, dict) else None
        if not isinstance(items, (list, type(None))):
            return Failure(FailureKind.REMOTE, "Calendar feed items is not a list", 200)
        return Data(
            [self._parse_calendar(item) for item in items or [] if isinstance(item, dict)]
        )

    def _parse_calendar(self, item: dict[str, Any]) -> CalendarInfo:
        """Derive the calendar handle from its event feed link."""
        link = item.get("eventFeedLink")
        if not isinstance(link, str):
            link = ""
        handle = link.replace(f"{self.FEEDS_URL}/", "").replace("/private/full", "")
        return CalendarInfo(title=item.get("title") or "", handle=handle)

    def create_calendar(
        self,
        title: str,
        details: str,
        timezone: str,
        hidden: bool,
        color: str,
        location: str,
    ) -> Result:
        """Create a calendar owned by the account.

        Args:
            title: Calendar title.
            details: Free text description (may be empty).
            timezone: Olson timezone name, e.g. "Europe/Stockholm".
            hidden: Whether the calendar is hidden in the UI.
            color: One of CALENDAR_COLORS.
            location: Geographic location of the calendar.

        Returns:
            Data with the created calendar, or Failure.
        """
        if self._session is None:
            return self._not_authenticated()
        if not title or not timezone or not color or not location:
            return self._invalid("title, timezone, color and location are required")
        if not isinstance(color, str):
            return self._invalid("color must be a string")
        if not isinstance(hidden, bool):
            return self._invalid("hidden must be a bool")
        if color.upper() not in CALENDAR_COLORS:
            logger.warning(f"Color {color} is not in the calendar palette")

        payload = {
            "data": {
                "title": title,
                "details": details,
                "timeZone": timezone,
                "hidden": hidden,
                "color": color,
                "location": location,
            }
        }
        url = f"{self.FEEDS_URL}/default/owncalendars/full"
        result = self._submit("POST", url, payload, self.JSON_HEADERS, expected=201)
        if result:
            logger.info(f"Created calendar {title!r}")
        return result

    def delete_calendar(self, handle: str) -> bool:
        """Delete a calendar owned by the account.

        Args:
            handle: Calendar handle.

        Returns:
            True if deleted.
        """
        if self._session is None or not handle:
            return False

        url = f"{self.FEEDS_URL}/default/owncalendars/full/{handle}"
        try:
            response = self._send("DELETE", url)
        except (CalendarTransportError, InvalidArgumentError) as e:
            logger.error(str(e))
            return False

        if response.status_code == 200:
            logger.info(f"Deleted calendar {handle}")
            return True
        return False

    # =========================================================================
    # Events
    # =========================================================================

    def get_events(
        self,
        handle: str,
        max_results: int = DEFAULT_MAX_EVENTS,
        start_min: Any = None,
        start_max: Any = None,
    ) -> Result:
        """Get events from a calendar.

        Args:
            handle: Calendar handle.
            max_results: Maximum events to return. Non-numeric values fall
                back to 25.
            start_min: Only events starting at or after this date/time.
            start_max: Only events starting before this date/time.

        Returns:
            Data with the event feed, or Failure.
        """
        if self._session is None:
            return self._not_authenticated()
        if not handle:
            return self._invalid("handle is required")

        params: dict[str, Any] = {"alt": "jsonc", "max-results": coerce_max_results(max_results)}
        try:
            if start_min:
                params["start-min"] = to_iso8601(start_min)
            if start_max:
                params["start-max"] = to_iso8601(start_max)
        except InvalidArgumentError as e:
            return self._invalid(str(e))

        try:
            response = self._send(
                "GET", self._event_feed_url(handle), params=params, follow_redirects=True
            )
        except (CalendarTransportError, InvalidArgumentError) as e:
            return self._request_failed(e)

        return self._json_result(response, 200)

    def get_event_by_id(self, handle: str, event_id: str) -> Result:
        """Get a single event.

        Args:
            handle: Calendar handle.
            event_id: Event entry ID.

        Returns:
            Data with the event, Empty if the response had no body, or Failure.
        """
        if self._session is None:
            return self._not_authenticated()
        if not handle:
            return self._invalid("handle is required")

        try:
            response = self._send(
                "GET",
                self._entry_url(handle, event_id),
                params={"alt": "jsonc"},
                follow_redirects=True,
            )
        except (CalendarTransportError, InvalidArgumentError) as e:
            return self._request_failed(e)

        if response.status_code != 200:
            return self._rejected(response)
        if not response.content.strip():
            return Empty()

        result = self._decode(response)
        if result and not result.value and not isinstance(result.value, dict):
            return Empty()
        return result

    def get_event(self, handle: str, event_id: str, etag: str) -> Result:
        """Fetch an event only if it changed since ``etag`` was issued.

        Args:
            handle: Calendar handle ("default" if empty).
            event_id: Event entry ID.
            etag: ETag from the last copy of the event, quoted or not.

        Returns:
            Data with the new event, Unchanged, or Failure.
        """
        if self._session is None:
            return self._not_authenticated()
        if not event_id or not etag:
            return self._invalid("event_id and etag are required")

        try:
            response = self._send(
                "GET",
                self._entry_url(handle or "default", event_id),
                params={"alt": "jsonc"},
                headers={"If-None-Match": normalize_etag(etag)},
                follow_redirects=True,
            )
        except (CalendarTransportError, InvalidArgumentError) as e:
            return self._request_failed(e)

        if response.status_code in (304, 412):
            return Unchanged()
        return self._json_result(response, 200)

    def find_event(
        self,
        handle: str,
        query: str,
        max_results: int = DEFAULT_MAX_EVENTS,
    ) -> Result:
        """Full text search for events.

        Args:
            handle: Calendar handle ("default" if empty).
            query: Search text.
            max_results: Maximum events to return.

        Returns:
            Data with the matching event feed, or Failure.
        """
        if self._session is None:
            return self._not_authenticated()
        if not query:
            return self._invalid("query is required")

        params = {"q": query, "alt": "jsonc", "max-results": coerce_max_results(max_results)}
        try:
            response = self._send(
                "GET",
                self._event_feed_url(handle or "default"),
                params=params,
                follow_redirects=True,
            )
        except (CalendarTransportError, InvalidArgumentError) as e:
            return self._request_failed(e)

        return self._json_result(response, 200)

    def create_event(
        self,
        handle: str,
        quick: bool,
        details: str | None,
        title: str | None = None,
        transparency: str | None = None,
        status: str | None = None,
        location: str | None = None,
        start: Any = None,
        end: Any = None,
    ) -> Result:
        """Create an event.

        In quick mode only ``details`` is used and Google parses the event
        out of the free text ("Lunch with Bob tomorrow 12:30"). Otherwise
        title, transparency, status, location, start and end are required.

        Args:
            handle: Calendar handle ("default" if empty).
            quick: Use quick-add.
            details: Event description, or the quick-add text.
            title: Event title.
            transparency: "opaque" or "transparent".
            status: "confirmed", "tentative" or "canceled".
            location: Event location.
            start: Start date/time (datetime or ISO string).
            end: End date/time (datetime or ISO string).

        Returns:
            Data with the created event, or Failure.
        """
        if self._session is None:
            return self._not_authenticated()

        if quick:
            if not details:
                return self._invalid("details are required for quick-add")
            payload: dict[str, Any] = {"data": {"details": details, "quickAdd": True}}
        else:
            if not all((title, transparency, status, location, start, end)):
                return self._invalid(
                    "title, transparency, status, location, start and end are required"
                )
            try:
                when = {"start": to_iso8601(start), "end": to_iso8601(end)}
            except InvalidArgumentError as e:
                return self._invalid(str(e))
            payload = {
                "data": {
                    "title": title,
                    "details": details or "",
                    "transparency": transparency,
                    "status": status,
                    "location": location,
                    "when": [when],
                }
            }

        url = self._event_feed_url(handle or "default")
        result = self._submit("POST", url, payload, self.JSON_HEADERS, expected=201)
        if result:
            logger.info(f"Created event in {handle or 'default'}")
        return result

    def update_event(
        self,
        handle: str,
        event_id: str,
        etag: str | None,
        event: str | dict[str, Any],
    ) -> Result:
        """Replace an event.

        Args:
            handle: Calendar handle.
            event_id: Event entry ID.
            etag: ETag of the copy being replaced. Without one the event is
                overwritten unconditionally.
            event: Complete event JSON (string or dict), as previously
                retrieved and then modified.

        Returns:
            Data with the updated event, or Failure.
        """
        if self._session is None:
            return self._not_authenticated()
        if not handle or not event_id or not event:
            return self._invalid("handle, event_id and event are required")

        if isinstance(event, str):
            try:
                event = json.loads(event)
            except ValueError:
                return self._invalid("event is not valid JSON")
        if not isinstance(event, dict):
            return self._invalid("event must be a JSON object")

        headers = {**self.JSON_HEADERS, "If-Match": if_match_header(etag)}
        result = self._submit(
            "PUT", self._entry_url(handle, event_id), event, headers, expected=200
        )
        if result:
            logger.info(f"Updated event {event_id}")
        return result

    def delete_event(self, handle: str, event_id: str, etag: str | None = None) -> bool:
        """Delete an event.

        If ``etag`` is given the event is only deleted if it has not changed
        since that ETag was issued.

        Returns:
            True if deleted.
        """
        if self._session is None or not handle or not event_id:
            return False

        try:
            response = self._send(
                "DELETE",
                self._entry_url(handle, event_id),
                headers={"If-Match": if_match_header(etag)},
            )
        except (CalendarTransportError, InvalidArgumentError) as e:
            logger.error(str(e))
            return False

        if response.status_code == 200:
            logger.info(f"Deleted event {event_id}")
            return True
        return False

    # =========================================================================
    # Access control
    # =========================================================================

    def add_user_to_acl(
        self,
        handle: str = "default",
        role: str = "read",
        scope: str | None = None,
        scope_type: str = "default",
    ) -> Result:
        """Add an entry to a calendar's access control list.

        Args:
            handle: Calendar handle.
            role: Access level (root, owner, editor, freebusy, read, none).
            scope: E-mail address or domain name; omitted for "default".
            scope_type: "user", "domain" or "default".

        Returns:
            Data with the created ACL entry, or Failure.
        """
        if self._session is None:
            return self._not_authenticated()

        entry: dict[str, Any] = {"scopeType": scope_type, "role": role}
        if scope:
            entry["scope"] = scope

        url = f"{self.FEEDS_URL}/{handle or 'default'}/acl/full/"
        result = self._submit("POST", url, {"data": entry}, self.JSON_HEADERS, expected=201)
        if result:
            logger.info(f"Granted {role} on {handle} to {scope or scope_type}")
        return result

    # =========================================================================
    # HTTP helpers
    # =========================================================================

    def _event_feed_url(self, handle: str) -> str:
        return f"{self.FEEDS_URL}/{handle}/private/full"

    def _entry_url(self, handle: str, event_id: str) -> str:
        return f"{self.FEEDS_URL}/{handle}/private/full/{event_id}"

    def _not_authenticated(self) -> Failure:
        return Failure(FailureKind.AUTHENTICATION, "Not authenticated; call authenticate()")

    def _invalid(self, reason: str) -> Failure:
        logger.debug(f"Rejected call: {reason}")
        return Failure(FailureKind.PRECONDITION, reason)

    def _request_failed(self, error: CalendarTransportError | InvalidArgumentError) -> Failure:
        if isinstance(error, InvalidArgumentError):
            return self._invalid(str(error))
        logger.error(str(error))
        return Failure(FailureKind.TRANSPORT, str(error))

    def _rejected(self, response: httpx.Response) -> Failure:
        return Failure(
            FailureKind.REMOTE,
            f"Unexpected response: HTTP {response.status_code}",
            status_code=response.status_code,
        )

    def _decode(self, response: httpx.Response) -> Result:
        try:
            return Data(response.json())
        except ValueError:
            return Failure(
                FailureKind.REMOTE, "Response is not valid JSON", status_code=response.status_code
            )

    def _json_result(self, response: httpx.Response, expected: int) -> Result:
        if response.status_code != expected:
            return self._rejected(response)
        return self._decode(response)

    def _send(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        content: str | None = None,
        follow_redirects: bool = False,
    ) -> httpx.Response:
        """Send an authenticated request.

        Raises:
            CalendarTransportError: If the request could not be completed.
        """
        request_headers = {
            "GData-Version": GDATA_VERSION,
            "Authorization": self._session.authorization_header,
            **(headers or {}),
        }
        try:
            response = self._client.request(
                method,
                url,
                params=params,
                headers=request_headers,
                content=content,
                follow_redirects=follow_redirects,
            )
        except httpx.InvalidURL as e:
            raise InvalidArgumentError(f"Cannot build request URL from {url!r}: {e}") from e
        except httpx.HTTPError as e:
            raise CalendarTransportError(f"{method} {url} failed: {e}") from e

        logger.debug(f"{method} {response.url} -> {response.status_code}")
        return response

    def _submit(
        self,
        method: str,
        url: str,
        payload: dict[str, Any],
        headers: dict[str, str],
        expected: int,
    ) -> Result:
        """Send a JSON body, following at most one 302 with the same body."""
        body = json.dumps(payload)
        try:
            response = self._send(method, url, headers=headers, content=body)
            if response.status_code == 302 and "Location" in response.headers:
                try:
                    location = response.url.join(response.headers["Location"])
                except httpx.InvalidURL:
                    return Failure(FailureKind.REMOTE, "Redirect Location is not a valid URL", 302)
                logger.debug(f"Redirected to {location}")
                response = self._send(method, str(location), headers=headers, content=body)
        except (CalendarTransportError, InvalidArgumentError) as e:
            return self._request_failed(e)

        return self._json_result(response, expected)

    def close(self):
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
