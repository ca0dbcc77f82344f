"""Google ClientLogin authentication.

ClientLogin exchanges an account email and password for a set of opaque
tokens. The response body is plain text with one ``key=value`` pair per line:

    SID=DQAAAGgA...7Zg8CTN
    LSID=DQAAAGsA...lk8BBbG
    Auth=DQAAAGgA...dk3fA5N

Only ``Auth`` is needed afterwards; it goes into every authenticated request
as ``Authorization: GoogleLogin auth=<token>``.
"""

import logging
import re
from dataclasses import dataclass, field

import httpx

from gcalendar.config import DEFAULT_SOURCE
from gcalendar.google.exceptions import (
    BadCredentialsError,
    LoginError,
    LoginTransportError,
)

logger = logging.getLogger(__name__)

GDATA_VERSION = "2.1"

_TOKEN_PATTERNS = {
    "sid": re.compile(r"\bSID=([a-z0-9_-]+)", re.IGNORECASE),
    "lsid": re.compile(r"\bLSID=([a-z0-9_-]+)", re.IGNORECASE),
    "auth": re.compile(r"\bAuth=([a-z0-9_-]+)", re.IGNORECASE),
}


@dataclass(frozen=True)
class Credentials:
    """Google account credentials. The password never appears in repr."""

    email: str
    password: str = field(repr=False)

    @property
    def is_complete(self) -> bool:
        return bool(self.email) and bool(self.password)


@dataclass(frozen=True)
class Session:
    """Tokens returned by a successful ClientLogin exchange."""

    sid: str | None = field(repr=False)
    lsid: str | None = field(repr=False)
    auth: str = field(repr=False)

    @property
    def authorization_header(self) -> str:
        """Value for the Authorization header of authenticated requests."""
        return f"GoogleLogin auth={self.auth}"

    @classmethod
    def from_response_body(cls, body: str) -> "Session":
        """Extract the session tokens from a ClientLogin response body.

        Raises:
            LoginError: If the body carries no Auth token.
        """
        tokens = {}
        for name, pattern in _TOKEN_PATTERNS.items():
            match = pattern.search(body)
            tokens[name] = match.group(1) if match else None

        if not tokens["auth"]:
            raise LoginError("Login response did not contain an Auth token", status_code=200)

        return cls(sid=tokens["sid"], lsid=tokens["lsid"], auth=tokens["auth"])


class ClientLogin:
    """Performs the ClientLogin exchange for the Calendar service.

    Example:
        >>> login = ClientLogin(source="my-company-calendar-sync")
        >>> with httpx.Client() as http:
        ...     session = login.login(http, Credentials("me@example.com", "secret"))
        >>> session.authorization_header
        'GoogleLogin auth=...'
    """

    LOGIN_URL = "https://www.google.com/accounts/ClientLogin"
    SERVICE = "cl"

    def __init__(self, source: str | None = None, login_url: str | None = None):
        """Initialize ClientLogin.

        Args:
            source: Short string identifying the calling application.
            login_url: Override for the ClientLogin endpoint.
        """
        self.source = source or DEFAULT_SOURCE
        self.login_url = login_url or self.LOGIN_URL

    def build_form(self, credentials: Credentials) -> dict[str, str]:
        """Form fields sent to the login endpoint."""
        return {
            "Email": credentials.email,
            "Passwd": credentials.password,
            "source": self.source,
            "service": self.SERVICE,
        }

    def login(self, http: httpx.Client, credentials: Credentials) -> Session:
        """Exchange credentials for a session.

        Args:
            http: HTTP client used for the request.
            credentials: Account email and password.

        Returns:
            The new Session.

        Raises:
            BadCredentialsError: If Google answers 403.
            LoginError: On any other unexpected answer.
            LoginTransportError: If the endpoint cannot be reached.
        """
        try:
            response = http.post(
                self.login_url,
                data=self.build_form(credentials),
                headers={"GData-Version": GDATA_VERSION},
                follow_redirects=False,
            )
        except httpx.HTTPError as e:
            raise LoginTransportError(f"Login request failed: {e}") from e

        logger.debug(f"POST {self.login_url} -> {response.status_code}")

        if response.status_code == 403:
            raise BadCredentialsError(credentials.email)
        if response.status_code != 200:
            raise LoginError(
                f"Unexpected login response: HTTP {response.status_code}",
                status_code=response.status_code,
            )

        session = Session.from_response_body(response.text)
        logger.info("ClientLogin succeeded")
        return session
