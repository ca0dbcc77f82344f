"""Google ClientLogin authentication utilities."""

from gcalendar.google.client_login import ClientLogin, Credentials, Session
from gcalendar.google.exceptions import (
    BadCredentialsError,
    GoogleAuthError,
    LoginError,
    LoginTransportError,
)

__all__ = [
    "ClientLogin",
    "Credentials",
    "Session",
    "GoogleAuthError",
    "BadCredentialsError",
    "LoginError",
    "LoginTransportError",
]
