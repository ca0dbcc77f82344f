"""Tests for ClientLogin authentication."""

import logging
import os
from unittest.mock import patch
from urllib.parse import parse_qs

import httpx
import pytest

from gcalendar.calendar import CalendarClient
from gcalendar.google import (
    BadCredentialsError,
    ClientLogin,
    Credentials,
    LoginError,
    LoginTransportError,
    Session,
)

from conftest import LOGIN_BODY


class TestSessionParsing:
    """Test token extraction from the login response."""

    def test_extracts_all_tokens(self):
        """Should pick SID, LSID and Auth out of the body."""
        session = Session.from_response_body(LOGIN_BODY)
        assert session.sid == "sid-123"
        assert session.lsid == "lsid-456"
        assert session.auth == "auth-789"

    def test_sid_not_confused_with_lsid(self):
        """Should not read the LSID line as the SID."""
        session = Session.from_response_body("LSID=second\nSID=first\nAuth=tok\n")
        assert session.sid == "first"
        assert session.lsid == "second"

    def test_authorization_header(self):
        """Should format the GoogleLogin authorization header."""
        session = Session(sid=None, lsid=None, auth="tok_1-2")
        assert session.authorization_header == "GoogleLogin auth=tok_1-2"

    def test_missing_auth_token_raises(self):
        """Should raise when no Auth token is present."""
        with pytest.raises(LoginError, match="Auth token"):
            Session.from_response_body("SID=abc\nLSID=def\n")

    def test_tokens_hidden_from_repr(self):
        """Should not leak tokens through repr."""
        session = Session.from_response_body(LOGIN_BODY)
        assert "auth-789" not in repr(session)

    def test_password_hidden_from_repr(self):
        """Should not leak the password through repr."""
        credentials = Credentials("user@example.com", "hunter2")
        assert "hunter2" not in repr(credentials)


class TestClientLogin:
    """Test the login exchange itself."""

    def _http(self, handler):
        return httpx.Client(transport=httpx.MockTransport(handler))

    def test_sends_form_fields(self, google):
        """Should post Email, Passwd, source and service=cl."""
        google.queue(200, text=LOGIN_BODY)
        login = ClientLogin(source="test-suite")

        with self._http(google) as http:
            login.login(http, Credentials("user@example.com", "secret"))

        request = google.last
        assert request.method == "POST"
        assert str(request.url) == ClientLogin.LOGIN_URL
        assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
        assert request.headers["GData-Version"] == "2.1"
        form = parse_qs(request.content.decode())
        assert form == {
            "Email": ["user@example.com"],
            "Passwd": ["secret"],
            "source": ["test-suite"],
            "service": ["cl"],
        }

    def test_forbidden_raises_bad_credentials(self, google):
        """Should raise BadCredentialsError on 403."""
        google.queue(403, text="Error=BadAuthentication")
        with self._http(google) as http, pytest.raises(BadCredentialsError):
            ClientLogin().login(http, Credentials("user@example.com", "wrong"))

    def test_unexpected_status_raises(self, google):
        """Should raise LoginError carrying the status code."""
        google.queue(500)
        with self._http(google) as http, pytest.raises(LoginError) as excinfo:
            ClientLogin().login(http, Credentials("user@example.com", "secret"))
        assert excinfo.value.status_code == 500

    def test_network_error_raises(self, google):
        """Should wrap httpx errors in LoginTransportError."""
        google.fail_with(httpx.ConnectError("connection refused"))
        with self._http(google) as http, pytest.raises(LoginTransportError):
            ClientLogin().login(http, Credentials("user@example.com", "secret"))


class TestCalendarClientAuthentication:
    """Test authenticate() and the authentication state."""

    def test_starts_unauthenticated(self, client):
        """Should not have a session before login."""
        assert client.is_authenticated() is False
        assert client.session is None

    def test_successful_login(self, client, google):
        """Should store the session on HTTP 200."""
        google.queue(200, text=LOGIN_BODY)
        assert client.authenticate() is True
        assert client.is_authenticated() is True
        assert client.session.auth == "auth-789"

    def test_authenticate_is_idempotent(self, client, google):
        """Should not send a second login request once authenticated."""
        google.queue(200, text=LOGIN_BODY)
        assert client.authenticate() is True
        assert client.authenticate() is True
        assert len(google.requests) == 1

    def test_bad_credentials(self, client, google):
        """Should return False and stay unauthenticated on 403."""
        google.queue(403, text="Error=BadAuthentication")
        assert client.authenticate() is False
        assert client.is_authenticated() is False

    def test_other_status(self, client, google):
        """Should return False on unexpected status codes."""
        google.queue(503)
        assert client.authenticate() is False
        assert client.session is None

    def test_network_error(self, client, google):
        """Should return False when the login endpoint is unreachable."""
        google.fail_with(httpx.ConnectTimeout("timed out"))
        assert client.authenticate() is False
        assert client.is_authenticated() is False

    def test_empty_credentials_skip_network(self, google):
        """Should fail without a request when email or password is empty."""
        with CalendarClient(
            email="user@example.com", transport=httpx.MockTransport(google)
        ) as client:
            assert client.authenticate() is False
        assert google.requests == []

    def test_credentials_from_env(self, google):
        """Should read credentials from the environment."""
        env = {"GCALENDAR_EMAIL": "env@example.com", "GCALENDAR_PASSWORD": "env-secret"}
        google.queue(200, text=LOGIN_BODY)
        with (
            patch.dict(os.environ, env),
            CalendarClient(transport=httpx.MockTransport(google)) as client,
        ):
            assert client.email == "env@example.com"
            assert client.authenticate() is True
        form = parse_qs(google.last.content.decode())
        assert form["Passwd"] == ["env-secret"]

    def test_explicit_empty_email_not_replaced_by_env(self, google):
        """Should treat an explicit empty email as missing, not fall back to the env."""
        with (
            patch.dict(os.environ, {"GCALENDAR_EMAIL": "env@x.com"}),
            CalendarClient(
                email="", password="pw", transport=httpx.MockTransport(google)
            ) as client,
        ):
            assert client.authenticate() is False
        assert google.requests == []


class TestLoginLogging:
    """Login logs must not identify the account."""

    def test_success_does_not_log_email(self, client, google, caplog):
        """Should not log the email address on a successful login."""
        caplog.set_level(logging.DEBUG)
        google.queue(200, text=LOGIN_BODY)
        assert client.authenticate() is True
        assert "ClientLogin succeeded" in caplog.text
        assert "user@example.com" not in caplog.text

    def test_bad_credentials_do_not_log_email(self, client, google, caplog):
        """Should not log the email address when the credentials are rejected."""
        caplog.set_level(logging.DEBUG)
        google.queue(403, text="Error=BadAuthentication")
        assert client.authenticate() is False
        assert "rejected" in caplog.text
        assert "user@example.com" not in caplog.text
        assert "secret" not in caplog.text
