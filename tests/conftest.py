"""Shared fixtures: a scripted stand-in for the Google endpoints."""

import os
from unittest.mock import patch

import httpx
import pytest

from gcalendar.calendar import CalendarClient

LOGIN_BODY = "SID=sid-123\nLSID=lsid-456\nAuth=auth-789\n"


class FakeGoogle:
    """Answers requests from a queue of responses and records what was sent."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._responses: list = []

    def queue(self, status_code: int, **kwargs) -> None:
        self._responses.append(httpx.Response(status_code, **kwargs))

    def fail_with(self, error: Exception) -> None:
        self._responses.append(error)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._responses:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture(autouse=True)
def clean_env():
    """Keep GCALENDAR_* variables from the developer's shell out of tests."""
    env = {k: v for k, v in os.environ.items() if not k.startswith("GCALENDAR_")}
    with patch.dict(os.environ, env, clear=True):
        yield


@pytest.fixture
def google():
    return FakeGoogle()


@pytest.fixture
def client(google):
    """A client that has not logged in yet."""
    with CalendarClient(
        email="user@example.com",
        password="secret",
        transport=httpx.MockTransport(google),
    ) as client:
        yield client


@pytest.fixture
def authed(client, google):
    """A logged in client with the login request already cleared."""
    google.queue(200, text=LOGIN_BODY)
    assert client.authenticate()
    google.requests.clear()
    return client
