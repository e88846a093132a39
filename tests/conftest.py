"""
Pytest configuration and fixtures for fetch-client tests.
"""

import json
from http import HTTPStatus

import pytest
import responses as responses_lib
from requests.structures import CaseInsensitiveDict

from fetch_client.core.transport import BaseResponse, Transport
from fetch_client.core.logging.config import LoggingConfig


class FakeResponse(BaseResponse):
    """In-memory ResponseLike for pipeline tests."""

    def __init__(self, status=200, body=b"", headers=None, status_text=None, redirected=False):
        super().__init__()
        self.status = status
        self.status_text = status_text if status_text is not None else HTTPStatus(status).phrase
        self.headers = CaseInsensitiveDict(headers or {})
        self.redirected = redirected
        self.url = None
        self._body = body.encode('utf-8') if isinstance(body, str) else body
        self.closed = False

    async def _read(self):
        return self._body

    async def _iter_bytes(self):
        for i in range(0, len(self._body), 4):
            yield self._body[i:i + 4]

    async def aclose(self):
        self.closed = True


def json_response(payload, status=200, headers=None):
    """FakeResponse carrying a JSON payload with matching headers."""
    content = json.dumps(payload).encode('utf-8')
    merged = {"Content-Type": "application/json", "Content-Length": str(len(content))}
    merged.update(headers or {})
    return FakeResponse(status=status, body=content, headers=merged)


class FakeTransport(Transport):
    """
    Transport recording every call.

    ``handler(url, options)`` builds the response; by default an empty 200.
    """

    def __init__(self, handler=None):
        self.handler = handler or (lambda url, options: FakeResponse(200))
        self.calls = []
        self.responses = []
        self.closed = False

    async def __call__(self, url, options):
        self.calls.append((url, options))
        response = self.handler(url, options)
        self.responses.append(response)
        return response

    @property
    def last_url(self):
        return self.calls[-1][0]

    @property
    def last_options(self):
        return self.calls[-1][1]

    async def aclose(self):
        self.closed = True


@pytest.fixture
def base_url():
    """Base URL for testing."""
    return "https://api.example.com"


@pytest.fixture
def fake_transport():
    """Transport returning an empty 200 response."""
    return FakeTransport()


@pytest.fixture
def mock_responses():
    """Mock HTTP responses using responses library."""
    with responses_lib.RequestsMock() as rsps:
        yield rsps


@pytest.fixture
def logging_config_with_file(tmp_path):
    """
    LoggingConfig writing JSON lines to a temporary file.
    """
    log_file = tmp_path / "fetch.log"
    return LoggingConfig.create(
        level="DEBUG",
        format="json",
        enable_console=False,
        enable_file=True,
        file_path=str(log_file),
    )
