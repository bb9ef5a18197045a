import logging

import pytest
import requests_mock

from apicaller.api_client import APIClient
from apicaller.exceptions import TransportError
from apicaller.logging import Logger
from apicaller.transport import HttpResponse


@pytest.fixture
def base_url():
    return "https://api.example.com"


@pytest.fixture
def quiet_logger():
    """Logger that writes nowhere, so test output stays readable."""
    return Logger(name="apicaller-test", level=logging.DEBUG, log_to_console=False)


@pytest.fixture
def mock():
    """Setup fixture for requests_mock."""
    with requests_mock.Mocker() as m:
        yield m


@pytest.fixture
def client_factory(base_url, quiet_logger):
    """
    Factory fixture that provides configurable APIClient instances.

    Every client created is closed after the test.
    """
    clients = []

    def _create_client(**kwargs):
        kwargs.setdefault("url", base_url)
        kwargs.setdefault("logger", quiet_logger)
        client = APIClient(**kwargs)
        clients.append(client)
        return client

    yield _create_client

    for client in clients:
        client.close()


@pytest.fixture
def client(client_factory):
    return client_factory()


class FakeTransport:
    """In-memory transport recording requests and replaying canned responses."""

    def __init__(self, body=b"", status_code=200, error=None):
        self.body = body
        self.status_code = status_code
        self.error = error
        self.requests = []
        self.closed = False

    def execute(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise TransportError(self.error)
        content = self.body.encode("utf-8") if isinstance(self.body, str) else self.body
        return HttpResponse(status_code=self.status_code, content=content)

    def close(self):
        self.closed = True


@pytest.fixture
def fake_transport_factory():
    def _create_transport(body=b"", status_code=200, error=None):
        return FakeTransport(body=body, status_code=status_code, error=error)

    return _create_transport
