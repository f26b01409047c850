import pytest
import httpx
from fastapi.testclient import TestClient

from header_scanner.main import app
from header_scanner.router import get_client_factory
from header_scanner.store import store


def fake_site(headers=None, statuses=None, errors=None, seen=None):
    """
    MockTransport handler for a target site. GET answers with ``headers``;
    ``statuses`` maps method -> status code, ``errors`` maps method -> httpx
    exception class to raise instead.
    """
    headers = headers or []
    statuses = statuses or {}
    errors = errors or {}

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        method = request.method
        if method in errors:
            raise errors[method](f"{method} failed", request=request)
        status = statuses.get(method, 200)
        return httpx.Response(status, headers=headers if method == "GET" else [])

    return handler


@pytest.fixture(autouse=True)
def clear_store():
    store.clear()
    yield
    store.clear()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def use_site(client):
    """Route every outgoing request of the app to the given handler."""
    def _use(handler):
        app.dependency_overrides[get_client_factory] = lambda: (
            lambda: httpx.AsyncClient(transport=httpx.MockTransport(handler))
        )
    return _use


@pytest.fixture
def make_site():
    return fake_site
