"""Shared fixtures: an in-process fake backend, session doubles and a client wired to both."""

import json
import threading

import httpx
import pytest

from shop_console.api import ShopApiClient
from shop_console.session import MemorySessionStore


class RecordingNavigator:
    """Navigator double that remembers every page it was sent to."""

    def __init__(self):
        self.history = []

    @property
    def page(self):
        return self.history[-1][0] if self.history else None

    def go(self, page, **params):
        self.history.append((page, params))


class FakeBackend:
    """Routes (method, path) to canned responses and records every request."""

    def __init__(self):
        self.routes = {}
        self.requests = []
        self._lock = threading.Lock()

    def add(self, method, path, status=200, body=None, error=None):
        self.routes[(method, path)] = (status, body, error)

    def handler(self, request: httpx.Request) -> httpx.Response:
        with self._lock:
            self.requests.append(request)
        key = (request.method, request.url.path)
        if key not in self.routes:
            return httpx.Response(404, json={"error": "Not found"})
        status, body, error = self.routes[key]
        if error is not None:
            raise error
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)

    def calls(self, method=None, path=None):
        return [
            r
            for r in self.requests
            if (method is None or r.method == method) and (path is None or r.url.path == path)
        ]

    def body_of(self, request):
        return json.loads(request.content) if request.content else None


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def navigator():
    return RecordingNavigator()


@pytest.fixture
def store():
    return MemorySessionStore(token="tok-123", role="SHOP")


@pytest.fixture
def admin_store():
    return MemorySessionStore(token="tok-admin", role="ADMIN")


def make_client(backend, store, navigator):
    return ShopApiClient("http://api.test", store, navigator, transport=httpx.MockTransport(backend.handler))


@pytest.fixture
def client(backend, store, navigator):
    c = make_client(backend, store, navigator)
    yield c
    c.close()


@pytest.fixture
def admin_client(backend, admin_store, navigator):
    c = make_client(backend, admin_store, navigator)
    yield c
    c.close()
