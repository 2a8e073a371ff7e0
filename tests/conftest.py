"""
Global pytest fixtures for the LinkPro test suite.

Responsibilities:
    - Provide a fresh in-memory store per test
    - Provide identity, click log, link repository and manager fixtures
      wired to that one store
    - Provide a FastAPI TestClient via the app factory for integration tests
    - Provide a controllable clock for anything time-bucketed

Why an app factory?
    Using `create_app()` ensures each test gets fresh in-memory state,
    eliminating cross-test flakiness.
"""

import base64
import hashlib
import json
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from main import create_app
from linkpro.analytics.click_log import ClickEventLog
from linkpro.app import LinkPro
from linkpro.identity.identity_store import IdentityStore
from linkpro.manager.link_manager import LinkManager
from linkpro.manager.link_repository import LinkRepository
from linkpro.storage.storage import MemoryStore


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def store() -> MemoryStore:
    """Fresh in-memory store per test."""
    return MemoryStore()


@pytest.fixture
def identity(store, clock) -> IdentityStore:
    return IdentityStore(store, min_password_length=6, clock=clock)


@pytest.fixture
def click_log(store, clock) -> ClickEventLog:
    return ClickEventLog(store, clock=clock)


@pytest.fixture
def links(store, click_log, clock) -> LinkRepository:
    return LinkRepository(store, click_log=click_log, clock=clock)


@pytest.fixture
def manager(identity, links) -> LinkManager:
    return LinkManager(identity, links)


@pytest.fixture
def ana(identity):
    """A registered user."""
    return identity.register("ana", "ana@x.com", "Ana", "secret1")


@pytest.fixture
def bob(identity):
    return identity.register("bob", "bob@x.com", "Bob", "secret2")


@pytest.fixture
def forge_token():
    """
    Build a token with arbitrary claims and a matching digest.

    The digest is unkeyed, so anyone can produce one; only the claim checks
    stand between such a token and a lookup.
    """

    def segment(data) -> str:
        raw = json.dumps(data, separators=(",", ":"), sort_keys=True).encode("utf-8")
        return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")

    def forge(claims) -> str:
        signing_input = segment({"alg": "SHA256", "typ": "JWT"}) + "." + segment(claims)
        digest = hashlib.sha256(signing_input.encode("utf-8")).hexdigest()
        return signing_input + "." + digest

    return forge


@pytest.fixture
def linkpro(store, identity) -> LinkPro:
    return LinkPro(store=store, identity=identity)


@pytest.fixture
def client(linkpro) -> TestClient:
    """
    Fresh TestClient over a new app instance sharing the `linkpro` fixture's store.
    """
    return TestClient(create_app(linkpro))
