"""Shared test fixtures."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from contact_gate.config.loader import ContactSettings
from contact_gate.store.memory import MemoryWindowStore
from tests.helpers.contact import (
    ALLOWED_ORIGIN,
    OTHER_ALLOWED_ORIGIN,
    FakeClock,
    RecordingAcceptor,
)


@pytest.fixture(autouse=True)
def _mock_settings(monkeypatch):
    """Provide default settings for all tests."""
    monkeypatch.setenv("CONTACT_ALLOWED_ORIGINS", f"{ALLOWED_ORIGIN}, {OTHER_ALLOWED_ORIGIN}")
    monkeypatch.setenv("CONTACT_ENVIRONMENT", "test")
    monkeypatch.setenv("CONTACT_LOG_JSON", "false")
    monkeypatch.setenv("CONTACT_LOG_LEVEL", "debug")

    # Reset cached settings
    import contact_gate.config.loader as loader
    loader._settings = None
    yield
    loader._settings = None


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    """Isolated in-memory store per test, 5 per 15 minutes."""
    return MemoryWindowStore(max_requests=5, window_seconds=900, clock=clock)


@pytest.fixture
def acceptor():
    return RecordingAcceptor()


@pytest.fixture
def settings():
    return ContactSettings()


@pytest.fixture
def client(settings, store, acceptor):
    """FastAPI test client over an app with injected store and acceptor."""
    from contact_gate.main import create_app

    app = create_app(settings=settings, store=store, acceptor=acceptor)
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


@pytest.fixture
def valid_body():
    return {
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "phone": "+44 20 7946 0958",
        "message": "I would like to know more about your services.",
    }
