"""
tests/conftest.py -- Shared test fixtures for AuthCore.

This module provides:
  - make_store(): isolated named shared-memory UserStore
  - verifier / tokens: fast CredentialVerifier and a TokenManager on the
    configured secret
  - seeded_store: a store holding "alice" with password "correct-pw"
  - api_client: TestClient on the real FastAPI app with a patched lifespan

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because the coordinator runs store lookups in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker
thread. The named URI format (file:name?mode=memory&cache=shared&uri=true)
shares one in-memory instance across all connections in the same process.

SECRET_KEY must be set before any api/ or core/ import so get_settings()
does not refuse to start. BCRYPT_ROUNDS=4 keeps hashing fast in tests.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager
from datetime import timedelta

# CRITICAL: set before any core/api import -- get_settings() raises without it.
os.environ.setdefault("SECRET_KEY", "test-secret-key-0123456789abcdef0123456789")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
# TestClient sends Host: testserver; production defaults do not trust it.
os.environ.setdefault("ALLOWED_HOSTS", '["localhost", "testserver"]')

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.coordinator import AuthCoordinator
from auth.passwords import CredentialVerifier
from auth.store import UserStore
from auth.tokens import TokenManager
from core.config import get_settings

ALICE_PASSWORD = "correct-pw"


def make_store() -> UserStore:
    """Create an isolated named shared-memory SQLite store.

    A fresh uuid in the DB name keeps every store independent even when
    several are open in the same test.
    """
    return UserStore(f"sqlite:///file:test_auth_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true")


@pytest.fixture
def store_factory() -> Generator:
    """Yield make_store; every store it created is closed at teardown."""
    created: list[UserStore] = []

    def factory() -> UserStore:
        store = make_store()
        created.append(store)
        return store

    yield factory
    for store in created:
        store.close()


@pytest.fixture(scope="session")
def verifier() -> CredentialVerifier:
    return CredentialVerifier(rounds=4)


@pytest.fixture
def tokens() -> TokenManager:
    return TokenManager(get_settings().secret_key, timedelta(hours=24))


@pytest.fixture
def seeded_store(verifier: CredentialVerifier) -> Generator[tuple[UserStore, str], None, None]:
    """Yield (store, alice_subject_id) with alice/correct-pw already created."""
    store = make_store()
    subject_id = store.create_user("alice", verifier.hash(ALICE_PASSWORD))
    yield store, subject_id
    store.close()


@pytest.fixture
def coordinator(seeded_store, verifier, tokens) -> AuthCoordinator:
    store, _ = seeded_store
    return AuthCoordinator(store, verifier, tokens, store_timeout=5.0)


def _patch_lifespan(user_store: UserStore, coordinator: AuthCoordinator):
    """Return an async context manager that replaces the real lifespan.

    Wires pre-created test collaborators into app.state so TestClient routes
    see an isolated test DB rather than the configured database.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.coordinator = coordinator
        yield

    return test_lifespan


@pytest.fixture
def api_client(seeded_store, coordinator) -> Generator[tuple[TestClient, str], None, None]:
    """Yield (client, alice_subject_id) for API integration tests.

    The TestClient uses the real FastAPI app with a patched lifespan so
    tests hit real route handlers but use an isolated in-memory store.
    """
    store, subject_id = seeded_store
    app.router.lifespan_context = _patch_lifespan(store, coordinator)

    with TestClient(app, raise_server_exceptions=False) as client:
        yield client, subject_id
