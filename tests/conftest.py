"""
tests/conftest.py -- Shared test fixtures for Gatekeeper tests.

This module provides:
  - hasher / issuer: low-cost bcrypt hasher and a TokenIssuer on the test key
  - store: a file-backed UserStore in tmp_path, fresh per test
  - api_client: TestClient over the real app with a patched lifespan
  - serving: the context manager behind api_client; restores the real
    lifespan on exit

Design: the API fixture uses a named shared-memory SQLite URI (not plain
:memory:) because TestClient runs handlers on a separate thread and the store
hops to worker threads for every query. Plain :memory: DBs are
per-connection and would present a blank schema to each worker thread.

SECRET_KEY must be set before any api/core import: api.main resolves settings
at import time and refuses to load without a signing key.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Generator, Iterator
from contextlib import asynccontextmanager, contextmanager

TEST_SECRET = "test-signing-key-0123456789abcdef0123456789"

# CRITICAL: Set before any auth/core/api import.
os.environ.setdefault("SECRET_KEY", TEST_SECRET)
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.service import AuthenticationService, RegistrationService
from auth.store import UserStore
from auth.tokens import PasswordHasher, TokenIssuer

SEEDED_EMAIL = "test@example.com"
SEEDED_PASSWORD = "password123"

# ---------------------------------------------------------------------------
# Unit fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def issuer() -> TokenIssuer:
    return TokenIssuer(TEST_SECRET)


@pytest.fixture
def store(tmp_path) -> Generator[UserStore, None, None]:
    s = UserStore(f"sqlite:///{tmp_path / 'auth.db'}")
    yield s
    s.close()


# ---------------------------------------------------------------------------
# API fixture
# ---------------------------------------------------------------------------


def _patch_lifespan(user_store: UserStore, issuer: TokenIssuer, hasher: PasswordHasher):
    """Return an async context manager that replaces the real lifespan.

    Wires the test store and collaborators into app.state so TestClient
    routes use an isolated database.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.token_issuer = issuer
        app.state.auth_service = AuthenticationService(user_store, issuer, hasher)
        app.state.registration_service = RegistrationService(user_store, hasher)
        yield

    return test_lifespan


@contextmanager
def _serving(user_store: UserStore, issuer: TokenIssuer, hasher: PasswordHasher) -> Iterator[TestClient]:
    """Run a TestClient over the app with the test lifespan swapped in.

    The app object is shared by every test module, so the real lifespan is
    put back on exit even if the client fails to start.
    """
    original = app.router.lifespan_context
    app.router.lifespan_context = _patch_lifespan(user_store, issuer, hasher)
    try:
        with TestClient(app, raise_server_exceptions=True) as client:
            yield client
    finally:
        app.router.lifespan_context = original


@pytest.fixture
def serving():
    """Expose the client context manager to tests that drive it directly."""
    return _serving


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, TokenIssuer], None, None]:
    """Yield (client, issuer) for API integration tests.

    One user (SEEDED_EMAIL / SEEDED_PASSWORD) exists before the client
    starts. The DB name includes the test module so modules do not share rows.
    """
    db_name = request.module.__name__.rsplit(".", 1)[-1]
    user_store = UserStore(f"sqlite:///file:{db_name}?mode=memory&cache=shared&uri=true")
    hasher = PasswordHasher(rounds=4)
    issuer = TokenIssuer(TEST_SECRET)

    asyncio.run(RegistrationService(user_store, hasher).register(SEEDED_EMAIL, SEEDED_PASSWORD))

    try:
        with _serving(user_store, issuer, hasher) as client:
            yield client, issuer
    finally:
        user_store.close()
