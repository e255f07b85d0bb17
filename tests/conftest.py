"""
tests/conftest.py -- Shared test fixtures for the CMS integration tests.

This module provides:
  - _make_test_stores(): isolated in-memory DBs for credentials + catalog
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - token_service: TokenService with a fixed test secret
  - token_service_at: same secret, caller-supplied clock
  - client: TestClient against the real app with isolated stores

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker
thread. The named URI format (file:name?mode=memory&cache=shared&uri=true)
shares one in-memory instance across all connections in the same process.
Each test gets a fresh name so no state leaks between tests.

The DEBUG env var must be set before any api import so get_settings()
auto-generates SECRET_KEY in dev mode rather than raising ValueError.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

# Set DEBUG before any api/core import so get_settings() can auto-generate
# SECRET_KEY in dev mode instead of raising ValueError.
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.store import CredentialStore
from auth.tokens import TokenService
from catalog.store import CatalogStore
from core.config import get_settings

TEST_SECRET = "test-secret-key-that-is-long-enough-for-hs256"


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_stores() -> tuple[CredentialStore, CatalogStore]:
    """Create isolated named shared-memory SQLite stores for one test."""
    db_url = f"sqlite:///file:test_cms_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true"
    return CredentialStore(db_url), CatalogStore(db_url)


def _patch_lifespan(credential_store: CredentialStore, catalog: CatalogStore, token_service: TokenService):
    """Return an async context manager that replaces the real lifespan.

    Wires pre-created test stores and the test TokenService into app.state so
    TestClient routes see isolated test DBs and a known signing secret.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.settings = get_settings()
        app.state.token_service = token_service
        app.state.credential_store = credential_store
        app.state.catalog = catalog
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(TEST_SECRET)


@pytest.fixture
def token_service_at():
    """Return a factory for TokenServices sharing the app secret but reading a given clock."""

    def _build(clock) -> TokenService:
        return TokenService(TEST_SECRET, clock=clock)

    return _build


@pytest.fixture
def stores() -> Generator[tuple[CredentialStore, CatalogStore], None, None]:
    credential_store, catalog = _make_test_stores()
    yield credential_store, catalog
    catalog.close()
    credential_store.close()


@pytest.fixture
def client(stores, token_service) -> Generator[TestClient, None, None]:
    """Yield a TestClient for the real app wired to isolated stores.

    The client keeps cookies between requests, so a successful POST /login
    authenticates every following request until the jar is cleared.
    """
    credential_store, catalog = stores
    app.router.lifespan_context = _patch_lifespan(credential_store, catalog, token_service)
    with TestClient(app, raise_server_exceptions=True) as test_client:
        yield test_client


@pytest.fixture
def login_as(client: TestClient):
    """Return a helper that registers (if needed) and logs in as a user.

    Each call clears the cookie jar first, so the client switches identity
    rather than carrying two session cookies.
    """

    def _login(username: str, password: str = "pw123") -> None:
        client.post("/register", json={"username": username, "email": f"{username}@x.com", "password": password})
        client.cookies.clear()
        resp = client.post("/login", json={"username": username, "password": password})
        assert resp.status_code == 200, resp.text

    return _login
