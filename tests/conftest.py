"""
tests/conftest.py -- Shared test fixtures for Catchdex.

This module provides:
  - _make_test_engine(): isolated named shared-memory SQLite DB per test module
  - _patch_lifespan(): wires test services into app.state, bypassing real startup
  - api_client: TestClient running the real app against the test services
  - catalog: the mocked CatalogClient, reset for every test
  - auth_headers: registers + logs in a fresh user, returns Authorization headers

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker thread.

Environment must be set before any api/auth/core import:
  DEBUG=true           -- get_settings() auto-generates SECRET_KEY
  BCRYPT_ROUNDS=4      -- the minimum bcrypt cost; keeps the suite fast
  LOGIN_RATE_LIMIT     -- high enough that the suite never trips it
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Callable, Generator
from contextlib import asynccontextmanager
from unittest.mock import MagicMock

# CRITICAL: Set before any auth/core import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOGIN_RATE_LIMIT", "1000/minute")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from api.main import app
from auth.credentials import CredentialService
from auth.passwords import PasswordHasher
from auth.store import UserStore
from auth.tokens import TokenService
from core.catalog import CatalogClient
from core.config import get_settings
from core.database import create_db_engine
from dex.store import DexStore

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_test_engine(db_suffix: str) -> Engine:
    """Create an isolated named shared-memory SQLite engine.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state.
    """
    return create_db_engine(f"sqlite:///file:test_catchdex_{db_suffix}?mode=memory&cache=shared&uri=true")


def _patch_lifespan(engine: Engine, catalog: MagicMock):
    """Return an async context manager that replaces the real lifespan.

    Builds the same collaborators the real lifespan builds, but against the
    test engine and with a mocked catalog so no test reaches the network.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        settings = get_settings()
        app.state.engine = engine
        app.state.dex = DexStore(engine)
        app.state.credentials = CredentialService(UserStore(engine), PasswordHasher(settings.bcrypt_rounds))
        app.state.token_service = TokenService(settings.secret_key, settings.token_expire_seconds)
        app.state.catalog = catalog
        yield

    return test_lifespan


def _unique_email() -> str:
    return f"user-{uuid.uuid4().hex[:12]}@example.com"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def _catalog_mock() -> MagicMock:
    return MagicMock(spec=CatalogClient)


@pytest.fixture(scope="module")
def api_client(request, _catalog_mock: MagicMock) -> Generator[TestClient, None, None]:
    """Yield a TestClient for the real FastAPI app with isolated test services.

    One client (and one in-memory DB) per test module for speed. Tests that
    need users create them through /register with unique emails.
    """
    engine = _make_test_engine(request.module.__name__.replace(".", "_"))
    app.router.lifespan_context = _patch_lifespan(engine, _catalog_mock)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client

    engine.dispose()


@pytest.fixture
def catalog(_catalog_mock: MagicMock) -> MagicMock:
    """The CatalogClient mock wired into app.state, with per-test state cleared."""
    _catalog_mock.reset_mock(return_value=True, side_effect=True)
    return _catalog_mock


@pytest.fixture
def auth_headers(api_client: TestClient) -> Callable[..., dict[str, str]]:
    """Return a factory: register + log in a new user, get its Authorization headers.

    Usage:
        headers = auth_headers()                        # fresh random user
        headers = auth_headers("a@x.com", "pw1")        # specific credentials
    """

    def _factory(email: str | None = None, password: str = "pikachu-pw") -> dict[str, str]:
        email = email or _unique_email()
        api_client.post("/register", json={"email": email, "password": password})
        resp = api_client.post("/login", json={"email": email, "password": password})
        assert resp.status_code == 200, f"login failed: {resp.status_code} {resp.text}"
        return {"Authorization": f"Bearer {resp.json()['token']}"}

    return _factory


@pytest.fixture
def memory_engine() -> Generator[Engine, None, None]:
    """Plain in-memory engine for single-threaded store tests."""
    engine = create_db_engine("sqlite:///:memory:")
    yield engine
    engine.dispose()


@pytest.fixture
def file_engine(tmp_path) -> Generator[Engine, None, None]:
    """Temp-file engine for tests that hit the database from several threads at once."""
    engine = create_db_engine(f"sqlite:///{tmp_path / 'catchdex_test.db'}")
    yield engine
    engine.dispose()
