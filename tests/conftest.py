"""
tests/conftest.py -- Shared test fixtures for the issue tracker.

This module provides:
  - member: a User matching the fakes in tests/fakes.py
  - make_store(): isolated named shared-memory UserStore
  - _patch_lifespan(): wires a test store into app.state, bypassing real startup
  - api_client / web_client: TestClient fixtures over the real app

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient and run_in_threadpool execute store calls on worker
threads. Plain :memory: DBs are per-connection and would present a blank
schema to each worker thread.

DEBUG, SIGNOUT_DELAY_MS and RATE_LIMIT_ENABLED must be set before any
core/auth/api import, because get_settings() and the limiter read them once.
"""

from __future__ import annotations

import asyncio
import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: set before any core/auth/api import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("SIGNOUT_DELAY_MS", "0")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.models import User
from auth.store import UserStore
from auth.tokens import hash_password

# Mount the web router once; guard against conftest being imported twice.
try:
    from web.routes import router as web_router

    if not any(getattr(r, "path", None) == "/signin" for r in app.routes):
        app.include_router(web_router, tags=["Web UI"])
except ImportError:
    pass

MEMBER_EMAIL = "member@example.com"
MEMBER_PASSWORD = "memberpass1"


@pytest.fixture
def member() -> User:
    """A registered user whose digest follows the FakeUsers scheme."""
    return User(email=MEMBER_EMAIL, password=f"digest:{MEMBER_PASSWORD}", id="user-member")


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def make_store(prefix: str = "test") -> UserStore:
    """Create an isolated named shared-memory UserStore."""
    return UserStore(db_url=f"sqlite:///file:{prefix}_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true")


@pytest.fixture
def store() -> Generator[UserStore, None, None]:
    """A fresh, empty UserStore per test."""
    s = make_store()
    yield s
    s.close()


def _patch_lifespan(user_store: UserStore):
    """Return an async context manager that replaces the real lifespan.

    The purge_task is a long-sleeping coroutine so shutdown can cancel a real
    asyncio.Task.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.purge_task = asyncio.create_task(asyncio.sleep(99999))
        yield
        app.state.purge_task.cancel()

    return test_lifespan


def _seeded_store(prefix: str) -> UserStore:
    store = make_store(prefix)
    store.create_user(User(email=MEMBER_EMAIL, password=hash_password(MEMBER_PASSWORD)))
    return store


# ---------------------------------------------------------------------------
# Module-scoped clients -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client() -> Generator[tuple[TestClient, UserStore], None, None]:
    """Yield (client, store) for JSON API tests. A member account is pre-created.

    base_url uses localhost so TrustedHostMiddleware accepts the requests.
    """
    store = _seeded_store("api")
    app.router.lifespan_context = _patch_lifespan(store)
    with TestClient(app, base_url="http://localhost", follow_redirects=False) as client:
        yield client, store
    store.close()


@pytest.fixture(scope="module")
def web_client() -> Generator[tuple[TestClient, UserStore], None, None]:
    """Yield (client, store) for web route tests.

    follow_redirects=False is essential: tests assert on redirect locations,
    which are invisible once the client follows them.
    """
    store = _seeded_store("web")
    app.router.lifespan_context = _patch_lifespan(store)
    with TestClient(app, base_url="http://localhost", follow_redirects=False) as client:
        yield client, store
    store.close()
