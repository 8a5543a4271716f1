"""
tests/conftest.py -- Shared test fixtures for the blog API tests.

This module provides:
  - _make_test_stores(): creates isolated in-memory DBs for users + articles
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - api_client: (client, user_store, article_store) for integration tests
  - make_user: creates a user straight in the store and returns (user_id, token)

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker thread.

The DEBUG env var must be set before any auth module import so get_settings()
auto-generates SECRET_KEY in dev mode rather than raising ValueError. Rate
limits are raised for the same reason: every test in a session shares one
client address.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Callable, Generator
from contextlib import asynccontextmanager

# CRITICAL: Set these before any auth/core import so get_settings() sees them.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("LOGIN_RATE_LIMIT", "1000/minute")
os.environ.setdefault("SIGNUP_RATE_LIMIT", "1000/minute")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from articles.store import ArticleStore
from auth.models import User
from auth.store import UserStore
from auth.tokens import hash_password, issue_token

# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_stores(db_suffix: str) -> tuple[UserStore, ArticleStore]:
    """Create isolated named shared-memory SQLite stores.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state.
    """
    url = f"sqlite:///file:test_blog_{db_suffix}?mode=memory&cache=shared&uri=true"
    return UserStore(db_url=url), ArticleStore(db_url=url)


def _patch_lifespan(user_store: UserStore, article_store: ArticleStore):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.article_store = article_store
        yield

    return test_lifespan


def unique_name(prefix: str = "user") -> str:
    return f"{prefix}_{uuid.uuid4().hex[:8]}"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, UserStore, ArticleStore], None, None]:
    """Yield (client, user_store, article_store) backed by a per-module in-memory DB.

    The TestClient uses the real FastAPI app with a patched lifespan so tests
    hit real route handlers, middleware and exception handlers.
    """
    user_store, article_store = _make_test_stores(request.module.__name__.replace(".", "_"))
    app.router.lifespan_context = _patch_lifespan(user_store, article_store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, user_store, article_store

    article_store.close()
    user_store.close()


@pytest.fixture
def make_user(api_client) -> Callable[..., tuple[int, str]]:
    """Factory: insert a user directly and return (user_id, bearer token)."""
    _client, user_store, _articles = api_client

    def _make(username: str | None = None, password: str = "secret1") -> tuple[int, str]:
        username = username or unique_name()
        uid = user_store.create_user(
            User(
                username=username,
                email=f"{username}@example.com",
                hashed_password=hash_password(password),
            )
        )
        return uid, issue_token(uid)

    return _make
