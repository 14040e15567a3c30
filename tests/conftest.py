"""
tests/conftest.py -- Shared test fixtures for the supplier API integration tests.

This module provides:
  - _make_test_stores(): creates isolated in-memory stores sharing one DB
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - api_client: TestClient plus two JWTs -- one for a plain user, one for a
    user holding the RemoveSupplier claim

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs route handlers in a thread pool. Plain :memory: DBs
are per-connection and would present a blank schema to each worker thread.
The named URI format (file:name?mode=memory&cache=shared&uri=true) shares
one in-memory instance across all connections in the same process.

DEBUG must be set before any auth/core import so get_settings() auto-generates
SECRET_KEY instead of raising ValueError. Rate limiting is switched off so
the lockout tests can hammer /login.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager

os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.models import User
from auth.store import UserStore
from auth.tokens import create_access_token, hash_password
from suppliers.store import SupplierStore

EDITOR_EMAIL = "editor@example.com"
EDITOR_PASSWORD = "Editor#123"
REMOVER_EMAIL = "remover@example.com"
REMOVER_PASSWORD = "Remover#123"

# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_stores(db_suffix: str) -> tuple[UserStore, SupplierStore]:
    """Create both stores on one named shared-memory SQLite database.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state.
    """
    db_url = f"sqlite:///file:test_suppliers_{db_suffix}?mode=memory&cache=shared&uri=true"
    return UserStore(db_url=db_url), SupplierStore(db_url=db_url)


def _patch_lifespan(user_store: UserStore, supplier_store: SupplierStore):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.supplier_store = supplier_store
        yield

    return test_lifespan


def _create_user(user_store: UserStore, email: str, password: str) -> int:
    return user_store.create_user(User(email=email, hashed_password=hash_password(password), email_confirmed=True))


# ---------------------------------------------------------------------------
# Module-scoped fixture -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(request) -> Generator[tuple[TestClient, str, str], None, None]:
    """Yield (client, editor_token, remover_token).

    editor@example.com  -- authenticated, no claims (may create/update)
    remover@example.com -- holds RemoveSupplier (may also delete)
    """
    user_store, supplier_store = _make_test_stores(request.module.__name__.rsplit(".", 1)[-1])

    editor_id = _create_user(user_store, EDITOR_EMAIL, EDITOR_PASSWORD)
    remover_id = _create_user(user_store, REMOVER_EMAIL, REMOVER_PASSWORD)
    user_store.add_claim(remover_id, "RemoveSupplier", "Remove")

    editor_token = create_access_token(user_store.get_by_id(editor_id))
    remover_token = create_access_token(
        user_store.get_by_id(remover_id),
        claims=user_store.get_claims(remover_id),
    )

    app.router.lifespan_context = _patch_lifespan(user_store, supplier_store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, editor_token, remover_token

    supplier_store.close()
    user_store.close()
