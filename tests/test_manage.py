"""Tests for manage.py -- operator commands against a file-backed database.

Covers:
- grant-claim attaches a claim once; repeating it is a no-op
- add-role is idempotent
- unlock clears an active lockout
- an unknown email exits with status 1
"""

from datetime import datetime, timedelta, timezone

import pytest

from auth.identity import create_user, is_locked_out
from auth.store import UserStore
from manage import main


@pytest.fixture
def db(tmp_path):
    """Return (db_url, user_id) for a database holding one registered user."""
    db_url = f"sqlite:///{tmp_path / 'manage.db'}"
    store = UserStore(db_url)
    user_id = create_user(store, "alice@example.com", "Secret#1").user.id
    store.close()
    return db_url, user_id


def _store(db_url: str) -> UserStore:
    return UserStore(db_url)


def test_grant_claim(db, capsys):
    db_url, user_id = db
    assert main(["--database-url", db_url, "grant-claim", "alice@example.com", "RemoveSupplier", "Remove"]) == 0
    assert main(["--database-url", db_url, "grant-claim", "ALICE@example.com", "RemoveSupplier", "Remove"]) == 0
    assert "already has claim" in capsys.readouterr().out

    store = _store(db_url)
    claims = store.get_claims(user_id)
    store.close()
    assert [(c.claim_type, c.claim_value) for c in claims] == [("RemoveSupplier", "Remove")]


def test_add_role_twice(db, capsys):
    db_url, user_id = db
    assert main(["--database-url", db_url, "add-role", "alice@example.com", "Admin"]) == 0
    assert main(["--database-url", db_url, "add-role", "alice@example.com", "Admin"]) == 0
    assert "already in role" in capsys.readouterr().out

    store = _store(db_url)
    roles = store.get_roles(user_id)
    store.close()
    assert roles == ["Admin"]


def test_unlock(db):
    db_url, user_id = db
    store = _store(db_url)
    store.set_lockout_end(user_id, (datetime.now(timezone.utc) + timedelta(minutes=5)).isoformat())
    assert is_locked_out(store.get_by_id(user_id))

    assert main(["--database-url", db_url, "unlock", "alice@example.com"]) == 0
    assert not is_locked_out(store.get_by_id(user_id))
    store.close()


def test_unknown_user(db, capsys):
    db_url, _ = db
    assert main(["--database-url", db_url, "unlock", "ghost@example.com"]) == 1
    assert "No user" in capsys.readouterr().err
