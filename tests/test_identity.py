"""Unit tests for auth/identity.py -- registration and password sign-in.

Covers:
- Password policy reports every failed rule by code
- create_user(): success, case-insensitive duplicate, policy failure
- password_sign_in(): success, unknown email, wrong password counting,
  lockout on the threshold-th failure, locked account refuses the right
  password, success resets the counter, expired lockout, lockout disabled
"""

from datetime import datetime, timedelta, timezone

import pytest

from auth.identity import create_user, is_locked_out, password_sign_in, validate_password
from auth.models import User
from auth.store import UserStore
from core.config import Settings, get_settings

PASSWORD = "Secret#1"


@pytest.fixture
def store():
    s = UserStore("sqlite:///:memory:")
    yield s
    s.close()


@pytest.fixture
def user(store) -> User:
    result = create_user(store, "alice@example.com", PASSWORD)
    assert result.succeeded
    return result.user


def _codes(errors) -> set[str]:
    return {e.code for e in errors}


# ---------------------------------------------------------------------------
# Password policy
# ---------------------------------------------------------------------------


def test_strong_password_passes():
    assert validate_password("Abc#123") == []


def test_every_failed_rule_is_reported():
    assert _codes(validate_password("abc")) == {
        "PasswordTooShort",
        "PasswordRequiresNonAlphanumeric",
        "PasswordRequiresDigit",
        "PasswordRequiresUpper",
    }


def test_lowercase_rule():
    assert _codes(validate_password("ABC#123")) == {"PasswordRequiresLower"}


def test_policy_follows_settings():
    relaxed = Settings(
        secret_key="x" * 32,
        password_required_length=4,
        password_require_digit=False,
        password_require_uppercase=False,
        password_require_non_alphanumeric=False,
        password_required_unique_chars=3,
    )
    assert validate_password("abcd", relaxed) == []
    assert _codes(validate_password("aaaa", relaxed)) == {"PasswordRequiresUniqueChars"}


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


def test_create_user_stores_confirmed_user(store, user):
    assert user.id is not None
    assert user.email == "alice@example.com"
    assert user.email_confirmed is True
    assert user.hashed_password != PASSWORD


def test_create_user_duplicate_is_case_insensitive(store, user):
    result = create_user(store, "ALICE@example.com", PASSWORD)
    assert not result.succeeded
    assert _codes(result.errors) == {"DuplicateUserName"}


def test_create_user_weak_password_writes_nothing(store):
    result = create_user(store, "bob@example.com", "weak")
    assert not result.succeeded
    assert result.user is None
    assert store.get_by_email("bob@example.com") is None


# ---------------------------------------------------------------------------
# Sign-in
# ---------------------------------------------------------------------------


def test_sign_in_success(store, user):
    result = password_sign_in(store, "Alice@Example.com", PASSWORD)
    assert result.succeeded
    assert result.user.id == user.id


def test_sign_in_unknown_email(store):
    result = password_sign_in(store, "ghost@example.com", PASSWORD)
    assert not result.succeeded
    assert not result.is_locked_out


def test_wrong_password_increments_counter(store, user):
    result = password_sign_in(store, user.email, "Wrong#1")
    assert not result.succeeded and not result.is_locked_out
    assert store.get_by_id(user.id).access_failed_count == 1


def test_threshold_failure_locks_account(store, user):
    threshold = get_settings().lockout_max_failed_attempts
    results = [password_sign_in(store, user.email, "Wrong#1") for _ in range(threshold)]
    assert [r.is_locked_out for r in results] == [False] * (threshold - 1) + [True]

    locked = store.get_by_id(user.id)
    assert locked.access_failed_count == 0
    assert is_locked_out(locked)


def test_locked_account_refuses_correct_password(store, user):
    for _ in range(get_settings().lockout_max_failed_attempts):
        password_sign_in(store, user.email, "Wrong#1")
    result = password_sign_in(store, user.email, PASSWORD)
    assert not result.succeeded
    assert result.is_locked_out


def test_success_resets_counter(store, user):
    password_sign_in(store, user.email, "Wrong#1")
    password_sign_in(store, user.email, "Wrong#1")
    assert password_sign_in(store, user.email, PASSWORD).succeeded
    assert store.get_by_id(user.id).access_failed_count == 0


def test_expired_lockout_allows_sign_in(store, user):
    past = datetime.now(timezone.utc) - timedelta(seconds=1)
    store.set_lockout_end(user.id, past.isoformat())
    assert password_sign_in(store, user.email, PASSWORD).succeeded


def test_no_counting_without_lockout_on_failure(store, user):
    for _ in range(get_settings().lockout_max_failed_attempts + 1):
        result = password_sign_in(store, user.email, "Wrong#1", lockout_on_failure=False)
        assert not result.is_locked_out
    assert store.get_by_id(user.id).access_failed_count == 0
    assert password_sign_in(store, user.email, PASSWORD).succeeded


def test_is_locked_out_ignores_disabled_lockout():
    future = (datetime.now(timezone.utc) + timedelta(minutes=5)).isoformat()
    assert is_locked_out(User(email="a@b.com", lockout_end=future))
    assert not is_locked_out(User(email="a@b.com", lockout_end=future, lockout_enabled=False))
    assert not is_locked_out(User(email="a@b.com"))
