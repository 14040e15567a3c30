"""
auth/identity.py -- User creation and password sign-in with lockout.

This module is the identity collaborator the route layer talks to. Routes only
hand it an email and a password and read back a result object; hashing,
policy checks, duplicate detection and lockout bookkeeping all happen here.

create_user()
    1. Password policy (length, digit, lower, upper, non-alphanumeric, unique
       characters -- all configurable in Settings). Every failed rule is
       reported, not just the first.
    2. Duplicate email (case-insensitive) -> DuplicateUserName.
    3. Insert with email_confirmed=True. There is no confirmation flow.

password_sign_in()
    Unknown email          -> failed (bcrypt still runs against DUMMY_HASH)
    Locked (end in future) -> locked_out, password is not checked
    Wrong password         -> counter + 1; reaching the threshold starts a
                              lockout and that same attempt reports locked_out
    Right password         -> counter reset, succeeded

Layer rule: no imports from api/ or suppliers/.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import IntegrityError

from auth.models import User
from auth.store import UserStore
from auth.tokens import DUMMY_HASH, hash_password, verify_password
from core.config import Settings, get_settings

logger = logging.getLogger("suppliers.auth.identity")


@dataclass
class IdentityError:
    code: str
    description: str


@dataclass
class IdentityResult:
    """Outcome of create_user(). user is set only on success."""

    errors: list[IdentityError] = field(default_factory=list)
    user: User | None = None

    @property
    def succeeded(self) -> bool:
        return not self.errors


@dataclass
class SignInResult:
    succeeded: bool = False
    is_locked_out: bool = False
    user: User | None = None


# ---------------------------------------------------------------------------
# Password policy
# ---------------------------------------------------------------------------


def validate_password(password: str, settings: Settings | None = None) -> list[IdentityError]:
    """Return every password-policy violation for password (empty list = valid)."""
    cfg = settings or get_settings()
    errors: list[IdentityError] = []
    if len(password) < cfg.password_required_length:
        errors.append(
            IdentityError(
                "PasswordTooShort",
                f"Passwords must be at least {cfg.password_required_length} characters.",
            )
        )
    if cfg.password_require_non_alphanumeric and all(c.isalnum() for c in password):
        errors.append(
            IdentityError(
                "PasswordRequiresNonAlphanumeric",
                "Passwords must have at least one non alphanumeric character.",
            )
        )
    if cfg.password_require_digit and not any("0" <= c <= "9" for c in password):
        errors.append(IdentityError("PasswordRequiresDigit", "Passwords must have at least one digit ('0'-'9')."))
    if cfg.password_require_lowercase and not any("a" <= c <= "z" for c in password):
        errors.append(IdentityError("PasswordRequiresLower", "Passwords must have at least one lowercase ('a'-'z')."))
    if cfg.password_require_uppercase and not any("A" <= c <= "Z" for c in password):
        errors.append(IdentityError("PasswordRequiresUpper", "Passwords must have at least one uppercase ('A'-'Z')."))
    if len(set(password)) < cfg.password_required_unique_chars:
        errors.append(
            IdentityError(
                "PasswordRequiresUniqueChars",
                f"Passwords must use at least {cfg.password_required_unique_chars} different characters.",
            )
        )
    return errors


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


def _duplicate(email: str) -> IdentityError:
    return IdentityError("DuplicateUserName", f"Username '{email}' is already taken.")


def create_user(store: UserStore, email: str, password: str) -> IdentityResult:
    """Create a confirmed user with a hashed password."""
    errors = validate_password(password)
    if errors:
        return IdentityResult(errors=errors)

    if store.get_by_email(email) is not None:
        return IdentityResult(errors=[_duplicate(email)])

    user = User(email=email, hashed_password=hash_password(password), email_confirmed=True)
    try:
        user_id = store.create_user(user)
    except IntegrityError:
        # A concurrent registration won the race between the check and the insert
        return IdentityResult(errors=[_duplicate(email)])

    logger.info("Registered user %s (id=%s)", email, user_id)
    return IdentityResult(user=store.get_by_id(user_id))


# ---------------------------------------------------------------------------
# Sign-in
# ---------------------------------------------------------------------------


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def is_locked_out(user: User, now: datetime | None = None) -> bool:
    if not user.lockout_enabled or not user.lockout_end:
        return False
    try:
        end = datetime.fromisoformat(user.lockout_end)
    except ValueError:
        return False
    if end.tzinfo is None:
        end = end.replace(tzinfo=timezone.utc)
    return end > (now or _utcnow())


def password_sign_in(store: UserStore, email: str, password: str, lockout_on_failure: bool = True) -> SignInResult:
    """Check email/password, tracking failed attempts when lockout_on_failure is set."""
    cfg = get_settings()
    user = store.get_by_email(email)
    if user is None or user.hashed_password is None:
        verify_password(password, DUMMY_HASH)
        logger.info("Sign-in failed: unknown email")
        return SignInResult()

    if is_locked_out(user):
        logger.info("Sign-in refused for locked-out user id=%s", user.id)
        return SignInResult(is_locked_out=True)

    if verify_password(password, user.hashed_password):
        if user.access_failed_count:
            store.reset_access_failed_count(user.id)
        return SignInResult(succeeded=True, user=store.get_by_id(user.id))

    if lockout_on_failure and user.lockout_enabled:
        failures = store.increment_access_failed_count(user.id)
        if failures >= cfg.lockout_max_failed_attempts:
            lockout_end = _utcnow() + timedelta(seconds=cfg.lockout_duration_seconds)
            store.set_lockout_end(user.id, lockout_end.isoformat())
            logger.warning(
                "User id=%s locked out until %s after %d failed attempts",
                user.id,
                lockout_end.isoformat(),
                failures,
            )
            return SignInResult(is_locked_out=True)
        logger.info("Sign-in failed for user id=%s (%d consecutive)", user.id, failures)
        return SignInResult()
    logger.info("Sign-in failed for user id=%s", user.id)
    return SignInResult()
