"""
auth/models.py -- Domain dataclasses for identity entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in suppliers/models.py -- dataclasses own domain shape; stores, the identity
layer and routes do the work.

Layer rule: no imports from api/ or suppliers/.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class User:
    """A registered identity.

    email doubles as the user name. normalized_email is the upper-cased form
    the store uses for lookups and the uniqueness check, so "a@b.com" and
    "A@B.com" are the same account.

    Lockout state:
      access_failed_count counts consecutive failed password checks. It is
      reset on a successful sign-in and when a lockout starts.
      lockout_end is an ISO 8601 UTC timestamp; the account is locked while
      it lies in the future. None means never locked.
    """

    email: str
    id: int | None = None
    normalized_email: str | None = None
    hashed_password: str | None = None
    email_confirmed: bool = False
    lockout_enabled: bool = True
    lockout_end: str | None = None
    access_failed_count: int = 0
    created_at: str | None = None


@dataclass
class UserClaim:
    """A named permission grant (e.g. RemoveSupplier) attached to a user.

    Claims are copied into every token issued for the user; authorization
    policies check for the claim type on the token.
    """

    user_id: int
    claim_type: str
    claim_value: str = ""
    id: int | None = None


@dataclass
class Principal:
    """The authenticated caller of a request, as seen by route handlers.

    claims and roles come from the verified token, not from the store, so a
    claim granted after the token was issued takes effect on the next login.
    """

    user: User
    claims: dict[str, list[str]] = field(default_factory=dict)
    roles: list[str] = field(default_factory=list)
