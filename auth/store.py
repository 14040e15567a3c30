"""
auth/store.py -- SQLAlchemy Core persistence layer for identity entities.

Pattern: Repository + Data Mapper (same as suppliers/store.py).
UserStore is the repository; _row_to_user / _row_to_claim are the mappers.
Identity and dependency code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

  UNIQUE(normalized_email) makes duplicate registration fail at the DB level
  even when two requests race past the identity layer's pre-check.

  The failed-login counter is bumped with a single UPDATE ... SET n = n + 1
  so concurrent bad attempts cannot lose increments.

Layer rule: no imports from api/ or suppliers/.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, Integer, MetaData, String, Table, Text, UniqueConstraint, select
from sqlalchemy.engine import Engine

from auth.models import User, UserClaim
from core.database import make_engine

_DEFAULT_DB_URL = "sqlite:///./suppliers.db"

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(256), nullable=False),
    Column("normalized_email", String(256), nullable=False, unique=True),
    Column("hashed_password", Text),
    Column("email_confirmed", Boolean, nullable=False, server_default="0"),
    Column("lockout_enabled", Boolean, nullable=False, server_default="1"),
    Column("lockout_end", String(32)),  # ISO 8601 UTC
    Column("access_failed_count", Integer, nullable=False, server_default="0"),
    Column("created_at", String(32), nullable=False),
)

_user_claims = Table(
    "user_claims",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, nullable=False),
    Column("claim_type", String(256), nullable=False),
    Column("claim_value", Text, nullable=False),
)

_user_roles = Table(
    "user_roles",
    _metadata,
    Column("user_id", Integer, nullable=False),
    Column("role", String(256), nullable=False),
    UniqueConstraint("user_id", "role", name="uq_user_role"),
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def normalize_email(email: str) -> str:
    return email.strip().upper()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User, UserClaim and role records.

    Usage:
        store = UserStore()
        user_id = store.create_user(User(email="a@b.com", hashed_password=hash_password("Secret1!")))
        store.add_claim(user_id, "RemoveSupplier", "Remove")
        user = store.get_by_email("a@b.com")
        store.close()
    """

    def __init__(self, db_url: str = _DEFAULT_DB_URL) -> None:
        self.engine: Engine = make_engine(db_url)
        _metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # User queries
    # ------------------------------------------------------------------

    def create_user(self, user: User) -> int:
        """Insert a new user and return its assigned database ID.

        Raises sqlalchemy.exc.IntegrityError if the email (case-insensitive)
        already exists.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _users.insert().values(
                    email=user.email,
                    normalized_email=normalize_email(user.email),
                    hashed_password=user.hashed_password,
                    email_confirmed=user.email_confirmed,
                    lockout_enabled=user.lockout_enabled,
                    lockout_end=user.lockout_end,
                    access_failed_count=user.access_failed_count,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_by_email(self, email: str) -> User | None:
        """Look up a user by email, ignoring case. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(
                _users.select().where(_users.c.normalized_email == normalize_email(email))
            ).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_id(self, user_id: int) -> User | None:
        """Look up a user by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    # ------------------------------------------------------------------
    # Lockout bookkeeping
    # ------------------------------------------------------------------

    def increment_access_failed_count(self, user_id: int) -> int:
        """Add one to the failed-attempt counter and return the new value."""
        with self.engine.connect() as conn:
            conn.execute(
                _users.update()
                .where(_users.c.id == user_id)
                .values(access_failed_count=_users.c.access_failed_count + 1)
            )
            count = conn.execute(
                select(_users.c.access_failed_count).where(_users.c.id == user_id)
            ).scalar()
            conn.commit()
        return count or 0

    def set_lockout_end(self, user_id: int, lockout_end: str | None) -> None:
        """Start (or clear, with None) a lockout and reset the failed-attempt counter."""
        with self.engine.connect() as conn:
            conn.execute(
                _users.update()
                .where(_users.c.id == user_id)
                .values(lockout_end=lockout_end, access_failed_count=0)
            )
            conn.commit()

    def reset_access_failed_count(self, user_id: int) -> None:
        with self.engine.connect() as conn:
            conn.execute(_users.update().where(_users.c.id == user_id).values(access_failed_count=0))
            conn.commit()

    # ------------------------------------------------------------------
    # Claims and roles
    # ------------------------------------------------------------------

    def add_claim(self, user_id: int, claim_type: str, claim_value: str = "") -> int:
        """Attach a claim to a user and return the claim record ID."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _user_claims.insert().values(user_id=user_id, claim_type=claim_type, claim_value=claim_value)
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_claims(self, user_id: int) -> list[UserClaim]:
        """Return the user's claims in the order they were granted."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                _user_claims.select().where(_user_claims.c.user_id == user_id).order_by(_user_claims.c.id)
            ).fetchall()
        return [_row_to_claim(r) for r in rows]

    def add_role(self, user_id: int, role: str) -> None:
        """Put a user in a role. Raises IntegrityError if the user already has it."""
        with self.engine.connect() as conn:
            conn.execute(_user_roles.insert().values(user_id=user_id, role=role))
            conn.commit()

    def get_roles(self, user_id: int) -> list[str]:
        with self.engine.connect() as conn:
            rows = conn.execute(
                select(_user_roles.c.role).where(_user_roles.c.user_id == user_id).order_by(_user_roles.c.role)
            ).fetchall()
        return [r.role for r in rows]

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        email=row.email,
        normalized_email=row.normalized_email,
        hashed_password=row.hashed_password,
        email_confirmed=bool(row.email_confirmed),
        lockout_enabled=bool(row.lockout_enabled),
        lockout_end=row.lockout_end,
        access_failed_count=row.access_failed_count,
        created_at=row.created_at,
    )


def _row_to_claim(row) -> UserClaim:
    return UserClaim(
        id=row.id,
        user_id=row.user_id,
        claim_type=row.claim_type,
        claim_value=row.claim_value,
    )
