"""
auth/tokens.py -- JWT and password hashing utilities.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry the
       standard identity claims (sub, email, jti, nbf, iat, exp, iss, aud),
       the user's roles under "role", and one top-level key per stored user
       claim. Verification checks signature, expiry, issuer and audience and
       returns None on any failure -- the dependency layer turns that into a 401.

  Passwords: bcrypt used directly. Its cost factor makes brute force
       expensive for low-entropy secrets. DUMMY_HASH lets the sign-in path run
       one bcrypt check even for an unknown email so response time does not
       reveal whether an account exists.

  SECRET_KEY: sourced from core.config.get_settings(), which refuses short or
       missing keys outside debug mode.

Layer rule: no imports from api/ or suppliers/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

import bcrypt
from jose import JWTError, jwt

from core.config import get_settings

if TYPE_CHECKING:
    from auth.models import User, UserClaim

logger = logging.getLogger("suppliers.auth")

_settings = get_settings()

_ALGORITHM = "HS256"

# Claim names the token itself owns. A stored user claim with one of these
# types is never copied into the payload.
_REGISTERED_CLAIMS = frozenset({"sub", "email", "jti", "nbf", "iat", "exp", "iss", "aud", "role"})

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


# bcrypt reads at most 72 bytes of input; bcrypt>=5 raises ValueError past that.
_BCRYPT_MAX_BYTES = 72


def _password_bytes(plain: str) -> bytes:
    return plain.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(plain: str) -> str:
    """Return a bcrypt hash of the given plaintext password.

    Input is cut to its first 72 UTF-8 bytes before hashing, and
    verify_password() cuts the same way, so a 100-character password still
    round-trips.
    """
    return bcrypt.hashpw(_password_bytes(plain), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    try:
        return bcrypt.checkpw(_password_bytes(plain), hashed.encode("utf-8"))
    except ValueError:
        # Malformed hash in the store
        return False


# Computed once at module load so the first sign-in is not measurably slower.
DUMMY_HASH: str = hash_password("supplier_api_timing_dummy")


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def create_access_token(
    user: User,
    claims: list[UserClaim] | None = None,
    roles: list[str] | None = None,
    expire_seconds: int = 0,
) -> str:
    """Encode a signed JWT for user.

    Args:
        user:           The identity the token is issued to. id and email are required.
        claims:         Stored user claims copied into the payload. Several
                        claims of one type become a list under that key.
        roles:          Role names, emitted as a list under "role".
        expire_seconds: Lifetime override; 0 uses Settings.token_expire_seconds.
    """
    duration = expire_seconds if expire_seconds > 0 else _settings.token_expire_seconds
    now = datetime.now(timezone.utc)
    payload: dict = {
        "sub": str(user.id),
        "email": user.email,
        "jti": str(uuid.uuid4()),
        "nbf": now,
        "iat": now,
        "exp": now + timedelta(seconds=duration),
        "iss": _settings.jwt_issuer,
        "aud": _settings.jwt_audience,
    }
    for claim in claims or []:
        if claim.claim_type in _REGISTERED_CLAIMS:
            logger.warning("Skipping user claim %r: reserved token claim name", claim.claim_type)
            continue
        existing = payload.get(claim.claim_type)
        if existing is None:
            payload[claim.claim_type] = claim.claim_value
        elif isinstance(existing, list):
            existing.append(claim.claim_value)
        else:
            payload[claim.claim_type] = [existing, claim.claim_value]
    if roles:
        payload["role"] = list(roles)
    return jwt.encode(payload, _settings.secret_key, algorithm=_ALGORITHM)


def decode_access_token(token: str) -> dict | None:
    """Decode and verify a JWT. Returns the payload dict or None on any failure."""
    try:
        payload = jwt.decode(
            token,
            _settings.secret_key,
            algorithms=[_ALGORITHM],
            audience=_settings.jwt_audience,
            issuer=_settings.jwt_issuer,
        )
    except JWTError:
        return None
    if "sub" not in payload or not str(payload["sub"]).isdigit():
        return None
    return payload


def split_payload(payload: dict) -> tuple[dict[str, list[str]], list[str]]:
    """Return (claims, roles) carried by a decoded payload.

    claims maps every non-registered key to its values as a list, so a policy
    check only has to test membership.
    """
    claims: dict[str, list[str]] = {}
    for key, value in payload.items():
        if key in _REGISTERED_CLAIMS:
            continue
        claims[key] = [str(v) for v in value] if isinstance(value, list) else [str(value)]
    role = payload.get("role", [])
    roles = [str(r) for r in role] if isinstance(role, list) else [str(role)]
    return claims, roles
