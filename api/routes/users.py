"""
api/routes/users.py -- Registration and login endpoints.

Routes:
  POST /register  -- create a confirmed user; returns a bearer token
  POST /login     -- password sign-in with lockout tracking; returns a bearer token

Both are public and rate-limited per client IP (Settings.login_rate_limit).
@router.post must stay outside @limiter.limit: the registered endpoint has to
be the limiter-wrapped function for the limit to be checked.

Error contract (all 400, all in the shared error envelope):
  validation_error    -- body failed field validation (handled in api/main.py)
  registration_failed -- password policy or duplicate email; errors maps each
                         identity error code to its description
  locked_out          -- account is locked; the password was not checked
  bad_credentials     -- same message for an unknown email and a wrong
                         password so callers cannot enumerate accounts
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from api.limiter import limiter
from api.models import ClaimModel, LoginResponse, LoginUser, RegisterUser, UserTokenModel
from auth.dependencies import get_user_store
from auth.identity import create_user, password_sign_in
from auth.models import User
from auth.store import UserStore
from auth.tokens import create_access_token
from core.config import get_settings

router = APIRouter()

_RATE_LIMIT = get_settings().login_rate_limit


@router.post("/register", response_model=LoginResponse)
@limiter.limit(_RATE_LIMIT)
def register(
    request: Request,
    body: RegisterUser,
    user_store: UserStore = Depends(get_user_store),
) -> LoginResponse:
    """Register a new user and sign them in.

    The account is created already confirmed; there is no e-mail round trip.
    """
    result = create_user(user_store, body.email, body.password)
    if not result.succeeded:
        errors: dict[str, list[str]] = {}
        for err in result.errors:
            errors.setdefault(err.code, []).append(err.description)
        raise HTTPException(
            status_code=400,
            detail={"code": "registration_failed", "message": "The user could not be created.", "errors": errors},
        )
    return _token_response(user_store, result.user)


@router.post("/login", response_model=LoginResponse)
@limiter.limit(_RATE_LIMIT)
def login(
    request: Request,
    body: LoginUser,
    user_store: UserStore = Depends(get_user_store),
) -> LoginResponse:
    """Authenticate with email and password.

    Every wrong password counts toward the lockout threshold.
    """
    result = password_sign_in(user_store, body.email, body.password, lockout_on_failure=True)
    if result.is_locked_out:
        raise HTTPException(
            status_code=400,
            detail={"code": "locked_out", "message": "User account is locked out."},
        )
    if not result.succeeded:
        raise HTTPException(
            status_code=400,
            detail={"code": "bad_credentials", "message": "Username or password is invalid."},
        )
    return _token_response(user_store, result.user)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _token_response(user_store: UserStore, user: User | None) -> LoginResponse:
    if user is None:
        raise HTTPException(
            status_code=500,
            detail={"code": "internal_error", "message": "User not found after write."},
        )
    claims = user_store.get_claims(user.id)
    roles = user_store.get_roles(user.id)
    token = create_access_token(user, claims=claims, roles=roles)
    return LoginResponse(
        access_token=token,
        token_type="bearer",  # noqa: S106 -- OAuth token type, not a password
        expires_in=get_settings().token_expire_seconds,
        user_token=UserTokenModel(
            id=str(user.id),
            email=user.email,
            claims=[ClaimModel(type=c.claim_type, value=c.claim_value) for c in claims]
            + [ClaimModel(type="role", value=r) for r in roles],
        ),
    )
