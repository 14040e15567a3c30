"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Callers authenticate with an "Authorization: Bearer <token>" header. The
HTTPBearer scheme is declared with auto_error=False so a missing header yields
our own 401 envelope instead of Starlette's 403, and so the OpenAPI docs show
the Bearer lock on protected routes.

get_user_store() hands the request's UserStore to a handler.
try_get_principal() is the soft variant (returns None on failure).
get_current_user() wraps it and raises HTTP 401 if unauthenticated.
require_claim(type) wraps get_current_user() and raises HTTP 403 if the token
    does not carry the claim type -- the policy check for fine-grained routes.

Layer rule: no imports from api/ or suppliers/.
  auth/dependencies.py may import from fastapi because this module is part of
  the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from auth.models import Principal
from auth.store import UserStore
from auth.tokens import decode_access_token, split_payload

bearer_scheme = HTTPBearer(auto_error=False)


def get_user_store(request: Request) -> UserStore:
    return request.app.state.user_store


def try_get_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    user_store: UserStore = Depends(get_user_store),
) -> Principal | None:
    """Verify the Bearer token and load its user.

    Returns None when the header is missing, the token does not verify, or
    the user it names no longer exists. Never raises.
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        return None
    payload = decode_access_token(credentials.credentials)
    if payload is None:
        return None
    user = user_store.get_by_id(int(payload["sub"]))
    if user is None:
        return None
    claims, roles = split_payload(payload)
    return Principal(user=user, claims=claims, roles=roles)


def get_current_user(principal: Principal | None = Depends(try_get_principal)) -> Principal:
    """Require authentication. Raises HTTP 401 if the request is not authenticated.

    Use as a FastAPI dependency:
        @router.post("/protected")
        def route(principal: Principal = Depends(get_current_user)): ...
    """
    if principal is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Authentication required."},
            headers={"WWW-Authenticate": "Bearer"},
        )
    return principal


def require_claim(claim_type: str):
    """Build a dependency that requires claim_type on the caller's token.

    Raises HTTP 401 if unauthenticated, HTTP 403 if the claim is missing.
    Any value satisfies the policy; only the presence of the type is checked.
    """

    def _checker(principal: Principal = Depends(get_current_user)) -> Principal:
        if claim_type not in principal.claims:
            raise HTTPException(
                status_code=403,
                detail={"code": "forbidden", "message": f"The {claim_type} claim is required."},
            )
        return principal

    return _checker
