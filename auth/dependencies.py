"""
auth/dependencies.py -- The auth gate: FastAPI Depends() helpers for sessions.

Token sources are checked in priority order:
  1. Cookie "token" -- set by POST /login.
  2. Authorization: Bearer <token> header -- API clients and scripts.

Per-request outcomes:
  no token at all                        -> 401 (AuthError)
  empty cookie / non-Bearer auth header  -> 400 (ValidationError)
  token fails verification               -> 401 (MalformedToken, InvalidSignature, TokenExpired)
  token verifies                         -> Identity returned to the handler

The gate trusts the verified claim for the lifetime of the request and does
not re-read the user from the credential store.

try_get_identity() is the soft variant (returns None when no token is sent).
require_identity() wraps it and raises 401 if unauthenticated.

Layer rule: no imports from api/ or catalog/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

import logging

from fastapi import Request

from auth.models import Identity
from auth.tokens import COOKIE_NAME, TokenService
from core.errors import AuthError, ValidationError

logger = logging.getLogger("cms.auth")

_BEARER_PREFIX = "Bearer "


class MalformedCredentials(ValidationError):
    code = "malformed_credentials"
    message = "Session cookie or Authorization header is malformed."


def _extract_token(request: Request) -> str | None:
    """Return the raw token from the cookie or Bearer header, or None if absent."""
    if COOKIE_NAME in request.cookies:
        token = request.cookies[COOKIE_NAME].strip()
        if not token:
            raise MalformedCredentials()
        return token

    auth_header = request.headers.get("Authorization")
    if auth_header is None:
        return None
    if not auth_header.startswith(_BEARER_PREFIX) or not auth_header[len(_BEARER_PREFIX) :].strip():
        raise MalformedCredentials()
    return auth_header[len(_BEARER_PREFIX) :].strip()


def try_get_identity(request: Request) -> Identity | None:
    """Resolve the caller identity, or None when the request carries no token.

    Verification failures still raise: a request that presents a bad token
    is rejected, not treated as anonymous.
    """
    token = _extract_token(request)
    if token is None:
        return None

    token_service: TokenService = request.app.state.token_service
    try:
        claim = token_service.verify(token)
    except AuthError as exc:
        logger.info("Rejected session token on %s %s: %s", request.method, request.url.path, exc.code)
        raise
    return Identity(user_id=claim.user_id, username=claim.username)


def require_identity(request: Request) -> Identity:
    """Require a valid session. Raises 401 if the request is not authenticated.

    Use as a FastAPI dependency:
        @router.get("/content")
        def route(identity: Identity = Depends(require_identity)): ...
    """
    identity = try_get_identity(request)
    if identity is None:
        raise AuthError()
    return identity
