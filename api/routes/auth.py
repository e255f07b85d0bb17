"""
api/routes/auth.py -- Registration and session endpoints.

Routes:
  POST /register  -- create a local account
  POST /login     -- password login; sets the "token" session cookie
  POST /logout    -- clears the session cookie
  GET  /me        -- identity from the current session (requires auth)

Security:
  Login returns the same generic error for an unknown username and a wrong
  password ("bad_credentials"). CredentialStore.verify() equalizes timing;
  do NOT inline get_by_username() + verify_password() here.
  Cache-Control: no-store on login responses so the token is never cached.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.models import ErrorDetail, ErrorResponse, LoginRequest, MeResponse, MessageResponse, RegisterRequest
from auth.dependencies import require_identity
from auth.models import Identity
from auth.store import CredentialStore
from auth.tokens import TokenService, clear_session_cookie, set_session_cookie
from core.errors import AuthError

logger = logging.getLogger("cms.api")

# Auth policy:
# - POST /register: public
# - POST /login:    public -- login endpoint must be unauthenticated
# - POST /logout:   public -- clearing a cookie needs no prior auth
# - GET  /me:       requires auth (require_identity)
router = APIRouter()


@router.post("/register", response_model=MessageResponse)
def register(request: Request, body: RegisterRequest) -> MessageResponse:
    """Create a user account. The password is hashed before it is stored.

    409 if the username is taken; the check is the users.username UNIQUE
    index, so concurrent registrations cannot both win.
    """
    store: CredentialStore = request.app.state.credential_store
    store.register(body.username, body.email, body.password)
    return MessageResponse(message="User registered successfully")


@router.post("/login", response_model=MessageResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with username and password; set the session cookie."""
    store: CredentialStore = request.app.state.credential_store
    token_service: TokenService = request.app.state.token_service

    try:
        user_id = store.verify(body.username, body.password)
    except AuthError:
        resp = JSONResponse(
            status_code=401,
            content=ErrorResponse(
                error=ErrorDetail(code="bad_credentials", message="Invalid username or password.")
            ).model_dump(),
        )
        resp.headers["Cache-Control"] = "no-store"
        return resp

    token, expires_at = token_service.issue(user_id, body.username)
    resp = JSONResponse(status_code=200, content=MessageResponse(message="User logged in successfully").model_dump())
    set_session_cookie(resp, token, expires_at, secure=request.app.state.settings.secure_cookies)
    resp.headers["Cache-Control"] = "no-store"
    logger.info("User %d logged in", user_id)
    return resp


@router.post("/logout", response_model=MessageResponse)
async def logout() -> JSONResponse:
    """Clear the session cookie.

    The token itself stays valid until exp; there is no server-side
    revocation list.
    """
    resp = JSONResponse(content=MessageResponse(message="User logged out successfully").model_dump())
    clear_session_cookie(resp)
    return resp


@router.get("/me", response_model=MeResponse)
async def me(identity: Identity = Depends(require_identity)) -> MeResponse:
    """Return the identity carried by the current session token."""
    return MeResponse(user_id=identity.user_id, username=identity.username)
