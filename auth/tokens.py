"""
auth/tokens.py -- Session token issue/verify and the session cookie helpers.

Security design decisions:
  JWT: python-jose with HS256. Tokens carry user_id, username (also as the
       "sub" claim), and an exp fixed at issuance + 24 hours. There is no
       refresh or rotation: one secret signs and verifies every token for the
       lifetime of the process.

  SECRET_KEY: never read here from the environment. api/main.py builds one
       TokenService at startup from core.config.get_settings() and stores it
       on app.state; everything else receives that instance. The key is held
       in a private attribute and left out of repr().

  verify() is pure: no store lookups. It distinguishes three failures so the
       gate can log them, but the HTTP layer answers all three with 401.

Layer rule: no imports from api/ or catalog/.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from auth.models import Claim
from core.errors import InvalidSignature, MalformedToken, TokenExpired

logger = logging.getLogger("cms.auth")

ALGORITHM = "HS256"
TOKEN_TTL = timedelta(hours=24)
COOKIE_NAME = "token"

_REQUIRED_CLAIMS = ("user_id", "username", "exp")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """Issue and verify HS256 session tokens with one process-wide secret.

    Usage:
        tokens = TokenService(settings.secret_key.get_secret_value())
        token, expires_at = tokens.issue(user_id=1, username="alice")
        claim = tokens.verify(token)   # raises an AuthError subclass on failure

    clock is injectable so tests can move time past expiry without sleeping.
    """

    def __init__(self, secret_key: str, clock: Callable[[], datetime] = _utcnow) -> None:
        if not secret_key:
            raise ValueError("TokenService requires a non-empty secret key.")
        self._secret_key = secret_key
        self._clock = clock

    def __repr__(self) -> str:
        return f"TokenService(algorithm={ALGORITHM!r}, ttl={TOKEN_TTL})"

    def issue(self, user_id: int, username: str) -> tuple[str, datetime]:
        """Return (token, expires_at) for the given identity.

        exp is truncated to whole seconds because the JWT NumericDate is an
        integer; expires_at matches the claim exactly.
        """
        expires_at = datetime.fromtimestamp(int((self._clock() + TOKEN_TTL).timestamp()), tz=timezone.utc)
        payload = {
            "sub": username,
            "user_id": user_id,
            "username": username,
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(payload, self._secret_key, algorithm=ALGORITHM)
        return token, expires_at

    def verify(self, token: str) -> Claim:
        """Decode and verify a token. Returns the Claim or raises.

        MalformedToken    -- not a JWT, or required claims missing/mistyped
        InvalidSignature  -- signature or algorithm does not match
        TokenExpired      -- now >= exp
        """
        try:
            unverified = jwt.get_unverified_claims(token)
        except JWTError as exc:
            raise MalformedToken() from exc

        if any(name not in unverified for name in _REQUIRED_CLAIMS):
            raise MalformedToken()

        try:
            # Expiry is checked below against the injected clock; python-jose
            # would check it against the wall clock with the opposite boundary.
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[ALGORITHM],
                options={"verify_exp": False},
            )
        except JWTError as exc:
            raise InvalidSignature() from exc

        user_id, username, exp = payload["user_id"], payload["username"], payload["exp"]
        if not isinstance(user_id, int) or not isinstance(username, str) or not isinstance(exp, (int, float)):
            raise MalformedToken()

        expires_at = datetime.fromtimestamp(exp, tz=timezone.utc)
        if self._clock() >= expires_at:
            raise TokenExpired()
        return Claim(user_id=user_id, username=username, expires_at=expires_at)


# ---------------------------------------------------------------------------
# Cookie helpers
# ---------------------------------------------------------------------------


def set_session_cookie(response, token: str, expires_at: datetime, secure: bool = False) -> None:
    """Write the session token as an httpOnly cookie on the response.

    httponly=True: JS cannot read the cookie (XSS mitigation).
    samesite="lax": not sent on cross-site POST -- CSRF mitigation for the
        mutating routes.
    secure: only sent over HTTPS when SECURE_COOKIES=true (set in production).
    max_age/expires: match the token's exp so both lapse together.
    """
    response.set_cookie(
        COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="lax",
        secure=secure,
        max_age=int(TOKEN_TTL.total_seconds()),
        expires=expires_at,
    )


def clear_session_cookie(response) -> None:
    response.delete_cookie(COOKIE_NAME, httponly=True, samesite="lax")
