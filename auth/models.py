"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in catalog/models.py -- dataclasses own domain shape; stores and routes do
the work.

Layer rule: no imports from api/ or catalog/.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass
class User:
    """A registered account.

    hashed_password is the bcrypt hash; the plaintext never reaches this
    object. Users are created on registration and never mutated or deleted
    through the HTTP surface.
    """

    username: str
    email: str
    hashed_password: str
    id: int | None = None
    created_at: str | None = None


@dataclass(frozen=True)
class Claim:
    """The verified payload of a session token.

    Only TokenService.verify() builds these, so holding a Claim means the
    signature checked out and expires_at had not yet passed at verify time.
    """

    user_id: int
    username: str
    expires_at: datetime


@dataclass(frozen=True)
class Identity:
    """The caller identity resolved by the auth gate for one request.

    Route handlers receive this as a typed parameter from
    Depends(require_identity). It is the only trusted source of the caller's
    user id -- handlers never read a user id from the request body or query.
    """

    user_id: int
    username: str
