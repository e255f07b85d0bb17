"""
auth/store.py -- SQLAlchemy Core persistence layer for user credentials.

Pattern: Repository + Data Mapper (same as catalog/store.py).
CredentialStore is the repository; _row_to_user is the mapper.
Route and dependency code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

  Username uniqueness is a UNIQUE index, not a lookup-then-insert. Two
  concurrent registrations for the same name cannot both succeed: the loser
  gets IntegrityError, surfaced as DuplicateIdentity.

  verify() never tells the caller which half of the credential was wrong.
  UserNotFound and InvalidCredential share one code and message, and an
  unknown username still pays for a bcrypt check against DUMMY_HASH.

Layer rule: no imports from api/ or catalog/.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, select
from sqlalchemy.exc import IntegrityError

from auth.models import User
from auth.passwords import DUMMY_HASH, hash_password, verify_password
from core.database import DEFAULT_TIMEOUT_SECONDS, build_engine, guard
from core.errors import DependencyError, DuplicateIdentity, InvalidCredential, UserNotFound

logger = logging.getLogger("cms.auth")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", String(255), nullable=False, unique=True),
    Column("email", String(255), nullable=False),
    Column("hashed_password", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class CredentialStore:
    """Repository for User records and password verification.

    Usage:
        store = CredentialStore("sqlite:///cms.db")
        user_id = store.register("alice", "alice@x.com", "pw123")
        user_id = store.verify("alice", "pw123")
        store.close()
    """

    def __init__(self, db_url: str, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self.engine = build_engine(db_url, timeout)
        with guard("create users schema"):
            _metadata.create_all(self.engine)

    def register(self, username: str, email: str, password: str) -> int:
        """Hash the password, insert a new user, and return its id.

        Raises DuplicateIdentity if the username is already taken.
        """
        hashed = hash_password(password)
        with guard("register user"), self.engine.connect() as conn:
            try:
                result = conn.execute(
                    _users.insert().values(
                        username=username,
                        email=email,
                        hashed_password=hashed,
                        created_at=_now_iso(),
                    )
                )
                conn.commit()
            except IntegrityError as exc:
                conn.rollback()
                raise DuplicateIdentity() from exc
            user_id = result.inserted_primary_key[0]
        logger.info("Registered user id=%d", user_id)
        return user_id

    def verify(self, username: str, password: str) -> int:
        """Check a username/password pair and return the user id.

        Raises UserNotFound or InvalidCredential. Both run exactly one bcrypt
        comparison so response time does not reveal which one happened.
        """
        user = self.get_by_username(username)
        if user is None:
            verify_password(password, DUMMY_HASH)
            raise UserNotFound()
        if not verify_password(password, user.hashed_password):
            raise InvalidCredential()
        return user.id

    def get_by_username(self, username: str) -> User | None:
        """Look up a user by exact username (case-sensitive). Returns None if not found."""
        with guard("get user by username"), self.engine.connect() as conn:
            row = conn.execute(select(_users).where(_users.c.username == username)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_id(self, user_id: int) -> User | None:
        with guard("get user by id"), self.engine.connect() as conn:
            row = conn.execute(select(_users).where(_users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def ping(self) -> bool:
        """Return True if the database answers a trivial query. Used by /health."""
        try:
            with guard("ping"), self.engine.connect() as conn:
                conn.execute(select(1))
        except DependencyError:
            return False
        return True

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        username=row.username,
        email=row.email,
        hashed_password=row.hashed_password,
        created_at=row.created_at,
    )
