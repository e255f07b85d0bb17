"""
catalog/store.py -- SQLAlchemy-backed persistence for stacks and content.

Uses SQLAlchemy Core (not ORM) so the dataclasses in catalog/models.py remain
the authoritative domain representation. Swapping SQLite for PostgreSQL is a
connection string change, not a rewrite.

Pattern: Repository + Data Mapper. CatalogStore is the repository (one clean
interface per entity); the _row_to_* functions are the mappers. Route
handlers never touch SQL directly.

Consistency rules pushed into the database rather than checked in Python:
  - Stack name uniqueness is a UNIQUE index. create_stack/update_stack turn
    IntegrityError into StackConflict; there is no lookup-then-insert window.
  - Content ownership is part of the WHERE clause of the UPDATE/DELETE
    itself. A row that is missing and a row owned by someone else both give
    rowcount == 0, which the orchestrator reports as NotFoundOrForbidden.

Content.stack is stored as a JSON array of {id, name, color} objects in a
Text column -- a denormalized snapshot, never joined back to stacks.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = CatalogStore("sqlite:///cms.db")
    go = store.create_stack("go", "blue")
    stacks = store.resolve_stacks(["go"])
    content = store.insert_content(Content(user_id=1, name="site", stack=stacks))
    store.close()
"""

import json
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, select
from sqlalchemy.exc import IntegrityError

from catalog.models import Content, Stack
from core.database import DEFAULT_TIMEOUT_SECONDS, build_engine, guard
from core.errors import DependencyError, DuplicateStackNames, InvalidStack, PartialResolution, StackConflict, StackNotFound

logger = logging.getLogger("cms.catalog")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_stacks = Table(
    "stacks",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(100), nullable=False, unique=True),
    Column("color", String(50), nullable=False),
)

_contents = Table(
    "contents",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, nullable=False, index=True),
    Column("name", String(255), nullable=False),
    Column("description", Text, nullable=False, server_default=""),
    Column("url", Text, nullable=False, server_default=""),
    Column("img_url", Text, nullable=False, server_default=""),
    Column("stack", Text, nullable=False, server_default="[]"),  # JSON array of stack snapshots
    Column("created_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _check_stack_fields(name: str, color: str) -> None:
    if not name or not name.strip() or not color or not color.strip():
        raise InvalidStack()


def _repeated(names: list[str]) -> list[str]:
    """Names that occur more than once, in first-seen order."""
    seen: set[str] = set()
    repeated: list[str] = []
    for name in names:
        if name in seen and name not in repeated:
            repeated.append(name)
        seen.add(name)
    return repeated


def _dump_snapshots(stacks: list[Stack]) -> str:
    return json.dumps([{"id": s.id, "name": s.name, "color": s.color} for s in stacks])


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class CatalogStore:
    """Repository for Stack and Content entities."""

    def __init__(self, db_url: str, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self.engine = build_engine(db_url, timeout)
        with guard("create catalog schema"):
            metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Stacks
    # ------------------------------------------------------------------

    def create_stack(self, name: str, color: str) -> Stack:
        """Insert a new stack and return it with its assigned id.

        Raises InvalidStack on an empty name or color, StackConflict if the
        name is taken (exact, case-sensitive match).
        """
        _check_stack_fields(name, color)
        with guard("create stack"), self.engine.connect() as conn:
            try:
                result = conn.execute(_stacks.insert().values(name=name, color=color))
                conn.commit()
            except IntegrityError as exc:
                conn.rollback()
                raise StackConflict() from exc
            stack_id = result.inserted_primary_key[0]
        logger.info("Created stack id=%d name=%r", stack_id, name)
        return Stack(id=stack_id, name=name, color=color)

    def list_stacks(self) -> list[Stack]:
        """Return every stack ordered by id."""
        with guard("list stacks"), self.engine.connect() as conn:
            rows = conn.execute(select(_stacks).order_by(_stacks.c.id)).fetchall()
        return [_row_to_stack(r) for r in rows]

    def update_stack(self, stack_id: int, name: str, color: str) -> Stack:
        """Replace name and color of an existing stack.

        Partial updates are not supported: both fields are required. Content
        created earlier keeps its old snapshot of this stack.

        Raises InvalidStack, StackNotFound, or StackConflict (the new name
        belongs to a different stack).
        """
        _check_stack_fields(name, color)
        with guard("update stack"), self.engine.connect() as conn:
            try:
                result = conn.execute(_stacks.update().where(_stacks.c.id == stack_id).values(name=name, color=color))
                conn.commit()
            except IntegrityError as exc:
                conn.rollback()
                raise StackConflict() from exc
        if result.rowcount == 0:
            raise StackNotFound()
        return Stack(id=stack_id, name=name, color=color)

    def delete_stack(self, stack_id: int) -> bool:
        """Delete a stack by id. Returns True if a row was removed.

        Deleting an unknown id is not an error. There is no cascade: content
        that embedded this stack keeps its snapshot.
        """
        with guard("delete stack"), self.engine.connect() as conn:
            result = conn.execute(_stacks.delete().where(_stacks.c.id == stack_id))
            conn.commit()
        return result.rowcount > 0

    def resolve_stacks(self, names: list[str]) -> list[Stack]:
        """Return full Stack records for names, in the order requested.

        The result always has exactly len(names) entries. A name listed twice
        fails with DuplicateStackNames; if any name is not registered the whole
        batch fails with PartialResolution. Callers never get a partial list.
        """
        repeated = _repeated(names)
        if repeated:
            raise DuplicateStackNames(repeated)
        wanted = list(names)
        if not wanted:
            return []
        with guard("resolve stacks"), self.engine.connect() as conn:
            rows = conn.execute(select(_stacks).where(_stacks.c.name.in_(wanted))).fetchall()
        by_name = {row.name: _row_to_stack(row) for row in rows}
        missing = [name for name in wanted if name not in by_name]
        if missing:
            raise PartialResolution(missing)
        return [by_name[name] for name in wanted]

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    def insert_content(self, content: Content) -> Content:
        """Persist a new content item and return it with id and created_at set."""
        created_at = _now_iso()
        with guard("insert content"), self.engine.connect() as conn:
            result = conn.execute(
                _contents.insert().values(
                    user_id=content.user_id,
                    name=content.name,
                    description=content.description,
                    url=content.url,
                    img_url=content.img_url,
                    stack=_dump_snapshots(content.stack),
                    created_at=created_at,
                )
            )
            conn.commit()
            content_id = result.inserted_primary_key[0]
        return Content(
            id=content_id,
            user_id=content.user_id,
            name=content.name,
            description=content.description,
            url=content.url,
            img_url=content.img_url,
            stack=list(content.stack),
            created_at=created_at,
        )

    def get_content(self, content_id: int, user_id: Optional[int] = None) -> Optional[Content]:
        """Fetch one content item; with user_id, only if that user owns it."""
        query = select(_contents).where(_contents.c.id == content_id)
        if user_id is not None:
            query = query.where(_contents.c.user_id == user_id)
        with guard("get content"), self.engine.connect() as conn:
            row = conn.execute(query).fetchone()
        return _row_to_content(row) if row is not None else None

    def list_contents(self, user_id: Optional[int] = None) -> list[Content]:
        """Return content ordered by id; only user_id's items when given."""
        query = select(_contents).order_by(_contents.c.id)
        if user_id is not None:
            query = query.where(_contents.c.user_id == user_id)
        with guard("list contents"), self.engine.connect() as conn:
            rows = conn.execute(query).fetchall()
        return [_row_to_content(r) for r in rows]

    def update_owned_content(
        self,
        content_id: int,
        user_id: int,
        *,
        name: str,
        description: str,
        url: str,
        img_url: str,
        stack: list[Stack],
    ) -> bool:
        """Full-replace the editable fields of content_id if user_id owns it.

        Returns False when no row matched -- missing and not-yours are
        indistinguishable by design.
        """
        with guard("update content"), self.engine.connect() as conn:
            result = conn.execute(
                _contents.update()
                .where((_contents.c.id == content_id) & (_contents.c.user_id == user_id))
                .values(
                    name=name,
                    description=description,
                    url=url,
                    img_url=img_url,
                    stack=_dump_snapshots(stack),
                )
            )
            conn.commit()
        return result.rowcount > 0

    def delete_owned_content(self, content_id: int, user_id: int) -> bool:
        """Delete content_id if user_id owns it. Returns False when no row matched."""
        with guard("delete content"), self.engine.connect() as conn:
            result = conn.execute(
                _contents.delete().where((_contents.c.id == content_id) & (_contents.c.user_id == user_id))
            )
            conn.commit()
        return result.rowcount > 0

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
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_stack(row) -> Stack:
    return Stack(id=row.id, name=row.name, color=row.color)


def _row_to_content(row) -> Content:
    snapshots = json.loads(row.stack) if row.stack else []
    return Content(
        id=row.id,
        user_id=row.user_id,
        name=row.name,
        description=row.description,
        url=row.url,
        img_url=row.img_url,
        stack=[Stack(id=s.get("id"), name=s["name"], color=s["color"]) for s in snapshots],
        created_at=row.created_at,
    )
