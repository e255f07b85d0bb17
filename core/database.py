"""
core/database.py -- Shared SQLAlchemy engine bootstrap for the stores.

Both repositories (auth/store.py, catalog/store.py) build their engine here so
the connection policy lives in one place:

  - SQLite gets check_same_thread=False (FastAPI runs sync handlers in a
    threadpool), WAL journal mode, and a busy timeout.
  - Server backends get a bounded pool checkout timeout; PostgreSQL and
    MySQL also get a driver-level statement or socket timeout.

Every persistence call is wrapped in guard(). A timeout or a lost connection
becomes DependencyError, which the API renders as an opaque 500. There are no
retries; the caller decides whether to try again.

Layer rule: no imports from api/, auth/, or catalog/.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event, make_url
from sqlalchemy.engine import Engine
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from core.errors import DependencyError

logger = logging.getLogger("cms.db")

DEFAULT_TIMEOUT_SECONDS = 10.0


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def driver_timeout_args(db_url: str, timeout: float) -> dict:
    """Return DBAPI connect arguments that bound connect and query time.

    PostgreSQL gets a server-side statement_timeout, MySQL gets socket read
    and write timeouts. Other server backends only have the pool checkout
    bound, which is logged once at engine creation.
    """
    backend = make_url(db_url).get_backend_name()
    seconds = max(1, math.ceil(timeout))
    if backend == "postgresql":
        return {"connect_timeout": seconds, "options": f"-c statement_timeout={int(timeout * 1000)}"}
    if backend in ("mysql", "mariadb"):
        return {"connect_timeout": seconds, "read_timeout": seconds, "write_timeout": seconds}
    return {}


def build_engine(db_url: str, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> Engine:
    """Create an Engine whose operations are bounded by timeout seconds."""
    if db_url.startswith("sqlite"):
        engine = create_engine(db_url, connect_args={"check_same_thread": False, "timeout": timeout})
        event.listen(engine, "connect", _set_wal_mode)
        return engine
    connect_args = driver_timeout_args(db_url, timeout)
    if not connect_args:
        logger.warning("No statement timeout for %s; only pool checkout is bounded", make_url(db_url).get_backend_name())
    return create_engine(db_url, connect_args=connect_args, pool_timeout=timeout, pool_pre_ping=True)


@contextmanager
def guard(operation: str) -> Iterator[None]:
    """Translate driver-level timeouts and connection failures into DependencyError.

    IntegrityError is deliberately not caught here: stores turn constraint
    violations into ConflictError themselves.
    """
    try:
        yield
    except (OperationalError, InterfaceError, PoolTimeoutError) as exc:
        logger.error("Persistence failure during %s: %s", operation, exc.__class__.__name__)
        raise DependencyError() from exc
