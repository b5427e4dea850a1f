"""Database engine setup for SQLite with WAL mode.

SQLite is the persistence layer: WAL mode for concurrent reads, ACID
transactions for the membership/ledger invariant. The DB is stored at
``{root}/.housectl/housectl.db``.

Every transaction opens with ``BEGIN IMMEDIATE`` so two writers never
both read-then-insert the same membership pair: the second one waits for
the busy timeout, then sees the first one's committed row.

SQLAlchemy Core (not ORM) is used because housectl is a short-lived
CLI process — no benefit from session management or identity maps.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Connection, Engine

from housectl.infrastructure.database.schema import metadata

DATA_DIRNAME = ".housectl"
DB_FILENAME = "housectl.db"


def db_path_for(root: Path) -> Path:
    """Location of the database file for a data root."""
    return root / DATA_DIRNAME / DB_FILENAME


def create_db_engine(db_path: Path, *, busy_timeout: float = 30.0) -> Engine:
    """Create a SQLite engine with WAL mode, foreign keys, and immediate transactions."""
    engine = create_engine(
        f"sqlite:///{db_path}",
        echo=False,
        connect_args={"timeout": busy_timeout},
    )

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
        # pysqlite must not issue its own BEGIN; the "begin" hook does.
        dbapi_conn.isolation_level = None
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn: Connection) -> None:
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def init_database(root: Path, *, busy_timeout: float = 30.0) -> Engine:
    """Initialize the housectl database at ``{root}/.housectl/housectl.db``.

    Creates the ``.housectl/`` directory structure (including ``avatars/``
    and ``plugins/``) and all tables from :data:`schema.metadata`.

    Idempotent — safe to call on an existing data root.

    Returns the engine ready for use.
    """
    data_dir = root / DATA_DIRNAME
    data_dir.mkdir(parents=True, exist_ok=True)
    (data_dir / "avatars").mkdir(exist_ok=True)
    (data_dir / "plugins").mkdir(exist_ok=True)

    engine = create_db_engine(db_path_for(root), busy_timeout=busy_timeout)
    metadata.create_all(engine)
    return engine
