"""SQLite database engine and schema via SQLAlchemy Core."""

from housectl.infrastructure.database.engine import (
    create_db_engine,
    db_path_for,
    init_database,
)
from housectl.infrastructure.database.schema import (
    houses,
    ledger_entries,
    memberships,
    metadata,
    notice_outbox,
    users,
)

__all__ = [
    "create_db_engine",
    "db_path_for",
    "houses",
    "init_database",
    "ledger_entries",
    "memberships",
    "metadata",
    "notice_outbox",
    "users",
]
