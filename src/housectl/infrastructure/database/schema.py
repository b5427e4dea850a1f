"""SQLAlchemy Core table definitions for the housectl database.

``memberships`` is an append-only activation log: removal flips
``active`` to 0 and a later re-assignment inserts a new row with the
next ``activation`` number. The partial unique index on active pairs is
what serialises racing assignments.
"""

from __future__ import annotations

from sqlalchemy import (
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
    UniqueConstraint,
    text,
)

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", Text, nullable=False),
    Column("email", Text, nullable=False, unique=True),
    Column("created_at", Text, nullable=False),
)

houses = Table(
    "houses",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", Text, nullable=False),
    Column("description", Text, nullable=False),
    Column("image", Text),  # path relative to the data root
    Column("created_by", Integer, ForeignKey("users.id"), nullable=False),
    Column("updated_by", Integer, ForeignKey("users.id"), nullable=False),
    Column("created_at", Text, nullable=False),
    Column("updated_at", Text, nullable=False),
)

memberships = Table(
    "memberships",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("house_id", Integer, ForeignKey("houses.id"), nullable=False),
    Column("user_id", Integer, ForeignKey("users.id"), nullable=False),
    Column("role", Integer, nullable=False),
    Column("active", Integer, nullable=False, default=1, server_default="1"),
    Column("activation", Integer, nullable=False, default=1, server_default="1"),
    Column("created_at", Text, nullable=False),
    Column("deactivated_at", Text),
    Column("deactivated_by", Integer, ForeignKey("users.id")),
    UniqueConstraint("house_id", "user_id", "activation"),
)

ledger_entries = Table(
    "ledger_entries",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, ForeignKey("users.id"), nullable=False),
    Column("house_id", Integer, ForeignKey("houses.id"), nullable=False),
    Column("membership_id", Integer, ForeignKey("memberships.id"), nullable=False),
    Column("kind", Text, nullable=False),  # crate | beer
    Column("value", Integer, nullable=False, default=0, server_default="0"),
    Column("performed_by_user_id", Integer, ForeignKey("users.id"), nullable=False),
    Column("created_at", Text, nullable=False),
    Column("updated_at", Text, nullable=False),
    UniqueConstraint("membership_id", "kind"),
)

notice_outbox = Table(
    "notice_outbox",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("hook_name", Text, nullable=False),
    Column("payload", Text, nullable=False),  # JSON
    Column("status", Text, nullable=False),
    Column("error", Text),
    Column("created", Text, nullable=False),
    Column("completed", Text),
)

# ---------------------------------------------------------------------------
# Indexes
# ---------------------------------------------------------------------------

# At most one active membership per (house, user).
Index(
    "ux_memberships_active_pair",
    memberships.c.house_id,
    memberships.c.user_id,
    unique=True,
    sqlite_where=text("active = 1"),
    postgresql_where=text("active = 1"),
)
Index("ix_memberships_user", memberships.c.user_id)
Index("ix_ledger_entries_pair", ledger_entries.c.house_id, ledger_entries.c.user_id)
Index("ix_notice_outbox_status", notice_outbox.c.status)
