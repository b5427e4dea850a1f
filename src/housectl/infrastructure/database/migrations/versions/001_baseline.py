"""Baseline schema — users, houses, memberships, ledger entries, notice outbox.

Revision ID: 001_baseline
Revises: None
Create Date: 2026-10-18

Fresh databases are created from ``schema.metadata``; ``housectl upgrade``
stamps them at this revision so later migrations have a starting point.
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision: str = "001_baseline"
down_revision: str | None = None
branch_labels: tuple[str, ...] | None = None
depends_on: tuple[str, ...] | None = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("email", sa.Text, nullable=False, unique=True),
        sa.Column("created_at", sa.Text, nullable=False),
    )

    op.create_table(
        "houses",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("image", sa.Text),
        sa.Column("created_by", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("updated_by", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.Text, nullable=False),
        sa.Column("updated_at", sa.Text, nullable=False),
    )

    op.create_table(
        "memberships",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("house_id", sa.Integer, sa.ForeignKey("houses.id"), nullable=False),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("role", sa.Integer, nullable=False),
        sa.Column("active", sa.Integer, nullable=False, server_default="1"),
        sa.Column("activation", sa.Integer, nullable=False, server_default="1"),
        sa.Column("created_at", sa.Text, nullable=False),
        sa.Column("deactivated_at", sa.Text),
        sa.Column("deactivated_by", sa.Integer, sa.ForeignKey("users.id")),
        sa.UniqueConstraint("house_id", "user_id", "activation"),
    )
    op.create_index(
        "ux_memberships_active_pair",
        "memberships",
        ["house_id", "user_id"],
        unique=True,
        sqlite_where=sa.text("active = 1"),
        postgresql_where=sa.text("active = 1"),
    )
    op.create_index("ix_memberships_user", "memberships", ["user_id"])

    op.create_table(
        "ledger_entries",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("house_id", sa.Integer, sa.ForeignKey("houses.id"), nullable=False),
        sa.Column(
            "membership_id", sa.Integer, sa.ForeignKey("memberships.id"), nullable=False
        ),
        sa.Column("kind", sa.Text, nullable=False),
        sa.Column("value", sa.Integer, nullable=False, server_default="0"),
        sa.Column(
            "performed_by_user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False
        ),
        sa.Column("created_at", sa.Text, nullable=False),
        sa.Column("updated_at", sa.Text, nullable=False),
        sa.UniqueConstraint("membership_id", "kind"),
    )
    op.create_index("ix_ledger_entries_pair", "ledger_entries", ["house_id", "user_id"])

    op.create_table(
        "notice_outbox",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("hook_name", sa.Text, nullable=False),
        sa.Column("payload", sa.Text, nullable=False),
        sa.Column("status", sa.Text, nullable=False),
        sa.Column("error", sa.Text),
        sa.Column("created", sa.Text, nullable=False),
        sa.Column("completed", sa.Text),
    )
    op.create_index("ix_notice_outbox_status", "notice_outbox", ["status"])


def downgrade() -> None:
    op.drop_index("ix_notice_outbox_status", table_name="notice_outbox")
    op.drop_table("notice_outbox")
    op.drop_index("ix_ledger_entries_pair", table_name="ledger_entries")
    op.drop_table("ledger_entries")
    op.drop_index("ix_memberships_user", table_name="memberships")
    op.drop_index("ux_memberships_active_pair", table_name="memberships")
    op.drop_table("memberships")
    op.drop_table("houses")
    op.drop_table("users")
