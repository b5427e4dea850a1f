"""Ledger initializer — the paired zero-value entries of a membership activation."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import insert, select

from housectl.domain.models import LedgerEntry
from housectl.domain.types import LedgerKind
from housectl.infrastructure.clock import now_iso
from housectl.infrastructure.database.schema import ledger_entries

if TYPE_CHECKING:
    from sqlalchemy import Connection


class LedgerInitializer:
    """Creates and reads ``ledger_entries`` rows.

    :meth:`initialize` is not idempotent: callers invoke it exactly once
    per newly activated membership, inside the same transaction. The
    ``UNIQUE(membership_id, kind)`` constraint rejects a second call.
    """

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def initialize(
        self,
        house_id: int,
        user_id: int,
        performed_by_user_id: int,
        *,
        membership_id: int,
    ) -> tuple[LedgerEntry, LedgerEntry]:
        """Create the zero-value ``crate`` and ``beer`` entries for the pair.

        Returns ``(crate_entry, beer_entry)``.
        """
        now = now_iso()
        created: dict[LedgerKind, LedgerEntry] = {}
        for kind in (LedgerKind.CRATE, LedgerKind.BEER):
            result = self._conn.execute(
                insert(ledger_entries).values(
                    user_id=user_id,
                    house_id=house_id,
                    membership_id=membership_id,
                    kind=kind.value,
                    value=0,
                    performed_by_user_id=performed_by_user_id,
                    created_at=now,
                    updated_at=now,
                )
            )
            entry_id = int(result.inserted_primary_key[0])
            row = (
                self._conn.execute(select(ledger_entries).where(ledger_entries.c.id == entry_id))
                .mappings()
                .one()
            )
            created[kind] = LedgerEntry.from_row(row)
        return created[LedgerKind.CRATE], created[LedgerKind.BEER]

    def entries_for(self, house_id: int, user_id: int) -> list[LedgerEntry]:
        """All entries of the pair across every activation, oldest first."""
        rows = self._conn.execute(
            select(ledger_entries)
            .where(ledger_entries.c.house_id == house_id, ledger_entries.c.user_id == user_id)
            .order_by(ledger_entries.c.id)
        ).mappings()
        return [LedgerEntry.from_row(row) for row in rows]

    def entries_for_membership(self, membership_id: int) -> list[LedgerEntry]:
        rows = self._conn.execute(
            select(ledger_entries)
            .where(ledger_entries.c.membership_id == membership_id)
            .order_by(ledger_entries.c.id)
        ).mappings()
        return [LedgerEntry.from_row(row) for row in rows]
