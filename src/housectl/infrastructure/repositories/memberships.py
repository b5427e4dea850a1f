"""Membership store — the authoritative (house, user) -> role/active mapping.

Memberships are soft-deleted only. Each (house, user) pair keeps every
activation it ever had; at most one of them is active at a time.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import func, insert, select, update
from sqlalchemy.exc import IntegrityError

from housectl.domain.errors import DuplicateMembership, NotFound
from housectl.domain.models import Membership
from housectl.infrastructure.clock import now_iso
from housectl.infrastructure.database.schema import memberships

if TYPE_CHECKING:
    from sqlalchemy import Connection

logger = logging.getLogger(__name__)


class MembershipStore:
    """SQL access for the ``memberships`` activation log."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_active_member(self, house_id: int, user_id: int) -> bool:
        """True iff an active membership exists for the pair."""
        return self.get_active(house_id, user_id) is not None

    def get_active(self, house_id: int, user_id: int) -> Membership | None:
        row = (
            self._conn.execute(
                select(memberships).where(
                    memberships.c.house_id == house_id,
                    memberships.c.user_id == user_id,
                    memberships.c.active == 1,
                )
            )
            .mappings()
            .first()
        )
        return Membership.from_row(row) if row is not None else None

    def get(self, membership_id: int) -> Membership:
        row = (
            self._conn.execute(select(memberships).where(memberships.c.id == membership_id))
            .mappings()
            .first()
        )
        if row is None:
            raise NotFound("membership", membership_id)
        return Membership.from_row(row)

    def list_by_user(self, user_id: int) -> list[Membership]:
        """Active memberships of *user_id*, oldest first."""
        rows = self._conn.execute(
            select(memberships)
            .where(memberships.c.user_id == user_id, memberships.c.active == 1)
            .order_by(memberships.c.id)
        ).mappings()
        return [Membership.from_row(row) for row in rows]

    def list_by_house(self, house_id: int) -> list[Membership]:
        """Active memberships of *house_id*, highest role (lowest number) first."""
        rows = self._conn.execute(
            select(memberships)
            .where(memberships.c.house_id == house_id, memberships.c.active == 1)
            .order_by(memberships.c.role, memberships.c.id)
        ).mappings()
        return [Membership.from_row(row) for row in rows]

    def history(self, house_id: int, user_id: int) -> list[Membership]:
        """Every activation of the pair, active or not, in activation order."""
        rows = self._conn.execute(
            select(memberships)
            .where(memberships.c.house_id == house_id, memberships.c.user_id == user_id)
            .order_by(memberships.c.activation)
        ).mappings()
        return [Membership.from_row(row) for row in rows]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(self, house_id: int, user_id: int, role: int) -> Membership:
        """Activate *user_id* in *house_id* with *role*.

        A previously removed pair gets a new row with the next activation
        number; the deactivated rows are left untouched.

        Raises:
            DuplicateMembership: the pair already has an active membership,
                including when a concurrent writer got there first.
        """
        if self.is_active_member(house_id, user_id):
            raise DuplicateMembership(house_id, user_id)

        previous = self._conn.execute(
            select(func.max(memberships.c.activation)).where(
                memberships.c.house_id == house_id,
                memberships.c.user_id == user_id,
            )
        ).scalar()
        activation = int(previous or 0) + 1

        try:
            result = self._conn.execute(
                insert(memberships).values(
                    house_id=house_id,
                    user_id=user_id,
                    role=role,
                    active=1,
                    activation=activation,
                    created_at=now_iso(),
                )
            )
        except IntegrityError as exc:
            if "UNIQUE" not in str(exc.orig).upper():
                raise
            logger.debug("Lost membership insert race for house %s user %s", house_id, user_id)
            raise DuplicateMembership(house_id, user_id) from exc

        return self.get(int(result.inserted_primary_key[0]))

    def deactivate(
        self,
        house_id: int,
        user_id: int,
        *,
        actor_id: int | None = None,
    ) -> Membership:
        """Soft-delete the active membership of the pair.

        Returns the membership as it was before deactivation.

        Raises:
            NotFound: the pair has no active membership.
        """
        current = self.get_active(house_id, user_id)
        if current is None:
            raise NotFound("membership", f"{house_id}/{user_id}")

        self._conn.execute(
            update(memberships)
            .where(memberships.c.id == current.id)
            .values(active=0, deactivated_at=now_iso(), deactivated_by=actor_id)
        )
        return current
