"""House registry — identity and metadata records for houses."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import insert, select, update

from housectl.domain.errors import NotFound, ValidationFailed
from housectl.domain.models import House
from housectl.domain.rules import validate_house_create, validate_house_patch
from housectl.infrastructure.clock import now_iso
from housectl.infrastructure.database.schema import houses

if TYPE_CHECKING:
    from sqlalchemy import Connection

# Fields a patch may touch; everything else on a house is system-managed.
PATCHABLE_FIELDS = frozenset({"name", "description", "image"})


class HouseRegistry:
    """Create, read, and patch house rows. Houses are never deleted."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def create(
        self,
        name: str,
        description: str,
        image_ref: str | None,
        creator_id: int,
    ) -> House:
        """Insert a house created (and last updated) by *creator_id*.

        Raises:
            ValidationFailed: name or description missing or out of bounds.
        """
        vr = validate_house_create(name, description)
        if not vr.valid:
            raise ValidationFailed(vr.errors)

        now = now_iso()
        result = self._conn.execute(
            insert(houses).values(
                name=name.strip(),
                description=description,
                image=image_ref,
                created_by=creator_id,
                updated_by=creator_id,
                created_at=now,
                updated_at=now,
            )
        )
        house_id = result.inserted_primary_key[0]
        return self.get(int(house_id))

    def get(self, house_id: int) -> House:
        row = self._conn.execute(select(houses).where(houses.c.id == house_id)).mappings().first()
        if row is None:
            raise NotFound("house", house_id)
        return House.from_row(row)

    def exists(self, house_id: int) -> bool:
        row = self._conn.execute(select(houses.c.id).where(houses.c.id == house_id)).first()
        return row is not None

    def list_all(self) -> list[House]:
        rows = self._conn.execute(select(houses).order_by(houses.c.id)).mappings().all()
        return [House.from_row(row) for row in rows]

    def list_by_ids(self, house_ids: list[int]) -> dict[int, House]:
        if not house_ids:
            return {}
        rows = self._conn.execute(select(houses).where(houses.c.id.in_(house_ids))).mappings()
        return {int(row["id"]): House.from_row(row) for row in rows}

    def update(self, house_id: int, patch: dict[str, Any], actor_id: int) -> House:
        """Apply a partial update of name/description/image.

        Membership of *actor_id* is checked by the caller; the registry
        only records who made the change.

        Raises:
            ValidationFailed: unknown field, empty patch, or constraint violation.
            NotFound: no such house.
        """
        unknown = sorted(set(patch) - PATCHABLE_FIELDS)
        if unknown:
            raise ValidationFailed([f"cannot update field: {name}" for name in unknown])
        if not patch:
            raise ValidationFailed(["no changes specified"])

        vr = validate_house_patch(
            name=patch.get("name"),
            description=patch.get("description"),
        )
        if not vr.valid:
            raise ValidationFailed(vr.errors)

        if not self.exists(house_id):
            raise NotFound("house", house_id)

        values = dict(patch)
        if "name" in values:
            values["name"] = str(values["name"]).strip()
        self._conn.execute(
            update(houses)
            .where(houses.c.id == house_id)
            .values(**values, updated_by=actor_id, updated_at=now_iso())
        )
        return self.get(house_id)
