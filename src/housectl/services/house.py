"""HouseService — house metadata reads and member-only updates."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from housectl.domain.errors import HouseError, Unauthorized
from housectl.services._helpers import fail, operation_failed
from housectl.services.base import BaseService
from housectl.services.result import ServiceResult
from housectl.services.telemetry import trace_span, traced

logger = logging.getLogger(__name__)


class HouseService(BaseService):
    """Read and patch house records."""

    @traced
    def get(self, house_id: int) -> ServiceResult:
        op = "get_house"
        try:
            with self._repo.reader() as txn:
                house = txn.houses.get(house_id)
                member_count = len(txn.memberships.list_by_house(house_id))
        except HouseError as exc:
            return fail(op, exc)

        return ServiceResult(
            ok=True,
            op=op,
            data={"house": house.to_payload(), "member_count": member_count},
        )

    @traced
    def list_houses(self) -> ServiceResult:
        op = "list_houses"
        with self._repo.reader() as txn:
            houses = txn.houses.list_all()

        items = [
            {"id": h.id, "name": h.name, "description": h.description, "image": h.image}
            for h in houses
        ]
        return ServiceResult(ok=True, op=op, data={"count": len(items), "items": items})

    @traced
    def update(
        self,
        house_id: int,
        *,
        actor_id: int,
        name: str | None = None,
        description: str | None = None,
        image: bytes | None = None,
    ) -> ServiceResult:
        """Partially update a house. Only active members may do this."""
        op = "update_house"

        patch: dict[str, Any] = {}
        if name is not None:
            patch["name"] = name
        if description is not None:
            patch["description"] = description

        try:
            with self._repo.transaction() as txn:
                with trace_span("authorize"):
                    txn.houses.get(house_id)
                    if not txn.memberships.is_active_member(house_id, actor_id):
                        raise Unauthorized(
                            f"User {actor_id} is not a member of house {house_id}",
                            house_id=house_id,
                            user_id=actor_id,
                        )

                if image is not None:
                    with trace_span("store_image"):
                        patch["image"] = txn.store_image(image)

                with trace_span("apply"):
                    house = txn.houses.update(house_id, patch, actor_id)
        except HouseError as exc:
            return fail(op, exc)
        except SQLAlchemyError as exc:
            return operation_failed(op, exc)

        logger.info("House %s updated by %s: %s", house_id, actor_id, sorted(patch))
        return ServiceResult(
            ok=True,
            op=op,
            data={"house": house.to_payload(), "fields_changed": sorted(patch)},
        )
