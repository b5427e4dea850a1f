"""MembershipService — house creation, member assignment, and removal.

Every mutating operation runs as one repository transaction: the house,
the membership row, and its crate/beer ledger pair commit together or
not at all. Notices to plugins are dispatched only after commit.

Pipeline: AUTHORIZE → VALIDATE → RESOLVE → APPLY → LEDGER → NOTIFY
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy.exc import SQLAlchemyError

from housectl.domain.errors import (
    HouseError,
    NotAMember,
    NotFound,
    OperationFailed,
    Unauthorized,
    ValidationFailed,
)
from housectl.domain.rules import validate_assignment
from housectl.domain.types import OWNER_ROLE, NoticeStatus
from housectl.services._helpers import fail, operation_failed
from housectl.services.base import BaseService
from housectl.services.result import ServiceResult
from housectl.services.telemetry import trace_span, traced

if TYPE_CHECKING:
    from housectl.domain.models import LedgerEntry, Membership
    from housectl.infrastructure.repository import RepositoryTransaction

logger = logging.getLogger(__name__)


def _initialize_ledger(
    txn: RepositoryTransaction,
    membership: Membership,
    performed_by: int,
) -> tuple[LedgerEntry, LedgerEntry]:
    """Open the ledger pair for a fresh activation; any failure aborts the transaction."""
    try:
        return txn.ledger.initialize(
            membership.house_id,
            membership.user_id,
            performed_by,
            membership_id=membership.id,
        )
    except Exception as exc:
        logger.error(
            "Ledger initialization failed for house %s user %s",
            membership.house_id,
            membership.user_id,
            exc_info=True,
        )
        raise OperationFailed(
            "ledger initialization failed",
            house_id=membership.house_id,
            user_id=membership.user_id,
        ) from exc


class MembershipService(BaseService):
    """Orchestrates the membership lifecycle and its ledger coupling."""

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    @traced
    def create_house(
        self,
        name: str,
        description: str,
        *,
        creator_id: int,
        image: bytes | None = None,
    ) -> ServiceResult:
        """Create a house and make *creator_id* its owner (role 1)."""
        op = "create_house"
        warnings: list[str] = []

        try:
            with self._repo.transaction() as txn:
                txn.identity.get(creator_id)

                image_ref = None
                if image is not None:
                    with trace_span("store_image"):
                        image_ref = txn.store_image(image)

                with trace_span("apply"):
                    house = txn.houses.create(name, description, image_ref, creator_id)
                    membership = txn.memberships.create(house.id, creator_id, OWNER_ROLE)

                with trace_span("ledger"):
                    crate, beer = _initialize_ledger(txn, membership, creator_id)
        except HouseError as exc:
            return fail(op, exc)
        except SQLAlchemyError as exc:
            return operation_failed(op, exc)

        logger.info("House %s created by user %s", house.id, creator_id)
        self._dispatch_event(
            "post_house_create",
            {"house_id": house.id, "name": house.name, "creator_id": creator_id},
            warnings,
        )

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "house": house.to_payload(),
                "membership": membership.to_payload(),
                "ledger": [crate.to_payload(), beer.to_payload()],
            },
            warnings=warnings,
        )

    @traced
    def assign_user(
        self,
        house_id: int,
        *,
        inviter_id: int,
        user_email: str,
        role: int,
    ) -> ServiceResult:
        """Add the user registered under *user_email* to the house with *role*.

        The inviter must be an active member. Re-assigning a previously
        removed user opens a new activation with its own ledger pair.
        """
        op = "assign_user"
        warnings: list[str] = []

        try:
            with self._repo.transaction() as txn:
                with trace_span("authorize"):
                    house = txn.houses.get(house_id)
                    if not txn.memberships.is_active_member(house_id, inviter_id):
                        raise Unauthorized(
                            f"User {inviter_id} is not a member of house {house_id}",
                            house_id=house_id,
                            user_id=inviter_id,
                        )

                vr = validate_assignment(user_email, role)
                if not vr.valid:
                    raise ValidationFailed(vr.errors)

                with trace_span("resolve"):
                    user_id = txn.identity.resolve_by_email(user_email)
                    invitee = txn.identity.get(user_id)
                    inviter_name = txn.identity.name(inviter_id)

                with trace_span("apply"):
                    membership = txn.memberships.create(house_id, user_id, role)

                with trace_span("ledger"):
                    crate, beer = _initialize_ledger(txn, membership, inviter_id)
        except HouseError as exc:
            return fail(op, exc)
        except SQLAlchemyError as exc:
            return operation_failed(op, exc)

        logger.info(
            "User %s assigned to house %s with role %s by %s (activation %s)",
            user_id,
            house_id,
            role,
            inviter_id,
            membership.activation,
        )
        self._dispatch_event(
            "post_member_assign",
            {
                "house_id": house_id,
                "user_id": user_id,
                "role": role,
                "inviter_id": inviter_id,
                "activation": membership.activation,
            },
            warnings,
        )
        notice_id = self._send_invite_notice(
            {
                "to_email": invitee.email,
                "to_name": invitee.name,
                "house_name": house.name,
                "inviter_name": inviter_name,
            },
            warnings,
        )

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "membership": membership.to_payload(),
                "ledger": [crate.to_payload(), beer.to_payload()],
                "notice_id": notice_id,
            },
            warnings=warnings,
        )

    @traced
    def remove_user(self, house_id: int, *, actor_id: int, target_id: int) -> ServiceResult:
        """Deactivate *target_id*'s membership; returns the membership as it was.

        Ledger entries and the membership row are kept for settlement.
        """
        op = "remove_user"
        warnings: list[str] = []
        policy = self._repo.settings.membership

        try:
            with self._repo.transaction() as txn:
                with trace_span("authorize"):
                    if not txn.houses.exists(house_id):
                        raise NotFound("house", house_id)
                    actor = txn.memberships.get_active(house_id, actor_id)
                    if actor is None:
                        raise Unauthorized(
                            f"User {actor_id} is not a member of house {house_id}",
                            house_id=house_id,
                            user_id=actor_id,
                        )
                    if not txn.memberships.is_active_member(house_id, target_id):
                        raise NotAMember(house_id, target_id)

                    if actor_id == target_id:
                        if not policy.allow_self_removal:
                            raise Unauthorized(
                                "Members may not remove themselves from a house",
                                house_id=house_id,
                                user_id=actor_id,
                            )
                    elif actor.role > policy.remove_min_role:
                        raise Unauthorized(
                            f"Role {actor.role} may not remove members "
                            f"(requires role {policy.remove_min_role} or higher)",
                            house_id=house_id,
                            user_id=actor_id,
                            role=actor.role,
                        )

                with trace_span("apply"):
                    prior = txn.memberships.deactivate(house_id, target_id, actor_id=actor_id)
        except HouseError as exc:
            return fail(op, exc)
        except SQLAlchemyError as exc:
            return operation_failed(op, exc)

        logger.info("User %s removed from house %s by %s", target_id, house_id, actor_id)
        self._dispatch_event(
            "post_member_remove",
            {"house_id": house_id, "user_id": target_id, "actor_id": actor_id},
            warnings,
        )

        return ServiceResult(
            ok=True,
            op=op,
            data={"membership": prior.to_payload()},
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @traced
    def user_belongs_to_house(self, house_id: int, user_id: int) -> ServiceResult:
        """Report whether *user_id* is an active member of *house_id*."""
        op = "user_belongs_to_house"
        with self._repo.reader() as txn:
            member = txn.memberships.is_active_member(house_id, user_id)
        return ServiceResult(
            ok=True,
            op=op,
            data={"house_id": house_id, "user_id": user_id, "member": member},
        )

    @traced
    def list_members(self, house_id: int, *, actor_id: int) -> ServiceResult:
        """Active members of a house, highest role first. Members only."""
        op = "list_members"
        try:
            with self._repo.reader() as txn:
                house = txn.houses.get(house_id)
                if not txn.memberships.is_active_member(house_id, actor_id):
                    raise Unauthorized(
                        f"User {actor_id} is not a member of house {house_id}",
                        house_id=house_id,
                        user_id=actor_id,
                    )
                members = txn.memberships.list_by_house(house_id)
                users = txn.identity.get_many([m.user_id for m in members])
        except HouseError as exc:
            return fail(op, exc)

        items: list[dict[str, Any]] = []
        for m in members:
            user = users[m.user_id]
            items.append(
                {
                    "user_id": m.user_id,
                    "name": user.name,
                    "email": user.email,
                    "role": m.role,
                    "activation": m.activation,
                    "since": m.created_at,
                }
            )
        return ServiceResult(
            ok=True,
            op=op,
            data={"house": house.to_payload(), "count": len(items), "items": items},
        )

    @traced
    def houses_for_user(self, user_id: int) -> ServiceResult:
        """Houses in which *user_id* currently holds an active membership."""
        op = "houses_for_user"
        try:
            with self._repo.reader() as txn:
                txn.identity.get(user_id)
                memberships = txn.memberships.list_by_user(user_id)
                houses = txn.houses.list_by_ids([m.house_id for m in memberships])
        except HouseError as exc:
            return fail(op, exc)

        items = [
            {
                "house_id": m.house_id,
                "name": houses[m.house_id].name,
                "role": m.role,
                "since": m.created_at,
            }
            for m in memberships
        ]
        return ServiceResult(
            ok=True,
            op=op,
            data={"user_id": user_id, "count": len(items), "items": items},
        )

    @traced
    def ledger_for(self, house_id: int, user_id: int) -> ServiceResult:
        """Every ledger entry of the pair, across all activations."""
        op = "ledger_for"
        try:
            with self._repo.reader() as txn:
                if not txn.houses.exists(house_id):
                    raise NotFound("house", house_id)
                history = txn.memberships.history(house_id, user_id)
                if not history:
                    raise NotAMember(house_id, user_id)
                entries = txn.ledger.entries_for(house_id, user_id)
        except HouseError as exc:
            return fail(op, exc)

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "house_id": house_id,
                "user_id": user_id,
                "active": any(m.active for m in history),
                "memberships": [m.to_payload() for m in history],
                "entries": [e.to_payload() for e in entries],
            },
        )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _send_invite_notice(self, payload: dict[str, Any], warnings: list[str]) -> int | None:
        """Hand the invite to the notification gateway. Never fails the caller."""
        notice_id = self._dispatch_event("send_house_invite_notice", payload, warnings)
        bus = self._repo.event_bus
        if notice_id is None or bus is None:
            return notice_id
        try:
            status = bus.status_of(notice_id)
        except SQLAlchemyError:
            logger.debug("Could not read status of notice %s", notice_id, exc_info=True)
            return notice_id
        if status == NoticeStatus.FAILED:
            logger.warning("Invite notice to %s failed", payload["to_email"])
            warnings.append(f"Invite notice to {payload['to_email']} could not be delivered")
        return notice_id
