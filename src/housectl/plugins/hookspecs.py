"""Pluggy hook specifications for housectl lifecycle events and notices.

Lifecycle hooks fire after the membership transaction has committed.
``send_house_invite_notice`` is the notification gateway: implementations
deliver the "you were added to a house" message.
"""

from __future__ import annotations

import pluggy

hookspec = pluggy.HookspecMarker("housectl")


class HousectlHookSpec:
    """Hook specifications for the housectl plugin system."""

    @hookspec
    def post_house_create(self, house_id: int, name: str, creator_id: int) -> None:
        """Called after a house and its owner membership are created."""

    @hookspec
    def post_member_assign(
        self,
        house_id: int,
        user_id: int,
        role: int,
        inviter_id: int,
        activation: int,
    ) -> None:
        """Called after a user is assigned to a house."""

    @hookspec
    def post_member_remove(self, house_id: int, user_id: int, actor_id: int) -> None:
        """Called after a membership is deactivated."""

    @hookspec
    def send_house_invite_notice(
        self,
        to_email: str,
        to_name: str,
        house_name: str,
        inviter_name: str,
    ) -> None:
        """Deliver the added-to-house notice. Raising marks the notice failed."""
