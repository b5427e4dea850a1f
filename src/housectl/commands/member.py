"""Command group: house membership."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from housectl.commands._base import HouseGroup
from housectl.domain.types import MAX_ROLE, MIN_ROLE

if TYPE_CHECKING:
    from housectl.commands._context import AppContext


@click.group(
    cls=HouseGroup,
    examples="""\
  housectl --as 1 member assign 1 bob@example.com --role 3
  housectl --as 1 member remove 1 2
  housectl member check 1 2
  housectl member ledger 1 2""",
)
def member() -> None:
    """Assign, remove, and inspect house members."""


@member.command(
    examples="""\
  housectl --as 1 member assign 1 bob@example.com --role 3
  housectl --sync --as 1 member assign 1 carol@example.com --role 9""",
)
@click.argument("house_id", type=int)
@click.argument("email")
@click.option(
    "--role",
    type=int,
    required=True,
    help=f"Role in the house ({MIN_ROLE} = owner, {MAX_ROLE} = lowest).",
)
@click.pass_obj
def assign(app: AppContext, house_id: int, email: str, role: int) -> None:
    """Add the user registered as EMAIL to a house."""
    from housectl.services.membership import MembershipService

    actor = app.require_actor()
    app.emit(
        MembershipService(app.repo).assign_user(
            house_id, inviter_id=actor, user_email=email, role=role
        )
    )


@member.command(
    examples="""\
  housectl --as 1 member remove 1 2
  housectl --as 2 member remove 1 2    # leave the house""",
)
@click.argument("house_id", type=int)
@click.argument("user_id", type=int)
@click.pass_obj
def remove(app: AppContext, house_id: int, user_id: int) -> None:
    """Remove USER_ID from a house. Their ledger history is kept."""
    from housectl.services.membership import MembershipService

    actor = app.require_actor()
    app.emit(MembershipService(app.repo).remove_user(house_id, actor_id=actor, target_id=user_id))


@member.command(
    examples="""\
  housectl member check 1 2
  housectl -q member check 1 2""",
)
@click.argument("house_id", type=int)
@click.argument("user_id", type=int)
@click.pass_obj
def check(app: AppContext, house_id: int, user_id: int) -> None:
    """Report whether USER_ID is an active member of a house."""
    from housectl.services.membership import MembershipService

    app.emit(MembershipService(app.repo).user_belongs_to_house(house_id, user_id))


@member.command(examples="  housectl --json member ledger 1 2")
@click.argument("house_id", type=int)
@click.argument("user_id", type=int)
@click.pass_obj
def ledger(app: AppContext, house_id: int, user_id: int) -> None:
    """Show every ledger entry of a member, including past activations."""
    from housectl.services.membership import MembershipService

    app.emit(MembershipService(app.repo).ledger_for(house_id, user_id))
