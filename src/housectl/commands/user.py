"""Command group: user identities."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from housectl.commands._base import HouseGroup

if TYPE_CHECKING:
    from housectl.commands._context import AppContext


@click.group(
    cls=HouseGroup,
    examples="""\
  housectl user register "Ada Lovelace" ada@example.com
  housectl user show 1""",
)
def user() -> None:
    """Register and inspect users."""


@user.command(
    examples="""\
  housectl user register "Ada Lovelace" ada@example.com
  housectl --json user register Bob bob@example.com""",
)
@click.argument("name")
@click.argument("email")
@click.pass_obj
def register(app: AppContext, name: str, email: str) -> None:
    """Register a user NAME with address EMAIL."""
    from housectl.services.user import UserService

    app.emit(UserService(app.repo).register(name, email))


@user.command(examples="  housectl user show 1")
@click.argument("user_id", type=int)
@click.pass_obj
def show(app: AppContext, user_id: int) -> None:
    """Show a user and how many houses they belong to."""
    from housectl.services.user import UserService

    app.emit(UserService(app.repo).get(user_id))
