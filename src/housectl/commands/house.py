"""Command group: houses."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from housectl.commands._base import HouseGroup

if TYPE_CHECKING:
    from housectl.commands._context import AppContext

_IMAGE = click.Path(exists=True, dir_okay=False, readable=True, path_type=Path)


@click.group(
    cls=HouseGroup,
    examples="""\
  housectl --as 1 house create "Unit42" "Third floor flat"
  housectl house list
  housectl --as 1 house members 1
  housectl --as 1 house mine""",
)
def house() -> None:
    """Create, inspect, and update houses."""


@house.command(
    examples="""\
  housectl --as 1 house create "Unit42" "Third floor flat"
  housectl --as 1 house create "Maple House" "Shared student house" --image door.png""",
)
@click.argument("name")
@click.argument("description")
@click.option("--image", type=_IMAGE, default=None, help="JPEG or PNG avatar for the house.")
@click.pass_obj
def create(app: AppContext, name: str, description: str, image: Path | None) -> None:
    """Create a house; the acting user becomes its owner."""
    from housectl.services.membership import MembershipService

    actor = app.require_actor()
    app.emit(
        MembershipService(app.repo).create_house(
            name,
            description,
            creator_id=actor,
            image=image.read_bytes() if image is not None else None,
        )
    )


@house.command(examples="  housectl house show 1")
@click.argument("house_id", type=int)
@click.pass_obj
def show(app: AppContext, house_id: int) -> None:
    """Show a house."""
    from housectl.services.house import HouseService

    app.emit(HouseService(app.repo).get(house_id))


@house.command(name="list", examples="  housectl --json house list")
@click.pass_obj
def list_cmd(app: AppContext) -> None:
    """List all houses."""
    from housectl.services.house import HouseService

    app.emit(HouseService(app.repo).list_houses())


@house.command(
    examples="""\
  housectl --as 1 house update 1 --name "Unit 42b"
  housectl --as 1 house update 1 --description "Now with a garden" --image garden.jpg""",
)
@click.argument("house_id", type=int)
@click.option("--name", default=None, help="New name (4-56 characters).")
@click.option("--description", default=None, help="New description (up to 280 characters).")
@click.option("--image", type=_IMAGE, default=None, help="Replacement avatar.")
@click.pass_obj
def update(
    app: AppContext,
    house_id: int,
    name: str | None,
    description: str | None,
    image: Path | None,
) -> None:
    """Update a house's name, description, or image. Members only."""
    from housectl.services.house import HouseService

    if name is None and description is None and image is None:
        click.echo("No changes specified. Use --help for options.", err=True)
        raise SystemExit(1)

    actor = app.require_actor()
    app.emit(
        HouseService(app.repo).update(
            house_id,
            actor_id=actor,
            name=name,
            description=description,
            image=image.read_bytes() if image is not None else None,
        )
    )


@house.command(examples="  housectl --as 1 house members 1")
@click.argument("house_id", type=int)
@click.pass_obj
def members(app: AppContext, house_id: int) -> None:
    """List the active members of a house. Members only."""
    from housectl.services.membership import MembershipService

    actor = app.require_actor()
    app.emit(MembershipService(app.repo).list_members(house_id, actor_id=actor))


@house.command(examples="  housectl --as 2 house mine")
@click.pass_obj
def mine(app: AppContext) -> None:
    """List the houses the acting user belongs to."""
    from housectl.services.membership import MembershipService

    actor = app.require_actor()
    app.emit(MembershipService(app.repo).houses_for_user(actor))
