"""Subcommand modules for housectl.

Provides register_commands() which uses deferred imports to keep
``housectl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups and standalone commands on the root CLI group."""
    from housectl.commands.house import house
    from housectl.commands.member import member
    from housectl.commands.upgrade import upgrade
    from housectl.commands.user import user

    cli.add_command(user)
    cli.add_command(house)
    cli.add_command(member)
    cli.add_command(upgrade)
