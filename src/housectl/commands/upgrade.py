"""Command: database schema migration."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from housectl.commands._base import HouseCommand

if TYPE_CHECKING:
    from housectl.commands._context import AppContext


@click.command(
    cls=HouseCommand,
    examples="""\
  housectl upgrade
  housectl upgrade --check
  housectl --json upgrade --check""",
)
@click.option(
    "--check", "check_only", is_flag=True, help="Show pending migrations without applying."
)
@click.pass_obj
def upgrade(app: AppContext, check_only: bool) -> None:
    """Run pending database migrations."""
    from housectl.services.upgrade import UpgradeService

    svc = UpgradeService(app.repo)
    app.emit(svc.check_pending() if check_only else svc.apply())
