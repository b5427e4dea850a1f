"""Root CLI group for housectl with global flags and command registration."""

from __future__ import annotations

import click

from housectl import __version__
from housectl.commands import register_commands
from housectl.commands._context import AppContext
from housectl.config.settings import HouseSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="housectl")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with timings.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option("--sync", is_flag=True, help="Force synchronous notice dispatch.")
@click.option(
    "--as",
    "actor",
    type=int,
    default=None,
    metavar="USER_ID",
    help="Act on behalf of this user (or set HOUSECTL_ACTOR).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    sync: bool,
    actor: int | None,
) -> None:
    """housectl — shared-living houses, members, and their ledgers."""
    settings = HouseSettings.from_cli(
        config_path=config_path,
        json_output=json_output or None,
        quiet=quiet or None,
        verbose=verbose or None,
        log_json=log_json or None,
        sync=sync or None,
        actor=actor,
    )
    app = AppContext(settings)
    ctx.obj = app
    ctx.call_on_close(app.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
