"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``. Provides lazy Repository initialization, the acting
user, and centralized result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from housectl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from housectl.config.settings import HouseSettings
    from housectl.infrastructure.repository import Repository
    from housectl.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    Subcommands access it via ``@click.pass_obj``. The repository is lazily
    initialized on first use so ``--help`` and ``--version`` never
    trigger database access.
    """

    def __init__(self, settings: HouseSettings) -> None:
        self.settings = settings
        self._repo: Repository | None = None

        from housectl.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        if settings.verbose:
            from housectl.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def repo(self) -> Repository:
        """The repository instance (created lazily on first access)."""
        if self._repo is None:
            from housectl.infrastructure.repository import Repository

            self._repo = Repository(self.settings)
            self._repo.init_event_bus(sync=self.settings.sync)
        return self._repo

    def require_actor(self) -> int:
        """The acting user id from ``--as`` / ``HOUSECTL_ACTOR``."""
        if self.settings.actor is None:
            raise click.UsageError(
                "This command acts on behalf of a user; pass --as USER_ID "
                "or set HOUSECTL_ACTOR."
            )
        return self.settings.actor

    def close(self) -> None:
        """Flush pending notices and release the database."""
        if self._repo is not None:
            self._repo.close()
            self._repo = None

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
