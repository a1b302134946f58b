"""AppContext: shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Provides lazy container initialization and
centralized result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from rommap.errors import RomError
from rommap.output.formatters import format_result

if TYPE_CHECKING:
    from rommap.config.settings import RomSettings
    from rommap.environment import Container
    from rommap.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The container is built on first use so ``--help`` and ``--version``
    never connect to a gateway or load plugins.
    """

    def __init__(self, settings: RomSettings) -> None:
        self.settings = settings
        self._container: Container | None = None

        from rommap.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        if settings.verbose:
            from rommap.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def container(self) -> Container:
        """The finalized container (created lazily on first access)."""
        if self._container is None:
            from rommap.environment import Setup

            try:
                self._container = Setup.from_settings(self.settings).finalize()
            except RomError as exc:
                raise click.ClickException(str(exc)) from exc
        return self._container

    def close(self) -> None:
        if self._container is not None:
            self._container.disconnect()
            self._container = None

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
        * Failure: writes to stderr, exits with code 1.
        """
        output = format_result(
            result,
            json_output=self.settings.json_output,
            verbose=self.settings.verbose,
        )
        if result.ok:
            click.echo(output)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
