"""Root CLI group for rommap with global flags and command registration."""

from __future__ import annotations

import click

from rommap import __version__
from rommap.cli._context import AppContext
from rommap.config.settings import RomSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="rommap")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging and telemetry.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """rommap: relations, commands and mappers over pluggable gateways."""
    settings = RomSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        verbose=verbose,
        log_json=log_json,
    )
    app = AppContext(settings)
    ctx.obj = app
    ctx.call_on_close(app.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


def register_commands(group: click.Group) -> None:
    """Register the subcommands, imported on demand to keep ``--help`` fast."""
    from rommap.cli.gateways import gateways
    from rommap.cli.lint import lint
    from rommap.cli.relations import relations

    group.add_command(gateways)
    group.add_command(relations)
    group.add_command(lint)


register_commands(cli)
