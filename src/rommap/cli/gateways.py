"""Command: list configured gateways and their datasets."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from rommap.cli._base import RomCommand

if TYPE_CHECKING:
    from rommap.cli._context import AppContext


@click.command(
    cls=RomCommand,
    examples="""\
  rommap gateways
  rommap --json gateways
  rommap -c ./rommap.toml gateways""",
)
@click.pass_obj
def gateways(app: AppContext) -> None:
    """List configured gateways and the datasets they hold."""
    from rommap.services.catalog import CatalogService

    app.emit(CatalogService(app.container).list_gateways())
