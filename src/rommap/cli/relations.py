"""Command: list relations registered by plugins."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from rommap.cli._base import RomCommand

if TYPE_CHECKING:
    from rommap.cli._context import AppContext


@click.command(
    cls=RomCommand,
    examples="""\
  rommap relations
  rommap --json relations""",
)
@click.pass_obj
def relations(app: AppContext) -> None:
    """List registered relations with their commands, mappers and tuple counts."""
    from rommap.services.catalog import CatalogService

    app.emit(CatalogService(app.container).list_relations())
