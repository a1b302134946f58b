"""Command: run adapter conformance linters."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from rommap.cli._base import RomCommand

if TYPE_CHECKING:
    from rommap.cli._context import AppContext


@click.command(
    cls=RomCommand,
    examples="""\
  rommap lint
  rommap lint default
  rommap -v lint reports""",
)
@click.argument("name", required=False)
@click.pass_obj
def lint(app: AppContext, name: str | None) -> None:
    """Lint every configured gateway, or only gateway NAME."""
    from rommap.services.lint import LintService

    app.emit(LintService(app.container).lint(name))
