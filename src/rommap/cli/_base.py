"""Click command class with an ``--examples`` flag."""

from __future__ import annotations

from typing import Any

import click


class RomCommand(click.Command):
    """Command that prints its *examples* on ``--examples`` and exits.

    ``--help`` stays short; the examples are only shown when asked for.
    """

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            self.params.append(
                click.Option(
                    ["--examples"],
                    is_flag=True,
                    expose_value=False,
                    is_eager=True,
                    callback=self._show_examples,
                    help="Show usage examples.",
                )
            )

    def _show_examples(self, ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if value:
            click.echo(f"Examples for '{ctx.command_path}':\n\n{self.examples}")
            ctx.exit(0)
