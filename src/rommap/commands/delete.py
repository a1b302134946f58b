"""Delete command: removes every tuple of the relation."""

from __future__ import annotations

from typing import Any

from rommap.adapters.base import Tuple
from rommap.commands.abstract import AbstractCommand


class Delete(AbstractCommand):
    """Delete tuples visible through the bound relation.

    Takes no arguments on its own; inside a command graph it receives the
    evaluated input and the parent tuple, both of which are ignored.
    """

    command_type = "delete"

    def execute(self, *args: Any) -> list[Tuple]:
        return self.relation.delete()
