"""Update command: applies attributes to every tuple of the relation.

Restrict the relation first (``command.by_name("Jane")``) to update a
subset; an unrestricted update touches every tuple.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from rommap.adapters.base import Tuple
from rommap.commands.abstract import AbstractCommand
from rommap.errors import CommandError


class Update(AbstractCommand):
    """Update tuples visible through the bound relation."""

    command_type = "update"

    def execute(self, attributes: Mapping[str, Any], *parents: Any) -> list[Tuple]:
        if not isinstance(attributes, Mapping):
            msg = (
                f"{type(self).__name__} expects one mapping of attributes, "
                f"got {type(attributes).__name__}"
            )
            raise CommandError(msg)
        [changes] = self._associate([dict(attributes)], parents)
        return self.relation.update(changes)
