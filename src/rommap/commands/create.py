"""Create command: inserts one tuple or many."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from rommap.adapters.base import Tuple
from rommap.commands.abstract import AbstractCommand


class Create(AbstractCommand):
    """Insert tuples into the relation.

    ``execute`` accepts a single mapping or an iterable of mappings.  Any
    further positional arguments are parent tuples supplied by a command
    graph; they are only used through ``associates``.
    """

    command_type = "create"

    def execute(
        self,
        tuples: Mapping[str, Any] | Iterable[Mapping[str, Any]],
        *parents: Any,
    ) -> list[Tuple]:
        items = [dict(tuples)] if isinstance(tuples, Mapping) else [dict(t) for t in tuples]
        items = self._associate(items, parents)
        return [self.relation.insert(t) for t in items]
