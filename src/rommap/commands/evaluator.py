"""Input evaluators: pick a node's tuples out of the nested graph input.

Given the input::

    {"user": {"name": "Jane", "tasks": [{"title": "A", "tags": [...]}]}}

the evaluator for path ``("user", "tasks")`` returns the task tuples with
the ``tags`` key removed, because a child node consumes it.  Called with
an index, the evaluator for ``("user", "tasks", "tags")`` returns the
tags of task number *index*.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from functools import reduce
from operator import getitem
from typing import Any

from rommap.errors import CommandFailure


def is_sequence(value: Any) -> bool:
    """True for lists and tuples (not strings or mappings)."""
    return isinstance(value, (list, tuple))


def is_node_spec(value: Any) -> bool:
    """True for a single ``[key_spec, [command_name, ...]]`` pair."""
    return (
        is_sequence(value)
        and len(value) == 2
        and isinstance(value[0], (str, Mapping))
        and is_sequence(value[1])
    )


def node_key(spec: str | Mapping[str, str]) -> str:
    """The input key of a node spec (``"tasks"`` or the key of ``{"task": "tasks"}``)."""
    if isinstance(spec, Mapping):
        return next(iter(spec))
    return spec


def excluded_keys(nodes: Sequence[Any] | None) -> tuple[str, ...]:
    """Input keys consumed by child *nodes* (one spec pair or a list of them)."""
    if not nodes:
        return ()
    if is_node_spec(nodes):
        return (node_key(nodes[0]),)
    return tuple(node_key(node[0]) for node in nodes if is_node_spec(node))


@dataclass(frozen=True)
class InputEvaluator:
    """Resolve the tuples for one graph node from the full input."""

    tuple_path: tuple[str, ...]
    excluded: tuple[str, ...] = ()

    @classmethod
    def build(cls, tuple_path: Sequence[str], nodes: Sequence[Any] | None) -> InputEvaluator:
        return cls(tuple(tuple_path), excluded_keys(nodes))

    def __call__(self, input_: Any, index: int | None = None) -> Any:
        try:
            if index is None:
                value = reduce(getitem, self.tuple_path, input_)
            else:
                parents = reduce(getitem, self.tuple_path[:-1], input_)
                value = parents[index][self.tuple_path[-1]]
        except (KeyError, IndexError, TypeError) as exc:
            raise CommandFailure(self, exc) from exc

        if not self.excluded:
            return value
        if isinstance(value, Mapping):
            return self._exclude(value)
        return [self._exclude(item) for item in value]

    def _exclude(self, tuple_: Mapping[str, Any]) -> dict[str, Any]:
        return {k: v for k, v in tuple_.items() if k not in self.excluded}

    def __repr__(self) -> str:
        return f"InputEvaluator({'.'.join(self.tuple_path)})"
