"""Build command graphs from nested option structures.

Options pair a node spec with a command spec::

    [{"user": "users"}, ["create", [
        [{"task": "tasks"}, ["create", ["tags", ["create"]]]],
        ["books", ["create"]],
    ]]]

A node spec is a relation name (which is also the input key) or a
one-item mapping ``{input_key: relation_name}``.  A command spec is
``[command_name]`` or ``[command_name, nodes]`` where *nodes* is one
node/command pair or a list of them.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from rommap.commands.evaluator import InputEvaluator, is_node_spec, is_sequence
from rommap.errors import InvalidOptionsError

if TYPE_CHECKING:
    from rommap.commands.graph import Graph
    from rommap.commands.lazy import Lazy
    from rommap.commands.registry import CommandRegistry


def build(
    registry: Mapping[str, CommandRegistry],
    options: Sequence[Any],
    path: Sequence[str] = (),
) -> Graph | Lazy:
    """Turn *options* into a :class:`Graph` (or a lone :class:`Lazy` without nodes)."""
    if not is_node_spec(options):
        msg = f"Expected [node_spec, [command_name, nodes]], got {options!r}"
        raise InvalidOptionsError(msg)
    spec, command_spec = options
    return _build_command(registry, spec, command_spec, tuple(path))


def _build_command(
    registry: Mapping[str, CommandRegistry],
    spec: str | Mapping[str, str],
    command_spec: Sequence[Any],
    path: tuple[str, ...],
) -> Graph | Lazy:
    if not command_spec or not isinstance(command_spec[0], str) or len(command_spec) > 2:
        msg = f"Expected [command_name] or [command_name, nodes], got {command_spec!r}"
        raise InvalidOptionsError(msg)
    name = command_spec[0]
    nodes = command_spec[1] if len(command_spec) == 2 else None

    key, relation = _split_spec(spec)
    command = registry[relation][name]

    tuple_path = (*path, key)
    lazy = command.with_input(InputEvaluator.build(tuple_path, nodes))

    if not nodes:
        return lazy
    if is_node_spec(nodes):
        return lazy.combine(build(registry, nodes, tuple_path))
    if all(is_sequence(node) for node in nodes):
        return lazy.combine(*(build(registry, node, tuple_path) for node in nodes))
    msg = f"Malformed nodes for {relation}.{name}: {nodes!r}"
    raise InvalidOptionsError(msg)


def _split_spec(spec: str | Mapping[str, str]) -> tuple[str, str]:
    if isinstance(spec, Mapping):
        if len(spec) != 1:
            msg = f"Node spec mapping must have exactly one entry, got {dict(spec)!r}"
            raise InvalidOptionsError(msg)
        [(key, relation)] = spec.items()
        return key, relation
    return spec, spec
