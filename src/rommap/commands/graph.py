"""Graph: a root command with child command nodes.

The root runs first.  Each node then receives the original input and the
root's result (when the node is lazy or a nested graph) or just the
root's result (plain commands), so children can take attributes from
the tuples their parent just wrote.

The return value mirrors the tree::

    [left, [node_result, node_result, ...]]

``left`` is the root result, wrapped in a list when the root is
singular; a nested graph node contributes its own ``[left, right]``
pair.  Mappers with ``combine`` attributes consume exactly this shape.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from rommap.commands.pipeline import Composable
from rommap.telemetry import trace_span

if TYPE_CHECKING:
    from rommap.mappers.registry import MapperRegistry

logger = logging.getLogger(__name__)


class Graph(Composable):
    """Root command plus child nodes, executed root first."""

    is_graph = True

    def __init__(self, root: Composable, nodes: list[Composable]) -> None:
        self.root = root
        self.nodes = list(nodes)

    @property
    def is_lazy(self) -> bool:  # type: ignore[override]
        return self.root.is_lazy

    @property
    def is_one(self) -> bool:
        return self.root.is_one

    @property
    def mapper_registry(self) -> MapperRegistry | None:
        return self.root.mapper_registry

    def call(self, *args: Any) -> list[Any]:
        with trace_span(f"graph:{_label(self.root)}") as span:
            left = self.root.call(*args)
            input_ = args[0] if args else None

            right: list[Any] = []
            for node in self.nodes:
                with trace_span(f"node:{_label(node)}"):
                    response = node.call(input_, left) if node.is_lazy else node.call(left)
                if node.is_one and not node.is_graph:
                    response = [response]
                right.append(response)

            if span is not None:
                span.annotate("nodes", len(self.nodes))

        logger.debug("Graph %s executed with %d node(s)", _label(self.root), len(self.nodes))
        return [[left] if self.is_one else left, right]

    def __repr__(self) -> str:
        return f"<Graph root={self.root!r} nodes={len(self.nodes)}>"


def _label(node: Any) -> str:
    if isinstance(node, Graph):
        return _label(node.root)
    command = getattr(node, "command", node)
    relation = getattr(command, "relation", None)
    name = getattr(relation, "name", relation) or "?"
    return f"{name}.{getattr(command, 'command_type', type(command).__name__)}"
