"""Composition operators shared by commands, lazy commands and graphs.

``>>`` pipes one command's result into the next, ``combine`` builds a
graph and ``map_with`` sends results through registered mappers.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from rommap.errors import UnknownMapperError

if TYPE_CHECKING:
    from rommap.commands.composite import Composite
    from rommap.commands.graph import Graph
    from rommap.mappers.loaded import Loaded
    from rommap.mappers.mapper import Mapper
    from rommap.mappers.registry import MapperRegistry


class Composable:
    """Mixin for anything with a ``call(*args)`` that can take part in a pipeline."""

    is_lazy: bool = False
    is_graph: bool = False

    def call(self, *args: Any) -> Any:
        raise NotImplementedError

    def __call__(self, *args: Any) -> Any:
        return self.call(*args)

    @property
    def is_one(self) -> bool:
        return False

    @property
    def is_many(self) -> bool:
        return not self.is_one

    @property
    def mapper_registry(self) -> MapperRegistry | None:
        return None

    def __rshift__(self, other: Any) -> Composite:
        from rommap.commands.composite import Composite

        return Composite(self, other)

    def combine(self, *nodes: Composable) -> Graph:
        from rommap.commands.graph import Graph

        return Graph(self, list(nodes))

    def map_with(self, *names: str) -> MappedCommand:
        """Pipe results through the mappers registered under *names*, in order."""
        registry = self.mapper_registry
        if registry is None:
            msg = f"{self!r} has no mappers registered; cannot map with {list(names)}"
            raise UnknownMapperError(msg)
        return MappedCommand(self, [registry[name] for name in names])


class MappedCommand(Composable):
    """A command whose results are mapped into domain objects."""

    def __init__(self, command: Composable, mappers: list[Mapper]) -> None:
        self.command = command
        self.mappers = mappers

    @property
    def is_lazy(self) -> bool:  # type: ignore[override]
        return self.command.is_lazy

    @property
    def is_one(self) -> bool:
        return self.command.is_one

    @property
    def mapper_registry(self) -> MapperRegistry | None:
        return self.command.mapper_registry

    def call(self, *args: Any) -> Loaded:
        from rommap.mappers.loaded import Loaded

        response = self.command.call(*args)
        if response is None:
            data: Any = []
        elif isinstance(response, Mapping):
            data = [response]
        else:
            data = response
        for mapper in self.mappers:
            data = mapper.call(data)
        return Loaded(data)

    def __repr__(self) -> str:
        names = [type(m).__name__ for m in self.mappers]
        return f"<MappedCommand {self.command!r} mappers={names}>"
