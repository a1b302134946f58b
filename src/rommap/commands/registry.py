"""Command registries: per relation, and container wide."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from rommap.commands.result import Failure, Result, Success
from rommap.errors import CommandError, UnknownCommandError, UnknownRelationError

if TYPE_CHECKING:
    from rommap.commands.abstract import AbstractCommand
    from rommap.commands.graph import Graph
    from rommap.commands.lazy import Lazy


class CommandRegistry(Mapping[str, "AbstractCommand"]):
    """Commands registered for one relation.

    Commands are reachable by item or attribute access::

        registry["create"].call({"name": "Jane"})
        registry.create.call({"name": "Jane"})
    """

    def __init__(self, relation_name: str, commands: dict[str, AbstractCommand] | None = None):
        self.relation_name = relation_name
        self._commands: dict[str, AbstractCommand] = dict(commands or {})

    def __getitem__(self, name: str) -> AbstractCommand:
        try:
            return self._commands[name]
        except KeyError:
            msg = (
                f"Command {name!r} is not registered for relation {self.relation_name!r}; "
                f"known: {sorted(self._commands)}"
            )
            raise UnknownCommandError(msg) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._commands)

    def __len__(self) -> int:
        return len(self._commands)

    def __getattr__(self, name: str) -> AbstractCommand:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self[name]
        except UnknownCommandError as exc:
            raise AttributeError(str(exc)) from None

    def attempt(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Result:
        """Call ``fn(*args, **kwargs)``; command errors become a :class:`Failure`."""
        try:
            return Success(fn(*args, **kwargs))
        except CommandError as exc:
            return Failure(exc)

    def __repr__(self) -> str:
        return f"<CommandRegistry {self.relation_name!r} commands={sorted(self._commands)}>"


class CommandRegistries(Mapping[str, CommandRegistry]):
    """All command registries of a container, keyed by relation name."""

    def __init__(self, registries: dict[str, CommandRegistry] | None = None) -> None:
        self._registries: dict[str, CommandRegistry] = dict(registries or {})

    def __getitem__(self, relation_name: str) -> CommandRegistry:
        try:
            return self._registries[relation_name]
        except KeyError:
            msg = f"No commands registered for relation {relation_name!r}"
            raise UnknownRelationError(msg) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._registries)

    def __len__(self) -> int:
        return len(self._registries)

    def resolve(self, name_or_options: str | Sequence[Any]) -> CommandRegistry | Graph | Lazy:
        """A relation's registry for a name; a command graph for nested options."""
        if isinstance(name_or_options, str):
            return self[name_or_options]

        from rommap.commands.builder import build

        return build(self, name_or_options)
