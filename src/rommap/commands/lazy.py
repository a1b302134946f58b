"""Lazy: a command whose input is evaluated from the full nested input.

``Lazy(command, evaluator)`` defers picking the command's tuples until
call time.  Inside a graph it receives ``(input, parent_result)``:

- one parent tuple: the command is called with ``(evaluated, parent)``;
- a list of parent tuples: the command is called once per parent with
  ``evaluator(input, index)`` and the results are concatenated.

Update and delete commands are also restricted at call time.  A
restriction is ``(view_name, ["dotted.path", ...])`` evaluated against
the input, or a callable ``(command, parent, tuple) -> command``.  With
no restriction, a relation's primary key restricts by each input tuple.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any, Union

from rommap.commands.abstract import AbstractCommand
from rommap.commands.pipeline import Composable
from rommap.errors import CommandFailure, InvalidOptionsError

if TYPE_CHECKING:
    from rommap.mappers.registry import MapperRegistry

logger = logging.getLogger(__name__)

Restriction = Union[
    tuple[str, Sequence[str]],
    list[Any],
    Callable[[AbstractCommand, Any, Any], AbstractCommand],
]

_RESTRICTED_TYPES = frozenset({"update", "delete"})


class Lazy(Composable):
    """Defer input evaluation (and restriction) of *command* until call time."""

    is_lazy = True

    def __init__(
        self,
        command: AbstractCommand,
        evaluator: Callable[..., Any],
        restriction: Restriction | None = None,
    ) -> None:
        self.command = command
        self.evaluator = evaluator
        self.restriction = restriction
        if restriction is not None and not callable(restriction):
            if not (len(restriction) == 2 and isinstance(restriction[0], str)):
                msg = f"restriction must be (view_name, [paths]) or a callable, got {restriction!r}"
                raise InvalidOptionsError(msg)

    @property
    def is_one(self) -> bool:
        return self.command.is_one

    @property
    def mapper_registry(self) -> MapperRegistry | None:
        return self.command.mapper_registry

    @property
    def _restricts(self) -> bool:
        return self.command.command_type in _RESTRICTED_TYPES

    # ------------------------------------------------------------------
    # Calling
    # ------------------------------------------------------------------

    def call(self, *args: Any) -> Any:
        input_ = args[0] if args else None
        rest = args[1:]

        if rest and isinstance(rest[-1], list):
            return self._call_per_parent(input_, rest[-1])

        value = self._evaluate(input_)
        if not self._restricts:
            return self.command.call(value, *rest)

        parent = rest[-1] if rest else None
        if isinstance(value, list):
            results: list[Any] = []
            for item in value:
                command = self._restricted(input_, parent, item)
                _concat(results, command.call(item, *rest))
            return results
        return self._restricted(input_, parent, value).call(value, *rest)

    def _call_per_parent(self, input_: Any, parents: list[Any]) -> list[Any]:
        results: list[Any] = []
        for index, parent in enumerate(parents):
            children = self._evaluate(input_, index)
            if not self._restricts:
                _concat(results, self.command.call(children, parent))
                continue
            items = children if isinstance(children, list) else [children]
            for item in items:
                command = self._restricted(input_, parent, item, index=index)
                _concat(results, command.call(item, parent))
        logger.debug(
            "Lazy %s ran for %d parent(s), %d result(s)",
            type(self.command).__name__,
            len(parents),
            len(results),
        )
        return results

    def _evaluate(self, input_: Any, index: int | None = None) -> Any:
        try:
            if index is None:
                return self.evaluator(input_)
            return self.evaluator(input_, index)
        except CommandFailure:
            raise
        except (KeyError, IndexError) as exc:
            raise CommandFailure(self.command, exc) from exc

    def _restricted(
        self,
        input_: Any,
        parent: Any,
        item: Any,
        *,
        index: int | None = None,
    ) -> AbstractCommand:
        """Return the command restricted for one input tuple."""
        if self.restriction is None:
            return self._restrict_by_primary_key(item)
        if callable(self.restriction):
            return self.restriction(self.command, parent, item)

        view_name, paths = self.restriction
        values = [resolve_path(input_, path, item=item, index=index) for path in paths]
        response = getattr(self.command, view_name)(*values)
        if not isinstance(response, AbstractCommand):
            msg = f"view {view_name!r} on {self.command.relation.name!r} did not return a relation"
            raise InvalidOptionsError(msg)
        return response

    def _restrict_by_primary_key(self, item: Any) -> AbstractCommand:
        primary_key = self.command.relation.primary_key
        if not primary_key or not isinstance(item, Mapping):
            return self.command
        if not all(key in item for key in primary_key):
            return self.command
        return self.command.with_relation(
            self.command.relation.restrict({key: item[key] for key in primary_key})
        )

    # ------------------------------------------------------------------
    # Forwarding
    # ------------------------------------------------------------------

    def with_command(self, command: AbstractCommand) -> Lazy:
        return type(self)(command, self.evaluator, self.restriction)

    def __getattr__(self, name: str) -> Any:
        """Forward to the wrapped command, re-wrapping command responses."""
        if name.startswith("_"):
            raise AttributeError(name)
        attr = getattr(self.__dict__["command"], name)
        if not callable(attr):
            return attr

        @functools.wraps(attr)
        def forward(*args: Any, **kwargs: Any) -> Any:
            response = attr(*args, **kwargs)
            if isinstance(response, AbstractCommand):
                return self.with_command(response)
            return response

        return forward

    def __repr__(self) -> str:
        return f"<Lazy {self.command!r}>"


def _concat(results: list[Any], response: Any) -> None:
    if isinstance(response, list):
        results.extend(response)
    elif response is not None:
        results.append(response)


def resolve_path(
    input_: Any,
    path: str,
    *,
    item: Any = None,
    index: int | None = None,
) -> Any:
    """Resolve a dotted *path* against the nested input.

    Lists met along the way stand for collections being iterated: the
    first one resolves to element *index* when an index is given, the
    next one to *item*, the tuple currently being written.
    """
    substitutes: list[Any] = []
    if index is not None:
        substitutes.append(("index", index))
    substitutes.append(("item", item))

    value = input_
    for segment in path.split("."):
        try:
            value = value[segment]
        except (KeyError, TypeError) as exc:
            raise CommandFailure(path, exc) from exc
        if isinstance(value, list):
            if not substitutes:
                msg = f"path {path!r} crosses more collections than are being iterated"
                raise InvalidOptionsError(msg)
            kind, substitute = substitutes.pop(0)
            if kind == "item":
                value = substitute
                continue
            try:
                value = value[substitute]
            except IndexError as exc:
                raise CommandFailure(path, exc) from exc
    return value
