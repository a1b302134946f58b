"""AbstractCommand: the base of create, update and delete commands.

A command is bound to one relation.  ``call(*args)`` runs the input
processor and validator over the first argument, hands every argument to
:meth:`execute`, then shapes the tuples that come back according to the
declared ``result`` cardinality.

Command classes are declared by subclassing a concrete command type::

    class CreateTasks(Create):
        relation = "tasks"
        register_as = "create_many"

        def execute(self, tuples, user):
            return super().execute([{**t, "user": user["name"]} for t in tuples])
"""

from __future__ import annotations

import copy
import functools
import logging
from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any, ClassVar, Literal, Self

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from rommap.commands.pipeline import Composable
from rommap.errors import CommandError, TupleCountMismatchError, ValidationError
from rommap.relation import Relation

if TYPE_CHECKING:
    from rommap.adapters.base import Tuple
    from rommap.commands.lazy import Lazy, Restriction
    from rommap.mappers.registry import MapperRegistry

logger = logging.getLogger(__name__)

ONE = "one"
MANY = "many"

ResultKind = Literal["one", "many"]


class AbstractCommand(Composable):
    """Base class for commands.

    Class attributes:
        relation: Name of the relation the command writes to.  On an
            instance this is replaced by the bound :class:`Relation`.
        register_as: Registry name; defaults to ``command_type``.
        result: ``"one"`` returns a single tuple (or None); ``"many"``
            returns a list.
        input: Pydantic model or callable applied to every input tuple.
        validator: Callable receiving the processed input; raises to reject.
        associates: Child attribute -> parent attribute, merged into every
            tuple from the parent passed as the last call argument.
    """

    command_type: ClassVar[str] = ""
    relation: Any = ""
    register_as: ClassVar[str | None] = None
    result: ResultKind = MANY
    input: ClassVar[Any] = None
    validator: ClassVar[Callable[[Any], Any] | None] = None
    associates: ClassVar[Mapping[str, str]] = {}

    def __init__(
        self,
        relation: Relation,
        *,
        mappers: MapperRegistry | None = None,
        curry_args: Iterable[Any] = (),
        result: ResultKind | None = None,
    ) -> None:
        if result is not None and result not in (ONE, MANY):
            msg = f"result must be {ONE!r} or {MANY!r}, got {result!r}"
            raise ValueError(msg)
        self.relation = relation
        self._mappers = mappers
        self.curry_args = tuple(curry_args)
        if result is not None:
            self.result = result

    @classmethod
    def registry_name(cls) -> str:
        return cls.register_as or cls.command_type

    @classmethod
    def relation_name(cls) -> str:
        return cls.relation if isinstance(cls.relation, str) else cls.relation.name

    # ------------------------------------------------------------------
    # Cardinality
    # ------------------------------------------------------------------

    @property
    def is_one(self) -> bool:
        return self.result == ONE

    @property
    def mapper_registry(self) -> MapperRegistry | None:
        return self._mappers

    # ------------------------------------------------------------------
    # Calling
    # ------------------------------------------------------------------

    def call(self, *args: Any) -> Any:
        """Process input, execute and shape the result."""
        args = (*self.curry_args, *args)
        if args and (type(self).input is not None or type(self).validator is not None):
            args = (self._process_input(args[0]), *args[1:])
        logger.debug(
            "Executing %s on %s (%d args)",
            type(self).__name__,
            self.relation.name,
            len(args),
        )
        tuples = self.execute(*args)
        return self._shape(tuples)

    def execute(self, *args: Any) -> Any:
        raise NotImplementedError

    def _process_input(self, value: Any) -> Any:
        processor = type(self).input
        if processor is not None:
            if isinstance(value, Mapping):
                value = self._coerce(processor, value)
            else:
                value = [self._coerce(processor, t) for t in value]
        validator = type(self).validator
        if validator is not None:
            try:
                validator(value)
            except CommandError:
                raise
            except (ValueError, TypeError) as exc:
                raise ValidationError(str(exc)) from exc
        return value

    @staticmethod
    def _coerce(processor: Any, tuple_: Mapping[str, Any]) -> Tuple:
        if isinstance(processor, type) and issubclass(processor, BaseModel):
            try:
                return processor.model_validate(dict(tuple_)).model_dump()
            except PydanticValidationError as exc:
                msg = f"Invalid input for {processor.__name__}: {exc.error_count()} error(s)"
                raise ValidationError(msg, errors=exc.errors()) from exc
        return dict(processor(tuple_))

    def _associate(self, tuples: list[Tuple], parents: tuple[Any, ...]) -> list[Tuple]:
        """Merge parent attributes into child tuples per ``associates``."""
        if not self.associates or not parents:
            return tuples
        parent = parents[-1]
        if not isinstance(parent, Mapping):
            msg = f"{type(self).__name__} associates with a parent tuple, got {type(parent).__name__}"
            raise CommandError(msg)
        values = {child: parent[key] for child, key in self.associates.items()}
        return [{**t, **values} for t in tuples]

    def _shape(self, tuples: Any) -> Any:
        if tuples is None:
            rows: list[Tuple] = []
        elif isinstance(tuples, Mapping):
            rows = [dict(tuples)]
        else:
            rows = list(tuples)

        if not self.is_one:
            return rows
        if len(rows) > 1:
            msg = (
                f"{type(self).__name__} on {self.relation.name!r} returned "
                f"{len(rows)} tuples, expected one"
            )
            raise TupleCountMismatchError(msg)
        return rows[0] if rows else None

    # ------------------------------------------------------------------
    # Derived commands
    # ------------------------------------------------------------------

    def _copy(self, **changes: Any) -> Self:
        clone = copy.copy(self)
        for key, value in changes.items():
            setattr(clone, key, value)
        return clone

    def with_relation(self, relation: Relation) -> Self:
        """Return the same command bound to *relation* (typically a restricted view)."""
        return self._copy(relation=relation)

    def curry(self, *args: Any) -> Self:
        """Return a command that prepends *args* on every call."""
        return self._copy(curry_args=(*self.curry_args, *args))

    def with_input(
        self,
        evaluator: Callable[..., Any],
        restriction: Restriction | None = None,
    ) -> Lazy:
        """Wrap the command so its input is evaluated from a nested structure."""
        from rommap.commands.lazy import Lazy

        return Lazy(self, evaluator, restriction)

    def __getattr__(self, name: str) -> Any:
        """Forward relation views, rebinding the command to the view's result."""
        if name.startswith("_"):
            raise AttributeError(name)
        relation = self.__dict__.get("relation")
        view = getattr(relation, name, None) if isinstance(relation, Relation) else None
        if view is None or not callable(view):
            msg = f"{type(self).__name__!r} object has no attribute {name!r}"
            raise AttributeError(msg)

        @functools.wraps(view)
        def forward(*args: Any, **kwargs: Any) -> Any:
            response = view(*args, **kwargs)
            if isinstance(response, Relation):
                return self.with_relation(response)
            return response

        return forward

    def __repr__(self) -> str:
        relation = self.relation.name if isinstance(self.relation, Relation) else self.relation
        return f"<{type(self).__name__} relation={relation!r} result={self.result!r}>"
