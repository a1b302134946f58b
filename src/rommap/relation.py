"""Relations: named, composable views over adapter datasets.

A relation class names a dataset on a gateway.  View methods defined on
subclasses return new relations, so they chain::

    class Tasks(Relation):
        name = "tasks"

        def by_user(self, user):
            return self.restrict(user=user)

        def by_title(self, title):
            return self.restrict(title=title)

        def by_user_and_title(self, user, title):
            return self.by_user(user).by_title(title)

Commands bound to a relation can call these views too; see
:meth:`rommap.commands.abstract.AbstractCommand.__getattr__`.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar, Self

from rommap.errors import UnknownRelationError

if TYPE_CHECKING:
    from rommap.adapters.base import Dataset, Tuple


class Relation:
    """Base class for relations.

    Attributes:
        name: Dataset name on the gateway; also the registry key.
        gateway: Name of the gateway the dataset lives on.
        primary_key: Attributes identifying a tuple.  Lazy update and
            delete commands use them to restrict by each input tuple.
    """

    name: ClassVar[str] = ""
    gateway: ClassVar[str] = "default"
    primary_key: ClassVar[tuple[str, ...]] = ()

    def __init__(self, dataset: Dataset) -> None:
        self.dataset = dataset

    @classmethod
    def build(cls, name: str, **attrs: Any) -> type[Relation]:
        """Create an anonymous subclass for *name* (used by ``setup.relation("users")``)."""
        class_name = "".join(part.capitalize() for part in name.split("_")) or "Relation"
        return type(class_name, (cls,), {"name": name, **attrs})

    def with_dataset(self, dataset: Dataset) -> Self:
        return type(self)(dataset)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def restrict(self, criteria: Mapping[str, Any] | None = None, **kwargs: Any) -> Self:
        """Limit the relation to tuples whose attributes equal the given values."""
        merged = {**(criteria or {}), **kwargs}
        return self.with_dataset(self.dataset.restrict(merged))

    def where(self, *args: Any) -> Self:
        """Adapter-specific filtering (a predicate for memory, clauses for SQL)."""
        return self.with_dataset(self.dataset.where(*args))  # type: ignore[attr-defined]

    def project(self, *names: str) -> Self:
        return self.with_dataset(self.dataset.project(*names))

    def order(self, *names: str) -> Self:
        return self.with_dataset(self.dataset.order(*names))

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def __iter__(self) -> Iterator[Tuple]:
        return iter(self.dataset)

    def to_list(self) -> list[Tuple]:
        return list(self.dataset)

    def __len__(self) -> int:
        return self.dataset.count()

    def count(self) -> int:
        return self.dataset.count()

    def first(self) -> Tuple | None:
        for tuple_ in self.dataset:
            return tuple_
        return None

    def one(self) -> Tuple | None:
        """Return the only tuple (or None); more than one is an error."""
        tuples = self.to_list()
        if len(tuples) > 1:
            msg = f"{self.name} relation returned {len(tuples)} tuples, expected at most one"
            raise ValueError(msg)
        return tuples[0] if tuples else None

    @property
    def header(self) -> tuple[str, ...]:
        return tuple(getattr(self.dataset, "header", ()))

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def insert(self, tuple_: Mapping[str, Any]) -> Tuple:
        return self.dataset.insert(tuple_)

    def update(self, attributes: Mapping[str, Any]) -> list[Tuple]:
        return self.dataset.update(attributes)

    def delete(self) -> list[Tuple]:
        return self.dataset.delete()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r} gateway={self.gateway!r}>"


# ---------------------------------------------------------------------------
# Schema definitions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BaseRelation:
    """Schema entry describing a dataset before any relation class exists."""

    name: str
    gateway: str = "default"
    attributes: tuple[str, ...] = ()
    primary_key: tuple[str, ...] = ()


@dataclass
class Schema:
    """Collects :class:`BaseRelation` entries during setup."""

    base_relations: dict[str, BaseRelation] = field(default_factory=dict)

    def base_relation(
        self,
        name: str,
        *,
        gateway: str = "default",
        attributes: list[str] | tuple[str, ...] = (),
        primary_key: str | list[str] | tuple[str, ...] = (),
    ) -> BaseRelation:
        keys = (primary_key,) if isinstance(primary_key, str) else tuple(primary_key)
        entry = BaseRelation(
            name=name,
            gateway=gateway,
            attributes=tuple(attributes),
            primary_key=keys,
        )
        self.base_relations[name] = entry
        return entry

    def __contains__(self, name: object) -> bool:
        return name in self.base_relations


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class RelationRegistry(Mapping[str, Relation]):
    """Finalized relations keyed by name."""

    def __init__(self, relations: dict[str, Relation] | None = None) -> None:
        self._relations: dict[str, Relation] = dict(relations or {})

    def __getitem__(self, name: str) -> Relation:
        try:
            return self._relations[name]
        except KeyError:
            msg = f"Relation {name!r} is not registered; known: {sorted(self._relations)}"
            raise UnknownRelationError(msg) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._relations)

    def __len__(self) -> int:
        return len(self._relations)

    def __getattr__(self, name: str) -> Relation:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self[name]
        except UnknownRelationError as exc:
            raise AttributeError(str(exc)) from None
