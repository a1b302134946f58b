"""Gateway and dataset contracts.

A gateway owns a connection to one storage backend and hands out
datasets by name.  Datasets expose the primitive CRUD the command layer
composes; rommap never goes below this seam.

INVARIANT: a restricted dataset is a view over the same storage.  Writes
through it only touch the tuples that match its restriction.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator, Mapping
from typing import Any, ClassVar, Self

Tuple = dict[str, Any]
Predicate = Callable[[Tuple], bool]


class Dataset(ABC):
    """Abstract base class for adapter datasets."""

    @abstractmethod
    def __iter__(self) -> Iterator[Tuple]:
        """Yield every tuple visible through this dataset as a plain dict."""
        ...

    def to_list(self) -> list[Tuple]:
        """Materialize the dataset."""
        return list(self)

    def count(self) -> int:
        return len(self.to_list())

    @abstractmethod
    def restrict(self, criteria: Mapping[str, Any]) -> Self:
        """Return a view limited to tuples whose values equal *criteria*."""
        ...

    @abstractmethod
    def project(self, *names: str) -> Self:
        """Return a view that only yields the given attributes."""
        ...

    @abstractmethod
    def order(self, *names: str) -> Self:
        """Return a view sorted by the given attributes."""
        ...

    @abstractmethod
    def insert(self, tuple_: Mapping[str, Any]) -> Tuple:
        """Store one tuple and return it as stored."""
        ...

    @abstractmethod
    def update(self, attributes: Mapping[str, Any]) -> list[Tuple]:
        """Apply *attributes* to every visible tuple and return the results."""
        ...

    @abstractmethod
    def delete(self) -> list[Tuple]:
        """Remove every visible tuple and return what was removed."""
        ...


class Gateway(ABC):
    """Abstract base class for storage gateways.

    Subclasses set ``adapter`` to the URI scheme they serve and implement
    :meth:`setup` to build an instance from a URI.  ``uri`` holds the URI the
    gateway was set up from.
    """

    adapter: ClassVar[str] = ""
    uri: str = ""

    @classmethod
    @abstractmethod
    def setup(cls, uri: str, **options: Any) -> Self:
        """Build a gateway connected to *uri*."""
        ...

    @abstractmethod
    def dataset(self, name: str) -> Dataset:
        """Return the dataset called *name*, creating it if the backend allows."""
        ...

    @abstractmethod
    def has_dataset(self, name: str) -> bool:
        """Whether a dataset called *name* already exists."""
        ...

    @abstractmethod
    def dataset_names(self) -> list[str]:
        """Names of the datasets currently known to the gateway."""
        ...

    def define_dataset(self, name: str, attributes: tuple[str, ...] = ()) -> Dataset:
        """Dataset for a schema entry; backends with a fixed schema ignore *attributes*."""
        return self.dataset(name)

    def __getitem__(self, name: str) -> Dataset:
        return self.dataset(name)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has_dataset(name)

    def disconnect(self) -> None:
        """Release backend resources.  Safe to call more than once."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} adapter={self.adapter!r}>"

