"""In-memory gateway backed by lists of dicts.

Every dataset owns one shared list of tuples.  Views produced by
``restrict``/``where``/``project``/``order`` keep a reference to that list
plus a chain of predicates, so writes through a restricted view reach the
shared storage.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator, Mapping
from typing import Any, Self

from rommap.adapters.base import Dataset, Gateway, Predicate, Tuple

logger = logging.getLogger(__name__)


class MemoryDataset(Dataset):
    """A view over a shared list of tuples."""

    def __init__(
        self,
        data: list[Tuple] | None = None,
        *,
        header: tuple[str, ...] = (),
        predicates: tuple[Predicate, ...] = (),
        projection: tuple[str, ...] | None = None,
        ordering: tuple[str, ...] = (),
        lock: threading.RLock | None = None,
    ) -> None:
        self._data: list[Tuple] = data if data is not None else []
        self.header = header
        self._predicates = predicates
        self._projection = projection
        self._ordering = ordering
        self._lock = lock or threading.RLock()

    def _derive(self, **changes: Any) -> Self:
        params: dict[str, Any] = {
            "header": self.header,
            "predicates": self._predicates,
            "projection": self._projection,
            "ordering": self._ordering,
            "lock": self._lock,
        }
        params.update(changes)
        return type(self)(self._data, **params)

    def _matches(self, tuple_: Tuple) -> bool:
        return all(predicate(tuple_) for predicate in self._predicates)

    def _visible(self) -> list[Tuple]:
        with self._lock:
            rows = [t for t in self._data if self._matches(t)]
        if self._ordering:
            rows.sort(key=lambda t: tuple(_sort_key(t.get(n)) for n in self._ordering))
        return rows

    def __iter__(self) -> Iterator[Tuple]:
        for tuple_ in self._visible():
            if self._projection is None:
                yield dict(tuple_)
            else:
                yield {name: tuple_.get(name) for name in self._projection}

    def __len__(self) -> int:
        return len(self._visible())

    def count(self) -> int:
        return len(self)

    def restrict(self, criteria: Mapping[str, Any]) -> Self:
        expected = dict(criteria)

        def predicate(tuple_: Tuple) -> bool:
            return all(k in tuple_ and tuple_[k] == v for k, v in expected.items())

        return self._derive(predicates=(*self._predicates, predicate))

    def where(self, predicate: Predicate) -> Self:
        return self._derive(predicates=(*self._predicates, predicate))

    def project(self, *names: str) -> Self:
        return self._derive(projection=names)

    def order(self, *names: str) -> Self:
        return self._derive(ordering=names)

    def insert(self, tuple_: Mapping[str, Any]) -> Tuple:
        stored = dict(tuple_)
        with self._lock:
            self._data.append(stored)
        return dict(stored)

    def update(self, attributes: Mapping[str, Any]) -> list[Tuple]:
        changes = dict(attributes)
        with self._lock:
            targets = [t for t in self._data if self._matches(t)]
            for tuple_ in targets:
                tuple_.update(changes)
        return [dict(t) for t in targets]

    def delete(self) -> list[Tuple]:
        with self._lock:
            removed = [t for t in self._data if self._matches(t)]
            removed_ids = {id(t) for t in removed}
            self._data[:] = [t for t in self._data if id(t) not in removed_ids]
        return [dict(t) for t in removed]

    def __repr__(self) -> str:
        return f"<MemoryDataset header={list(self.header)} size={len(self)}>"


def _sort_key(value: Any) -> tuple[int, Any]:
    """Sort None last and keep mixed types from raising."""
    if value is None:
        return (2, "")
    if isinstance(value, (int, float)):
        return (0, value)
    return (1, str(value))


class MemoryGateway(Gateway):
    """Gateway keeping every dataset in process memory."""

    adapter = "memory"

    def __init__(self, uri: str = "memory://") -> None:
        self.uri = uri
        self._datasets: dict[str, MemoryDataset] = {}
        self._lock = threading.RLock()

    @classmethod
    def setup(cls, uri: str = "memory://", **options: Any) -> Self:
        return cls(uri)

    def dataset(self, name: str, *, header: tuple[str, ...] = ()) -> MemoryDataset:
        """Return dataset *name*, creating an empty one on first access."""
        with self._lock:
            existing = self._datasets.get(name)
            if existing is None:
                logger.debug("Creating memory dataset %s", name)
                existing = MemoryDataset(header=header)
                self._datasets[name] = existing
            elif header and not existing.header:
                existing.header = header
            return existing

    def define_dataset(self, name: str, attributes: tuple[str, ...] = ()) -> MemoryDataset:
        return self.dataset(name, header=attributes)

    def has_dataset(self, name: str) -> bool:
        return name in self._datasets

    def dataset_names(self) -> list[str]:
        return sorted(self._datasets)

    def disconnect(self) -> None:
        self._datasets.clear()
