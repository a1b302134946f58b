"""Loaded: the mapped result of a command or relation read."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Any, overload


class Loaded(Sequence[Any]):
    """An immutable sequence of mapped objects."""

    def __init__(self, objects: Sequence[Any]) -> None:
        self._objects = list(objects)

    @overload
    def __getitem__(self, index: int) -> Any: ...

    @overload
    def __getitem__(self, index: slice) -> list[Any]: ...

    def __getitem__(self, index: int | slice) -> Any:
        return self._objects[index]

    def __iter__(self) -> Iterator[Any]:
        return iter(self._objects)

    def __len__(self) -> int:
        return len(self._objects)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Loaded):
            return self._objects == other._objects
        if isinstance(other, list):
            return self._objects == other
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def first(self) -> Any:
        return self._objects[0] if self._objects else None

    def one(self) -> Any:
        """The only object; raises ValueError unless there is exactly one."""
        if len(self._objects) != 1:
            msg = f"Expected exactly one object, got {len(self._objects)}"
            raise ValueError(msg)
        return self._objects[0]

    def one_or_none(self) -> Any:
        if len(self._objects) > 1:
            msg = f"Expected at most one object, got {len(self._objects)}"
            raise ValueError(msg)
        return self.first()

    def to_list(self) -> list[Any]:
        return list(self._objects)

    def __repr__(self) -> str:
        return f"Loaded({self._objects!r})"
