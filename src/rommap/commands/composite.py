"""Composite: ``left >> right`` pipelines."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rommap.commands.pipeline import Composable

if TYPE_CHECKING:
    from rommap.mappers.registry import MapperRegistry


class Composite(Composable):
    """Feed the result of *left* into *right*.

    An empty response from *left* (``None`` or ``[]``) short-circuits and
    is returned as-is.  *right* may be another command or any callable.
    """

    def __init__(self, left: Composable, right: Any) -> None:
        self.left = left
        self.right = right

    @property
    def is_lazy(self) -> bool:  # type: ignore[override]
        return self.left.is_lazy

    @property
    def is_one(self) -> bool:
        right_one = getattr(self.right, "is_one", None)
        return bool(right_one) if right_one is not None else self.left.is_one

    @property
    def mapper_registry(self) -> MapperRegistry | None:
        return self.left.mapper_registry

    def call(self, *args: Any) -> Any:
        response = self.left.call(*args)
        if response is None or (isinstance(response, list) and not response):
            return response
        if isinstance(self.right, Composable):
            return self.right.call(response)
        return self.right(response)

    def __repr__(self) -> str:
        return f"<Composite {self.left!r} >> {self.right!r}>"
