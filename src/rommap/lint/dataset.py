"""Lints for enumerable datasets."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from rommap.adapters.base import Dataset
from rommap.lint.linter import Linter


class EnumerableDatasetLinter(Linter):
    """Check that *dataset* enumerates exactly *data*."""

    def __init__(self, dataset: Dataset, data: Sequence[Mapping[str, Any]]) -> None:
        self.dataset = dataset
        self.data = [dict(t) for t in data]

    @property
    def subject(self) -> str:
        return type(self.dataset).__name__

    def lint_each(self) -> None:
        result = list(iter(self.dataset))
        if result != self.data:
            self.complain(f"iteration must yield {self.data!r}, got {result!r}")
        if not all(isinstance(t, Mapping) for t in result):
            self.complain("iteration must yield mappings")

    def lint_to_list(self) -> None:
        result = self.dataset.to_list()
        if result != self.data:
            self.complain(f"to_list() must return {self.data!r}, got {result!r}")

    def lint_count(self) -> None:
        if self.dataset.count() != len(self.data):
            self.complain(f"count() must return {len(self.data)}")
