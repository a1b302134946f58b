"""Pytest mixins running the linters as test methods.

Gateway authors get one ``test_<lint>`` method per lint::

    class TestMyGateway(GatewayLintTests):
        identifier = "mydb"
        gateway_cls = MyGateway
        uri = "mydb://localhost"

    class TestMyDataset(EnumerableDatasetLintTests):
        @pytest.fixture
        def lint_subject(self):
            data = [{"name": "Jane", "age": 24}, {"name": "Joe", "age": 25}]
            return MyDataset(data), data
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, ClassVar

from rommap.adapters.base import Gateway
from rommap.lint.dataset import EnumerableDatasetLinter
from rommap.lint.gateway import GatewayLinter
from rommap.lint.linter import Linter, LintFailure


def _run_lint(linter: Linter, name: str) -> None:
    try:
        linter.lint(name)
    except LintFailure as exc:
        raise AssertionError(str(exc)) from exc
    finally:
        linter.close()


class GatewayLintTests:
    """Mixin: set ``identifier``, ``gateway_cls`` and ``uri`` on the test class."""

    identifier: ClassVar[str]
    gateway_cls: ClassVar[type[Gateway]]
    uri: ClassVar[str]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        for name in GatewayLinter.lints():
            setattr(cls, f"test_{name}", _gateway_test(name))


def _gateway_test(name: str) -> Callable[..., None]:
    def test(self: GatewayLintTests) -> None:
        _run_lint(GatewayLinter(self.identifier, self.gateway_cls, self.uri), name)

    test.__name__ = f"test_{name}"
    return test


class EnumerableDatasetLintTests:
    """Mixin: provide a ``lint_subject`` fixture returning ``(dataset, data)``."""

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        for name in EnumerableDatasetLinter.lints():
            setattr(cls, f"test_{name}", _dataset_test(name))


def _dataset_test(name: str) -> Callable[..., None]:
    def test(self: EnumerableDatasetLintTests, lint_subject: tuple[Any, Any]) -> None:
        dataset, data = lint_subject
        _run_lint(EnumerableDatasetLinter(dataset, data), name)

    test.__name__ = f"test_{name}"
    return test
