"""Adapter conformance linters."""

from rommap.lint.dataset import EnumerableDatasetLinter
from rommap.lint.gateway import GatewayLinter
from rommap.lint.linter import Linter, LintFailure

__all__ = ["EnumerableDatasetLinter", "GatewayLinter", "LintFailure", "Linter"]
