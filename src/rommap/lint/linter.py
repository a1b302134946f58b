"""Linter base class.

A linter is a set of ``lint_*`` methods checking that an adapter object
honours the interface rommap relies on.  Each lint either returns
normally or calls :meth:`Linter.complain`.
"""

from __future__ import annotations

import inspect
from typing import NoReturn

from rommap.errors import RomError

LINT_PREFIX = "lint_"


class LintFailure(RomError):  # noqa: N818
    """A lint found a conformance problem."""


class Linter:
    """Base class for conformance linters."""

    @classmethod
    def lints(cls) -> list[str]:
        """Names of the lints this linter runs, without the ``lint_`` prefix."""
        return sorted(
            name.removeprefix(LINT_PREFIX)
            for name, member in inspect.getmembers(cls, inspect.isfunction)
            if name.startswith(LINT_PREFIX)
        )

    def lint(self, name: str) -> bool:
        """Run lint *name*; returns True or raises :class:`LintFailure`."""
        if name not in self.lints():
            msg = f"{type(self).__name__} has no lint {name!r}; known: {self.lints()}"
            raise ValueError(msg)
        getattr(self, f"{LINT_PREFIX}{name}")()
        return True

    def close(self) -> None:
        """Release whatever the lints set up."""

    def complain(self, message: str) -> NoReturn:
        raise LintFailure(f"{self.subject} {message}")

    @property
    def subject(self) -> str:
        """What the failure messages are about."""
        return type(self).__name__
