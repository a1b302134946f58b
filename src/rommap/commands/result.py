"""Success / Failure wrappers returned by :meth:`CommandRegistry.attempt`."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from rommap.errors import CommandError


@dataclass(frozen=True)
class Success:
    """A command call that completed."""

    value: Any

    ok = True
    error = None

    def unwrap(self) -> Any:
        return self.value


@dataclass(frozen=True)
class Failure:
    """A command call that raised a :class:`CommandError`."""

    error: CommandError

    ok = False
    value = None

    def unwrap(self) -> Any:
        raise self.error


Result = Success | Failure
