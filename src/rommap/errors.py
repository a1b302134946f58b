"""Exception hierarchy for rommap.

Every error raised by the framework derives from :class:`RomError` so
callers can catch the whole family at one seam.  Command-layer errors
derive from :class:`CommandError`, which is what
:meth:`CommandRegistry.attempt` converts into a ``Failure``.
"""

from __future__ import annotations

from typing import Any


class RomError(Exception):
    """Base class for all rommap errors."""


class AdapterNotFoundError(RomError):
    """No gateway class is registered for a URI scheme."""


class UnknownGatewayError(RomError, KeyError):
    """A relation refers to a gateway name that was never set up."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class DatasetNotFoundError(RomError, KeyError):
    """A gateway has no dataset under the requested name."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class UnknownRelationError(RomError, KeyError):
    """A relation name is not registered in the container."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class UnknownCommandError(RomError, KeyError):
    """A command name is not registered for a relation."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class UnknownMapperError(RomError, KeyError):
    """A mapper name is not registered for a relation."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class MapperMisconfiguredError(RomError):
    """A mapper definition cannot be finalized."""


class InvalidOptionsError(RomError):
    """A command graph option structure is malformed."""


class CommandError(RomError):
    """Base class for errors raised while calling a command."""


class TupleCountMismatchError(CommandError):
    """A singular command produced more than one tuple."""


class ValidationError(CommandError):
    """Command input was rejected by the input processor or validator."""

    def __init__(self, message: str, *, errors: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class CommandFailure(CommandError):  # noqa: N818
    """Wraps an error raised while evaluating or executing a command."""

    def __init__(self, command: Any, original_error: BaseException) -> None:
        self.command = command
        self.original_error = original_error
        if isinstance(original_error, KeyError) and original_error.args:
            reason = f"missing key {original_error.args[0]!r} in input"
        else:
            reason = str(original_error)
        super().__init__(f"command {command!r} failed: {reason}")
