"""Pluggy hook specifications for rommap setup extensions.

Two setup-time hooks: plugins contribute gateway classes for new URI
schemes, and register relations, commands and mappers on a
:class:`rommap.environment.Setup` before it is finalized.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from rommap.adapters.base import Gateway
    from rommap.environment import Setup

hookspec = pluggy.HookspecMarker("rommap")
hookimpl = pluggy.HookimplMarker("rommap")


class RommapHookSpec:
    """Hook specifications for the rommap plugin system."""

    @hookspec
    def register_gateways(self) -> dict[str, type[Gateway]] | None:
        """Return URI scheme -> Gateway subclass mappings to extend the adapter registry."""

    @hookspec
    def configure_setup(self, setup: Setup) -> None:
        """Register relations, commands and mappers on *setup* before finalize."""
