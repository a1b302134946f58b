"""BaseService: foundation for the CLI-facing services.

Every service receives a :class:`Container` at construction time.  The
container provides the configured gateways and the relations, commands
and mappers plugins registered on them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rommap.environment import Container


class BaseService:
    """Base for service-layer classes.

    Usage::

        class GatewayService(BaseService):
            def list_gateways(self) -> ServiceResult:
                for name, gateway in self._container.gateways.items():
                    ...
    """

    def __init__(self, container: Container) -> None:
        self._container = container
