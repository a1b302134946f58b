"""Setup and Container: the composition root of a rommap application.

:class:`Setup` collects gateways and the relation, command and mapper
classes.  :meth:`Setup.finalize` binds every class to its gateway
dataset and returns an immutable :class:`Container`::

    setup = rommap.setup("memory")
    setup.relation("users")
    setup.commands("users").define("create", result="one")

    rom = setup.finalize()
    rom.command("users").create.call({"name": "Jane"})
    rom.read("users").to_list()
"""

from __future__ import annotations

import logging
import types
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Self, TypeVar

from rommap.adapters import gateway_from_uri
from rommap.adapters.base import Gateway
from rommap.commands import COMMAND_TYPES, AbstractCommand
from rommap.commands.abstract import MANY, ONE
from rommap.commands.registry import CommandRegistries, CommandRegistry
from rommap.errors import (
    InvalidOptionsError,
    MapperMisconfiguredError,
    UnknownGatewayError,
    UnknownRelationError,
)
from rommap.mappers.loaded import Loaded
from rommap.mappers.mapper import Mapper
from rommap.mappers.registry import MapperRegistries, MapperRegistry
from rommap.relation import Relation, RelationRegistry, Schema

if TYPE_CHECKING:
    from rommap.commands.graph import Graph
    from rommap.commands.lazy import Lazy
    from rommap.config.settings import RomSettings
    from rommap.plugins.manager import PluginManager

logger = logging.getLogger(__name__)

DEFAULT_GATEWAY = "default"

_C = TypeVar("_C", bound=type)


class CommandDefinitions:
    """Define commands for one relation without writing classes.

    Returned by :meth:`Setup.commands`::

        setup.commands("users").define("create", result="one")
        setup.commands("users").define("rename", type="update")
    """

    def __init__(self, setup: Setup, relation_name: str) -> None:
        self._setup = setup
        self.relation_name = relation_name

    def define(
        self,
        name: str,
        *,
        type: str | None = None,  # noqa: A002
        result: str = "many",
        **attrs: Any,
    ) -> type[AbstractCommand]:
        """Build and register a command class called *name*.

        *type* selects the base (``create``, ``update`` or ``delete``) and
        defaults to *name*.  Extra keyword arguments become class
        attributes, e.g. ``input=UserInput`` or ``associates={...}``.
        """
        command_type = type or name
        base = COMMAND_TYPES.get(command_type)
        if base is None:
            msg = (
                f"Unknown command type {command_type!r} for {self.relation_name}.{name}; "
                f"expected one of {sorted(COMMAND_TYPES)}"
            )
            raise InvalidOptionsError(msg)

        namespace = {
            "relation": self.relation_name,
            "register_as": name,
            "result": result,
            **attrs,
        }
        class_name = "".join(part.capitalize() for part in (self.relation_name, name))
        command_cls = types.new_class(class_name, (base,), exec_body=lambda ns: ns.update(namespace))
        self._setup.register_command(command_cls)
        return command_cls


class Setup:
    """Collects gateways and definitions until :meth:`finalize`."""

    def __init__(self, gateways: Mapping[str, Gateway | str] | None = None) -> None:
        self.gateways: dict[str, Gateway] = {}
        for name, gateway in (gateways or {}).items():
            self.add_gateway(name, gateway)
        self.schema = Schema()
        self.plugin_manager: PluginManager | None = None
        self._relations: dict[str, type[Relation]] = {}
        self._commands: list[type[AbstractCommand]] = []
        self._mappers: list[type[Mapper]] = []

    @classmethod
    def from_settings(
        cls,
        settings: RomSettings,
        *,
        plugin_manager: PluginManager | None = None,
    ) -> Self:
        """Build a setup from configuration.

        Plugins are discovered first so gateway classes they contribute
        can serve the configured URIs; afterwards every plugin gets to
        register definitions on the new setup.
        """
        from rommap.plugins.manager import PluginManager

        if plugin_manager is None:
            plugin_manager = PluginManager()
        if settings.plugins.enabled and not plugin_manager.is_loaded:
            plugin_manager.discover_and_load(local_dir=settings.plugin_dir)
        plugin_manager.register_gateways()

        setup = cls()
        setup.plugin_manager = plugin_manager
        for name, gateway in settings.gateways.items():
            setup.add_gateway(name, gateway.uri, **gateway.options)
        plugin_manager.configure_setup(setup)
        return setup

    # ------------------------------------------------------------------
    # Gateways
    # ------------------------------------------------------------------

    def add_gateway(self, name: str, gateway: Gateway | str, **options: Any) -> Gateway:
        if not isinstance(gateway, Gateway):
            gateway = gateway_from_uri(gateway, **options)
        self.gateways[name] = gateway
        logger.debug("Gateway %s: %r", name, gateway)
        return gateway

    @property
    def default(self) -> Gateway:
        return self._gateway(DEFAULT_GATEWAY, owner="setup")

    def _gateway(self, name: str, *, owner: str) -> Gateway:
        try:
            return self.gateways[name]
        except KeyError:
            msg = f"{owner} uses gateway {name!r}, which is not set up; known: {sorted(self.gateways)}"
            raise UnknownGatewayError(msg) from None

    # ------------------------------------------------------------------
    # Definitions
    # ------------------------------------------------------------------

    def relation(self, name_or_class: str | type[Relation], **attrs: Any) -> type[Relation]:
        """Register a relation class, or build one for a dataset name."""
        if isinstance(name_or_class, str):
            relation_cls = Relation.build(name_or_class, **attrs)
        else:
            relation_cls = name_or_class
        return self.register_relation(relation_cls)

    def register_relation(self, relation_cls: _C) -> _C:
        if not relation_cls.name:
            msg = f"Relation class {relation_cls.__name__} has no name"
            raise InvalidOptionsError(msg)
        self._relations[relation_cls.name] = relation_cls
        return relation_cls

    def commands(self, relation_name: str) -> CommandDefinitions:
        return CommandDefinitions(self, relation_name)

    def register_command(self, command_cls: _C) -> _C:
        """Register a command class; usable as a class decorator."""
        if not command_cls.relation_name():
            msg = f"Command class {command_cls.__name__} has no relation"
            raise InvalidOptionsError(msg)
        if command_cls.result not in (ONE, MANY):
            msg = (
                f"Command class {command_cls.__name__} declares result={command_cls.result!r}; "
                f"expected {ONE!r} or {MANY!r}"
            )
            raise InvalidOptionsError(msg)
        self._commands.append(command_cls)
        return command_cls

    def register_mapper(self, mapper_cls: _C) -> _C:
        """Register a mapper class; usable as a class decorator."""
        self._mappers.append(mapper_cls)
        return mapper_cls

    # ------------------------------------------------------------------
    # Finalization
    # ------------------------------------------------------------------

    def finalize(self) -> Container:
        relations = self._finalize_relations()
        mappers = self._finalize_mappers(relations)
        commands = self._finalize_commands(relations, mappers)
        logger.debug(
            "Finalized %d relation(s), %d command(s), %d mapper(s)",
            len(relations),
            len(self._commands),
            len(self._mappers),
        )
        return Container(
            gateways=dict(self.gateways),
            relations=relations,
            commands=commands,
            mappers=mappers,
        )

    def _finalize_relations(self) -> RelationRegistry:
        classes = dict(self._relations)
        for name, base in self.schema.base_relations.items():
            if name not in classes:
                classes[name] = Relation.build(
                    name, gateway=base.gateway, primary_key=base.primary_key
                )

        relations: dict[str, Relation] = {}
        for name, relation_cls in classes.items():
            base = self.schema.base_relations.get(name)
            gateway_name = base.gateway if base is not None else relation_cls.gateway
            gateway = self._gateway(gateway_name, owner=f"Relation {name!r}")
            attributes = base.attributes if base is not None else ()
            if base is not None and base.primary_key and not relation_cls.primary_key:
                relation_cls = type(
                    relation_cls.__name__, (relation_cls,), {"primary_key": base.primary_key}
                )
            relations[name] = relation_cls(gateway.define_dataset(name, attributes))
        return RelationRegistry(relations)

    def _finalize_mappers(self, relations: RelationRegistry) -> MapperRegistries:
        grouped: dict[str, dict[str, Mapper]] = {}
        for mapper_cls in self._mappers:
            if mapper_cls.relation not in relations:
                msg = (
                    f"Mapper {mapper_cls.__name__} refers to unknown relation "
                    f"{mapper_cls.relation!r}"
                )
                raise MapperMisconfiguredError(msg)
            mapper_cls.plan()
            grouped.setdefault(mapper_cls.relation, {})[mapper_cls.registry_name()] = mapper_cls()
        return MapperRegistries(
            {name: MapperRegistry(name, mappers) for name, mappers in grouped.items()}
        )

    def _finalize_commands(
        self,
        relations: RelationRegistry,
        mappers: MapperRegistries,
    ) -> CommandRegistries:
        grouped: dict[str, dict[str, AbstractCommand]] = {name: {} for name in relations}
        for command_cls in self._commands:
            name = command_cls.relation_name()
            if name not in relations:
                msg = f"Command {command_cls.__name__} refers to unknown relation {name!r}"
                raise UnknownRelationError(msg)
            grouped[name][command_cls.registry_name()] = command_cls(
                relations[name], mappers=mappers[name]
            )
        return CommandRegistries(
            {name: CommandRegistry(name, commands) for name, commands in grouped.items()}
        )


class Container:
    """A finalized environment: relations, commands and mappers bound to gateways."""

    def __init__(
        self,
        *,
        gateways: dict[str, Gateway],
        relations: RelationRegistry,
        commands: CommandRegistries,
        mappers: MapperRegistries,
    ) -> None:
        self.gateways = gateways
        self.relations = relations
        self.commands = commands
        self.mappers = mappers

    def relation(self, name: str) -> Relation:
        return self.relations[name]

    def command(self, name_or_options: str | Sequence[Any]) -> CommandRegistry | Graph | Lazy:
        """A relation's command registry, or a command graph built from options."""
        return self.commands.resolve(name_or_options)

    def read(self, relation: str | Relation, mapper: str | None = None) -> Loaded:
        """Read a relation (or a view of one) through a mapper.

        Without *mapper*, the mapper registered under the relation's name
        is used when there is one; otherwise tuples come back unmapped.
        """
        if isinstance(relation, str):
            relation = self.relations[relation]
        registry = self.mappers[relation.name]
        tuples = relation.to_list()
        if mapper is not None:
            return Loaded(registry[mapper].call(tuples))
        if relation.name in registry:
            return Loaded(registry[relation.name].call(tuples))
        return Loaded(tuples)

    def disconnect(self) -> None:
        for name, gateway in self.gateways.items():
            logger.debug("Disconnecting gateway %s", name)
            gateway.disconnect()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.disconnect()

    def __repr__(self) -> str:
        return f"<Container gateways={sorted(self.gateways)} relations={sorted(self.relations)}>"


def setup(*identifiers: str | Gateway, **gateways: Gateway | str) -> Setup:
    """Create a :class:`Setup`.

    A positional identifier or URI becomes the ``default`` gateway::

        rommap.setup("memory")
        rommap.setup("sqlite:///app.db", reports="postgresql://localhost/reports")
    """
    if len(identifiers) > 1:
        msg = f"setup() takes at most one default gateway, got {len(identifiers)}"
        raise TypeError(msg)
    if identifiers:
        if DEFAULT_GATEWAY in gateways:
            msg = "setup() got a positional gateway and a 'default' keyword"
            raise TypeError(msg)
        gateways = {DEFAULT_GATEWAY: identifiers[0], **gateways}
    return Setup(gateways)

