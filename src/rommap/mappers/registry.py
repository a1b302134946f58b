"""Mapper registries keyed by relation name."""

from __future__ import annotations

from collections.abc import Iterator, Mapping

from rommap.errors import UnknownMapperError
from rommap.mappers.mapper import Mapper


class MapperRegistry(Mapping[str, Mapper]):
    """Mappers registered for one relation, reachable by item or attribute."""

    def __init__(self, relation_name: str, mappers: dict[str, Mapper] | None = None) -> None:
        self.relation_name = relation_name
        self._mappers: dict[str, Mapper] = dict(mappers or {})

    def __getitem__(self, name: str) -> Mapper:
        try:
            return self._mappers[name]
        except KeyError:
            msg = (
                f"Mapper {name!r} is not registered for relation {self.relation_name!r}; "
                f"known: {sorted(self._mappers)}"
            )
            raise UnknownMapperError(msg) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._mappers)

    def __len__(self) -> int:
        return len(self._mappers)

    def __getattr__(self, name: str) -> Mapper:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self[name]
        except UnknownMapperError as exc:
            raise AttributeError(str(exc)) from None

    def __repr__(self) -> str:
        return f"<MapperRegistry {self.relation_name!r} mappers={sorted(self._mappers)}>"


class MapperRegistries(Mapping[str, MapperRegistry]):
    """All mapper registries of a container.

    A relation without registered mappers gets an empty registry.
    """

    def __init__(self, registries: dict[str, MapperRegistry] | None = None) -> None:
        self._registries: dict[str, MapperRegistry] = dict(registries or {})

    def __getitem__(self, relation_name: str) -> MapperRegistry:
        registry = self._registries.get(relation_name)
        if registry is None:
            return MapperRegistry(relation_name)
        return registry

    def __iter__(self) -> Iterator[str]:
        return iter(self._registries)

    def __len__(self) -> int:
        return len(self._registries)
