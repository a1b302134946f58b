"""Mappers: declarative tuple-to-object transformations."""

from rommap.mappers.header import (
    Attribute,
    Combine,
    Embedded,
    EntityPlan,
    attribute,
    combine,
    compile_plan,
    embedded,
)
from rommap.mappers.loaded import Loaded
from rommap.mappers.mapper import Mapper
from rommap.mappers.registry import MapperRegistries, MapperRegistry

__all__ = [
    "Attribute",
    "Combine",
    "Embedded",
    "EntityPlan",
    "Loaded",
    "Mapper",
    "MapperRegistries",
    "MapperRegistry",
    "attribute",
    "combine",
    "compile_plan",
    "embedded",
]
