"""Mapper header nodes and compiled mapping plans.

A mapper header is a sequence of :func:`attribute`, :func:`embedded` and
:func:`combine` nodes.  Before use it is compiled into an
:class:`EntityPlan`: model names are turned into pydantic classes and
nested headers into nested plans.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, create_model

from rommap.errors import MapperMisconfiguredError

# ---------------------------------------------------------------------------
# Header nodes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Attribute:
    """Copy one tuple key into the output, optionally renamed and coerced."""

    name: str
    source: str | None = None
    coerce: Callable[[Any], Any] | None = None

    def key(self, prefix: str | None, separator: str) -> str:
        if self.source is not None:
            return self.source
        if prefix:
            return f"{prefix}{separator}{self.name}"
        return self.name


@dataclass(frozen=True)
class Embedded:
    """Map a nested mapping (or list of mappings) stored under one key."""

    name: str
    header: tuple[HeaderNode, ...] = ()
    model: Any = None
    many: bool = True
    source: str | None = None


@dataclass(frozen=True)
class Combine:
    """Attach child tuples from a command graph result.

    ``on`` maps parent keys to child keys; a child belongs to a parent
    when every pair matches.
    """

    name: str
    on: Mapping[str, str]
    header: tuple[HeaderNode, ...] = ()
    model: Any = None
    many: bool = True


HeaderNode = Attribute | Embedded | Combine


def attribute(
    name: str,
    *,
    from_: str | None = None,
    type: Callable[[Any], Any] | None = None,  # noqa: A002
) -> Attribute:
    """Header node copying *name* (read from *from_* if given), coerced by *type*."""
    return Attribute(name=name, source=from_, coerce=type)


def embedded(
    name: str,
    header: Sequence[HeaderNode] = (),
    *,
    model: Any = None,
    many: bool = True,
    from_: str | None = None,
) -> Embedded:
    return Embedded(name=name, header=tuple(header), model=model, many=many, source=from_)


def combine(
    name: str,
    *,
    on: Mapping[str, str],
    header: Sequence[HeaderNode] = (),
    model: Any = None,
    many: bool = True,
) -> Combine:
    if not on:
        msg = f"combine {name!r} needs at least one key pair in 'on'"
        raise MapperMisconfiguredError(msg)
    return Combine(name=name, on=dict(on), header=tuple(header), model=model, many=many)


# ---------------------------------------------------------------------------
# Compiled plans
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EntityPlan:
    """Compiled mapping for one level of the header tree."""

    model: Callable[..., Any] | None
    attributes: tuple[Attribute, ...]
    prefix: str | None = None
    separator: str = "_"
    reject_keys: bool = False
    embedded: tuple[tuple[Embedded, EntityPlan], ...] = ()
    combines: tuple[tuple[Combine, EntityPlan], ...] = ()
    consumed: frozenset[str] = field(default_factory=frozenset)


def compile_plan(
    header: Sequence[HeaderNode],
    *,
    model: Any = None,
    prefix: str | None = None,
    separator: str = "_",
    reject_keys: bool = False,
) -> EntityPlan:
    """Compile *header* into an :class:`EntityPlan`, building named models."""
    attributes: list[Attribute] = []
    embedded_plans: list[tuple[Embedded, EntityPlan]] = []
    combine_plans: list[tuple[Combine, EntityPlan]] = []

    for node in header:
        if isinstance(node, Attribute):
            attributes.append(node)
        elif isinstance(node, Embedded):
            sub = compile_plan(node.header, model=node.model, reject_keys=reject_keys)
            embedded_plans.append((node, sub))
        elif isinstance(node, Combine):
            sub = compile_plan(node.header, model=node.model, reject_keys=reject_keys)
            combine_plans.append((node, sub))
        else:
            msg = f"Unknown header node {node!r}"
            raise MapperMisconfiguredError(msg)

    names = [a.name for a in attributes]
    names += [e.name for e, _ in embedded_plans]
    names += [c.name for c, _ in combine_plans]
    if len(set(names)) != len(names):
        msg = f"Duplicate attribute names in mapper header: {names}"
        raise MapperMisconfiguredError(msg)

    consumed = {a.key(prefix, separator) for a in attributes}
    consumed |= {e.source or e.name for e, _ in embedded_plans}

    return EntityPlan(
        model=resolve_model(model, attributes, embedded_plans, combine_plans),
        attributes=tuple(attributes),
        prefix=prefix,
        separator=separator,
        reject_keys=reject_keys,
        embedded=tuple(embedded_plans),
        combines=tuple(combine_plans),
        consumed=frozenset(consumed),
    )


def resolve_model(
    model: Any,
    attributes: Sequence[Attribute],
    embedded_plans: Sequence[tuple[Embedded, EntityPlan]],
    combine_plans: Sequence[tuple[Combine, EntityPlan]],
) -> Callable[..., Any] | None:
    """Return *model* as a class, building a pydantic model for a string name."""
    if model is None or callable(model):
        return model
    if not isinstance(model, str) or not model.isidentifier():
        msg = f"model must be a class or an identifier, got {model!r}"
        raise MapperMisconfiguredError(msg)

    fields: dict[str, Any] = {a.name: (Any, None) for a in attributes}
    for node, _ in (*embedded_plans, *combine_plans):
        if node.many:
            fields[node.name] = (list[Any], Field(default_factory=list))
        else:
            fields[node.name] = (Any, None)
    built: type[BaseModel] = create_model(  # type: ignore[call-overload]
        model,
        __config__=ConfigDict(frozen=True, arbitrary_types_allowed=True),
        **fields,
    )
    return built
