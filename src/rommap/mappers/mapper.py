"""Mapper: turn relation tuples into domain objects.

Mappers are declared by subclassing::

    class TaskMapper(Mapper):
        relation = "users"
        register_as = "entity"
        model = "User"
        header = [
            attribute("name"),
            combine("tasks", on={"name": "user"}, model="Task",
                    header=[attribute("title")]),
        ]

``model`` is a class (pydantic model, dataclass, any callable taking
keyword arguments) or a name, in which case a frozen pydantic model with
the header's attributes is built.  Without a model, tuples are mapped to
plain dicts.

A mapper with ``combine`` nodes reads command graph results shaped as
``[parents, [children_of_node_1, children_of_node_2, ...]]``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any, ClassVar

from rommap.errors import MapperMisconfiguredError
from rommap.mappers.header import EntityPlan, HeaderNode, compile_plan

logger = logging.getLogger(__name__)


class Mapper:
    """Base class for declarative mappers."""

    relation: ClassVar[str] = ""
    register_as: ClassVar[str | None] = None
    model: ClassVar[Any] = None
    prefix: ClassVar[str | None] = None
    prefix_separator: ClassVar[str] = "_"
    reject_keys: ClassVar[bool] = False
    header: ClassVar[Sequence[HeaderNode]] = ()

    _plan: ClassVar[EntityPlan | None] = None

    @classmethod
    def registry_name(cls) -> str:
        if cls.register_as:
            return cls.register_as
        if cls.relation:
            return cls.relation
        msg = f"Mapper {cls.__name__} needs register_as or relation"
        raise MapperMisconfiguredError(msg)

    @classmethod
    def plan(cls) -> EntityPlan:
        """The compiled plan, built once per mapper class."""
        if cls.__dict__.get("_plan") is None:
            cls._plan = compile_plan(
                cls.header,
                model=cls.model,
                prefix=cls.prefix,
                separator=cls.prefix_separator,
                reject_keys=cls.reject_keys,
            )
        plan = cls.__dict__["_plan"]
        assert plan is not None
        return plan

    @classmethod
    def model_class(cls) -> Any:
        """The model objects are built with (None for dict output)."""
        return cls.plan().model

    # ------------------------------------------------------------------
    # Mapping
    # ------------------------------------------------------------------

    def call(self, data: Any) -> list[Any]:
        plan = self.plan()
        if _is_graph_result(data):
            parents, nodes = data
        else:
            parents, nodes = data, []
        return [obj for _, obj in _map_level(plan, _as_list(parents), nodes)]

    def __call__(self, data: Any) -> list[Any]:
        return self.call(data)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} relation={self.relation!r} as={self.registry_name()!r}>"


def _is_graph_result(data: Any) -> bool:
    return (
        isinstance(data, (list, tuple))
        and len(data) == 2
        and isinstance(data[0], (list, tuple))
        and isinstance(data[1], (list, tuple))
    )


def _as_list(data: Any) -> list[Any]:
    if data is None:
        return []
    if isinstance(data, Mapping):
        return [data]
    return list(data)


def _map_level(
    plan: EntityPlan,
    parents: list[Mapping[str, Any]],
    nodes: Sequence[Any],
) -> list[tuple[Mapping[str, Any], Any]]:
    """Map one level, returning ``(raw_tuple, object)`` pairs."""
    children: list[list[tuple[Mapping[str, Any], Any]]] = []
    for position, (_, child_plan) in enumerate(plan.combines):
        child_data = nodes[position] if position < len(nodes) else []
        if _is_graph_result(child_data):
            child_parents, child_nodes = child_data
        else:
            child_parents, child_nodes = child_data, []
        children.append(_map_level(child_plan, _as_list(child_parents), child_nodes))

    mapped = []
    for raw in parents:
        extra: dict[str, Any] = {}
        for (node, _), pairs in zip(plan.combines, children, strict=True):
            matches = [
                obj
                for child_raw, obj in pairs
                if all(child_raw.get(ck) == raw.get(pk) for pk, ck in node.on.items())
            ]
            extra[node.name] = matches if node.many else (matches[0] if matches else None)
        mapped.append((raw, _transform(plan, raw, extra)))
    return mapped


def _transform(plan: EntityPlan, raw: Mapping[str, Any], extra: Mapping[str, Any]) -> Any:
    if plan.reject_keys or plan.model is not None:
        out: dict[str, Any] = {}
    else:
        out = {k: v for k, v in raw.items() if k not in plan.consumed}

    for attr in plan.attributes:
        value = raw.get(attr.key(plan.prefix, plan.separator))
        if attr.coerce is not None and value is not None:
            value = attr.coerce(value)
        out[attr.name] = value

    for node, sub in plan.embedded:
        value = raw.get(node.source or node.name)
        if value is None:
            out[node.name] = [] if node.many else None
        elif node.many:
            out[node.name] = [_transform(sub, item, {}) for item in value]
        else:
            out[node.name] = _transform(sub, value, {})

    out.update(extra)
    if plan.model is None:
        return out
    return plan.model(**out)
