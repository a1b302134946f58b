"""Storage adapters and the scheme -> gateway registry.

Built-in schemes: ``memory`` and the SQL dialects SQLAlchemy ships with.
Plugins contribute more through the ``register_gateways`` hook.
"""

from __future__ import annotations

from typing import Any

from rommap.adapters.base import Dataset, Gateway
from rommap.adapters.memory import MemoryDataset, MemoryGateway
from rommap.adapters.sql import SqlDataset, SqlGateway
from rommap.errors import AdapterNotFoundError

_BUILTIN_ADAPTERS: dict[str, type[Gateway]] = {
    "memory": MemoryGateway,
    "sqlite": SqlGateway,
    "postgresql": SqlGateway,
    "mysql": SqlGateway,
}

ADAPTER_REGISTRY: dict[str, type[Gateway]] = dict(_BUILTIN_ADAPTERS)


def register_adapter(scheme: str, gateway_cls: type[Gateway]) -> None:
    """Register *gateway_cls* as the gateway for URIs with *scheme*.

    Built-in schemes are reserved.
    """
    normalized = scheme.strip().lower()
    if not normalized:
        msg = "Adapter scheme must not be empty"
        raise ValueError(msg)
    if not (isinstance(gateway_cls, type) and issubclass(gateway_cls, Gateway)):
        msg = f"Adapter {normalized!r} must extend Gateway"
        raise TypeError(msg)
    if normalized in _BUILTIN_ADAPTERS and _BUILTIN_ADAPTERS[normalized] is not gateway_cls:
        msg = f"Adapter {normalized!r} conflicts with a built-in registration"
        raise ValueError(msg)
    ADAPTER_REGISTRY[normalized] = gateway_cls


def get_adapter(scheme: str) -> type[Gateway]:
    """Return the gateway class for *scheme* (driver suffixes like ``+psycopg`` ignored)."""
    base = scheme.lower().split("+", 1)[0]
    try:
        return ADAPTER_REGISTRY[base]
    except KeyError:
        msg = f"No adapter registered for {scheme!r}; known: {sorted(ADAPTER_REGISTRY)}"
        raise AdapterNotFoundError(msg) from None


def normalize_uri(identifier: str) -> str:
    """Turn a bare identifier like ``"memory"`` into ``"memory://"``."""
    return identifier if "://" in identifier else f"{identifier}://"


def gateway_from_uri(uri: str, **options: Any) -> Gateway:
    """Set up a gateway for *uri* (or a bare adapter identifier)."""
    full = normalize_uri(uri)
    scheme = full.split("://", 1)[0]
    return get_adapter(scheme).setup(full, **options)


__all__ = [
    "ADAPTER_REGISTRY",
    "Dataset",
    "Gateway",
    "MemoryDataset",
    "MemoryGateway",
    "SqlDataset",
    "SqlGateway",
    "gateway_from_uri",
    "get_adapter",
    "normalize_uri",
    "register_adapter",
]
