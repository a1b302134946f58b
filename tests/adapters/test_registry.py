"""Tests for the scheme -> gateway registry."""

from __future__ import annotations

from typing import Any, Self

import pytest

import rommap.adapters
from rommap.adapters import (
    ADAPTER_REGISTRY,
    MemoryGateway,
    SqlGateway,
    gateway_from_uri,
    get_adapter,
    normalize_uri,
    register_adapter,
)
from rommap.errors import AdapterNotFoundError


class CsvGateway(MemoryGateway):
    adapter = "csv"

    @classmethod
    def setup(cls, uri: str = "csv://", **options: Any) -> Self:
        gateway = cls(uri)
        gateway.options = options
        return gateway


@pytest.fixture(autouse=True)
def _clean_registry(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(rommap.adapters, "ADAPTER_REGISTRY", dict(ADAPTER_REGISTRY))


class TestRegistry:
    def test_builtin_schemes(self) -> None:
        assert get_adapter("memory") is MemoryGateway
        assert get_adapter("sqlite") is SqlGateway
        assert get_adapter("postgresql+psycopg") is SqlGateway

    def test_unknown_scheme(self) -> None:
        with pytest.raises(AdapterNotFoundError, match="csv"):
            get_adapter("csv")

    def test_register(self) -> None:
        register_adapter(" CSV ", CsvGateway)

        assert get_adapter("csv") is CsvGateway

    def test_builtins_are_reserved(self) -> None:
        with pytest.raises(ValueError, match="built-in"):
            register_adapter("memory", CsvGateway)

    def test_reregistering_a_builtin_is_allowed(self) -> None:
        register_adapter("memory", MemoryGateway)

        assert get_adapter("memory") is MemoryGateway

    def test_rejects_non_gateways(self) -> None:
        with pytest.raises(TypeError, match="Gateway"):
            register_adapter("csv", dict)  # type: ignore[arg-type]

    def test_rejects_empty_scheme(self) -> None:
        with pytest.raises(ValueError, match="empty"):
            register_adapter("  ", CsvGateway)


class TestGatewayFromUri:
    def test_normalize(self) -> None:
        assert normalize_uri("memory") == "memory://"
        assert normalize_uri("sqlite:///app.db") == "sqlite:///app.db"

    def test_bare_identifier(self) -> None:
        gateway = gateway_from_uri("memory")

        assert isinstance(gateway, MemoryGateway)
        assert gateway.uri == "memory://"

    def test_options_reach_the_gateway(self) -> None:
        register_adapter("csv", CsvGateway)

        gateway = gateway_from_uri("csv://data", delimiter=";")

        assert isinstance(gateway, CsvGateway)
        assert gateway.options == {"delimiter": ";"}
