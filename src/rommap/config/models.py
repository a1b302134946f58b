"""Section models for ``rommap.toml``.

A file without a ``[gateways]`` table gets one in-memory ``default``
gateway.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, model_validator


class GatewayConfig(BaseModel):
    """One entry of the [gateways] table.

    Written either as a bare URI (``default = "sqlite:///app.db"``) or as
    a table with extra engine options::

        [gateways.reports]
        uri = "postgresql://localhost/reports"
        options = { pool_pre_ping = true }
    """

    model_config = {"frozen": True}

    uri: str
    options: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _from_uri(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"uri": data}
        return data


def default_gateways() -> dict[str, GatewayConfig]:
    return {"default": GatewayConfig(uri="memory://")}


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    local_dir: str | None = ".rommap/plugins"
