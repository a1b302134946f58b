"""Unified settings: CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  (CLI flags passed by Click)
  2. Env vars     (``ROMMAP_*`` prefix)
  3. TOML file    (``rommap.toml`` discovered via walk-up)
  4. Code defaults baked into the section models

Uses Pydantic Settings v2 with a custom :class:`TomlSettingsSource` that
reuses the ``find_config`` walk-up discovery from
:mod:`rommap.config.discovery`.
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from rommap.config.discovery import find_config
from rommap.config.models import GatewayConfig, PluginsConfig, default_gateways


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``rommap.toml`` file discovered via walk-up."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class RomSettings(BaseSettings):
    """Unified settings for rommap.

    Attributes:
        project_root: Directory of ``rommap.toml`` (or CWD without one).
            A relative plugin directory resolves against it.
        config_path: The TOML file in use, or None.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "ROMMAP_",
        "env_nested_delimiter": "__",
    }

    project_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    gateways: dict[str, GatewayConfig] = Field(default_factory=default_gateways)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        project_root: Path | None = None,
        **cli_flags: Any,
    ) -> RomSettings:
        """Construct settings from a CLI invocation.

        Discovers ``rommap.toml`` via walk-up (or explicit *config_path*),
        resolves *project_root* from the config file's parent directory,
        and merges CLI flags as highest-priority overrides.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if not p.is_file():
                msg = f"Config file not found: {config_path}"
                raise click.ClickException(msg)
            toml_path = p
        else:
            toml_path = find_config(project_root)

        resolved_root = project_root
        if resolved_root is None:
            resolved_root = toml_path.parent if toml_path else Path.cwd()

        _tls.toml_path = toml_path
        try:
            return cls(
                project_root=resolved_root,
                config_path=toml_path,
                **cli_flags,
            )
        finally:
            _tls.toml_path = None

    @property
    def plugin_dir(self) -> Path | None:
        """Absolute local plugin directory, or None when disabled."""
        if not self.plugins.enabled or not self.plugins.local_dir:
            return None
        path = Path(self.plugins.local_dir)
        return path if path.is_absolute() else self.project_root / path
