"""Plugin discovery and loading.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints,
plus single-file plugins from a local directory.
Capabilities: gateway adapters for new URI schemes, setup registrations.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import pluggy

from rommap.plugins.hookspecs import RommapHookSpec

if TYPE_CHECKING:
    from rommap.environment import Setup

PROJECT_NAME = "rommap"
ENTRY_POINT_GROUP = "rommap.plugins"

logger = logging.getLogger(__name__)


class PluginManager:
    """Manages plugin discovery, loading, and hook dispatch."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(RommapHookSpec)
        self._loaded: bool = False

    def discover_and_load(self, *, local_dir: Path | None = None) -> list[str]:
        """Discover plugins from entry points and an optional local directory.

        Returns a list of loaded plugin names.
        """
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._normalize_plugin_instances()
        if local_dir is not None:
            self._discover_local(local_dir)
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly."""
        resolved_name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved_name)
        logger.debug("Registered plugin: %s", resolved_name)

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    @property
    def is_loaded(self) -> bool:
        """Whether discover_and_load() has been called."""
        return self._loaded

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    def get_plugins(self) -> list[object]:
        return list(self._pm.get_plugins())

    def list_plugin_names(self) -> list[str]:
        return [self._pm.get_name(p) or p.__class__.__name__ for p in self._pm.get_plugins()]

    # ------------------------------------------------------------------
    # Setup-time dispatch
    # ------------------------------------------------------------------

    def register_gateways(self) -> list[str]:
        """Add plugin gateway classes to the adapter registry.

        Returns the schemes that were registered.  A bad registration is
        logged and skipped.
        """
        from rommap.adapters import register_adapter

        registered: list[str] = []
        for plugin in self._pm.get_plugins():
            plugin_name = self._pm.get_name(plugin) or plugin.__class__.__name__
            hook = getattr(plugin, "register_gateways", None)
            if hook is None:
                continue
            try:
                gateway_map = hook()
            except Exception:
                logger.warning(
                    "Failed to collect gateways from plugin %s",
                    plugin_name,
                    exc_info=True,
                )
                continue

            if gateway_map is None:
                continue
            if not isinstance(gateway_map, dict):
                logger.warning("Plugin %s returned non-dict gateway registrations", plugin_name)
                continue

            for scheme, gateway_cls in gateway_map.items():
                try:
                    register_adapter(scheme, gateway_cls)
                except (TypeError, ValueError):
                    logger.warning(
                        "Skipping gateway registration %r from plugin %s",
                        scheme,
                        plugin_name,
                        exc_info=True,
                    )
                    continue
                registered.append(scheme)
        return registered

    def configure_setup(self, setup: Setup) -> None:
        """Let every plugin register definitions on *setup*."""
        for plugin in self._pm.get_plugins():
            hook = getattr(plugin, "configure_setup", None)
            if hook is None:
                continue
            plugin_name = self._pm.get_name(plugin) or plugin.__class__.__name__
            try:
                hook(setup=setup)
            except Exception:
                logger.warning("Plugin %s failed to configure setup", plugin_name, exc_info=True)

    # ------------------------------------------------------------------
    # Local directory discovery
    # ------------------------------------------------------------------

    def _discover_local(self, local_dir: Path) -> None:
        """Scan *local_dir* for single-file Python plugins.

        Each ``*.py`` file (excluding ``_``-prefixed names) is loaded as a
        module.  Classes inside the module that carry hookimpl-decorated
        methods are instantiated and registered.  Errors are logged as
        warnings, never raised.
        """
        if not local_dir.is_dir():
            return

        for py_file in sorted(local_dir.glob("*.py")):
            if py_file.name.startswith("_"):
                continue
            module_name = f"rommap_local_plugin_{py_file.stem}"
            try:
                spec = importlib.util.spec_from_file_location(module_name, py_file)
                if spec is None or spec.loader is None:
                    logger.warning("Could not create module spec for %s", py_file)
                    continue
                module = importlib.util.module_from_spec(spec)
                sys.modules[module_name] = module
                spec.loader.exec_module(module)
            except Exception:
                logger.warning("Failed to load local plugin %s", py_file, exc_info=True)
                sys.modules.pop(module_name, None)
                continue

            for _attr_name, obj in inspect.getmembers(module, inspect.isclass):
                if obj.__module__ != module_name:
                    continue
                if not self._has_hook_impls(obj):
                    continue
                try:
                    self.register_plugin(obj(), name=module_name)
                except Exception:
                    logger.warning(
                        "Failed to instantiate plugin class %s from %s",
                        obj.__name__,
                        py_file,
                        exc_info=True,
                    )

    def _normalize_plugin_instances(self) -> None:
        """Replace registered plugin classes with instantiated objects.

        Entry-point loading may register a plugin class directly, which
        leaves ``self`` unbound at dispatch time.
        """
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin) or not self._has_hook_impls(plugin):
                continue

            plugin_name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)
            try:
                instance = plugin()
            except Exception:
                logger.warning(
                    "Failed to instantiate entry-point plugin %s",
                    plugin_name,
                    exc_info=True,
                )
                continue
            self._pm.register(instance, name=plugin_name)
            logger.debug("Instantiated entry-point plugin: %s", plugin_name)

    @staticmethod
    def _has_hook_impls(cls: type) -> bool:
        """Check whether *cls* has any methods decorated with ``@hookimpl``.

        Pluggy's ``HookimplMarker("rommap")`` sets a ``rommap_impl``
        attribute on decorated methods.
        """
        for name in dir(cls):
            if name.startswith("_"):
                continue
            method = getattr(cls, name, None)
            if callable(method) and getattr(method, "rommap_impl", None):
                return True
        return False
