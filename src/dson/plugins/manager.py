"""Plugin discovery and loading.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints.
Capability: contributing Convertible adapters through the
``register_convertibles`` hook.
"""

from __future__ import annotations

import inspect
import logging

import pluggy

from dson.domain.types import type_name
from dson.plugins.hookspecs import PROJECT_NAME, DsonHookSpec

ENTRY_POINT_GROUP = "dson.plugins"

logger = logging.getLogger(__name__)


class PluginManager:
    """Manages plugin discovery, registration, and adapter collection."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(DsonHookSpec)
        self._loaded: bool = False

    def discover_and_load(self) -> list[str]:
        """Load entry-point plugins and register their adapters.

        Returns a list of registered plugin names.
        """
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._normalize_plugin_instances()
        for plugin in self._pm.get_plugins():
            self._register_plugin_convertibles(plugin, self._plugin_name(plugin))
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly.

        Adapters are collected immediately when discovery already ran,
        otherwise on the next :meth:`discover_and_load`.
        """
        resolved_name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved_name)
        if self._loaded:
            self._register_plugin_convertibles(plugin, resolved_name)
        logger.debug("Registered plugin: %s", resolved_name)

    def unregister(self, plugin: object) -> None:
        """Unregister a plugin instance. Its adapters stay registered."""
        self._pm.unregister(plugin)

    @property
    def is_loaded(self) -> bool:
        """Whether discover_and_load() has been called."""
        return self._loaded

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    def list_plugin_names(self) -> list[str]:
        """Return names of all registered plugins."""
        return [self._plugin_name(p) for p in self._pm.get_plugins()]

    # ------------------------------------------------------------------

    def _plugin_name(self, plugin: object) -> str:
        return self._pm.get_name(plugin) or plugin.__class__.__name__

    def _normalize_plugin_instances(self) -> None:
        """Replace entry-point plugin classes with instances.

        Hook dispatch against a class object leaves ``self`` unbound.
        """
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin):
                continue

            plugin_name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)
            try:
                instance = plugin()
            except Exception:
                logger.warning(
                    "Failed to instantiate entry-point plugin %s", plugin_name, exc_info=True
                )
                continue

            self._pm.register(instance, name=plugin_name)
            logger.debug("Instantiated entry-point plugin: %s", plugin_name)

    @staticmethod
    def _register_plugin_convertibles(plugin: object, plugin_name: str) -> None:
        """Register the adapters exposed by a single plugin instance."""
        from dson.convertible import register_convertible

        hook = getattr(plugin, "register_convertibles", None)
        if hook is None:
            return

        try:
            adapters = hook()
        except Exception:
            logger.warning(
                "Failed to collect Convertible adapters from plugin %s",
                plugin_name,
                exc_info=True,
            )
            return

        if adapters is None:
            return
        if not isinstance(adapters, dict):
            logger.warning("Plugin %s returned non-dict Convertible registrations", plugin_name)
            return

        for tp, adapter in adapters.items():
            try:
                register_convertible(tp, adapter)
            except (TypeError, ValueError):
                logger.warning(
                    "Skipping Convertible registration %s from plugin %s",
                    type_name(tp),
                    plugin_name,
                    exc_info=True,
                )
