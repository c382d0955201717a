"""
Plugin Loader

Walks the plugin module map, loads each definition and registers it. A module
that fails to load is logged and skipped; the remaining plugins still load.

Loading happens at most once at a time per process: concurrent callers of
load()/ensure_loaded() await the same in-flight task instead of starting
their own, and reload() waits for it before clearing the registry.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Optional

from cms.exceptions import ModuleLoadError, PluginNotFoundError

if TYPE_CHECKING:
    from cms.plugins.modules import PluginFactory
    from cms.plugins.registry import PluginRegistry
    from cms.plugins.types import PluginDefinition

logger = logging.getLogger(__name__)


class PluginLoader:
    """Loads plugin definitions from factories into a registry."""

    def __init__(self, registry: PluginRegistry, modules: Mapping[str, PluginFactory]):
        self.registry = registry
        self.modules = dict(modules)
        self._loaded = False
        self._pending: Optional[asyncio.Task[list[PluginDefinition]]] = None

    @property
    def loaded(self) -> bool:
        return self._loaded

    def available_plugin_ids(self) -> list[str]:
        return list(self.modules)

    def has_module(self, plugin_id: str) -> bool:
        return plugin_id in self.modules

    def is_known(self, plugin_id: str) -> bool:
        """True if a module exists for the id or a definition is registered."""
        return plugin_id in self.modules or plugin_id in self.registry

    # ── Loading ──────────────────────────────────────────────────────────────

    async def load(self) -> list[PluginDefinition]:
        """
        Load and register every module, sharing any load already in flight.

        Callers await the shared task through asyncio.shield, so a cancelled
        caller (a dropped request) leaves the load running for the others.
        """
        if self._pending is None or self._pending.done():
            task = asyncio.create_task(self._load_all())
            task.add_done_callback(self._clear_pending)
            self._pending = task
        return await asyncio.shield(self._pending)

    def _clear_pending(self, task: asyncio.Task) -> None:
        if self._pending is task:
            self._pending = None

    async def ensure_loaded(self) -> None:
        if self._loaded and len(self.registry) > 0:
            return
        await self.load()

    async def reload(self) -> list[PluginDefinition]:
        """Clear the registry and load again (development refresh)."""
        if self._pending is not None:
            await asyncio.shield(self._pending)
        self.registry.clear()
        self._loaded = False
        return await self.load()

    async def _load_all(self) -> list[PluginDefinition]:
        loaded: list[PluginDefinition] = []
        for plugin_id in list(self.modules):
            try:
                definition = await self._load_module(plugin_id)
            except ModuleLoadError:
                continue
            self.registry.register(definition)
            loaded.append(definition)

        self._loaded = True
        if loaded:
            logger.info("Loaded %d plugin(s): %s", len(loaded), ", ".join(d.id for d in loaded))
        return loaded

    async def _load_module(self, plugin_id: str) -> PluginDefinition:
        factory = self.modules[plugin_id]
        try:
            definition = await factory()
        except Exception as exc:
            logger.exception("Failed to load plugin %s", plugin_id)
            raise ModuleLoadError(plugin_id, reason=str(exc)) from exc

        if definition.id != plugin_id:
            logger.error("Plugin module %s declares id %r", plugin_id, definition.id)
            raise ModuleLoadError(plugin_id, reason=f"module declares id {definition.id!r}")
        return definition

    async def load_definition(self, plugin_id: str) -> PluginDefinition:
        """
        Definition for one plugin: from the registry, else from its module.

        Raises:
            PluginNotFoundError: no module and no registration for the id.
            ModuleLoadError:     the module exists but failed to load.
        """
        definition = self.registry.get(plugin_id)
        if definition is not None:
            return definition
        if plugin_id not in self.modules:
            raise PluginNotFoundError(plugin_id)

        definition = await self._load_module(plugin_id)
        self.registry.register(definition)
        # First registration wins if another load raced us
        return self.registry.get(plugin_id) or definition
