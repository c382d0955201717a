"""
Plugin Registry

In-process map of plugin id -> PluginDefinition, populated by the loader.
Registration is first-wins: registering an id that is already present is a
silent no-op. The registry holds no enabled/disabled information; that lives
in the state store so it survives restarts and code reloads.

The registry is constructed explicitly and handed to the loader, state store
and routers (see cms.plugins.manager.PluginSystem).
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from cms.plugins.types import PluginDefinition

logger = logging.getLogger(__name__)


class PluginRegistry:
    """In-process registry of plugin definitions, in registration order."""

    def __init__(self) -> None:
        self._plugins: dict[str, PluginDefinition] = {}

    # ── Registration ──────────────────────────────────────────────────────────

    def register(self, definition: PluginDefinition) -> bool:
        """Register a definition. Returns False if the id was already taken."""
        if definition.id in self._plugins:
            logger.debug("Plugin %s already registered; keeping first definition", definition.id)
            return False
        self._plugins[definition.id] = definition
        logger.info("Plugin registered: %s v%s", definition.id, definition.version)
        return True

    def unregister(self, plugin_id: str) -> None:
        self._plugins.pop(plugin_id, None)

    def clear(self) -> None:
        """Drop every definition. Used for reloads and tests."""
        self._plugins.clear()

    # ── Lookup ────────────────────────────────────────────────────────────────

    def get(self, plugin_id: str) -> Optional[PluginDefinition]:
        """Return the definition with the given id, or None if not registered."""
        return self._plugins.get(plugin_id)

    def all_plugins(self) -> list[PluginDefinition]:
        """Return all registered definitions in registration order."""
        return list(self._plugins.values())

    def is_registered(self, plugin_id: str) -> bool:
        return plugin_id in self._plugins

    def __contains__(self, plugin_id: object) -> bool:
        return plugin_id in self._plugins

    def __len__(self) -> int:
        return len(self._plugins)

    def __iter__(self) -> Iterator[PluginDefinition]:
        return iter(list(self._plugins.values()))
