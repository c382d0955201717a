"""
Plugin Modules

Map of plugin id -> async factory returning that plugin's definition. The
loader walks this map; routers use it to tell "unknown plugin" apart from
"known but not loaded". Factories import lazily so code for plugins that are
never enabled is never imported.

Add new built-in plugins to BUILTIN_PLUGIN_MODULES. Sites can add their own
through the EXTRA_PLUGIN_MODULES setting ({"id": "dotted.module"}).
"""

from __future__ import annotations

import importlib
from collections.abc import Awaitable, Callable, Mapping

from cms.plugins.types import PluginDefinition

PluginFactory = Callable[[], Awaitable[PluginDefinition]]

BUILTIN_PLUGIN_MODULES: dict[str, str] = {
    "concerts": "cms.plugins.concerts",
    "photos": "cms.plugins.photos",
}


def import_factory(module_path: str, attribute: str = "plugin") -> PluginFactory:
    """Build a factory that imports `module_path` and returns its `plugin`."""

    async def factory() -> PluginDefinition:
        module = importlib.import_module(module_path)
        definition = getattr(module, attribute, None)
        if not isinstance(definition, PluginDefinition):
            raise TypeError(f"{module_path}.{attribute} is not a PluginDefinition")
        return definition

    factory.__qualname__ = f"import_factory({module_path!r})"
    return factory


def build_plugin_modules(extra: Mapping[str, str] | None = None) -> dict[str, PluginFactory]:
    """Built-in plugin factories plus any configured extra modules."""
    paths = {**BUILTIN_PLUGIN_MODULES, **(extra or {})}
    return {plugin_id: import_factory(path) for plugin_id, path in paths.items()}
