"""
CMS Plugin System

Public API:
    PluginDefinition  code-authored description of a plugin
    PluginRegistry    in-process id -> definition map (first registration wins)
    PluginLoader      loads definitions from the plugin module map
    PluginStateStore  persisted enabled flag / public path / settings
    PluginRouter      resolves admin, public and API requests
    PluginSystem      all of the above wired together for one application
"""

from .loader import PluginLoader
from .manager import PluginSystem
from .registry import PluginRegistry
from .routing import PluginRouter
from .state import PluginStateStore
from .types import (
    AdminPage,
    ApiRoute,
    HomepageSection,
    NavItem,
    PageContext,
    PluginDefinition,
    PluginInstance,
    PluginState,
    PublicPage,
    SettingField,
    SettingOption,
)

__all__ = [
    "AdminPage",
    "ApiRoute",
    "HomepageSection",
    "NavItem",
    "PageContext",
    "PluginDefinition",
    "PluginInstance",
    "PluginLoader",
    "PluginRegistry",
    "PluginRouter",
    "PluginState",
    "PluginStateStore",
    "PluginSystem",
    "PublicPage",
    "SettingField",
    "SettingOption",
]
