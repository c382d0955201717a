"""
Plugin System

PluginSystem wires the registry, loader, state store and router together and
provides the site-level views built from enabled plugins: admin and public
navigation, homepage sections and merged translations.

One instance is created per application (main.create_app) and kept on
app.state.plugins; routes reach it through cms.dependencies.get_plugin_system.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

from starlette.responses import Response

from cms.plugins.loader import PluginLoader
from cms.plugins.modules import build_plugin_modules
from cms.plugins.registry import PluginRegistry
from cms.plugins.routing import PluginRouter, normalize_public_path
from cms.plugins.state import DatabaseStateBackend, JsonFileStateBackend, PluginStateStore
from cms.plugins.types import PageContext

if TYPE_CHECKING:
    from collections.abc import Mapping

    from starlette.requests import Request

    from cms.config import Settings
    from cms.plugins.modules import PluginFactory
    from cms.plugins.state import PluginStateBackend
    from cms.plugins.types import Component, PluginInstance

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NavigationEntry:
    plugin_id: str
    name: str
    href: str


@dataclass(frozen=True)
class HomepageEntry:
    plugin_id: str
    public_path: str
    priority: int
    component: Component


class PluginSystem:
    """Registry + loader + state store + router for one application."""

    def __init__(
        self,
        modules: Mapping[str, PluginFactory],
        backend: PluginStateBackend,
        registry: Optional[PluginRegistry] = None,
    ):
        self.registry = registry or PluginRegistry()
        self.loader = PluginLoader(self.registry, modules)
        self.store = PluginStateStore(self.registry, backend)
        self.router = PluginRouter(self.loader, self.store)

    @classmethod
    def from_settings(cls, settings: Settings) -> PluginSystem:
        if settings.plugin_state_backend == "file":
            backend: PluginStateBackend = JsonFileStateBackend(settings.plugin_state_file)
        else:
            backend = DatabaseStateBackend()
        return cls(modules=build_plugin_modules(settings.extra_plugin_modules), backend=backend)

    # ── Lifecycle ────────────────────────────────────────────────────────────

    async def startup(self) -> None:
        await self.loader.ensure_loaded()
        logger.info("Plugin system ready: %d plugin(s) registered", len(self.registry))

    async def shutdown(self) -> None:
        self.registry.clear()

    # ── Views over enabled plugins ───────────────────────────────────────────

    async def all_plugins(self) -> list[PluginInstance]:
        await self.loader.ensure_loaded()
        return await self.store.get_all_plugins()

    async def enabled_plugins(self) -> list[PluginInstance]:
        await self.loader.ensure_loaded()
        return await self.store.get_enabled_plugins()

    async def admin_navigation(self) -> list[NavigationEntry]:
        """Admin sidebar entries of enabled plugins."""
        return [
            NavigationEntry(plugin_id=p.id, name=p.definition.admin_navigation.name, href=p.definition.admin_navigation.href)
            for p in await self.enabled_plugins()
            if p.definition.admin_navigation is not None
        ]

    async def public_navigation(self, locale: Optional[str] = None) -> list[NavigationEntry]:
        """
        Site navigation links for enabled plugins with a public path.

        The link name comes from the plugin's `navName` message for the
        locale when present, otherwise from its admin navigation name.
        """
        entries: list[NavigationEntry] = []
        for plugin in await self.enabled_plugins():
            nav = plugin.definition.admin_navigation
            if nav is None or not plugin.definition.default_public_path:
                continue
            name = nav.name
            messages = plugin.definition.translations.get(locale, {}) if locale else {}
            namespace = messages.get(plugin.id)
            if isinstance(namespace, dict) and namespace.get("navName"):
                name = namespace["navName"]
            entries.append(
                NavigationEntry(plugin_id=plugin.id, name=name, href=normalize_public_path(plugin.effective_public_path))
            )
        return entries

    async def homepage_sections(self) -> list[HomepageEntry]:
        """Homepage sections of enabled plugins, highest priority first."""
        sections = [
            HomepageEntry(
                plugin_id=p.id,
                public_path=normalize_public_path(p.effective_public_path) or f"/{p.id}",
                priority=p.definition.homepage_section.priority,
                component=p.definition.homepage_section.component,
            )
            for p in await self.enabled_plugins()
            if p.definition.homepage_section is not None
        ]
        # sort is stable, so equal priorities keep registry order
        sections.sort(key=lambda s: s.priority, reverse=True)
        return sections

    async def translations(self, locale: str) -> dict[str, Any]:
        """Union of enabled plugins' message namespaces for a locale."""
        merged: dict[str, Any] = {}
        for plugin in await self.enabled_plugins():
            messages = plugin.definition.translations.get(locale)
            if messages:
                merged.update(messages)
        return merged

    async def render_homepage_sections(self, request: Request) -> list[str]:
        """Render every homepage section to HTML; a failing section is skipped."""
        rendered: list[str] = []
        for section in await self.homepage_sections():
            context = PageContext(plugin_id=section.plugin_id, public_path=section.public_path)
            try:
                output = await section.component(request, context)
                if isinstance(output, Response):
                    # streaming responses have no body and fail here
                    output = output.body.decode(output.charset)
            except Exception:
                logger.exception("Homepage section of plugin %s failed to render", section.plugin_id)
                continue
            rendered.append(output)
        return rendered
