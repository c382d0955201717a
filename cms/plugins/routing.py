"""
Plugin Routing

Resolves a request on one of the three plugin surfaces to the plugin-supplied
component or handler that should serve it:

    Admin pages   /admin/p/{plugin_id}/{path}   -> definition.admin_pages
    Public pages  /{effective_public_path}/{path} -> definition.public_pages
    API routes    /api/p/{plugin_id}/{path}      -> definition.api_routes

All three use the same path matcher. Failures are raised as CMSError
subclasses (PluginNotFoundError, PluginNotEnabledError, ModuleLoadError,
RouteNotFoundError, MethodNotAllowedError); the HTTP layer turns them into
JSON errors or page views.

Public paths are resolved by segment prefix over enabled plugins. When more
than one enabled plugin's path is a prefix of the request, the longest one
wins; equal lengths fall back to registry order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from cms.exceptions import (
    MethodNotAllowedError,
    PluginNotEnabledError,
    PluginNotFoundError,
    RouteNotFoundError,
)
from cms.plugins.matcher import find_route, split_path
from cms.plugins.types import PageContext, parse_settings

if TYPE_CHECKING:
    from cms.plugins.loader import PluginLoader
    from cms.plugins.state import PluginStateStore
    from cms.plugins.types import ApiHandler, ApiRoute, Component, PluginDefinition, PluginState

logger = logging.getLogger(__name__)


def normalize_public_path(path: Optional[str]) -> Optional[str]:
    """Normalize "concerts" or "/concerts/" to "/concerts"; None stays None."""
    if path is None:
        return None
    return "/" + "/".join(split_path(path))


@dataclass(frozen=True)
class ResolvedPage:
    plugin_id: str
    definition: PluginDefinition
    component: Component
    params: dict[str, str] = field(default_factory=dict)
    public_path: Optional[str] = None
    settings: Optional[dict[str, Any]] = None

    def context(self) -> PageContext:
        return PageContext(
            plugin_id=self.plugin_id,
            params=dict(self.params),
            public_path=self.public_path,
            settings=self.settings,
        )


@dataclass(frozen=True)
class ResolvedApiRoute:
    plugin_id: str
    definition: PluginDefinition
    route: ApiRoute
    handler: ApiHandler
    params: dict[str, str] = field(default_factory=dict)
    public_path: Optional[str] = None


class PluginRouter:
    """Resolves admin, public and API requests to plugin components/handlers."""

    def __init__(self, loader: PluginLoader, store: PluginStateStore):
        self.loader = loader
        self.store = store

    async def _enabled_definition(self, plugin_id: str) -> tuple[PluginDefinition, PluginState]:
        """Checks shared by the id-addressed surfaces: known, enabled, loadable."""
        if not self.loader.is_known(plugin_id):
            raise PluginNotFoundError(plugin_id)

        state = await self.store.get_state(plugin_id)
        if state is None or not state.enabled:
            raise PluginNotEnabledError(plugin_id)

        definition = await self.loader.load_definition(plugin_id)
        return definition, state

    # ── Admin ────────────────────────────────────────────────────────────────

    async def resolve_admin_page(self, plugin_id: str, path: str = "") -> ResolvedPage:
        definition, state = await self._enabled_definition(plugin_id)

        found = find_route(definition.admin_pages, split_path(path))
        if found is None:
            raise RouteNotFoundError(plugin_id, path)
        page, params = found
        return ResolvedPage(
            plugin_id=plugin_id,
            definition=definition,
            component=page.component,
            params=params,
            settings=parse_settings(state.settings),
        )

    # ── Public ───────────────────────────────────────────────────────────────

    async def resolve_public_page(self, path: str) -> ResolvedPage:
        await self.loader.ensure_loaded()
        request_segments = split_path(path)

        best = None
        best_segments: list[str] = []
        for instance in await self.store.get_enabled_plugins():
            base = instance.effective_public_path
            if base is None:
                continue
            base_segments = split_path(base)
            if request_segments[: len(base_segments)] != base_segments:
                continue
            if best is None or len(base_segments) > len(best_segments):
                best, best_segments = instance, base_segments

        if best is None:
            raise PluginNotFoundError(path=path)

        definition = await self.loader.load_definition(best.id)
        remainder = request_segments[len(best_segments):]
        found = find_route(definition.public_pages, remainder)
        if found is None:
            raise RouteNotFoundError(best.id, "/".join(remainder))
        page, params = found
        return ResolvedPage(
            plugin_id=best.id,
            definition=definition,
            component=page.component,
            params=params,
            public_path=normalize_public_path(best.effective_public_path),
            settings=best.settings,
        )

    # ── API ──────────────────────────────────────────────────────────────────

    async def resolve_api_route(self, plugin_id: str, path: str, method: str) -> ResolvedApiRoute:
        definition, state = await self._enabled_definition(plugin_id)

        found = find_route(definition.api_routes, split_path(path))
        if found is None:
            raise RouteNotFoundError(plugin_id, path)
        route, params = found

        handler = route.handler_for(method)
        if handler is None:
            raise MethodNotAllowedError(plugin_id, method.upper(), route.methods)

        return ResolvedApiRoute(
            plugin_id=plugin_id,
            definition=definition,
            route=route,
            handler=handler,
            params=params,
            public_path=normalize_public_path(state.custom_public_path or definition.default_public_path),
        )
