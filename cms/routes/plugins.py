"""
Plugin Administration Routes

GET  /api/admin/plugins              → list all registered plugins with state
GET  /api/admin/plugins/{plugin_id}  → single plugin
POST /api/admin/plugins              → action: enable | disable | updatePath | updateSettings
POST /api/admin/plugins/reload       → clear the registry and load plugins again

Responses never include components, icons, handlers or hooks.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Literal, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from cms.dependencies import get_plugin_system, require_admin
from cms.exceptions import ResourceNotFoundError, ValidationError
from cms.plugins.manager import PluginSystem
from cms.plugins.types import PluginInstance, PluginState

router = APIRouter(tags=["Plugins"], dependencies=[Depends(require_admin)])
logger = logging.getLogger(__name__)


# ── Pydantic schemas ───────────────────────────────────────────────────────────


class NavigationResponse(BaseModel):
    name: str
    href: str


class PagePatternResponse(BaseModel):
    path: str


class ApiRoutePatternResponse(BaseModel):
    path: str
    methods: list[str]


class HomepageSectionResponse(BaseModel):
    priority: int


class PluginResponse(BaseModel):
    id: str
    name: str
    description: str
    version: str
    author: Optional[str] = None
    default_public_path: Optional[str] = None
    admin_navigation: Optional[NavigationResponse] = None
    admin_pages: list[PagePatternResponse] = []
    public_pages: list[PagePatternResponse] = []
    api_routes: list[ApiRoutePatternResponse] = []
    homepage_section: Optional[HomepageSectionResponse] = None
    settings_fields: list[dict[str, Any]] = []
    translations: dict[str, Any] = {}
    enabled: bool
    custom_public_path: Optional[str] = None
    effective_public_path: Optional[str] = None
    settings: Optional[dict[str, Any]] = None


class PluginListResponse(BaseModel):
    plugins: list[PluginResponse]


class PluginStateResponse(BaseModel):
    plugin_id: str
    enabled: bool
    custom_public_path: Optional[str] = None
    settings: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PluginAction(BaseModel):
    action: Literal["enable", "disable", "updatePath", "updateSettings"]
    plugin_id: str = Field(..., min_length=1)
    custom_public_path: Optional[str] = None
    settings: Optional[dict[str, Any]] = None


class PluginActionResponse(BaseModel):
    success: bool = True
    plugin_state: PluginStateResponse
    plugins: list[PluginResponse]


class PluginReloadResponse(BaseModel):
    loaded: list[str]
    plugins: list[PluginResponse]


# ── Helpers ────────────────────────────────────────────────────────────────────


def _build_response(plugin: PluginInstance) -> PluginResponse:
    return PluginResponse.model_validate(plugin.to_dict())


def _build_state_response(state: PluginState) -> PluginStateResponse:
    return PluginStateResponse(
        plugin_id=state.plugin_id,
        enabled=state.enabled,
        custom_public_path=state.custom_public_path,
        settings=state.settings,
        created_at=state.created_at,
        updated_at=state.updated_at,
    )


async def _all_plugins(plugins: PluginSystem) -> list[PluginResponse]:
    return [_build_response(p) for p in await plugins.all_plugins()]


# ── Routes ─────────────────────────────────────────────────────────────────────


@router.get("", response_model=PluginListResponse)
async def list_plugins(plugins: PluginSystem = Depends(get_plugin_system)) -> PluginListResponse:
    """List all registered plugins with their enabled state and settings."""
    return PluginListResponse(plugins=await _all_plugins(plugins))


@router.post("/reload", response_model=PluginReloadResponse)
async def reload_plugins(plugins: PluginSystem = Depends(get_plugin_system)) -> PluginReloadResponse:
    """Clear the registry and load every plugin module again."""
    loaded = await plugins.loader.reload()
    logger.info("Plugins reloaded: %s", ", ".join(d.id for d in loaded) or "none")
    return PluginReloadResponse(loaded=[d.id for d in loaded], plugins=await _all_plugins(plugins))


@router.get("/{plugin_id}", response_model=PluginResponse)
async def get_plugin(plugin_id: str, plugins: PluginSystem = Depends(get_plugin_system)) -> PluginResponse:
    for plugin in await plugins.all_plugins():
        if plugin.id == plugin_id:
            return _build_response(plugin)
    raise ResourceNotFoundError("Plugin", plugin_id)


@router.post("", response_model=PluginActionResponse)
async def update_plugin(
    payload: PluginAction,
    plugins: PluginSystem = Depends(get_plugin_system),
) -> PluginActionResponse:
    """Enable or disable a plugin, or update its public path or settings."""
    await plugins.loader.ensure_loaded()
    store = plugins.store

    if payload.action == "enable":
        state = await store.enable(payload.plugin_id, payload.custom_public_path)
    elif payload.action == "disable":
        state = await store.disable(payload.plugin_id)
    elif payload.action == "updatePath":
        if not payload.custom_public_path:
            raise ValidationError("Custom public path is required", field="custom_public_path")
        state = await store.update_public_path(payload.plugin_id, payload.custom_public_path)
    else:
        if payload.settings is None:
            raise ValidationError("Settings are required", field="settings")
        state = await store.update_settings(payload.plugin_id, payload.settings)

    return PluginActionResponse(
        success=True,
        plugin_state=_build_state_response(state),
        plugins=await _all_plugins(plugins),
    )
