"""
Site Routes

GET /                                 → homepage with plugin homepage sections
GET /api/site/navigation              → public navigation of enabled plugins
GET /api/site/admin-navigation        → admin sidebar entries of enabled plugins
GET /api/site/translations/{locale}   → enabled plugins' messages for a locale
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from pydantic import BaseModel

from cms.dependencies import get_plugin_system, require_admin
from cms.plugins.manager import PluginSystem
from cms.templating import templates

router = APIRouter(tags=["Site"])


class NavigationItem(BaseModel):
    plugin_id: str
    name: str
    href: str


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def homepage(
    request: Request,
    locale: Optional[str] = None,
    plugins: PluginSystem = Depends(get_plugin_system),
):
    sections = await plugins.render_homepage_sections(request)
    navigation = await plugins.public_navigation(locale or request.app.state.settings.default_locale)
    return templates.TemplateResponse(
        request,
        "homepage.html",
        {"sections": sections, "navigation": navigation, "site_name": request.app.state.settings.app_name},
    )


@router.get("/api/site/navigation", response_model=list[NavigationItem])
async def public_navigation(
    locale: Optional[str] = None,
    plugins: PluginSystem = Depends(get_plugin_system),
) -> list[NavigationItem]:
    entries = await plugins.public_navigation(locale)
    return [NavigationItem(plugin_id=e.plugin_id, name=e.name, href=e.href) for e in entries]


@router.get(
    "/api/site/admin-navigation",
    response_model=list[NavigationItem],
    dependencies=[Depends(require_admin)],
)
async def admin_navigation(plugins: PluginSystem = Depends(get_plugin_system)) -> list[NavigationItem]:
    entries = await plugins.admin_navigation()
    return [NavigationItem(plugin_id=e.plugin_id, name=e.name, href=e.href) for e in entries]


@router.get("/api/site/translations/{locale}")
async def plugin_translations(locale: str, plugins: PluginSystem = Depends(get_plugin_system)) -> dict[str, Any]:
    """Messages to merge into the core catalogue for `locale`."""
    return await plugins.translations(locale)
