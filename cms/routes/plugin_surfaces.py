"""
Plugin Surfaces

HTTP entry points that hand requests to plugins:

    /api/p/{plugin_id}/{path}    → plugin API handlers (JSON errors 403/404/405/500)
    /admin/p/{plugin_id}/{path}  → plugin admin pages
    /{path}                      → plugin public pages (catch-all, include last)

Page surfaces render a not-found view or a "plugin not enabled" view instead
of a JSON error.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import HTMLResponse, JSONResponse, Response

from cms.dependencies import get_plugin_system, require_admin
from cms.exceptions import ModuleLoadError, PluginNotEnabledError, PluginNotFoundError, RouteNotFoundError
from cms.plugins.manager import PluginSystem
from cms.plugins.routing import ResolvedPage
from cms.plugins.types import HTTP_METHODS
from cms.templating import templates

logger = logging.getLogger(__name__)

api_router = APIRouter(tags=["Plugin API"])
admin_router = APIRouter(tags=["Plugin Admin"], dependencies=[Depends(require_admin)])
public_router = APIRouter(tags=["Plugin Pages"])

_PAGE_NOT_FOUND = (PluginNotFoundError, RouteNotFoundError, ModuleLoadError)


def _as_response(output: Any) -> Response:
    if isinstance(output, Response):
        return output
    if isinstance(output, str):
        return HTMLResponse(output)
    return JSONResponse(jsonable_encoder(output))


def render_not_found(request: Request) -> Response:
    return templates.TemplateResponse(
        request,
        "not_found.html",
        {"path": request.url.path},
        status_code=status.HTTP_404_NOT_FOUND,
    )


def render_not_enabled(request: Request, plugin_id: str) -> Response:
    return templates.TemplateResponse(
        request,
        "plugin_not_enabled.html",
        {"plugin_id": plugin_id},
        status_code=status.HTTP_403_FORBIDDEN,
    )


async def render_page(request: Request, resolved: ResolvedPage) -> Response:
    request.state.plugin_id = resolved.plugin_id
    output = await resolved.component(request, resolved.context())
    return _as_response(output)


# ── API ────────────────────────────────────────────────────────────────────────


@api_router.api_route("/{plugin_id}", methods=list(HTTP_METHODS))
@api_router.api_route("/{plugin_id}/{path:path}", methods=list(HTTP_METHODS))
async def dispatch_plugin_api(
    plugin_id: str,
    request: Request,
    path: str = "",
    plugins: PluginSystem = Depends(get_plugin_system),
) -> Response:
    """Run the plugin API handler matching the path and method."""
    request.state.plugin_id = plugin_id
    resolved = await plugins.router.resolve_api_route(plugin_id, path, request.method)
    return _as_response(await resolved.handler(request, resolved.params))


# ── Admin pages ────────────────────────────────────────────────────────────────


@admin_router.get("/{plugin_id}", response_class=HTMLResponse)
@admin_router.get("/{plugin_id}/{path:path}", response_class=HTMLResponse)
async def plugin_admin_page(
    plugin_id: str,
    request: Request,
    path: str = "",
    plugins: PluginSystem = Depends(get_plugin_system),
) -> Response:
    try:
        resolved = await plugins.router.resolve_admin_page(plugin_id, path)
    except PluginNotEnabledError:
        return render_not_enabled(request, plugin_id)
    except _PAGE_NOT_FOUND as exc:
        logger.info("Admin page not found: %s (%s)", request.url.path, exc.error_code.value)
        return render_not_found(request)
    return await render_page(request, resolved)


# ── Public pages ───────────────────────────────────────────────────────────────


@public_router.get("/{path:path}", response_class=HTMLResponse, include_in_schema=False)
async def plugin_public_page(
    path: str,
    request: Request,
    plugins: PluginSystem = Depends(get_plugin_system),
) -> Response:
    try:
        resolved = await plugins.router.resolve_public_page(path)
    except _PAGE_NOT_FOUND as exc:
        logger.debug("Public page not found: %s (%s)", request.url.path, exc.error_code.value)
        return render_not_found(request)
    return await render_page(request, resolved)
