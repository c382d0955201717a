"""
Shared FastAPI dependencies.

Authentication proper is handled outside this service; the admin surfaces
only check a shared secret (X-Admin-Key) when ADMIN_API_KEY is configured.
"""

from __future__ import annotations

import secrets

from fastapi import Request

from cms.config import settings as default_settings
from cms.exceptions import AuthorizationError
from cms.plugins.manager import PluginSystem


def get_plugin_system(request: Request) -> PluginSystem:
    return request.app.state.plugins


def check_admin_key(request: Request) -> None:
    """Raise AuthorizationError unless the request carries the admin key."""
    app_settings = getattr(request.app.state, "settings", default_settings)
    expected = app_settings.admin_api_key
    if not expected:
        return
    supplied = request.headers.get("X-Admin-Key", "")
    if not secrets.compare_digest(supplied.encode(), expected.encode()):
        raise AuthorizationError("Admin key required")


async def require_admin(request: Request) -> None:
    check_admin_key(request)
