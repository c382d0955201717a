"""
Plugin Types

Declarative, code-authored description of a plugin (PluginDefinition and the
page/route/navigation entries it is made of), the persisted PluginState, and
the derived PluginInstance view combining both.

Component, icon, handler and hook fields are opaque callables. They never
cross a process or network boundary: definition_to_dict() strips them.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Literal, Optional, Union

if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.responses import Response

logger = logging.getLogger(__name__)

HTTP_METHODS: tuple[str, ...] = ("GET", "POST", "PUT", "DELETE", "PATCH")

# Page/homepage components render a page: async (request, context) -> str | Response
Component = Callable[["Request", "PageContext"], Awaitable[Union[str, "Response"]]]
# API handlers: async (request, params) -> Response
ApiHandler = Callable[["Request", dict[str, str]], Awaitable["Response"]]
LifecycleHook = Callable[[], Awaitable[None]]

SettingFieldType = Literal["text", "number", "boolean", "select", "url"]


@dataclass(frozen=True)
class PageContext:
    """Arguments every page and homepage component receives."""

    plugin_id: str
    params: dict[str, str] = field(default_factory=dict)
    public_path: Optional[str] = None
    settings: Optional[dict[str, Any]] = None


@dataclass(frozen=True)
class NavItem:
    """Admin sidebar entry point for a plugin."""

    name: str
    href: str
    icon: Optional[Callable[..., Any]] = None


@dataclass(frozen=True)
class AdminPage:
    # Relative to /admin/p/{plugin_id}/, e.g. "", "new", "[id]"
    path: str
    component: Component


@dataclass(frozen=True)
class PublicPage:
    # Relative to the plugin's effective public path, e.g. "", "[slug]"
    path: str
    component: Component


@dataclass(frozen=True)
class ApiRoute:
    """An API endpoint relative to /api/p/{plugin_id}/ with per-method handlers."""

    path: str
    GET: Optional[ApiHandler] = None
    POST: Optional[ApiHandler] = None
    PUT: Optional[ApiHandler] = None
    DELETE: Optional[ApiHandler] = None
    PATCH: Optional[ApiHandler] = None

    @property
    def methods(self) -> list[str]:
        """HTTP methods this route has a handler for, in canonical order."""
        return [m for m in HTTP_METHODS if getattr(self, m) is not None]

    def handler_for(self, method: str) -> Optional[ApiHandler]:
        method = method.upper()
        if method not in HTTP_METHODS:
            return None
        return getattr(self, method)


@dataclass(frozen=True)
class HomepageSection:
    component: Component
    # Higher priority appears first
    priority: int = 0


@dataclass(frozen=True)
class SettingOption:
    label: str
    value: str


@dataclass(frozen=True)
class SettingField:
    """Schema for one plugin-specific configuration input."""

    key: str
    label: str
    type: SettingFieldType = "text"
    description: Optional[str] = None
    default: Any = None
    options: tuple[SettingOption, ...] = ()
    required: bool = False


@dataclass(frozen=True)
class PluginDefinition:
    """
    Static description of one plugin's capabilities.

    Attributes:
        id:                  Unique lowercase kebab-case identifier.
        name:                Display name shown in admin.
        description:         What the plugin does.
        version:             Semver string.
        author:              Optional author.
        default_public_path: Base URL for public pages absent an override.
        admin_navigation:    Admin sidebar entry.
        admin_pages:         Ordered admin page patterns.
        public_pages:        Ordered public page patterns.
        api_routes:          Ordered API route patterns.
        homepage_section:    Optional homepage injection.
        settings_fields:     Configuration schema for the admin UI.
        translations:        locale -> namespace -> messages.
        on_enable/on_disable: Async lifecycle hooks.
    """

    id: str
    name: str
    description: str
    version: str
    author: Optional[str] = None
    default_public_path: Optional[str] = None
    admin_navigation: Optional[NavItem] = None
    admin_pages: tuple[AdminPage, ...] = ()
    public_pages: tuple[PublicPage, ...] = ()
    api_routes: tuple[ApiRoute, ...] = ()
    homepage_section: Optional[HomepageSection] = None
    settings_fields: tuple[SettingField, ...] = ()
    translations: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    on_enable: Optional[LifecycleHook] = None
    on_disable: Optional[LifecycleHook] = None


@dataclass
class PluginState:
    """Persisted, mutable state for a plugin id; settings is an opaque JSON string."""

    plugin_id: str
    enabled: bool = False
    custom_public_path: Optional[str] = None
    settings: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "plugin_id": self.plugin_id,
            "enabled": self.enabled,
            "custom_public_path": self.custom_public_path,
            "settings": self.settings,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


def parse_settings(raw: Optional[str]) -> Optional[dict[str, Any]]:
    """Decode a stored settings blob; malformed blobs read as no settings."""
    if not raw:
        return None
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Ignoring malformed plugin settings blob")
        return None
    return value if isinstance(value, dict) else None


@dataclass(frozen=True)
class PluginInstance:
    """Definition combined with its current state. Recomputed on demand."""

    definition: PluginDefinition
    enabled: bool = False
    custom_public_path: Optional[str] = None
    settings: Optional[dict[str, Any]] = None

    @classmethod
    def from_state(cls, definition: PluginDefinition, state: Optional[PluginState]) -> PluginInstance:
        if state is None:
            return cls(definition=definition)
        return cls(
            definition=definition,
            enabled=state.enabled,
            custom_public_path=state.custom_public_path or None,
            settings=parse_settings(state.settings),
        )

    @property
    def id(self) -> str:
        return self.definition.id

    @property
    def effective_public_path(self) -> Optional[str]:
        return self.custom_public_path or self.definition.default_public_path

    def to_dict(self) -> dict[str, Any]:
        data = definition_to_dict(self.definition)
        data.update(
            enabled=self.enabled,
            custom_public_path=self.custom_public_path,
            effective_public_path=self.effective_public_path,
            settings=self.settings,
        )
        return data


def definition_to_dict(definition: PluginDefinition) -> dict[str, Any]:
    """Serializable view of a definition with every callable field removed."""
    nav = definition.admin_navigation
    section = definition.homepage_section
    return {
        "id": definition.id,
        "name": definition.name,
        "description": definition.description,
        "version": definition.version,
        "author": definition.author,
        "default_public_path": definition.default_public_path,
        "admin_navigation": {"name": nav.name, "href": nav.href} if nav else None,
        "admin_pages": [{"path": page.path} for page in definition.admin_pages],
        "public_pages": [{"path": page.path} for page in definition.public_pages],
        "api_routes": [{"path": route.path, "methods": route.methods} for route in definition.api_routes],
        "homepage_section": {"priority": section.priority} if section else None,
        "settings_fields": [
            {
                "key": f.key,
                "label": f.label,
                "type": f.type,
                "description": f.description,
                "default": f.default,
                "options": [{"label": o.label, "value": o.value} for o in f.options],
                "required": f.required,
            }
            for f in definition.settings_fields
        ],
        "translations": _plain(definition.translations),
        "has_on_enable": definition.on_enable is not None,
        "has_on_disable": definition.on_disable is not None,
    }


def _plain(value: Any) -> Any:
    """Copy nested mappings/sequences into plain dicts/lists, dropping callables."""
    if isinstance(value, Mapping):
        return {str(k): _plain(v) for k, v in value.items() if not callable(v)}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value if not callable(v)]
    return value
