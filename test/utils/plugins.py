"""
Plugin definitions and factories for tests

make_plugin() builds a small but complete definition whose components and
handlers echo what they received, so routing tests can assert on output.
"""

from cms.plugins.types import AdminPage, ApiRoute, NavItem, PluginDefinition, PublicPage


def icon(class_name: str = "") -> str:
    return f'<svg class="{class_name}"></svg>'


def make_component(label: str):
    """Page component that renders its label, params and public path."""

    async def component(request, context):
        params = ",".join(f"{k}={v}" for k, v in sorted(context.params.items()))
        return f"<p>{label}|{params}|{context.public_path}</p>"

    return component


def make_handler(label: str):
    async def handler(request, params):
        return {"handler": label, "params": params, "method": request.method}

    return handler


def make_plugin(plugin_id: str = "demo", **overrides) -> PluginDefinition:
    """Keyword arguments replace the default fields."""
    fields = {
        "id": plugin_id,
        "name": plugin_id.title(),
        "description": f"{plugin_id} test plugin",
        "version": "1.0.0",
        "default_public_path": f"/{plugin_id}",
        "admin_navigation": NavItem(name=plugin_id.title(), href=f"/admin/p/{plugin_id}", icon=icon),
        "admin_pages": (
            AdminPage(path="", component=make_component("admin-list")),
            AdminPage(path="new", component=make_component("admin-new")),
            AdminPage(path="[id]", component=make_component("admin-edit")),
        ),
        "public_pages": (
            PublicPage(path="", component=make_component("public-list")),
            PublicPage(path="[slug]", component=make_component("public-detail")),
        ),
        "api_routes": (
            ApiRoute(path="", GET=make_handler("list"), POST=make_handler("create")),
            ApiRoute(path="[id]", GET=make_handler("get"), PUT=make_handler("update")),
        ),
    }
    fields.update(overrides)
    return PluginDefinition(**fields)


def factory_for(definition: PluginDefinition):
    async def factory() -> PluginDefinition:
        return definition

    return factory


def failing_factory(message: str = "boom"):
    async def factory() -> PluginDefinition:
        raise ImportError(message)

    return factory


def enable(client, plugin_id: str, custom_public_path: str | None = None):
    """Enable a plugin through the admin API and assert it succeeded."""
    payload = {"action": "enable", "plugin_id": plugin_id}
    if custom_public_path:
        payload["custom_public_path"] = custom_public_path
    response = client.post("/api/admin/plugins", json=payload)
    assert response.status_code == 200, response.text
    return response
