"""
Plugin validation tests
"""

from __future__ import annotations

from dataclasses import dataclass

from utils.plugins import make_component, make_handler, make_plugin

from cms.plugins.types import AdminPage, ApiRoute, HomepageSection, NavItem, SettingField
from cms.plugins.validation import (
    ValidationResult,
    validate_api_route_ordering,
    validate_plugin,
    validate_plugin_fully,
    validate_plugin_serialization,
    validate_route_ordering,
    validate_translations,
)


@dataclass
class Route:
    path: str


PHOTOS_API_ORDER = ["", "upload", "file/[key]", "album/[slug]", "photo/[photoId]", "[id]/photos", "[id]/reorder", "[id]"]


# ══════════════════════════════════════════════════════════════════════════════
# 1. Structure
# ══════════════════════════════════════════════════════════════════════════════


class TestValidatePlugin:
    def test_valid_plugin(self):
        result = validate_plugin(make_plugin("concerts"))
        assert result.valid is True
        assert result.errors == []

    def test_missing_required_fields(self):
        result = validate_plugin(make_plugin("concerts", id="", name="", description="", version=""))
        assert result.valid is False
        for message in (
            "Plugin must have an id",
            "Plugin must have a name",
            "Plugin must have a description",
            "Plugin must have a version",
        ):
            assert message in result.errors

    def test_invalid_id_format(self):
        result = validate_plugin(make_plugin("My_Plugin"))
        assert result.valid is False
        assert any("lowercase" in e for e in result.errors)

    def test_id_starting_with_number(self):
        assert validate_plugin(make_plugin("1plugin")).valid is False

    def test_kebab_case_id(self):
        assert validate_plugin(make_plugin("my-cool-plugin")).valid is True

    def test_navigation_requires_name_href_and_icon(self):
        result = validate_plugin(make_plugin("concerts", admin_navigation=NavItem(name="", href="", icon=None)))
        assert "Admin navigation must have a name" in result.errors
        assert "Admin navigation must have an href" in result.errors
        assert "Admin navigation icon must be a component" in result.errors

    def test_missing_root_admin_page_warns(self):
        result = validate_plugin(
            make_plugin("concerts", admin_pages=(AdminPage(path="new", component=make_component("new")),))
        )
        assert result.valid is True
        assert any("root page" in w for w in result.warnings)

    def test_non_callable_component(self):
        result = validate_plugin(make_plugin("concerts", admin_pages=(AdminPage(path="", component="not a component"),)))
        assert result.valid is False
        assert any('Admin page ""' in e for e in result.errors)

    def test_api_route_without_handlers(self):
        result = validate_plugin(make_plugin("concerts", api_routes=(ApiRoute(path="empty"),)))
        assert result.valid is False
        assert any("at least one HTTP method handler" in e for e in result.errors)

    def test_homepage_component_must_be_callable(self):
        result = validate_plugin(make_plugin("concerts", homepage_section=HomepageSection(component=None)))
        assert "Homepage section component must be a component" in result.errors

    def test_select_setting_requires_options(self):
        field = SettingField(key="layout", label="Layout", type="select")
        result = validate_plugin(make_plugin("concerts", settings_fields=(field,)))
        assert any("must declare options" in e for e in result.errors)

    def test_duplicate_setting_keys(self):
        fields = (SettingField(key="limit", label="Limit"), SettingField(key="limit", label="Limit again"))
        result = validate_plugin(make_plugin("concerts", settings_fields=fields))
        assert any("more than once" in e for e in result.errors)


# ══════════════════════════════════════════════════════════════════════════════
# 2. Route ordering
# ══════════════════════════════════════════════════════════════════════════════


class TestRouteOrdering:
    def test_photos_order_is_valid(self):
        result = validate_api_route_ordering([Route(p) for p in PHOTOS_API_ORDER])
        assert result.valid is True
        assert result.errors == []

    def test_static_after_dynamic_is_one_error(self):
        order = list(PHOTOS_API_ORDER)
        i, j = order.index("upload"), order.index("[id]")
        order[i], order[j] = order[j], order[i]
        result = validate_api_route_ordering([Route(p) for p in order])
        assert result.valid is False
        assert len(result.errors) == 1
        assert "upload" in result.errors[0]
        assert "[id]" in result.errors[0]
        assert result.errors[0].startswith("API route ordering issue")

    def test_different_segment_counts_never_conflict(self):
        routes = [Route("[id]"), Route("[id]/photos"), Route("file/[key]"), Route("album/[slug]")]
        assert validate_route_ordering(routes).valid is True

    def test_dynamic_after_dynamic_is_fine(self):
        assert validate_route_ordering([Route("[id]"), Route("[slug]")]).valid is True

    def test_page_ordering_is_checked_too(self):
        pages = (
            AdminPage(path="[id]", component=make_component("edit")),
            AdminPage(path="new", component=make_component("new")),
            AdminPage(path="", component=make_component("list")),
        )
        result = validate_plugin(make_plugin("concerts", admin_pages=pages))
        assert result.valid is False
        assert any(e.startswith("Admin page ordering issue") and '"new"' in e for e in result.errors)


# ══════════════════════════════════════════════════════════════════════════════
# 3. Translations
# ══════════════════════════════════════════════════════════════════════════════


class TestTranslations:
    def test_matching_locales(self):
        translations = {"en": {"x": {"title": "Hi"}}, "nl": {"x": {"title": "Hoi"}}}
        result = validate_translations(translations)
        assert result.valid is True
        assert result.warnings == []

    def test_missing_and_extra_keys_warn(self):
        translations = {"en": {"x": {"title": "Hi", "body": "B"}}, "nl": {"x": {"title": "Hoi", "footer": "F"}}}
        result = validate_translations(translations)
        assert result.valid is True
        assert any("missing keys: x.body" in w for w in result.warnings)
        assert any("extra keys: x.footer" in w for w in result.warnings)

    def test_single_locale(self):
        assert validate_translations({"en": {"x": {"a": "b"}}}).warnings == []


# ══════════════════════════════════════════════════════════════════════════════
# 4. Serialization / full validation
# ══════════════════════════════════════════════════════════════════════════════


class TestSerialization:
    def test_plugin_with_components_is_serializable(self):
        result = validate_plugin_serialization(make_plugin("concerts"))
        assert result.valid is True
        assert any("contains components" in w for w in result.warnings)

    def test_unserializable_metadata(self):
        result = validate_plugin_serialization(make_plugin("concerts", translations={"en": {"x": object()}}))
        assert result.valid is False

    def test_full_validation_combines(self):
        result = validate_plugin_fully(make_plugin("Bad Id"))
        assert result.valid is False
        assert result.errors

    def test_complete_valid_plugin(self):
        plugin = make_plugin(
            "complete-plugin",
            api_routes=(
                ApiRoute(path="", GET=make_handler("list"), POST=make_handler("create")),
                ApiRoute(path="[id]", GET=make_handler("get"), DELETE=make_handler("delete")),
            ),
            translations={"en": {"complete": {"navName": "Complete"}}, "nl": {"complete": {"navName": "Compleet"}}},
        )
        assert validate_plugin_fully(plugin).valid is True

    def test_combine(self):
        combined = ValidationResult.combine(
            [ValidationResult.build([], ["w1"]), ValidationResult.build(["e1"], ["w2"])]
        )
        assert combined.valid is False
        assert combined.errors == ["e1"]
        assert combined.warnings == ["w1", "w2"]
