"""
Plugin registry tests
"""

from __future__ import annotations

from utils.plugins import make_plugin

from cms.plugins.registry import PluginRegistry


class TestPluginRegistry:
    def test_empty_registry(self):
        registry = PluginRegistry()
        assert len(registry) == 0
        assert registry.all_plugins() == []
        assert registry.get("missing") is None

    def test_register_and_get(self):
        registry = PluginRegistry()
        plugin = make_plugin("concerts")
        assert registry.register(plugin) is True
        assert registry.get("concerts") is plugin
        assert registry.is_registered("concerts")
        assert "concerts" in registry

    def test_first_registration_wins(self):
        registry = PluginRegistry()
        first = make_plugin("concerts", name="First")
        second = make_plugin("concerts", name="Second")
        registry.register(first)
        assert registry.register(second) is False
        assert registry.get("concerts").name == "First"
        assert len(registry) == 1

    def test_all_plugins_in_registration_order(self):
        registry = PluginRegistry()
        for plugin_id in ("photos", "concerts", "blog"):
            registry.register(make_plugin(plugin_id))
        assert [p.id for p in registry.all_plugins()] == ["photos", "concerts", "blog"]
        assert [p.id for p in registry] == ["photos", "concerts", "blog"]

    def test_unregister(self):
        registry = PluginRegistry()
        registry.register(make_plugin("concerts"))
        registry.unregister("concerts")
        registry.unregister("never-registered")
        assert registry.get("concerts") is None

    def test_clear(self):
        registry = PluginRegistry()
        registry.register(make_plugin("concerts"))
        registry.register(make_plugin("photos"))
        registry.clear()
        assert len(registry) == 0
        assert registry.register(make_plugin("concerts")) is True
