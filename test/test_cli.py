"""
Tests for the cms-plugins command line tool
"""

from unittest.mock import patch

from utils.plugins import factory_for, failing_factory, make_plugin

import cms.cli as cli
from cms.plugins.loader import PluginLoader
from cms.plugins.manager import PluginSystem
from cms.plugins.registry import PluginRegistry


def _loader(modules) -> PluginLoader:
    return PluginLoader(PluginRegistry(), modules)


class TestValidateCommand:
    def test_builtin_plugins_are_valid(self, capsys):
        assert cli.main(["validate"]) == 0
        out = capsys.readouterr().out
        assert "concerts: OK" in out
        assert "photos: OK" in out

    def test_unknown_plugin(self, capsys):
        assert cli.main(["validate", "ghost"]) == 1
        assert "ghost: unknown plugin" in capsys.readouterr().out

    def test_invalid_plugin_prints_errors(self, capsys):
        plugin = make_plugin("bad", name="")
        with patch.object(cli, "get_loader", return_value=_loader({"bad": factory_for(plugin)})):
            assert cli.main(["validate"]) == 1
        out = capsys.readouterr().out
        assert "bad: INVALID" in out
        assert "  error: Plugin must have a name" in out

    def test_load_failure(self, capsys):
        with patch.object(cli, "get_loader", return_value=_loader({"broken": failing_factory("kaput")})):
            assert cli.main(["validate", "broken"]) == 1
        assert "broken: failed to load (kaput)" in capsys.readouterr().out


class TestListCommand:
    def test_lists_plugins_with_state(self, capsys, file_backend):
        system = PluginSystem(modules={"demo": factory_for(make_plugin("demo"))}, backend=file_backend)
        with patch.object(PluginSystem, "from_settings", return_value=system):
            assert cli.main(["list"]) == 0
        out = capsys.readouterr().out
        assert "demo" in out
        assert "/demo" in out
        assert "No" in out

    def test_no_plugins(self, capsys, file_backend):
        system = PluginSystem(modules={}, backend=file_backend)
        with patch.object(PluginSystem, "from_settings", return_value=system):
            assert cli.main(["list"]) == 0
        assert "No plugins found." in capsys.readouterr().out


def test_no_command_prints_help(capsys):
    assert cli.main([]) == 1
    assert "cms-plugins" in capsys.readouterr().out
