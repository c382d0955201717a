"""
Plugin management CLI.

    cms-plugins list              list available plugins and their state
    cms-plugins validate [ids]    validate plugin definitions (all by default)

`validate` exits with status 1 when any plugin has errors or fails to load.
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from cms.config import settings
from cms.exceptions import ModuleLoadError
from cms.plugins.loader import PluginLoader
from cms.plugins.manager import PluginSystem
from cms.plugins.modules import build_plugin_modules
from cms.plugins.registry import PluginRegistry
from cms.plugins.validation import validate_plugin_fully


def get_loader() -> PluginLoader:
    """Create a loader over the configured plugin modules."""
    return PluginLoader(PluginRegistry(), build_plugin_modules(settings.extra_plugin_modules))


async def _list(system: PluginSystem) -> int:
    instances = await system.all_plugins()

    if not instances:
        print("No plugins found.")
        return 0

    print(f"{'ID':<20} {'Name':<25} {'Version':<10} {'Enabled':<8} {'Public path'}")
    print("-" * 80)
    for instance in instances:
        definition = instance.definition
        enabled = "Yes" if instance.enabled else "No"
        print(
            f"{definition.id:<20} {definition.name:<25} {definition.version:<10} "
            f"{enabled:<8} {instance.effective_public_path or '-'}"
        )
    return 0


async def _validate(loader: PluginLoader, plugin_ids: list[str]) -> int:
    failed = False
    for plugin_id in plugin_ids or loader.available_plugin_ids():
        if not loader.has_module(plugin_id):
            print(f"{plugin_id}: unknown plugin")
            failed = True
            continue
        try:
            definition = await loader.load_definition(plugin_id)
        except ModuleLoadError as exc:
            print(f"{plugin_id}: failed to load ({exc.details.get('reason', exc.message)})")
            failed = True
            continue

        result = validate_plugin_fully(definition)
        print(f"{plugin_id}: {'OK' if result.valid else 'INVALID'}")
        for error in result.errors:
            print(f"  error: {error}")
        for warning in result.warnings:
            print(f"  warning: {warning}")
        failed = failed or not result.valid
    return 1 if failed else 0


def cmd_list(args) -> int:
    """List available plugins with their enabled state."""
    return asyncio.run(_list(PluginSystem.from_settings(settings)))


def cmd_validate(args) -> int:
    """Validate plugin definitions."""
    return asyncio.run(_validate(get_loader(), args.plugin_ids))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cms-plugins", description="Plugin management tool")
    subparsers = parser.add_subparsers(dest="command")

    p_list = subparsers.add_parser("list", help="List available plugins")
    p_list.set_defaults(func=cmd_list)

    p_validate = subparsers.add_parser("validate", help="Validate plugin definitions")
    p_validate.add_argument("plugin_ids", nargs="*", help="Plugin IDs (default: all)")
    p_validate.set_defaults(func=cmd_validate)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return 1
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
