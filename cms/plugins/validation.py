"""
Plugin Validation

Static, read-only checks against a PluginDefinition. They never touch the
registry or the state store and are used by the test suite and by the
`cms-plugins validate` command.

Catches:
    1. Missing required fields and malformed ids
    2. Entries whose component/handler is not callable
    3. Route ordering problems (a "[param]" route shadowing a later static one)
    4. Locales with diverging translation keys (warning)
    5. Metadata that cannot be JSON serialized once callables are stripped
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from cms.plugins.matcher import HasPath, is_dynamic_segment, split_path
from cms.plugins.types import HTTP_METHODS, PluginDefinition, definition_to_dict

PLUGIN_ID_PATTERN = re.compile(r"^[a-z][a-z0-9-]*$")


@dataclass
class ValidationResult:
    valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @classmethod
    def build(cls, errors: list[str], warnings: list[str]) -> ValidationResult:
        return cls(valid=not errors, errors=errors, warnings=warnings)

    @classmethod
    def combine(cls, results: Iterable[ValidationResult]) -> ValidationResult:
        results = list(results)
        return cls(
            valid=all(r.valid for r in results),
            errors=[e for r in results for e in r.errors],
            warnings=[w for r in results for w in r.warnings],
        )


def validate_plugin(plugin: PluginDefinition) -> ValidationResult:
    """Validate that a plugin definition is correctly structured."""
    errors: list[str] = []
    warnings: list[str] = []

    if not plugin.id:
        errors.append("Plugin must have an id")
    if not plugin.name:
        errors.append("Plugin must have a name")
    if not plugin.description:
        errors.append("Plugin must have a description")
    if not plugin.version:
        errors.append("Plugin must have a version")

    if plugin.id and not PLUGIN_ID_PATTERN.match(plugin.id):
        errors.append(
            f'Plugin id "{plugin.id}" must be lowercase, start with a letter, '
            "and contain only letters, numbers, and hyphens"
        )

    nav = plugin.admin_navigation
    if nav is not None:
        if not nav.name:
            errors.append("Admin navigation must have a name")
        if not nav.href:
            errors.append("Admin navigation must have an href")
        if not callable(nav.icon):
            errors.append("Admin navigation icon must be a component")

    if plugin.admin_pages:
        if not any(page.path == "" for page in plugin.admin_pages):
            warnings.append('Admin pages should include a root page (path: "") for the main listing')
        for page in plugin.admin_pages:
            if not callable(page.component):
                errors.append(f'Admin page "{page.path}" component must be a component')
        _extend(errors, warnings, validate_route_ordering(plugin.admin_pages, kind="Admin page"))

    if plugin.public_pages:
        if plugin.default_public_path is None:
            warnings.append("Plugin declares public pages but no default public path")
        for page in plugin.public_pages:
            if not callable(page.component):
                errors.append(f'Public page "{page.path}" component must be a component')
        _extend(errors, warnings, validate_route_ordering(plugin.public_pages, kind="Public page"))

    if plugin.api_routes:
        _extend(errors, warnings, validate_api_route_ordering(plugin.api_routes))
        for route in plugin.api_routes:
            handlers = [getattr(route, m) for m in HTTP_METHODS]
            if not any(callable(h) for h in handlers):
                errors.append(f'API route "{route.path}" must have at least one HTTP method handler')
            for method, handler in zip(HTTP_METHODS, handlers):
                if handler is not None and not callable(handler):
                    errors.append(f'API route "{route.path}" {method} handler must be callable')

    if plugin.homepage_section is not None and not callable(plugin.homepage_section.component):
        errors.append("Homepage section component must be a component")

    _extend(errors, warnings, validate_settings_fields(plugin))
    _extend(errors, warnings, validate_translations(plugin.translations))

    return ValidationResult.build(errors, warnings)


def validate_route_ordering(entries: Sequence[HasPath], kind: str = "Route") -> ValidationResult:
    """
    Validate that static routes come before same-length dynamic ones.

    A single dynamic segment route such as "[id]" matches every one-segment
    request, so any one-segment static route declared after it ("upload")
    can never be reached. Routes with different segment counts never
    conflict.
    """
    errors: list[str] = []

    for i, entry in enumerate(entries):
        segments = split_path(entry.path)
        if len(segments) != 1 or not is_dynamic_segment(segments[0]):
            continue
        for later in entries[i + 1:]:
            later_segments = split_path(later.path)
            if len(later_segments) == 1 and not is_dynamic_segment(later_segments[0]):
                errors.append(
                    f'{kind} ordering issue: Static route "{later.path}" should come BEFORE '
                    f'dynamic route "{entry.path}" to avoid incorrect matching'
                )

    return ValidationResult.build(errors, [])


def validate_api_route_ordering(routes: Sequence[HasPath]) -> ValidationResult:
    return validate_route_ordering(routes, kind="API route")


def _flatten_keys(messages: Mapping[str, Any], prefix: str = "") -> set[str]:
    keys: set[str] = set()
    for key, value in messages.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, Mapping):
            keys |= _flatten_keys(value, f"{dotted}.")
        else:
            keys.add(dotted)
    return keys


def validate_translations(translations: Mapping[str, Mapping[str, Any]]) -> ValidationResult:
    """Warn when locales do not declare the same message keys."""
    warnings: list[str] = []
    locales = list(translations)
    if len(locales) < 2:
        return ValidationResult.build([], warnings)

    reference = _flatten_keys(translations[locales[0]])
    for locale in locales[1:]:
        keys = _flatten_keys(translations[locale])
        missing = sorted(reference - keys)
        extra = sorted(keys - reference)
        if missing:
            warnings.append(f'Translation locale "{locale}" is missing keys: {", ".join(missing)}')
        if extra:
            warnings.append(f'Translation locale "{locale}" has extra keys: {", ".join(extra)}')

    return ValidationResult.build([], warnings)


def validate_settings_fields(plugin: PluginDefinition) -> ValidationResult:
    errors: list[str] = []
    warnings: list[str] = []
    seen: set[str] = set()
    for f in plugin.settings_fields:
        if not f.key:
            errors.append("Settings field must have a key")
        elif f.key in seen:
            errors.append(f'Settings field "{f.key}" is declared more than once')
        seen.add(f.key)
        if f.type == "select" and not f.options:
            errors.append(f'Settings field "{f.key}" of type select must declare options')
        if f.required and f.default is None:
            warnings.append(f'Required settings field "{f.key}" has no default value')
    return ValidationResult.build(errors, warnings)


def validate_plugin_serialization(plugin: PluginDefinition) -> ValidationResult:
    """
    Check that a plugin's metadata survives a JSON round trip once every
    callable field is stripped, as the admin API does.
    """
    errors: list[str] = []
    warnings: list[str] = []

    try:
        json.loads(json.dumps(definition_to_dict(plugin)))
    except (TypeError, ValueError) as exc:
        errors.append(f"Plugin metadata cannot be JSON serialized: {exc}")

    component_fields = []
    if plugin.admin_navigation is not None and plugin.admin_navigation.icon is not None:
        component_fields.append("admin_navigation")
    if plugin.admin_pages:
        component_fields.append("admin_pages")
    if plugin.public_pages:
        component_fields.append("public_pages")
    if plugin.api_routes:
        component_fields.append("api_routes")
    if plugin.homepage_section is not None:
        component_fields.append("homepage_section")
    for name in component_fields:
        warnings.append(f"{name} contains components - ensure API responses exclude component properties")

    return ValidationResult.build(errors, warnings)


def validate_plugin_fully(plugin: PluginDefinition) -> ValidationResult:
    """Run all validations on a plugin."""
    return ValidationResult.combine([validate_plugin(plugin), validate_plugin_serialization(plugin)])


def _extend(errors: list[str], warnings: list[str], result: ValidationResult) -> None:
    errors.extend(result.errors)
    warnings.extend(result.warnings)
