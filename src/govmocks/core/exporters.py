"""Render a registry as override text or as Drupal ``settings.local.php`` assignments."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from govmocks.core.keypaths import KeyPath, format_key_path, is_prefix
from govmocks.core.registry import ConfigOverrideRegistry
from govmocks.core.settings import INTEGRATIONS

MASK = "********"
_SECRET_MARKERS = ("secret", "password")

_TOML_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\b": "\\b",
    "\t": "\\t",
    "\n": "\\n",
    "\f": "\\f",
    "\r": "\\r",
}
# DEL is not allowed raw in TOML; the others are line breaks to most editors.
_ALWAYS_ESCAPED = frozenset({"\x7f", "\x85", "\u2028", "\u2029"})


def is_secret_key(segment: str) -> bool:
    lowered = segment.lower()
    return any(marker in lowered for marker in _SECRET_MARKERS)


def display_value(key_path: KeyPath, value: Any, *, reveal: bool = False) -> str:
    """Format a value for humans, masking secrets unless ``reveal`` is set."""
    if not reveal and key_path and is_secret_key(key_path[-1]) and value:
        return MASK
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Mapping):
        return "{}" if not value else render_toml_value(value)
    return str(value)


def _toml_string(value: str) -> str:
    chars = []
    for ch in value:
        if ch in _TOML_ESCAPES:
            chars.append(_TOML_ESCAPES[ch])
        elif ord(ch) < 0x20 or ch in _ALWAYS_ESCAPED:
            chars.append(f"\\u{ord(ch):04X}")
        else:
            chars.append(ch)
    return '"' + "".join(chars) + '"'


def render_toml_value(value: Any) -> str:
    """Render a value as a TOML inline literal."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return _toml_string(value)
    if isinstance(value, Mapping):
        if not value:
            return "{}"
        items = ", ".join(f"{key} = {render_toml_value(item)}" for key, item in value.items())
        return "{ " + items + " }"
    msg = f"Cannot render value of type {type(value).__name__}"
    raise TypeError(msg)


def config_name_of(key_path: KeyPath) -> KeyPath:
    """Return the Drupal configuration object name a key path belongs to.

    Known integrations use their full config name (which itself contains
    dots); other paths are grouped by their first two segments.
    """
    for model in INTEGRATIONS:
        if is_prefix(model.config_name, key_path):
            return model.config_name
    return key_path[:2] if len(key_path) > 2 else key_path[:1]


def render_overrides(registry: ConfigOverrideRegistry) -> str:
    """Render the registry in the line-based override format.

    Loading the result yields a registry equal to ``registry``.
    """
    lines = [f"# Generated from {registry.source_name}"]
    current_group: KeyPath | None = None
    for entry in registry.entries:
        group = config_name_of(entry.key_path)
        if group != current_group:
            lines.append("")
            current_group = group
        lines.append(f"{entry.dotted_path} = {render_toml_value(entry.value)}")
    return "\n".join(lines) + "\n"


def _php_string(value: str) -> str:
    return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"


def render_php_value(value: Any) -> str:
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, str):
        return _php_string(value)
    if isinstance(value, Mapping):
        items = ", ".join(f"{_php_string(key)} => {render_php_value(item)}" for key, item in value.items())
        return f"[{items}]"
    msg = f"Cannot render value of type {type(value).__name__}"
    raise TypeError(msg)


def render_drupal_settings(registry: ConfigOverrideRegistry) -> str:
    """Render the registry as ``$config[...]`` assignments for settings.local.php."""
    lines = [
        "<?php",
        "",
        "/**",
        f" * Configuration overrides generated from {registry.source_name}.",
        " *",
        " * Copy relevant sections to your sites/default/settings.local.php",
        " */",
    ]
    current_group: KeyPath | None = None
    for entry in registry.entries:
        group = config_name_of(entry.key_path)
        if group != current_group:
            lines.append("")
            current_group = group
        keys = [format_key_path(group), *entry.key_path[len(group) :]]
        target = "".join(f"[{_php_string(key)}]" for key in keys)
        lines.append(f"$config{target} = {render_php_value(entry.value)};")
    return "\n".join(lines) + "\n"
