"""Merging an override layer onto a base configuration."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def thaw(value: Any) -> Any:
    """Return a plain, mutable copy of a (possibly read-only) nested mapping."""
    if isinstance(value, Mapping):
        return {key: thaw(item) for key, item in value.items()}
    return value


def overlay(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Merge ``override`` into a copy of ``base``, with override values winning.

    Mappings present on both sides are merged key by key; any other value in
    ``override`` replaces the base value outright. Keys only present in
    ``base`` are kept. Neither input is modified.
    """
    merged = thaw(base)

    for key, value in override.items():
        current = merged.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping) and value:
            merged[key] = overlay(current, value)
        else:
            merged[key] = thaw(value)

    return merged
