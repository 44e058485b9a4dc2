"""Immutable registry of configuration overrides.

A registry is built once from a declarative source: entries are applied in
order (last write wins), every endpoint and credential rule is checked, and
the result is frozen. Reloading means building a new registry; see
:mod:`govmocks.core.reload`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping, Sequence
from types import MappingProxyType
from typing import Any, TypeVar

from pydantic import ValidationError as PydanticValidationError

from govmocks.core.exceptions import ConfigParseError, ConfigValidationError, KeyNotFoundError
from govmocks.core.keypaths import KeyPath, format_key_path, parse_key_path
from govmocks.core.overlay import overlay, thaw
from govmocks.core.settings import (
    INTEGRATIONS,
    IntegrationSettings,
    OpenIDConnectProviderSettings,
    ServiceplatformenSettings,
    check_endpoint_url,
    is_endpoint_key,
)
from govmocks.core.source import (
    ConfigEntry,
    ConfigValue,
    Source,
    describe_source,
    entries_from_mapping,
    read_source,
)

logger = logging.getLogger(__name__)

_SettingsT = TypeVar("_SettingsT", bound=IntegrationSettings)


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    return value


def _assign(tree: dict[str, Any], entry: ConfigEntry, source_name: str) -> None:
    node = tree
    path = entry.key_path
    for depth, segment in enumerate(path[:-1], start=1):
        child = node.get(segment)
        if child is None:
            child = node[segment] = {}
        elif not isinstance(child, dict):
            msg = (
                f"Cannot assign '{entry.dotted_path}': "
                f"'{format_key_path(path[:depth])}' already holds a scalar value"
            )
            raise ConfigParseError(msg, source=source_name, line=entry.line)
        node = child

    if path[-1] in node:
        logger.debug("Overriding earlier value for %s (line %s)", entry.dotted_path, entry.line)
    node[path[-1]] = thaw(entry.value)


def _build_tree(entries: Iterable[ConfigEntry], source_name: str) -> dict[str, Any]:
    tree: dict[str, Any] = {}
    for entry in entries:
        _assign(tree, entry, source_name)
    return tree


def _iter_leaves(tree: Mapping[str, Any], prefix: KeyPath = ()) -> Iterator[ConfigEntry]:
    for key, value in tree.items():
        path = prefix + (key,)
        if isinstance(value, Mapping) and value:
            yield from _iter_leaves(value, path)
        else:
            yield ConfigEntry(key_path=path, value=value)


def _iter_nodes(tree: Mapping[str, Any], prefix: KeyPath = ()) -> Iterator[tuple[KeyPath, Any]]:
    for key, value in tree.items():
        path = prefix + (key,)
        yield path, value
        if isinstance(value, Mapping):
            yield from _iter_nodes(value, path)


def _check_endpoints(tree: Mapping[str, Any]) -> None:
    # Tables are visited too: a table stored under an endpoint key is invalid.
    for path, value in _iter_nodes(tree):
        if not is_endpoint_key(path[-1]):
            continue
        try:
            check_endpoint_url(value)
        except ValueError as e:
            raise ConfigValidationError(format_key_path(path), str(e)) from e


def _lookup(tree: Mapping[str, Any], path: KeyPath) -> Any:
    node: Any = tree
    for segment in path:
        if not isinstance(node, Mapping) or segment not in node:
            raise KeyNotFoundError(format_key_path(path))
        node = node[segment]
    return node


def _build_settings(model: type[_SettingsT], tree: Mapping[str, Any]) -> _SettingsT | None:
    try:
        section = _lookup(tree, model.config_name)
    except KeyNotFoundError:
        return None

    name = format_key_path(model.config_name)
    if not isinstance(section, Mapping):
        raise ConfigValidationError(name, "expected a table of settings")

    try:
        return model.model_validate(thaw(section))
    except PydanticValidationError as e:
        # Only loc and msg are reported: the input may be a secret.
        errors = [
            f"{format_key_path((*model.config_name, *map(str, err['loc'])))}: {err['msg']}"
            for err in e.errors()
        ]
        first = e.errors()[0]
        key_path = format_key_path((*model.config_name, *map(str, first["loc"])))
        raise ConfigValidationError(key_path, first["msg"], errors=errors) from e


class ConfigOverrideRegistry:
    """Read-only mapping from key paths to override values.

    Instances are safe to share between threads: nothing is mutated after
    construction.
    """

    __slots__ = ("_tree", "_source_name", "_integrations")

    def __init__(self, entries: Iterable[ConfigEntry] = (), *, source_name: str = "<entries>") -> None:
        tree = _build_tree(entries, source_name)
        _check_endpoints(tree)
        integrations = {model: _build_settings(model, tree) for model in INTEGRATIONS}

        self._tree: Mapping[str, Any] = _freeze(tree)
        self._source_name = source_name
        self._integrations: Mapping[type[IntegrationSettings], IntegrationSettings | None] = MappingProxyType(
            integrations
        )

    @classmethod
    def load(cls, source: Source) -> ConfigOverrideRegistry:
        """Parse and validate ``source`` into a registry.

        Raises:
            ConfigParseError: If the source is malformed.
            ConfigValidationError: If an endpoint or credential is invalid.
            SourceNotFoundError: If a source file does not exist.

        """
        source_name = describe_source(source)
        registry = cls(read_source(source), source_name=source_name)
        logger.debug("Loaded %d override entries from %s", len(registry), source_name)
        return registry

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, source_name: str = "<mapping>") -> ConfigOverrideRegistry:
        return cls(entries_from_mapping(data, source_name=source_name), source_name=source_name)

    @property
    def source_name(self) -> str:
        return self._source_name

    @property
    def entries(self) -> tuple[ConfigEntry, ...]:
        """Leaf entries in first-assignment order."""
        return tuple(_iter_leaves(self._tree))

    @property
    def openid_connect(self) -> OpenIDConnectProviderSettings | None:
        return self.settings_for(OpenIDConnectProviderSettings)

    @property
    def serviceplatformen(self) -> ServiceplatformenSettings | None:
        return self.settings_for(ServiceplatformenSettings)

    def settings_for(self, model: type[_SettingsT]) -> _SettingsT | None:
        """Return the typed settings for an integration, or None if not configured."""
        return self._integrations.get(model)  # type: ignore[return-value]

    def get(self, key_path: str | Sequence[str]) -> ConfigValue:
        """Return the value stored at exactly ``key_path``.

        Intermediate paths return their read-only subtree.

        Raises:
            KeyNotFoundError: If nothing is stored at that path.

        """
        try:
            path = parse_key_path(key_path)
        except ConfigParseError as e:
            raise KeyNotFoundError(str(key_path)) from e
        return _lookup(self._tree, path)

    def as_dict(self) -> dict[str, Any]:
        """Return a mutable deep copy of the nested configuration."""
        return thaw(self._tree)

    def overlay(self, other: ConfigOverrideRegistry | Mapping[str, Any]) -> ConfigOverrideRegistry:
        """Return a new registry with ``other`` layered on top of this one."""
        if isinstance(other, ConfigOverrideRegistry):
            other_tree, other_name = other.as_dict(), other.source_name
        else:
            other_name = "<mapping>"
            other_tree = _build_tree(entries_from_mapping(other, source_name=other_name), other_name)
        return ConfigOverrideRegistry.from_mapping(
            overlay(self._tree, other_tree),
            source_name=f"{self._source_name} + {other_name}",
        )

    def __contains__(self, key_path: object) -> bool:
        if not isinstance(key_path, (str, tuple, list)):
            return False
        try:
            self.get(key_path)
        except KeyNotFoundError:
            return False
        return True

    def __len__(self) -> int:
        return sum(1 for _ in _iter_leaves(self._tree))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConfigOverrideRegistry):
            return NotImplemented
        return self.as_dict() == other.as_dict()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(source={self._source_name!r}, entries={len(self)})"


def load(source: Source) -> ConfigOverrideRegistry:
    """Load a single override source. See :meth:`ConfigOverrideRegistry.load`."""
    return ConfigOverrideRegistry.load(source)


def load_layered(*sources: Source) -> ConfigOverrideRegistry:
    """Load several sources and overlay them left to right."""
    if not sources:
        msg = "At least one override source is required"
        raise ValueError(msg)

    # Layers are merged before validation: a credential may live in one layer
    # and the flag that requires it in another.
    merged: dict[str, Any] = {}
    for source in sources:
        name = describe_source(source)
        merged = overlay(merged, _build_tree(read_source(source), name))

    names = " + ".join(describe_source(source) for source in sources)
    registry = ConfigOverrideRegistry.from_mapping(merged, source_name=names)
    logger.info("Loaded %d override entries from %d source(s)", len(registry), len(sources))
    return registry
