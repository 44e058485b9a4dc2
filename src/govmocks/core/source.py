"""Readers that turn declarative override sources into :class:`ConfigEntry` records.

Three source shapes are understood:

- the line-based override format (``key.path = value``, TOML inline values,
  ``#`` or ``//`` comments and optional ``[section]`` prefixes),
- YAML or TOML files holding a nested mapping,
- in-memory mappings.
"""

from __future__ import annotations

import logging
import tomllib
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

import yaml

from govmocks.core.exceptions import ConfigParseError, SourceNotFoundError
from govmocks.core.keypaths import KeyPath, format_key_path, parse_key_path

logger = logging.getLogger(__name__)

ConfigValue = Union[str, bool, Mapping[str, "ConfigValue"]]
Source = Union[str, Path, Mapping[str, Any]]

YAML_SUFFIXES = frozenset({".yml", ".yaml"})
TOML_SUFFIXES = frozenset({".toml"})
_COMMENT_PREFIXES = ("#", "//")


@dataclass(frozen=True)
class ConfigEntry:
    """A single ``key_path = value`` assignment."""

    key_path: KeyPath
    value: ConfigValue
    line: int | None = field(default=None, compare=False)

    @property
    def dotted_path(self) -> str:
        return format_key_path(self.key_path)


def check_value(value: Any, *, source: str | None = None, line: int | None = None) -> ConfigValue:
    """Ensure a value is a string, a boolean or a mapping of such values."""
    if isinstance(value, (str, bool)):
        return value
    if isinstance(value, Mapping):
        for key, item in value.items():
            parse_key_path([key])
            check_value(item, source=source, line=line)
        return value
    msg = f"Unsupported value type {type(value).__name__}; expected a string, boolean or table"
    raise ConfigParseError(msg, source=source, line=line)


def _parse_value(raw: str, *, source: str, line: int) -> ConfigValue:
    try:
        value = tomllib.loads(f"value = {raw}")["value"]
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid value {raw!r}: {e}"
        raise ConfigParseError(msg, source=source, line=line) from e
    return check_value(value, source=source, line=line)


def _parse_section(text: str, *, source: str, line: int) -> KeyPath:
    end = text.find("]")
    if end == -1:
        msg = f"Unterminated section header {text!r}"
        raise ConfigParseError(msg, source=source, line=line)
    trailing = text[end + 1 :].strip()
    if trailing and not trailing.startswith(_COMMENT_PREFIXES):
        msg = f"Unexpected text after section header: {trailing!r}"
        raise ConfigParseError(msg, source=source, line=line)
    inner = text[1:end].strip()
    if not inner:
        return ()
    try:
        return parse_key_path(inner)
    except ConfigParseError as e:
        raise ConfigParseError(e.reason, source=source, line=line) from e


def iter_override_lines(text: str, *, source_name: str = "<string>") -> Iterator[ConfigEntry]:
    """Yield entries from override text in the order they are written.

    Raises:
        ConfigParseError: On the first malformed line.

    """
    section: KeyPath = ()
    # splitlines() would also break on U+2028 and friends inside quoted values
    for lineno, raw_line in enumerate(text.split("\n"), start=1):
        stripped = raw_line.rstrip("\r").strip()
        if not stripped or stripped.startswith(_COMMENT_PREFIXES):
            continue

        if stripped.startswith("["):
            section = _parse_section(stripped, source=source_name, line=lineno)
            continue

        key, sep, raw_value = stripped.partition("=")
        if not sep:
            msg = f"Expected 'key = value', got {stripped!r}"
            raise ConfigParseError(msg, source=source_name, line=lineno)
        if not raw_value.strip():
            msg = f"Missing value for key {key.strip()!r}"
            raise ConfigParseError(msg, source=source_name, line=lineno)

        try:
            key_path = section + parse_key_path(key)
        except ConfigParseError as e:
            raise ConfigParseError(e.reason, source=source_name, line=lineno) from e

        value = _parse_value(raw_value.strip(), source=source_name, line=lineno)
        yield ConfigEntry(key_path=key_path, value=value, line=lineno)


def parse_overrides(text: str, *, source_name: str = "<string>") -> list[ConfigEntry]:
    """Parse override text into entries (duplicates are kept, in order)."""
    return list(iter_override_lines(text, source_name=source_name))


def entries_from_mapping(
    data: Mapping[str, Any], *, prefix: KeyPath = (), source_name: str | None = None
) -> list[ConfigEntry]:
    """Flatten a nested mapping into leaf entries.

    Empty mappings are kept as leaves so that they survive a round trip.
    """
    entries: list[ConfigEntry] = []
    for key, value in data.items():
        try:
            path = prefix + parse_key_path(key if isinstance(key, str) else [key])
        except ConfigParseError as e:
            raise ConfigParseError(e.reason, source=source_name) from e
        if isinstance(value, Mapping) and value:
            entries.extend(entries_from_mapping(value, prefix=path, source_name=source_name))
        else:
            entries.append(ConfigEntry(key_path=path, value=check_value(value, source=source_name)))
    return entries


def _load_yaml(path: Path) -> Any:
    try:
        with path.open(encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except UnicodeDecodeError as e:
        msg = f"Override source is not valid UTF-8: {e}"
        raise ConfigParseError(msg, source=str(path)) from e
    except yaml.YAMLError as e:
        msg = f"Invalid YAML: {e}"
        raise ConfigParseError(msg, source=str(path)) from e


def _load_toml(path: Path) -> Any:
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except UnicodeDecodeError as e:
        msg = f"Override source is not valid UTF-8: {e}"
        raise ConfigParseError(msg, source=str(path)) from e
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML: {e}"
        raise ConfigParseError(msg, source=str(path)) from e


def read_path(path: Path) -> list[ConfigEntry]:
    """Read entries from a file, choosing the format from its suffix."""
    if not path.is_file():
        raise SourceNotFoundError(str(path))

    logger.info("Loading overrides from %s", path)
    suffix = path.suffix.lower()
    if suffix in YAML_SUFFIXES or suffix in TOML_SUFFIXES:
        data = _load_yaml(path) if suffix in YAML_SUFFIXES else _load_toml(path)
        if not isinstance(data, Mapping):
            msg = f"Configuration root must be a mapping, got {type(data).__name__}"
            raise ConfigParseError(msg, source=str(path))
        return entries_from_mapping(data, source_name=str(path))

    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        msg = f"Override source is not valid UTF-8: {e}"
        raise ConfigParseError(msg, source=str(path)) from e
    return parse_overrides(text, source_name=str(path))


def read_source(source: Source) -> list[ConfigEntry]:
    """Return the entries of a path, override text or mapping source."""
    if isinstance(source, Path):
        return read_path(source)
    if isinstance(source, str):
        return parse_overrides(source)
    if isinstance(source, Mapping):
        return entries_from_mapping(source, source_name="<mapping>")
    msg = f"Unsupported override source type: {type(source).__name__}"
    raise TypeError(msg)


def describe_source(source: Source) -> str:
    if isinstance(source, Path):
        return str(source)
    if isinstance(source, str):
        return "<string>"
    return "<mapping>"
