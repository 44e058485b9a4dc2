"""Exceptions raised while loading and querying override registries."""

from __future__ import annotations

from collections.abc import Sequence


class GovmocksError(Exception):
    """Base exception for all govmocks errors."""


class ConfigError(GovmocksError):
    """Base exception for all configuration-related errors."""


class ConfigParseError(ConfigError):
    """Raised when an override source cannot be parsed."""

    def __init__(self, message: str, *, source: str | None = None, line: int | None = None) -> None:
        self.reason = message
        self.source = source
        self.line = line
        location = ""
        if source is not None:
            location = f"{source}:{line}: " if line is not None else f"{source}: "
        super().__init__(f"{location}{message}")


class InvalidKeyPathError(ConfigParseError):
    """Raised when a key path is empty or contains an invalid segment."""


class ConfigValidationError(ConfigParseError):
    """Raised when an override value breaks an endpoint or credential rule.

    Secret values are never part of the message.
    """

    def __init__(self, key_path: str, reason: str, *, errors: Sequence[str] | None = None) -> None:
        self.key_path = key_path
        self.errors = list(errors) if errors else [f"{key_path}: {reason}"]
        super().__init__(f"Invalid value for '{key_path}': {reason}")


class SourceNotFoundError(ConfigError):
    """Raised when an override source file does not exist."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Override source not found: {path}")


class KeyNotFoundError(ConfigError, KeyError):
    """Raised when a key path is not present in a registry."""

    def __init__(self, key_path: str) -> None:
        self.key_path = key_path
        super().__init__(f"Key not found: '{key_path}'")

    def __str__(self) -> str:
        return str(self.args[0])
