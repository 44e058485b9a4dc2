"""govmocks: validated configuration overrides for Danish government mock services."""

from govmocks.core.exceptions import (
    ConfigError,
    ConfigParseError,
    ConfigValidationError,
    KeyNotFoundError,
    SourceNotFoundError,
)
from govmocks.core.overlay import overlay
from govmocks.core.registry import ConfigOverrideRegistry, load, load_layered
from govmocks.core.reload import RegistryHandle

__all__ = [
    "ConfigError",
    "ConfigOverrideRegistry",
    "ConfigParseError",
    "ConfigValidationError",
    "KeyNotFoundError",
    "RegistryHandle",
    "SourceNotFoundError",
    "load",
    "load_layered",
    "overlay",
]

__version__ = "0.1.0"
