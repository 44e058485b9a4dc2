"""Build-then-swap holder for a live registry."""

from __future__ import annotations

import logging
import threading

from govmocks.core.registry import ConfigOverrideRegistry, load_layered
from govmocks.core.source import Source

logger = logging.getLogger(__name__)


class RegistryHandle:
    """Holds the registry a running service reads from.

    Readers call :attr:`current` and keep the returned registry for as long
    as they need a consistent view. :meth:`reload` builds and validates the
    replacement completely before the reference is swapped, so readers never
    see a partially updated configuration. A failed reload leaves the
    previous registry in place.
    """

    def __init__(self, registry: ConfigOverrideRegistry) -> None:
        self._registry = registry
        self._lock = threading.Lock()

    @property
    def current(self) -> ConfigOverrideRegistry:
        return self._registry

    def swap(self, registry: ConfigOverrideRegistry) -> ConfigOverrideRegistry:
        """Replace the current registry and return the previous one."""
        with self._lock:
            previous, self._registry = self._registry, registry
        return previous

    def reload(self, *sources: Source) -> ConfigOverrideRegistry:
        registry = load_layered(*sources)
        self.swap(registry)
        logger.info("Reloaded override registry from %s", registry.source_name)
        return registry
