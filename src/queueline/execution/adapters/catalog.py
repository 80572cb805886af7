"""Adapter Catalog — identifier → adapter factory lookup.

Configurations name their backend with a string (``adapter = "Job"``).
The catalog maps that identifier to a factory, replacing dynamic class
loading by name: only factories that were explicitly registered can be
instantiated.

    AdapterCatalog
      ├── .register(name, factory)  ─ store factory
      ├── .create(name, settings)   ─ build an adapter instance
      ├── .get(name)                ─ lookup by identifier
      ├── .list_adapters()          ─ all identifiers
      └── .has(name)                ─ existence check

    register_adapter(name)     ─ decorator, uses the default catalog
    get_default_catalog()      ─ module-level singleton with built-ins
    reset_default_catalog()    ─ clear for testing
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Mapping
from typing import Any

from queueline.core.errors import AdapterNotFound
from queueline.core.logging import get_logger

from .protocol import QueueAdapter

logger = get_logger(__name__)

AdapterFactory = Callable[[Mapping[str, Any]], QueueAdapter]


class AdapterCatalog:
    """Injectable adapter factory table.

    Can be passed to ConfigRegistry for:
    - Testing (isolated catalogs per test)
    - Plugins (third-party adapters registered at startup)

    Example:
        >>> catalog = AdapterCatalog()
        >>> catalog.register("Stub", StubAdapter)
        >>> adapter = catalog.create("Stub", {"servers": ["localhost"]})
    """

    def __init__(self):
        self._factories: dict[str, AdapterFactory] = {}
        self._lock = threading.Lock()

    def register(self, name: str, factory: AdapterFactory) -> None:
        """Register *factory* under identifier *name*."""
        with self._lock:
            self._factories[name] = factory
        logger.debug("adapter_registered", adapter=name)

    def unregister(self, name: str) -> bool:
        with self._lock:
            return self._factories.pop(name, None) is not None

    def has(self, name: str) -> bool:
        with self._lock:
            return name in self._factories

    def get(self, name: str, config_name: str | None = None) -> AdapterFactory:
        """Get a factory.

        Raises:
            AdapterNotFound: If nothing is registered under *name*
        """
        with self._lock:
            if name not in self._factories:
                raise AdapterNotFound(name, sorted(self._factories), name=config_name)
            return self._factories[name]

    def create(self, name: str, settings: Mapping[str, Any]) -> QueueAdapter:
        """Build an adapter from the flat configuration *settings*."""
        factory = self.get(name, config_name=settings.get("name"))
        return factory(settings)

    def list_adapters(self) -> list[str]:
        with self._lock:
            return sorted(self._factories)

    def clear(self) -> None:
        """Clear all factories (for testing)."""
        with self._lock:
            self._factories.clear()


# === GLOBAL DEFAULT CATALOG ===

_default_catalog: AdapterCatalog | None = None


def _builtin_catalog() -> AdapterCatalog:
    from .job import JobAdapter
    from .stub import StubAdapter

    catalog = AdapterCatalog()
    catalog.register("Job", JobAdapter)
    catalog.register("Stub", StubAdapter)
    return catalog


def get_default_catalog() -> AdapterCatalog:
    """Get the global adapter catalog.

    Creates it lazily on first access, with the built-in adapters.
    """
    global _default_catalog
    if _default_catalog is None:
        _default_catalog = _builtin_catalog()
    return _default_catalog


def reset_default_catalog() -> None:
    """Reset the global catalog (for testing)."""
    global _default_catalog
    _default_catalog = None


def register_adapter(name: str, catalog: AdapterCatalog | None = None):
    """Decorator to register an adapter class or factory.

    Example:
        >>> @register_adapter("Gearman")
        ... class GearmanAdapter:
        ...     def __init__(self, config):
        ...         self.client = connect(config["servers"])
    """

    def decorator(factory: AdapterFactory) -> AdapterFactory:
        (catalog or get_default_catalog()).register(name, factory)
        return factory

    return decorator
