"""Config Registry — named configurations and their cached adapters.

Manifesto:
Application code says *which* backend setup to use ("default",
"reports"), never *how* to reach it.  The registry maps each configuration
name to its settings, validates them on access, and owns exactly one
adapter instance per name, because adapters may hold expensive connection
state to their servers.

ARCHITECTURE
────────────
::

    ConfigRegistry(adapters=AdapterCatalog)
      ├── .configure(name, settings)   ─ store raw settings, drop cached adapter
      ├── .config(mapping)             ─ bulk configure
      ├── .init_defaults(name, raw)    ─ normalize → Configuration
      ├── .get_config(name)            ─ validate + normalize (cached)
      ├── .resolve_adapter(name)       ─ lazy singleton adapter per name
      ├── .remove(name) / .clear()
      └── .names() / .has(name)

    get_default_registry()     ─ module-level singleton
    reset_default_registry()   ─ clear for testing

    Validation happens on access, not on configure():
      never configured          → ConfigurationMissing
      settings not a mapping    → ConfigurationInvalid
      no servers after defaults → NoServersDefined
      unknown adapter id        → AdapterNotFound (on resolve)

    Environment-segregated settings (QUEUELINE_ENVIRONMENT=production):
      {"production": {...}, "development": {...}, "*": {...shared}}
      → the "production" block over "*", then the defaults

BEST PRACTICES
──────────────
- Build an explicit ``ConfigRegistry`` in tests; application code may use
  the default one.
- Re-``configure`` a name to swap its backend; the next resolution builds a
  fresh adapter from the new settings.

Related modules:
    dispatch.py          — Dispatcher resolves configs and adapters here
    adapters/catalog.py  — identifier → adapter factory
    filters.py           — Configuration.filters are filter specs

Tags:
    queueline, execution, registry, configuration, adapter-cache

Doc-Types:
    api-reference
"""

import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from queueline.core.config.settings import get_settings
from queueline.core.errors import ConfigurationInvalid, ConfigurationMissing, NoServersDefined
from queueline.core.logging import get_logger

from .adapters.catalog import AdapterCatalog, get_default_catalog
from .adapters.protocol import QueueAdapter
from .filters import FilterSpec

logger = get_logger(__name__)

DEFAULTS: Mapping[str, Any] = {"filters": [], "servers": []}

# Keys interpreted by the registry itself; everything else is adapter-specific.
RESERVED_KEYS = frozenset({"adapter", "servers", "filters"})

# Block of environment-segregated settings shared by every environment
ENVIRONMENT_SHARED_KEY = "*"


@dataclass(frozen=True)
class Configuration:
    """A validated, normalized named configuration."""

    name: str
    adapter: str
    servers: tuple[Any, ...] = ()
    filters: tuple[FilterSpec, ...] = ()
    options: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Flat settings handed to adapter factories (never the filters)."""
        return {
            **self.options,
            "name": self.name,
            "adapter": self.adapter,
            "servers": list(self.servers),
        }


def _is_empty(value: Any) -> bool:
    """Falsy values and the string ``"0"`` count as empty."""
    return not value or (isinstance(value, str) and value == "0")


def _as_tuple(value: Any) -> tuple[Any, ...]:
    """Lists and tuples are copied; other non-empty values become one element."""
    if isinstance(value, (list, tuple)):
        return tuple(value)
    if _is_empty(value):
        return ()
    return (value,)


class ConfigRegistry:
    """Injectable configuration registry with a per-name adapter cache.

    Example:
        >>> registry = ConfigRegistry()
        >>> registry.configure("default", {"servers": ["127.0.0.1:4730"]})
        >>> registry.get_config("default").adapter
        'Job'
        >>> registry.resolve_adapter("default") is registry.resolve_adapter("default")
        True
    """

    def __init__(
        self,
        adapters: AdapterCatalog | None = None,
        *,
        default_adapter: str | None = None,
        environment: str | None = None,
    ):
        self._adapters = adapters
        self._default_adapter = default_adapter
        self._environment = environment
        self._settings: dict[str, Any] = {}
        self._normalized: dict[str, Configuration] = {}
        self._instances: dict[str, QueueAdapter] = {}
        self._generations: dict[str, int] = {}
        self._name_locks: dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    @property
    def adapters(self) -> AdapterCatalog:
        return self._adapters if self._adapters is not None else get_default_catalog()

    @property
    def default_adapter(self) -> str:
        return self._default_adapter or get_settings().default_adapter

    @property
    def environment(self) -> str | None:
        """Environment whose block is picked from segregated settings."""
        return self._environment or get_settings().environment

    # === REGISTRATION ===

    def configure(self, name: str, settings: Any) -> None:
        """Store (or replace) the raw settings for *name*.

        Nothing is validated here; a cached adapter for *name* is dropped.
        """
        with self._lock:
            self._settings[name] = settings
            self._normalized.pop(name, None)
            dropped = self._instances.pop(name, None) is not None
            self._generations[name] = self._generations.get(name, 0) + 1
        logger.debug("registry.configured", config_name=name, adapter_dropped=dropped)

    def config(self, configurations: Mapping[str, Any]) -> None:
        """Configure every ``name -> settings`` pair of *configurations*."""
        for name, settings in configurations.items():
            self.configure(name, settings)

    def remove(self, name: str) -> bool:
        """Forget *name* and its adapter. Returns False if it was unknown."""
        with self._lock:
            if name not in self._settings:
                return False
            del self._settings[name]
            self._normalized.pop(name, None)
            self._instances.pop(name, None)
            self._generations[name] = self._generations.get(name, 0) + 1
        logger.debug("registry.removed", config_name=name)
        return True

    def clear(self) -> None:
        """Forget all configurations and adapters (for testing)."""
        with self._lock:
            for name in self._settings:
                self._generations[name] = self._generations.get(name, 0) + 1
            self._settings.clear()
            self._normalized.clear()
            self._instances.clear()

    def has(self, name: str) -> bool:
        with self._lock:
            return name in self._settings

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._settings)

    # === NORMALIZATION & VALIDATION ===

    def init_defaults(self, name: str, settings: Mapping[str, Any]) -> Configuration:
        """Merge *settings* over the defaults and normalize them.

        Settings segregated by environment are narrowed to the current
        environment's block first. ``filters`` and ``servers`` always come
        out as tuples; an empty ``adapter`` becomes the default adapter
        identifier. Neither *settings* nor ``DEFAULTS`` is modified.
        """
        merged = {**DEFAULTS, **self.select_environment(settings)}
        adapter = merged.get("adapter")
        return Configuration(
            name=name,
            adapter=self.default_adapter if _is_empty(adapter) else adapter,
            servers=_as_tuple(merged["servers"]),
            filters=_as_tuple(merged["filters"]),
            options={key: value for key, value in merged.items() if key not in RESERVED_KEYS},
        )

    def select_environment(self, settings: Mapping[str, Any]) -> Mapping[str, Any]:
        """Pick the current environment's block out of segregated *settings*.

        Settings are segregated when they hold a mapping under the current
        environment's name, e.g. ``{"production": {...}, "development": {...}}``.
        A ``"*"`` mapping, if present, supplies values shared by every
        environment. Anything else is returned unchanged.
        """
        environment = self.environment
        block = settings.get(environment) if environment else None
        if not isinstance(block, Mapping):
            return settings
        shared = settings.get(ENVIRONMENT_SHARED_KEY)
        return {**shared, **block} if isinstance(shared, Mapping) else dict(block)

    def get_config(self, name: str) -> Configuration:
        """Get the normalized configuration *name*, checking validity.

        Raises:
            ConfigurationMissing: If *name* was never configured
            ConfigurationInvalid: If the stored settings are not a mapping
            NoServersDefined: If no servers remain after normalization
        """
        with self._lock:
            if name not in self._settings:
                raise ConfigurationMissing(name)
            configuration = self._normalized.get(name)
            if configuration is None:
                raw = self._settings[name]
                if not isinstance(raw, Mapping):
                    raise ConfigurationInvalid(name, raw)
                configuration = self.init_defaults(name, raw)
                self._normalized[name] = configuration

        if not configuration.servers:
            raise NoServersDefined(name)
        return configuration

    # === ADAPTERS ===

    def resolve_adapter(self, name: str) -> QueueAdapter:
        """Get the adapter for *name*, building and caching it on first use.

        Concurrent first resolutions of one name build a single adapter. If
        *name* is re-configured while its adapter is being built, the new
        instance is returned to this caller but not cached.

        Raises:
            Whatever ``get_config`` raises, plus AdapterNotFound
        """
        self.get_config(name)

        with self._name_lock(name):
            with self._lock:
                cached = self._instances.get(name)
                generation = self._generations.get(name, 0)
            if cached is not None:
                return cached

            configuration = self.get_config(name)
            adapter = self.adapters.create(configuration.adapter, configuration.to_dict())

            with self._lock:
                if self._generations.get(name, 0) == generation:
                    self._instances[name] = adapter
            logger.info(
                "registry.adapter_created",
                config_name=name,
                adapter=configuration.adapter,
                servers=len(configuration.servers),
            )
            return adapter

    def _name_lock(self, name: str) -> threading.Lock:
        with self._lock:
            lock = self._name_locks.get(name)
            if lock is None:
                lock = self._name_locks[name] = threading.Lock()
            return lock


# === GLOBAL DEFAULT REGISTRY ===

_default_registry: ConfigRegistry | None = None


def get_default_registry() -> ConfigRegistry:
    """Get the global default registry.

    Creates it lazily on first access.
    """
    global _default_registry
    if _default_registry is None:
        _default_registry = ConfigRegistry()
    return _default_registry


def reset_default_registry() -> None:
    """Reset the global registry (for testing)."""
    global _default_registry
    _default_registry = None
