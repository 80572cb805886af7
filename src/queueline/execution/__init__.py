"""
queueline execution: configuration registry, filter chain, dispatcher, adapters.

Example:
    >>> from queueline.execution import ConfigRegistry, Dispatcher
    >>>
    >>> registry = ConfigRegistry()
    >>> registry.configure("default", {"servers": ["127.0.0.1:4730"], "filters": ["log"]})
    >>> dispatcher = Dispatcher(registry)
    >>> handle = dispatcher.run("default", "send_email", {"to": "user@example.com"})
"""

from .adapters import (
    AdapterCatalog,
    JobAdapter,
    Priority,
    QueueAdapter,
    StubAdapter,
    get_default_catalog,
    register_adapter,
    reset_default_catalog,
)
from .dispatch import CONFIG_NAME_OPTION, Dispatcher, execute, get_config, ping, run, scheduled
from .filters import (
    Filter,
    FilterCatalog,
    FilterChain,
    FilterSpec,
    Next,
    Params,
    build_chain,
    get_default_filters,
    log_dispatch,
    register_filter,
    reset_default_filters,
    run_chain,
)
from .registry import ConfigRegistry, Configuration, get_default_registry, reset_default_registry

__all__ = [
    # Registry
    "ConfigRegistry",
    "Configuration",
    "get_default_registry",
    "reset_default_registry",
    # Filters
    "Filter",
    "FilterSpec",
    "Params",
    "Next",
    "FilterChain",
    "FilterCatalog",
    "build_chain",
    "run_chain",
    "log_dispatch",
    "register_filter",
    "get_default_filters",
    "reset_default_filters",
    # Dispatch
    "Dispatcher",
    "CONFIG_NAME_OPTION",
    "run",
    "execute",
    "scheduled",
    "get_config",
    "ping",
    # Adapters
    "QueueAdapter",
    "AdapterCatalog",
    "JobAdapter",
    "Priority",
    "StubAdapter",
    "get_default_catalog",
    "reset_default_catalog",
    "register_adapter",
]
