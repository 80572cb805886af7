"""
queueline - named, pluggable job-queue dispatch with filter chains.

- queueline.core: errors, logging, settings
- queueline.execution: registry, filters, dispatcher, adapters
- queueline.cli: command line harness
"""

__version__ = "0.1.0"

from queueline.core.errors import (  # noqa: E402
    AdapterNotFound,
    ConfigurationInvalid,
    ConfigurationMissing,
    NoServersDefined,
    QueuelineError,
)
from queueline.execution import (  # noqa: E402
    ConfigRegistry,
    Configuration,
    Dispatcher,
    FilterChain,
    execute,
    get_config,
    get_default_registry,
    ping,
    register_adapter,
    register_filter,
    run,
    scheduled,
)

__all__ = [
    "__version__",
    "QueuelineError",
    "ConfigurationMissing",
    "ConfigurationInvalid",
    "NoServersDefined",
    "AdapterNotFound",
    "ConfigRegistry",
    "Configuration",
    "Dispatcher",
    "FilterChain",
    "get_default_registry",
    "register_adapter",
    "register_filter",
    "run",
    "execute",
    "scheduled",
    "get_config",
    "ping",
]
