"""Dispatcher — run, execute and schedule jobs against named configurations.

Manifesto:
Callers only know a configuration name and a job name.  The dispatcher
resolves the configuration, wraps the adapter call in the configuration's
filters, and hands back whatever the adapter returns.  All three operations
take the same path; only the parameter bag and the adapter capability
differ.

ARCHITECTURE
────────────
::

    Dispatcher(registry, inject_config_name=True, filters=FilterCatalog)
      │
      ├── .run(name, action, args, options)
      ├── .execute(name, action, args, env, workload)
      └── .scheduled(name)
             │
             ▼
      registry.get_config(name)        ─ config errors raised here, unchanged
             │
      FilterChain(base, filters)       ─ rebuilt on every call
             │
      base(params)                     ─ registry.resolve_adapter(name).<op>(...)

    Parameter bags seen by filters:
      run        {config_name, action, args, options}
      execute    {config_name, action, args, env, workload}
      scheduled  {config_name}

    Log events emitted during a dispatch (filters, registry, adapter)
    carry config_name, operation and action from a LogContext.

    ping(scheduled=False)              ─ liveness check for worker harnesses

Related modules:
    registry.py  — configurations and adapter cache
    filters.py   — chain engine and filter catalog

Tags:
    queueline, execution, dispatcher, facade

Doc-Types:
    api-reference
"""

import sys
from collections.abc import Callable
from typing import Any, TextIO

from queueline.core.config.settings import get_settings
from queueline.core.logging import LogContext, get_logger

from .filters import FilterCatalog, FilterChain, Params, get_default_filters
from .registry import ConfigRegistry, Configuration, get_default_registry

logger = get_logger(__name__)

# Option key carrying the originating configuration name into adapter.run()
CONFIG_NAME_OPTION = "configName"


class Dispatcher:
    """Dispatch facade over a ``ConfigRegistry``.

    Example:
        >>> registry = ConfigRegistry()
        >>> registry.configure("default", {"adapter": "Stub", "servers": ["localhost"]})
        >>> dispatcher = Dispatcher(registry)
        >>> handle = dispatcher.run("default", "send_email", {"to": "a@example.com"})
    """

    def __init__(
        self,
        registry: ConfigRegistry | None = None,
        *,
        inject_config_name: bool | None = None,
        filters: FilterCatalog | None = None,
    ):
        self._registry = registry
        self._inject_config_name = inject_config_name
        self._filters = filters

    @property
    def registry(self) -> ConfigRegistry:
        return self._registry if self._registry is not None else get_default_registry()

    @property
    def filters(self) -> FilterCatalog:
        return self._filters if self._filters is not None else get_default_filters()

    @property
    def inject_config_name(self) -> bool:
        if self._inject_config_name is None:
            return get_settings().inject_config_name
        return self._inject_config_name

    def get_config(self, name: str) -> Configuration:
        """Get the validated configuration *name* (see ``ConfigRegistry.get_config``)."""
        return self.registry.get_config(name)

    def run(
        self,
        config_name: str,
        action: str,
        args: dict[str, Any] | None = None,
        options: dict[str, Any] | None = None,
    ) -> Any:
        """Run/schedule job *action* on a configuration.

        Args:
            config_name: Configuration to use
            action: Job name
            args: Arguments for the job
            options: Adapter options (priority, background, schedule, ...)

        Returns:
            Whatever the adapter's ``run()`` returns
        """

        def base(params: Params) -> Any:
            options = dict(params["options"])
            if self.inject_config_name:
                options[CONFIG_NAME_OPTION] = config_name
            return self.registry.resolve_adapter(config_name).run(params["action"], params["args"], options)

        params = {
            "config_name": config_name,
            "action": action,
            "args": args if args is not None else {},
            "options": options if options is not None else {},
        }
        return self._dispatch("run", config_name, base, params)

    def execute(
        self,
        config_name: str,
        action: str,
        args: dict[str, Any],
        env: dict[str, Any] | None = None,
        workload: dict[str, Any] | None = None,
    ) -> Any:
        """Execute job *action* on a configuration.

        Args:
            config_name: Configuration to use
            action: Job name
            args: Arguments for the job
            env: Environment overrides for the job
            workload: The full workload the job arrived with

        Returns:
            Whatever the adapter's ``execute()`` returns
        """

        def base(params: Params) -> Any:
            return self.registry.resolve_adapter(config_name).execute(
                params["action"],
                params["args"],
                params["env"],
                params["workload"],
            )

        params = {
            "config_name": config_name,
            "action": action,
            "args": args,
            "env": env if env is not None else {},
            "workload": workload if workload is not None else {},
        }
        return self._dispatch("execute", config_name, base, params)

    def scheduled(self, config_name: str) -> Any:
        """Process scheduled jobs of a configuration.

        Returns:
            Whatever the adapter's ``scheduled()`` returns
        """

        def base(params: Params) -> Any:
            return self.registry.resolve_adapter(config_name).scheduled()

        return self._dispatch("scheduled", config_name, base, {"config_name": config_name})

    def _dispatch(self, operation: str, config_name: str, base: Callable[[Params], Any], params: Params) -> Any:
        with LogContext(config_name=config_name, operation=operation, action=params.get("action")):
            configuration = self.registry.get_config(config_name)
            chain = FilterChain(base, self.filters.resolve_all(configuration.filters))
            logger.debug(f"dispatch.{operation}", filters=len(chain))
            return chain(params)


def ping(scheduled: bool = False, stream: TextIO | None = None) -> str | None:
    """Check that a worker is alive.

    Returns ``"OK"``; a scheduled ping writes ``[Scheduled PING] OK`` to
    *stream* (stdout by default) and returns ``None``.
    """
    if scheduled:
        print("[Scheduled PING] OK", file=stream or sys.stdout)
        return None
    return "OK"


# === MODULE-LEVEL CONVENIENCE (default registry) ===


def run(
    config_name: str,
    action: str,
    args: dict[str, Any] | None = None,
    options: dict[str, Any] | None = None,
) -> Any:
    """``Dispatcher().run`` against the default registry."""
    return Dispatcher().run(config_name, action, args, options)


def execute(
    config_name: str,
    action: str,
    args: dict[str, Any],
    env: dict[str, Any] | None = None,
    workload: dict[str, Any] | None = None,
) -> Any:
    """``Dispatcher().execute`` against the default registry."""
    return Dispatcher().execute(config_name, action, args, env, workload)


def scheduled(config_name: str) -> Any:
    """``Dispatcher().scheduled`` against the default registry."""
    return Dispatcher().scheduled(config_name)


def get_config(name: str) -> Configuration:
    """``ConfigRegistry.get_config`` on the default registry."""
    return get_default_registry().get_config(name)
