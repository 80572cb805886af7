"""Filter Chain — ordered middleware around a single dispatch call.

Manifesto:
Logging, metrics, auth and argument rewriting must be composable around
``run`` / ``execute`` / ``scheduled`` without touching the dispatch code.
A filter is a plain callable that receives the parameter bag and "the rest
of the chain"; the innermost link is the adapter call itself.

ARCHITECTURE
────────────
::

    FilterChain(base, [A, B, C])(params)

        A ─ before ─┐                               ┌─ after ─ A
                    B ─ before ─┐       ┌─ after ─ B
                                C ─ before ─┐ ┌─ after ─ C
                                            base

    Filter signature:
        def my_filter(params: dict, chain: Next) -> Any:
            params["args"]["trace_id"] = new_id()   # before
            result = chain(params)                  # delegate (at most once)
            metrics.incr("jobs")                    # after
            return result

    A filter that returns without calling ``chain`` short-circuits: the
    inner filters and the base never run and its return value becomes the
    result.  Exceptions unwind through every filter that already delegated.

    FilterCatalog
      ├── .register(name, filter)   ─ name a filter for string specs
      ├── .resolve(spec)            ─ callable as-is, str via lookup
      └── .resolve_all(specs)       ─ ordered list of callables

    Built-in named filters (default catalog):
      "log"  → log_dispatch

Related modules:
    dispatch.py — builds one chain per dispatch call
    registry.py — Configuration.filters holds the specs

Tags:
    queueline, execution, filters, middleware, interceptor, chain

Doc-Types:
    api-reference
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterable, Sequence
from typing import Any, Union

from queueline.core.errors import FilterChainError, FilterError, FilterNotFound
from queueline.core.logging import get_logger

logger = get_logger(__name__)

Params = dict[str, Any]
Next = Callable[..., Any]
Filter = Callable[[Params, Next], Any]
FilterSpec = Union[Filter, str]


class FilterChain:
    """Immutable composition of filters around a base operation.

    The chain keeps no per-call state on the instance, so one chain can be
    invoked repeatedly or concurrently; the dispatcher nevertheless builds a
    fresh one per call so filter changes apply on the next dispatch.

    Example:
        >>> calls = []
        >>> def outer(params, chain):
        ...     calls.append("outer-before")
        ...     result = chain(params)
        ...     calls.append("outer-after")
        ...     return result
        >>> chain = FilterChain(lambda params: params["x"] * 2, [outer])
        >>> chain({"x": 21})
        42
        >>> calls
        ['outer-before', 'outer-after']
    """

    def __init__(self, base: Callable[[Params], Any], filters: Iterable[Filter] = ()):
        self._base = base
        self._filters: tuple[Filter, ...] = tuple(filters)

    @property
    def filters(self) -> tuple[Filter, ...]:
        return self._filters

    def __len__(self) -> int:
        return len(self._filters)

    def __call__(self, params: Params | None = None) -> Any:
        """Invoke the chain with a copy of *params*."""
        return self._invoke(0, dict(params or {}))

    def _invoke(self, index: int, params: Params) -> Any:
        if index >= len(self._filters):
            return self._base(params)

        current = self._filters[index]
        delegated = False

        def chain(next_params: Params | None = None) -> Any:
            nonlocal delegated
            if delegated:
                name = getattr(current, "__name__", repr(current))
                raise FilterChainError(f"Filter {name!r} delegated to the rest of the chain more than once")
            delegated = True
            return self._invoke(index + 1, params if next_params is None else next_params)

        return current(params, chain)


def build_chain(base: Callable[[Params], Any], filters: Iterable[Filter] = ()) -> FilterChain:
    """Compose *filters* around *base*; first filter wraps outermost."""
    return FilterChain(base, filters)


def run_chain(base: Callable[[Params], Any], filters: Iterable[Filter], params: Params | None = None) -> Any:
    """Build a chain and invoke it in one step."""
    return FilterChain(base, filters)(params)


# === FILTER CATALOG ===


class FilterCatalog:
    """Injectable name → filter lookup for string filter specs.

    Example:
        >>> catalog = FilterCatalog()
        >>> catalog.register("noop", lambda params, chain: chain(params))
        >>> len(catalog.resolve_all(["noop", lambda p, c: c(p)]))
        2
    """

    def __init__(self):
        self._filters: dict[str, Filter] = {}
        self._lock = threading.Lock()

    def register(self, name: str, filter_: Filter) -> None:
        """Register *filter_* under *name*, replacing any previous entry."""
        if not callable(filter_):
            raise FilterError(f"Filter {name!r} must be callable, got {type(filter_).__name__}")
        with self._lock:
            self._filters[name] = filter_

    def unregister(self, name: str) -> bool:
        with self._lock:
            return self._filters.pop(name, None) is not None

    def has(self, name: str) -> bool:
        with self._lock:
            return name in self._filters

    def get(self, name: str) -> Filter:
        """Get a filter by name.

        Raises:
            FilterNotFound: If no filter is registered under *name*
        """
        with self._lock:
            try:
                return self._filters[name]
            except KeyError:
                raise FilterNotFound(name, sorted(self._filters)) from None

    def list_filters(self) -> list[str]:
        with self._lock:
            return sorted(self._filters)

    def resolve(self, spec: FilterSpec) -> Filter:
        """Turn a filter spec into a callable filter."""
        if isinstance(spec, str):
            return self.get(spec)
        if callable(spec):
            return spec
        raise FilterError(f"Invalid filter spec {spec!r}: expected a callable or a registered filter name")

    def resolve_all(self, specs: Sequence[FilterSpec]) -> list[Filter]:
        return [self.resolve(spec) for spec in specs]

    def clear(self) -> None:
        """Clear all filters (for testing)."""
        with self._lock:
            self._filters.clear()


# === BUILT-IN FILTERS ===


def log_dispatch(params: Params, chain: Next) -> Any:
    """Log a dispatch call and its duration.

    Start at DEBUG, success at INFO, failure at WARNING. The error is
    re-raised untouched.
    """
    fields = {"config_name": params.get("config_name")}
    if "action" in params:
        fields["action"] = params["action"]

    logger.debug("filter.started", **fields)
    started = time.perf_counter()
    try:
        result = chain(params)
    except Exception as e:
        logger.warning(
            "filter.failed",
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
            error_type=type(e).__name__,
            error_message=str(e),
            **fields,
        )
        raise
    logger.info(
        "filter.completed",
        duration_ms=round((time.perf_counter() - started) * 1000, 2),
        **fields,
    )
    return result


BUILTIN_FILTERS: dict[str, Filter] = {
    "log": log_dispatch,
}


# === GLOBAL DEFAULT CATALOG ===

_default_catalog: FilterCatalog | None = None


def get_default_filters() -> FilterCatalog:
    """Get the global filter catalog, created with the built-ins on first access."""
    global _default_catalog
    if _default_catalog is None:
        catalog = FilterCatalog()
        for name, filter_ in BUILTIN_FILTERS.items():
            catalog.register(name, filter_)
        _default_catalog = catalog
    return _default_catalog


def reset_default_filters() -> None:
    """Reset the global filter catalog (for testing)."""
    global _default_catalog
    _default_catalog = None


def register_filter(name: str, catalog: FilterCatalog | None = None):
    """Decorator to register a named filter.

    Example:
        >>> @register_filter("require_tenant")
        ... def require_tenant(params, chain):
        ...     if "tenant" not in params.get("args", {}):
        ...         return None
        ...     return chain(params)
    """

    def decorator(func: Filter) -> Filter:
        (catalog or get_default_filters()).register(name, func)
        return func

    return decorator
