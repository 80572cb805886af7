"""
Shared pytest fixtures and configuration for queueline tests.

This module provides:
- Cleanup of every module-level default (registry, catalogs, settings)
- Isolated registries wired to an isolated adapter catalog
- A ``StubAdapter``-backed configuration for dispatcher tests

Usage:
    Fixtures are auto-discovered by pytest. Use them as function arguments.

    def test_something(registry, dispatcher):
        ...
"""

import os
from pathlib import Path

import pytest

from queueline.core.config.settings import clear_settings_cache
from queueline.execution.adapters import AdapterCatalog, JobAdapter, StubAdapter, reset_default_catalog
from queueline.execution.dispatch import Dispatcher
from queueline.execution.filters import FilterCatalog, log_dispatch, reset_default_filters
from queueline.execution.registry import ConfigRegistry, reset_default_registry


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)

        if "integration" in str(test_path) or "cli" in str(test_path):
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Global State Cleanup
# =============================================================================


@pytest.fixture(autouse=True)
def clean_defaults(monkeypatch):
    """Reset module-level defaults and QUEUELINE_* env vars around each test."""
    for key in list(os.environ):
        if key.startswith("QUEUELINE_"):
            monkeypatch.delenv(key, raising=False)
    clear_settings_cache()
    reset_default_registry()
    reset_default_catalog()
    reset_default_filters()
    yield
    clear_settings_cache()
    reset_default_registry()
    reset_default_catalog()
    reset_default_filters()


# =============================================================================
# Registry / Dispatcher Fixtures
# =============================================================================


@pytest.fixture
def adapter_catalog() -> AdapterCatalog:
    """Adapter catalog holding only the built-in adapters."""
    catalog = AdapterCatalog()
    catalog.register("Job", JobAdapter)
    catalog.register("Stub", StubAdapter)
    return catalog


@pytest.fixture
def filter_catalog() -> FilterCatalog:
    catalog = FilterCatalog()
    catalog.register("log", log_dispatch)
    return catalog


@pytest.fixture
def registry(adapter_catalog) -> ConfigRegistry:
    """Empty registry with an isolated adapter catalog."""
    return ConfigRegistry(adapter_catalog)


@pytest.fixture
def stub_registry(registry) -> ConfigRegistry:
    """Registry with a ready ``"default"`` configuration on the stub adapter."""
    registry.configure("default", {"adapter": "Stub", "servers": ["127.0.0.1:4730"]})
    return registry


@pytest.fixture
def dispatcher(stub_registry, filter_catalog) -> Dispatcher:
    return Dispatcher(stub_registry, filters=filter_catalog)


@pytest.fixture
def stub(stub_registry) -> StubAdapter:
    """The stub adapter behind the ``"default"`` configuration."""
    return stub_registry.resolve_adapter("default")
