"""Queue adapters - the pluggable backends behind every configuration.

All adapters implement the same ``QueueAdapter`` protocol
(``run`` / ``execute`` / ``scheduled``), so application code never depends
on the job-queue technology in use.

Built-in adapters:
- JobAdapter ("Job"): in-process queue with handlers (default)
- StubAdapter ("Stub"): records calls (testing dispatcher and filter logic)

Example:
    >>> from queueline.execution.adapters import register_adapter
    >>>
    >>> @register_adapter("Gearman")
    ... class GearmanAdapter:
    ...     ...
"""

from .catalog import (
    AdapterCatalog,
    AdapterFactory,
    get_default_catalog,
    register_adapter,
    reset_default_catalog,
)
from .job import JobAdapter, Priority, QueuedJob
from .protocol import QueueAdapter
from .stub import StubAdapter, StubCall

__all__ = [
    "QueueAdapter",
    "AdapterCatalog",
    "AdapterFactory",
    "get_default_catalog",
    "reset_default_catalog",
    "register_adapter",
    "JobAdapter",
    "Priority",
    "QueuedJob",
    "StubAdapter",
    "StubCall",
]
