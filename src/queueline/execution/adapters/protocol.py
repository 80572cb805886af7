"""QueueAdapter Protocol — the single backend interface.

Manifesto:
Whatever technology actually moves jobs around (a Gearman client, an
in-process queue, a stub for tests) the ``Dispatcher`` needs one uniform
interface.  ``QueueAdapter`` is a ``typing.Protocol``: any object with the
right methods satisfies it, no base class required.

ARCHITECTURE
────────────
::

    QueueAdapter (Protocol)
      ├── .run(action, args, options)             ─ submit / schedule a job
      ├── .execute(action, args, env, workload)   ─ run a job in this process
      └── .scheduled()                            ─ release due scheduled jobs

    Implementations (adapter catalog identifiers):
      "Job"   JobAdapter   ─ in-process queue   (default)
      "Stub"  StubAdapter  ─ records calls      (testing)

Related modules:
    catalog.py   — identifier → factory table
    registry.py  — ConfigRegistry caches one adapter per configuration

Tags:
    queueline, execution, adapter, protocol, interface

Doc-Types:
    api-reference
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class QueueAdapter(Protocol):
    """Adapter — how jobs reach a job-queue backend.

    Adapters are constructed by a factory registered in the adapter catalog
    with the configuration's flat settings mapping (``name``, ``adapter``,
    ``servers`` and any adapter-specific keys) and are cached per
    configuration name, so they may hold connection state.

    Example implementation:
        >>> class EchoAdapter:
        ...     def __init__(self, config):
        ...         self.servers = config["servers"]
        ...
        ...     def run(self, action, args, options):
        ...         return {"action": action, "args": args}
        ...
        ...     def execute(self, action, args, env, workload):
        ...         return None
        ...
        ...     def scheduled(self):
        ...         return []
    """

    def run(self, action: str, args: dict[str, Any], options: dict[str, Any]) -> Any:
        """Submit (or schedule) job *action* with *args*.

        ``options`` are adapter-defined; when the dispatcher injects it,
        ``options["configName"]`` names the originating configuration.
        """
        ...

    def execute(
        self,
        action: str,
        args: dict[str, Any],
        env: dict[str, Any],
        workload: dict[str, Any],
    ) -> Any:
        """Execute job *action* in the current process.

        ``env`` holds environment overrides for the job, ``workload`` the
        raw payload the job arrived with.
        """
        ...

    def scheduled(self) -> Any:
        """Process scheduled jobs whose time has come."""
        ...
