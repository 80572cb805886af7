"""Stub Adapter — records calls, runs nothing.

WHY
───
Dispatcher and filter logic should be testable without a job server.
``StubAdapter`` accepts every call, remembers it, and answers with canned
values. It is the simplest possible ``QueueAdapter``.

ARCHITECTURE
────────────
::

    StubAdapter(config)
      ├── .run(...)        ─ record, return run_result (default: a handle)
      ├── .execute(...)    ─ record, return execute_result
      └── .scheduled()     ─ record, return scheduled_result

Canned values may be set per configuration (``run_result``,
``execute_result``, ``scheduled_result`` settings) or on the instance.
"""

import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass
class StubCall:
    """One recorded adapter call."""

    method: str
    action: str | None = None
    args: dict[str, Any] = field(default_factory=dict)
    options: dict[str, Any] = field(default_factory=dict)
    env: dict[str, Any] = field(default_factory=dict)
    workload: dict[str, Any] = field(default_factory=dict)


class StubAdapter:
    """No-op adapter for testing.

    Example:
        >>> adapter = StubAdapter({"servers": ["localhost"], "run_result": "ok"})
        >>> adapter.run("send", {"to": "x"}, {})
        'ok'
        >>> adapter.assert_called("run", "send").args
        {'to': 'x'}
    """

    def __init__(self, config: Mapping[str, Any] | None = None):
        config = dict(config or {})
        self.config = config
        self.servers: list[Any] = list(config.get("servers", []))
        self.run_result: Any = config.get("run_result")
        self.execute_result: Any = config.get("execute_result")
        self.scheduled_result: Any = config.get("scheduled_result", [])
        self._calls: list[StubCall] = []

    def run(self, action: str, args: dict[str, Any], options: dict[str, Any]) -> Any:
        self._calls.append(StubCall("run", action, args=args, options=options))
        if self.run_result is None:
            return f"stub-{uuid.uuid4().hex[:8]}"
        return self.run_result

    def execute(
        self,
        action: str,
        args: dict[str, Any],
        env: dict[str, Any],
        workload: dict[str, Any],
    ) -> Any:
        self._calls.append(StubCall("execute", action, args=args, env=env, workload=workload))
        return self.execute_result

    def scheduled(self) -> Any:
        self._calls.append(StubCall("scheduled"))
        return self.scheduled_result

    # === TEST HELPERS ===

    @property
    def calls(self) -> list[StubCall]:
        """Get all recorded calls (for test assertions)."""
        return self._calls.copy()

    @property
    def call_count(self) -> int:
        return len(self._calls)

    def clear(self) -> None:
        """Clear call history (for test cleanup)."""
        self._calls.clear()

    def assert_called(self, method: str, action: str | None = None) -> StubCall:
        """Assert a call was recorded and return the most recent match.

        Raises:
            AssertionError: If no matching call was recorded
        """
        for call in reversed(self._calls):
            if call.method == method and (action is None or call.action == action):
                return call
        raise AssertionError(
            f"No {method}({action or ''}) call was recorded. Got: {[(c.method, c.action) for c in self._calls]}"
        )
