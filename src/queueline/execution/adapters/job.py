"""Job Adapter — the default, in-process job queue.

This adapter keeps jobs in memory and runs them with handlers registered
in the current process. Background, foreground, prioritized and scheduled
submission follow the job classes of Gearman-style clients. There is no
server, persistence or worker process.

Options understood by ``run()``:

    background   bool      queue the job (default) or execute it right away
    priority     str       "low" | "normal" | "high"
    schedule     datetime  park the job until ``scheduled()`` sees it is due
    env          dict      environment overrides handed to the handler

Adapter-specific configuration keys:

    handlers     dict      action -> handler(args, env)
    env          dict      base environment merged under per-job env
    clock        callable  returns the current aware datetime (testing)
"""

import itertools
import threading
import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from queueline.core.errors import JobError, JobNotFound
from queueline.core.logging import get_logger

logger = get_logger(__name__)

JobHandler = Callable[[dict[str, Any], dict[str, Any]], Any]


class Priority(str, Enum):
    """Job priority; higher priorities are drained first."""

    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"


_PRIORITY_ORDER = {Priority.HIGH: 0, Priority.NORMAL: 1, Priority.LOW: 2}


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _as_aware(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


@dataclass
class QueuedJob:
    """A job waiting in the pending queue or parked until its schedule."""

    handle: str
    action: str
    args: dict[str, Any]
    priority: Priority
    sequence: int
    env: dict[str, Any] = field(default_factory=dict)
    workload: dict[str, Any] = field(default_factory=dict)
    scheduled_for: datetime | None = None


class JobAdapter:
    """In-process job queue.

    Example:
        >>> adapter = JobAdapter({"servers": ["local"]})
        >>> adapter.register_job("double", lambda args, env: args["n"] * 2)
        >>> adapter.run("double", {"n": 21}, {"background": False})
        42
        >>> handle = adapter.run("double", {"n": 1}, {})
        >>> adapter.work()[handle]
        2
    """

    def __init__(self, config: Mapping[str, Any] | None = None):
        config = dict(config or {})
        self.name: str | None = config.get("name")
        self.servers: list[Any] = list(config.get("servers", []))
        self.handlers: dict[str, JobHandler] = dict(config.get("handlers") or {})
        self.env: dict[str, Any] = dict(config.get("env") or {})
        self._clock: Callable[[], datetime] = config.get("clock") or _utcnow
        self._pending: list[QueuedJob] = []
        self._parked: list[QueuedJob] = []
        self._sequence = itertools.count()
        self._lock = threading.Lock()

    def register_job(self, action: str, handler: JobHandler) -> None:
        """Register the handler that runs *action*."""
        self.handlers[action] = handler

    # === QueueAdapter ===

    def run(self, action: str, args: dict[str, Any], options: dict[str, Any]) -> Any:
        """Submit *action*.

        Returns the job handle for queued or parked jobs, the handler result
        for foreground jobs.
        """
        priority = self._priority(options.get("priority", Priority.NORMAL))
        job = QueuedJob(
            handle=f"job-{uuid.uuid4().hex[:12]}",
            action=action,
            args=dict(args),
            priority=priority,
            sequence=next(self._sequence),
            env=dict(options.get("env") or {}),
            workload={"action": action, "args": dict(args), "options": dict(options)},
        )

        schedule = options.get("schedule")
        if schedule is not None:
            if not isinstance(schedule, datetime):
                raise JobError(f"Option 'schedule' must be a datetime, got {type(schedule).__name__}").with_context(
                    action=action
                )
            job.scheduled_for = _as_aware(schedule)
            if job.scheduled_for > self._clock():
                with self._lock:
                    self._parked.append(job)
                logger.debug(
                    "job.parked",
                    handle=job.handle,
                    action=action,
                    scheduled_for=job.scheduled_for.isoformat(),
                )
                return job.handle

        if not options.get("background", True):
            return self.execute(action, job.args, job.env, job.workload)

        with self._lock:
            self._pending.append(job)
        logger.debug("job.queued", handle=job.handle, action=action, priority=priority.value)
        return job.handle

    def execute(
        self,
        action: str,
        args: dict[str, Any],
        env: dict[str, Any],
        workload: dict[str, Any],
    ) -> Any:
        """Run the handler for *action* with the merged environment."""
        handler = self.handlers.get(action)
        if handler is None:
            raise JobNotFound(action, sorted(self.handlers))

        merged_env = {**self.env, **(env or {})}
        logger.debug("job.executing", action=action, workload_keys=sorted(workload or {}))
        return handler(args, merged_env)

    def scheduled(self) -> list[str]:
        """Release every parked job whose time has come.

        Released jobs move to the pending queue; their handles are returned
        in release order.
        """
        now = self._clock()
        due: list[QueuedJob] = []
        waiting: list[QueuedJob] = []
        with self._lock:
            for job in self._parked:
                (due if job.scheduled_for is not None and job.scheduled_for <= now else waiting).append(job)
            self._parked = waiting
            self._pending.extend(due)

        if due:
            logger.info("job.scheduled_released", count=len(due))
        return [job.handle for job in due]

    # === WORKER HELPERS ===

    def work(self) -> dict[str, Any]:
        """Drain the pending queue and return ``{handle: result}``.

        High priority jobs run first, FIFO within a priority. A failing job
        raises; jobs not yet taken stay queued.
        """
        results: dict[str, Any] = {}
        while True:
            with self._lock:
                if not self._pending:
                    break
                job = min(self._pending, key=lambda j: (_PRIORITY_ORDER[j.priority], j.sequence))
                self._pending.remove(job)
            results[job.handle] = self.execute(job.action, job.args, job.env, job.workload)
        return results

    @property
    def pending(self) -> list[QueuedJob]:
        with self._lock:
            return list(self._pending)

    @property
    def parked(self) -> list[QueuedJob]:
        with self._lock:
            return list(self._parked)

    @staticmethod
    def _priority(value: Any) -> Priority:
        try:
            return Priority(value)
        except ValueError:
            raise JobError(
                f"Invalid priority {value!r}. Expected one of: {[p.value for p in Priority]}"
            ) from None
