"""Tests for the adapter catalog and the built-in adapters."""

from datetime import UTC, datetime, timedelta

import pytest

from queueline.core.errors import AdapterNotFound, JobError, JobNotFound
from queueline.execution.adapters import (
    AdapterCatalog,
    JobAdapter,
    Priority,
    QueueAdapter,
    StubAdapter,
    get_default_catalog,
    register_adapter,
)
from queueline.execution.dispatch import Dispatcher


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 1, 1, 12, 0, tzinfo=UTC))


@pytest.fixture
def job_adapter(clock) -> JobAdapter:
    adapter = JobAdapter({"servers": ["local"], "clock": clock, "env": {"REGION": "eu"}})
    adapter.register_job("double", lambda args, env: args["n"] * 2)
    adapter.register_job("env", lambda args, env: env)
    return adapter


class TestAdapterCatalog:
    def test_default_catalog_has_builtins(self):
        assert get_default_catalog().list_adapters() == ["Job", "Stub"]

    def test_create(self):
        catalog = AdapterCatalog()
        catalog.register("Stub", StubAdapter)
        adapter = catalog.create("Stub", {"servers": ["s"]})
        assert isinstance(adapter, StubAdapter)

    def test_unknown(self):
        with pytest.raises(AdapterNotFound) as exc_info:
            AdapterCatalog().get("Gearman")
        assert exc_info.value.available == []

    def test_unregister(self):
        catalog = AdapterCatalog()
        catalog.register("Stub", StubAdapter)
        assert catalog.unregister("Stub") is True
        assert catalog.has("Stub") is False

    def test_register_adapter_decorator(self):
        catalog = AdapterCatalog()

        @register_adapter("Echo", catalog=catalog)
        class EchoAdapter(StubAdapter):
            pass

        assert catalog.get("Echo") is EchoAdapter

    def test_register_adapter_default_catalog(self):
        @register_adapter("Echo")
        class EchoAdapter(StubAdapter):
            pass

        assert get_default_catalog().has("Echo")

    @pytest.mark.parametrize("cls", [JobAdapter, StubAdapter])
    def test_builtins_satisfy_protocol(self, cls):
        assert isinstance(cls({"servers": ["s"]}), QueueAdapter)


class TestJobAdapterRun:
    def test_foreground_runs_immediately(self, job_adapter):
        assert job_adapter.run("double", {"n": 21}, {"background": False}) == 42
        assert job_adapter.pending == []

    def test_background_is_queued(self, job_adapter):
        handle = job_adapter.run("double", {"n": 1}, {})
        assert handle.startswith("job-")
        [job] = job_adapter.pending
        assert job.handle == handle
        assert job.priority is Priority.NORMAL
        assert job.workload["action"] == "double"

    def test_invalid_priority(self, job_adapter):
        with pytest.raises(JobError, match="Invalid priority"):
            job_adapter.run("double", {"n": 1}, {"priority": "urgent"})

    def test_invalid_schedule(self, job_adapter):
        with pytest.raises(JobError, match="datetime"):
            job_adapter.run("double", {"n": 1}, {"schedule": "tomorrow"})

    def test_future_schedule_is_parked(self, job_adapter, clock):
        handle = job_adapter.run("double", {"n": 1}, {"schedule": clock.now + timedelta(hours=1)})
        assert [job.handle for job in job_adapter.parked] == [handle]
        assert job_adapter.pending == []

    def test_past_schedule_runs_normally(self, job_adapter, clock):
        result = job_adapter.run(
            "double",
            {"n": 2},
            {"schedule": clock.now - timedelta(minutes=1), "background": False},
        )
        assert result == 4
        assert job_adapter.parked == []

    def test_naive_schedule_treated_as_utc(self, job_adapter, clock):
        naive = (clock.now + timedelta(hours=1)).replace(tzinfo=None)
        job_adapter.run("double", {"n": 1}, {"schedule": naive})
        assert job_adapter.parked[0].scheduled_for.tzinfo is UTC


class TestJobAdapterExecute:
    def test_unknown_action(self, job_adapter):
        with pytest.raises(JobNotFound) as exc_info:
            job_adapter.execute("missing", {}, {}, {})
        assert exc_info.value.available == ["double", "env"]

    def test_env_merged_over_base(self, job_adapter):
        assert job_adapter.execute("env", {}, {"USER": "worker"}, {}) == {"REGION": "eu", "USER": "worker"}
        assert job_adapter.execute("env", {}, {"REGION": "us"}, {}) == {"REGION": "us"}

    def test_handlers_from_config(self):
        adapter = JobAdapter({"servers": ["s"], "handlers": {"hello": lambda args, env: "hi"}})
        assert adapter.execute("hello", {}, {}, {}) == "hi"


class TestJobAdapterScheduled:
    def test_releases_due_jobs_only(self, job_adapter, clock):
        soon = job_adapter.run("double", {"n": 1}, {"schedule": clock.now + timedelta(minutes=5)})
        later = job_adapter.run("double", {"n": 2}, {"schedule": clock.now + timedelta(hours=5)})

        assert job_adapter.scheduled() == []

        clock.advance(minutes=10)
        assert job_adapter.scheduled() == [soon]
        assert [job.handle for job in job_adapter.pending] == [soon]
        assert [job.handle for job in job_adapter.parked] == [later]

        assert job_adapter.work() == {soon: 2}


class TestJobAdapterWork:
    def test_drains_by_priority_then_fifo(self, job_adapter):
        order = []
        job_adapter.register_job("track", lambda args, env: order.append(args["id"]))

        job_adapter.run("track", {"id": "low"}, {"priority": "low"})
        job_adapter.run("track", {"id": "normal-1"}, {})
        job_adapter.run("track", {"id": "high"}, {"priority": "high"})
        job_adapter.run("track", {"id": "normal-2"}, {"priority": Priority.NORMAL})

        job_adapter.work()
        assert order == ["high", "normal-1", "normal-2", "low"]
        assert job_adapter.pending == []

    def test_failure_leaves_remaining_jobs_queued(self, job_adapter):
        def explode(args, env):
            raise RuntimeError("handler failed")

        job_adapter.register_job("explode", explode)
        job_adapter.run("explode", {}, {"priority": "high"})
        remaining = job_adapter.run("double", {"n": 3}, {})

        with pytest.raises(RuntimeError, match="handler failed"):
            job_adapter.work()
        assert [job.handle for job in job_adapter.pending] == [remaining]
        assert job_adapter.work() == {remaining: 6}

    def test_job_env_option_reaches_handler(self, job_adapter):
        handle = job_adapter.run("env", {}, {"env": {"USER": "batch"}})
        assert job_adapter.work()[handle] == {"REGION": "eu", "USER": "batch"}


class TestJobAdapterThroughDispatcher:
    def test_run_then_work(self, registry, clock):
        registry.configure(
            "default",
            {
                "servers": ["127.0.0.1:4730"],
                "clock": clock,
                "handlers": {"greet": lambda args, env: f"hello {args['name']}"},
            },
        )
        dispatcher = Dispatcher(registry)

        handle = dispatcher.run("default", "greet", {"name": "ada"})
        adapter = registry.resolve_adapter("default")
        [job] = adapter.pending
        assert job.workload["options"] == {"configName": "default"}
        assert adapter.work() == {handle: "hello ada"}

        assert dispatcher.execute("default", "greet", {"name": "bob"}) == "hello bob"

    def test_scheduled_through_dispatcher(self, registry, clock):
        registry.configure(
            "default",
            {"servers": ["s"], "clock": clock, "handlers": {"noop": lambda args, env: None}},
        )
        dispatcher = Dispatcher(registry)
        handle = dispatcher.run("default", "noop", {}, {"schedule": clock.now + timedelta(minutes=1)})

        assert dispatcher.scheduled("default") == []
        clock.advance(minutes=2)
        assert dispatcher.scheduled("default") == [handle]


class TestStubAdapter:
    def test_records_calls(self):
        adapter = StubAdapter({"servers": ["s"]})
        handle = adapter.run("a", {"x": 1}, {"o": 1})
        adapter.execute("b", {}, {"e": 1}, {"w": 1})
        adapter.scheduled()

        assert handle.startswith("stub-")
        assert adapter.call_count == 3
        assert [c.method for c in adapter.calls] == ["run", "execute", "scheduled"]
        assert adapter.assert_called("execute", "b").env == {"e": 1}

    def test_canned_results_from_config(self):
        adapter = StubAdapter(
            {"servers": ["s"], "run_result": "r", "execute_result": "e", "scheduled_result": ["h"]}
        )
        assert adapter.run("a", {}, {}) == "r"
        assert adapter.execute("a", {}, {}, {}) == "e"
        assert adapter.scheduled() == ["h"]

    def test_assert_called_fails(self):
        adapter = StubAdapter()
        with pytest.raises(AssertionError, match="No run"):
            adapter.assert_called("run", "x")

    def test_clear(self):
        adapter = StubAdapter()
        adapter.scheduled()
        adapter.clear()
        assert adapter.call_count == 0
