"""Test deferral primitives and asyncio-driven dispatch."""

import asyncio

import pytest

from pinvault_observer import (
    LoopScheduler,
    Observable,
    QueueScheduler,
    SchedulerUnavailableError,
    get_scheduler,
    set_scheduler,
)
from tests.harness import Recorder


async def settle(turns: int = 3) -> None:
    """Give call_soon callbacks a few loop turns."""
    for _ in range(turns):
        await asyncio.sleep(0)


class TestQueueScheduler:
    """Test the manual FIFO scheduler."""

    def test_runs_in_submission_order(self):
        scheduler = QueueScheduler()
        order = []
        for i in range(5):
            scheduler.defer(lambda i=i: order.append(i))
        assert len(scheduler) == 5
        assert scheduler.run_pending() == 5
        assert order == [0, 1, 2, 3, 4]

    def test_drains_work_queued_while_running(self):
        scheduler = QueueScheduler()
        order = []
        scheduler.defer(lambda: (order.append("outer"), scheduler.defer(lambda: order.append("inner"))))
        scheduler.defer(lambda: order.append("second"))
        assert scheduler.run_pending() == 3
        assert order == ["outer", "second", "inner"]

    def test_empty_queue_is_truthy(self):
        scheduler = QueueScheduler()
        assert len(scheduler) == 0
        assert scheduler

    def test_empty_instance_scheduler_is_used_outside_loop(self):
        # Arrange
        scheduler = QueueScheduler()
        obs = Observable()
        obs.scheduler = scheduler
        rec = Recorder()
        obs.on("x", rec.callback("x"))

        # Act
        obs.trigger("x")

        # Assert
        assert len(scheduler) == 1
        scheduler.run_pending()
        assert rec.labels == ["x"]

    def test_shared_instance_scheduler_keeps_fifo_across_objects(self):
        scheduler = QueueScheduler()
        first, second = Observable(), Observable()
        first.scheduler = second.scheduler = scheduler
        rec = Recorder()
        first.on("x", rec.callback("first"))
        second.on("x", rec.callback("second"))
        first.trigger("x")
        second.trigger("x")
        first.trigger("x")
        assert scheduler.run_pending() == 3
        assert rec.labels == ["first", "second", "first"]


class TestDefaultScheduler:
    """Test get_scheduler()/set_scheduler()."""

    def test_default_is_loop_scheduler(self):
        assert isinstance(get_scheduler(), LoopScheduler)

    def test_set_scheduler_returns_previous(self):
        replacement = QueueScheduler()
        previous = set_scheduler(replacement)
        try:
            assert get_scheduler() is replacement
            obs = Observable()
            rec = Recorder()
            obs.on("x", rec.callback("x"))
            obs.trigger("x")
            replacement.run_pending()
            assert rec.labels == ["x"]
        finally:
            set_scheduler(previous)

    def test_trigger_outside_loop_raises(self):
        obs = Observable()
        obs.on("x", Recorder().callback("x"))
        with pytest.raises(SchedulerUnavailableError) as exc_info:
            obs.trigger("x")
        assert exc_info.value.code == "no_running_loop"


class TestLoopDispatch:
    """Dispatch on a running asyncio loop."""

    @pytest.mark.asyncio
    async def test_trigger_defers_to_next_loop_turn(self):
        # Arrange
        obs = Observable()
        rec = Recorder()
        obs.on("event", rec.callback("a"))

        # Act
        obs.trigger("event", 1)

        # Assert
        assert rec.calls == []
        await settle()
        assert rec.labels == ["a"]
        assert rec.calls[0][2] == (1,)

    @pytest.mark.asyncio
    async def test_specificity_order_on_loop(self):
        obs = Observable()
        rec = Recorder()
        obs.on({}, rec.callback("empty"))
        obs.on({"a": 1}, rec.callback("a1"))
        obs.on({"a": 1, "b": 2}, rec.callback("a1b2"))
        obs.trigger({"a": 1, "b": 2})
        await settle()
        assert rec.labels == ["a1b2", "a1", "empty"]

    @pytest.mark.asyncio
    async def test_stop_on_loop(self):
        obs = Observable()
        rec = Recorder()

        def stopper(event):
            rec.calls.append(("stopper", event, (), {}))
            event.stop()

        obs.on({"a": 1, "b": 2}, stopper)
        obs.on({"a": 1}, rec.callback("a1"))
        obs.trigger({"a": 1, "b": 2})
        await settle()
        assert rec.labels == ["stopper"]

    @pytest.mark.asyncio
    async def test_explicit_loop(self):
        loop = asyncio.get_running_loop()
        obs = Observable()
        obs.scheduler = LoopScheduler(loop)
        done = loop.create_future()
        obs.on("ready", lambda event, value: done.set_result(value))
        obs.trigger("ready", 42)
        assert await asyncio.wait_for(done, timeout=1) == 42

    @pytest.mark.asyncio
    async def test_cascading_triggers_across_objects(self):
        source, relay = Observable(), Observable()
        rec = Recorder()
        relay.listen_to(source, "ping", lambda event: relay.trigger("pong"))
        relay.on("pong", rec.callback("pong"))
        source.trigger("ping")
        await settle()
        assert rec.labels == ["pong"]

    @pytest.mark.asyncio
    async def test_error_isolation_on_loop(self):
        obs = Observable()
        rec = Recorder()
        errors = []

        def boom(event):
            raise RuntimeError("boom")

        obs.on_observer_error = errors.append
        obs.on("event", boom)
        obs.on("event", rec.callback("after"))
        obs.trigger("event")
        await settle()
        assert rec.labels == ["after"]
        assert len(errors) == 1
