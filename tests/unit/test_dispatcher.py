"""
Unit tests for the operation queue.
"""

import threading
import time

import pytest

from cmbridge.core.exceptions import OperationError, SessionClosedError, UnsupportedOperationError
from cmbridge.core.models.operations import Operation, OperationKind, OperationOutcome
from cmbridge.services.logging import NullLogger
from cmbridge.services.operations import OperationQueue, WorkerContext


@pytest.fixture
def context(fake_runner, settings, tmp_path):
    return WorkerContext(
        runner=fake_runner,
        settings=settings,
        workspace_root=str(tmp_path),
        logger=NullLogger(),
    )


@pytest.fixture
def make_queue(context):
    queues = []

    def factory(workers):
        queue = OperationQueue(context, workers=workers)
        queues.append(queue)
        return queue

    yield factory
    for queue in queues:
        queue.shutdown()


def locks_worker(ctx, operation):
    operation.result = ("lock",)


def tick_until(queue, *operations, timeout=5.0):
    deadline = time.monotonic() + timeout
    while not all(op.done for op in operations) and time.monotonic() < deadline:
        queue.tick()
        time.sleep(0.01)


class TestExecute:
    """Tests for execute and wait."""

    def test_success(self, make_queue):
        """A worker that returns succeeds with its result."""
        queue = make_queue({OperationKind.GET_LOCKS: locks_worker})
        operation = queue.execute_synchronous(Operation(kind=OperationKind.GET_LOCKS), timeout=5)

        assert operation.outcome == OperationOutcome.SUCCEEDED
        assert operation.result == ("lock",)

    def test_callback_runs_on_caller_thread(self, make_queue):
        """Completions are delivered by the thread that waits or ticks."""
        queue = make_queue({OperationKind.GET_LOCKS: locks_worker})
        threads = []
        operation = Operation(kind=OperationKind.GET_LOCKS)
        queue.execute(operation, lambda op: threads.append(threading.current_thread()))
        queue.wait(operation, timeout=5)

        assert threads == [threading.current_thread()]

    def test_tick_delivers_ready_completions(self, make_queue):
        """Nothing is delivered before tick."""
        queue = make_queue({OperationKind.GET_LOCKS: locks_worker})
        operation = Operation(kind=OperationKind.GET_LOCKS)
        queue.execute(operation)
        assert operation.done is False

        deadline = time.monotonic() + 5
        delivered = 0
        while not operation.done and time.monotonic() < deadline:
            delivered += queue.tick()
            time.sleep(0.01)

        assert operation.succeeded
        assert delivered == 1
        assert queue.tick() == 0

    def test_unsupported_kind(self, make_queue):
        """A kind without worker fails with UnsupportedOperationError."""
        queue = make_queue({})
        operation = queue.execute_synchronous(Operation(kind=OperationKind.GET_LOCKS), timeout=5)

        assert operation.outcome == OperationOutcome.FAILED
        assert isinstance(operation.error, UnsupportedOperationError)

    def test_worker_error(self, make_queue):
        """A worker raising a cmbridge error fails the operation."""

        def failing(ctx, operation):
            raise OperationError("server unreachable")

        queue = make_queue({OperationKind.GET_LOCKS: failing})
        operation = queue.execute_synchronous(Operation(kind=OperationKind.GET_LOCKS), timeout=5)

        assert operation.outcome == OperationOutcome.FAILED
        assert operation.error_messages == ["server unreachable"]

    def test_unexpected_exception(self, make_queue):
        """Any other exception also fails the operation."""

        def broken(ctx, operation):
            raise KeyError("missing")

        queue = make_queue({OperationKind.GET_LOCKS: broken})
        operation = queue.execute_synchronous(Operation(kind=OperationKind.GET_LOCKS), timeout=5)

        assert operation.outcome == OperationOutcome.FAILED
        assert isinstance(operation.error, KeyError)

    def test_cancelled_worker(self, make_queue):
        """A worker stopped by its cancel event completes as cancelled."""
        started = threading.Event()

        def blocking(ctx, operation):
            started.set()
            operation.cancel_event.wait(5)
            raise OperationError("interrupted")

        queue = make_queue({OperationKind.GET_LOCKS: blocking})
        operation = Operation(kind=OperationKind.GET_LOCKS)
        queue.execute(operation)
        started.wait(5)
        operation.cancel()
        queue.wait(operation, timeout=5)

        assert operation.outcome == OperationOutcome.CANCELLED

    def test_wait_timeout(self, make_queue):
        gate = threading.Event()

        def blocking(ctx, operation):
            gate.wait(5)

        queue = make_queue({OperationKind.GET_LOCKS: blocking})
        operation = Operation(kind=OperationKind.GET_LOCKS)
        queue.execute(operation)
        with pytest.raises(TimeoutError):
            queue.wait(operation, timeout=0.05)
        gate.set()
        queue.wait(operation, timeout=5)


class TestOrdering:
    """Tests for per-kind delivery order."""

    def test_request_order_within_kind(self, make_queue):
        """A fast operation waits for an earlier slow one of the same kind."""
        gate = threading.Event()
        order = []

        def worker(ctx, operation):
            if operation.params.paths == ("slow",):
                gate.wait(5)

        queue = make_queue({OperationKind.GET_HISTORY: worker})
        slow = Operation.create(OperationKind.GET_HISTORY, paths=["slow"])
        fast = Operation.create(OperationKind.GET_HISTORY, paths=["fast"])
        queue.execute(slow, lambda op: order.append("slow"))
        queue.execute(fast, lambda op: order.append("fast"))

        with pytest.raises(TimeoutError):
            queue.wait(fast, timeout=0.2)
        assert order == []

        gate.set()
        queue.wait(fast, timeout=5)
        assert order == ["slow", "fast"]

    def test_completed_elsewhere_does_not_block(self, make_queue):
        """An operation completed outside the queue is skipped."""
        gate = threading.Event()

        def worker(ctx, operation):
            if operation.params.paths == ("slow",):
                gate.wait(5)

        queue = make_queue({OperationKind.GET_HISTORY: worker})
        slow = Operation.create(OperationKind.GET_HISTORY, paths=["slow"])
        fast = Operation.create(OperationKind.GET_HISTORY, paths=["fast"])
        queue.execute(slow)
        queue.execute(fast)
        slow.complete(OperationOutcome.CANCELLED)

        queue.wait(fast, timeout=5)
        assert fast.succeeded
        gate.set()

    def test_kinds_are_independent(self, make_queue):
        """A slow operation does not hold back another kind."""
        gate = threading.Event()

        def slow(ctx, operation):
            gate.wait(5)

        queue = make_queue({OperationKind.GET_BRANCHES: slow, OperationKind.GET_LOCKS: locks_worker})
        branches = Operation(kind=OperationKind.GET_BRANCHES)
        locks = Operation(kind=OperationKind.GET_LOCKS)
        queue.execute(branches)
        queue.execute(locks)

        queue.wait(locks, timeout=5)
        assert not branches.done
        gate.set()
        queue.wait(branches, timeout=5)


class TestCallbacks:
    """Tests for what completion callbacks may do."""

    def test_callback_executes_another_kind(self, make_queue):
        """A callback may queue a kind that was never executed before."""
        queue = make_queue(
            {OperationKind.UNLOCK: lambda ctx, op: None, OperationKind.GET_LOCKS: locks_worker}
        )
        followups = []

        def refresh_locks(op):
            followups.append(queue.execute(Operation(kind=OperationKind.GET_LOCKS)))

        unlock = Operation.create(OperationKind.UNLOCK, item_ids=[1234])
        queue.execute(unlock, refresh_locks)

        tick_until(queue, unlock)
        assert unlock.succeeded
        assert len(followups) == 1

        tick_until(queue, followups[0])
        assert followups[0].result == ("lock",)

    def test_failing_callback_does_not_hold_back_others(self, make_queue):
        """Other ready completions are delivered in the same tick."""
        queue = make_queue({OperationKind.GET_LOCKS: locks_worker, OperationKind.GET_BRANCHES: locks_worker})

        def failing(op):
            raise RuntimeError("consumer bug")

        locks = queue.execute(Operation(kind=OperationKind.GET_LOCKS), failing)
        branches = queue.execute(Operation(kind=OperationKind.GET_BRANCHES))
        deadline = time.monotonic() + 5
        while queue._finished.qsize() < 2 and time.monotonic() < deadline:
            time.sleep(0.01)

        assert queue.tick() == 2
        assert locks.succeeded and branches.succeeded


class TestShutdown:
    """Tests for shutdown."""

    def test_execute_after_shutdown(self, make_queue):
        queue = make_queue({OperationKind.GET_LOCKS: locks_worker})
        queue.shutdown()
        assert queue.closed
        with pytest.raises(SessionClosedError):
            queue.execute(Operation(kind=OperationKind.GET_LOCKS))

    def test_pending_cancelled(self, make_queue):
        """Running operations are cancelled and delivered as such."""

        def blocking(ctx, operation):
            operation.cancel_event.wait(5)

        queue = make_queue({OperationKind.GET_LOCKS: blocking})
        operation = Operation(kind=OperationKind.GET_LOCKS)
        queue.execute(operation)
        queue.shutdown()

        assert operation.outcome == OperationOutcome.CANCELLED
