"""
Operation dispatcher.

Operations run on a thread pool; their completions are queued and delivered
by :meth:`OperationQueue.tick` on the thread that owns the queue, so
callbacks never run concurrently with each other or with the owner.
"""

from __future__ import annotations

import queue
import threading
from collections import deque
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor

from ...core.di import resolve_or_default
from ...core.exceptions import (
    CmBridgeException,
    SessionClosedError,
    UnsupportedOperationError,
)
from ...core.interfaces.logger import ILogger
from ...core.models.operations import Operation, OperationCallback, OperationKind, OperationOutcome
from ..logging import NullLogger
from .workers import WORKERS, Worker, WorkerContext

_Finished = tuple[Operation, OperationOutcome, "Exception | None"]


class OperationQueue:
    """
    Asynchronous executor of operations.

    Within one kind, completions are delivered in request order: a fast
    refresh waits for an earlier one of the same kind to be delivered (or
    to be completed elsewhere, e.g. cancelled as superseded).
    """

    def __init__(
        self,
        context: WorkerContext,
        max_workers: int = 4,
        workers: Mapping[OperationKind, Worker] | None = None,
        logger: ILogger | None = None,
    ) -> None:
        self._context = context
        self._workers = dict(WORKERS if workers is None else workers)
        self._logger = logger or resolve_or_default(ILogger, NullLogger)
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="cmbridge")
        self._finished: queue.Queue[_Finished] = queue.Queue()
        self._results: dict[int, _Finished] = {}
        # One queue per kind up front: callbacks run inside _deliver may execute any kind
        self._pending: dict[OperationKind, deque[Operation]] = {kind: deque() for kind in OperationKind}
        self._closed = False
        self._lock = threading.Lock()

    @property
    def context(self) -> WorkerContext:
        return self._context

    @property
    def closed(self) -> bool:
        return self._closed

    def execute(self, operation: Operation, callback: OperationCallback | None = None) -> Operation:
        """
        Queue an operation.

        An operation without a worker fails; its completion is still
        delivered through :meth:`tick`.

        Raises:
            SessionClosedError: The queue has been shut down
        """
        operation.add_callback(callback)
        with self._lock:
            if self._closed:
                raise SessionClosedError(
                    f"Cannot execute {operation.kind.value}: session is shut down"
                )
            self._pending[operation.kind].append(operation)

        worker = self._workers.get(operation.kind)
        if worker is None:
            error = UnsupportedOperationError(
                f"Unsupported operation: {operation.kind.value}",
                context={"kind": operation.kind.value},
            )
            operation.error_messages.append(str(error))
            self._finished.put((operation, OperationOutcome.FAILED, error))
            return operation

        self._logger.debug("Queued %s #%d", operation.kind.value, operation.operation_id)
        self._executor.submit(self._run, worker, operation)
        return operation

    def _run(self, worker: Worker, operation: Operation) -> None:
        outcome = OperationOutcome.SUCCEEDED
        error: Exception | None = None
        try:
            worker(self._context, operation)
        except CmBridgeException as e:
            outcome, error = OperationOutcome.FAILED, e
        except Exception as e:
            self._logger.error("Unexpected error in %s: %s", operation.kind.value, e, exc_info=True)
            outcome, error = OperationOutcome.FAILED, e

        if operation.cancel_event.is_set():
            outcome = OperationOutcome.CANCELLED
        elif error is not None:
            self._logger.warning("%s failed: %s", operation.kind.value, error)
            if str(error) not in operation.error_messages:
                operation.error_messages.append(str(error))
        self._finished.put((operation, outcome, error))

    def _deliver(self) -> int:
        """Complete operations at the head of each kind's request order."""
        delivered = 0
        for pending in self._pending.values():
            while pending:
                head = pending[0]
                if head.done:
                    # Completed elsewhere, e.g. superseded
                    pending.popleft()
                    self._results.pop(head.operation_id, None)
                    continue
                finished = self._results.pop(head.operation_id, None)
                if finished is None:
                    break
                pending.popleft()
                _, outcome, error = finished
                if head.complete(outcome, error):
                    delivered += 1
        return delivered

    def _collect(self, block: bool = False, timeout: float | None = None) -> bool:
        try:
            item = self._finished.get(block=block, timeout=timeout)
        except queue.Empty:
            return False
        while True:
            self._results[item[0].operation_id] = item
            try:
                item = self._finished.get_nowait()
            except queue.Empty:
                return True

    def tick(self) -> int:
        """
        Deliver the completions that are ready. Call from the owning thread.

        Returns:
            Number of operations completed
        """
        self._collect()
        return self._deliver()

    def execute_synchronous(self, operation: Operation, timeout: float | None = None) -> Operation:
        """
        Execute an operation and wait for its completion.

        Other completions that become ready meanwhile are delivered too.

        Raises:
            TimeoutError: The operation did not complete in time
        """
        self.execute(operation)
        return self.wait(operation, timeout)

    def wait(self, operation: Operation, timeout: float | None = None) -> Operation:
        """
        Deliver completions until ``operation`` is complete.

        Raises:
            TimeoutError: No completion arrived within ``timeout`` seconds
        """
        while not operation.done:
            collected = self._collect(block=True, timeout=timeout)
            self._deliver()
            if not collected and not operation.done:
                raise TimeoutError(f"{operation.kind.value} did not complete in time")
        return operation

    def shutdown(self, wait: bool = True) -> None:
        """
        Stop accepting operations and cancel the running ones.

        Pending completions are delivered as cancelled.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            pending = [op for ops in self._pending.values() for op in ops]
            for ops in self._pending.values():
                ops.clear()
        for operation in pending:
            operation.cancel()
        self._executor.shutdown(wait=wait, cancel_futures=True)
        for operation in pending:
            operation.complete(OperationOutcome.CANCELLED)
        self._results.clear()
