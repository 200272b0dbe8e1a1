"""
Refresh coordinator.

Turns cache refresh requests into operations while avoiding redundant cm
processes:

- a request identical to an in-flight refresh attaches to it;
- a request with a different filter supersedes the in-flight one, whose
  completion is delivered as CANCELLED and whose result is discarded;
- ``invalidate=True`` always starts a new fetch.

Requests and completions happen on the thread that owns the operation
queue; the lock guards the in-flight table against readers on other
threads.
"""

from __future__ import annotations

import threading
from typing import Any

from ...core.di import resolve_or_default
from ...core.interfaces.logger import ILogger
from ...core.models.base import ImmutableModel
from ...core.models.operations import (
    PARAMS_BY_KIND,
    Operation,
    OperationCallback,
    OperationKind,
    OperationOutcome,
)
from ...core.models.vcs import FileState
from ..logging import NullLogger
from ..operations.dispatcher import OperationQueue
from .broadcast import ChangeBroadcast
from .state_cache import CacheKind, EntityCache, FileStateCache

REFRESH_OPERATIONS: dict[CacheKind, OperationKind] = {
    CacheKind.BRANCHES: OperationKind.GET_BRANCHES,
    CacheKind.CHANGESETS: OperationKind.GET_CHANGESETS,
    CacheKind.LOCKS: OperationKind.GET_LOCKS,
    CacheKind.FILE_STATES: OperationKind.UPDATE_STATUS,
}


class RefreshCoordinator:
    """Owns the entity caches and the refreshes feeding them."""

    def __init__(
        self,
        operations: OperationQueue,
        broadcast: ChangeBroadcast,
        cancel_superseded: bool = True,
        logger: ILogger | None = None,
    ) -> None:
        self._operations = operations
        self._broadcast = broadcast
        self._cancel_superseded = cancel_superseded
        self._logger = logger or resolve_or_default(ILogger, NullLogger)
        self._caches: dict[CacheKind, EntityCache] = {
            kind: FileStateCache() if kind == CacheKind.FILE_STATES else EntityCache(kind=kind)
            for kind in CacheKind
        }
        self._in_flight: dict[tuple[CacheKind, str], Operation] = {}
        self._lock = threading.Lock()
        self._publishing_kind: CacheKind | None = None
        self._subscription = broadcast.subscribe(self._on_state_changed)

    def cache(self, kind: CacheKind) -> EntityCache:
        return self._caches[kind]

    @property
    def file_states(self) -> FileStateCache:
        return self._caches[CacheKind.FILE_STATES]  # type: ignore[return-value]

    def in_flight(self, kind: CacheKind, context: str = "default") -> Operation | None:
        with self._lock:
            return self._in_flight.get((kind, context))

    def request_refresh(
        self,
        kind: CacheKind,
        filter: ImmutableModel | None = None,
        *,
        invalidate: bool = False,
        context: str = "default",
        callback: OperationCallback | None = None,
    ) -> Operation:
        """
        Refresh a cache.

        Args:
            kind: Cache to refresh
            filter: Parameters of the refresh operation (default: none)
            invalidate: Start a new fetch even if an identical one is running
            context: Scope of supersession; refreshes of different
                contexts never cancel each other
            callback: Called once with the operation on completion

        Returns:
            The operation the request is attached to
        """
        operation_kind = REFRESH_OPERATIONS[kind]
        if filter is None:
            filter = PARAMS_BY_KIND[operation_kind]()
        key = (kind, context)

        with self._lock:
            current = self._in_flight.get(key)
            if current is not None and not current.done:
                if current.params == filter and not invalidate:
                    self._logger.debug(
                        "Attaching to in-flight %s refresh #%d", kind.value, current.operation_id
                    )
                    current.add_callback(callback)
                    return current
            else:
                current = None

            operation = Operation(kind=operation_kind, params=filter, context=context)
            # Cache update first, so consumer callbacks see the new snapshot
            operation.add_callback(lambda op: self._on_refreshed(kind, key, op))
            operation.add_callback(callback)
            self._in_flight[key] = operation
            self._caches[kind].begin_load()

        if current is not None:
            self._supersede(kind, current)
        self._operations.execute(operation)
        return operation

    def _supersede(self, kind: CacheKind, operation: Operation) -> None:
        self._logger.debug("Superseding %s refresh #%d", kind.value, operation.operation_id)
        if self._cancel_superseded:
            operation.cancel()
        operation.complete(OperationOutcome.CANCELLED)

    def _on_refreshed(self, kind: CacheKind, key: tuple[CacheKind, str], operation: Operation) -> None:
        with self._lock:
            if self._in_flight.get(key) is not operation:
                # Superseded: result discarded
                return
            del self._in_flight[key]
            cache = self._caches[kind]
            if not operation.succeeded:
                cache.fail()
                return
            cache.replace(operation.result or (), operation.params)
        self._publish(kind)

    def _publish(self, kind: CacheKind | None) -> None:
        self._publishing_kind = kind
        try:
            self._broadcast.publish()
        finally:
            self._publishing_kind = None

    def _on_state_changed(self) -> None:
        for kind, cache in self._caches.items():
            if kind != self._publishing_kind:
                cache.mark_stale()

    def update_file_states(self, states: list[FileState]) -> None:
        """Merge states learned by another operation, then notify."""
        if not states:
            return
        with self._lock:
            self.file_states.replace(states, self.file_states.snapshot.filter)
        self._publish(CacheKind.FILE_STATES)

    def invalidate_all(self) -> None:
        """A mutation happened: every cache is stale."""
        for cache in self._caches.values():
            cache.mark_stale()
        self._publish(None)

    def snapshot(self, kind: CacheKind) -> tuple[Any, ...]:
        return self._caches[kind].entities

    def close(self) -> None:
        """Cancel in-flight refreshes and empty every cache."""
        self._broadcast.unsubscribe(self._subscription)
        with self._lock:
            in_flight = list(self._in_flight.values())
            self._in_flight.clear()
        for operation in in_flight:
            operation.cancel()
            operation.complete(OperationOutcome.CANCELLED)
        for cache in self._caches.values():
            cache.clear()
