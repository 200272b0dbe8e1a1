"""
Provider session.

One session per workspace: it owns the command runner, the operation queue,
the caches and the change broadcast, and must be started before use and
shut down afterwards. Completions are delivered on the thread calling
:meth:`ProviderSession.tick` (or :meth:`ProviderSession.execute_synchronous`).
"""

from __future__ import annotations

import os
from collections.abc import Callable

from ..core.di import resolve_or_default
from ..core.exceptions import SessionClosedError, WorkspaceError
from ..core.interfaces.logger import ILogger
from ..core.interfaces.runner import ICommandRunner
from ..core.models.base import ImmutableModel
from ..core.models.operations import (
    MUTATING_KINDS,
    Operation,
    OperationCallback,
    OperationKind,
)
from ..core.models.vcs import WorkspaceInfo
from ..core.settings import CmBridgeSettings, load_settings
from ..parsers import UserNames
from .cache import CacheKind, ChangeBroadcast, FileStateCache, RefreshCoordinator
from .logging import NullLogger
from .operations import OperationQueue, WorkerContext
from .shell import CmCommandRunner


class ProviderSession:
    """
    Connection to one cm workspace.

    Example:
        >>> with ProviderSession("/path/to/workspace") as session:
        ...     session.connect()
        ...     op = session.execute_synchronous(Operation.create(OperationKind.GET_LOCKS))
    """

    def __init__(
        self,
        workspace_root: str,
        settings: CmBridgeSettings | None = None,
        runner: ICommandRunner | None = None,
        logger: ILogger | None = None,
    ) -> None:
        self._workspace_root = os.path.abspath(workspace_root)
        self._settings = settings or load_settings(start_dir=self._workspace_root)
        self._logger = logger or resolve_or_default(ILogger, NullLogger)
        self._runner = runner or CmCommandRunner(
            binary=self._settings.cm.binary,
            timeout=self._settings.cm.timeout,
            working_dir=self._settings.cm.working_dir or self._workspace_root,
            logger=self._logger,
        )
        self._info: WorkspaceInfo | None = None
        self._operations: OperationQueue | None = None
        self._broadcast: ChangeBroadcast | None = None
        self._coordinator: RefreshCoordinator | None = None

    def __enter__(self) -> ProviderSession:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    @property
    def workspace_root(self) -> str:
        return self._workspace_root

    @property
    def settings(self) -> CmBridgeSettings:
        return self._settings

    @property
    def runner(self) -> ICommandRunner:
        return self._runner

    @property
    def started(self) -> bool:
        return self._operations is not None and not self._operations.closed

    @property
    def info(self) -> WorkspaceInfo | None:
        """Workspace information, None until connected."""
        return self._info

    @property
    def is_connected(self) -> bool:
        return self._info is not None

    @property
    def broadcast(self) -> ChangeBroadcast:
        self._require_started()
        return self._broadcast  # type: ignore[return-value]

    @property
    def coordinator(self) -> RefreshCoordinator:
        self._require_started()
        return self._coordinator  # type: ignore[return-value]

    @property
    def file_states(self) -> FileStateCache:
        return self.coordinator.file_states

    def start(self) -> None:
        """Create the worker pool and the caches. Idempotent."""
        if self.started:
            return
        users = self._settings.users
        context = WorkerContext(
            runner=self._runner,
            settings=self._settings,
            workspace_root=self._workspace_root,
            logger=self._logger,
            user_names=UserNames(users.display_names, users.hide_email_domain),
        )
        self._operations = OperationQueue(
            context,
            max_workers=self._settings.cache.max_workers,
            logger=self._logger,
        )
        self._broadcast = ChangeBroadcast(logger=self._logger)
        self._coordinator = RefreshCoordinator(
            self._operations,
            self._broadcast,
            cancel_superseded=self._settings.cache.cancel_superseded,
            logger=self._logger,
        )
        context.known_states = lambda: tuple(self.file_states.by_path.values())
        self._logger.debug("Session started for %s", self._workspace_root)

    def shutdown(self) -> None:
        """Cancel running operations and empty the caches."""
        if self._operations is None:
            return
        self._coordinator.close()  # type: ignore[union-attr]
        self._operations.shutdown()
        self._logger.debug("Session shut down for %s", self._workspace_root)

    def _require_started(self) -> None:
        if not self.started:
            raise SessionClosedError("Session is not started")

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def execute(self, operation: Operation, callback: OperationCallback | None = None) -> Operation:
        """
        Queue an operation; ``callback`` runs once, from :meth:`tick`.

        Raises:
            SessionClosedError: The session is not started
            WorkspaceError: Not connected and the operation is not CONNECT
        """
        self._require_started()
        if operation.kind != OperationKind.CONNECT and not self.is_connected:
            raise WorkspaceError("Not connected to a workspace", path=self._workspace_root)
        operation.add_callback(self._on_completed)
        return self._operations.execute(operation, callback)  # type: ignore[union-attr]

    def execute_synchronous(self, operation: Operation, timeout: float | None = None) -> Operation:
        self._require_started()
        if operation.kind != OperationKind.CONNECT and not self.is_connected:
            raise WorkspaceError("Not connected to a workspace", path=self._workspace_root)
        operation.add_callback(self._on_completed)
        return self._operations.execute_synchronous(operation, timeout)  # type: ignore[union-attr]

    def tick(self) -> int:
        """Deliver ready completions. Returns how many were delivered."""
        self._require_started()
        return self._operations.tick()  # type: ignore[union-attr]

    def wait(self, operation: Operation, timeout: float | None = None) -> Operation:
        """Deliver completions until ``operation`` is complete."""
        self._require_started()
        return self._operations.wait(operation, timeout)  # type: ignore[union-attr]

    def connect(self, timeout: float | None = None) -> WorkspaceInfo:
        """
        Connect synchronously.

        Raises:
            WorkspaceError: The directory is not a workspace, or cm failed
        """
        operation = self.execute_synchronous(Operation.create(OperationKind.CONNECT), timeout)
        if not operation.succeeded:
            raise WorkspaceError(
                f"Could not connect: {operation.error}",
                path=self._workspace_root,
                cause=operation.error,
            )
        return self._info  # type: ignore[return-value]

    def _on_completed(self, operation: Operation) -> None:
        if not operation.succeeded:
            return
        if operation.kind == OperationKind.CONNECT:
            self._info = operation.result
            self._operations.context.info = operation.result  # type: ignore[union-attr]
            return
        self._coordinator.update_file_states(operation.updated_states)  # type: ignore[union-attr]
        if operation.kind in MUTATING_KINDS:
            self._coordinator.invalidate_all()  # type: ignore[union-attr]
        if operation.kind == OperationKind.UNLOCK:
            self._coordinator.request_refresh(CacheKind.LOCKS, invalidate=True)  # type: ignore[union-attr]

    # -------------------------------------------------------------------------
    # Caches and notifications
    # -------------------------------------------------------------------------

    def request_refresh(
        self,
        kind: CacheKind,
        filter: ImmutableModel | None = None,
        *,
        invalidate: bool = False,
        context: str = "default",
        callback: OperationCallback | None = None,
    ) -> Operation:
        """See :meth:`RefreshCoordinator.request_refresh`."""
        if not self.is_connected:
            raise WorkspaceError("Not connected to a workspace", path=self._workspace_root)
        return self.coordinator.request_refresh(
            kind,
            filter,
            invalidate=invalidate,
            context=context,
            callback=callback,
        )

    def subscribe(self, callback: Callable[[], None]) -> int:
        return self.broadcast.subscribe(callback)

    def unsubscribe(self, handle: int) -> bool:
        return self.broadcast.unsubscribe(handle)
