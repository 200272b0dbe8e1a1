"""
cm VCS provider.

Implements the synchronous provider interface on top of a short-lived
ProviderSession per call.
"""

from __future__ import annotations

from ...core.di import resolve_or_default
from ...core.exceptions import OperationError
from ...core.interfaces.logger import ILogger
from ...core.interfaces.runner import ICommandRunner
from ...core.models.operations import Operation, OperationKind
from ...core.models.vcs import FileState, WorkspaceInfo
from ...core.settings import CmBridgeSettings, load_settings
from ...services.logging import NullLogger
from ...services.session import ProviderSession
from ...services.shell import CmCommandRunner
from .base import BaseVCSProvider


class CmVCSProvider(BaseVCSProvider):
    """
    Unity Version Control (cm) provider.

    Each query connects a fresh session, runs one operation and shuts the
    session down. Long-lived consumers should keep a ProviderSession.
    """

    metadata_dir = ".plastic"

    def __init__(
        self,
        settings: CmBridgeSettings | None = None,
        runner: ICommandRunner | None = None,
        logger: ILogger | None = None,
    ) -> None:
        self._settings = settings
        self._runner = runner
        self._logger = logger or resolve_or_default(ILogger, NullLogger)

    @property
    def name(self) -> str:
        return "cm"

    @property
    def settings(self) -> CmBridgeSettings:
        if self._settings is None:
            self._settings = load_settings()
        return self._settings

    def is_available(self) -> bool:
        """Check if the cm executable is installed."""
        runner = self._runner or CmCommandRunner.from_config(self.settings.cm, self._logger)
        return runner.is_available()

    def open_session(self, workspace_root: str) -> ProviderSession:
        """Create a started and connected session. The caller shuts it down."""
        session = ProviderSession(
            workspace_root,
            settings=self.settings,
            runner=self._runner,
            logger=self._logger,
        )
        session.start()
        try:
            session.connect()
        except Exception:
            session.shutdown()
            raise
        return session

    def get_info(self, workspace_root: str) -> WorkspaceInfo:
        """Connect to the workspace and return its information."""
        session = self.open_session(workspace_root)
        try:
            return session.info  # type: ignore[return-value]
        finally:
            session.shutdown()

    def get_status(self, workspace_root: str, paths: list[str] | None = None) -> list[FileState]:
        """
        Status of the given paths, or of the whole workspace.

        Raises:
            CmBridgeException: cm failed or its output could not be parsed
        """
        session = self.open_session(workspace_root)
        try:
            operation = session.execute_synchronous(
                Operation.create(OperationKind.UPDATE_STATUS, paths=list(paths or []))
            )
        finally:
            session.shutdown()
        if not operation.succeeded:
            if operation.error is not None:
                raise operation.error
            raise OperationError(f"{operation.kind.value} {operation.outcome.value}")
        return list(operation.result)
