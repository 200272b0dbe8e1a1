"""
Click context extension for cmbridge CLI.

Provides the CmBridgeContext dataclass that holds cmbridge-specific data
passed through the Click command chain via ctx.obj.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from ..core.exceptions import WorkspaceError
from ..core.settings import CmBridgeSettings, load_settings

if TYPE_CHECKING:
    from ..core.interfaces.runner import ICommandRunner
    from ..plugins.vcs import CmVCSProvider
    from ..services.session import ProviderSession


@dataclass
class CmBridgeContext:
    """Extended context passed through Click command chain.

    Created once at CLI startup. Tests build one directly with a scripted
    runner and pass it as ``obj``.

    Attributes:
        cwd: Current working directory
        workspace_root: Root of the cm workspace (None if not in one)
        settings: Loaded settings
        is_interactive: Whether stdin is a TTY
        runner: Command runner override, None for the real cm
    """

    cwd: Path
    workspace_root: Path | None
    settings: CmBridgeSettings
    is_interactive: bool = False
    runner: ICommandRunner | None = None

    @classmethod
    def create(cls, cwd: Path | None = None, config_path: Path | None = None) -> CmBridgeContext:
        """Create a CmBridgeContext for the current environment.

        Args:
            cwd: Working directory override (defaults to Path.cwd())
            config_path: Explicit config file

        Returns:
            Configured CmBridgeContext instance
        """
        from ..plugins.vcs import CmVCSProvider

        if cwd is None:
            cwd = Path.cwd()
        settings = load_settings(config_path=config_path, start_dir=str(cwd))
        root = CmVCSProvider(settings=settings).get_workspace_root(str(cwd))
        return cls(
            cwd=cwd,
            workspace_root=Path(root) if root else None,
            settings=settings,
            is_interactive=sys.stdin.isatty(),
        )

    @property
    def in_workspace(self) -> bool:
        return self.workspace_root is not None

    def make_runner(self) -> ICommandRunner:
        """The runner override, or a cm runner in the workspace (or cwd)."""
        if self.runner is not None:
            return self.runner
        from ..services.shell import CmCommandRunner

        cm = self.settings.cm
        return CmCommandRunner(
            binary=cm.binary,
            timeout=cm.timeout,
            working_dir=cm.working_dir or str(self.workspace_root or self.cwd),
        )

    @property
    def vcs(self) -> CmVCSProvider:
        from ..plugins.vcs import CmVCSProvider

        return CmVCSProvider(settings=self.settings, runner=self.make_runner())

    def open_session(self) -> ProviderSession:
        """Started and connected session on the workspace; use as a context manager."""
        if self.workspace_root is None:
            raise WorkspaceError("Not in a cm workspace", path=str(self.cwd))
        return self.vcs.open_session(str(self.workspace_root))
