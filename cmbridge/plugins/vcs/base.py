"""
Base VCS provider.

Defines the interface for version control system providers.
"""

from abc import abstractmethod
from pathlib import Path

from ...core.interfaces.vcs import IVCSProvider
from ...core.models.vcs import FileState, WorkspaceInfo


class BaseVCSProvider(IVCSProvider):
    """
    Abstract base class for VCS providers.

    Implements the Strategy pattern for version control operations.
    Workspaces are recognized by a metadata directory at their root.
    """

    # Directory marking the root of a workspace
    metadata_dir: str = ""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the VCS name (e.g., 'cm')."""
        pass

    def get_workspace_root(self, path: str | None = None) -> str | None:
        """
        Walk up from path to the directory holding the metadata directory.

        Args:
            path: Starting path (defaults to current directory)

        Returns:
            Workspace root path, or None if not in a workspace
        """
        start = Path(path).resolve() if path else Path.cwd()
        if start.is_file():
            start = start.parent
        for parent in [start, *start.parents]:
            if (parent / self.metadata_dir).is_dir():
                return str(parent)
        return None

    @abstractmethod
    def get_info(self, workspace_root: str) -> WorkspaceInfo:
        pass

    @abstractmethod
    def get_status(self, workspace_root: str, paths: list[str] | None = None) -> list[FileState]:
        pass
