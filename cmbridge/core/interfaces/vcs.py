"""
Version control system provider interface definitions.

A small synchronous facade over a workspace, used by the CLI for quick
queries that do not need the asynchronous session.
"""

from abc import ABC, abstractmethod

from ..models.vcs import FileState, WorkspaceInfo


class IVCSProvider(ABC):
    """
    Interface for version control system operations.

    Implementations handle VCS-specific operations while
    conforming to this common interface.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """
        VCS identifier.

        Examples: 'cm'
        """
        pass

    @abstractmethod
    def get_workspace_root(self, path: str | None = None) -> str | None:
        """
        Find the workspace root from path.

        Args:
            path: Directory to start searching from (default: cwd)

        Returns:
            Path to workspace root, or None if not in a workspace
        """
        pass

    @abstractmethod
    def get_info(self, workspace_root: str) -> WorkspaceInfo:
        """
        Get workspace information.

        Args:
            workspace_root: Path to workspace root

        Returns:
            WorkspaceInfo with branch, repository and server
        """
        pass

    @abstractmethod
    def get_status(self, workspace_root: str, paths: list[str] | None = None) -> list[FileState]:
        """
        Get the status of files in the workspace.

        Args:
            workspace_root: Path to workspace root
            paths: Files or directories to query (default: whole workspace)

        Returns:
            One FileState per reported path
        """
        pass

    def is_available(self) -> bool:
        """
        Check if this VCS is available on the system.

        Returns:
            True if the VCS tool is installed
        """
        return True
