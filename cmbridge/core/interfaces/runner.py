"""
Command runner interface.

Decouples operations from the way the cm executable is spawned so that
tests can substitute a scripted runner.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections.abc import Sequence

from ..models.command import CommandResult


class ICommandRunner(ABC):
    """
    Interface for running cm commands.

    One call spawns one process. Implementations never raise for a
    non-zero exit: the outcome is reported in the returned result.
    """

    @abstractmethod
    def run(
        self,
        command: str,
        parameters: Sequence[str] = (),
        files: Sequence[str] = (),
        *,
        cancel_event: threading.Event | None = None,
        timeout: float | None = None,
    ) -> CommandResult:
        """
        Run ``cm <command> [parameters...] [files...]``.

        Args:
            command: cm sub-command, e.g. 'status'
            parameters: Flags and arguments placed after the command
            files: File arguments placed last
            cancel_event: Set to abort the wait and kill the process
            timeout: Override of the configured timeout in seconds

        Returns:
            CommandResult with captured stdout/stderr and the outcome
        """
        pass

    def is_available(self) -> bool:
        """
        Check if the executable can be found.

        Returns:
            True if cm is installed
        """
        return True
