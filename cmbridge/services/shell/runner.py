"""
Command runner for the cm executable.

Spawns one process per call, captures stdout/stderr as text and applies a
timeout and an external cancellation signal. The outcome of the process is
reported in the returned CommandResult; domain meaning is left to callers.
"""

from __future__ import annotations

import shutil
import subprocess
import threading
import time
from collections.abc import Sequence
from typing import TYPE_CHECKING

from ...core.di import resolve_or_default
from ...core.exceptions import (
    CommandFailedError,
    CommandLaunchError,
    CommandTimeoutError,
)
from ...core.interfaces.logger import ILogger
from ...core.interfaces.runner import ICommandRunner
from ...core.models.command import CommandOutcome, CommandResult, split_lines
from ..logging import NullLogger

if TYPE_CHECKING:
    from ...core.models.config import CmConfig


class CmCommandRunner(ICommandRunner):
    """
    Runs ``cm <command> [parameters...] [files...]``.

    The wait loop polls so that a cancellation event or the deadline can
    interrupt it; an interrupted process is killed and whatever it wrote so
    far is still returned.
    """

    # Output longer than this is logged on its own line instead of inline
    LOG_OUTPUT_THRESHOLD = 200
    POLL_INTERVAL = 0.1

    def __init__(
        self,
        binary: str = "cm",
        timeout: float = 60.0,
        working_dir: str | None = None,
        logger: ILogger | None = None,
    ) -> None:
        self._binary = binary
        self._timeout = timeout
        self._working_dir = working_dir
        self._logger = logger or resolve_or_default(ILogger, NullLogger)

    @classmethod
    def from_config(cls, config: CmConfig, logger: ILogger | None = None) -> CmCommandRunner:
        return cls(
            binary=config.binary,
            timeout=config.timeout,
            working_dir=config.working_dir,
            logger=logger,
        )

    @property
    def working_dir(self) -> str | None:
        return self._working_dir

    def is_available(self) -> bool:
        """Check if the cm executable is on the PATH (or is an existing path)."""
        return shutil.which(self._binary) is not None

    def run(
        self,
        command: str,
        parameters: Sequence[str] = (),
        files: Sequence[str] = (),
        *,
        cancel_event: threading.Event | None = None,
        timeout: float | None = None,
    ) -> CommandResult:
        """Run one cm command and wait for it."""
        if not command:
            raise ValueError("command must not be empty")

        arguments = (*parameters, *files)
        command_line = " ".join(["cm", command, *arguments])
        limit = timeout if timeout is not None else self._timeout
        self._logger.debug("RunCommand: '%s'", command_line)

        start = time.monotonic()
        try:
            proc = subprocess.Popen(
                [self._binary, command, *arguments],
                cwd=self._working_dir,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            self._logger.error("Failed to launch '%s': %s", command_line, e)
            return CommandResult(
                command=command,
                arguments=arguments,
                errors=(str(e),),
                outcome=CommandOutcome.LAUNCH_FAILED,
                elapsed=time.monotonic() - start,
            )

        outcome = CommandOutcome.SUCCEEDED
        deadline = start + limit
        while True:
            try:
                stdout, stderr = proc.communicate(timeout=self.POLL_INTERVAL)
                break
            except subprocess.TimeoutExpired:
                if cancel_event is not None and cancel_event.is_set():
                    outcome = CommandOutcome.CANCELLED
                elif time.monotonic() >= deadline:
                    outcome = CommandOutcome.TIMED_OUT
                else:
                    continue
                proc.kill()
                stdout, stderr = proc.communicate()
                break

        elapsed = time.monotonic() - start
        if outcome == CommandOutcome.SUCCEEDED and proc.returncode != 0:
            outcome = CommandOutcome.FAILED

        result = CommandResult(
            command=command,
            arguments=arguments,
            stdout=stdout or "",
            errors=tuple(split_lines(stderr or "")),
            returncode=proc.returncode,
            outcome=outcome,
            elapsed=elapsed,
        )
        self._log_result(result)
        return result

    def _log_result(self, result: CommandResult) -> None:
        """Log the command output, keeping long output out of the summary line."""
        output = result.stdout
        if len(output) > self.LOG_OUTPUT_THRESHOLD:
            self._logger.debug(
                "RunCommand: '%s' (in %.3fs) output (%d chars)",
                result.command_line,
                result.elapsed,
                len(output),
            )
            self._logger.command_output(result.command_line, output)
        else:
            self._logger.debug(
                "RunCommand: '%s' (in %.3fs) output (%d chars): %s",
                result.command_line,
                result.elapsed,
                len(output),
                output,
            )
        if result.outcome == CommandOutcome.TIMED_OUT:
            self._logger.error("'%s' timed out after %.1fs", result.command_line, result.elapsed)
        elif result.outcome == CommandOutcome.CANCELLED:
            self._logger.info("'%s' cancelled", result.command_line)
        if result.errors:
            self._logger.warning("'%s' errors:\n%s", result.command_line, result.stderr)


def raise_for_outcome(result: CommandResult, timeout: float | None = None) -> CommandResult:
    """Turn a launch failure, timeout or non-zero exit into an exception.

    Cancelled results are returned unchanged: cancellation is not an error.

    Raises:
        CommandLaunchError: The process could not be started
        CommandTimeoutError: The deadline passed
        CommandFailedError: Non-zero exit status
    """
    if result.outcome == CommandOutcome.LAUNCH_FAILED:
        raise CommandLaunchError(
            f"Could not run cm: {result.stderr}",
            command=result.command_line,
        )
    if result.outcome == CommandOutcome.TIMED_OUT:
        raise CommandTimeoutError(
            "cm did not finish in time",
            command=result.command_line,
            timeout=timeout,
        )
    if result.outcome == CommandOutcome.FAILED:
        message = result.errors[-1] if result.errors else f"cm {result.command} failed"
        raise CommandFailedError(
            message,
            command=result.command_line,
            returncode=result.returncode,
            errors=list(result.errors),
        )
    return result
