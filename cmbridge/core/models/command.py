"""
Command execution models.

Provides the immutable result of one cm invocation.
"""

from __future__ import annotations

from enum import Enum

from pydantic import Field, computed_field

from .base import ImmutableModel


class CommandOutcome(str, Enum):
    """How a cm process ended.

    Launch failure, non-zero exit, timeout and cancellation are kept apart
    so the operation layer can report them distinctly.
    """

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    LAUNCH_FAILED = "launch_failed"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"


class CommandResult(ImmutableModel):
    """Result of running ``cm <command> ...``.

    ``stdout`` is kept even when the process failed, since diagnostic
    parsers rely on partial output. ``errors`` holds the stderr lines.
    """

    command: str
    arguments: tuple[str, ...] = ()
    stdout: str = ""
    errors: tuple[str, ...] = ()
    info_messages: tuple[str, ...] = ()
    returncode: int | None = None
    outcome: CommandOutcome = CommandOutcome.SUCCEEDED
    elapsed: float = Field(default=0.0, ge=0.0)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def succeeded(self) -> bool:
        """True when the process exited with status 0."""
        return self.outcome == CommandOutcome.SUCCEEDED

    @property
    def lines(self) -> list[str]:
        """Non-empty stdout lines, trailing carriage returns removed."""
        return split_lines(self.stdout)

    @property
    def stderr(self) -> str:
        """Error lines joined back into one string."""
        return "\n".join(self.errors)

    @property
    def command_line(self) -> str:
        """Human-readable command line for logs and messages."""
        return " ".join(["cm", self.command, *self.arguments])


def split_lines(text: str) -> list[str]:
    """Split process output into non-empty lines.

    Args:
        text: Raw output, possibly with Windows line endings

    Returns:
        Lines in order, without empty ones
    """
    return [line.rstrip("\r") for line in text.split("\n") if line.strip("\r")]
