"""
Filtering of benign cm error lines.

Some servers emit warnings on stderr that are not actionable. Lines
containing a configured substring are moved from the errors to the info
messages: kept for diagnostics, hidden from the error report.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from ..core.models.command import CommandOutcome, CommandResult
from .common import get_logger


def filter_lines(lines: Sequence[str], substring: str) -> tuple[list[str], list[str]]:
    """
    Split lines on a case-sensitive substring match, preserving order.

    Returns:
        (kept, removed): lines not containing ``substring``, lines containing it
    """
    kept: list[str] = []
    removed: list[str] = []
    for line in lines:
        (removed if substring in line else kept).append(line)
    return kept, removed


def remove_redundant_errors(result: CommandResult, filters: str | Iterable[str]) -> CommandResult:
    """
    Remove error lines matching any filter substring from a command result.

    Matching lines become info messages. If no error line remains and the
    command only failed with a non-zero exit, the result is considered a
    success.

    Args:
        result: Result of a cm invocation
        filters: One substring or several

    Returns:
        A new CommandResult (the input is not modified)
    """
    substrings = [filters] if isinstance(filters, str) else list(filters)
    errors = list(result.errors)
    moved: list[str] = []
    for substring in substrings:
        if not substring:
            continue
        errors, removed = filter_lines(errors, substring)
        moved.extend(removed)

    if not moved:
        return result

    logger = get_logger()
    for line in moved:
        logger.info("Filtered redundant error: %s", line)

    outcome = result.outcome
    if not errors and outcome == CommandOutcome.FAILED:
        outcome = CommandOutcome.SUCCEEDED

    return result.model_copy(
        update={
            "errors": tuple(errors),
            "info_messages": (*result.info_messages, *moved),
            "outcome": outcome,
        }
    )
