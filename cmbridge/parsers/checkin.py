"""Check-in results parser."""

from __future__ import annotations

from collections.abc import Sequence

_CHANGESET_PREFIX = "Created changeset "
_BRANCH_PREFIX = "@br:"


def parse_checkin_results(lines: Sequence[str]) -> str:
    """
    Summarize the output of ``cm checkin``.

    The last line usually looks like
    ``Created changeset cs:8@br:/main@MyProject@server@cloud (mount:'/')``
    and becomes ``Submitted changeset cs:8``. Any other last line is
    returned as-is.

    Returns:
        The summary, or an empty string for empty output
    """
    if not lines:
        return ""
    last = lines[-1]
    if not last.startswith(_CHANGESET_PREFIX):
        return last
    branch_index = last.find(_BRANCH_PREFIX)
    changeset = last[len(_CHANGESET_PREFIX) : branch_index] if branch_index > -1 else ""
    return f"Submitted changeset {changeset}"


def changeset_number(spec: str) -> int | None:
    """``cs:8`` to 8, None if ``spec`` is not a changeset spec."""
    if not spec.startswith("cs:"):
        return None
    try:
        return int(spec[3:])
    except ValueError:
        return None
