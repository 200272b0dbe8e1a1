"""
Lock list parser.

Lines come from ``cm lock list --anystatus --machinereadable
--format=<LOCK_LIST_FORMAT>``::

    1234;/Content/BP.uasset;Locked;2023-06-01T10:00:00+02:00;jane;/main;/main/task;Workspace_1
"""

from __future__ import annotations

from collections.abc import Sequence

from ..core.exceptions import ParseError
from ..core.models.vcs import Lock
from .common import UserNameMapper, identity, parse_date
from .status import FIELD_SEPARATOR, normalize_path

LOCK_LIST_FORMAT = FIELD_SEPARATOR.join(
    [
        "{itemid}",
        "{path}",
        "{status}",
        "{date}",
        "{owner}",
        "{destinationbranch}",
        "{branch}",
        "{workspace}",
    ]
)
_FIELD_COUNT = 8


def parse_lock(line: str, user_names: UserNameMapper = identity) -> Lock:
    """
    Parse one lock line.

    A path containing the separator is rejoined from the middle fields.

    Raises:
        ParseError: Too few fields or a non-numeric item id
    """
    fields = line.split(FIELD_SEPARATOR)
    if len(fields) < _FIELD_COUNT:
        raise ParseError(f"Unexpected lock line: {line!r}", source="lock list")
    extra = len(fields) - _FIELD_COUNT
    path = FIELD_SEPARATOR.join(fields[1 : 2 + extra])
    status, date, owner, destination_branch, branch, workspace = fields[2 + extra :]
    try:
        item_id = int(fields[0])
    except ValueError as e:
        raise ParseError(f"Invalid lock item id: {fields[0]!r}", source="lock list", cause=e) from e

    status = status.strip()
    return Lock(
        item_id=item_id,
        path=normalize_path(path),
        status=status,
        is_locked=status == "Locked",
        date=parse_date(date),
        owner=user_names(owner.strip()),
        destination_branch=destination_branch.strip(),
        branch=branch.strip(),
        workspace=workspace.strip(),
    )


def parse_locks(lines: Sequence[str], user_names: UserNameMapper = identity) -> list[Lock]:
    """
    Parse a lock list, all or nothing.

    Raises:
        ParseError: Any malformed line
    """
    return [parse_lock(line, user_names) for line in lines if line.strip()]
