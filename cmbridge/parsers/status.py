"""
File and directory status parsers.

Parses ``cm status --machinereadable --fieldseparator=;`` lines such as::

    CO+CH;c:/Workspace/Content/Changed_BP.uasset;False;NO_MERGES
    MV;100%;c:/Workspace/Content/ToMove_BP.uasset;c:/Workspace/Content/Moved_BP.uasset;False;NO_MERGES

and ``cm fileinfo`` lines ``{RevisionChangeset};{RevisionHeadChangeset};
{RepSpec};{LockedBy};{LockedWhere}``.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Sequence

from ..core.models.vcs import FileState, WorkspaceState
from .common import UserNameMapper, get_logger, identity

FIELD_SEPARATOR = ";"
FILEINFO_FORMAT = "{RevisionChangeset};{RevisionHeadChangeset};{RepSpec};{LockedBy};{LockedWhere}"

# Tokens matched exactly, checked after the CP/MV/RP substring rules
_EXACT_TOKENS: dict[str, WorkspaceState] = {
    "CH": WorkspaceState.CHANGED,
    "CO+CH": WorkspaceState.CHECKED_OUT_CHANGED,
    "AD": WorkspaceState.ADDED,
    "PR": WorkspaceState.PRIVATE,
    "LM": WorkspaceState.PRIVATE,
    "IG": WorkspaceState.IGNORED,
    "DE": WorkspaceState.DELETED,
    "LD": WorkspaceState.LOCALLY_DELETED,
}


def normalize_path(path: str) -> str:
    """Use forward slashes, as cm reports Windows paths with backslashes."""
    return path.replace("\\", "/")


def state_from_token(token: str, report_checked_out_changed: bool = True) -> WorkspaceState | None:
    """
    Map a status token to a workspace state.

    ``CO`` alone means "checked out, unchanged" when the client reports
    changed check-outs separately as ``CO+CH``.

    Returns:
        The state, or None for an unknown token
    """
    if token == "CO":
        if report_checked_out_changed:
            return WorkspaceState.CHECKED_OUT_UNCHANGED
        return WorkspaceState.CHECKED_OUT_CHANGED
    # Combined tokens such as "CO+CP" or "AD+MV"
    if "CP" in token:
        return WorkspaceState.COPIED
    if "MV" in token:
        return WorkspaceState.MOVED
    if "RP" in token:
        return WorkspaceState.REPLACED
    return _EXACT_TOKENS.get(token)


def parse_status_line(line: str, report_checked_out_changed: bool = True) -> FileState | None:
    """
    Parse one machine-readable status line.

    Returns:
        The file state, or None if the line is malformed or its token is
        unknown (a warning is logged in both cases)
    """
    fields = line.split(FIELD_SEPARATOR)
    if len(fields) < 4:
        get_logger().warning("Skipping malformed status line: %r", line)
        return None

    token = fields[0].strip()
    state = state_from_token(token, report_checked_out_changed)
    if state is None:
        get_logger().warning("Unknown file status %r, skipping: %r", token, line)
        return None

    if state == WorkspaceState.MOVED:
        if len(fields) < 5:
            get_logger().warning("Skipping malformed move status line: %r", line)
            return None
        return FileState(
            path=normalize_path(fields[3]),
            state=state,
            moved_from=normalize_path(fields[2]),
        )
    return FileState(path=normalize_path(fields[1]), state=state)


def parse_status_lines(lines: Sequence[str], report_checked_out_changed: bool = True) -> list[FileState]:
    """
    Parse status lines, skipping the ones that cannot be mapped.

    A path appears at most once in the result; a later line for the same
    path replaces the earlier one.
    """
    by_path: dict[str, FileState] = {}
    for line in lines:
        state = parse_status_line(line, report_checked_out_changed)
        if state is not None:
            by_path[state.path] = state
    return list(by_path.values())


def parse_file_status(
    files: Sequence[str],
    lines: Sequence[str],
    report_checked_out_changed: bool = True,
    exists: Callable[[str], bool] = os.path.exists,
) -> list[FileState]:
    """
    States of explicitly listed files.

    cm only reports files that differ from the repository: a listed file
    absent from the output is controlled and unchanged if it exists on
    disk, or private (new, not yet saved) if it does not.

    Args:
        files: Files the status was requested for
        lines: Status lines, header already removed
        report_checked_out_changed: See state_from_token()
        exists: File existence check, injectable for tests

    Returns:
        One state per listed file, in the order of ``files``
    """
    reported = {s.path: s for s in parse_status_lines(lines, report_checked_out_changed)}
    states: list[FileState] = []
    seen: set[str] = set()
    for file in files:
        path = normalize_path(file)
        if path in seen:
            continue
        seen.add(path)
        found = reported.get(path)
        if found is not None:
            states.append(found)
        elif exists(file):
            states.append(FileState(path=path, state=WorkspaceState.CONTROLLED))
        else:
            states.append(FileState(path=path, state=WorkspaceState.PRIVATE))
    return states


def parse_directory_status(
    directory: str,
    lines: Sequence[str],
    previous: Sequence[FileState] = (),
    report_checked_out_changed: bool = True,
    exists: Callable[[str], bool] = os.path.exists,
) -> list[FileState]:
    """
    States reported for a whole directory.

    Every reported line becomes a state. Files of the directory that were
    previously known in a non-controlled state but are no longer reported
    were checked in or reverted elsewhere: they come back as controlled, or
    are dropped when they were deleted and are gone from disk.

    Args:
        directory: The directory the status was requested for
        lines: Status lines, header already removed
        previous: Previously cached states, used to detect such files
    """
    states = parse_status_lines(lines, report_checked_out_changed)
    reported = {s.path.lower() for s in states}
    prefix = normalize_path(directory)

    for old in previous:
        if not old.path.startswith(prefix) or old.path.lower() in reported:
            continue
        if old.state in (WorkspaceState.UNKNOWN, WorkspaceState.CONTROLLED):
            continue
        if old.is_deleted and not exists(old.path):
            continue
        states.append(FileState(path=old.path, state=WorkspaceState.CONTROLLED))
    return states


def needs_fileinfo(state: FileState, whole_directory: bool = False, update_history: bool = False) -> bool:
    """
    Whether revision and lock details are worth a ``cm fileinfo`` call.

    Checked-out, added, moved or private files are skipped: they cannot be
    out of date in a way that matters.
    """
    if update_history:
        return True
    if state.state == WorkspaceState.CONTROLLED:
        return not whole_directory
    return state.state in (WorkspaceState.CHANGED, WorkspaceState.LOCALLY_DELETED)


def parse_fileinfo(
    lines: Sequence[str],
    states: Sequence[FileState],
    current_user: str = "",
    user_names: UserNameMapper = identity,
) -> list[FileState]:
    """
    Complete states with revision and lock details.

    Line ``i`` describes ``states[i]``. A line without exactly five fields
    leaves its state unchanged. A controlled file locked by another user
    becomes LOCKED_BY_OTHER.

    Returns:
        New states, same order and length as ``states``
    """
    if len(lines) != len(states):
        get_logger().warning(
            "fileinfo returned %d lines for %d files", len(lines), len(states)
        )

    result: list[FileState] = []
    for index, state in enumerate(states):
        if index >= len(lines):
            result.append(state)
            continue
        fields = lines[index].split(FIELD_SEPARATOR)
        if len(fields) != 5:
            get_logger().warning("Skipping malformed fileinfo line: %r", lines[index])
            result.append(state)
            continue

        locked_by = user_names(fields[3].strip()) if fields[3].strip() else ""
        update = {
            "local_revision_changeset": _to_int(fields[0]),
            "depot_revision_changeset": _to_int(fields[1]),
            "rep_spec": fields[2].strip(),
            "locked_by": locked_by,
            "locked_where": fields[4].strip(),
        }
        if (
            locked_by
            and current_user
            and locked_by != user_names(current_user)
            and state.state == WorkspaceState.CONTROLLED
        ):
            update["state"] = WorkspaceState.LOCKED_BY_OTHER
        result.append(state.model_copy(update=update))
    return result


def _to_int(text: str) -> int:
    try:
        return int(text.strip())
    except ValueError:
        return -1
