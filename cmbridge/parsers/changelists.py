"""
Changelists, shelves and shelve diff parsers.

Changelists come from ``cm status --changelists --xml=<file>``::

    <StatusOutput>
      <Changelists>
        <Changelist>
          <Name>Default</Name>
          <Description>Default Unity Version Control changelist</Description>
          <Changes>
            <Change>
              <Type>Changed</Type>
              <Path>Content/BP.uasset</Path>
            </Change>
          </Changes>
        </Changelist>
      </Changelists>
    </StatusOutput>

Shelves from ``cm find shelves "where owner='me'" --xml --file=<file>``
(a PLASTICQUERY report of SHELVE elements), and shelve contents from
``cm diff sh:<id>``.
"""

from __future__ import annotations

import os
from collections.abc import Sequence
from pathlib import Path

from ..core.exceptions import ParseError
from ..core.models.vcs import (
    DEFAULT_CHANGELIST,
    Changelist,
    FileState,
    Revision,
    Shelve,
    WorkspaceState,
)
from .common import (
    UserNameMapper,
    child_int,
    child_text,
    find_child,
    get_logger,
    identity,
    iter_children,
    load_xml,
    parse_date,
)
from .history import file_state_to_action
from .status import FIELD_SEPARATOR, normalize_path

SHELVE_DIFF_FORMAT = "{status};{baserevid};{path}"

_SHELVE_STATES = {
    "A": WorkspaceState.ADDED,
    "D": WorkspaceState.DELETED,
    "C": WorkspaceState.CHECKED_OUT_CHANGED,
    "M": WorkspaceState.MOVED,
}


def _absolute(workspace_root: str, path: str) -> str:
    path = normalize_path(path)
    if not workspace_root or os.path.isabs(path) or path.startswith("/"):
        return path
    return normalize_path(os.path.join(workspace_root, path))


def changelist_shelve_prefix(name: str) -> str:
    """Shelves made for a changelist carry this comment prefix."""
    return f"Changelist{name}: "


def parse_changelists_xml(path: str | Path, workspace_root: str = "") -> list[Changelist]:
    """
    Parse pending changelists.

    Only files are kept (paths with an extension); added directories are
    not listed. The Default changelist is always present and first.

    Raises:
        ParseError: Missing or malformed report
    """
    root = load_xml(path, "StatusOutput")
    changelists: list[Changelist] = []
    changelists_node = find_child(root, "Changelists")
    if changelists_node is not None:
        for node in iter_children(changelists_node, "Changelist"):
            name = child_text(node, "Name")
            changes = find_child(node, "Changes")
            if not name or changes is None:
                continue
            files = []
            for change in iter_children(changes, "Change"):
                file_path = child_text(change, "Path")
                if "." not in os.path.basename(file_path):
                    continue
                files.append(FileState(path=_absolute(workspace_root, file_path)))
            description = "" if name == DEFAULT_CHANGELIST else child_text(node, "Description")
            changelists.append(Changelist(name=name, description=description, files=tuple(files)))

    default_index = next((i for i, cl in enumerate(changelists) if cl.is_default), None)
    if default_index is None:
        changelists.insert(0, Changelist(name=DEFAULT_CHANGELIST))
    elif default_index > 0:
        changelists.insert(0, changelists.pop(default_index))
    return changelists


def parse_shelves_xml(path: str | Path, user_names: UserNameMapper = identity) -> list[Shelve]:
    """
    Parse a ``cm find shelves`` report.

    Raises:
        ParseError: Missing or malformed report
    """
    root = load_xml(path, "PLASTICQUERY")
    shelves = []
    for node in iter_children(root, "SHELVE"):
        shelve_id = child_int(node, "SHELVEID")
        if shelve_id < 0:
            continue
        shelves.append(
            Shelve(
                shelve_id=shelve_id,
                comment=child_text(node, "COMMENT"),
                date=parse_date(child_text(node, "DATE")),
                owner=user_names(child_text(node, "OWNER")),
            )
        )
    return shelves


def match_shelves(changelists: Sequence[Changelist], shelves: Sequence[Shelve]) -> list[Changelist]:
    """Attach to each changelist the shelve whose comment starts with its prefix."""
    result = []
    for changelist in changelists:
        prefix = changelist_shelve_prefix(changelist.name)
        matching = [s for s in shelves if s.comment.startswith(prefix)]
        if matching:
            shelve = matching[-1]
            changelist = changelist.model_copy(
                update={"shelve_id": shelve.shelve_id, "shelve_date": shelve.date}
            )
        result.append(changelist)
    return result


def _shelve_state(letter: str) -> WorkspaceState | None:
    state = _SHELVE_STATES.get(letter)
    if state is None:
        get_logger().warning("Unknown shelve file status %r", letter)
    return state


def parse_shelve_diff(
    lines: Sequence[str],
    workspace_root: str = "",
    shelve_id: int = -1,
) -> list[FileState]:
    """
    Files of a shelve, from ``cm diff sh:<id>``::

        C "Content/BP_CheckedOut.uasset"
        A "Content/BP_Added.uasset"
        M "Content/BP_Old.uasset" "Content/BP_Renamed.uasset"

    A moved file is listed twice (changed, then moved); the later entry
    wins. Files not deleted get one revision pointing at the shelve.

    Raises:
        ParseError: A line with an unknown status letter or no path
    """
    by_path: dict[str, FileState] = {}
    for line in lines:
        state = _shelve_state(line[:1])
        quoted = [part for part in line[1:].strip().split('"') if part.strip()]
        if state is None or not quoted:
            raise ParseError(f"Unexpected shelve diff line: {line!r}", source="diff")

        moved_from = ""
        filename = quoted[-1]
        if state == WorkspaceState.MOVED and len(quoted) >= 2:
            moved_from = _absolute(workspace_root, quoted[0])
        path = _absolute(workspace_root, filename)

        history: tuple[Revision, ...] = ()
        if state != WorkspaceState.DELETED:
            history = (
                Revision(
                    filename=path,
                    revision=f"sh:{shelve_id}",
                    changeset=shelve_id,
                    action=file_state_to_action(state),
                ),
            )
        by_path[path] = FileState(path=path, state=state, moved_from=moved_from, history=history)
    return list(by_path.values())


def parse_shelve_diff_revisions(lines: Sequence[str], workspace_root: str = "") -> list[Revision]:
    """
    Base revisions of a shelve, from
    ``cm diff sh:<id> --format={status};{baserevid};{path}``::

        C;266;"Content/BP_Renamed.uasset"
        M;-1;"Content/BP_Renamed.uasset"

    The moved entry updates the earlier changed one to a "branch" action.

    Raises:
        ParseError: A line without three fields
    """
    revisions: list[Revision] = []
    for line in lines:
        fields = line.split(FIELD_SEPARATOR)
        if len(fields) != 3 or len(fields[0]) != 1:
            raise ParseError(f"Unexpected shelve diff line: {line!r}", source="diff")
        state = _shelve_state(fields[0])
        if state is None:
            raise ParseError(f"Unexpected shelve diff line: {line!r}", source="diff")
        path = _absolute(workspace_root, fields[2].strip().strip('"'))

        if state == WorkspaceState.MOVED:
            existing = next((i for i, r in enumerate(revisions) if r.filename == path), None)
            if existing is not None:
                revisions[existing] = revisions[existing].model_copy(
                    update={"action": file_state_to_action(WorkspaceState.MOVED)}
                )
                continue

        try:
            base_revision = int(fields[1])
        except ValueError:
            base_revision = -1
        revisions.append(
            Revision(
                filename=path,
                revision=f"revid:{base_revision}",
                changeset=base_revision,
                action=file_state_to_action(state),
            )
        )
    return revisions


_SHELVE_CREATED_PREFIX = "Created shelve sh:"


def parse_shelve_created(lines: Sequence[str]) -> int:
    """
    Id of the shelve made by ``cm shelveset create``, from its last line::

        Created shelve sh:12@MyProject@localhost:8087 (mount:'/')

    Raises:
        ParseError: No such line, or no number after ``sh:``
    """
    last = lines[-1] if lines else ""
    if last.startswith(_SHELVE_CREATED_PREFIX):
        number = last[len(_SHELVE_CREATED_PREFIX) :].split("@", 1)[0]
        if number.isdigit():
            return int(number)
    raise ParseError(f"Unexpected shelveset create output: {last!r}", source="shelveset")
