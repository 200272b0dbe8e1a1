"""
Changeset list and changeset log parsers.

The list comes from ``cm find changeset "where date >= 'YYYY/MM/DD'" --xml
--file=<file>``, a PLASTICQUERY report of CHANGESET elements (CHANGESETID,
COMMENT, BRANCH, OWNER, DATE, GUID). The files of one changeset come from
``cm log cs:<id> --xml=<file>``::

    <LogList>
      <Changeset>
        <ChangesetId>12</ChangesetId>
        <Items>
          <Item>
            <SrcCmPath>/Content/Old.uasset</SrcCmPath>
            <DstCmPath>/Content/New.uasset</DstCmPath>
            <Type>Moved</Type>
          </Item>
        </Items>
      </Changeset>
    </LogList>
"""

from __future__ import annotations

from pathlib import Path

from ..core.exceptions import ParseError
from ..core.models.vcs import Changeset, FileState, WorkspaceState
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
from .status import normalize_path

_LOG_TYPES = {
    "added": WorkspaceState.ADDED,
    "changed": WorkspaceState.CHECKED_OUT_CHANGED,
    "deleted": WorkspaceState.DELETED,
    "moved": WorkspaceState.MOVED,
}


def parse_changesets_xml(path: str | Path, user_names: UserNameMapper = identity) -> list[Changeset]:
    """
    Parse a changeset list, keeping the server-reported order.

    Raises:
        ParseError: Missing or malformed report, or a changeset without id or date
    """
    root = load_xml(path, "PLASTICQUERY")
    changesets = []
    for node in iter_children(root, "CHANGESET"):
        changeset_id = child_int(node, "CHANGESETID")
        date = parse_date(child_text(node, "DATE"))
        if changeset_id < 0 or date is None:
            raise ParseError("Changeset without id or date", source=str(path))
        changesets.append(
            Changeset(
                changeset_id=changeset_id,
                created_by=user_names(child_text(node, "OWNER")),
                date=date,
                comment=child_text(node, "COMMENT"),
                branch=child_text(node, "BRANCH"),
                guid=child_text(node, "GUID"),
            )
        )
    return changesets


def _workspace_path(workspace_root: str, cm_path: str) -> str:
    cm_path = normalize_path(cm_path)
    if not workspace_root:
        return cm_path
    return normalize_path(workspace_root).rstrip("/") + "/" + cm_path.lstrip("/")


def parse_changeset_log_xml(path: str | Path, workspace_root: str = "") -> list[FileState]:
    """
    Files changed by one changeset.

    Repository paths are made local by prefixing ``workspace_root``.
    Items of an unknown type are logged and skipped.

    Raises:
        ParseError: Missing or malformed report
    """
    root = load_xml(path, "LogList")
    changeset = find_child(root, "Changeset")
    if changeset is None:
        raise ParseError("Log report without Changeset", source=str(path))

    files: dict[str, FileState] = {}
    items = find_child(changeset, "Items")
    for item in iter_children(items, "Item") if items is not None else ():
        item_type = child_text(item, "Type")
        state = _LOG_TYPES.get(item_type.lower())
        if state is None:
            get_logger().warning("Unknown changeset item type %r", item_type)
            continue
        destination = child_text(item, "DstCmPath") or child_text(item, "SrcCmPath")
        if not destination:
            continue
        moved_from = ""
        if state == WorkspaceState.MOVED:
            moved_from = _workspace_path(workspace_root, child_text(item, "SrcCmPath"))
        local_path = _workspace_path(workspace_root, destination)
        files[local_path] = FileState(
            path=local_path,
            state=state,
            moved_from=moved_from,
            local_revision_changeset=child_int(changeset, "ChangesetId"),
        )
    return list(files.values())
