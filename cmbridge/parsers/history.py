"""
File history parser.

Parses the report of ``cm history --xml=<file> --encoding=utf-8``::

    <RevisionHistoriesResult>
      <RevisionHistories>
        <RevisionHistory>
          <ItemName>c:/Workspace/Content/BP.uasset</ItemName>
          <Revisions>
            <Revision>
              <RevisionSpec>...</RevisionSpec>
              <Branch>/main</Branch>
              <CreationDate>2016-04-18T10:44:49.0000000+02:00</CreationDate>
              <RevisionType>bin</RevisionType>
              <ChangesetNumber>12</ChangesetNumber>
              <Owner>jane</Owner>
              <Comment>...</Comment>
              <Repository>Repo</Repository>
              <Server>localhost:8087</Server>
              <RepositorySpec>Repo@localhost:8087</RepositorySpec>
              <Size>22</Size>
              <Hash>...</Hash>
            </Revision>
          </Revisions>
        </RevisionHistory>
      </RevisionHistories>
    </RevisionHistoriesResult>
"""

from __future__ import annotations

from pathlib import Path

from ..core.exceptions import ParseError
from ..core.models.vcs import FileState, Revision, WorkspaceState
from .common import (
    UserNameMapper,
    child_int,
    child_text,
    find_child,
    identity,
    load_xml,
    parse_date,
)
from .status import normalize_path

DEFAULT_HISTORY_LIMIT = 100


def file_state_to_action(state: WorkspaceState) -> str:
    """Action name shown for a revision or a changeset file."""
    if state == WorkspaceState.ADDED:
        return "add"
    if state == WorkspaceState.DELETED:
        return "delete"
    if state == WorkspaceState.MOVED:
        return "branch"
    return "edit"


def parse_history_xml(
    path: str | Path,
    *,
    root_rep_spec: str = "",
    limit: int | None = DEFAULT_HISTORY_LIMIT,
    user_names: UserNameMapper = identity,
) -> dict[str, tuple[Revision, ...]]:
    """
    Parse a history report.

    Revisions are returned most recent first and capped to ``limit``
    (None for no cap). The first revision of a file is an "add", a
    revision without type is a "delete", any other is an "edit". The
    revision string is ``cs:N``, followed by ``@repo`` when the revision
    belongs to another repository than ``root_rep_spec`` (Xlinks).

    Returns:
        Revisions keyed by item name (normalized path)

    Raises:
        ParseError: Missing or malformed report
    """
    root = load_xml(path, "RevisionHistoriesResult")
    histories = find_child(root, "RevisionHistories")
    if histories is None:
        raise ParseError("History report without RevisionHistories", source=str(path))

    result: dict[str, tuple[Revision, ...]] = {}
    for history in histories:
        item_name = child_text(history, "ItemName")
        revisions_node = find_child(history, "Revisions")
        if not item_name or revisions_node is None:
            continue
        filename = normalize_path(item_name)

        nodes = list(revisions_node)
        lowest = 0 if limit is None else max(0, len(nodes) - limit)
        revisions: list[Revision] = []
        for index in range(len(nodes) - 1, lowest - 1, -1):
            node = nodes[index]
            revision_type = child_text(node, "RevisionType")
            if not revision_type:
                action = file_state_to_action(WorkspaceState.DELETED)
            elif index == 0:
                action = file_state_to_action(WorkspaceState.ADDED)
            else:
                action = file_state_to_action(WorkspaceState.CHECKED_OUT_CHANGED)

            changeset = child_text(node, "ChangesetNumber")
            rep_spec = child_text(node, "RepositorySpec")
            if rep_spec and root_rep_spec and rep_spec != root_rep_spec:
                revision = f"cs:{changeset}@{rep_spec.split('@')[0]}"
            else:
                revision = f"cs:{changeset}"

            revisions.append(
                Revision(
                    index=index,
                    filename=filename,
                    revision=revision,
                    changeset=child_int(node, "ChangesetNumber", 0),
                    date=parse_date(child_text(node, "CreationDate")),
                    user=user_names(child_text(node, "Owner")),
                    description=child_text(node, "Comment"),
                    action=action,
                    file_size=max(child_int(node, "Size", 0), 0),
                    branch=child_text(node, "Branch"),
                    rev_spec=child_text(node, "RevisionSpec"),
                    repository=child_text(node, "Repository"),
                    server=child_text(node, "Server"),
                    hash=child_text(node, "Hash"),
                )
            )
        result[filename] = tuple(revisions)
    return result


def apply_history(
    state: FileState,
    revisions: tuple[Revision, ...],
    *,
    update_history: bool = True,
    merge_source_changeset: int = -1,
) -> FileState:
    """
    Attach history to a file state and detect changes on other branches.

    A revision more recent than the file's head changeset (other than the
    source of a pending merge) is a change on another branch: it fills the
    ``head_*`` fields instead of the history.
    """
    depot = state.depot_revision_changeset
    if depot < 0 and revisions:
        # Unshelved files report a negative head; use the latest revision
        depot = revisions[0].changeset

    update: dict = {"depot_revision_changeset": depot}
    history: list[Revision] = []
    for revision in revisions:
        if revision.changeset > depot and revision.changeset != merge_source_changeset:
            if "head_branch" not in update:
                update.update(
                    head_branch=revision.branch,
                    head_action=revision.action,
                    head_changeset=revision.changeset,
                    head_user=revision.user,
                )
        elif update_history:
            history.append(revision)

        if revision.changeset == depot and not update.get("head_user") and not state.head_user:
            update["head_user"] = revision.user

    if update_history:
        update["history"] = tuple(history)
    return state.model_copy(update=update)
