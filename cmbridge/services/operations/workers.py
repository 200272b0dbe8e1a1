"""
Operation workers.

One function per operation kind. A worker runs on a pool thread, spawns the
cm commands its kind needs through the context's runner, parses their
output and stores the payload on the operation. Workers raise to fail; the
dispatcher turns exceptions and cancellation into the final outcome.
"""

from __future__ import annotations

import itertools
import os
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from ...core.exceptions import OperationError, ParseError, WorkspaceError
from ...core.interfaces.logger import ILogger
from ...core.interfaces.runner import ICommandRunner
from ...core.models.command import CommandResult
from ...core.models.operations import Operation, OperationKind
from ...core.models.vcs import (
    DEFAULT_CHANGELIST,
    OLDEST_SUPPORTED_VERSION,
    SMART_LOCKS_VERSION,
    Changelist,
    CmVersion,
    FileState,
    WorkspaceInfo,
    WorkspaceState,
)
from ...core.settings import CmBridgeSettings
from ...parsers import (
    FIELD_SEPARATOR,
    FILEINFO_FORMAT,
    LOCK_LIST_FORMAT,
    SHELVE_DIFF_FORMAT,
    UserNameMapper,
    apply_history,
    changelist_shelve_prefix,
    changeset_number,
    get_changeset_from_status,
    match_shelves,
    needs_fileinfo,
    normalize_path,
    parse_branches_xml,
    parse_changelists_xml,
    parse_changeset_log_xml,
    parse_changesets_xml,
    parse_checkin_results,
    parse_directory_status,
    parse_file_status,
    parse_fileinfo,
    parse_history_xml,
    parse_locks,
    parse_merge_conflicts,
    parse_merge_progress,
    parse_merge_results,
    parse_profile_info,
    parse_shelve_created,
    parse_shelve_diff,
    parse_shelve_diff_revisions,
    parse_shelves_xml,
    parse_update_results,
    parse_update_results_xml,
    parse_version,
    parse_workspace_info,
    parse_workspace_name,
    remove_redundant_errors,
)
from ...parsers.common import identity
from ..shell import raise_for_outcome, scoped_report_file, scoped_text_file

MERGE_PROGRESS_FILE = Path(".plastic") / "plastic.mergeprogress"

STATUS_PARAMETERS = (
    "--machinereadable",
    f"--fieldseparator={FIELD_SEPARATOR}",
    "--controlledchanged",
    "--changed",
    "--localdeleted",
    "--private",
    "--ignored",
)


@dataclass
class WorkerContext:
    """
    Everything a worker needs besides its operation.

    ``info`` and ``version`` are filled by the session once connected;
    ``known_states`` returns the cached file states, used to notice files
    that left a changed state without being reported.
    """

    runner: ICommandRunner
    settings: CmBridgeSettings
    workspace_root: str
    logger: ILogger
    info: WorkspaceInfo | None = None
    version: CmVersion | None = None
    user_names: UserNameMapper = identity
    known_states: Callable[[], Sequence[FileState]] = field(default=lambda: ())

    def run(
        self,
        operation: Operation,
        command: str,
        parameters: Sequence[str] = (),
        files: Sequence[str] = (),
    ) -> CommandResult:
        """Run a command for an operation, filtering benign errors.

        Remaining stderr lines are recorded on the operation even when the
        command succeeds.

        Raises:
            CommandError: Launch failure, timeout or non-zero exit
        """
        result = self.runner.run(
            command,
            parameters,
            files,
            cancel_event=operation.cancel_event,
        )
        result = remove_redundant_errors(result, self.settings.cm.redundant_error_filters)
        operation.info_messages.extend(result.info_messages)
        operation.error_messages.extend(result.errors)
        return raise_for_outcome(result, self.settings.cm.timeout)

    @property
    def rep_spec(self) -> str:
        if self.info is None:
            return ""
        return f"{self.info.repository}@{self.info.server_url}"

    @property
    def history_limit(self) -> int | None:
        history = self.settings.history
        return None if history.show_all else history.limit

    def absolute(self, path: str) -> str:
        if os.path.isabs(path):
            return normalize_path(path)
        return normalize_path(os.path.join(self.workspace_root, path))


Worker = Callable[[WorkerContext, Operation], None]


def _date_query(entity: str, operation: Operation) -> list[str]:
    """``cm find`` query restricted to the operation's date window."""
    from_date = operation.params.from_date
    if from_date is None:
        return [entity]
    return [entity, f"where date >= '{from_date:%Y/%m/%d}'"]


# =============================================================================
# Connection
# =============================================================================


def connect(ctx: WorkerContext, operation: Operation) -> None:
    """
    Read the client version, workspace, user and current changeset.

    An older client is reported in the info messages but still used.
    """
    version = parse_version(ctx.run(operation, "version").lines)
    if version < OLDEST_SUPPORTED_VERSION:
        message = f"cm {version} is older than {OLDEST_SUPPORTED_VERSION}, some features may not work"
        ctx.logger.warning(message)
        operation.info_messages.append(message)

    try:
        selector, repository, server_url = parse_workspace_info(
            ctx.run(operation, "workspaceinfo", files=[ctx.workspace_root]).lines
        )
        workspace_name = parse_workspace_name(
            ctx.run(
                operation,
                "getworkspacefrompath",
                ["--format={wkname}"],
                [ctx.workspace_root],
            ).lines
        )
    except ParseError as e:
        raise WorkspaceError(str(e), path=ctx.workspace_root, cause=e) from e

    profiles = ctx.run(operation, "profile", ["list", "--format={server};{user}"])
    try:
        user_name = parse_profile_info(profiles.lines, server_url)
    except ParseError:
        # Local servers without a profile
        whoami = ctx.run(operation, "whoami").lines
        if not whoami:
            raise ParseError("Could not determine the cm user", source="whoami") from None
        user_name = whoami[0].strip()

    header = ctx.run(operation, "status", ["--header", *STATUS_PARAMETERS[:2]], [ctx.workspace_root])
    operation.result = WorkspaceInfo(
        workspace_name=workspace_name,
        workspace_selector=selector,
        branch=selector,
        repository=repository,
        server_url=server_url,
        user_name=user_name,
        changeset=get_changeset_from_status(header.lines),
    )
    ctx.version = version
    ctx.logger.info(
        "Connected to %s on %s@%s as %s",
        workspace_name,
        repository,
        server_url,
        user_name,
    )


# =============================================================================
# Status and history
# =============================================================================


def _merge_in_progress(ctx: WorkerContext) -> list[str] | None:
    path = Path(ctx.workspace_root) / MERGE_PROGRESS_FILE
    if not path.is_file():
        return None
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        ctx.logger.warning("Could not read %s: %s", path, e)
        return None
    return parse_merge_progress(content)


def _mark_conflicts(
    ctx: WorkerContext,
    operation: Operation,
    states: list[FileState],
    merge_parameters: list[str],
) -> list[FileState]:
    result = ctx.run(operation, "merge", [*merge_parameters, "--machinereadable"])
    conflicts = parse_merge_conflicts(result.lines)
    if not conflicts:
        return states
    marked = []
    for state in states:
        if any(state.path.endswith(c.filename) for c in conflicts):
            state = state.model_copy(update={"state": WorkspaceState.CONFLICTED})
        marked.append(state)
    return marked


def _fetch_history(
    ctx: WorkerContext,
    operation: Operation,
    states: Sequence[FileState],
    merge_source_changeset: int = -1,
) -> list[FileState]:
    paths = [s.path for s in states if s.is_source_controlled and not s.is_added]
    if not paths:
        return list(states)
    with scoped_report_file("history.xml") as report:
        ctx.run(
            operation,
            "history",
            ["--moveddeleted", f"--xml={report}", "--encoding=utf-8"],
            paths,
        )
        histories = parse_history_xml(
            report,
            root_rep_spec=ctx.rep_spec,
            limit=ctx.history_limit,
            user_names=ctx.user_names,
        )
    return [
        apply_history(
            state,
            histories[state.path],
            merge_source_changeset=merge_source_changeset,
        )
        if state.path in histories
        else state
        for state in states
    ]


def _run_status(ctx: WorkerContext, operation: Operation, paths: Sequence[str]) -> list[FileState]:
    """``cm status`` of files, or of a single directory as a whole."""
    report_changed = ctx.settings.cm.report_checked_out_changed
    parameters = list(STATUS_PARAMETERS)
    if report_changed:
        parameters.append("--iscochanged")
    lines = ctx.run(operation, "status", parameters, paths).lines

    if len(paths) == 1 and os.path.isdir(paths[0]):
        return parse_directory_status(paths[0], lines, ctx.known_states(), report_changed)
    return parse_file_status(paths, lines, report_changed)


def update_status(ctx: WorkerContext, operation: Operation) -> None:
    """
    Status of the requested paths, or of the whole workspace.

    Runs ``cm status``, then ``cm fileinfo`` for the files whose revision
    or lock details matter, marks conflicts when a merge is in progress and
    finally fetches history when requested.
    """
    params = operation.params
    paths = [ctx.absolute(p) for p in params.paths] or [normalize_path(ctx.workspace_root)]
    whole_directory = len(paths) == 1 and os.path.isdir(paths[0])
    states = _run_status(ctx, operation, paths)

    selected = [s for s in states if needs_fileinfo(s, whole_directory, params.update_history)]
    if selected:
        result = ctx.run(operation, "fileinfo", [f"--format={FILEINFO_FORMAT}"], [s.path for s in selected])
        current_user = ctx.info.user_name if ctx.info else ""
        detailed = {s.path: s for s in parse_fileinfo(result.lines, selected, current_user, ctx.user_names)}
        states = [detailed.get(s.path, s) for s in states]

    merge_source_changeset = -1
    merge_parameters = _merge_in_progress(ctx)
    if merge_parameters:
        merge_source_changeset = changeset_number(merge_parameters[0]) or -1
        states = _mark_conflicts(ctx, operation, states, merge_parameters)

    if params.update_history:
        states = _fetch_history(ctx, operation, states, merge_source_changeset)

    operation.updated_states = states
    operation.result = tuple(states)


def get_history(ctx: WorkerContext, operation: Operation) -> None:
    """History of the given files, most recent revision first."""
    known = {s.path: s for s in ctx.known_states()}
    states = []
    for path in operation.params.paths:
        path = ctx.absolute(path)
        states.append(known.get(path) or FileState(path=path, state=WorkspaceState.CONTROLLED))
    states = _fetch_history(ctx, operation, states)
    operation.updated_states = states
    operation.result = tuple(states)


# =============================================================================
# Listings
# =============================================================================


def get_branches(ctx: WorkerContext, operation: Operation) -> None:
    with scoped_report_file("branches.xml") as report:
        ctx.run(
            operation,
            "find",
            [*_date_query("branch", operation), "--xml", f"--file={report}", "--encoding=utf-8"],
        )
        operation.result = tuple(parse_branches_xml(report, ctx.user_names))


def get_changesets(ctx: WorkerContext, operation: Operation) -> None:
    with scoped_report_file("changesets.xml") as report:
        ctx.run(
            operation,
            "find",
            [*_date_query("changeset", operation), "--xml", f"--file={report}", "--encoding=utf-8"],
        )
        operation.result = tuple(parse_changesets_xml(report, ctx.user_names))


def get_changeset_files(ctx: WorkerContext, operation: Operation) -> None:
    changeset_id = operation.params.changeset_id
    with scoped_report_file("log.xml") as report:
        ctx.run(operation, "log", [f"cs:{changeset_id}", f"--xml={report}", "--encoding=utf-8"])
        operation.result = tuple(parse_changeset_log_xml(report, ctx.workspace_root))


def get_locks(ctx: WorkerContext, operation: Operation) -> None:
    """
    Locks of the repository.

    Clients with smart locks also list retained and released locks.
    """
    parameters = ["list", "--machinereadable", f"--format={LOCK_LIST_FORMAT}"]
    if ctx.version is None or ctx.version >= SMART_LOCKS_VERSION:
        parameters.append("--anystatus")
    if ctx.rep_spec:
        parameters.append(f"--repository={ctx.rep_spec}")
    result = ctx.run(operation, "lock", parameters)
    operation.result = tuple(parse_locks(result.lines, ctx.user_names))


def _list_changelists(ctx: WorkerContext, operation: Operation) -> list[Changelist]:
    with scoped_report_file("changelists.xml") as report:
        ctx.run(
            operation,
            "status",
            [
                "--changelists",
                "--controlledchanged",
                "--noheader",
                f"--xml={report}",
                "--encoding=utf-8",
            ],
            [ctx.workspace_root],
        )
        return parse_changelists_xml(report, ctx.workspace_root)


def get_changelists(ctx: WorkerContext, operation: Operation) -> None:
    """Pending changelists, each with its matching shelve if any."""
    changelists = _list_changelists(ctx, operation)
    operation.result = tuple(match_shelves(changelists, _find_shelves(ctx, operation)))



def _find_shelves(ctx: WorkerContext, operation: Operation) -> list:
    with scoped_report_file("shelves.xml") as report:
        ctx.run(
            operation,
            "find",
            ["shelves", "where owner='me'", "--xml", f"--file={report}", "--encoding=utf-8"],
        )
        return parse_shelves_xml(report, ctx.user_names)


def show_shelves(ctx: WorkerContext, operation: Operation) -> None:
    operation.result = tuple(_find_shelves(ctx, operation))


def shelve_diff(ctx: WorkerContext, operation: Operation) -> None:
    """
    Files of a shelve, each with the shelve revision followed by the base
    revision it was shelved from.
    """
    shelve_id = operation.params.shelve_id
    spec = f"sh:{shelve_id}"
    states = parse_shelve_diff(ctx.run(operation, "diff", [spec]).lines, ctx.workspace_root, shelve_id)
    revisions = parse_shelve_diff_revisions(
        ctx.run(operation, "diff", [spec, f"--format={SHELVE_DIFF_FORMAT}"]).lines,
        ctx.workspace_root,
    )
    operation.result = tuple(
        state.model_copy(
            update={"history": (*state.history, *(r for r in revisions if r.filename == state.path))}
        )
        for state in states
    )


def get_merge_conflicts(ctx: WorkerContext, operation: Operation) -> None:
    """Dry-run merge from the source, listing the files that would conflict."""
    result = ctx.run(operation, "merge", [operation.params.source, "--machinereadable"])
    operation.result = tuple(parse_merge_conflicts(result.lines))


# =============================================================================
# Mutations
# =============================================================================


def _controlled(paths: Sequence[str]) -> list[FileState]:
    return [FileState(path=p, state=WorkspaceState.CONTROLLED) for p in paths]


def _switch(ctx: WorkerContext, operation: Operation, target: str) -> None:
    with scoped_report_file("switch.xml") as report:
        ctx.run(operation, "switch", [target, f"--xml={report}", "--encoding=utf-8"])
        files = parse_update_results_xml(report)
    operation.updated_states = _controlled(files)
    operation.result = tuple(files)


def switch_to_branch(ctx: WorkerContext, operation: Operation) -> None:
    _switch(ctx, operation, f"br:{operation.params.branch_name}")


def switch_to_changeset(ctx: WorkerContext, operation: Operation) -> None:
    _switch(ctx, operation, f"cs:{operation.params.changeset_id}")


def create_branch(ctx: WorkerContext, operation: Operation) -> None:
    params = operation.params
    name = f"{params.parent_branch.rstrip('/')}/{params.new_branch_name}"
    ctx.run(operation, "branch", ["create", name, f"-c={params.comment}"])
    operation.result = name


def rename_branch(ctx: WorkerContext, operation: Operation) -> None:
    params = operation.params
    ctx.run(operation, "branch", ["rename", params.old_name, params.new_name])
    operation.result = params.new_name


def delete_branches(ctx: WorkerContext, operation: Operation) -> None:
    names = operation.params.branch_names
    ctx.run(operation, "branch", ["delete", *names])
    operation.result = names


def merge_branch(ctx: WorkerContext, operation: Operation) -> None:
    """Merge a branch into the workspace; merged files become checked out."""
    result = ctx.run(
        operation,
        "merge",
        [f"br:{operation.params.branch_name}", "--merge", "--machinereadable"],
    )
    files = parse_merge_results(result.stdout)
    operation.updated_states = [
        FileState(path=p, state=WorkspaceState.CHECKED_OUT_CHANGED) for p in files
    ]
    operation.result = tuple(files)


def unlock(ctx: WorkerContext, operation: Operation) -> None:
    params = operation.params
    parameters = ["unlock"]
    if params.remove:
        parameters.append("--remove")
    parameters.extend(f"itemid:{item_id}" for item_id in params.item_ids)
    ctx.run(operation, "lock", parameters)
    operation.result = params.item_ids


def revert_to_revision(ctx: WorkerContext, operation: Operation) -> None:
    params = operation.params
    path = ctx.absolute(params.path)
    ctx.run(operation, "revert", [f"{path}#cs:{params.changeset_id}"])
    operation.updated_states = [FileState(path=path, state=WorkspaceState.CHECKED_OUT_CHANGED)]
    operation.result = path


def check_in(ctx: WorkerContext, operation: Operation) -> None:
    """Check in the given files; the result is a summary such as ``Submitted changeset cs:8``."""
    params = operation.params
    paths = [ctx.absolute(p) for p in params.paths]
    result = ctx.run(operation, "checkin", [f"-c={params.comment}", "--all"], paths)
    operation.result = parse_checkin_results(result.lines)
    operation.updated_states = _controlled(paths)


def update(ctx: WorkerContext, operation: Operation) -> None:
    """
    Update the workspace to the head of its branch.

    With paths, only those are updated, using ``cm partial update``.
    """
    paths = [ctx.absolute(p) for p in operation.params.paths]
    if paths:
        result = ctx.run(operation, "partial", ["update", "--report", "--machinereadable"], paths)
        files = parse_update_results(result.stdout)
    else:
        with scoped_report_file("update.xml") as report:
            ctx.run(
                operation,
                "update",
                [f"--xml={report}", "--encoding=utf-8", "--last"],
                [ctx.workspace_root],
            )
            files = parse_update_results_xml(report)
    operation.updated_states = _controlled(files)
    operation.result = tuple(files)


# =============================================================================
# File operations
# =============================================================================


def _refresh_states(ctx: WorkerContext, operation: Operation, paths: Sequence[str]) -> None:
    """Status of the files an operation touched, for the file state cache."""
    states = _run_status(ctx, operation, paths) if paths else []
    operation.updated_states = states
    operation.result = tuple(states)


def _delete_from_disk(ctx: WorkerContext, path: str) -> None:
    if not os.path.isfile(path):
        return
    try:
        os.remove(path)
    except OSError as e:
        ctx.logger.warning("Could not delete %s: %s", path, e)


def _revertible(state: FileState) -> bool:
    return (
        state.is_checked_out
        or state.is_added
        or state.is_deleted
        or state.state in (WorkspaceState.CHANGED, WorkspaceState.CONFLICTED)
    )


def check_out(ctx: WorkerContext, operation: Operation) -> None:
    paths = [ctx.absolute(p) for p in operation.params.paths]
    ctx.run(operation, "checkout", files=paths)
    _refresh_states(ctx, operation, paths)


def mark_for_add(ctx: WorkerContext, operation: Operation) -> None:
    """
    Add files, and their parent directories, to source control.

    Directories are added recursively. A list of files is passed with the
    ``?`` wildcard so that cm skips the ignored ones.
    """
    paths = [ctx.absolute(p) for p in operation.params.paths]
    recursive = "-R" if any(os.path.isdir(p) for p in paths) else "?"
    ctx.run(operation, "add", ["--parents", recursive], paths)
    _refresh_states(ctx, operation, paths)


def delete(ctx: WorkerContext, operation: Operation) -> None:
    paths = [ctx.absolute(p) for p in operation.params.paths]
    ctx.run(operation, "remove", files=paths)
    _refresh_states(ctx, operation, paths)


def revert(ctx: WorkerContext, operation: Operation) -> None:
    """
    Undo the local changes of the given files.

    Files known as changed without a checkout go through ``cm undochange``,
    all others through ``cm undocheckout``. A moved file is reverted along
    with its origin, whose leftover file is deleted first so that the
    restored file does not collide with it.
    """
    params = operation.params
    paths = [ctx.absolute(p) for p in params.paths]
    known = {s.path: s for s in ctx.known_states()}
    changed: list[str] = []
    checked_out: list[str] = []
    for path in paths:
        state = known.get(path)
        if state is not None and state.state == WorkspaceState.CHANGED:
            changed.append(path)
            continue
        checked_out.append(path)
        if state is None:
            continue
        if state.state == WorkspaceState.MOVED and state.moved_from:
            if state.moved_from.lower() not in (p.lower() for p in checked_out):
                checked_out.append(state.moved_from)
            _delete_from_disk(ctx, state.moved_from)
        elif state.state == WorkspaceState.ADDED and params.delete_added:
            _delete_from_disk(ctx, path)

    if changed:
        ctx.run(operation, "undochange", files=changed)
    if checked_out:
        ctx.run(operation, "undocheckout", ["--keepchanges"] if params.keep_changes else [], checked_out)
    _refresh_states(ctx, operation, paths)


def revert_unchanged(ctx: WorkerContext, operation: Operation) -> None:
    """Undo checkouts without changes under the given paths, or the whole workspace."""
    paths = [ctx.absolute(p) for p in operation.params.paths]
    ctx.run(operation, "uncounchanged", ["-R"], paths)
    _refresh_states(ctx, operation, paths or [normalize_path(ctx.workspace_root)])


def revert_all(ctx: WorkerContext, operation: Operation) -> None:
    """
    Undo every pending change of the workspace.

    The files to report afterwards come from a status taken beforehand:
    the output of ``cm undocheckout --all`` does not name moved origins or
    files added inside new directories.
    """
    reverted: list[str] = []
    for state in _run_status(ctx, operation, [normalize_path(ctx.workspace_root)]):
        if not _revertible(state):
            continue
        reverted.append(state.path)
        if state.state == WorkspaceState.MOVED and state.moved_from:
            reverted.append(state.moved_from)
            _delete_from_disk(ctx, state.moved_from)

    ctx.run(operation, "undocheckout", ["--all"])
    _refresh_states(ctx, operation, reverted)


def resolve(ctx: WorkerContext, operation: Operation) -> None:
    """
    Mark conflicted files of the pending merge as resolved, keeping them
    as they are on disk.
    """
    merge_parameters = _merge_in_progress(ctx)
    if not merge_parameters:
        raise OperationError("No merge in progress in this workspace")
    paths = [ctx.absolute(p) for p in operation.params.paths]
    for path in paths:
        ctx.run(operation, "merge", [*merge_parameters, "--merge", "--keepdestination"], [path])
    _refresh_states(ctx, operation, paths)


# =============================================================================
# Changelists and shelves
# =============================================================================


def _new_changelist_name(ctx: WorkerContext, operation: Operation) -> str:
    """First number above the current changeset not already naming a changelist."""
    taken = {changelist.name for changelist in _list_changelists(ctx, operation)}
    start = ctx.info.changeset if ctx.info else 0
    return next(str(n) for n in itertools.count(max(start, 0) + 1) if str(n) not in taken)


def _create_changelist(ctx: WorkerContext, operation: Operation, description: str) -> str:
    name = _new_changelist_name(ctx, operation)
    with scoped_text_file(name, "name.txt") as name_file:
        with scoped_text_file(description, "description.txt") as description_file:
            ctx.run(
                operation,
                "changelist",
                ["create", f"--namefile={name_file}", f"--descriptionfile={description_file}", "--persistent"],
            )
    return name


def _move_to_changelist(ctx: WorkerContext, operation: Operation, name: str, paths: Sequence[str]) -> None:
    if not paths:
        return
    with scoped_text_file(name, "name.txt") as name_file:
        ctx.run(operation, "changelist", [f"--namefile={name_file}", "add"], paths)


def _create_shelve(
    ctx: WorkerContext,
    operation: Operation,
    changelist: str,
    description: str,
    paths: Sequence[str],
) -> int:
    comment = f"{changelist_shelve_prefix(changelist)}{description}"
    with scoped_text_file(comment, "comments.txt") as comments_file:
        result = ctx.run(operation, "shelveset", ["create", f"-commentsfile={comments_file}"], paths)
    return parse_shelve_created(result.lines)


def _delete_shelve(ctx: WorkerContext, operation: Operation, shelve_id: int) -> None:
    ctx.run(operation, "shelveset", ["delete", f"sh:{shelve_id}"])


def new_changelist(ctx: WorkerContext, operation: Operation) -> None:
    """
    Create a persistent changelist and move the given files into it.

    Changelists are named with a number, the first one above the current
    changeset that is not taken yet.
    """
    params = operation.params
    paths = [ctx.absolute(p) for p in params.paths]
    name = _create_changelist(ctx, operation, params.description)
    _move_to_changelist(ctx, operation, name, paths)
    operation.result = Changelist(
        name=name,
        description=params.description,
        files=tuple(FileState(path=p) for p in paths),
    )


def edit_changelist(ctx: WorkerContext, operation: Operation) -> None:
    """
    Change the description of a changelist.

    The Default changelist cannot be edited: a new changelist with the
    description is created instead and the given files move there.
    """
    params = operation.params
    if params.name == DEFAULT_CHANGELIST:
        paths = [ctx.absolute(p) for p in params.paths]
        name = _create_changelist(ctx, operation, params.description)
        _move_to_changelist(ctx, operation, name, paths)
    else:
        name = params.name
        with scoped_text_file(name, "name.txt") as name_file:
            with scoped_text_file(params.description, "description.txt") as description_file:
                ctx.run(
                    operation,
                    "changelist",
                    ["edit", f"--namefile={name_file}", "description", f"--descriptionfile={description_file}"],
                )
    operation.result = Changelist(name=name, description=params.description)


def delete_changelist(ctx: WorkerContext, operation: Operation) -> None:
    name = operation.params.name
    if name == DEFAULT_CHANGELIST:
        raise OperationError("The Default changelist cannot be deleted")
    with scoped_text_file(name, "name.txt") as name_file:
        ctx.run(operation, "changelist", ["delete", f"--namefile={name_file}"])
    operation.result = name


def move_to_changelist(ctx: WorkerContext, operation: Operation) -> None:
    params = operation.params
    _move_to_changelist(ctx, operation, params.name, [ctx.absolute(p) for p in params.paths])
    operation.result = params.name


def shelve(ctx: WorkerContext, operation: Operation) -> None:
    """
    Shelve the files of a changelist, replacing its previous shelve.

    Shelves belong to a changelist through their comment prefix; files of
    the Default changelist first move to a new changelist.
    """
    params = operation.params
    paths = [ctx.absolute(p) for p in params.paths]
    name = params.name
    if name == DEFAULT_CHANGELIST:
        name = _create_changelist(ctx, operation, params.description)
        _move_to_changelist(ctx, operation, name, paths)

    shelve_id = _create_shelve(ctx, operation, name, params.description, paths)
    if params.previous_shelve_id >= 0:
        _delete_shelve(ctx, operation, params.previous_shelve_id)
    operation.result = Changelist(name=name, description=params.description, shelve_id=shelve_id)


def unshelve(ctx: WorkerContext, operation: Operation) -> None:
    """
    Apply a shelve to the workspace and move its files to a changelist.

    Without paths every file of the shelve is applied. Selected files are
    passed to cm as server paths, relative to the workspace root.
    """
    params = operation.params
    spec = f"sh:{params.shelve_id}"
    root = normalize_path(ctx.workspace_root)
    if params.paths:
        paths = [ctx.absolute(p) for p in params.paths]
        selection = ["/" + os.path.relpath(p, root).replace(os.sep, "/") for p in paths]
    else:
        shelved = parse_shelve_diff(ctx.run(operation, "diff", [spec]).lines, root, params.shelve_id)
        paths = [s.path for s in shelved]
        selection = []

    ctx.run(operation, "shelveset", ["apply", spec], selection)
    if params.changelist != DEFAULT_CHANGELIST:
        _move_to_changelist(ctx, operation, params.changelist, paths)
    _refresh_states(ctx, operation, paths)


def delete_shelve(ctx: WorkerContext, operation: Operation) -> None:
    """
    Delete a shelve. When files are to remain shelved, they are shelved
    again first; the result is the id of that new shelve, or -1.
    """
    params = operation.params
    shelve_id = -1
    if params.remaining_paths:
        if not params.changelist:
            raise OperationError("Keeping part of a shelve needs its changelist")
        remaining = [ctx.absolute(p) for p in params.remaining_paths]
        shelve_id = _create_shelve(ctx, operation, params.changelist, params.description, remaining)
    _delete_shelve(ctx, operation, params.shelve_id)
    operation.result = shelve_id


WORKERS: dict[OperationKind, Worker] = {
    OperationKind.CONNECT: connect,
    OperationKind.UPDATE_STATUS: update_status,
    OperationKind.GET_BRANCHES: get_branches,
    OperationKind.GET_CHANGESETS: get_changesets,
    OperationKind.GET_CHANGESET_FILES: get_changeset_files,
    OperationKind.GET_LOCKS: get_locks,
    OperationKind.GET_HISTORY: get_history,
    OperationKind.GET_CHANGELISTS: get_changelists,
    OperationKind.SHOW_SHELVES: show_shelves,
    OperationKind.SHELVE_DIFF: shelve_diff,
    OperationKind.GET_MERGE_CONFLICTS: get_merge_conflicts,
    OperationKind.SWITCH_TO_BRANCH: switch_to_branch,
    OperationKind.SWITCH_TO_CHANGESET: switch_to_changeset,
    OperationKind.CREATE_BRANCH: create_branch,
    OperationKind.RENAME_BRANCH: rename_branch,
    OperationKind.DELETE_BRANCHES: delete_branches,
    OperationKind.MERGE_BRANCH: merge_branch,
    OperationKind.UNLOCK: unlock,
    OperationKind.REVERT_TO_REVISION: revert_to_revision,
    OperationKind.CHECK_IN: check_in,
    OperationKind.UPDATE: update,
    OperationKind.CHECK_OUT: check_out,
    OperationKind.MARK_FOR_ADD: mark_for_add,
    OperationKind.DELETE: delete,
    OperationKind.REVERT: revert,
    OperationKind.REVERT_UNCHANGED: revert_unchanged,
    OperationKind.REVERT_ALL: revert_all,
    OperationKind.RESOLVE: resolve,
    OperationKind.NEW_CHANGELIST: new_changelist,
    OperationKind.EDIT_CHANGELIST: edit_changelist,
    OperationKind.DELETE_CHANGELIST: delete_changelist,
    OperationKind.MOVE_TO_CHANGELIST: move_to_changelist,
    OperationKind.SHELVE: shelve,
    OperationKind.UNSHELVE: unshelve,
    OperationKind.DELETE_SHELVE: delete_shelve,
}

_missing = set(OperationKind) - set(WORKERS)
if _missing:
    raise RuntimeError(f"No worker for operation kinds: {sorted(k.value for k in _missing)}")
