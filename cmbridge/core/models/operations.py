"""
Operation models.

An operation is one request against the workspace: a kind drawn from a
closed set, typed input parameters, a result payload that stays mutable
until completion, and an outcome delivered exactly once.
"""

from __future__ import annotations

import itertools
import threading
from collections.abc import Callable
from concurrent.futures import Future
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from pydantic import Field

from .base import ImmutableModel
from .vcs import FileState


class OperationKind(str, Enum):
    """Closed set of operations a session can execute."""

    CONNECT = "connect"
    UPDATE_STATUS = "update_status"
    GET_BRANCHES = "get_branches"
    GET_CHANGESETS = "get_changesets"
    GET_CHANGESET_FILES = "get_changeset_files"
    GET_LOCKS = "get_locks"
    GET_HISTORY = "get_history"
    GET_CHANGELISTS = "get_changelists"
    SHOW_SHELVES = "show_shelves"
    SHELVE_DIFF = "shelve_diff"
    GET_MERGE_CONFLICTS = "get_merge_conflicts"
    SWITCH_TO_BRANCH = "switch_to_branch"
    SWITCH_TO_CHANGESET = "switch_to_changeset"
    CREATE_BRANCH = "create_branch"
    RENAME_BRANCH = "rename_branch"
    DELETE_BRANCHES = "delete_branches"
    MERGE_BRANCH = "merge_branch"
    UNLOCK = "unlock"
    REVERT_TO_REVISION = "revert_to_revision"
    CHECK_IN = "check_in"
    UPDATE = "update"
    CHECK_OUT = "check_out"
    MARK_FOR_ADD = "mark_for_add"
    DELETE = "delete"
    REVERT = "revert"
    REVERT_UNCHANGED = "revert_unchanged"
    REVERT_ALL = "revert_all"
    RESOLVE = "resolve"
    NEW_CHANGELIST = "new_changelist"
    EDIT_CHANGELIST = "edit_changelist"
    DELETE_CHANGELIST = "delete_changelist"
    MOVE_TO_CHANGELIST = "move_to_changelist"
    SHELVE = "shelve"
    UNSHELVE = "unshelve"
    DELETE_SHELVE = "delete_shelve"


# Kinds that change workspace or server state when they succeed
MUTATING_KINDS = frozenset(
    {
        OperationKind.SWITCH_TO_BRANCH,
        OperationKind.SWITCH_TO_CHANGESET,
        OperationKind.CREATE_BRANCH,
        OperationKind.RENAME_BRANCH,
        OperationKind.DELETE_BRANCHES,
        OperationKind.MERGE_BRANCH,
        OperationKind.UNLOCK,
        OperationKind.REVERT_TO_REVISION,
        OperationKind.CHECK_IN,
        OperationKind.UPDATE,
        OperationKind.CHECK_OUT,
        OperationKind.MARK_FOR_ADD,
        OperationKind.DELETE,
        OperationKind.REVERT,
        OperationKind.REVERT_UNCHANGED,
        OperationKind.REVERT_ALL,
        OperationKind.RESOLVE,
        OperationKind.NEW_CHANGELIST,
        OperationKind.EDIT_CHANGELIST,
        OperationKind.DELETE_CHANGELIST,
        OperationKind.MOVE_TO_CHANGELIST,
        OperationKind.SHELVE,
        OperationKind.UNSHELVE,
        OperationKind.DELETE_SHELVE,
    }
)


class OperationOutcome(str, Enum):
    """Terminal state of an operation. Cancellation is not a failure."""

    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


# =============================================================================
# Parameters
# =============================================================================


class NoParams(ImmutableModel):
    """Operations without inputs."""


class DateRangeFilter(ImmutableModel):
    """Lower date bound of a listing; None lists everything."""

    from_date: datetime | None = None

    @classmethod
    def last_days(cls, days: int, now: datetime | None = None) -> DateRangeFilter:
        """Window of the last ``days`` days, -1 meaning no bound."""
        if days < 0:
            return cls()
        now = now or datetime.now()
        start = (now - timedelta(days=days)).replace(hour=0, minute=0, second=0, microsecond=0)
        return cls(from_date=start)


class PathsParams(ImmutableModel):
    paths: tuple[str, ...] = ()


class UpdateStatusParams(ImmutableModel):
    paths: tuple[str, ...] = ()
    update_history: bool = False


class ChangesetParams(ImmutableModel):
    changeset_id: int = Field(ge=0)


class ShelveParams(ImmutableModel):
    shelve_id: int = Field(ge=0)


class MergeSourceParams(ImmutableModel):
    """``source`` is a full spec such as ``br:/main/task`` or ``cs:12``."""

    source: str = Field(min_length=1)


class BranchParams(ImmutableModel):
    branch_name: str = Field(min_length=1)


class CreateBranchParams(ImmutableModel):
    parent_branch: str = Field(min_length=1)
    new_branch_name: str = Field(min_length=1)
    comment: str = ""


class RenameBranchParams(ImmutableModel):
    old_name: str = Field(min_length=1)
    new_name: str = Field(min_length=1)


class DeleteBranchesParams(ImmutableModel):
    branch_names: tuple[str, ...] = Field(min_length=1)


class UnlockParams(ImmutableModel):
    """``remove`` deletes the lock instead of releasing it to retained."""

    item_ids: tuple[int, ...] = Field(min_length=1)
    remove: bool = False


class RevertToRevisionParams(ImmutableModel):
    path: str = Field(min_length=1)
    changeset_id: int = Field(ge=0)


class CheckInParams(ImmutableModel):
    paths: tuple[str, ...] = ()
    comment: str = ""


class FilesParams(ImmutableModel):
    """At least one file or directory."""

    paths: tuple[str, ...] = Field(min_length=1)


class RevertParams(ImmutableModel):
    """
    ``keep_changes`` only undoes the checkout, leaving the local edits;
    ``delete_added`` removes files that were only added from disk.
    """

    paths: tuple[str, ...] = Field(min_length=1)
    keep_changes: bool = False
    delete_added: bool = False


class NewChangelistParams(ImmutableModel):
    description: str = ""
    paths: tuple[str, ...] = ()


class EditChangelistParams(ImmutableModel):
    """``paths`` are only used when editing the Default changelist, see edit_changelist()."""

    name: str = Field(min_length=1)
    description: str = ""
    paths: tuple[str, ...] = ()


class ChangelistParams(ImmutableModel):
    name: str = Field(min_length=1)


class MoveToChangelistParams(ImmutableModel):
    name: str = Field(min_length=1)
    paths: tuple[str, ...] = Field(min_length=1)


class ShelveChangelistParams(ImmutableModel):
    """``previous_shelve_id`` is deleted once the new shelve exists; -1 for none."""

    name: str = Field(min_length=1)
    description: str = ""
    paths: tuple[str, ...] = Field(min_length=1)
    previous_shelve_id: int = -1


class UnshelveParams(ImmutableModel):
    """Without ``paths`` the whole shelve is applied."""

    shelve_id: int = Field(ge=0)
    changelist: str = Field(min_length=1)
    paths: tuple[str, ...] = ()


class DeleteShelveParams(ImmutableModel):
    """
    With ``remaining_paths`` only part of the shelve goes away: the
    remaining files are shelved again for the changelist before the old
    shelve is deleted.
    """

    shelve_id: int = Field(ge=0)
    changelist: str = ""
    description: str = ""
    remaining_paths: tuple[str, ...] = ()


PARAMS_BY_KIND: dict[OperationKind, type[ImmutableModel]] = {
    OperationKind.CONNECT: NoParams,
    OperationKind.UPDATE_STATUS: UpdateStatusParams,
    OperationKind.GET_BRANCHES: DateRangeFilter,
    OperationKind.GET_CHANGESETS: DateRangeFilter,
    OperationKind.GET_CHANGESET_FILES: ChangesetParams,
    OperationKind.GET_LOCKS: NoParams,
    OperationKind.GET_HISTORY: PathsParams,
    OperationKind.GET_CHANGELISTS: NoParams,
    OperationKind.SHOW_SHELVES: NoParams,
    OperationKind.SHELVE_DIFF: ShelveParams,
    OperationKind.GET_MERGE_CONFLICTS: MergeSourceParams,
    OperationKind.SWITCH_TO_BRANCH: BranchParams,
    OperationKind.SWITCH_TO_CHANGESET: ChangesetParams,
    OperationKind.CREATE_BRANCH: CreateBranchParams,
    OperationKind.RENAME_BRANCH: RenameBranchParams,
    OperationKind.DELETE_BRANCHES: DeleteBranchesParams,
    OperationKind.MERGE_BRANCH: BranchParams,
    OperationKind.UNLOCK: UnlockParams,
    OperationKind.REVERT_TO_REVISION: RevertToRevisionParams,
    OperationKind.CHECK_IN: CheckInParams,
    OperationKind.UPDATE: PathsParams,
    OperationKind.CHECK_OUT: FilesParams,
    OperationKind.MARK_FOR_ADD: FilesParams,
    OperationKind.DELETE: FilesParams,
    OperationKind.REVERT: RevertParams,
    OperationKind.REVERT_UNCHANGED: PathsParams,
    OperationKind.REVERT_ALL: NoParams,
    OperationKind.RESOLVE: FilesParams,
    OperationKind.NEW_CHANGELIST: NewChangelistParams,
    OperationKind.EDIT_CHANGELIST: EditChangelistParams,
    OperationKind.DELETE_CHANGELIST: ChangelistParams,
    OperationKind.MOVE_TO_CHANGELIST: MoveToChangelistParams,
    OperationKind.SHELVE: ShelveChangelistParams,
    OperationKind.UNSHELVE: UnshelveParams,
    OperationKind.DELETE_SHELVE: DeleteShelveParams,
}


# =============================================================================
# Operation
# =============================================================================

OperationCallback = Callable[["Operation"], None]


def _get_logger():
    from ...services.logging import NullLogger
    from ..di import resolve_or_default
    from ..interfaces.logger import ILogger

    return resolve_or_default(ILogger, NullLogger)


_operation_ids = itertools.count(1)


@dataclass(eq=False)
class Operation:
    """One queued request and its completion.

    ``result`` and the message lists are written by the worker thread while
    the operation runs; after :meth:`complete` the operation is read-only
    by convention and the future resolves to it.

    Attributes:
        kind: Operation kind
        params: Typed inputs, an instance of ``PARAMS_BY_KIND[kind]``
        context: Consumer context used to scope refresh supersession
        result: Kind-specific payload (tuple of entities, message, ...)
        updated_states: File states the operation learned about
        outcome: PENDING until completion
        error: Exception that made the operation fail
    """

    kind: OperationKind
    params: ImmutableModel | None = None
    context: str = "default"
    operation_id: int = field(default_factory=lambda: next(_operation_ids))
    result: Any = None
    updated_states: list[FileState] = field(default_factory=list)
    info_messages: list[str] = field(default_factory=list)
    error_messages: list[str] = field(default_factory=list)
    outcome: OperationOutcome = OperationOutcome.PENDING
    error: Exception | None = None
    cancel_event: threading.Event = field(default_factory=threading.Event, repr=False)
    future: Future = field(default_factory=Future, repr=False)
    _callbacks: list[OperationCallback] = field(default_factory=list, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def __post_init__(self) -> None:
        expected = PARAMS_BY_KIND[self.kind]
        if self.params is None:
            # Raises for kinds whose parameters have required fields
            self.params = expected()
        if not isinstance(self.params, expected):
            raise TypeError(
                f"{self.kind.value} expects {expected.__name__}, got {type(self.params).__name__}"
            )

    @classmethod
    def create(cls, kind: OperationKind, *, context: str = "default", **params: Any) -> Operation:
        """Build an operation, validating ``params`` against the kind's model.

        Lists are accepted where the model declares tuples.
        """
        values = {k: tuple(v) if isinstance(v, list) else v for k, v in params.items()}
        return cls(kind=kind, params=PARAMS_BY_KIND[kind](**values), context=context)

    @property
    def done(self) -> bool:
        return self.outcome != OperationOutcome.PENDING

    @property
    def succeeded(self) -> bool:
        return self.outcome == OperationOutcome.SUCCEEDED

    @property
    def cancelled(self) -> bool:
        return self.outcome == OperationOutcome.CANCELLED

    def add_callback(self, callback: OperationCallback | None) -> None:
        """Register a completion callback; registering the same one twice is a no-op."""
        if callback is None:
            return
        with self._lock:
            if callback not in self._callbacks:
                self._callbacks.append(callback)

    def cancel(self) -> None:
        """Ask the running command to stop. Completion still happens through the queue."""
        self.cancel_event.set()

    def complete(self, outcome: OperationOutcome, error: Exception | None = None) -> bool:
        """Record the outcome and notify callbacks.

        Returns:
            False if the operation was already complete; completion is
            delivered exactly once.
        """
        if outcome == OperationOutcome.PENDING:
            raise ValueError("Cannot complete an operation as pending")
        with self._lock:
            if self.done:
                return False
            self.outcome = outcome
            if error is not None:
                self.error = error
            callbacks = list(self._callbacks)
        for callback in callbacks:
            try:
                callback(self)
            except Exception as e:
                _get_logger().error(
                    "Completion callback of %s #%d failed: %s",
                    self.kind.value,
                    self.operation_id,
                    e,
                    exc_info=True,
                )
        self.future.set_result(self)
        return True
