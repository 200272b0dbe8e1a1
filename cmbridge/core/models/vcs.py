"""
VCS domain models.

Immutable snapshots of what the cm client reports: workspace, branches,
changesets, file states, history, locks, changelists and shelves.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from functools import total_ordering

from pydantic import Field, computed_field

from .base import ImmutableModel


class WorkspaceState(str, Enum):
    """Status category of one path, mutually exclusive within a snapshot."""

    UNKNOWN = "unknown"
    IGNORED = "ignored"
    CONTROLLED = "controlled"
    CHECKED_OUT_CHANGED = "checked_out_changed"
    CHECKED_OUT_UNCHANGED = "checked_out_unchanged"
    ADDED = "added"
    MOVED = "moved"
    COPIED = "copied"
    REPLACED = "replaced"
    DELETED = "deleted"
    LOCALLY_DELETED = "locally_deleted"
    CHANGED = "changed"
    CONFLICTED = "conflicted"
    LOCKED_BY_OTHER = "locked_by_other"
    PRIVATE = "private"


class WorkspaceInfo(ImmutableModel):
    """Workspace the session is connected to."""

    workspace_name: str = ""
    workspace_selector: str = ""
    branch: str = ""
    repository: str = ""
    server_url: str = ""
    user_name: str = ""
    changeset: int = -1

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_cloud(self) -> bool:
        """Cloud servers are reported as ``organization@cloud``."""
        return self.server_url.endswith("@cloud")


class Revision(ImmutableModel):
    """One entry of a file history, most recent first."""

    index: int = 0
    filename: str = ""
    revision: str = ""
    changeset: int = 0
    date: datetime | None = None
    user: str = ""
    description: str = ""
    action: str = ""
    file_size: int = 0
    branch: str = ""
    rev_spec: str = ""
    repository: str = ""
    server: str = ""
    hash: str = ""


class FileState(ImmutableModel):
    """State of one path in a workspace or changeset context.

    The status category is exclusive; ``is_current`` and
    ``is_modified_in_other_branch`` derive the "not at head" and
    "modified on other branch" views from revision fields.
    """

    path: str
    state: WorkspaceState = WorkspaceState.UNKNOWN
    moved_from: str = ""
    local_revision_changeset: int = -1
    depot_revision_changeset: int = -1
    rep_spec: str = ""
    locked_by: str = ""
    locked_where: str = ""
    locked_branch: str = ""
    locked_id: int = -1
    retained_in_branch: str = ""
    head_branch: str = ""
    head_action: str = ""
    head_changeset: int = -1
    head_user: str = ""
    history: tuple[Revision, ...] = ()

    @property
    def is_source_controlled(self) -> bool:
        return self.state not in (
            WorkspaceState.PRIVATE,
            WorkspaceState.IGNORED,
            WorkspaceState.UNKNOWN,
        )

    @property
    def is_checked_out(self) -> bool:
        return self.state in (
            WorkspaceState.CHECKED_OUT_CHANGED,
            WorkspaceState.CHECKED_OUT_UNCHANGED,
            WorkspaceState.MOVED,
            WorkspaceState.COPIED,
            WorkspaceState.REPLACED,
        )

    @property
    def is_added(self) -> bool:
        return self.state in (WorkspaceState.ADDED, WorkspaceState.COPIED)

    @property
    def is_deleted(self) -> bool:
        return self.state in (WorkspaceState.DELETED, WorkspaceState.LOCALLY_DELETED)

    @property
    def is_conflicted(self) -> bool:
        return self.state == WorkspaceState.CONFLICTED

    @property
    def is_locked(self) -> bool:
        return bool(self.locked_by)

    @property
    def is_current(self) -> bool:
        """False when a newer revision exists on the workspace branch."""
        if self.depot_revision_changeset < 0 or self.local_revision_changeset < 0:
            return True
        return self.local_revision_changeset == self.depot_revision_changeset

    @property
    def is_modified_in_other_branch(self) -> bool:
        return bool(self.head_branch)


class Branch(ImmutableModel):
    """A branch as listed by ``cm find branch``. Identity is the full name."""

    name: str = Field(min_length=1)
    repository: str = ""
    created_by: str = ""
    date: datetime
    comment: str = ""
    parent: str = ""


class Changeset(ImmutableModel):
    """A changeset; ``files`` is only filled by a changeset detail fetch."""

    changeset_id: int
    created_by: str = ""
    date: datetime
    comment: str = ""
    branch: str = ""
    guid: str = ""
    files: tuple[FileState, ...] = ()


class Lock(ImmutableModel):
    """A server-side lock reported by ``cm lock list``."""

    item_id: int
    path: str
    status: str = ""
    is_locked: bool = False
    date: datetime | None = None
    owner: str = ""
    destination_branch: str = ""
    branch: str = ""
    workspace: str = ""

    @property
    def key(self) -> tuple[int, str, str]:
        return (self.item_id, self.path, self.branch)


class MergeConflict(ImmutableModel):
    """Conflict descriptor; empty fields mean no conflict info was reported."""

    filename: str = ""
    base_changeset: str = ""
    source_changeset: str = ""

    @property
    def is_empty(self) -> bool:
        return not (self.filename or self.base_changeset or self.source_changeset)


class Shelve(ImmutableModel):
    """A shelve found with ``cm find shelves``."""

    shelve_id: int
    comment: str = ""
    date: datetime | None = None
    owner: str = ""


class Changelist(ImmutableModel):
    """A pending changelist and, when one exists, its matching shelve."""

    name: str
    description: str = ""
    files: tuple[FileState, ...] = ()
    shelve_id: int = -1
    shelve_date: datetime | None = None
    shelve_files: tuple[FileState, ...] = ()

    @property
    def is_default(self) -> bool:
        return self.name == DEFAULT_CHANGELIST


DEFAULT_CHANGELIST = "Default"


@total_ordering
class CmVersion(ImmutableModel):
    """Dotted version of the cm client, e.g. ``11.0.16.8101``."""

    major: int = 0
    minor: int = 0
    patch: int = 0
    build: int = 0

    @classmethod
    def parse(cls, text: str) -> CmVersion:
        """Parse ``a.b.c.d``; missing or non-numeric parts become 0."""
        parts = text.strip().split(".")
        numbers = []
        for part in parts[:4]:
            digits = "".join(ch for ch in part if ch.isdigit())
            numbers.append(int(digits) if digits else 0)
        numbers.extend([0] * (4 - len(numbers)))
        return cls(major=numbers[0], minor=numbers[1], patch=numbers[2], build=numbers[3])

    def as_tuple(self) -> tuple[int, int, int, int]:
        return (self.major, self.minor, self.patch, self.build)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CmVersion):
            return NotImplemented
        return self.as_tuple() == other.as_tuple()

    def __lt__(self, other: CmVersion) -> bool:
        return self.as_tuple() < other.as_tuple()

    def __hash__(self) -> int:
        return hash(self.as_tuple())

    def __str__(self) -> str:
        return ".".join(str(n) for n in self.as_tuple())


# Oldest client this package drives; older ones get a warning on connect
OLDEST_SUPPORTED_VERSION = CmVersion(major=11, minor=0, patch=16, build=7608)
# Smart locks (lock list --anystatus with destination branch)
SMART_LOCKS_VERSION = CmVersion(major=11, minor=0, patch=16, build=8101)
