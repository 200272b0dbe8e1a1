"""
Per-kind entity caches.

A cache holds one immutable snapshot. Refreshes replace the snapshot with a
single assignment, so a reader always sees either the previous or the new
result, never a mix.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any

from ...core.models.vcs import FileState


class CacheKind(str, Enum):
    BRANCHES = "branches"
    CHANGESETS = "changesets"
    LOCKS = "locks"
    FILE_STATES = "file_states"


class CacheState(str, Enum):
    """EMPTY -> LOADING -> READY; a failed load falls back to what it had."""

    EMPTY = "empty"
    LOADING = "loading"
    READY = "ready"


@dataclass(frozen=True)
class Snapshot:
    """
    Result of one successful refresh.

    Attributes:
        entities: Entities in the order the server reported them
        filter: Parameters of the refresh that produced them
        generation: Incremented by every successful refresh
    """

    entities: tuple[Any, ...] = ()
    filter: Any = None
    generation: int = 0
    updated_at: datetime | None = None


@dataclass
class EntityCache:
    """Latest successful snapshot of one entity kind."""

    kind: CacheKind
    state: CacheState = CacheState.EMPTY
    stale: bool = False
    _snapshot: Snapshot = field(default_factory=Snapshot, repr=False)

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def entities(self) -> tuple[Any, ...]:
        return self._snapshot.entities

    @property
    def generation(self) -> int:
        return self._snapshot.generation

    def begin_load(self) -> None:
        self.state = CacheState.LOADING

    def replace(self, entities: Iterable[Any], filter: Any = None) -> Snapshot:
        """Publish a new snapshot and mark the cache ready and fresh."""
        snapshot = Snapshot(
            entities=tuple(entities),
            filter=filter,
            generation=self._snapshot.generation + 1,
            updated_at=datetime.now(),
        )
        self._snapshot = snapshot
        self.state = CacheState.READY
        self.stale = False
        return snapshot

    def fail(self) -> None:
        """A refresh failed: keep the previous snapshot."""
        self.state = CacheState.READY if self._snapshot.generation > 0 else CacheState.EMPTY

    def mark_stale(self) -> None:
        self.stale = True

    def clear(self) -> None:
        self._snapshot = Snapshot()
        self.state = CacheState.EMPTY
        self.stale = False


@dataclass
class FileStateCache(EntityCache):
    """
    File states keyed by path.

    Status refreshes usually cover a few paths, so new states are merged
    into the previous ones instead of replacing them.
    """

    kind: CacheKind = CacheKind.FILE_STATES
    _by_path: MappingProxyType = field(
        default_factory=lambda: MappingProxyType({}), repr=False
    )

    @property
    def by_path(self) -> MappingProxyType:
        """Read-only mapping of path to state, replaced along with the snapshot."""
        return self._by_path

    def get(self, path: str) -> FileState | None:
        return self._by_path.get(path)

    def replace(self, entities: Iterable[FileState], filter: Any = None) -> Snapshot:
        merged = dict(self._by_path)
        merged.update((state.path, state) for state in entities)
        by_path = MappingProxyType(merged)
        snapshot = super().replace(by_path.values(), filter)
        self._by_path = by_path
        return snapshot

    def clear(self) -> None:
        super().clear()
        self._by_path = MappingProxyType({})
