"""State caches, change broadcast and refresh coordination."""

from .broadcast import ChangeBroadcast
from .coordinator import REFRESH_OPERATIONS, RefreshCoordinator
from .state_cache import CacheKind, CacheState, EntityCache, FileStateCache, Snapshot

__all__ = [
    "REFRESH_OPERATIONS",
    "CacheKind",
    "CacheState",
    "ChangeBroadcast",
    "EntityCache",
    "FileStateCache",
    "RefreshCoordinator",
    "Snapshot",
]
