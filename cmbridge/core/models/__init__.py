"""
Pydantic models for cmbridge.

This package provides typed, validated models for everything parsed from
the cm client, plus configuration and operation models.
"""

from .base import CmBridgeBaseModel, ImmutableModel
from .command import CommandOutcome, CommandResult, split_lines
from .config import (
    CacheConfig,
    CmConfig,
    ConfigBaseModel,
    HistoryConfig,
    LoggingConfig,
    UsersConfig,
)
from .operations import (
    MUTATING_KINDS,
    PARAMS_BY_KIND,
    DateRangeFilter,
    Operation,
    OperationKind,
    OperationOutcome,
)
from .vcs import (
    DEFAULT_CHANGELIST,
    Branch,
    Changelist,
    Changeset,
    CmVersion,
    FileState,
    Lock,
    MergeConflict,
    Revision,
    Shelve,
    WorkspaceInfo,
    WorkspaceState,
)

__all__ = [
    "DEFAULT_CHANGELIST",
    "MUTATING_KINDS",
    "PARAMS_BY_KIND",
    "Branch",
    "CacheConfig",
    "Changelist",
    "Changeset",
    "CmBridgeBaseModel",
    "CmConfig",
    "CmVersion",
    "CommandOutcome",
    "CommandResult",
    "ConfigBaseModel",
    "DateRangeFilter",
    "FileState",
    "HistoryConfig",
    "ImmutableModel",
    "Lock",
    "LoggingConfig",
    "MergeConflict",
    "Operation",
    "OperationKind",
    "OperationOutcome",
    "Revision",
    "Shelve",
    "UsersConfig",
    "WorkspaceInfo",
    "WorkspaceState",
    "split_lines",
]
