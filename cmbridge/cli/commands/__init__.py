"""
Click command implementations for cmbridge CLI.

Each module holds one or a few related commands. Commands are registered
with the main CLI group via the register_commands() function in
cmbridge.cli.
"""

from .branches import branches, changesets
from .cm import cm
from .files import add, checkout, remove, revert
from .history import history
from .info import info
from .locks import locks, unlock
from .status import status

COMMANDS = [
    add,
    branches,
    changesets,
    checkout,
    cm,
    history,
    info,
    locks,
    remove,
    revert,
    status,
    unlock,
]

__all__ = [
    "COMMANDS",
    "add",
    "branches",
    "changesets",
    "checkout",
    "cm",
    "history",
    "info",
    "locks",
    "remove",
    "revert",
    "status",
    "unlock",
]
