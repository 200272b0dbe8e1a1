"""
Interface definitions for cmbridge's services.

These abstract base classes define the contracts implementations follow,
so sessions and the CLI can be wired with substitutes in tests.
"""

from .logger import ILogger
from .runner import ICommandRunner
from .vcs import IVCSProvider

__all__ = [
    "ICommandRunner",
    "ILogger",
    "IVCSProvider",
]
