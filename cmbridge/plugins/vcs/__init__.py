"""
Version control system provider plugins.

Provides the cm implementation of the VCS provider interface.
"""

from .base import BaseVCSProvider
from .cm import CmVCSProvider

__all__ = [
    "BaseVCSProvider",
    "CmVCSProvider",
]
