"""
cmbridge plugin architecture.

This package contains provider implementations for version control
backends:
- vcs: Version control providers (cm)
"""

from . import vcs

__all__ = ["vcs"]
