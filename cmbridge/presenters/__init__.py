"""
Output presenters for the cmbridge CLI.
"""

from .console import ConsolePresenter
from .formatting import format_datetime, format_size, relativize_path, truncate_string

__all__ = [
    "ConsolePresenter",
    "format_datetime",
    "format_size",
    "relativize_path",
    "truncate_string",
]
