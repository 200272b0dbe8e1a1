"""
Shared formatting utilities for cmbridge CLI output.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path


def format_datetime(dt: datetime | None) -> str:
    """Format a date reported by cm for display.

    Examples:
        >>> format_datetime(None)
        '?'
        >>> format_datetime(datetime(2024, 1, 1, 9, 30))
        '2024-01-01 09:30'
    """
    if dt is None:
        return "?"
    return dt.strftime("%Y-%m-%d %H:%M")


def format_size(size_bytes: int | None) -> str:
    """Format byte size as human-readable string.

    Examples:
        >>> format_size(500)
        '500B'
        >>> format_size(1536000)
        '1.5MB'
    """
    if size_bytes is None:
        return "?"

    if size_bytes < 1024:
        return f"{size_bytes}B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f}KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / 1024 / 1024:.1f}MB"
    else:
        return f"{size_bytes / 1024 / 1024 / 1024:.1f}GB"


def truncate_string(s: str, max_len: int = 50, suffix: str = "...") -> str:
    """Truncate a string with ellipsis if too long.

    Comments are shown on one line: only the first line is kept.

    Examples:
        >>> truncate_string("this is a very long string", 15)
        'this is a ve...'
    """
    s = s.splitlines()[0] if s else ""
    if len(s) <= max_len:
        return s
    return s[: max_len - len(suffix)] + suffix


def relativize_path(path: str | Path, root: Path | None = None) -> str:
    """Make a path relative to root (default cwd) when it lies below it.

    Examples:
        >>> relativize_path("/ws/Content/BP.uasset", Path("/ws"))
        'Content/BP.uasset'
        >>> relativize_path("/other/file.txt", Path("/ws"))
        '/other/file.txt'
    """
    if root is None:
        root = Path.cwd()
    try:
        return Path(path).relative_to(root).as_posix()
    except ValueError:
        return str(path)
