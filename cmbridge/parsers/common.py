"""
Helpers shared by the result parsers.

XML reports are loaded with ElementTree; tag lookups ignore case because
cm spells the same report in upper case (``cm find``) and mixed case
(``cm log``, ``cm history``).
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from collections.abc import Callable, Iterator, Mapping
from datetime import datetime
from pathlib import Path

from ..core.di import resolve_or_default
from ..core.exceptions import ParseError
from ..core.interfaces.logger import ILogger
from ..services.logging import NullLogger

UserNameMapper = Callable[[str], str]

_FRACTION = re.compile(r"\.(\d+)")
_FALLBACK_DATE_FORMATS = (
    "%Y/%m/%d %H:%M:%S",
    "%d/%m/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
)


def get_logger() -> ILogger:
    return resolve_or_default(ILogger, NullLogger)


def identity(name: str) -> str:
    return name


def load_xml(path: str | Path, root_tag: str | None = None) -> ET.Element:
    """
    Load a temporary XML report written by cm.

    Args:
        path: Report file path
        root_tag: Expected root element (case-insensitive), if any

    Returns:
        Root element

    Raises:
        ParseError: File missing, unreadable, malformed, or wrong root
    """
    try:
        root = ET.parse(path).getroot()
    except FileNotFoundError as e:
        raise ParseError("XML report not found", source=str(path), cause=e) from e
    except ET.ParseError as e:
        raise ParseError(f"Malformed XML report: {e}", source=str(path), cause=e) from e
    except OSError as e:
        raise ParseError(f"Could not read XML report: {e}", source=str(path), cause=e) from e

    if root_tag is not None and not tag_is(root, root_tag):
        raise ParseError(
            f"Unexpected XML root <{root.tag}>, expected <{root_tag}>",
            source=str(path),
        )
    return root


def tag_is(element: ET.Element, tag: str) -> bool:
    return element.tag.lower() == tag.lower()


def find_child(element: ET.Element, tag: str) -> ET.Element | None:
    """First direct child with the given tag, ignoring case."""
    for child in element:
        if tag_is(child, tag):
            return child
    return None


def iter_children(element: ET.Element, tag: str) -> Iterator[ET.Element]:
    """Direct children with the given tag, ignoring case, in document order."""
    return (child for child in element if tag_is(child, tag))


def child_text(element: ET.Element, tag: str, default: str = "") -> str:
    """Stripped text of a direct child, ``default`` when absent or empty."""
    child = find_child(element, tag)
    if child is None or child.text is None:
        return default
    return child.text.strip()


def child_int(element: ET.Element, tag: str, default: int = -1) -> int:
    text = child_text(element, tag)
    try:
        return int(text)
    except ValueError:
        return default


def parse_date(text: str) -> datetime | None:
    """
    Parse a date reported by cm into a naive local datetime.

    Accepts ISO 8601 with any number of fractional digits (cm reports seven)
    and a trailing ``Z``, plus the slash-separated formats of ``cm find``.

    Returns:
        The date, or None when the text is empty or unrecognised
    """
    text = text.strip()
    if not text:
        return None

    iso = text[:-1] + "+00:00" if text.endswith("Z") else text
    iso = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), iso, count=1)
    try:
        parsed = datetime.fromisoformat(iso)
    except ValueError:
        parsed = None
        for fmt in _FALLBACK_DATE_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
    if parsed is None:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


class UserNames:
    """
    Map cm user names to display names.

    An explicit mapping wins; otherwise the e-mail domain is hidden when
    configured (``jane@example.com`` becomes ``jane``).
    """

    def __init__(self, display_names: Mapping[str, str] | None = None, hide_email_domain: bool = True):
        self._display_names = dict(display_names or {})
        self._hide_email_domain = hide_email_domain

    def __call__(self, user_name: str) -> str:
        if user_name in self._display_names:
            return self._display_names[user_name]
        if self._hide_email_domain and "@" in user_name:
            return user_name.split("@", 1)[0]
        return user_name
