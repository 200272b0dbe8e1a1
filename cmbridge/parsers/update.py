"""
Update and merge results parsers.

``cm update --xml=<file>`` writes an UpdatedItems report; ``cm partial
update --report --machinereadable`` and ``cm merge --merge
--machinereadable`` print one line per file::

    STAGE Plastic is updating your workspace. Wait a moment, please...
    AD c:/Workspace/Content/MI_Solid_Red.uasset
    CH c:/Workspace/Config/DefaultEditor.ini
"""

from __future__ import annotations

from collections.abc import Sequence
from functools import singledispatch
from pathlib import Path

from ..core.exceptions import ParseError
from ..core.models.command import split_lines
from .common import child_text, find_child, load_xml
from .status import normalize_path

_STAGE = "STAGE "
# "XX " typically "CH ", "AD " or "DE "
_PREFIX_LEN = 3


@singledispatch
def parse_update_results(results: Sequence[str]) -> list[str]:
    """
    Files touched by an update, from its text output.

    Accepts either the output as one string or already split lines; both
    give the same files for the same content.

    Returns:
        Normalized file paths, in output order
    """
    files: list[str] = []
    for line in results:
        line = line.rstrip("\r")
        if not line.strip() or line.startswith(_STAGE):
            continue
        filename = line[_PREFIX_LEN:].strip()
        if filename:
            files.append(normalize_path(filename))
    return files


@parse_update_results.register
def _(results: str) -> list[str]:
    return parse_update_results(split_lines(results))


def parse_update_results_xml(path: str | Path) -> list[str]:
    """
    Files touched by an update, from its XML report::

        <UpdatedItems>
          <List>
            <UpdatedItem>
              <Path>c:/Workspace/Content/BP.uasset</Path>
              <User>jane</User>
              <Changeset>94</Changeset>
              <Date>2022-10-27T11:58:02+02:00</Date>
            </UpdatedItem>
          </List>
        </UpdatedItems>

    Raises:
        ParseError: Missing or malformed report
    """
    root = load_xml(path, "UpdatedItems")
    items = find_child(root, "List")
    if items is None:
        raise ParseError("Update report without List", source=str(path))
    return [normalize_path(p) for p in (child_text(item, "Path") for item in items) if p]


def parse_merge_results(result: str) -> list[str]:
    """Files touched by ``cm merge --merge --machinereadable``."""
    return parse_update_results(result)
