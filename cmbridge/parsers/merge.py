"""
Merge conflict and merge progress parsers.

A conflict is reported either by the dry-run ``cm merge --machinereadable``
as::

    FILE_CONFLICT /Content/Blueprints/Projectile.uasset 1 4 6 903

(file, base changeset, source changeset, ...) or in prose as
``... conflict for item 'foo.txt' base cset 10, source cset 15 ...``.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from ..core.models.vcs import MergeConflict

_FILE_CONFLICT = "FILE_CONFLICT "
_PROSE_CONFLICT = re.compile(
    r"conflict for item '(?P<filename>[^']+)' base cset (?P<base>\d+), source cset (?P<source>\d+)"
)
_MERGED_FROM = "merged from: "


def parse_merge_conflict(line: str) -> MergeConflict:
    """
    Extract one conflict from a line.

    Returns:
        The conflict; all fields empty when the line holds no conflict
        (this is not an error)
    """
    if line.startswith(_FILE_CONFLICT):
        fields = line[len(_FILE_CONFLICT) :].split(" ")
        if len(fields) >= 3:
            return MergeConflict(
                filename=fields[0],
                base_changeset=fields[1],
                source_changeset=fields[2],
            )
        return MergeConflict()

    match = _PROSE_CONFLICT.search(line)
    if match is None:
        return MergeConflict()
    return MergeConflict(
        filename=match.group("filename"),
        base_changeset=match.group("base"),
        source_changeset=match.group("source"),
    )


def parse_merge_conflicts(lines: Sequence[str]) -> list[MergeConflict]:
    """Conflicts found in the lines, lines without one are ignored."""
    conflicts = (parse_merge_conflict(line) for line in lines)
    return [conflict for conflict in conflicts if not conflict.is_empty]


def parse_merge_progress(content: str) -> list[str] | None:
    """
    Merge parameters from ``.plastic/plastic.mergeprogress``.

    The file holds one line ending with one of::

        merged from: Merge 4
        merged from: Cherrypicking 3
        merged from: IntervalCherrypick 2 4

    giving ``["cs:4"]``, ``["cs:3", "--cherrypicking"]`` and
    ``["cs:2", "--interval-origin=cs:4"]``.

    Returns:
        Parameters for ``cm merge``, or None when no merge is described
    """
    index = content.find(_MERGED_FROM)
    if index < 0:
        return None
    words = content[index + len(_MERGED_FROM) :].split()
    if len(words) < 2:
        return None

    merge_type, numbers = words[0], words[1:]
    try:
        changesets = [int(n) for n in numbers[:2]]
    except ValueError:
        return None

    if merge_type == "IntervalCherrypick" and len(changesets) == 2:
        return [f"cs:{changesets[0]}", f"--interval-origin=cs:{changesets[1]}"]
    parameters = [f"cs:{changesets[0]}"]
    if merge_type == "Cherrypicking":
        parameters.append("--cherrypicking")
    return parameters
