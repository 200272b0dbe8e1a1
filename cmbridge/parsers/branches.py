"""
Branch list parser.

Parses the report of ``cm find branch "where date >= 'YYYY/MM/DD'" --xml
--file=<file> --encoding=utf-8``::

    <PLASTICQUERY>
      <BRANCH>
        <ID>1</ID>
        <NAME>/main</NAME>
        <COMMENT>Main branch</COMMENT>
        <DATE>2019-02-28T11:39:43+01:00</DATE>
        <OWNER>jane@example.com</OWNER>
        <PARENT></PARENT>
        <REPOSITORY>MyProject</REPOSITORY>
      </BRANCH>
    </PLASTICQUERY>
"""

from __future__ import annotations

from pathlib import Path

from ..core.exceptions import ParseError
from ..core.models.vcs import Branch
from .common import UserNameMapper, child_text, identity, iter_children, load_xml, parse_date


def parse_branches_xml(path: str | Path, user_names: UserNameMapper = identity) -> list[Branch]:
    """
    Parse a branch list, in file order.

    A branch without a name or a readable date invalidates the whole report.

    Raises:
        ParseError: Missing or malformed report, or an incomplete branch
    """
    root = load_xml(path, "PLASTICQUERY")
    branches = []
    for node in iter_children(root, "BRANCH"):
        name = child_text(node, "NAME")
        date = parse_date(child_text(node, "DATE"))
        if not name or date is None:
            raise ParseError(
                "Branch without name or date",
                source=str(path),
                context={"name": name},
            )
        branches.append(
            Branch(
                name=name,
                repository=child_text(node, "REPOSITORY") or child_text(node, "REPNAME"),
                created_by=user_names(child_text(node, "OWNER")),
                date=date,
                comment=child_text(node, "COMMENT"),
                parent=child_text(node, "PARENT"),
            )
        )
    return branches
