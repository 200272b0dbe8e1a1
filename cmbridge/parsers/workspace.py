"""
Workspace, profile and version parsers.

All of these are all-or-nothing: a missing or malformed line raises
ParseError rather than returning a partial record.
"""

from __future__ import annotations

from collections.abc import Sequence

from ..core.exceptions import ParseError
from ..core.models.vcs import CmVersion

_SELECTOR_PREFIXES = ("Branch ", "Changeset ", "Label ")
_NOT_IN_WORKSPACE = " is not in a workspace."


def parse_workspace_info(lines: Sequence[str]) -> tuple[str, str, str]:
    """
    Parse ``cm workspaceinfo``.

    Examples of the first line::

        Branch /main@UE5PlasticPluginDev@localhost:8087
        Branch /main@rep:UE5OpenWorldPerfTest@repserver:test@cloud

    Returns:
        (selector, repository, server_url)

    Raises:
        ParseError: No selector line, or fewer than three ``@`` fields
    """
    if not lines:
        raise ParseError("Empty workspace information", source="workspaceinfo")

    first = lines[0].strip()
    for prefix in _SELECTOR_PREFIXES:
        if first.startswith(prefix):
            remainder = first[len(prefix) :]
            break
    else:
        raise ParseError(f"Unexpected workspace information: {first!r}", source="workspaceinfo")

    fields = remainder.split("@")
    if len(fields) < 3:
        raise ParseError(f"Incomplete workspace information: {first!r}", source="workspaceinfo")

    selector = fields[0]
    repository = fields[1].removeprefix("rep:")
    server_url = fields[2].removeprefix("repserver:")
    if len(fields) > 3:
        # Cloud servers are "organization@cloud"
        server_url = f"{server_url}@{fields[3]}"
    return selector, repository, server_url


def parse_workspace_name(lines: Sequence[str]) -> str:
    """
    Parse ``cm getworkspacefrompath --format={wkname}``.

    Raises:
        ParseError: Empty output or the path is not in a workspace
    """
    if not lines or not lines[0].strip():
        raise ParseError("Empty workspace name", source="getworkspacefrompath")
    name = lines[0].strip()
    if name.endswith(_NOT_IN_WORKSPACE):
        raise ParseError(name, source="getworkspacefrompath")
    return name


def parse_profile_info(lines: Sequence[str], server_url: str) -> str:
    """
    Find the user name configured for a server in ``cm profile list``.

    Lines are ``server;user``, as requested with
    ``--format={server};{user}``.

    Raises:
        ParseError: No profile line for ``server_url``
    """
    for line in lines:
        fields = line.strip().split(";")
        if len(fields) < 2:
            continue
        server, user = fields[0].strip(), fields[1].strip()
        if server == server_url and user:
            return user
    raise ParseError(f"No profile for server {server_url!r}", source="profile list")


def get_changeset_from_status(lines: Sequence[str]) -> int:
    """
    Read the workspace changeset from the status header.

    The first line of ``cm status --header --machinereadable
    --fieldseparator=;`` is ``STATUS;41;Repo;localhost:8087``.

    Raises:
        ParseError: Missing header or non-numeric changeset
    """
    if not lines:
        raise ParseError("Empty status header", source="status")
    fields = lines[0].split(";")
    if len(fields) < 4:
        raise ParseError(f"Unexpected status header: {lines[0]!r}", source="status")
    try:
        return int(fields[1])
    except ValueError as e:
        raise ParseError(f"Invalid changeset in status header: {fields[1]!r}", source="status", cause=e) from e


def parse_version(lines: Sequence[str]) -> CmVersion:
    """
    Parse ``cm version``, e.g. ``11.0.16.8101``.

    Raises:
        ParseError: No output
    """
    if not lines or not lines[0].strip():
        raise ParseError("Empty version output", source="version")
    return CmVersion.parse(lines[0])
