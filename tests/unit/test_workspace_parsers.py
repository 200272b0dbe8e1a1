"""
Unit tests for workspace, profile and version parsers.
"""

import pytest

from cmbridge.core.exceptions import ParseError
from cmbridge.core.models.vcs import OLDEST_SUPPORTED_VERSION, CmVersion
from cmbridge.parsers import (
    get_changeset_from_status,
    parse_profile_info,
    parse_version,
    parse_workspace_info,
    parse_workspace_name,
)


class TestParseWorkspaceInfo:
    """Tests for parse_workspace_info."""

    def test_local_server(self):
        """Selector, repository and server of a local workspace."""
        assert parse_workspace_info(["Branch /main@UE5PlasticPluginDev@localhost:8087"]) == (
            "/main",
            "UE5PlasticPluginDev",
            "localhost:8087",
        )

    def test_cloud_server(self):
        """Cloud servers keep their organization suffix."""
        selector, repository, server = parse_workspace_info(
            ["Branch /main@rep:UE5OpenWorldPerfTest@repserver:test@cloud"]
        )
        assert selector == "/main"
        assert repository == "UE5OpenWorldPerfTest"
        assert server == "test@cloud"

    def test_changeset_selector(self):
        """A workspace switched to a changeset is recognized."""
        selector, _, _ = parse_workspace_info(["Changeset 41@Repo@localhost:8087"])
        assert selector == "41"

    def test_unexpected_line_raises(self):
        """Output not starting with a selector raises ParseError."""
        with pytest.raises(ParseError):
            parse_workspace_info(["Something else"])

    def test_missing_fields_raise(self):
        """Fewer than three fields raise ParseError."""
        with pytest.raises(ParseError):
            parse_workspace_info(["Branch /main@Repo"])

    def test_empty_raises(self):
        """Empty output raises ParseError."""
        with pytest.raises(ParseError):
            parse_workspace_info([])


class TestParseWorkspaceName:
    """Tests for parse_workspace_name."""

    def test_name(self):
        """The first line is the workspace name."""
        assert parse_workspace_name(["MyWorkspace"]) == "MyWorkspace"

    def test_not_in_workspace(self):
        """A path outside any workspace raises ParseError."""
        with pytest.raises(ParseError):
            parse_workspace_name(["/tmp is not in a workspace."])


class TestParseProfileInfo:
    """Tests for parse_profile_info."""

    def test_matching_server(self):
        """The user of the matching server profile is returned."""
        lines = ["other:8087;bob", "localhost:8087;jane"]
        assert parse_profile_info(lines, "localhost:8087") == "jane"

    def test_no_profile_raises(self):
        """No profile for the server raises ParseError."""
        with pytest.raises(ParseError):
            parse_profile_info(["other:8087;bob"], "localhost:8087")


class TestStatusHeaderAndVersion:
    """Tests for get_changeset_from_status and parse_version."""

    def test_changeset_from_header(self):
        """The changeset is the second field of the header."""
        assert get_changeset_from_status(["STATUS;41;Repo;localhost:8087"]) == 41

    def test_non_numeric_changeset_raises(self):
        """A non-numeric changeset raises ParseError."""
        with pytest.raises(ParseError):
            get_changeset_from_status(["STATUS;abc;Repo;localhost:8087"])

    def test_version_comparison(self):
        """Versions compare component by component."""
        version = parse_version(["11.0.16.8101"])
        assert version == CmVersion.parse("11.0.16.8101")
        assert version > OLDEST_SUPPORTED_VERSION
        assert CmVersion.parse("10.0.16.1") < OLDEST_SUPPORTED_VERSION
