"""
Native Click implementation of the info command.

Usage: cmbridge info
"""

from __future__ import annotations

import click

from ...presenters import ConsolePresenter
from ..context import CmBridgeContext
from ..decorators import require_workspace
from ._session import workspace_session


@click.command("info")
@click.pass_obj
@require_workspace
def info(ctx: CmBridgeContext) -> None:
    """Show the workspace, its branch, repository and user."""
    presenter = ConsolePresenter()
    with workspace_session(ctx) as session:
        workspace = session.info

    presenter.print_key_value("Workspace", f"{workspace.workspace_name} ({ctx.workspace_root})")
    presenter.print_key_value("Branch", workspace.branch)
    presenter.print_key_value("Changeset", workspace.changeset)
    presenter.print_key_value("Repository", workspace.repository)
    presenter.print_key_value("Server", workspace.server_url + (" (cloud)" if workspace.is_cloud else ""))
    presenter.print_key_value("User", workspace.user_name)
