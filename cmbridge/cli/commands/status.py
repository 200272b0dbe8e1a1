"""
Native Click implementation of the status command.

Usage: cmbridge status [PATHS...]
"""

from __future__ import annotations

import click

from ...core.models.operations import Operation, OperationKind
from ...core.models.vcs import WorkspaceState
from ...presenters import ConsolePresenter, relativize_path
from ..context import CmBridgeContext
from ..decorators import require_workspace
from ._session import run_operation, workspace_session


@click.command("status")
@click.argument("paths", nargs=-1, type=click.Path())
@click.option("--history", is_flag=True, help="Also fetch revision history")
@click.pass_obj
@require_workspace
def status(ctx: CmBridgeContext, paths: tuple[str, ...], history: bool) -> None:
    """Show the state of files, or of every changed file in the workspace."""
    presenter = ConsolePresenter()
    operation = Operation.create(
        OperationKind.UPDATE_STATUS,
        paths=[str(ctx.cwd / p) for p in paths],
        update_history=history,
    )
    with workspace_session(ctx) as session:
        states = run_operation(session, operation).result

    if not states:
        presenter.print("Nothing changed.")
        return

    rows = []
    for state in states:
        path = relativize_path(state.path, ctx.workspace_root)
        if state.moved_from:
            path = f"{relativize_path(state.moved_from, ctx.workspace_root)} -> {path}"
        locked = state.locked_by
        if locked and state.locked_where:
            locked = f"{locked} ({state.locked_where})"
        rows.append([WorkspaceState(state.state).value, path, locked, state.head_branch])
    presenter.print_table(["State", "Path", "Locked by", "Changed on"], rows)
