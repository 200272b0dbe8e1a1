"""
Native Click implementation of the history command.

Usage: cmbridge history PATH
"""

from __future__ import annotations

import click

from ...core.models.operations import Operation, OperationKind
from ...presenters import ConsolePresenter, format_datetime, format_size, truncate_string
from ..context import CmBridgeContext
from ..decorators import require_workspace
from ._session import run_operation, workspace_session


@click.command("history")
@click.argument("path", type=click.Path())
@click.pass_obj
@require_workspace
def history(ctx: CmBridgeContext, path: str) -> None:
    """Show the revisions of a file, most recent first."""
    presenter = ConsolePresenter()
    operation = Operation.create(OperationKind.GET_HISTORY, paths=[str(ctx.cwd / path)])
    with workspace_session(ctx) as session:
        states = run_operation(session, operation).result

    revisions = [revision for state in states for revision in state.history]
    if not revisions:
        presenter.print("No history.")
        return
    presenter.print_table(
        ["Revision", "Date", "User", "Action", "Size", "Branch", "Description"],
        [
            [
                r.revision,
                format_datetime(r.date),
                r.user,
                r.action,
                format_size(r.file_size),
                r.branch,
                truncate_string(r.description),
            ]
            for r in revisions
        ],
    )
