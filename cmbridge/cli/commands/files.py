"""
Native Click implementations of the file commands.

Usage: cmbridge checkout PATHS...
       cmbridge add PATHS...
       cmbridge remove PATHS...
       cmbridge revert [--keep-changes] [--delete-added] PATHS...
"""

from __future__ import annotations

from typing import Any

import click

from ...core.models.operations import Operation, OperationKind
from ...core.models.vcs import WorkspaceState
from ...presenters import ConsolePresenter, relativize_path
from ..context import CmBridgeContext
from ..decorators import require_workspace
from ._session import run_operation, workspace_session


def _run_on_files(ctx: CmBridgeContext, kind: OperationKind, paths: tuple[str, ...], **params: Any) -> None:
    """Run a file operation and print the new state of each file."""
    presenter = ConsolePresenter()
    operation = Operation.create(kind, paths=[str(ctx.cwd / p) for p in paths], **params)
    with workspace_session(ctx) as session:
        states = run_operation(session, operation).updated_states

    presenter.print_table(
        ["State", "Path"],
        [[WorkspaceState(s.state).value, relativize_path(s.path, ctx.workspace_root)] for s in states],
    )


@click.command("checkout")
@click.argument("paths", nargs=-1, type=click.Path(), required=True)
@click.pass_obj
@require_workspace
def checkout(ctx: CmBridgeContext, paths: tuple[str, ...]) -> None:
    """Check out files for editing."""
    _run_on_files(ctx, OperationKind.CHECK_OUT, paths)


@click.command("add")
@click.argument("paths", nargs=-1, type=click.Path(), required=True)
@click.pass_obj
@require_workspace
def add(ctx: CmBridgeContext, paths: tuple[str, ...]) -> None:
    """Add files or directories to source control."""
    _run_on_files(ctx, OperationKind.MARK_FOR_ADD, paths)


@click.command("remove")
@click.argument("paths", nargs=-1, type=click.Path(), required=True)
@click.pass_obj
@require_workspace
def remove(ctx: CmBridgeContext, paths: tuple[str, ...]) -> None:
    """Delete files from source control."""
    _run_on_files(ctx, OperationKind.DELETE, paths)


@click.command("revert")
@click.argument("paths", nargs=-1, type=click.Path(), required=True)
@click.option("--keep-changes", is_flag=True, help="Only undo the checkout, keeping local edits")
@click.option("--delete-added", is_flag=True, help="Delete files that were only added")
@click.pass_obj
@require_workspace
def revert(ctx: CmBridgeContext, paths: tuple[str, ...], keep_changes: bool, delete_added: bool) -> None:
    """Undo the local changes of files."""
    _run_on_files(
        ctx,
        OperationKind.REVERT,
        paths,
        keep_changes=keep_changes,
        delete_added=delete_added,
    )
