"""
Native Click implementations of the locks and unlock commands.

Usage: cmbridge locks
       cmbridge unlock [--remove] ITEM_ID...
"""

from __future__ import annotations

import click

from ...core.models.operations import Operation, OperationKind
from ...presenters import ConsolePresenter, format_datetime
from ...services.cache import CacheKind
from ..context import CmBridgeContext
from ..decorators import require_workspace
from ._session import check, run_operation, workspace_session


@click.command("locks")
@click.pass_obj
@require_workspace
def locks(ctx: CmBridgeContext) -> None:
    """List locks of the repository."""
    presenter = ConsolePresenter()
    with workspace_session(ctx) as session:
        check(session.wait(session.request_refresh(CacheKind.LOCKS)))
        entities = session.coordinator.snapshot(CacheKind.LOCKS)

    if not entities:
        presenter.print("No locks.")
        return
    presenter.print_table(
        ["Item", "Status", "Owner", "Date", "Branch", "Path"],
        [
            [lock.item_id, lock.status, lock.owner, format_datetime(lock.date), lock.branch, lock.path]
            for lock in entities
        ],
    )


@click.command("unlock")
@click.argument("item_ids", nargs=-1, type=int, required=True)
@click.option("--remove", is_flag=True, help="Remove the locks instead of releasing them")
@click.pass_obj
@require_workspace
def unlock(ctx: CmBridgeContext, item_ids: tuple[int, ...], remove: bool) -> None:
    """Release (or remove) the locks of the given item ids."""
    presenter = ConsolePresenter()
    operation = Operation.create(OperationKind.UNLOCK, item_ids=list(item_ids), remove=remove)
    with workspace_session(ctx) as session:
        run_operation(session, operation)

    action = "Removed" if remove else "Released"
    presenter.print_success(f"{action} {len(item_ids)} lock(s)")
