"""
Native Click implementations of the branches and changesets commands.

Usage: cmbridge branches [--days N]
       cmbridge changesets [--days N]
"""

from __future__ import annotations

import click

from ...core.models.config import ALLOWED_DAY_WINDOWS
from ...core.models.operations import DateRangeFilter
from ...presenters import ConsolePresenter, format_datetime, truncate_string
from ...services.cache import CacheKind
from ..context import CmBridgeContext
from ..decorators import require_workspace
from ._session import check, workspace_session

_DAYS_HELP = "Only entries of the last N days, -1 for all (default: cache.default_days)"


def _date_filter(ctx: CmBridgeContext, days: int | None) -> DateRangeFilter:
    if days is None:
        days = ctx.settings.cache.default_days
    elif days not in ALLOWED_DAY_WINDOWS:
        raise click.BadParameter(
            f"must be one of {', '.join(map(str, ALLOWED_DAY_WINDOWS))}", param_hint="--days"
        )
    return DateRangeFilter.last_days(days)


def _refresh(ctx: CmBridgeContext, kind: CacheKind, days: int | None) -> tuple:
    with workspace_session(ctx) as session:
        operation = session.request_refresh(kind, _date_filter(ctx, days))
        check(session.wait(operation))
        return session.coordinator.snapshot(kind)


@click.command("branches")
@click.option("--days", type=int, default=None, help=_DAYS_HELP)
@click.pass_obj
@require_workspace
def branches(ctx: CmBridgeContext, days: int | None) -> None:
    """List branches created recently, oldest first."""
    presenter = ConsolePresenter()
    entities = _refresh(ctx, CacheKind.BRANCHES, days)
    if not entities:
        presenter.print("No branches.")
        return
    presenter.print_table(
        ["Branch", "Created", "By", "Comment"],
        [
            [b.name, format_datetime(b.date), b.created_by, truncate_string(b.comment)]
            for b in entities
        ],
    )


@click.command("changesets")
@click.option("--days", type=int, default=None, help=_DAYS_HELP)
@click.pass_obj
@require_workspace
def changesets(ctx: CmBridgeContext, days: int | None) -> None:
    """List changesets created recently, oldest first."""
    presenter = ConsolePresenter()
    entities = _refresh(ctx, CacheKind.CHANGESETS, days)
    if not entities:
        presenter.print("No changesets.")
        return
    presenter.print_table(
        ["Changeset", "Date", "By", "Branch", "Comment"],
        [
            [
                f"cs:{c.changeset_id}",
                format_datetime(c.date),
                c.created_by,
                c.branch,
                truncate_string(c.comment),
            ]
            for c in entities
        ],
    )
