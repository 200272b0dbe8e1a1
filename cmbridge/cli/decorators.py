"""
Click decorators for cmbridge CLI commands.

- require_workspace: Ensures we're in a cm workspace
"""

from __future__ import annotations

import functools
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

import click

if TYPE_CHECKING:
    from .context import CmBridgeContext

F = TypeVar("F", bound=Callable[..., Any])


def require_workspace(f: F) -> F:
    """Decorator to require a cm workspace.

    Usage:
        @click.command()
        @click.pass_obj
        @require_workspace
        def status(ctx: CmBridgeContext):
            ...

    Note:
        This decorator should be applied AFTER @click.pass_obj so that
        the CmBridgeContext is available.
    """

    @functools.wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        ctx_maybe: Any = args[0] if args else kwargs.get("ctx")

        if ctx_maybe is None:
            raise click.ClickException(
                "Internal error: CmBridgeContext not available. "
                "Ensure @click.pass_obj is applied before @require_workspace."
            )
        ctx: CmBridgeContext = ctx_maybe

        if not ctx.in_workspace:
            click.echo("Error: not in a cm workspace.", err=True)
            raise SystemExit(1)

        return f(*args, **kwargs)

    return wrapper  # type: ignore[return-value]
