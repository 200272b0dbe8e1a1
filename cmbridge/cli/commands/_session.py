"""
Shared helpers for commands that talk to a workspace session.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

import click

from ...core.exceptions import CmBridgeException
from ...core.models.operations import Operation

if TYPE_CHECKING:
    from ...services.session import ProviderSession
    from ..context import CmBridgeContext


@contextmanager
def workspace_session(ctx: CmBridgeContext) -> Iterator[ProviderSession]:
    """Connected session, shut down on exit; connection errors become click errors."""
    try:
        session = ctx.open_session()
    except CmBridgeException as e:
        raise click.ClickException(str(e)) from e
    with session:
        yield session


def check(operation: Operation) -> Operation:
    """
    Return a succeeded operation, or raise a ClickException describing why
    it did not succeed.
    """
    if operation.succeeded:
        return operation
    if operation.cancelled:
        raise click.ClickException(f"{operation.kind.value} was cancelled")
    if operation.error is not None:
        raise click.ClickException(str(operation.error))
    raise click.ClickException("\n".join(operation.error_messages) or f"{operation.kind.value} failed")


def run_operation(session: ProviderSession, operation: Operation) -> Operation:
    return check(session.execute_synchronous(operation))
