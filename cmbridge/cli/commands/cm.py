"""
Native Click implementation of the cm console passthrough.

Usage: cmbridge cm [ARGS...]
"""

from __future__ import annotations

import click

from ..context import CmBridgeContext


@click.command(
    "cm",
    context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False},
)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_obj
def cm(ctx: CmBridgeContext, args: tuple[str, ...]) -> None:
    """Run a cm command and print its output.

    The first argument is the cm command, the rest its parameters. With no
    arguments, runs 'cm help'.

    \b
    Examples:
        cmbridge cm status --short
        cmbridge cm find branch --format={name}
    """
    command, *parameters = args or ("help",)
    result = ctx.make_runner().run(command, parameters)

    if result.stdout:
        click.echo(result.stdout.rstrip("\n"))
    for line in result.errors:
        click.secho(line, fg="red", err=True)

    if not result.succeeded:
        raise SystemExit(1)
