"""
Click-based CLI for cmbridge.

This module provides the main Click command group and serves as the
entry point for the cmbridge CLI.

Usage:
    from cmbridge.cli import cli
    cli()  # Invokes the CLI
"""

from __future__ import annotations

from pathlib import Path

import click

from ..core.bootstrap import bootstrap
from .context import CmBridgeContext

# Version is loaded from package metadata
try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("cmbridge")
except PackageNotFoundError:
    __version__ = "0.1.0"


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="cmbridge")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Config file (default: .cmbridge/config.toml found from the current directory)",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None) -> None:
    """cmbridge - Unity Version Control (cm) from the command line

    \b
    Workspace:
        cmbridge info            Workspace, branch and user
        cmbridge status [PATH]   File states
        cmbridge history PATH    Revisions of a file

    \b
    Repository:
        cmbridge branches        Recent branches
        cmbridge changesets      Recent changesets
        cmbridge locks           Locks, and 'unlock' to release them

    \b
    Console:
        cmbridge cm ARGS...      Run any cm command
    """
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit(0)

    if not isinstance(ctx.obj, CmBridgeContext):
        ctx.obj = CmBridgeContext.create(config_path=config_path)
    bootstrap(ctx.obj.settings)


def register_commands() -> None:
    """Register all CLI commands with the main group."""
    from .commands import COMMANDS

    for cmd in COMMANDS:
        cli.add_command(cmd)


# Register commands at module load time
register_commands()


__all__ = [
    "CmBridgeContext",
    "__version__",
    "cli",
    "register_commands",
]
