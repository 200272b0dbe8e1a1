"""
Entry point for the `cmbridge` command-line interface.

cmbridge drives the Unity Version Control (Plastic SCM) ``cm`` client:
it runs commands, parses their output into typed models and keeps cached
snapshots of branches, changesets, locks and file states.

This module provides the main() entry point that delegates to the Click CLI.
"""


def main():
    """Main entry point for the cmbridge CLI."""
    from .cli import cli

    cli()


if __name__ == "__main__":
    main()
