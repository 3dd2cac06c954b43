"""Command-line interface for prompthub sync.

This module provides the main CLI entry point and assembles all commands.

Commands:
- setup: Configure and validate a cloud provider
- disable: Turn cloud sync off
- status: Show the sync configuration
- push: Upload local data to the cloud
- pull: Download cloud data
- sync: Reconcile local and cloud data once
- watch: Auto-sync on local changes
"""

from __future__ import annotations

import click

from prompthub.client.cli.config import (
    build_coordinator,
    configure_logging,
    get_config_dir,
    get_data_file,
    get_data_store,
    get_settings_file,
)
from prompthub.client.cli.setup import disable, setup, status
from prompthub.client.cli.sync import pull, push, sync, watch


@click.group()
@click.version_option(package_name="prompthub-sync")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging on stderr.")
def cli(verbose: bool) -> None:
    """Prompt Hub - cloud sync for your prompt library."""
    configure_logging(verbose)


# Setup commands
cli.add_command(setup)
cli.add_command(disable)
cli.add_command(status)

# Sync commands
cli.add_command(push)
cli.add_command(pull)
cli.add_command(sync)
cli.add_command(watch)


def main() -> None:
    """Entry point for the CLI."""
    cli()


__all__ = [
    # Main entry points
    "cli",
    "main",
    # Config utilities
    "build_coordinator",
    "configure_logging",
    "get_config_dir",
    "get_data_file",
    "get_data_store",
    "get_settings_file",
]
