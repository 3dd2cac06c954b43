"""Sync commands for the prompthub CLI.

Commands:
- push: Upload local data (conflict check unless --force)
- pull: Download remote data (conflict check unless --force)
- sync: One unattended reconcile pass
- watch: Auto-sync after every local save
"""

from __future__ import annotations

import sys
import time
from typing import NoReturn

import click

from prompthub.client.cli.config import build_coordinator, get_data_store
from prompthub.client.errors import SyncConflictError, SyncError
from prompthub.client.secrets import SecretStoreError
from prompthub.client.sync.types import SyncOutcome
from prompthub.core.config import AUTO_SYNC_DELAY
from prompthub.core.types import SyncStatus


def _fail(error: Exception) -> NoReturn:
    code = getattr(error, "code", None)
    prefix = f"Error [{code.value}]" if code is not None else "Error"
    click.echo(f"{prefix}: {error}", err=True)
    sys.exit(1)


def _report_conflict(error: SyncConflictError) -> None:
    click.echo(click.style("Conflict: " + error.message, fg="yellow"))
    click.echo(f"  Local:  {error.local_modified}")
    click.echo(f"  Remote: {error.remote_modified}")


def _confirm_override(question: str, yes: bool) -> bool:
    return yes or click.confirm(question, default=False)


@click.command()
@click.option("--force", is_flag=True, help="Overwrite the cloud copy without comparing timestamps.")
@click.option("--yes", "-y", is_flag=True, help="Force-overwrite without asking after a conflict.")
def push(force: bool, yes: bool) -> None:
    """Upload local data to the cloud."""
    coordinator = build_coordinator()
    store = get_data_store()

    try:
        local = store.load()
        try:
            outcome = coordinator.sync_to_cloud(local, force=force)
        except SyncConflictError as e:
            _report_conflict(e)
            if not _confirm_override("Overwrite the cloud copy with local data?", yes):
                click.echo("Upload cancelled.")
                sys.exit(1)
            outcome = coordinator.sync_to_cloud(local, force=True)
    except (SyncError, SecretStoreError, ValueError) as e:
        _fail(e)

    if outcome.status == SyncStatus.DISABLED:
        click.echo("Cloud sync is not enabled. Run 'prompthub setup' first.", err=True)
        sys.exit(1)
    click.echo(f"↑ {outcome.message}")


@click.command()
@click.option("--force", is_flag=True, help="Overwrite local data without comparing timestamps.")
@click.option("--yes", "-y", is_flag=True, help="Force-overwrite without asking after a conflict.")
def pull(force: bool, yes: bool) -> None:
    """Download cloud data, replacing local data."""
    coordinator = build_coordinator()
    store = get_data_store()

    try:
        local = store.load()
        try:
            remote = coordinator.sync_from_cloud(local, force=force)
        except SyncConflictError as e:
            _report_conflict(e)
            if not _confirm_override("Overwrite local data with the cloud copy?", yes):
                click.echo("Download cancelled.")
                sys.exit(1)
            remote = coordinator.sync_from_cloud(local, force=True)
        store.replace(remote)
    except (SyncError, SecretStoreError, ValueError) as e:
        _fail(e)

    click.echo(f"↓ Downloaded data last modified {remote.metadata.last_modified}")


def _apply_outcome(outcome: SyncOutcome) -> None:
    """Persist downloads and print one line per outcome."""
    if outcome.status == SyncStatus.DOWNLOADED and outcome.snapshot is not None:
        store = get_data_store()
        if outcome.local_modified is None:
            store.replace(outcome.snapshot)
        elif not store.replace_if_unchanged(outcome.snapshot, outcome.local_modified):
            click.echo("Local data changed during sync, download skipped.")
            return
        click.echo(f"↓ Remote changes downloaded ({outcome.remote_modified}).")
    elif outcome.status == SyncStatus.UPLOADED:
        click.echo(f"↑ {outcome.message}")
    elif outcome.status == SyncStatus.CONFLICT:
        click.echo(click.style(f"! {outcome.message}", fg="yellow"))
        click.echo(f"  Local:  {outcome.local_modified}")
        click.echo(f"  Remote: {outcome.remote_modified}")
        click.echo("  Resolve with 'prompthub push --force' or 'prompthub pull --force'.")
    elif outcome.status == SyncStatus.ERROR:
        code = outcome.error_code.value if outcome.error_code else "ERROR"
        click.echo(click.style(f"✗ [{code}] {outcome.message}", fg="red"))
    else:
        click.echo(outcome.message)


@click.command()
def sync() -> None:
    """Reconcile local and cloud data once.

    The newer side wins; equal timestamps mean nothing to do.
    Conflicts are reported, never resolved automatically.
    """
    coordinator = build_coordinator()
    try:
        local = get_data_store().load()
    except ValueError as e:
        _fail(e)

    outcome = coordinator.reconcile(local)
    _apply_outcome(outcome)
    if outcome.status in (SyncStatus.CONFLICT, SyncStatus.ERROR, SyncStatus.DISABLED):
        sys.exit(1)


@click.command()
@click.option(
    "--delay",
    type=float,
    default=AUTO_SYNC_DELAY,
    show_default=True,
    help="Seconds of quiet after a local save before syncing.",
)
def watch(delay: float) -> None:
    """Auto-sync whenever the local data file changes.

    Runs until interrupted. Conflicts are only reported.
    """
    from prompthub.client.sync import AutoSyncScheduler, DataFileWatcher

    coordinator = build_coordinator()
    settings = coordinator.settings
    if not settings.is_active or not settings.auto_sync_enabled:
        click.echo(
            "Error: auto-sync is not enabled. Run 'prompthub setup --auto-sync' first.",
            err=True,
        )
        sys.exit(1)

    store = get_data_store()
    store.path.parent.mkdir(parents=True, exist_ok=True)

    def on_conflict(message: str) -> None:
        click.echo(click.style(message, fg="yellow"))

    scheduler = AutoSyncScheduler(
        coordinator,
        snapshot_source=store.load,
        on_conflict=on_conflict,
        on_outcome=_apply_outcome,
        delay=delay,
    )

    click.echo(f"Watching {store.path} ({settings.provider.display_name})... (Ctrl+C to stop)")
    with DataFileWatcher(store.path, scheduler.schedule):
        # Startup check
        scheduler.schedule()
        try:
            while True:
                time.sleep(1.0)
        except KeyboardInterrupt:
            click.echo("\nStopping...")
        finally:
            scheduler.dispose()
