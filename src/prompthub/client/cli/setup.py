"""Provider setup commands for the prompthub CLI.

Commands:
- setup: Validate a provider and make it the active one
- disable: Turn cloud sync off and delete stored credentials
- status: Show the sync configuration
"""

from __future__ import annotations

import sys

import click

from prompthub.client.cli.config import build_coordinator, get_data_store
from prompthub.client.errors import SyncError
from prompthub.client.secrets import SecretStoreError
from prompthub.core.config import ProviderKind, SyncSettings

PROVIDER_CHOICES = [kind.value for kind in ProviderKind if kind != ProviderKind.NONE]


@click.command()
@click.option(
    "--provider",
    "-p",
    type=click.Choice(PROVIDER_CHOICES, case_sensitive=False),
    required=True,
    help="Cloud backend to sync with.",
)
@click.option("--token", help="Access token, API key or WebDAV password (prompted if omitted).")
@click.option("--handle", help="Existing gist or snippet ID to reuse.")
@click.option("--url", help="GitLab instance, WebDAV collection or Custom API URL.")
@click.option("--username", help="WebDAV username.")
@click.option("--auto-sync/--no-auto-sync", default=False, help="Sync automatically after local saves.")
def setup(
    provider: str,
    token: str | None,
    handle: str | None,
    url: str | None,
    username: str | None,
    auto_sync: bool,
) -> None:
    """Configure cloud sync.

    Validates the credential against the provider. Without --handle a new
    private gist or snippet is created. Credentials of any previously
    configured provider are deleted.
    """
    if token is None:
        token = click.prompt("Token / password", hide_input=True)

    settings = SyncSettings(
        auto_sync_enabled=auto_sync,
        provider=ProviderKind.parse(provider),
        remote_handle=handle or "",
        provider_url=url or "",
        webdav_username=username or "",
    )

    coordinator = build_coordinator()
    try:
        configured = coordinator.configure(settings, token or "")
    except (SyncError, SecretStoreError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Cloud sync configured: {configured.provider.display_name}")
    click.echo(f"Remote: {configured.remote_handle}")
    click.echo(f"Auto-sync: {'on' if configured.auto_sync_enabled else 'off'}")


@click.command()
@click.option("--force", is_flag=True, help="Skip confirmation prompt.")
def disable(force: bool) -> None:
    """Disable cloud sync and delete all stored credentials.

    Local data and the remote copy are left untouched.
    """
    if not force and not click.confirm("Disable cloud sync and delete stored credentials?"):
        click.echo("Aborted.")
        return

    try:
        build_coordinator().disable()
    except SecretStoreError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    click.echo("Cloud sync disabled.")


@click.command()
@click.option("--remote", is_flag=True, help="Also fetch the cloud copy's timestamp.")
def status(remote: bool) -> None:
    """Show the cloud sync configuration and local data timestamp."""
    coordinator = build_coordinator()
    settings = coordinator.settings
    store = get_data_store()

    click.echo(f"Cloud sync: {'enabled' if settings.enabled else 'disabled'}")
    click.echo(f"Provider: {settings.provider.display_name}")
    if settings.remote_handle:
        click.echo(f"Remote: {settings.remote_handle}")
    if settings.provider_url:
        click.echo(f"URL: {settings.provider_url}")
    if settings.webdav_username:
        click.echo(f"Username: {settings.webdav_username}")
    click.echo(f"Auto-sync: {'on' if settings.auto_sync_enabled else 'off'}")

    if store.path.exists():
        try:
            local = store.load()
        except ValueError as e:
            click.echo(f"Local data: unreadable ({e})")
        else:
            click.echo(f"Local data: {store.path}")
            click.echo(f"Last modified: {local.metadata.last_modified}")
            click.echo(f"Records: {local.metadata.total_records}")
    else:
        click.echo("Local data: none")

    if remote and settings.is_active:
        try:
            snapshot = coordinator.get_remote_snapshot()
        except (SyncError, SecretStoreError) as e:
            click.echo(f"Remote data: unavailable ({e})")
        else:
            if snapshot is None:
                click.echo("Remote data: none")
            else:
                click.echo(f"Remote last modified: {snapshot.metadata.last_modified}")
                click.echo(f"Remote records: {snapshot.metadata.total_records}")
