"""Sync coordinator for one local snapshot and one remote copy.

This module provides:
- SyncCoordinator: validates providers, reads/writes the remote through the
  active adapter and decides between upload, download and conflict

Decision table (localTs / remoteTs are metadata.lastModified):

    | Operation       | Remote  | Comparison          | Result              |
    |-----------------|---------|---------------------|---------------------|
    | sync_to_cloud   | none    | -                   | upload              |
    | sync_to_cloud   | present | force               | upload              |
    | sync_to_cloud   | present | localTs >  remoteTs | upload              |
    | sync_to_cloud   | present | localTs <= remoteTs | CONFLICT            |
    | sync_from_cloud | none    | -                   | REMOTE_EMPTY        |
    | sync_from_cloud | present | force               | return remote       |
    | sync_from_cloud | present | remoteTs >  localTs | return remote       |
    | sync_from_cloud | present | remoteTs <= localTs | CONFLICT            |
    | reconcile       | none    | -                   | upload (first sync) |
    | reconcile       | present | localTs >  remoteTs | upload              |
    | reconcile       | present | remoteTs > localTs  | downloaded outcome  |
    | reconcile       | present | equal               | in_sync             |

Manual sync treats equal timestamps as a conflict; reconcile treats them as
already synchronized.

All public operations hold one re-entrant lock, so at most one sync attempt
is in flight per coordinator.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import replace

from prompthub.client.errors import ErrorCode, SyncConflictError, SyncError
from prompthub.client.providers import ProviderAdapter, create_provider
from prompthub.client.secrets import SecretStore, SecretStoreError
from prompthub.client.settings import SettingsStore
from prompthub.client.sync.types import SyncOutcome
from prompthub.core.config import DEFAULT_TIMEOUT, ProviderKind, SyncSettings
from prompthub.core.snapshot import Snapshot
from prompthub.core.types import SyncStatus

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[SyncSettings, float], ProviderAdapter]


def _default_factory(settings: SyncSettings, timeout: float) -> ProviderAdapter:
    return create_provider(settings, timeout=timeout)


def compare_timestamps(local: Snapshot, remote: Snapshot) -> int:
    """Compare lastModified of two snapshots.

    Returns:
        1 if local is newer, -1 if remote is newer, 0 if equal.

    Raises:
        SyncError: UNKNOWN_ERROR if either timestamp cannot be parsed.
    """
    try:
        local_ts = local.last_modified
        remote_ts = remote.last_modified
    except ValueError as e:
        raise SyncError(f"Invalid lastModified timestamp: {e}", ErrorCode.UNKNOWN_ERROR) from e
    if local_ts > remote_ts:
        return 1
    if local_ts < remote_ts:
        return -1
    return 0


class SyncCoordinator:
    """Orchestrates validate/read/write calls for the active provider.

    Usage:
        coordinator = SyncCoordinator(SettingsStore(path), SecretStore())
        coordinator.configure(SyncSettings(provider=ProviderKind.GITHUB), token)

        outcome = coordinator.sync_to_cloud(local)          # may raise CONFLICT
        remote = coordinator.sync_from_cloud(local)         # caller persists it
        outcome = coordinator.reconcile(local)              # never raises
    """

    def __init__(
        self,
        settings_store: SettingsStore,
        secrets: SecretStore,
        provider_factory: ProviderFactory | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the coordinator.

        Args:
            settings_store: Where SyncSettings (and the remote handle) live.
            secrets: Credential store.
            provider_factory: Builds the adapter for given settings.
            timeout: Per-request timeout in seconds.
        """
        self._settings_store = settings_store
        self._secrets = secrets
        self._provider_factory = provider_factory or _default_factory
        self._timeout = timeout
        self._lock = threading.RLock()

    @property
    def settings(self) -> SyncSettings:
        """Get the current sync settings."""
        return self._settings_store.load()

    # === Setup ===

    def configure(self, settings: SyncSettings, secret: str) -> SyncSettings:
        """Validate a provider and make it the active one.

        The remote is validated (or provisioned) before anything is stored.
        On success the secret replaces every other provider's secret and the
        settings are saved with the returned handle and ``enabled=True``.

        Args:
            settings: Provider selection, URL, username, optional handle.
            secret: Token or password for the provider.

        Returns:
            The saved settings.

        Raises:
            SyncError: CONFIG_MISSING or any classified transport error.
        """
        if settings.provider == ProviderKind.NONE:
            raise SyncError("Select a cloud sync provider.", ErrorCode.CONFIG_MISSING)
        if not secret:
            raise SyncError(
                f"{settings.provider.display_name} token/password is required.",
                ErrorCode.CONFIG_MISSING,
            )

        with self._lock:
            with self._provider_factory(settings, self._timeout) as provider:
                handle = provider.validate_and_provision(secret, settings.remote_handle or None)

            self._secrets.store(settings.provider, secret)
            configured = replace(settings, enabled=True, remote_handle=handle)
            self._settings_store.save(configured)
            logger.info(
                "Cloud sync configured for %s (handle %s)",
                settings.provider.display_name,
                handle,
            )
            return configured

    def disable(self) -> None:
        """Turn sync off and drop every stored credential."""
        with self._lock:
            self._secrets.clear()
            self._settings_store.save(SyncSettings())
            logger.info("Cloud sync disabled")

    # === Remote access ===

    def _credential(self, settings: SyncSettings) -> str:
        secret = self._secrets.get(settings.provider)
        if not secret:
            raise SyncError(
                f"{settings.provider.display_name} token/password is not configured.",
                ErrorCode.CONFIG_MISSING,
            )
        return secret

    def _read(self, settings: SyncSettings) -> Snapshot | None:
        if not settings.remote_handle:
            # Nothing has been provisioned yet; the first write creates it.
            return None
        credential = self._credential(settings)
        with self._provider_factory(settings, self._timeout) as provider:
            return provider.read_remote(settings.remote_handle, credential)

    def _write(self, settings: SyncSettings, snapshot: Snapshot) -> str:
        credential = self._credential(settings)
        with self._provider_factory(settings, self._timeout) as provider:
            handle = provider.write_remote(settings.remote_handle or None, credential, snapshot)

        if handle != settings.remote_handle:
            settings.remote_handle = handle
            self._settings_store.save(settings)
            logger.info("Saved new remote handle %s", handle)
        return handle

    def get_remote_snapshot(self) -> Snapshot | None:
        """Read the remote snapshot, or None if sync is off or the remote is empty."""
        with self._lock:
            settings = self.settings
            if not settings.is_active:
                return None
            return self._read(settings)

    # === Sync operations ===

    def _push(
        self,
        settings: SyncSettings,
        local: Snapshot,
        force: bool,
        message: str = "Local data uploaded to cloud.",
    ) -> SyncOutcome:
        if not force:
            remote = self._read(settings)
            if remote is not None and compare_timestamps(local, remote) <= 0:
                raise SyncConflictError(
                    "Local data is not newer than cloud data. "
                    "Uploading would overwrite remote changes.",
                    local.metadata.last_modified,
                    remote.metadata.last_modified,
                )

        handle = self._write(settings, local)
        logger.info(
            "Uploaded snapshot %s to %s",
            local.metadata.last_modified,
            settings.provider.display_name,
        )
        return SyncOutcome(
            status=SyncStatus.UPLOADED,
            message=message,
            local_modified=local.metadata.last_modified,
            remote_handle=handle,
        )

    def sync_to_cloud(self, local: Snapshot, force: bool = False) -> SyncOutcome:
        """Upload the local snapshot.

        Without ``force`` the remote is read first; if it exists and is not
        strictly older than local, nothing is written.

        Raises:
            SyncConflictError: Remote is at least as new as local.
            SyncError: Configuration or transport failure.
        """
        with self._lock:
            settings = self.settings
            if not settings.is_active:
                return SyncOutcome(SyncStatus.DISABLED, "Cloud sync is not enabled.")
            return self._push(settings, local, force)

    def sync_from_cloud(self, local: Snapshot, force: bool = False) -> Snapshot:
        """Fetch the remote snapshot for the caller to persist locally.

        Raises:
            SyncError: REMOTE_EMPTY if there is no remote payload,
                CONFIG_MISSING if sync is off.
            SyncConflictError: Local is at least as new as remote.
        """
        with self._lock:
            settings = self.settings
            if not settings.is_active:
                raise SyncError("Cloud sync is not enabled.", ErrorCode.CONFIG_MISSING)

            remote = self._read(settings)
            if remote is None:
                raise SyncError(
                    "Could not retrieve remote data. The cloud may be empty.",
                    ErrorCode.REMOTE_EMPTY,
                )

            if not force and compare_timestamps(remote, local) <= 0:
                raise SyncConflictError(
                    "Remote data is not newer than local data. "
                    "Downloading would overwrite local changes.",
                    local.metadata.last_modified,
                    remote.metadata.last_modified,
                )

            logger.info("Downloaded snapshot %s", remote.metadata.last_modified)
            return remote

    def reconcile(self, local: Snapshot) -> SyncOutcome:
        """Unattended comparison-and-sync pass.

        Equal timestamps are reported as ``in_sync`` without touching either
        side. A newer remote is returned in a ``downloaded`` outcome; it is
        not persisted here. Failures become ``conflict`` or ``error`` outcomes.
        """
        with self._lock:
            settings = self.settings
            if not settings.is_active:
                return SyncOutcome(SyncStatus.DISABLED, "Cloud sync is not enabled.")

            try:
                remote = self._read(settings)
                if remote is None:
                    return self._push(
                        settings, local, force=True, message="Initial data uploaded to cloud."
                    )

                order = compare_timestamps(local, remote)
                if order > 0:
                    return self._push(settings, local, force=False, message="Local changes uploaded.")
                if order < 0:
                    return SyncOutcome(
                        status=SyncStatus.DOWNLOADED,
                        message="Remote changes available for download.",
                        local_modified=local.metadata.last_modified,
                        remote_modified=remote.metadata.last_modified,
                        snapshot=remote,
                    )
                return SyncOutcome(
                    status=SyncStatus.IN_SYNC,
                    message="Data is already in sync.",
                    local_modified=local.metadata.last_modified,
                    remote_modified=remote.metadata.last_modified,
                )

            except SyncConflictError as e:
                logger.warning("Sync conflict during reconciliation: %s", e.message)
                return SyncOutcome(
                    status=SyncStatus.CONFLICT,
                    message=e.message,
                    local_modified=e.local_modified,
                    remote_modified=e.remote_modified,
                    error_code=ErrorCode.CONFLICT,
                )
            except SyncError as e:
                logger.error("Error during sync reconciliation: %s", e.message)
                return SyncOutcome(SyncStatus.ERROR, e.message, error_code=e.code)
            except SecretStoreError as e:
                logger.error("Credential store error during reconciliation: %s", e)
                return SyncOutcome(SyncStatus.ERROR, str(e), error_code=ErrorCode.UNKNOWN_ERROR)
