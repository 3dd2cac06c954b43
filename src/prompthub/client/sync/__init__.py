"""Sync orchestration.

Architecture:
    DataFileWatcher -> AutoSyncScheduler -> SyncCoordinator -> ProviderAdapter

Components:
- **SyncCoordinator**: upload/download/conflict decisions, force overrides,
  single-flight locking
- **AutoSyncScheduler**: debounced, cancellable reconcile trigger
- **DataFileWatcher**: schedules an auto-sync whenever local data is saved
"""

from prompthub.client.sync.coordinator import SyncCoordinator, compare_timestamps
from prompthub.client.sync.scheduler import CONFLICT_MESSAGE, AutoSyncScheduler
from prompthub.client.sync.types import (
    ConflictCallback,
    OutcomeCallback,
    SnapshotSource,
    SyncOutcome,
)
from prompthub.client.sync.watcher import DataFileEventHandler, DataFileWatcher

__all__ = [
    # Coordinator
    "SyncCoordinator",
    "compare_timestamps",
    # Scheduler
    "AutoSyncScheduler",
    "CONFLICT_MESSAGE",
    # Types
    "ConflictCallback",
    "OutcomeCallback",
    "SnapshotSource",
    "SyncOutcome",
    # Watcher
    "DataFileEventHandler",
    "DataFileWatcher",
]
