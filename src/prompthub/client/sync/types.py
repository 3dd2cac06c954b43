"""Shared types for sync operations.

This module provides:
- SyncOutcome: tagged result of a sync or reconciliation attempt
- Callback type aliases used by the scheduler
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from prompthub.client.errors import ErrorCode
from prompthub.core.snapshot import Snapshot
from prompthub.core.types import SyncStatus


@dataclass
class SyncOutcome:
    """Result of a sync attempt.

    Attributes:
        status: What happened.
        message: Human-readable summary.
        local_modified: Local lastModified, when known.
        remote_modified: Remote lastModified, when known (set for conflicts).
        remote_handle: Handle written to, for uploads.
        snapshot: Remote snapshot to persist locally, for downloads.
        error_code: Failure code, for errors and conflicts.
    """

    status: SyncStatus
    message: str = ""
    local_modified: str | None = None
    remote_modified: str | None = None
    remote_handle: str | None = None
    snapshot: Snapshot | None = None
    error_code: ErrorCode | None = None

    @property
    def is_conflict(self) -> bool:
        """True for conflict outcomes."""
        return self.status == SyncStatus.CONFLICT


ConflictCallback = Callable[[str], None]
OutcomeCallback = Callable[[SyncOutcome], None]
SnapshotSource = Callable[[], Snapshot]
