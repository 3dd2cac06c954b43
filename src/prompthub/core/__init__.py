"""Core module - Snapshot model, settings and shared types."""

from prompthub.core.config import (
    AUTO_SYNC_DELAY,
    DEFAULT_GITLAB_URL,
    DEFAULT_TIMEOUT,
    SYNC_FILENAME,
    ProviderKind,
    SyncSettings,
)
from prompthub.core.snapshot import (
    Metadata,
    Snapshot,
    dumps_snapshot,
    empty_snapshot,
    format_timestamp,
    loads_snapshot,
    parse_timestamp,
    utc_now_iso,
)
from prompthub.core.types import SyncStatus

__all__ = [
    # Config
    "AUTO_SYNC_DELAY",
    "DEFAULT_GITLAB_URL",
    "DEFAULT_TIMEOUT",
    "SYNC_FILENAME",
    "ProviderKind",
    "SyncSettings",
    # Snapshot
    "Metadata",
    "Snapshot",
    "dumps_snapshot",
    "empty_snapshot",
    "format_timestamp",
    "loads_snapshot",
    "parse_timestamp",
    "utc_now_iso",
    # Types
    "SyncStatus",
]
