"""Shared types for prompthub.

This module defines the enums used by the coordinator, the scheduler and the CLI.
"""

from __future__ import annotations

from enum import Enum


class SyncStatus(str, Enum):
    """Result tag of a sync or reconciliation attempt."""

    UPLOADED = "uploaded"
    DOWNLOADED = "downloaded"
    IN_SYNC = "in_sync"
    CONFLICT = "conflict"
    DISABLED = "disabled"
    ERROR = "error"
