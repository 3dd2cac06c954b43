"""Debounced background reconciliation.

This module provides:
- AutoSyncScheduler: single-slot debounce timer in front of reconcile()

Every schedule() call cancels the pending timer and arms a new one, so a
burst of local saves produces one reconcile, ``delay`` seconds after the
last save. Conflicts are reported through ``on_conflict``; auto-sync never
forces either side.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from prompthub.core.config import AUTO_SYNC_DELAY

if TYPE_CHECKING:
    from prompthub.client.sync.coordinator import SyncCoordinator
    from prompthub.client.sync.types import (
        ConflictCallback,
        OutcomeCallback,
        SnapshotSource,
        SyncOutcome,
    )

logger = logging.getLogger(__name__)

CONFLICT_MESSAGE = "Auto-sync detected a conflict. Please sync manually."


class AutoSyncScheduler:
    """Holds at most one pending auto-sync timer."""

    def __init__(
        self,
        coordinator: SyncCoordinator,
        snapshot_source: SnapshotSource,
        on_conflict: ConflictCallback,
        on_outcome: OutcomeCallback | None = None,
        delay: float = AUTO_SYNC_DELAY,
    ) -> None:
        """Initialize the scheduler.

        Args:
            coordinator: Coordinator whose reconcile() is invoked.
            snapshot_source: Returns the current local snapshot at fire time.
            on_conflict: Called with a message when reconcile reports a conflict.
            on_outcome: Called with every outcome (e.g. to persist downloads).
            delay: Quiet period in seconds before firing.
        """
        self._coordinator = coordinator
        self._snapshot_source = snapshot_source
        self._on_conflict = on_conflict
        self._on_outcome = on_outcome
        self._delay = delay

        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._disposed = False

    @property
    def delay(self) -> float:
        """Get the debounce delay in seconds."""
        return self._delay

    @property
    def pending(self) -> bool:
        """True while a timer is armed and has not fired."""
        with self._lock:
            return self._timer is not None

    def schedule(self) -> bool:
        """Arm (or re-arm) the auto-sync timer.

        Returns:
            True if a timer was armed, False if the scheduler was disposed
            or sync or auto-sync is off.
        """
        if self._disposed:
            return False

        settings = self._coordinator.settings
        if not settings.is_active or not settings.auto_sync_enabled:
            logger.debug("Auto-sync is off, not scheduling")
            return False

        with self._lock:
            if self._disposed:
                return False
            if self._timer is not None:
                self._timer.cancel()
            timer = threading.Timer(self._delay, self._fire)
            timer.daemon = True
            self._timer = timer
            timer.start()

        logger.debug("Auto-sync scheduled in %.1fs", self._delay)
        return True

    def cancel(self) -> None:
        """Cancel the pending timer, if any."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def dispose(self) -> None:
        """Release the scheduler; no timer fires afterwards."""
        with self._lock:
            self._disposed = True
        self.cancel()

    def _fire(self) -> None:
        with self._lock:
            # A newer timer may already have replaced this one
            if self._timer is threading.current_thread():
                self._timer = None

        try:
            outcome = self._coordinator.reconcile(self._snapshot_source())
        except Exception:
            logger.exception("Auto-sync failed")
            return

        logger.info("Auto-sync finished: %s", outcome.status.value)
        self._dispatch(outcome)

    def _dispatch(self, outcome: SyncOutcome) -> None:
        if self._on_outcome is not None:
            try:
                self._on_outcome(outcome)
            except Exception:
                logger.exception("Auto-sync outcome handler failed")

        if outcome.is_conflict:
            logger.warning("Auto-sync conflict detected, manual sync required")
            try:
                self._on_conflict(CONFLICT_MESSAGE)
            except Exception:
                logger.exception("Auto-sync conflict handler failed")
