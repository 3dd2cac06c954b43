"""Tests for the debounced auto-sync scheduler."""

from __future__ import annotations

import logging
import threading
import time

import pytest

from prompthub.client.sync.scheduler import CONFLICT_MESSAGE, AutoSyncScheduler
from prompthub.client.sync.types import SyncOutcome
from prompthub.core.config import ProviderKind, SyncSettings
from prompthub.core.snapshot import Snapshot
from prompthub.core.types import SyncStatus

DELAY = 0.1


class StubCoordinator:
    """Records reconcile calls and returns a fixed outcome."""

    def __init__(self, status: SyncStatus = SyncStatus.IN_SYNC, auto_sync: bool = True) -> None:
        self.settings = SyncSettings(
            enabled=True, auto_sync_enabled=auto_sync, provider=ProviderKind.GITHUB
        )
        self.status = status
        self.calls: list[Snapshot] = []
        self.error: Exception | None = None
        self.called = threading.Event()

    def reconcile(self, local: Snapshot) -> SyncOutcome:
        self.calls.append(local)
        self.called.set()
        if self.error is not None:
            raise self.error
        return SyncOutcome(self.status, "done")


def make_scheduler(
    coordinator: StubCoordinator,
    conflicts: list[str] | None = None,
    outcomes: list[SyncOutcome] | None = None,
) -> AutoSyncScheduler:
    """Create a scheduler with a short delay."""
    return AutoSyncScheduler(
        coordinator,  # type: ignore[arg-type]
        snapshot_source=Snapshot,
        on_conflict=(conflicts if conflicts is not None else []).append,
        on_outcome=outcomes.append if outcomes is not None else None,
        delay=DELAY,
    )


class TestAutoSyncScheduler:
    """Tests for AutoSyncScheduler."""

    def test_burst_runs_once(self) -> None:
        """Several schedules within the delay produce one reconcile."""
        coordinator = StubCoordinator()
        scheduler = make_scheduler(coordinator)

        for _ in range(3):
            assert scheduler.schedule() is True
            time.sleep(DELAY / 4)

        time.sleep(DELAY * 4)
        assert len(coordinator.calls) == 1
        assert scheduler.pending is False

    def test_fires_after_delay(self) -> None:
        """Nothing runs before the delay has elapsed."""
        coordinator = StubCoordinator()
        scheduler = make_scheduler(coordinator)

        scheduler.schedule()
        assert scheduler.pending is True
        assert coordinator.calls == []
        assert coordinator.called.wait(timeout=2.0)

    def test_separate_bursts_run_separately(self) -> None:
        """Schedules further apart than the delay each run."""
        coordinator = StubCoordinator()
        scheduler = make_scheduler(coordinator)

        scheduler.schedule()
        time.sleep(DELAY * 4)
        scheduler.schedule()
        time.sleep(DELAY * 4)

        assert len(coordinator.calls) == 2

    def test_cancel(self) -> None:
        """A cancelled timer never fires."""
        coordinator = StubCoordinator()
        scheduler = make_scheduler(coordinator)

        scheduler.schedule()
        scheduler.cancel()
        time.sleep(DELAY * 3)

        assert coordinator.calls == []
        assert scheduler.pending is False

    def test_dispose(self) -> None:
        """Disposing drops the pending timer."""
        coordinator = StubCoordinator()
        scheduler = make_scheduler(coordinator)

        scheduler.schedule()
        scheduler.dispose()
        time.sleep(DELAY * 3)

        assert coordinator.calls == []

    def test_auto_sync_off(self) -> None:
        """Nothing is scheduled when auto-sync is off."""
        coordinator = StubCoordinator(auto_sync=False)
        scheduler = make_scheduler(coordinator)

        assert scheduler.schedule() is False
        assert scheduler.pending is False

    def test_sync_disabled(self) -> None:
        """Nothing is scheduled when sync itself is off."""
        coordinator = StubCoordinator()
        coordinator.settings = SyncSettings(auto_sync_enabled=True, provider=ProviderKind.GITHUB)
        scheduler = make_scheduler(coordinator)

        assert scheduler.schedule() is False

    def test_conflict_reported(self) -> None:
        """Conflicts are passed to the conflict callback."""
        coordinator = StubCoordinator(status=SyncStatus.CONFLICT)
        conflicts: list[str] = []
        scheduler = make_scheduler(coordinator, conflicts=conflicts)

        scheduler.schedule()
        time.sleep(DELAY * 4)

        assert conflicts == [CONFLICT_MESSAGE]

    def test_outcome_callback(self) -> None:
        """Every outcome reaches the outcome callback."""
        coordinator = StubCoordinator(status=SyncStatus.UPLOADED)
        conflicts: list[str] = []
        outcomes: list[SyncOutcome] = []
        scheduler = make_scheduler(coordinator, conflicts=conflicts, outcomes=outcomes)

        scheduler.schedule()
        time.sleep(DELAY * 4)

        assert [o.status for o in outcomes] == [SyncStatus.UPLOADED]
        assert conflicts == []

    def test_reconcile_exception_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        """Unexpected failures are logged instead of killing the timer thread."""
        coordinator = StubCoordinator()
        coordinator.error = RuntimeError("boom")
        scheduler = make_scheduler(coordinator)

        with caplog.at_level(logging.ERROR, logger="prompthub"):
            scheduler.schedule()
            time.sleep(DELAY * 4)

        assert "Auto-sync failed" in caplog.text

    def test_reschedule_after_fire(self) -> None:
        """The scheduler can be re-armed after firing."""
        coordinator = StubCoordinator()
        scheduler = make_scheduler(coordinator)

        scheduler.schedule()
        time.sleep(DELAY * 4)
        assert scheduler.schedule() is True
        assert scheduler.pending is True
        scheduler.cancel()

    def test_schedule_after_dispose(self) -> None:
        """A disposed scheduler refuses to arm new timers."""
        coordinator = StubCoordinator()
        scheduler = make_scheduler(coordinator)

        scheduler.dispose()

        assert scheduler.schedule() is False
        assert scheduler.pending is False
        time.sleep(DELAY * 3)
        assert coordinator.calls == []
