"""Local snapshot storage for the sync client.

This module provides:
- LocalDataStore: JSON-file persistence of the local Snapshot

Write paths:
    save()     a local edit; advances metadata.lastModified
    replace()  an accepted download; keeps the remote timestamp so the next
               reconcile sees both sides as equal
    replace_if_unchanged()  a background download; skipped if a local save
               landed after the sync decision
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from prompthub.core.snapshot import Snapshot, dumps_snapshot, empty_snapshot, loads_snapshot

logger = logging.getLogger(__name__)


class LocalDataStore:
    """JSON-file store for the local snapshot."""

    def __init__(self, path: Path) -> None:
        """Initialize the store.

        Args:
            path: Path to the local data JSON file.
        """
        self._path = Path(path)
        self._lock = threading.RLock()

    @property
    def path(self) -> Path:
        """Get the data file path."""
        return self._path

    def load(self) -> Snapshot:
        """Load the local snapshot.

        Returns:
            The stored snapshot, or an empty one if nothing is stored yet.

        Raises:
            ValueError: If the data file is not a valid snapshot.
        """
        with self._lock:
            if not self._path.exists():
                return empty_snapshot()
            snapshot = loads_snapshot(self._path.read_text(encoding="utf-8"))
            return snapshot if snapshot is not None else empty_snapshot()

    def save(self, snapshot: Snapshot) -> Snapshot:
        """Persist a local edit, advancing lastModified."""
        with self._lock:
            snapshot.touch()
            self._write(snapshot)
            return snapshot

    def replace(self, snapshot: Snapshot) -> Snapshot:
        """Persist a downloaded snapshot as-is."""
        with self._lock:
            self._write(snapshot)
            logger.info(
                "Replaced local data with remote snapshot (%s)",
                snapshot.metadata.last_modified,
            )
            return snapshot

    def replace_if_unchanged(self, snapshot: Snapshot, expected_last_modified: str) -> bool:
        """Persist a downloaded snapshot unless local data changed meanwhile.

        Args:
            snapshot: Remote snapshot to store.
            expected_last_modified: Local lastModified the download was
                decided against.

        Returns:
            True if the snapshot was written, False if a newer local save
            exists on disk.
        """
        with self._lock:
            current = self.load()
            if current.metadata.last_modified != expected_last_modified:
                logger.info(
                    "Local data changed during sync (%s != %s), download skipped",
                    current.metadata.last_modified,
                    expected_last_modified,
                )
                return False
            self.replace(snapshot)
            return True

    def reset(self) -> Snapshot:
        """Replace local data with an empty snapshot."""
        with self._lock:
            snapshot = empty_snapshot()
            self._write(snapshot)
            return snapshot

    def _write(self, snapshot: Snapshot) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        tmp_path.write_text(dumps_snapshot(snapshot), encoding="utf-8")
        tmp_path.replace(self._path)
