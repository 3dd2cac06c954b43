"""Local data file watcher for auto-sync.

This module provides:
- DataFileEventHandler: reacts to writes of one file
- DataFileWatcher: watchdog observer that calls back on every local save

LocalDataStore writes through a temp file and a rename, so a save shows up
as a move onto the data file as well as a plain modification.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

if TYPE_CHECKING:
    from watchdog.observers.api import BaseObserver

logger = logging.getLogger(__name__)


def _as_path(value: str | bytes) -> Path:
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    return Path(value).resolve()


class DataFileEventHandler(FileSystemEventHandler):
    """Calls ``on_change`` whenever the data file is written."""

    def __init__(self, data_file: Path, on_change: Callable[[], object]) -> None:
        super().__init__()
        self._data_file = Path(data_file).resolve()
        self._on_change = on_change

    def _handle(self, path: str | bytes) -> None:
        if _as_path(path) != self._data_file:
            return
        logger.debug("Local data changed: %s", self._data_file)
        self._on_change()

    def on_created(self, event: FileSystemEvent) -> None:
        """Handle created event."""
        if not event.is_directory:
            self._handle(event.src_path)

    def on_modified(self, event: FileSystemEvent) -> None:
        """Handle modified event."""
        if not event.is_directory:
            self._handle(event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        """Handle moved event (atomic replace)."""
        if not event.is_directory:
            self._handle(event.dest_path)


class DataFileWatcher:
    """Watches the local data file and triggers a callback on each save.

    Usage:
        with DataFileWatcher(store.path, scheduler.schedule):
            ...
    """

    def __init__(self, data_file: Path, on_change: Callable[[], object]) -> None:
        """Initialize the watcher.

        Args:
            data_file: File to watch; its directory must exist.
            on_change: Called on every write of the file.
        """
        self._data_file = Path(data_file).resolve()
        if not self._data_file.parent.is_dir():
            raise ValueError(f"Directory does not exist: {self._data_file.parent}")

        self._handler = DataFileEventHandler(self._data_file, on_change)
        self._observer: BaseObserver = Observer()
        self._running = False

    @property
    def data_file(self) -> Path:
        """Get the watched file path."""
        return self._data_file

    @property
    def is_running(self) -> bool:
        """Check if the watcher is running."""
        return self._running

    def start(self) -> None:
        """Start watching."""
        if self._running:
            return
        self._observer.schedule(self._handler, str(self._data_file.parent), recursive=False)
        self._observer.start()
        self._running = True

    def stop(self) -> None:
        """Stop watching."""
        if not self._running:
            return
        self._observer.stop()
        self._observer.join(timeout=5.0)
        self._running = False

    def __enter__(self) -> DataFileWatcher:
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.stop()
