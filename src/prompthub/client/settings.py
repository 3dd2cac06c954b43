"""Persistence of the sync settings record.

The settings file holds the active provider, its URL/username and the remote
handle. Credentials are kept in the SecretStore and never land here.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from prompthub.core.config import SyncSettings

logger = logging.getLogger(__name__)


class SettingsStore:
    """JSON-file backed SyncSettings."""

    def __init__(self, path: Path) -> None:
        """Initialize the store.

        Args:
            path: Path to the settings JSON file.
        """
        self._path = Path(path)

    @property
    def path(self) -> Path:
        """Get the settings file path."""
        return self._path

    def load(self) -> SyncSettings:
        """Load settings, or defaults when the file does not exist."""
        if not self._path.exists():
            return SyncSettings()
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("Settings file %s is corrupted, using defaults", self._path)
            return SyncSettings()
        if not isinstance(data, dict):
            return SyncSettings()
        return SyncSettings.from_dict(data)

    def save(self, settings: SyncSettings) -> None:
        """Write settings to disk."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(settings.to_dict(), indent=2), encoding="utf-8")
        logger.debug("Saved sync settings to %s", self._path)
