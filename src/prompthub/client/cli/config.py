"""Configuration utilities for the prompthub CLI.

This module provides shared path, store and logging helpers used across
CLI commands.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from prompthub.client.secrets import SecretStore
from prompthub.client.settings import SettingsStore
from prompthub.client.state import LocalDataStore
from prompthub.client.sync.coordinator import SyncCoordinator


def get_config_dir() -> Path:
    """Get the configuration directory for prompthub.

    Returns:
        Path to ~/.prompthub.
    """
    return Path.home() / ".prompthub"


def get_settings_file() -> Path:
    """Get the path to the sync settings file."""
    return get_config_dir() / "config.json"


def get_data_file() -> Path:
    """Get the path to the local data file."""
    return get_config_dir() / "data.json"


def get_data_store() -> LocalDataStore:
    """Open the local data store."""
    return LocalDataStore(get_data_file())


def build_coordinator() -> SyncCoordinator:
    """Create a coordinator over the user's settings file and keyring."""
    return SyncCoordinator(SettingsStore(get_settings_file()), SecretStore())


def configure_logging(verbose: bool) -> None:
    """Route prompthub logs to stderr.

    Only warnings and errors are shown unless ``verbose`` is set.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))

    prompthub_logger = logging.getLogger("prompthub")
    for existing in prompthub_logger.handlers[:]:
        prompthub_logger.removeHandler(existing)
    prompthub_logger.addHandler(handler)
    prompthub_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    prompthub_logger.propagate = False
