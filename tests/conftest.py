"""Shared fixtures for prompthub tests."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from keyring.errors import PasswordDeleteError

from prompthub.client.secrets import SecretStore
from prompthub.client.settings import SettingsStore


class FakeKeyring:
    """In-memory stand-in for the keyring module."""

    def __init__(self) -> None:
        self.passwords: dict[tuple[str, str], str] = {}

    def get_password(self, service_name: str, username: str) -> str | None:
        return self.passwords.get((service_name, username))

    def set_password(self, service_name: str, username: str, password: str) -> None:
        self.passwords[(service_name, username)] = password

    def delete_password(self, service_name: str, username: str) -> None:
        if (service_name, username) not in self.passwords:
            raise PasswordDeleteError("Password not found")
        del self.passwords[(service_name, username)]


@pytest.fixture
def fake_keyring() -> FakeKeyring:
    """Create an empty in-memory keyring."""
    return FakeKeyring()


@pytest.fixture
def secret_store(fake_keyring: FakeKeyring) -> SecretStore:
    """Create a SecretStore over the in-memory keyring."""
    return SecretStore(backend=fake_keyring)


@pytest.fixture
def settings_store(tmp_path: Path) -> SettingsStore:
    """Create a SettingsStore in a temporary directory."""
    return SettingsStore(tmp_path / "config.json")


@pytest.fixture(autouse=True)
def reset_prompthub_logger():  # type: ignore[no-untyped-def]
    """Undo CLI logging setup so caplog sees prompthub records."""
    yield
    prompthub_logger = logging.getLogger("prompthub")
    for handler in prompthub_logger.handlers[:]:
        prompthub_logger.removeHandler(handler)
    prompthub_logger.setLevel(logging.NOTSET)
    prompthub_logger.propagate = True
