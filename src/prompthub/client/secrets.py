"""Per-provider credential storage for prompthub.

This module provides:
- SecretStore: provider token/password persistence in the OS keyring
- Single-active-provider invariant: storing a secret for one provider
  deletes the secrets of every other provider

Secrets are only ever read by the coordinator right before an adapter call.
They are never written to the settings file, the payload or the logs.
"""

from __future__ import annotations

import contextlib
import logging
from typing import Protocol

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from prompthub.core.config import ProviderKind

logger = logging.getLogger(__name__)

KEYRING_SERVICE = "prompthub"

SECRET_KEYS: dict[ProviderKind, str] = {
    ProviderKind.GITHUB: "githubToken",
    ProviderKind.GITEE: "giteeToken",
    ProviderKind.GITLAB: "gitlabToken",
    ProviderKind.WEBDAV: "webdavPassword",
    ProviderKind.CUSTOM: "customApiKey",
}


class SecretStoreError(Exception):
    """Exception raised when the credential backend fails."""


class SecretBackend(Protocol):
    """The subset of the keyring API used by SecretStore."""

    def get_password(self, service_name: str, username: str) -> str | None: ...

    def set_password(self, service_name: str, username: str, password: str) -> None: ...

    def delete_password(self, service_name: str, username: str) -> None: ...


class SecretStore:
    """Maps provider -> secret in the OS keyring.

    Usage:
        secrets = SecretStore()
        secrets.store(ProviderKind.GITHUB, token)   # drops every other secret
        token = secrets.get(ProviderKind.GITHUB)
        secrets.clear()                             # sync disabled
    """

    def __init__(
        self,
        backend: SecretBackend | None = None,
        service: str = KEYRING_SERVICE,
    ) -> None:
        """Initialize the store.

        Args:
            backend: Object with the keyring function interface
                (defaults to the ``keyring`` module).
            service: Keyring service name.
        """
        self._backend = backend if backend is not None else keyring
        self._service = service

    def get(self, provider: ProviderKind) -> str | None:
        """Get the secret for a provider, or None if absent."""
        key = SECRET_KEYS.get(provider)
        if key is None:
            return None
        try:
            return self._backend.get_password(self._service, key)
        except KeyringError as e:
            raise SecretStoreError(f"Could not read {provider.display_name} secret") from e

    def store(self, provider: ProviderKind, secret: str) -> None:
        """Store the secret for the newly active provider.

        Every other provider's secret is deleted first.

        Raises:
            SecretStoreError: If the provider has no secret slot or the
                backend refuses the write.
        """
        key = SECRET_KEYS.get(provider)
        if key is None:
            raise SecretStoreError(f"Provider {provider.value!r} takes no secret")

        for other in SECRET_KEYS:
            if other != provider:
                self.delete(other)

        try:
            self._backend.set_password(self._service, key, secret)
        except KeyringError as e:
            raise SecretStoreError(f"Could not store {provider.display_name} secret") from e
        logger.info("Stored credential for %s", provider.display_name)

    def delete(self, provider: ProviderKind) -> None:
        """Delete a provider's secret; missing entries are ignored."""
        key = SECRET_KEYS.get(provider)
        if key is None:
            return
        try:
            with contextlib.suppress(PasswordDeleteError):
                self._backend.delete_password(self._service, key)
        except KeyringError as e:
            raise SecretStoreError(f"Could not delete {provider.display_name} secret") from e

    def clear(self) -> None:
        """Delete the secrets of all providers."""
        for provider in SECRET_KEYS:
            self.delete(provider)
        logger.info("Cleared all stored credentials")
