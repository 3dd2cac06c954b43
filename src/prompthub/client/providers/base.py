"""Provider adapter contract and shared HTTP plumbing.

Every backend implements the same three operations:

    validate_and_provision(credential, existing_handle) -> handle
    read_remote(handle, credential)                     -> Snapshot | None
    write_remote(handle, credential, snapshot)          -> handle

All endpoint-shape differences stay inside the adapter. Transport failures
are converted to SyncError by ``_request`` and never leak as httpx errors.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from prompthub.client.errors import ErrorCode, Operation, SyncError, classify_error
from prompthub.core.config import DEFAULT_TIMEOUT, SYNC_FILENAME, ProviderKind
from prompthub.core.snapshot import Snapshot, loads_snapshot

logger = logging.getLogger(__name__)

# Body of a freshly provisioned remote; reads back as "no payload".
PLACEHOLDER_CONTENT = "{}"


class ProviderAdapter(ABC):
    """Base class for remote backends.

    Adapters own one httpx.Client and are used as context managers:

        with GitHubGistProvider() as provider:
            handle = provider.write_remote(handle, token, snapshot)
    """

    kind: ProviderKind = ProviderKind.NONE
    filename: str = SYNC_FILENAME

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport (tests, proxies).
        """
        self._timeout = timeout
        self._client = httpx.Client(
            timeout=timeout,
            transport=transport,
            follow_redirects=True,
        )

    @property
    def name(self) -> str:
        """Provider display name."""
        return self.kind.display_name

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> ProviderAdapter:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()

    def _request(
        self,
        method: str,
        url: str,
        operation: Operation,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a request and raise a classified SyncError on failure.

        Query parameters may carry credentials, so only the bare URL is logged.
        """
        logger.debug("%s %s %s", self.name, method, url)
        try:
            response = self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except Exception as e:
            raise classify_error(e, self.name, operation) from e
        return response

    def _json(self, response: httpx.Response, operation: Operation) -> Any:
        """Decode a JSON response body."""
        try:
            return response.json()
        except ValueError as e:
            raise classify_error(e, self.name, operation) from e

    def _parse(self, content: Any) -> Snapshot | None:
        """Parse payload text fetched from the remote."""
        try:
            return loads_snapshot(content)
        except (ValueError, TypeError, AttributeError) as e:
            raise SyncError(
                f"{self.name} returned data that is not a valid snapshot: {e}",
                ErrorCode.UNKNOWN_ERROR,
            ) from e

    def _require_handle(self, handle: str | None) -> str:
        if not handle:
            raise SyncError(
                f"{self.name} is not configured: missing URL.",
                ErrorCode.CONFIG_MISSING,
            )
        return handle

    @abstractmethod
    def validate_and_provision(self, credential: str, existing_handle: str | None = None) -> str:
        """Check the credential and return the handle of a usable resource.

        With ``existing_handle`` the resource is checked read-only and a
        missing resource fails with NOT_FOUND. Without it, an empty resource
        is created where the backend supports creation.
        """

    @abstractmethod
    def read_remote(self, handle: str, credential: str) -> Snapshot | None:
        """Fetch the remote snapshot, or None if the resource holds no payload."""

    @abstractmethod
    def write_remote(self, handle: str | None, credential: str, snapshot: Snapshot) -> str:
        """Store the snapshot, creating the resource if needed; return its handle."""
