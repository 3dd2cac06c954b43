"""WebDAV provider.

The remote resource is the file ``{base_url}/prompt-hub.json``; the handle is
the base URL itself.

    validate  OPTIONS  {base_url}
    exists    PROPFIND {base_url}/prompt-hub.json  (Depth: 0, 404 = absent)
    read      GET      {base_url}/prompt-hub.json
    write     PUT      {base_url}/prompt-hub.json  (Overwrite: T)

All requests use HTTP basic auth.
"""

from __future__ import annotations

import httpx

from prompthub.client.errors import ErrorCode, SyncError
from prompthub.client.providers.base import ProviderAdapter
from prompthub.core.config import DEFAULT_TIMEOUT, ProviderKind
from prompthub.core.snapshot import Snapshot, dumps_snapshot


class WebDAVProvider(ProviderAdapter):
    """A single file on a WebDAV share."""

    kind = ProviderKind.WEBDAV

    def __init__(
        self,
        base_url: str,
        username: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            base_url: WebDAV collection URL.
            username: Basic auth username.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport.
        """
        super().__init__(timeout=timeout, transport=transport)
        self._base_url = base_url.rstrip("/")
        self._username = username

    def _file_url(self, handle: str | None) -> str:
        base = self._require_handle(handle or self._base_url).rstrip("/")
        return f"{base}/{self.filename}"

    def _auth(self, credential: str) -> httpx.BasicAuth:
        return httpx.BasicAuth(self._username, credential)

    def exists(self, handle: str | None, credential: str) -> bool:
        """Check whether the payload file exists."""
        try:
            self._request(
                "PROPFIND",
                self._file_url(handle),
                "read",
                headers={"Depth": "0"},
                auth=self._auth(credential),
            )
        except SyncError as e:
            if e.code == ErrorCode.NOT_FOUND:
                return False
            raise
        return True

    def validate_and_provision(self, credential: str, existing_handle: str | None = None) -> str:
        # The share itself is the resource; there is nothing to create.
        handle = self._require_handle(existing_handle or self._base_url)
        self._request("OPTIONS", handle, "test", auth=self._auth(credential))
        return handle.rstrip("/")

    def read_remote(self, handle: str, credential: str) -> Snapshot | None:
        if not self.exists(handle, credential):
            return None
        response = self._request(
            "GET", self._file_url(handle), "read", auth=self._auth(credential)
        )
        return self._parse(response.text)

    def write_remote(self, handle: str | None, credential: str, snapshot: Snapshot) -> str:
        url = self._file_url(handle)
        self._request(
            "PUT",
            url,
            "write",
            content=dumps_snapshot(snapshot).encode("utf-8"),
            headers={
                "Content-Type": "application/json; charset=utf-8",
                "Overwrite": "T",
            },
            auth=self._auth(credential),
        )
        return (handle or self._base_url).rstrip("/")
