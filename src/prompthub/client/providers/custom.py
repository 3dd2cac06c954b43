"""Custom HTTP API provider.

The remote resource is a caller-supplied URL; the handle is that URL.

    validate  GET  {url}  Authorization: Bearer {key}   (any 2xx)
    read      GET  {url}  x-api-key: {key}             -> {"data": {"content": "..."}}
    write     POST {url}  x-api-key: {key}             {"content": "..."}
"""

from __future__ import annotations

from typing import Any

import httpx

from prompthub.client.providers.base import ProviderAdapter
from prompthub.core.config import DEFAULT_TIMEOUT, ProviderKind
from prompthub.core.snapshot import Snapshot, dumps_snapshot


class CustomAPIProvider(ProviderAdapter):
    """A user-run HTTP endpoint storing the payload as a string."""

    kind = ProviderKind.CUSTOM

    def __init__(
        self,
        url: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            url: API endpoint URL.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport.
        """
        super().__init__(timeout=timeout, transport=transport)
        self._url = url

    def validate_and_provision(self, credential: str, existing_handle: str | None = None) -> str:
        url = self._require_handle(existing_handle or self._url)
        self._request("GET", url, "test", headers={"Authorization": f"Bearer {credential}"})
        return url

    def read_remote(self, handle: str, credential: str) -> Snapshot | None:
        url = self._require_handle(handle or self._url)
        response = self._request("GET", url, "read", headers={"x-api-key": credential})
        body: Any = self._json(response, "read")
        data = body.get("data") if isinstance(body, dict) else None
        content = data.get("content") if isinstance(data, dict) else None
        return self._parse(content)

    def write_remote(self, handle: str | None, credential: str, snapshot: Snapshot) -> str:
        url = self._require_handle(handle or self._url)
        self._request(
            "POST",
            url,
            "write",
            json={"content": dumps_snapshot(snapshot)},
            headers={"x-api-key": credential},
        )
        return url
