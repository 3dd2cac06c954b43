"""GitLab snippet provider.

The remote resource is a private snippet named ``prompt-hub.json``.

    create  POST {base}/api/v4/snippets       {title, file_name, content, visibility}
    update  PUT  {base}/api/v4/snippets/{id}  {content, file_name}
    read    GET  {base}/api/v4/snippets/{id}  -> raw_url, then GET raw_url

Reads take two authenticated round trips.
"""

from __future__ import annotations

from typing import Any

import httpx

from prompthub.client.errors import ErrorCode, Operation, SyncError
from prompthub.client.providers.base import PLACEHOLDER_CONTENT, ProviderAdapter
from prompthub.core.config import DEFAULT_GITLAB_URL, DEFAULT_TIMEOUT, ProviderKind
from prompthub.core.snapshot import Snapshot, dumps_snapshot


class GitLabSnippetProvider(ProviderAdapter):
    """GitLab (gitlab.com or self-hosted) snippets."""

    kind = ProviderKind.GITLAB
    title = "Prompt Hub Sync Data"

    def __init__(
        self,
        base_url: str = DEFAULT_GITLAB_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            base_url: GitLab instance URL.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport.
        """
        super().__init__(timeout=timeout, transport=transport)
        self._api_url = f"{(base_url or DEFAULT_GITLAB_URL).rstrip('/')}/api/v4"

    @property
    def api_url(self) -> str:
        """GitLab REST API root."""
        return self._api_url

    def _headers(self, credential: str) -> dict[str, str]:
        return {"PRIVATE-TOKEN": credential}

    def _snippet_url(self, snippet_id: str | None = None) -> str:
        if snippet_id:
            return f"{self._api_url}/snippets/{snippet_id}"
        return f"{self._api_url}/snippets"

    def _create(self, credential: str, content: str, operation: Operation) -> str:
        response = self._request(
            "POST",
            self._snippet_url(),
            operation,
            json={
                "title": self.title,
                "file_name": self.filename,
                "content": content,
                "visibility": "private",
            },
            headers=self._headers(credential),
        )
        data = self._json(response, operation)
        snippet_id = data.get("id") if isinstance(data, dict) else None
        if not snippet_id:
            raise SyncError(
                "GitLab snippet was created but no snippet ID was returned.",
                ErrorCode.REQUEST_FAILED,
                response.status_code,
            )
        return str(snippet_id)

    def validate_and_provision(self, credential: str, existing_handle: str | None = None) -> str:
        if existing_handle:
            self._request(
                "GET", self._snippet_url(existing_handle), "test", headers=self._headers(credential)
            )
            return existing_handle
        return self._create(credential, PLACEHOLDER_CONTENT, "test")

    def read_remote(self, handle: str, credential: str) -> Snapshot | None:
        headers = self._headers(credential)
        info: Any = self._json(
            self._request("GET", self._snippet_url(handle), "read", headers=headers), "read"
        )
        raw_url = info.get("raw_url") if isinstance(info, dict) else None
        if not raw_url:
            raw_url = f"{self._snippet_url(handle)}/raw"

        response = self._request("GET", raw_url, "read", headers=headers)
        return self._parse(response.text)

    def write_remote(self, handle: str | None, credential: str, snapshot: Snapshot) -> str:
        content = dumps_snapshot(snapshot)
        if not handle:
            return self._create(credential, content, "write")
        self._request(
            "PUT",
            self._snippet_url(handle),
            "write",
            json={"content": content, "file_name": self.filename},
            headers=self._headers(credential),
        )
        return handle
