"""Gist-backed providers (GitHub and Gitee).

The remote resource is a private gist holding one file, ``prompt-hub.json``.

    create  POST  {api}/gists         {files: {name: {content}}, public: false}
    update  PATCH {api}/gists/{id}    {files: {name: {content}}}
    read    GET   {api}/gists/{id}    -> files[name].content

GitHub authenticates with an ``Authorization: token`` header, Gitee with an
``access_token`` query parameter.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Any

from prompthub.client.errors import ErrorCode, Operation, SyncError
from prompthub.client.providers.base import PLACEHOLDER_CONTENT, ProviderAdapter
from prompthub.core.config import ProviderKind
from prompthub.core.snapshot import Snapshot, dumps_snapshot


class GistProvider(ProviderAdapter):
    """Shared gist protocol; subclasses supply the API root and auth."""

    api_url: str = ""
    description = "Prompt Hub Sync"

    @abstractmethod
    def _auth(self, credential: str) -> dict[str, Any]:
        """Request keyword arguments carrying the credential."""

    def _gist_url(self, gist_id: str | None = None) -> str:
        if gist_id:
            return f"{self.api_url}/gists/{gist_id}"
        return f"{self.api_url}/gists"

    def _files(self, content: str) -> dict[str, Any]:
        return {self.filename: {"content": content}}

    def _create(self, credential: str, content: str, operation: Operation) -> str:
        response = self._request(
            "POST",
            self._gist_url(),
            operation,
            json={
                "description": self.description,
                "public": False,
                "files": self._files(content),
            },
            **self._auth(credential),
        )
        data = self._json(response, operation)
        gist_id = data.get("id") if isinstance(data, dict) else None
        if not gist_id:
            raise SyncError(
                f"{self.name} gist was created but no gist ID was returned.",
                ErrorCode.REQUEST_FAILED,
                response.status_code,
            )
        return str(gist_id)

    def validate_and_provision(self, credential: str, existing_handle: str | None = None) -> str:
        if existing_handle:
            self._request("GET", self._gist_url(existing_handle), "test", **self._auth(credential))
            return existing_handle
        return self._create(credential, PLACEHOLDER_CONTENT, "test")

    def read_remote(self, handle: str, credential: str) -> Snapshot | None:
        response = self._request("GET", self._gist_url(handle), "read", **self._auth(credential))
        data = self._json(response, "read")
        files = data.get("files") if isinstance(data, dict) else None
        entry = (files or {}).get(self.filename)
        if not entry:
            return None

        content = entry.get("content")
        # Large files are cut off in the gist API; the full text is at raw_url
        if entry.get("truncated") and entry.get("raw_url"):
            content = self._request("GET", entry["raw_url"], "read", **self._auth(credential)).text
        return self._parse(content)

    def write_remote(self, handle: str | None, credential: str, snapshot: Snapshot) -> str:
        content = dumps_snapshot(snapshot)
        if not handle:
            return self._create(credential, content, "write")
        self._request(
            "PATCH",
            self._gist_url(handle),
            "write",
            json={"files": self._files(content)},
            **self._auth(credential),
        )
        return handle


class GitHubGistProvider(GistProvider):
    """GitHub gists."""

    kind = ProviderKind.GITHUB
    api_url = "https://api.github.com"

    def _auth(self, credential: str) -> dict[str, Any]:
        return {
            "headers": {
                "Authorization": f"token {credential}",
                "Accept": "application/vnd.github.v3+json",
            }
        }


class GiteeGistProvider(GistProvider):
    """Gitee gists."""

    kind = ProviderKind.GITEE
    api_url = "https://gitee.com/api/v5"

    def _auth(self, credential: str) -> dict[str, Any]:
        return {"params": {"access_token": credential}}
