"""Remote backends behind one adapter contract.

Providers:
- **GitHubGistProvider** / **GiteeGistProvider**: private gist with one file
- **GitLabSnippetProvider**: private snippet, raw content fetched separately
- **WebDAVProvider**: one file under a WebDAV collection
- **CustomAPIProvider**: user-run HTTP endpoint with a ``{data: {content}}`` envelope

``create_provider`` picks the adapter for the active SyncSettings.
"""

from __future__ import annotations

import httpx

from prompthub.client.errors import ErrorCode, SyncError
from prompthub.client.providers.base import PLACEHOLDER_CONTENT, ProviderAdapter
from prompthub.client.providers.custom import CustomAPIProvider
from prompthub.client.providers.gist import GiteeGistProvider, GistProvider, GitHubGistProvider
from prompthub.client.providers.gitlab import GitLabSnippetProvider
from prompthub.client.providers.webdav import WebDAVProvider
from prompthub.core.config import DEFAULT_TIMEOUT, ProviderKind, SyncSettings


def create_provider(
    settings: SyncSettings,
    timeout: float = DEFAULT_TIMEOUT,
    transport: httpx.BaseTransport | None = None,
) -> ProviderAdapter:
    """Build the adapter for the configured provider.

    Raises:
        SyncError: CONFIG_MISSING if no provider is selected or a required
            URL/username is missing.
    """
    kind = settings.provider
    if kind == ProviderKind.GITHUB:
        return GitHubGistProvider(timeout=timeout, transport=transport)
    if kind == ProviderKind.GITEE:
        return GiteeGistProvider(timeout=timeout, transport=transport)
    if kind == ProviderKind.GITLAB:
        return GitLabSnippetProvider(
            base_url=settings.provider_url, timeout=timeout, transport=transport
        )
    if kind == ProviderKind.WEBDAV:
        if not settings.provider_url or not settings.webdav_username:
            raise SyncError("WebDAV URL and username are required.", ErrorCode.CONFIG_MISSING)
        return WebDAVProvider(
            base_url=settings.provider_url,
            username=settings.webdav_username,
            timeout=timeout,
            transport=transport,
        )
    if kind == ProviderKind.CUSTOM:
        if not settings.provider_url:
            raise SyncError("Custom API URL is required.", ErrorCode.CONFIG_MISSING)
        return CustomAPIProvider(url=settings.provider_url, timeout=timeout, transport=transport)
    raise SyncError("No cloud sync provider is configured.", ErrorCode.CONFIG_MISSING)


__all__ = [
    "PLACEHOLDER_CONTENT",
    "CustomAPIProvider",
    "GistProvider",
    "GitHubGistProvider",
    "GitLabSnippetProvider",
    "GiteeGistProvider",
    "ProviderAdapter",
    "WebDAVProvider",
    "create_provider",
]
