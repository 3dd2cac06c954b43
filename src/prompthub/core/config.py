"""Shared configuration classes for prompthub.

This module defines the sync settings record and the constants shared by the
providers, the coordinator and the CLI.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

SYNC_FILENAME = "prompt-hub.json"
DEFAULT_GITLAB_URL = "https://gitlab.com"
DEFAULT_TIMEOUT = 10.0  # seconds, per HTTP call
AUTO_SYNC_DELAY = 5.0  # seconds of quiet before an auto-sync fires


class ProviderKind(str, Enum):
    """Remote backend holding the synced snapshot."""

    GITHUB = "github"
    GITEE = "gitee"
    GITLAB = "gitlab"
    WEBDAV = "webdav"
    CUSTOM = "custom"
    NONE = "none"

    @property
    def display_name(self) -> str:
        """Human-readable provider name used in messages."""
        return _DISPLAY_NAMES[self]

    @classmethod
    def parse(cls, value: str | None) -> ProviderKind:
        """Parse a stored provider value, falling back to NONE."""
        if isinstance(value, cls):
            return value
        if not value:
            return cls.NONE
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.NONE


_DISPLAY_NAMES = {
    ProviderKind.GITHUB: "GitHub",
    ProviderKind.GITEE: "Gitee",
    ProviderKind.GITLAB: "GitLab",
    ProviderKind.WEBDAV: "WebDAV",
    ProviderKind.CUSTOM: "Custom API",
    ProviderKind.NONE: "None",
}


@dataclass
class SyncSettings:
    """Cloud sync configuration.

    Exactly one provider is active at a time. The credential for that
    provider lives in the SecretStore, never here.

    Attributes:
        enabled: Whether cloud sync is turned on.
        auto_sync_enabled: Whether local saves trigger a debounced reconcile.
        provider: Active backend.
        remote_handle: Gist id / snippet id; base URL for WebDAV and Custom API.
        provider_url: Base URL for GitLab, WebDAV or Custom API.
        webdav_username: Username for WebDAV basic auth.
    """

    enabled: bool = False
    auto_sync_enabled: bool = False
    provider: ProviderKind = ProviderKind.NONE
    remote_handle: str = ""
    provider_url: str = ""
    webdav_username: str = ""

    def __post_init__(self) -> None:
        """Normalize provider and URL."""
        self.provider = ProviderKind.parse(self.provider)
        self.provider_url = (self.provider_url or "").strip()

    @property
    def is_active(self) -> bool:
        """True when sync is enabled and a provider is selected."""
        return self.enabled and self.provider != ProviderKind.NONE

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the settings file."""
        data = asdict(self)
        data["provider"] = self.provider.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SyncSettings:
        """Create from a settings file dictionary, defaulting missing keys."""
        return cls(
            enabled=bool(data.get("enabled", False)),
            auto_sync_enabled=bool(data.get("auto_sync_enabled", False)),
            provider=ProviderKind.parse(data.get("provider")),
            remote_handle=str(data.get("remote_handle") or ""),
            provider_url=str(data.get("provider_url") or ""),
            webdav_username=str(data.get("webdav_username") or ""),
        )
