"""Snapshot model for the synced dataset.

This module provides:
- Snapshot / Metadata: the complete user dataset as stored remotely
- Timestamp helpers: parse, format and compare ISO-8601 instants in UTC
- JSON encode/decode of the remote payload

Wire shape:
    {
        "records": [...],
        "categories": ["..."],
        "settings": {...},
        "metadata": {"version": "...", "lastModified": "...", "totalRecords": 0}
    }

Readers are tolerant: missing fields are defaulted and unknown keys are
carried through untouched, so older and newer payloads both parse.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

DEFAULT_VERSION = "1.0.0"
EPOCH_ISO = "1970-01-01T00:00:00.000Z"

_METADATA_KEYS = ("version", "lastModified", "totalRecords", "totalPrompts")
_SNAPSHOT_KEYS = ("records", "prompts", "categories", "settings", "metadata")


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into an aware UTC datetime.

    Naive values are taken as UTC. Precision is truncated to whole
    milliseconds, which is what every writer of the payload produces.

    Raises:
        ValueError: If the value is not a valid ISO-8601 timestamp.
    """
    text = value.strip()
    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    parsed = parsed.astimezone(UTC)
    return parsed.replace(microsecond=parsed.microsecond // 1000 * 1000)


def format_timestamp(moment: datetime) -> str:
    """Format a datetime as YYYY-MM-DDTHH:MM:SS.mmmZ in UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    moment = moment.astimezone(UTC)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def utc_now_iso() -> str:
    """Current time as a payload timestamp."""
    return format_timestamp(datetime.now(UTC))


@dataclass
class Metadata:
    """Snapshot metadata.

    ``last_modified`` is the only ordering signal used for conflict detection.
    """

    version: str = DEFAULT_VERSION
    last_modified: str = EPOCH_ISO
    total_records: int = 0
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data = dict(self.extra)
        data["version"] = self.version
        data["lastModified"] = self.last_modified
        data["totalRecords"] = self.total_records
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any], record_count: int) -> Metadata:
        total = data.get("totalRecords", data.get("totalPrompts"))
        try:
            total_records = int(total)
        except (TypeError, ValueError):
            total_records = record_count
        return cls(
            version=str(data.get("version") or DEFAULT_VERSION),
            last_modified=str(data.get("lastModified") or EPOCH_ISO),
            total_records=total_records,
            extra={k: v for k, v in data.items() if k not in _METADATA_KEYS},
        )


@dataclass
class Snapshot:
    """The complete user dataset: records, categories, settings and metadata."""

    records: list[dict[str, Any]] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)
    settings: dict[str, Any] = field(default_factory=dict)
    metadata: Metadata = field(default_factory=Metadata)
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def last_modified(self) -> datetime:
        """Parsed ``metadata.lastModified``."""
        return parse_timestamp(self.metadata.last_modified)

    def touch(self, now: datetime | None = None) -> None:
        """Mark the snapshot as modified.

        The timestamp never moves backwards, even if the wall clock does.
        """
        moment = now or datetime.now(UTC)
        try:
            current = self.last_modified
        except ValueError:
            current = None
        if current is None or moment > current:
            self.metadata.last_modified = format_timestamp(moment)
        self.metadata.total_records = len(self.records)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the wire shape."""
        data = dict(self.extra)
        data["records"] = list(self.records)
        data["categories"] = list(self.categories)
        data["settings"] = dict(self.settings)
        data["metadata"] = self.metadata.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Snapshot:
        """Create from a payload dictionary.

        Legacy payloads using ``prompts`` / ``totalPrompts`` are accepted.

        Raises:
            ValueError: If a field has the wrong shape.
        """
        records = data.get("records", data.get("prompts")) or []
        categories = data.get("categories") or []
        settings = data.get("settings") or {}
        metadata = data.get("metadata") or {}
        if not isinstance(records, list) or not isinstance(categories, list):
            raise ValueError("records and categories must be lists")
        if not isinstance(settings, dict) or not isinstance(metadata, dict):
            raise ValueError("settings and metadata must be objects")
        return cls(
            records=list(records),
            categories=[str(c) for c in categories],
            settings=dict(settings),
            metadata=Metadata.from_dict(metadata, len(records)),
            extra={k: v for k, v in data.items() if k not in _SNAPSHOT_KEYS},
        )


def empty_snapshot() -> Snapshot:
    """Default dataset for a fresh install."""
    return Snapshot(metadata=Metadata(last_modified=utc_now_iso()))


def dumps_snapshot(snapshot: Snapshot) -> str:
    """Serialize a snapshot as indented JSON text."""
    return json.dumps(snapshot.to_dict(), indent=4, ensure_ascii=False)


def loads_snapshot(text: str | bytes | None) -> Snapshot | None:
    """Parse payload text.

    Returns:
        The snapshot, or None when the body is empty or an empty JSON object
        (the placeholder written when a remote resource is provisioned).

    Raises:
        ValueError: If the text is not a JSON object of the expected shape.
    """
    if text is not None and not isinstance(text, (str, bytes)):
        raise ValueError(f"Payload must be text, not {type(text).__name__}")
    if isinstance(text, bytes):
        text = text.decode("utf-8")
    if not text or not text.strip():
        return None
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("Payload must be a JSON object")
    if not data:
        return None
    return Snapshot.from_dict(data)
