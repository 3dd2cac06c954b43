"""Sync error taxonomy and transport error classification.

This module provides:
- ErrorCode: the closed set of failure codes surfaced to callers
- SyncError / SyncConflictError: exceptions carrying a code
- classify_error: maps httpx failures to a SyncError

Classification order:
    1. No response at all (DNS, refused, timeout)  -> CONNECTION_FAILED
    2. HTTP 401                                    -> INVALID_CREDENTIALS
    3. HTTP 403                                    -> FORBIDDEN
    4. HTTP 404                                    -> NOT_FOUND
    5. Any other non-2xx                           -> REQUEST_FAILED
    6. Anything else (parse errors, bugs)          -> UNKNOWN_ERROR
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

import httpx

Operation = Literal["read", "write", "test"]


class ErrorCode(str, Enum):
    """Stable failure codes."""

    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONNECTION_FAILED = "CONNECTION_FAILED"
    REQUEST_FAILED = "REQUEST_FAILED"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    CONFIG_MISSING = "CONFIG_MISSING"
    REMOTE_EMPTY = "REMOTE_EMPTY"
    CONFLICT = "CONFLICT"

    @property
    def is_terminal(self) -> bool:
        """True for states that need user configuration before retrying."""
        return self in (ErrorCode.CONFIG_MISSING, ErrorCode.REMOTE_EMPTY)


class SyncError(Exception):
    """Base exception for sync errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code


class SyncConflictError(SyncError):
    """Neither side is strictly newer in the direction requested.

    Attributes:
        local_modified: Local ``lastModified`` timestamp.
        remote_modified: Remote ``lastModified`` timestamp.
    """

    def __init__(self, message: str, local_modified: str, remote_modified: str) -> None:
        super().__init__(message, ErrorCode.CONFLICT)
        self.local_modified = local_modified
        self.remote_modified = remote_modified


def _upstream_message(response: httpx.Response) -> str:
    """Best-effort message from an error response body."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            value = body.get(key)
            if value:
                return str(value)
    text = response.text.strip()
    if text:
        return text[:200]
    return response.reason_phrase or f"HTTP {response.status_code}"


def classify_error(error: BaseException, provider: str, operation: Operation) -> SyncError:
    """Map a transport failure to a SyncError.

    Args:
        error: The exception raised by the transport or by parsing.
        provider: Provider display name, for the message.
        operation: "read", "write" or "test", for the message.

    Returns:
        A SyncError; an existing SyncError is returned unchanged.
    """
    if isinstance(error, SyncError):
        return error

    if isinstance(error, httpx.RequestError):
        return SyncError(
            f"Could not connect to {provider}. Check the network connection or the {provider} URL.",
            ErrorCode.CONNECTION_FAILED,
        )

    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        if status == 401:
            return SyncError(
                f"{provider} credentials are invalid or expired. Check the token/password.",
                ErrorCode.INVALID_CREDENTIALS,
                status,
            )
        if status == 403:
            return SyncError(
                f"You do not have permission to access this {provider} resource.",
                ErrorCode.FORBIDDEN,
                status,
            )
        if status == 404:
            what = "resource" if operation == "read" else "gist/snippet"
            return SyncError(
                f"{provider} {what} not found. Check the ID or URL.",
                ErrorCode.NOT_FOUND,
                status,
            )
        return SyncError(
            f"{provider} request failed ({status}): {_upstream_message(error.response)}",
            ErrorCode.REQUEST_FAILED,
            status,
        )

    return SyncError(f"{provider} unknown error: {error}", ErrorCode.UNKNOWN_ERROR)
