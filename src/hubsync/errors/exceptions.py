"""Exception hierarchy and HTTP error mapping for hubsync."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


class HubSyncError(Exception):
    """
    Base exception for hubsync.

    Attributes:
        details: Optional structured information (e.g., HTTP status, op_id).
        cause: Optional original exception that triggered this error.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.details = details or {}
        self.cause = cause


class InvalidStateError(HubSyncError):
    """Raised when a component is used in an invalid state (e.g., nested drain)."""


class NotConfiguredError(HubSyncError):
    """Raised when the remote store is not configured for this session."""


class StorageError(HubSyncError):
    """Raised when local persistence cannot be read or written."""


class ReplayNotSupportedError(HubSyncError):
    """Raised when a queued operation has no replay handler (e.g., binary uploads)."""


class AuthError(HubSyncError):
    """Raised when the remote store rejects the API key (HTTP 401)."""


class PermissionError(HubSyncError):
    """Raised when access is denied (HTTP 403)."""


class InvalidArgumentError(HubSyncError):
    """Raised when request arguments are invalid (HTTP 400, etc.)."""


class NotFoundError(HubSyncError):
    """Raised when a remote row or object is not found (HTTP 404)."""


class ConflictError(HubSyncError):
    """Raised when a conflict occurs (HTTP 409, duplicate primary key)."""


class RateLimitError(HubSyncError):
    """Raised when rate-limited (HTTP 429)."""


class NetworkError(HubSyncError):
    """Raised when network/timeout issues prevent the request."""


class ApiError(HubSyncError):
    """Raised for unclassified API errors (5xx, unknown 4xx, etc.)."""


@dataclass(frozen=True)
class HttpErrorInfo:
    """Lightweight HTTP error information for mapping to hubsync exceptions."""

    status_code: int
    code: str | None = None
    message: str | None = None
    details: dict[str, Any] | None = None


def map_http_error(
    info: HttpErrorInfo,
    *,
    cause: Optional[BaseException] = None,
) -> HubSyncError:
    """
    Map an HTTP error to a hubsync exception.

    Policy:
        - 400 -> InvalidArgumentError
        - 401 -> AuthError
        - 403 -> PermissionError
        - 404 -> NotFoundError
        - 409 -> ConflictError (PostgREST code 23505 on duplicate key)
        - 429 -> RateLimitError
        - 5xx and anything else -> ApiError
    """
    details: dict[str, Any] = {
        "status_code": info.status_code,
        "code": info.code,
    }
    if info.details:
        details.update(info.details)

    message = info.message or f"HTTP error {info.status_code}"

    if info.status_code == 400:
        return InvalidArgumentError(message, details=details, cause=cause)
    if info.status_code == 401:
        return AuthError(message, details=details, cause=cause)
    if info.status_code == 403:
        return PermissionError(message, details=details, cause=cause)
    if info.status_code == 404:
        return NotFoundError(message, details=details, cause=cause)
    if info.status_code == 409:
        return ConflictError(message, details=details, cause=cause)
    if info.status_code == 429:
        return RateLimitError(message, details=details, cause=cause)

    return ApiError(message, details=details, cause=cause)
