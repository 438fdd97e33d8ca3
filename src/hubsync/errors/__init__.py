"""Public error exports for hubsync."""

from __future__ import annotations

from .exceptions import (
    ApiError,
    AuthError,
    ConflictError,
    HttpErrorInfo,
    HubSyncError,
    InvalidArgumentError,
    InvalidStateError,
    NetworkError,
    NotConfiguredError,
    NotFoundError,
    PermissionError,
    RateLimitError,
    ReplayNotSupportedError,
    StorageError,
    map_http_error,
)

__all__ = [
    "HubSyncError",
    "InvalidStateError",
    "NotConfiguredError",
    "StorageError",
    "ReplayNotSupportedError",
    "AuthError",
    "PermissionError",
    "InvalidArgumentError",
    "NotFoundError",
    "ConflictError",
    "RateLimitError",
    "NetworkError",
    "ApiError",
    "HttpErrorInfo",
    "map_http_error",
]
