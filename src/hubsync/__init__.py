"""hubsync public API."""

from __future__ import annotations

import logging

from hubsync.connectivity import ConnectivityMonitor
from hubsync.errors import (
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
from hubsync.local import FileKeyValueStore, MemoryKeyValueStore, OfflineQueue, ProjectStateCache
from hubsync.manager import SyncController
from hubsync.models import (
    ChatMessage,
    ConnectivityState,
    DesignItem,
    DrainResult,
    EntityType,
    Expense,
    LogEntry,
    Notice,
    OperationResult,
    ProjectState,
    StatusSnapshot,
    SyncStatus,
    TimelineMilestone,
    WriteResult,
)
from hubsync.ops import OperationAction, OperationReplayer, QueuedOperation
from hubsync.remote import BlobStore, ChangeEvent, RealtimeClient, RemoteConfig, RemoteStore
from hubsync.session import SyncSession

logging.getLogger("hubsync").addHandler(logging.NullHandler())

__all__ = [
    # High-level
    "SyncController",
    "SyncSession",
    "ConnectivityMonitor",
    # Local
    "OfflineQueue",
    "ProjectStateCache",
    "FileKeyValueStore",
    "MemoryKeyValueStore",
    # Remote
    "RemoteConfig",
    "RemoteStore",
    "BlobStore",
    "RealtimeClient",
    "ChangeEvent",
    # Queue / Models
    "OperationAction",
    "QueuedOperation",
    "OperationReplayer",
    "EntityType",
    "Expense",
    "LogEntry",
    "DesignItem",
    "ChatMessage",
    "TimelineMilestone",
    "ProjectState",
    "OperationResult",
    "DrainResult",
    "WriteResult",
    "ConnectivityState",
    "SyncStatus",
    "StatusSnapshot",
    "Notice",
    # Errors
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
