"""Local persistence: offline queue and project snapshot."""

from __future__ import annotations

from .offline_queue import QUEUE_KEY, OfflineQueue
from .project_cache import SNAPSHOT_KEY, ProjectStateCache
from .storage import FileKeyValueStore, KeyValueStore, MemoryKeyValueStore

__all__ = [
    "KeyValueStore",
    "FileKeyValueStore",
    "MemoryKeyValueStore",
    "OfflineQueue",
    "ProjectStateCache",
    "QUEUE_KEY",
    "SNAPSHOT_KEY",
]
