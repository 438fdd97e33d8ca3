"""Remote store boundary: database rows, object storage and change notifications."""

from __future__ import annotations

from .blobs import BlobStore
from .config import RemoteConfig
from .realtime import ChangeEvent, ChangeHandler, RealtimeClient, Subscription
from .store import RemoteStore
from .tables import DEFAULT_PROJECT_ID, MOODBOARD_BUCKET, TABLES, VOICE_NOTES_BUCKET

__all__ = [
    "RemoteConfig",
    "RemoteStore",
    "BlobStore",
    "RealtimeClient",
    "Subscription",
    "ChangeEvent",
    "ChangeHandler",
    "TABLES",
    "DEFAULT_PROJECT_ID",
    "MOODBOARD_BUCKET",
    "VOICE_NOTES_BUCKET",
]
