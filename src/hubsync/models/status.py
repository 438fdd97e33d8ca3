"""Sync status indicator and notice models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Literal, Optional

from hubsync.util.time import format_clock


NoticeLevel = Literal["success", "info", "error"]


class ConnectivityState(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"


class SyncStatus(str, Enum):
    """Persistent status shown by the sync indicator."""

    OFFLINE = "offline"
    SYNCING = "syncing"
    SYNCED = "synced"
    LOCAL_ONLY = "local-only"


@dataclass(slots=True, frozen=True)
class StatusSnapshot:
    status: SyncStatus
    last_synced_at: Optional[datetime] = None
    pending: int = 0

    @property
    def label(self) -> str:
        if self.status is SyncStatus.LOCAL_ONLY:
            return "Local only - remote store not configured"
        if self.status is SyncStatus.OFFLINE:
            return "Offline - changes saved locally"
        if self.status is SyncStatus.SYNCING:
            return "Syncing..."
        if self.last_synced_at is None:
            return "Synced"
        return f"Synced - {format_clock(self.last_synced_at)}"


@dataclass(slots=True, frozen=True)
class Notice:
    """An ephemeral, user-visible notification (toast)."""

    message: str
    level: NoticeLevel = "info"
