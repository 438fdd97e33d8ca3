"""SyncSession: per-session sync state held by the controller."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from hubsync.models import ConnectivityState, EntityType, StatusSnapshot, SyncStatus
from hubsync.remote import ChangeHandler, RealtimeClient, Subscription
from hubsync.util.time import now_utc

logger = logging.getLogger(__name__)


class SyncSession:
    """
    Connectivity, last-synced time, drain flag and live subscriptions.

    start() always tears down existing subscriptions first, so restarting a
    session never leaves duplicate listeners behind.
    """

    def __init__(
        self,
        *,
        connectivity: ConnectivityState = ConnectivityState.OFFLINE,
        remote_configured: bool = True,
    ) -> None:
        self.connectivity = connectivity
        self.remote_configured = remote_configured
        self.last_synced_at: Optional[datetime] = None
        self.syncing = False
        self.draining = False
        self.started = False
        self._subscriptions: list[Subscription] = []

    @property
    def online(self) -> bool:
        return self.connectivity is ConnectivityState.ONLINE

    @property
    def subscriptions(self) -> list[Subscription]:
        return list(self._subscriptions)

    def start(
        self,
        realtime: Optional[RealtimeClient] = None,
        handlers: Optional[dict[EntityType, ChangeHandler]] = None,
    ) -> None:
        self.stop()
        self.started = True
        if realtime is None or not handlers:
            return

        for entity_type, handler in handlers.items():
            self._subscriptions.append(realtime.subscribe(entity_type, handler))
        logger.info("Subscribed to %d change channels", len(self._subscriptions))

    def stop(self) -> None:
        for sub in self._subscriptions:
            sub.unsubscribe()
        self._subscriptions.clear()
        self.started = False

    def mark_synced(self) -> None:
        self.last_synced_at = now_utc()

    def status(self, pending: int = 0) -> StatusSnapshot:
        if not self.remote_configured:
            status = SyncStatus.LOCAL_ONLY
        elif not self.online:
            status = SyncStatus.OFFLINE
        elif self.syncing:
            status = SyncStatus.SYNCING
        else:
            status = SyncStatus.SYNCED
        return StatusSnapshot(status=status, last_synced_at=self.last_synced_at, pending=pending)
