"""
Realtime change notifications (Phoenix channel protocol over websockets).

One channel per entity type, filtered to the current project. Messages are
read only inside poll(), on the caller's thread, so callbacks run in
delivery order and never concurrently with other state mutations.
"""

from __future__ import annotations

import itertools
import json
import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Literal, Optional

from websockets.exceptions import ConnectionClosed, WebSocketException
from websockets.sync.client import connect

from hubsync.errors import InvalidStateError, NetworkError
from hubsync.models import EntityType

from .config import RemoteConfig
from .tables import table_for

logger = logging.getLogger(__name__)

ChangeType = Literal["insert", "update", "delete"]

_EVENT_TYPES: dict[str, ChangeType] = {
    "INSERT": "insert",
    "UPDATE": "update",
    "DELETE": "delete",
}


@dataclass(slots=True, frozen=True)
class ChangeEvent:
    """A row change pushed by the server."""

    entity_type: EntityType
    event_type: ChangeType
    record: dict[str, Any] = field(default_factory=dict)
    old_record: dict[str, Any] = field(default_factory=dict)
    commit_timestamp: Optional[str] = None

    @property
    def entity_id(self) -> Optional[str]:
        source = self.old_record if self.event_type == "delete" else self.record
        value = source.get("id")
        return value if isinstance(value, str) else None


ChangeHandler = Callable[[ChangeEvent], None]


@dataclass(slots=True)
class Subscription:
    """Handle for one channel. Call unsubscribe() on teardown."""

    topic: str
    entity_type: EntityType
    handler: ChangeHandler
    _client: Optional["RealtimeClient"] = None

    @property
    def active(self) -> bool:
        return self._client is not None

    def unsubscribe(self) -> None:
        client = self._client
        if client is None:
            return
        self._client = None
        client._leave(self)


class RealtimeClient:
    """
    Change-notification client for the managed database.

    Usage:
        client.connect()
        sub = client.subscribe(EntityType.EXPENSE, on_change)
        client.poll(timeout=1.0)   # dispatches pending events
        sub.unsubscribe()
        client.close()
    """

    def __init__(
        self,
        config: RemoteConfig,
        *,
        heartbeat_interval: float = 30.0,
        connect_fn: Optional[Callable[..., Any]] = None,
        dedupe_window: int = 512,
    ) -> None:
        self._config = config
        self._heartbeat_interval = heartbeat_interval
        self._connect_fn = connect_fn or connect
        self._ws: Any = None
        self._refs = itertools.count(1)
        self._subscriptions: dict[str, Subscription] = {}
        self._last_heartbeat = 0.0
        self._seen: deque[tuple[Any, ...]] = deque(maxlen=dedupe_window)

    @property
    def connected(self) -> bool:
        return self._ws is not None

    def connect(self) -> None:
        if self._ws is not None:
            return
        try:
            self._ws = self._connect_fn(
                self._config.realtime_url,
                open_timeout=self._config.timeout,
            )
        except (OSError, TimeoutError, WebSocketException) as exc:
            raise NetworkError("Realtime connection failed", cause=exc) from exc
        self._last_heartbeat = time.monotonic()
        logger.info("Realtime connected to %s", self._config.host)

        # Rejoin channels that survived a reconnect.
        for sub in self._subscriptions.values():
            self._join(sub)

    def close(self) -> None:
        for sub in list(self._subscriptions.values()):
            sub.unsubscribe()
        if self._ws is not None:
            try:
                self._ws.close()
            finally:
                self._ws = None

    def subscribe(self, entity_type: EntityType, handler: ChangeHandler) -> Subscription:
        """Open a channel for entity_type changes within the current project."""
        if self._ws is None:
            raise InvalidStateError("Realtime client is not connected. Call connect() first.")

        topic = f"realtime:{table_for(entity_type)}-changes"
        if topic in self._subscriptions:
            raise InvalidStateError(
                "Channel already subscribed; unsubscribe it first",
                details={"topic": topic},
            )

        sub = Subscription(topic=topic, entity_type=entity_type, handler=handler, _client=self)
        self._subscriptions[topic] = sub
        self._join(sub)
        return sub

    def poll(self, timeout: float = 0.0) -> int:
        """
        Read and dispatch messages until timeout elapses with nothing to read.

        Returns:
            Number of change events dispatched.

        Raises:
            NetworkError: if the connection has dropped.
        """
        if self._ws is None:
            raise InvalidStateError("Realtime client is not connected. Call connect() first.")

        dispatched = 0
        deadline = time.monotonic() + max(timeout, 0.0)
        while True:
            self._maybe_heartbeat()
            remaining = max(deadline - time.monotonic(), 0.0)
            try:
                raw = self._ws.recv(timeout=remaining)
            except TimeoutError:
                break
            except ConnectionClosed as exc:
                self._ws = None
                raise NetworkError("Realtime connection closed", cause=exc) from exc

            if self._handle_message(raw):
                dispatched += 1
        return dispatched

    # ----------------------------
    # Internals
    # ----------------------------
    def _join(self, sub: Subscription) -> None:
        table = table_for(sub.entity_type)
        column = "id" if sub.entity_type is EntityType.PROJECT else "project_id"
        self._send(
            sub.topic,
            "phx_join",
            {
                "config": {
                    "postgres_changes": [
                        {
                            "event": "*",
                            "schema": "public",
                            "table": table,
                            "filter": f"{column}=eq.{self._config.project_id}",
                        }
                    ]
                },
                "access_token": self._config.anon_key,
            },
        )

    def _leave(self, sub: Subscription) -> None:
        self._subscriptions.pop(sub.topic, None)
        if self._ws is None:
            return
        try:
            self._send(sub.topic, "phx_leave", {})
        except NetworkError as exc:
            logger.debug("phx_leave for %s not sent: %s", sub.topic, exc)

    def _send(self, topic: str, event: str, payload: dict[str, Any]) -> None:
        ref = str(next(self._refs))
        message = {"topic": topic, "event": event, "payload": payload, "ref": ref, "join_ref": ref}
        try:
            self._ws.send(json.dumps(message))
        except ConnectionClosed as exc:
            self._ws = None
            raise NetworkError("Realtime connection closed", cause=exc) from exc

    def _maybe_heartbeat(self) -> None:
        now = time.monotonic()
        if now - self._last_heartbeat < self._heartbeat_interval:
            return
        self._last_heartbeat = now
        self._send("phoenix", "heartbeat", {})

    def _handle_message(self, raw: Any) -> bool:
        try:
            message = json.loads(raw)
        except (TypeError, ValueError):
            logger.debug("Ignoring non-JSON realtime frame")
            return False
        if not isinstance(message, dict):
            logger.debug("Ignoring non-object realtime frame")
            return False

        if message.get("event") != "postgres_changes":
            if message.get("event") == "phx_reply":
                status = (message.get("payload") or {}).get("status")
                if status != "ok":
                    logger.warning("Realtime %s replied %s", message.get("topic"), status)
            return False

        sub = self._subscriptions.get(message.get("topic", ""))
        if sub is None:
            return False

        data = (message.get("payload") or {}).get("data") or {}
        event_type = _EVENT_TYPES.get(str(data.get("type", "")).upper())
        if event_type is None:
            return False

        event = ChangeEvent(
            entity_type=sub.entity_type,
            event_type=event_type,
            record=data.get("record") or {},
            old_record=data.get("old_record") or {},
            commit_timestamp=data.get("commit_timestamp"),
        )

        key = (sub.topic, event.event_type, event.entity_id, event.commit_timestamp)
        if event.commit_timestamp is not None and key in self._seen:
            return False
        self._seen.append(key)

        sub.handler(event)
        return True
