"""SyncController: optimistic writes, offline queue drain and remote merge."""

from __future__ import annotations

import base64
import logging
from typing import Any, Callable, Optional

from hubsync.connectivity import ConnectivityMonitor
from hubsync.errors import HubSyncError, InvalidArgumentError, NetworkError, StorageError
from hubsync.local import KeyValueStore, OfflineQueue, ProjectStateCache
from hubsync.models import (
    ChatMessage,
    ConnectivityState,
    DesignItem,
    DrainResult,
    Entity,
    EntityType,
    Expense,
    LogEntry,
    Notice,
    ProjectState,
    StatusSnapshot,
    TimelineMilestone,
    WriteResult,
    entity_from_record,
)
from hubsync.ops import (
    RETRY_NOT_SUPPORTED_MESSAGE,
    OperationAction,
    OperationReplayer,
    QueuedOperation,
    decode_payload,
)
from hubsync.ops.payloads import EntityPayload, EntityRef, FieldChanges, ProjectChanges
from hubsync.remote import (
    MOODBOARD_BUCKET,
    BlobStore,
    ChangeEvent,
    RealtimeClient,
    RemoteConfig,
    RemoteStore,
)
from hubsync.session import SyncSession
from hubsync.util.ids import new_entity_id
from hubsync.util.time import now_iso

logger = logging.getLogger(__name__)

Notify = Callable[[Notice], None]

SAVED_OFFLINE_MESSAGE = "Saved offline, will sync when online"
LOCAL_ONLY_MESSAGE = "Remote store not configured. Using local storage only."
LOAD_FAILED_MESSAGE = "Error connecting to the remote store. Using local data."
QUEUE_WRITE_FAILED_MESSAGE = "Could not save the change for later sync"

SUBSCRIBED_TYPES: tuple[EntityType, ...] = (
    EntityType.EXPENSE,
    EntityType.LOG,
    EntityType.MESSAGE,
    EntityType.DESIGN,
    EntityType.MILESTONE,
    EntityType.PROJECT,
)

_INSERT_NOTICES: dict[EntityType, str] = {
    EntityType.EXPENSE: "New expense added",
    EntityType.LOG: "New log entry added",
    EntityType.DESIGN: "New moodboard item added",
    EntityType.MILESTONE: "New milestone added",
}


class SyncController:
    """
    The only component that decides between a direct remote write and the queue.

    Policy:
        - Every user operation mutates the local cache first (optimistic).
        - Online: try the remote store; success -> synced, failure -> queue.
        - Offline: queue.
        - No remote store configured: local only, nothing is queued.
        - offline -> online (and start() while online): drain the queue once.
        - Remote failures never propagate; they become queue entries + notices.
    """

    def __init__(
        self,
        cache: ProjectStateCache,
        queue: OfflineQueue,
        *,
        store: Optional[RemoteStore] = None,
        blobs: Optional[BlobStore] = None,
        realtime: Optional[RealtimeClient] = None,
        connectivity: Optional[ConnectivityMonitor] = None,
        notify: Optional[Notify] = None,
    ) -> None:
        self._cache = cache
        self._queue = queue
        self._store = store
        self._blobs = blobs
        self._realtime = realtime
        self._monitor = connectivity
        self._notify_cb = notify
        self._replayer = OperationReplayer(store, blobs=blobs) if store is not None else None
        self._session = SyncSession(remote_configured=store is not None)

    @classmethod
    def from_config(
        cls,
        config: Optional[RemoteConfig],
        storage: KeyValueStore,
        *,
        notify: Optional[Notify] = None,
    ) -> "SyncController":
        """Wire a controller from RemoteConfig (None -> local-only mode)."""
        cache = ProjectStateCache(storage)
        queue = OfflineQueue(storage)
        if config is None:
            return cls(cache, queue, notify=notify)
        return cls(
            cache,
            queue,
            store=RemoteStore(config),
            blobs=BlobStore(config),
            realtime=RealtimeClient(config),
            connectivity=ConnectivityMonitor.for_config(config),
            notify=notify,
        )

    @property
    def state(self) -> ProjectState:
        return self._cache.state

    @property
    def session(self) -> SyncSession:
        return self._session

    @property
    def queue(self) -> OfflineQueue:
        return self._queue

    @property
    def local_only(self) -> bool:
        return self._store is None

    # ----------------------------
    # Session lifecycle
    # ----------------------------
    def start(self) -> ProjectState:
        """
        Begin a session.

        Rehydrates the local snapshot, then (when configured and online)
        drains the queue, loads the remote project and opens subscriptions.
        """
        self._cache.load()

        if self._store is None:
            self._session.start()
            self._notify(LOCAL_ONLY_MESSAGE, "info")
            return self.state

        if self._monitor is not None:
            self._session.connectivity = self._monitor.probe()
        else:
            self._session.connectivity = ConnectivityState.ONLINE

        if self._session.online:
            self._on_online()
            self._load_remote_project()

        self._open_subscriptions()
        return self.state

    def stop(self) -> None:
        """Tear down subscriptions and the realtime connection."""
        self._session.stop()
        if self._realtime is not None:
            self._realtime.close()

    def set_connectivity(self, state: ConnectivityState) -> None:
        previous = self._session.connectivity
        self._session.connectivity = state
        if previous is state:
            return

        logger.info("Connectivity %s -> %s", previous.value, state.value)
        if state is ConnectivityState.ONLINE and self._store is not None:
            self._reconnect_realtime()
            self._on_online()

    def refresh_connectivity(self) -> ConnectivityState:
        """Probe reachability and apply any transition."""
        if self._monitor is not None:
            self.set_connectivity(self._monitor.probe())
        return self._session.connectivity

    def status(self) -> StatusSnapshot:
        pending = len(self._queue) if self._store is not None else 0
        return self._session.status(pending=pending)

    # ----------------------------
    # Queue drain
    # ----------------------------
    def drain(self) -> DrainResult:
        """Replay the offline queue once. At most one drain runs at a time."""
        if self._replayer is None:
            return DrainResult()
        if self._session.draining:
            logger.warning("Drain already in flight; skipped")
            return DrainResult()

        self._session.draining = True
        self._session.syncing = True
        try:
            result = self._queue.drain(self._replayer)
        finally:
            self._session.draining = False
            self._session.syncing = False

        self._session.mark_synced()
        return result

    # ----------------------------
    # Generic user operations
    # ----------------------------
    def add(self, entity_type: EntityType, entity: Entity) -> bool:
        """
        Add entity locally, then remotely or to the queue.

        Returns:
            True if the remote store confirmed the write.
        """
        if entity_type is EntityType.PROJECT:
            raise InvalidArgumentError("Use update_project() for project settings")
        if entity_type is EntityType.DESIGN:
            raise InvalidArgumentError("Use add_design() for moodboard items")
        if isinstance(entity, ChatMessage) and entity.type == "audio" and not entity.audio_url:
            raise InvalidArgumentError("Use send_voice_note() for audio messages")

        self._cache.add_entity(entity_type, entity)
        return self._write(
            entity_type,
            OperationAction.ADD,
            entity.to_dict(),
            lambda store: store.add(entity_type, entity),
        )

    def update(self, entity_type: EntityType, entity_id: str, changes: dict[str, Any]) -> bool:
        if entity_type is EntityType.PROJECT:
            raise InvalidArgumentError("Use update_project() for project settings")
        if not changes:
            raise InvalidArgumentError("No fields to update")
        if self._cache.update_entity(entity_type, entity_id, changes) is None:
            raise InvalidArgumentError(
                f"{entity_type.value} does not exist: {entity_id}",
                details={"id": entity_id},
            )
        return self._write(
            entity_type,
            OperationAction.UPDATE,
            {"id": entity_id, **changes},
            lambda store: store.update(entity_type, entity_id, changes),
        )

    def delete(self, entity_type: EntityType, entity_id: str) -> bool:
        if entity_type is EntityType.PROJECT:
            raise InvalidArgumentError("The project row cannot be deleted")
        removed = self._cache.remove_entity(entity_type, entity_id)
        if removed is None:
            raise InvalidArgumentError(
                f"{entity_type.value} does not exist: {entity_id}",
                details={"id": entity_id},
            )

        payload: dict[str, Any] = {"id": entity_id}
        if isinstance(removed, DesignItem) and removed.url.startswith("http"):
            payload["url"] = removed.url

        def remote_delete(store: RemoteStore) -> WriteResult:
            if "url" in payload and self._blobs is not None:
                self._blobs.remove_by_url(MOODBOARD_BUCKET, payload["url"])
            return store.delete(entity_type, entity_id)

        return self._write(entity_type, OperationAction.DELETE, payload, remote_delete)

    # ----------------------------
    # Typed user operations
    # ----------------------------
    def add_expense(self, expense: Expense) -> bool:
        return self.add(EntityType.EXPENSE, expense)

    def update_expense(self, expense_id: str, **changes: Any) -> bool:
        return self.update(EntityType.EXPENSE, expense_id, changes)

    def delete_expense(self, expense_id: str) -> bool:
        return self.delete(EntityType.EXPENSE, expense_id)

    def add_log(self, log: LogEntry) -> bool:
        return self.add(EntityType.LOG, log)

    def update_log(self, log_id: str, **changes: Any) -> bool:
        return self.update(EntityType.LOG, log_id, changes)

    def delete_log(self, log_id: str) -> bool:
        return self.delete(EntityType.LOG, log_id)

    def send_message(self, message: ChatMessage) -> bool:
        return self.add(EntityType.MESSAGE, message)

    def delete_message(self, message_id: str) -> bool:
        return self.delete(EntityType.MESSAGE, message_id)

    def add_milestone(self, milestone: TimelineMilestone) -> bool:
        return self.add(EntityType.MILESTONE, milestone)

    def update_milestone_status(self, milestone_id: str, status: str) -> bool:
        return self.update(EntityType.MILESTONE, milestone_id, {"status": status})

    def delete_milestone(self, milestone_id: str) -> bool:
        return self.delete(EntityType.MILESTONE, milestone_id)

    def delete_design(self, design_id: str) -> bool:
        return self.delete(EntityType.DESIGN, design_id)

    def update_project(
        self,
        *,
        project_name: Optional[str] = None,
        total_budget: Optional[float] = None,
    ) -> bool:
        changes = ProjectChanges(project_name=project_name, total_budget=total_budget)
        fields = changes.to_fields()
        if not fields:
            raise InvalidArgumentError("No project fields to update")

        self._cache.update_project(project_name=project_name, total_budget=total_budget)
        return self._write(
            EntityType.PROJECT,
            OperationAction.UPDATE,
            fields,
            lambda store: store.update_project(project_name=project_name, total_budget=total_budget),
        )

    def add_design(
        self,
        image: bytes,
        filename: str,
        *,
        caption: str,
        author: str,
        content_type: str = "image/jpeg",
    ) -> DesignItem:
        """
        Post a moodboard image.

        Online: upload, then insert the row. Otherwise the image is kept in the
        local snapshot as a data URL and queued as "retry not supported".
        """
        design_id = new_entity_id()
        caption = caption or "Untitled Inspiration"

        url: Optional[str] = None
        if self._can_reach_remote() and self._blobs is not None:
            try:
                url = self._blobs.upload_design_image(image, filename, content_type)
            except HubSyncError as exc:
                self._on_remote_error("upload moodboard image", exc)

        if url is None:
            item = DesignItem(
                id=design_id,
                url=_data_url(image, content_type),
                caption=caption,
                timestamp=now_iso(),
                author=author,
            )
            self._cache.add_entity(EntityType.DESIGN, item)
            payload = item.to_dict()
            payload["url"] = ""
            self._defer_binary(EntityType.DESIGN, payload)
            return item

        item = DesignItem(id=design_id, url=url, caption=caption, timestamp=now_iso(), author=author)
        self._cache.add_entity(EntityType.DESIGN, item)
        self._write(
            EntityType.DESIGN,
            OperationAction.ADD,
            item.to_dict(),
            lambda store: store.add(EntityType.DESIGN, item),
        )
        return item

    def send_voice_note(self, audio: bytes, *, sender: str) -> ChatMessage:
        """
        Send an audio message.

        The message appears at once with no audio_url. When the upload fails
        (or the session is offline) the message is queued as "retry not
        supported", since the audio bytes are not kept in the queue.
        """
        message = ChatMessage(id=new_entity_id(), sender=sender, timestamp=now_iso(), type="audio")
        self._cache.add_entity(EntityType.MESSAGE, message)

        url: Optional[str] = None
        if self._can_reach_remote() and self._blobs is not None:
            try:
                url = self._blobs.upload_voice_note(audio)
            except HubSyncError as exc:
                self._on_remote_error("upload voice note", exc)

        if url is None:
            self._defer_binary(EntityType.MESSAGE, message.to_dict())
            return message

        uploaded = self._cache.update_entity(EntityType.MESSAGE, message.id, {"audio_url": url})
        final = uploaded if isinstance(uploaded, ChatMessage) else message
        self._write(
            EntityType.MESSAGE,
            OperationAction.ADD,
            final.to_dict(),
            lambda store: store.add(EntityType.MESSAGE, final),
        )
        return final

    # ----------------------------
    # Remote change merge
    # ----------------------------
    def apply_remote_change(self, event: ChangeEvent) -> bool:
        """
        Merge one pushed change into the project state.

        Policy:
            - insert: skipped when the id is already present (own echo),
              otherwise inserted at the collection's natural position
              (timeline re-sorted by start date)
            - update: replace by id, insert if missing (last write wins)
            - delete: remove by id

        Returns:
            True if the state changed.
        """
        if event.entity_type is EntityType.PROJECT:
            return self._merge_project(event)

        if event.event_type == "delete":
            entity_id = event.entity_id
            if entity_id is None:
                return False
            return self._cache.remove_entity(event.entity_type, entity_id) is not None

        try:
            entity = entity_from_record(event.entity_type, event.record)
        except (TypeError, ValueError) as exc:
            logger.warning("Ignoring malformed %s change: %s", event.entity_type.value, exc)
            return False

        if event.event_type == "insert":
            if self.state.contains(event.entity_type, entity.id):
                logger.debug("Echo of %s %s suppressed", event.entity_type.value, entity.id)
                return False
            self._cache.add_entity(event.entity_type, entity)
            notice = _INSERT_NOTICES.get(event.entity_type)
            if notice:
                self._notify(notice, "success")
            return True

        self._cache.upsert_entity(event.entity_type, entity)
        return True

    def process_remote_changes(self, timeout: float = 0.0) -> int:
        """Dispatch pending change notifications. Returns the number applied."""
        if self._realtime is None or not self._realtime.connected:
            return 0
        try:
            return self._realtime.poll(timeout)
        except NetworkError as exc:
            logger.warning("Realtime connection lost: %s", exc)
            self.set_connectivity(ConnectivityState.OFFLINE)
            return 0

    # ----------------------------
    # Internals
    # ----------------------------
    def _write(
        self,
        entity_type: EntityType,
        action: OperationAction,
        payload: dict[str, Any],
        remote_call: Callable[[RemoteStore], WriteResult],
    ) -> bool:
        if self._store is None:
            return False

        if self._session.online:
            self._session.syncing = True
            try:
                result = remote_call(self._store)
            except HubSyncError as exc:
                result = WriteResult(ok=False, error=exc)
            finally:
                self._session.syncing = False

            if result.ok:
                self._session.mark_synced()
                return True
            self._on_remote_error(f"{action.value} {entity_type.value}", result.error)

        if self._enqueue(entity_type, action, payload):
            self._notify(SAVED_OFFLINE_MESSAGE, "info")
        return False

    def _defer_binary(self, entity_type: EntityType, payload: dict[str, Any]) -> None:
        if self._store is None:
            return
        if self._enqueue(entity_type, OperationAction.ADD, payload):
            self._notify(RETRY_NOT_SUPPORTED_MESSAGE, "info")

    def _enqueue(
        self,
        entity_type: EntityType,
        action: OperationAction,
        payload: dict[str, Any],
    ) -> bool:
        try:
            self._queue.enqueue(entity_type, action, payload)
        except StorageError as exc:
            # The local change stays applied; only the deferred write is lost.
            logger.warning(
                "Queueing %s %s %s failed: %s",
                action.value,
                entity_type.value,
                payload.get("id"),
                exc,
            )
            self._notify(QUEUE_WRITE_FAILED_MESSAGE, "error")
            return False
        return True

    def _can_reach_remote(self) -> bool:
        return self._store is not None and self._session.online

    def _on_remote_error(self, what: str, exc: Optional[BaseException]) -> None:
        logger.warning("Remote %s failed: %s", what, exc)
        if isinstance(exc, NetworkError):
            self._session.connectivity = ConnectivityState.OFFLINE

    def _on_online(self) -> None:
        result = self.drain()
        if result.succeeded > 0:
            self._notify(f"Synced {result.succeeded} pending changes", "success")

    def _load_remote_project(self) -> None:
        assert self._store is not None
        try:
            state = self._store.load_project()
        except HubSyncError as exc:
            logger.warning("Loading remote project failed: %s", exc)
            self._on_remote_error("load project", exc)
            self._notify(LOAD_FAILED_MESSAGE, "error")
            return

        _overlay_pending(state, self._queue.peek_all(), local=self.state)
        self._cache.replace(state)
        self._session.mark_synced()

    def _open_subscriptions(self) -> None:
        if self._realtime is None or not self._session.online:
            self._session.start()
            return
        handlers = {entity_type: self.apply_remote_change for entity_type in SUBSCRIBED_TYPES}
        try:
            self._realtime.connect()
            self._session.start(self._realtime, handlers)
        except HubSyncError as exc:
            logger.warning("Realtime subscriptions unavailable: %s", exc)
            self._session.start()

    def _reconnect_realtime(self) -> None:
        if self._realtime is None:
            return
        if not self._session.subscriptions:
            self._open_subscriptions()
            return
        if self._realtime.connected:
            return
        try:
            self._realtime.connect()
        except HubSyncError as exc:
            logger.warning("Realtime reconnect failed: %s", exc)

    def _merge_project(self, event: ChangeEvent) -> bool:
        if event.event_type == "delete":
            return False
        record = event.record
        budget = record.get("total_budget")
        self._cache.update_project(
            project_name=record.get("name"),
            total_budget=float(budget) if budget is not None else None,
        )
        return True

    def _notify(self, message: str, level: str) -> None:
        if self._notify_cb is None:
            return
        self._notify_cb(Notice(message=message, level=level))  # type: ignore[arg-type]


def _overlay_pending(
    state: ProjectState,
    pending: list[QueuedOperation],
    *,
    local: ProjectState,
) -> None:
    """
    Re-apply still-queued local writes on top of a freshly loaded snapshot.

    Queued adds prefer the local copy of the entity, which may hold data the
    queue does not (e.g. a moodboard image kept as a data URL).
    """
    for op in pending:
        try:
            payload = decode_payload(op)
        except ValueError:
            continue

        if isinstance(payload, EntityPayload):
            if not state.contains(op.entity_type, payload.entity.id):
                kept = local.find(op.entity_type, payload.entity.id)
                state.insert(op.entity_type, kept if kept is not None else payload.entity)
        elif isinstance(payload, FieldChanges):
            current = state.find(op.entity_type, payload.entity_id)
            if current is not None:
                for name, value in payload.changes.items():
                    setattr(current, name, value)
                if op.entity_type is EntityType.MILESTONE:
                    state.sort_timeline()
        elif isinstance(payload, EntityRef):
            state.remove(op.entity_type, payload.entity_id)
        elif isinstance(payload, ProjectChanges):
            if payload.project_name is not None:
                state.project_name = payload.project_name
            if payload.total_budget is not None:
                state.total_budget = float(payload.total_budget)


def _data_url(data: bytes, content_type: str) -> str:
    return f"data:{content_type};base64,{base64.b64encode(data).decode('ascii')}"
