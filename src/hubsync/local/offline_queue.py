"""OfflineQueue: durable FIFO of writes waiting for the remote store."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Union

from hubsync.errors import InvalidArgumentError, StorageError
from hubsync.models import DrainResult, EntityType, OperationResult
from hubsync.ops import OperationAction, QueuedOperation
from hubsync.util.ids import new_op_id
from hubsync.util.time import now_utc

from .storage import KeyValueStore

logger = logging.getLogger(__name__)

QUEUE_KEY = "designhub_offline_queue"

Replay = Callable[[QueuedOperation], Union[OperationResult, bool]]


class OfflineQueue:
    """
    Pending write operations, persisted as one JSON array slot.

    Notes:
        - No size bound.
        - drain() replays a snapshot of the queue in FIFO order. Operations
          enqueued while a drain runs are kept for the next drain.
        - The caller must not run two drains at once; a nested call is
          refused and returns an empty result.
    """

    def __init__(self, storage: KeyValueStore, *, key: str = QUEUE_KEY) -> None:
        self._storage = storage
        self._key = key
        self._draining = False

    def __len__(self) -> int:
        return len(self._load())

    @property
    def is_draining(self) -> bool:
        return self._draining

    def enqueue(
        self,
        entity_type: EntityType,
        action: OperationAction,
        payload: dict[str, Any],
    ) -> QueuedOperation:
        """
        Append an operation with a fresh id and timestamp.

        Raises:
            InvalidArgumentError: if payload lacks fields required to replay it.
            StorageError: if the queue slot cannot be written.
        """
        op = QueuedOperation(
            op_id=new_op_id(),
            entity_type=entity_type,
            action=action,
            payload=dict(payload),
            enqueued_at=now_utc(),
        )
        try:
            op.validate_required_fields()
        except ValueError as exc:
            raise InvalidArgumentError(
                "Invalid queued operation",
                details={"entity_type": entity_type.value, "action": action.value},
                cause=exc,
            ) from exc

        ops = self._load()
        ops.append(op)
        self._save(ops)
        logger.debug("Queued %s %s (%s)", action.value, entity_type.value, op.op_id)
        return op

    def peek_all(self) -> list[QueuedOperation]:
        """Return queued operations in FIFO order without changing the queue."""
        return self._load()

    def clear(self) -> None:
        self._storage.delete(self._key)

    def drain(self, replay: Replay) -> DrainResult:
        """
        Replay every queued operation once, in order.

        An operation leaves the queue iff replay reports success. Never raises:
        a replay that raises counts as failed.
        """
        if self._draining:
            logger.warning("drain() called while a drain is in flight; ignored")
            return DrainResult()

        self._draining = True
        try:
            return self._drain(replay)
        finally:
            self._draining = False

    # ----------------------------
    # Internals
    # ----------------------------
    def _drain(self, replay: Replay) -> DrainResult:
        snapshot = self._load()
        result = DrainResult()
        if not snapshot:
            return result

        remaining: list[QueuedOperation] = []
        for op in snapshot:
            outcome = _run_replay(replay, op)
            result.results.append(outcome)
            if outcome.succeeded:
                result.succeeded += 1
            else:
                result.failed += 1
                remaining.append(op)

        drained_ids = {op.op_id for op in snapshot}
        added = [op for op in self._load() if op.op_id not in drained_ids]

        try:
            self._save(remaining + added)
        except StorageError as exc:
            # Replayed operations stay stored and replay again next time.
            logger.error("Failed to persist queue after drain: %s", exc)

        logger.info(
            "Drained offline queue: %d succeeded, %d failed",
            result.succeeded,
            result.failed,
        )
        return result

    def _load(self) -> list[QueuedOperation]:
        raw = self._storage.get(self._key)
        if not raw:
            return []
        try:
            items = json.loads(raw)
            return [QueuedOperation.from_dict(item) for item in items]
        except (ValueError, KeyError, TypeError) as exc:
            logger.error("Discarding unreadable offline queue: %s", exc)
            return []

    def _save(self, ops: list[QueuedOperation]) -> None:
        if not ops:
            self._storage.delete(self._key)
            return
        self._storage.set(self._key, json.dumps([op.to_dict() for op in ops]))


def _run_replay(replay: Replay, op: QueuedOperation) -> OperationResult:
    try:
        outcome = replay(op)
    except Exception as exc:
        logger.warning("Replay of %s raised %s: %s", op.op_id, exc.__class__.__name__, exc)
        return OperationResult(
            op_id=op.op_id,
            entity_type=op.entity_type.value,
            action=op.action.value,
            status="failed",
            error_type=exc.__class__.__name__,
            error_message=str(exc),
        )

    if isinstance(outcome, bool):
        return OperationResult(
            op_id=op.op_id,
            entity_type=op.entity_type.value,
            action=op.action.value,
            status="success" if outcome else "failed",
        )
    return outcome
