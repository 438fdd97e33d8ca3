"""Replay of queued operations against the remote store."""

from __future__ import annotations

import logging
from typing import Any, Optional

from hubsync.errors import ConflictError, HubSyncError, ReplayNotSupportedError
from hubsync.models import EntityType, OperationResult, WriteResult
from hubsync.remote.tables import MOODBOARD_BUCKET

from .actions import OperationAction
from .operation import QueuedOperation
from .payloads import EntityPayload, EntityRef, FieldChanges, Payload, ProjectChanges, decode_payload

logger = logging.getLogger(__name__)

RETRY_NOT_SUPPORTED_MESSAGE = "Upload kept on this device only; add it again once online"

# (entity_type, action) pairs with a replay handler. Anything else stays queued.
REPLAYABLE: frozenset[tuple[EntityType, OperationAction]] = frozenset(
    {
        (EntityType.EXPENSE, OperationAction.ADD),
        (EntityType.EXPENSE, OperationAction.UPDATE),
        (EntityType.EXPENSE, OperationAction.DELETE),
        (EntityType.LOG, OperationAction.ADD),
        (EntityType.LOG, OperationAction.UPDATE),
        (EntityType.LOG, OperationAction.DELETE),
        (EntityType.MESSAGE, OperationAction.ADD),
        (EntityType.MESSAGE, OperationAction.DELETE),
        (EntityType.DESIGN, OperationAction.ADD),
        (EntityType.DESIGN, OperationAction.DELETE),
        (EntityType.MILESTONE, OperationAction.ADD),
        (EntityType.MILESTONE, OperationAction.UPDATE),
        (EntityType.MILESTONE, OperationAction.DELETE),
        (EntityType.PROJECT, OperationAction.UPDATE),
    }
)


def is_replayable(op: QueuedOperation) -> bool:
    """True if op can be replayed from its queued payload alone."""
    if op.is_binary_upload():
        return False
    return (op.entity_type, op.action) in REPLAYABLE


class OperationReplayer:
    """
    Replays one QueuedOperation through the RemoteStore.

    Policy:
        - Never raises: every outcome becomes an OperationResult.
        - Binary uploads and pairs without a handler -> "unsupported".
        - ConflictError on an add -> success (the client-generated id is
          already stored remotely).
    """

    def __init__(self, store: Any, *, blobs: Optional[Any] = None) -> None:
        self._store = store
        self._blobs = blobs

    def __call__(self, op: QueuedOperation) -> OperationResult:
        return self.replay(op)

    def replay(self, op: QueuedOperation) -> OperationResult:
        if not is_replayable(op):
            exc = ReplayNotSupportedError(
                RETRY_NOT_SUPPORTED_MESSAGE
                if op.is_binary_upload()
                else f"No replay handler for {op.entity_type.value}/{op.action.value}",
                details={"op_id": op.op_id},
            )
            return _result(op, "unsupported", exc)

        try:
            payload = decode_payload(op)
        except ValueError as exc:
            return _result(op, "failed", exc)

        try:
            write = self._dispatch(op, payload)
        except HubSyncError as exc:
            write = WriteResult(ok=False, error=exc)

        if write.ok:
            return _result(op, "success")

        if op.action is OperationAction.ADD and isinstance(write.error, ConflictError):
            logger.info("Queued add %s already present remotely", op.op_id)
            return _result(op, "success")

        return _result(op, "failed", write.error)

    def _dispatch(self, op: QueuedOperation, payload: Payload) -> WriteResult:
        if isinstance(payload, EntityPayload):
            return self._store.add(op.entity_type, payload.entity)

        if isinstance(payload, FieldChanges):
            return self._store.update(op.entity_type, payload.entity_id, payload.changes)

        if isinstance(payload, EntityRef):
            if op.entity_type is EntityType.DESIGN and payload.url and self._blobs is not None:
                self._blobs.remove_by_url(MOODBOARD_BUCKET, payload.url)
            return self._store.delete(op.entity_type, payload.entity_id)

        if isinstance(payload, ProjectChanges):
            return self._store.update_project(
                project_name=payload.project_name,
                total_budget=payload.total_budget,
            )

        raise ReplayNotSupportedError("Unknown payload", details={"op_id": op.op_id})


def _result(
    op: QueuedOperation,
    status: str,
    exc: Optional[BaseException] = None,
) -> OperationResult:
    return OperationResult(
        op_id=op.op_id,
        entity_type=op.entity_type.value,
        action=op.action.value,
        status=status,  # type: ignore[arg-type]
        error_type=exc.__class__.__name__ if exc is not None else None,
        error_message=str(exc) if exc is not None else None,
        error_details=getattr(exc, "details", None) if exc is not None else None,
    )
