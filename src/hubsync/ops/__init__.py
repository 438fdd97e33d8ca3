"""Public queued-operation exports for hubsync."""

from __future__ import annotations

from .actions import OperationAction
from .operation import QueuedOperation
from .payloads import (
    EntityPayload,
    EntityRef,
    FieldChanges,
    Payload,
    ProjectChanges,
    decode_payload,
    encode_payload,
)
from .replay import (
    REPLAYABLE,
    RETRY_NOT_SUPPORTED_MESSAGE,
    OperationReplayer,
    is_replayable,
)

__all__ = [
    "OperationAction",
    "QueuedOperation",
    "Payload",
    "EntityPayload",
    "FieldChanges",
    "EntityRef",
    "ProjectChanges",
    "decode_payload",
    "encode_payload",
    "REPLAYABLE",
    "RETRY_NOT_SUPPORTED_MESSAGE",
    "OperationReplayer",
    "is_replayable",
]
