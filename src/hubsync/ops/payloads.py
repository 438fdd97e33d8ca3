"""Typed payload variants for queued operations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from hubsync.models import Entity, EntityType, entity_from_dict

from .actions import OperationAction
from .operation import PROJECT_FIELDS, QueuedOperation


@dataclass(slots=True, frozen=True)
class EntityPayload:
    """Full entity for an add."""

    entity: Entity


@dataclass(slots=True, frozen=True)
class FieldChanges:
    """Identifier plus changed fields for an update."""

    entity_id: str
    changes: dict[str, Any]


@dataclass(slots=True, frozen=True)
class EntityRef:
    """Identifier for a delete. `url` is set for moodboard items (blob cleanup)."""

    entity_id: str
    url: Optional[str] = None


@dataclass(slots=True, frozen=True)
class ProjectChanges:
    project_name: Optional[str] = None
    total_budget: Optional[float] = None

    def to_fields(self) -> dict[str, Any]:
        return {
            k: v
            for k, v in (("project_name", self.project_name), ("total_budget", self.total_budget))
            if v is not None
        }


Payload = Union[EntityPayload, FieldChanges, EntityRef, ProjectChanges]


def decode_payload(op: QueuedOperation) -> Payload:
    """
    Decode op.payload into the variant matching its entity_type/action.

    Raises:
        ValueError: if the payload is malformed for its action.
    """
    op.validate_required_fields()

    if op.entity_type is EntityType.PROJECT:
        fields = {k: op.payload.get(k) for k in PROJECT_FIELDS}
        return ProjectChanges(**fields)

    if op.action is OperationAction.ADD:
        return EntityPayload(entity=entity_from_dict(op.entity_type, op.payload))

    if op.action is OperationAction.UPDATE:
        changes = {k: v for k, v in op.payload.items() if k != "id"}
        return FieldChanges(entity_id=op.payload["id"], changes=changes)

    if op.action is OperationAction.DELETE:
        return EntityRef(entity_id=op.payload["id"], url=op.payload.get("url"))

    raise ValueError(f"Unsupported action: {op.action}")


def encode_payload(payload: Payload) -> dict[str, Any]:
    """Inverse of decode_payload: the JSON-safe dict stored in the queue."""
    if isinstance(payload, EntityPayload):
        return payload.entity.to_dict()
    if isinstance(payload, FieldChanges):
        return {"id": payload.entity_id, **payload.changes}
    if isinstance(payload, EntityRef):
        data: dict[str, Any] = {"id": payload.entity_id}
        if payload.url:
            data["url"] = payload.url
        return data
    if isinstance(payload, ProjectChanges):
        return payload.to_fields()
    raise TypeError(f"Unknown payload type: {type(payload).__name__}")
