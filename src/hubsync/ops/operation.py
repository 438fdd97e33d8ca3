"""QueuedOperation: one deferred write, durable across restarts."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from hubsync.models import EntityType
from hubsync.util.time import parse_rfc3339, to_rfc3339

from .actions import OperationAction

PROJECT_FIELDS: tuple[str, ...] = ("project_name", "total_budget")


@dataclass(slots=True)
class QueuedOperation:
    """
    A write that could not reach the remote store.

    Payload shape depends on action:
        - add: the full entity dict (including its client-generated id)
        - update: {"id": ..., <changed fields>}; project updates carry only
          project_name / total_budget
        - delete: {"id": ...} (design deletes may add "url")
    """

    op_id: str
    entity_type: EntityType
    action: OperationAction
    payload: dict[str, Any]
    enqueued_at: datetime

    @property
    def entity_id(self) -> str | None:
        value = self.payload.get("id")
        return value if isinstance(value, str) else None

    def is_binary_upload(self) -> bool:
        """
        True for adds whose content lives in a blob that is not kept in the queue.

        Moodboard images and voice notes need one until the blob has been
        stored and its public URL (url / audio_url) is known.
        """
        if self.action is not OperationAction.ADD:
            return False
        if self.entity_type is EntityType.DESIGN:
            return not _is_uploaded_url(self.payload.get("url"))
        if self.entity_type is EntityType.MESSAGE:
            return self.payload.get("type") == "audio" and not self.payload.get("audio_url")
        return False

    def validate_required_fields(self) -> None:
        """Validate payload fields according to entity_type/action. Raises ValueError."""
        if self.entity_type is EntityType.PROJECT:
            if self.action is not OperationAction.UPDATE:
                raise ValueError(f"Unsupported project action: {self.action.value}")
            if not any(self.payload.get(k) is not None for k in PROJECT_FIELDS):
                raise ValueError("Project update requires project_name or total_budget")
            return

        _require(self.payload.get("id"), "id")

        if self.action is OperationAction.UPDATE:
            if not [k for k in self.payload if k != "id"]:
                raise ValueError("Update requires at least one changed field")

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.op_id,
            "entity_type": self.entity_type.value,
            "action": self.action.value,
            "payload": self.payload,
            "enqueued_at": to_rfc3339(self.enqueued_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> QueuedOperation:
        return cls(
            op_id=data["id"],
            entity_type=EntityType(data["entity_type"]),
            action=OperationAction(data["action"]),
            payload=dict(data.get("payload") or {}),
            enqueued_at=parse_rfc3339(data["enqueued_at"]),
        )


def _is_uploaded_url(value: object) -> bool:
    return isinstance(value, str) and value.startswith(("http://", "https://"))


def _require(value: object, field_name: str) -> None:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValueError(f"Missing required field: {field_name}")
