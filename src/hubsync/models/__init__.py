"""Public model exports for hubsync."""

from __future__ import annotations

from .entities import (
    ENTITY_CLASSES,
    ChatMessage,
    DesignItem,
    Entity,
    EntityType,
    Expense,
    LogEntry,
    TimelineMilestone,
    entity_from_dict,
    entity_from_record,
)
from .project_state import COLLECTION_ATTRS, ProjectState
from .results import DrainResult, OperationResult, OperationStatus, WriteResult
from .status import ConnectivityState, Notice, NoticeLevel, StatusSnapshot, SyncStatus

__all__ = [
    "EntityType",
    "Entity",
    "Expense",
    "LogEntry",
    "DesignItem",
    "ChatMessage",
    "TimelineMilestone",
    "ENTITY_CLASSES",
    "COLLECTION_ATTRS",
    "entity_from_dict",
    "entity_from_record",
    "ProjectState",
    "OperationStatus",
    "OperationResult",
    "DrainResult",
    "WriteResult",
    "ConnectivityState",
    "SyncStatus",
    "StatusSnapshot",
    "Notice",
    "NoticeLevel",
]
