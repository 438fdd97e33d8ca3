"""Entity models for a project's collections."""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Optional, TypeVar, Union


class EntityType(str, Enum):
    """Kinds of records the project tracks."""

    EXPENSE = "expense"
    LOG = "log"
    MESSAGE = "message"
    DESIGN = "design"
    MILESTONE = "milestone"
    PROJECT = "project"


LOG_TYPES: tuple[str, ...] = ("update", "plan", "issue")
MESSAGE_TYPES: tuple[str, ...] = ("text", "audio")
MILESTONE_STATUSES: tuple[str, ...] = ("planned", "in-progress", "delayed", "completed")

E = TypeVar("E", bound="_EntityBase")


class _EntityBase:
    """Shared (de)serialization for entity dataclasses."""

    __slots__ = ()

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the local snapshot (field names as keys)."""
        return {f.name: getattr(self, f.name) for f in fields(self)}  # type: ignore[arg-type]

    @classmethod
    def from_dict(cls: type[E], data: dict[str, Any]) -> E:
        names = {f.name for f in fields(cls)}  # type: ignore[arg-type]
        return cls(**{k: v for k, v in data.items() if k in names})

    def to_record(self, project_id: str) -> dict[str, Any]:
        """Serialize as a remote row scoped to project_id."""
        record = self.to_dict()
        record["project_id"] = project_id
        return record

    @classmethod
    def from_record(cls: type[E], row: dict[str, Any]) -> E:
        return cls.from_dict(row)


@dataclass(slots=True)
class Expense(_EntityBase):
    id: str
    name: str
    amount: float
    category: str
    date: str
    author: str
    notes: Optional[str] = None


@dataclass(slots=True)
class LogEntry(_EntityBase):
    id: str
    author: str
    timestamp: str
    content: str
    type: str = "update"

    def __post_init__(self) -> None:
        if self.type not in LOG_TYPES:
            raise ValueError(f"LogEntry.type must be one of {LOG_TYPES}: {self.type!r}")


@dataclass(slots=True)
class DesignItem(_EntityBase):
    """
    A moodboard item.

    Notes:
        - The remote column is `image_url`; older rows may carry `url`.
    """

    id: str
    url: str
    caption: str
    timestamp: str
    author: str

    def to_record(self, project_id: str) -> dict[str, Any]:
        record = self.to_dict()
        record["image_url"] = record.pop("url")
        record["project_id"] = project_id
        return record

    @classmethod
    def from_record(cls, row: dict[str, Any]) -> DesignItem:
        data = dict(row)
        data["url"] = row.get("image_url") or row.get("url") or ""
        return cls.from_dict(data)


@dataclass(slots=True)
class ChatMessage(_EntityBase):
    id: str
    sender: str
    timestamp: str
    type: str = "text"
    text: Optional[str] = None
    audio_url: Optional[str] = None

    def __post_init__(self) -> None:
        if self.type not in MESSAGE_TYPES:
            raise ValueError(f"ChatMessage.type must be one of {MESSAGE_TYPES}: {self.type!r}")


@dataclass(slots=True)
class TimelineMilestone(_EntityBase):
    id: str
    title: str
    start_date: str
    end_date: str
    status: str = "planned"
    description: Optional[str] = None

    def __post_init__(self) -> None:
        if self.status not in MILESTONE_STATUSES:
            raise ValueError(
                f"TimelineMilestone.status must be one of {MILESTONE_STATUSES}: {self.status!r}"
            )


Entity = Union[Expense, LogEntry, DesignItem, ChatMessage, TimelineMilestone]

ENTITY_CLASSES: dict[EntityType, type] = {
    EntityType.EXPENSE: Expense,
    EntityType.LOG: LogEntry,
    EntityType.DESIGN: DesignItem,
    EntityType.MESSAGE: ChatMessage,
    EntityType.MILESTONE: TimelineMilestone,
}


def entity_from_dict(entity_type: EntityType, data: dict[str, Any]) -> Entity:
    """Build the entity class for entity_type from a snapshot/queue dict."""
    cls = ENTITY_CLASSES.get(entity_type)
    if cls is None:
        raise ValueError(f"No entity class for {entity_type.value}")
    return cls.from_dict(data)


def entity_from_record(entity_type: EntityType, row: dict[str, Any]) -> Entity:
    """Build the entity class for entity_type from a remote row."""
    cls = ENTITY_CLASSES.get(entity_type)
    if cls is None:
        raise ValueError(f"No entity class for {entity_type.value}")
    return cls.from_record(row)
