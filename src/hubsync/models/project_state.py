"""ProjectState: the full in-memory snapshot of one project."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .entities import (
    ChatMessage,
    DesignItem,
    Entity,
    EntityType,
    Expense,
    LogEntry,
    TimelineMilestone,
    entity_from_dict,
)

DEFAULT_PROJECT_NAME = "Modern Loft Project"
DEFAULT_TOTAL_BUDGET = 50000.0

COLLECTION_ATTRS: dict[EntityType, str] = {
    EntityType.EXPENSE: "expenses",
    EntityType.LOG: "logs",
    EntityType.DESIGN: "designs",
    EntityType.MESSAGE: "messages",
    EntityType.MILESTONE: "timeline",
}

# Collections displayed newest first; new entities go to the front.
_NEWEST_FIRST: set[EntityType] = {EntityType.EXPENSE, EntityType.LOG, EntityType.DESIGN}


@dataclass(slots=True)
class ProjectState:
    """
    Budget fields plus five ordered collections.

    Ordering:
        - expenses, logs, designs: newest first
        - messages: chronological (oldest first)
        - timeline: by start_date ascending
    """

    project_name: str = DEFAULT_PROJECT_NAME
    total_budget: float = DEFAULT_TOTAL_BUDGET
    expenses: list[Expense] = field(default_factory=list)
    logs: list[LogEntry] = field(default_factory=list)
    designs: list[DesignItem] = field(default_factory=list)
    messages: list[ChatMessage] = field(default_factory=list)
    timeline: list[TimelineMilestone] = field(default_factory=list)

    # ----------------------------
    # Query helpers
    # ----------------------------
    def collection(self, entity_type: EntityType) -> list[Any]:
        attr = COLLECTION_ATTRS.get(entity_type)
        if attr is None:
            raise ValueError(f"{entity_type.value} has no collection")
        return getattr(self, attr)

    def find(self, entity_type: EntityType, entity_id: str) -> Optional[Entity]:
        for entity in self.collection(entity_type):
            if entity.id == entity_id:
                return entity
        return None

    def contains(self, entity_type: EntityType, entity_id: str) -> bool:
        return self.find(entity_type, entity_id) is not None

    def total_spent(self) -> float:
        return sum(e.amount for e in self.expenses)

    def remaining_budget(self) -> float:
        return self.total_budget - self.total_spent()

    # ----------------------------
    # Mutation helpers (keep collection ordering)
    # ----------------------------
    def insert(self, entity_type: EntityType, entity: Entity) -> None:
        """Insert at the collection's natural position. Does not deduplicate."""
        items = self.collection(entity_type)
        if entity_type in _NEWEST_FIRST:
            items.insert(0, entity)
        else:
            items.append(entity)
        if entity_type is EntityType.MILESTONE:
            self.sort_timeline()

    def replace(self, entity_type: EntityType, entity: Entity) -> bool:
        """Replace the entity with the same id. Returns False if absent."""
        items = self.collection(entity_type)
        for i, current in enumerate(items):
            if current.id == entity.id:
                items[i] = entity
                if entity_type is EntityType.MILESTONE:
                    self.sort_timeline()
                return True
        return False

    def remove(self, entity_type: EntityType, entity_id: str) -> bool:
        items = self.collection(entity_type)
        for i, current in enumerate(items):
            if current.id == entity_id:
                del items[i]
                return True
        return False

    def sort_timeline(self) -> None:
        # Stable sort: equal start dates keep arrival order.
        self.timeline.sort(key=lambda m: m.start_date)

    # ----------------------------
    # Serialization
    # ----------------------------
    def to_dict(self) -> dict[str, Any]:
        return {
            "project_name": self.project_name,
            "total_budget": self.total_budget,
            "expenses": [e.to_dict() for e in self.expenses],
            "logs": [e.to_dict() for e in self.logs],
            "designs": [e.to_dict() for e in self.designs],
            "messages": [e.to_dict() for e in self.messages],
            "timeline": [e.to_dict() for e in self.timeline],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProjectState:
        state = cls(
            project_name=data.get("project_name", DEFAULT_PROJECT_NAME),
            total_budget=data.get("total_budget", DEFAULT_TOTAL_BUDGET),
        )
        for entity_type, attr in COLLECTION_ATTRS.items():
            items = data.get(attr) or []
            setattr(state, attr, [entity_from_dict(entity_type, item) for item in items])
        return state
