"""Table, column and bucket names on the remote store."""

from __future__ import annotations

from typing import Any

from hubsync.models import EntityType

DEFAULT_PROJECT_ID: str = "default-project"

TABLES: dict[EntityType, str] = {
    EntityType.EXPENSE: "expenses",
    EntityType.LOG: "site_logs",
    EntityType.DESIGN: "moodboard",
    EntityType.MESSAGE: "chat_messages",
    EntityType.MILESTONE: "timeline",
    EntityType.PROJECT: "projects",
}

# PostgREST `order` values matching ProjectState collection ordering.
ORDERING: dict[EntityType, str] = {
    EntityType.EXPENSE: "date.desc",
    EntityType.LOG: "timestamp.desc",
    EntityType.DESIGN: "timestamp.desc",
    EntityType.MESSAGE: "timestamp.asc",
    EntityType.MILESTONE: "start_date.asc",
}

# Entity field -> column, where they differ.
_COLUMN_RENAMES: dict[EntityType, dict[str, str]] = {
    EntityType.DESIGN: {"url": "image_url"},
    EntityType.PROJECT: {"project_name": "name"},
}

MOODBOARD_BUCKET: str = "moodboard-images"
VOICE_NOTES_BUCKET: str = "voice-notes"


def table_for(entity_type: EntityType) -> str:
    return TABLES[entity_type]


def to_columns(entity_type: EntityType, changes: dict[str, Any]) -> dict[str, Any]:
    """Rename entity fields to remote column names."""
    renames = _COLUMN_RENAMES.get(entity_type, {})
    return {renames.get(k, k): v for k, v in changes.items()}
