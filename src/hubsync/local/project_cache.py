"""ProjectStateCache: the single place ProjectState is mutated and persisted."""

from __future__ import annotations

import dataclasses
import json
import logging
from typing import Any, Optional

from hubsync.errors import InvalidArgumentError, StorageError
from hubsync.models import Entity, EntityType, ProjectState

from .storage import KeyValueStore

logger = logging.getLogger(__name__)

SNAPSHOT_KEY = "design_budget_hub_shared_v5"


class ProjectStateCache:
    """
    In-memory ProjectState plus a whole-snapshot copy in local storage.

    Every mutation overwrites the stored snapshot, so a new session can
    rehydrate the last known state even while offline. The snapshot is a
    resilience cache, not a queue: a failed write is logged, not raised.
    """

    def __init__(self, storage: KeyValueStore, *, key: str = SNAPSHOT_KEY) -> None:
        self._storage = storage
        self._key = key
        self._state = ProjectState()

    @property
    def state(self) -> ProjectState:
        return self._state

    # ----------------------------
    # Load / replace
    # ----------------------------
    def has_snapshot(self) -> bool:
        return bool(self._storage.get(self._key))

    def load(self) -> ProjectState:
        """Rehydrate from local storage. Missing or unreadable -> defaults."""
        raw = self._storage.get(self._key)
        if not raw:
            self._state = ProjectState()
            return self._state
        try:
            self._state = ProjectState.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as exc:
            logger.error("Ignoring unreadable project snapshot: %s", exc)
            self._state = ProjectState()
        return self._state

    def replace(self, state: ProjectState) -> None:
        self._state = state
        self.persist()

    # ----------------------------
    # Mutations
    # ----------------------------
    def add_entity(self, entity_type: EntityType, entity: Entity) -> None:
        self._state.insert(entity_type, entity)
        self.persist()

    def upsert_entity(self, entity_type: EntityType, entity: Entity) -> bool:
        """Replace by id, or insert when absent. Returns True if it was inserted."""
        if self._state.replace(entity_type, entity):
            self.persist()
            return False
        self._state.insert(entity_type, entity)
        self.persist()
        return True

    def update_entity(
        self,
        entity_type: EntityType,
        entity_id: str,
        changes: dict[str, Any],
    ) -> Optional[Entity]:
        """
        Apply changed fields to an entity (last write wins).

        Returns:
            The updated entity, or None if no entity has entity_id.

        Raises:
            InvalidArgumentError: if changes names unknown fields or the id.
        """
        current = self._state.find(entity_type, entity_id)
        if current is None:
            return None

        names = {f.name for f in dataclasses.fields(current)}
        unknown = set(changes) - names
        if unknown or "id" in changes:
            raise InvalidArgumentError(
                "Invalid fields for update",
                details={"entity_type": entity_type.value, "fields": sorted(unknown | ({"id"} & set(changes)))},
            )

        try:
            updated = dataclasses.replace(current, **changes)
        except ValueError as exc:
            raise InvalidArgumentError(str(exc), cause=exc) from exc

        self._state.replace(entity_type, updated)
        self.persist()
        return updated

    def remove_entity(self, entity_type: EntityType, entity_id: str) -> Optional[Entity]:
        current = self._state.find(entity_type, entity_id)
        if current is None:
            return None
        self._state.remove(entity_type, entity_id)
        self.persist()
        return current

    def update_project(
        self,
        *,
        project_name: Optional[str] = None,
        total_budget: Optional[float] = None,
    ) -> None:
        if project_name is not None:
            self._state.project_name = project_name
        if total_budget is not None:
            self._state.total_budget = float(total_budget)
        self.persist()

    # ----------------------------
    # Persistence
    # ----------------------------
    def persist(self) -> None:
        try:
            self._storage.set(self._key, json.dumps(self._state.to_dict()))
        except StorageError as exc:
            logger.error("Failed to persist project snapshot: %s", exc)
