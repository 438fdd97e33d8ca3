"""RemoteStore: create/read/update/delete against the managed database."""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from hubsync.errors import HubSyncError, InvalidArgumentError
from hubsync.models import (
    ChatMessage,
    DesignItem,
    Entity,
    EntityType,
    Expense,
    LogEntry,
    ProjectState,
    TimelineMilestone,
    WriteResult,
    entity_from_record,
)
from hubsync.models.project_state import DEFAULT_PROJECT_NAME, DEFAULT_TOTAL_BUDGET

from .config import RemoteConfig
from .http import HttpClient
from .tables import ORDERING, TABLES, table_for, to_columns

logger = logging.getLogger(__name__)


class RemoteStore:
    """
    PostgREST adapter, every row scoped to config.project_id.

    Reads raise hubsync errors. Writes return WriteResult so a batch replay
    can continue past one bad record. No retry and no buffering here.
    """

    def __init__(
        self,
        config: RemoteConfig,
        *,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._http = HttpClient(config, session=session)
        self._config = config

    @classmethod
    def from_session(cls, config: RemoteConfig, session: Any) -> "RemoteStore":
        """Create a store over a pre-built session (useful for tests)."""
        return cls(config, session=session)

    @property
    def project_id(self) -> str:
        return self._config.project_id

    def close(self) -> None:
        self._http.close()

    # ----------------------------
    # Reads
    # ----------------------------
    def select(self, entity_type: EntityType) -> list[dict[str, Any]]:
        """Return rows of entity_type for the project, in display order."""
        params: dict[str, Any] = {"select": "*", "project_id": f"eq.{self.project_id}"}
        order = ORDERING.get(entity_type)
        if order:
            params["order"] = order

        resp = self._http.request("GET", self._table_url(entity_type), params=params)
        rows = resp.json()
        return rows if isinstance(rows, list) else []

    def list_entities(self, entity_type: EntityType) -> list[Entity]:
        return [entity_from_record(entity_type, row) for row in self.select(entity_type)]

    def get_project_row(self) -> Optional[dict[str, Any]]:
        resp = self._http.request(
            "GET",
            self._table_url(EntityType.PROJECT),
            params={"select": "*", "id": f"eq.{self.project_id}"},
        )
        rows = resp.json()
        if isinstance(rows, list) and rows:
            return rows[0]
        return None

    def load_project(self) -> ProjectState:
        """
        Load the full project.

        Creates the default project row when it does not exist yet.
        """
        row = self.get_project_row()
        if row is None:
            logger.info("Project %s not found remotely; creating it", self.project_id)
            self._http.request(
                "POST",
                self._table_url(EntityType.PROJECT),
                json={
                    "id": self.project_id,
                    "name": DEFAULT_PROJECT_NAME,
                    "total_budget": DEFAULT_TOTAL_BUDGET,
                },
                headers={"Prefer": "return=minimal"},
            )
            return ProjectState()

        budget = row.get("total_budget")
        return ProjectState(
            project_name=row.get("name") or DEFAULT_PROJECT_NAME,
            total_budget=float(budget) if budget is not None else DEFAULT_TOTAL_BUDGET,
            expenses=self.get_expenses(),
            logs=self.get_logs(),
            designs=self.get_designs(),
            messages=self.get_messages(),
            timeline=self.get_timeline(),
        )

    def get_expenses(self) -> list[Expense]:
        return self.list_entities(EntityType.EXPENSE)  # type: ignore[return-value]

    def get_logs(self) -> list[LogEntry]:
        return self.list_entities(EntityType.LOG)  # type: ignore[return-value]

    def get_designs(self) -> list[DesignItem]:
        return self.list_entities(EntityType.DESIGN)  # type: ignore[return-value]

    def get_messages(self) -> list[ChatMessage]:
        return self.list_entities(EntityType.MESSAGE)  # type: ignore[return-value]

    def get_timeline(self) -> list[TimelineMilestone]:
        return self.list_entities(EntityType.MILESTONE)  # type: ignore[return-value]

    # ----------------------------
    # Writes (result-returning)
    # ----------------------------
    def add(self, entity_type: EntityType, entity: Entity) -> WriteResult:
        return self._write(
            "POST",
            entity_type,
            json=entity.to_record(self.project_id),
            context={"id": entity.id},
        )

    def update(
        self,
        entity_type: EntityType,
        entity_id: str,
        changes: dict[str, Any],
    ) -> WriteResult:
        if entity_type is EntityType.PROJECT:
            return self.update_project(**changes)
        return self._write(
            "PATCH",
            entity_type,
            params=self._row_filter(entity_id),
            json=to_columns(entity_type, changes),
            context={"id": entity_id},
        )

    def delete(self, entity_type: EntityType, entity_id: str) -> WriteResult:
        return self._write(
            "DELETE",
            entity_type,
            params=self._row_filter(entity_id),
            context={"id": entity_id},
        )

    def update_project(
        self,
        *,
        project_name: Optional[str] = None,
        total_budget: Optional[float] = None,
    ) -> WriteResult:
        changes = {
            k: v
            for k, v in (("project_name", project_name), ("total_budget", total_budget))
            if v is not None
        }
        if not changes:
            return WriteResult(ok=False, error=InvalidArgumentError("No project fields to update"))
        return self._write(
            "PATCH",
            EntityType.PROJECT,
            params={"id": f"eq.{self.project_id}"},
            json=to_columns(EntityType.PROJECT, changes),
            context=changes,
        )

    # Per-entity conveniences.
    def add_expense(self, expense: Expense) -> WriteResult:
        return self.add(EntityType.EXPENSE, expense)

    def update_expense(self, expense_id: str, changes: dict[str, Any]) -> WriteResult:
        return self.update(EntityType.EXPENSE, expense_id, changes)

    def delete_expense(self, expense_id: str) -> WriteResult:
        return self.delete(EntityType.EXPENSE, expense_id)

    def add_log(self, log: LogEntry) -> WriteResult:
        return self.add(EntityType.LOG, log)

    def update_log(self, log_id: str, changes: dict[str, Any]) -> WriteResult:
        return self.update(EntityType.LOG, log_id, changes)

    def delete_log(self, log_id: str) -> WriteResult:
        return self.delete(EntityType.LOG, log_id)

    def add_message(self, message: ChatMessage) -> WriteResult:
        return self.add(EntityType.MESSAGE, message)

    def delete_message(self, message_id: str) -> WriteResult:
        return self.delete(EntityType.MESSAGE, message_id)

    def add_design(self, design: DesignItem) -> WriteResult:
        return self.add(EntityType.DESIGN, design)

    def delete_design(self, design_id: str) -> WriteResult:
        return self.delete(EntityType.DESIGN, design_id)

    def add_milestone(self, milestone: TimelineMilestone) -> WriteResult:
        return self.add(EntityType.MILESTONE, milestone)

    def update_milestone(self, milestone_id: str, changes: dict[str, Any]) -> WriteResult:
        return self.update(EntityType.MILESTONE, milestone_id, changes)

    def delete_milestone(self, milestone_id: str) -> WriteResult:
        return self.delete(EntityType.MILESTONE, milestone_id)

    # ----------------------------
    # Internals
    # ----------------------------
    def _table_url(self, entity_type: EntityType) -> str:
        return f"{self._config.rest_url}/{table_for(entity_type)}"

    def _row_filter(self, entity_id: str) -> dict[str, str]:
        return {"id": f"eq.{entity_id}", "project_id": f"eq.{self.project_id}"}

    def _write(
        self,
        method: str,
        entity_type: EntityType,
        *,
        params: Optional[dict[str, Any]] = None,
        json: Any = None,
        context: Optional[dict[str, Any]] = None,
    ) -> WriteResult:
        try:
            self._http.request(
                method,
                self._table_url(entity_type),
                params=params,
                json=json,
                headers={"Prefer": "return=minimal"},
            )
        except HubSyncError as exc:
            logger.warning(
                "%s %s failed (%s): %s %s",
                method,
                TABLES[entity_type],
                exc.__class__.__name__,
                exc,
                context or {},
            )
            return WriteResult(ok=False, error=exc)
        return WriteResult(ok=True)
