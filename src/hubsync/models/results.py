"""Result models for remote writes and queue drains."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Optional


OperationStatus = Literal["success", "failed", "unsupported"]


@dataclass(slots=True)
class WriteResult:
    """Outcome of a single remote write. Failure is a value, not a raise."""

    ok: bool
    error: Optional[Exception] = None

    @property
    def error_type(self) -> Optional[str]:
        return self.error.__class__.__name__ if self.error is not None else None


@dataclass(slots=True)
class OperationResult:
    """Result of replaying one queued operation."""

    op_id: str
    entity_type: str
    action: str
    status: OperationStatus

    error_type: Optional[str] = None
    error_message: Optional[str] = None
    error_details: Optional[dict[str, Any]] = None

    @property
    def succeeded(self) -> bool:
        return self.status == "success"


@dataclass(slots=True)
class DrainResult:
    """Aggregate result of one drain over the offline queue."""

    succeeded: int = 0
    failed: int = 0
    results: list[OperationResult] = field(default_factory=list)

    @property
    def unsupported(self) -> int:
        return sum(1 for r in self.results if r.status == "unsupported")

    def to_dict(self) -> dict[str, int]:
        return {"succeeded": self.succeeded, "failed": self.failed}
