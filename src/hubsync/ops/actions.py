"""Queued operation actions for hubsync."""

from __future__ import annotations

from enum import Enum


class OperationAction(str, Enum):
    """Write actions that can be deferred to the offline queue."""

    ADD = "add"
    UPDATE = "update"
    DELETE = "delete"
