from __future__ import annotations

import uuid


def new_uuid() -> str:
    """Generate a UUID4 string."""
    return str(uuid.uuid4())


def new_op_id() -> str:
    """Generate a new QueuedOperation ID."""
    return new_uuid()


def new_entity_id() -> str:
    """
    Generate a client-side entity id.

    Ids are fixed at creation time so an entity created offline can be
    referenced (and its insert replayed) before the remote store has seen it.
    """
    return new_uuid()
