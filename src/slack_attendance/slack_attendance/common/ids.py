from __future__ import annotations

from uuid6 import uuid7


def new_id() -> str:
    """Time-sortable identifier (UUIDv7) for bindings and log entries."""
    return str(uuid7())
