from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from ..core.enums import WorkplaceStatus
from .model import WorkplaceBinding


class WorkplaceRepository(Protocol):
    """Repository interface for workplace bindings.

    Lookups return None when nothing matches; storage failures raise PersistenceError.
    """

    def get_by_composite_key(self, composite_key: str) -> Optional[WorkplaceBinding]:
        """Active (not soft-deleted) binding for ``team#channel#user``."""

        raise NotImplementedError

    def get_by_id(self, binding_id: str) -> Optional[WorkplaceBinding]:
        raise NotImplementedError

    def create(self, binding: WorkplaceBinding) -> bool:
        """Insert a binding. Returns False if the composite key is already taken."""

        raise NotImplementedError

    def set_status(self, binding_id: str, status: WorkplaceStatus, *, updated_at: datetime) -> bool:
        raise NotImplementedError
