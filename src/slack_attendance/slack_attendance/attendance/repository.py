from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import WorkplaceStatus
from .model import AttendanceLog


class AttendanceRepository(Protocol):
    def list_for_workplace(self, workplace_id: str) -> Sequence[AttendanceLog]:
        """All entries of the workplace; order is not guaranteed."""

        raise NotImplementedError

    def list_for_workplace_between(self, workplace_id: str, first_day: date, last_day: date) -> Sequence[AttendanceLog]:
        """Entries whose stored timestamp starts with a date in ``[first_day, last_day]``.

        The date is the one written in the stored text, which for rows kept with a
        foreign offset can differ from the local date by one day.
        """

        raise NotImplementedError

    def get_by_id(self, log_id: str) -> Optional[AttendanceLog]:
        raise NotImplementedError

    def append_transition(
        self,
        log: AttendanceLog,
        *,
        expected_status: Optional[WorkplaceStatus],
        new_status: WorkplaceStatus,
        updated_at: datetime,
    ) -> bool:
        """Insert ``log`` and move its binding from ``expected_status`` to ``new_status``.

        Both happen in one transaction. Returns False (and writes nothing) when the
        binding's status is no longer ``expected_status``.
        """

        raise NotImplementedError

    def update_timestamp(self, log_id: str, timestamp: str) -> bool:
        raise NotImplementedError

    def delete_by_id(self, log_id: str) -> bool:
        raise NotImplementedError
