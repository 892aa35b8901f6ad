from __future__ import annotations

from enum import Enum


class AttendanceAction(str, Enum):
    """Kind of event recorded in an attendance log."""

    START = "start"
    END = "end"

    @classmethod
    def from_stored(cls, value: str) -> "AttendanceAction":
        """Read an action column, mapping the legacy checkin/checkout values."""

        legacy = _LEGACY_ACTIONS.get(value)
        if legacy is not None:
            return legacy
        return cls(value)


_LEGACY_ACTIONS = {
    "checkin": AttendanceAction.START,
    "checkout": AttendanceAction.END,
}


class WorkplaceStatus(str, Enum):
    """Attendance status of a workplace binding, stored next to the binding."""

    NO_HISTORY = "NO_HISTORY"
    STARTED = "STARTED"
    ENDED = "ENDED"
