from __future__ import annotations

from datetime import tzinfo
from typing import Iterable, Optional

from ..common.datetime_utils import parse_timestamp
from ..core.enums import AttendanceAction, WorkplaceStatus
from ..core.exceptions import (
    AlreadyEndedError,
    AlreadyStartedError,
    NoPriorStartError,
    TimestampParseError,
    TransitionError,
)
from .model import AttendanceLog

_NEXT_STATUS = {
    AttendanceAction.START: WorkplaceStatus.STARTED,
    AttendanceAction.END: WorkplaceStatus.ENDED,
}

# (current status, requested action) -> rejection; every other pair is legal.
_REJECTIONS: dict[tuple[WorkplaceStatus, AttendanceAction], tuple[type[TransitionError], str]] = {
    (WorkplaceStatus.STARTED, AttendanceAction.START): (AlreadyStartedError, "already checked in"),
    (WorkplaceStatus.NO_HISTORY, AttendanceAction.END): (NoPriorStartError, "no checkin log found"),
    (WorkplaceStatus.ENDED, AttendanceAction.END): (AlreadyEndedError, "already checked out"),
}


def status_from_latest(latest: Optional[AttendanceLog]) -> WorkplaceStatus:
    if latest is None:
        return WorkplaceStatus.NO_HISTORY
    return _NEXT_STATUS[latest.action]


def next_status(current: WorkplaceStatus, action: AttendanceAction) -> WorkplaceStatus:
    """Status after ``action``; raises the matching TransitionError when illegal."""

    rejection = _REJECTIONS.get((current, action))
    if rejection is not None:
        error_cls, message = rejection
        raise error_cls(message)
    return _NEXT_STATUS[action]


def latest_entry(logs: Iterable[AttendanceLog], tz: tzinfo) -> Optional[AttendanceLog]:
    """Entry with the latest instant, ties broken by ID.

    Stored text does not sort chronologically when ISO and legacy layouts are
    mixed, so entries are compared by their parsed time.
    """

    latest: Optional[AttendanceLog] = None
    latest_key = None
    for log in logs:
        try:
            key = (parse_timestamp(log.timestamp, tz), log.log_id)
        except ValueError as e:
            raise TimestampParseError(f"failed to parse timestamp of {log.log_id}: {e}") from e
        if latest_key is None or key > latest_key:
            latest, latest_key = log, key
    return latest
