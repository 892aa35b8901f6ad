from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, tzinfo

from ..common.datetime_utils import format_timestamp, localize, now_local
from ..common.ids import new_id
from ..core.enums import AttendanceAction, WorkplaceStatus
from ..core.exceptions import ConcurrentTransitionError, NotFoundError, TransitionError
from ..workplaces.model import WorkplaceBinding
from ..workplaces.repository import WorkplaceRepository
from ..workplaces.service import WorkplaceService
from .model import AttendanceLog
from .repository import AttendanceRepository
from .state import latest_entry, next_status, status_from_latest

logger = logging.getLogger(__name__)


class AttendanceService:
    """Use case: record start/end events and correct recorded ones.

    The binding's stored status decides whether a transition is legal; the log write
    and the status update go through one compare-and-swap in the repository.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        workplaces: WorkplaceRepository,
        bindings: WorkplaceService,
        *,
        tz: tzinfo,
    ):
        self._attendance = attendance
        self._workplaces = workplaces
        self._bindings = bindings
        self._tz = tz

    def _status_from_log(self, workplace_id: str) -> WorkplaceStatus:
        return status_from_latest(latest_entry(self._attendance.list_for_workplace(workplace_id), self._tz))

    def _current_status(self, binding: WorkplaceBinding) -> WorkplaceStatus:
        if binding.status is not None:
            return binding.status
        return self._status_from_log(binding.binding_id)

    def record_transition(
        self,
        *,
        team_id: str,
        channel_id: str,
        user_id: str,
        action: AttendanceAction,
        now: datetime | None = None,
    ) -> AttendanceLog:
        now = localize(now, self._tz) if now else now_local(self._tz)

        binding = self._bindings.require_binding(team_id=team_id, channel_id=channel_id, user_id=user_id)
        # expected value for the compare-and-swap: None for bindings without a stored status
        expected = binding.status
        try:
            new_status = next_status(self._current_status(binding), action)
        except TransitionError as e:
            logger.info("transition rejected for %s: %s (%s)", binding.composite_key, action.value, e)
            raise

        log = AttendanceLog(
            log_id=new_id(),
            team_id=team_id,
            user_id=binding.user_id,
            channel_id=binding.channel_id,
            workplace_id=binding.binding_id,
            action=action,
            timestamp=format_timestamp(now),
        )
        if not self._attendance.append_transition(log, expected_status=expected, new_status=new_status, updated_at=now):
            logger.warning("concurrent transition on workplace %s; %s not recorded", binding.binding_id, action.value)
            raise ConcurrentTransitionError("attendance state changed by another request, please retry")

        logger.info("attendance %s recorded for %s (%s)", action.value, binding.composite_key, log.log_id)
        return replace(log, workplace_name=binding.workplace_name)

    def check_in(self, *, team_id: str, channel_id: str, user_id: str, now: datetime | None = None) -> AttendanceLog:
        return self.record_transition(
            team_id=team_id, channel_id=channel_id, user_id=user_id, action=AttendanceAction.START, now=now
        )

    def check_out(self, *, team_id: str, channel_id: str, user_id: str, now: datetime | None = None) -> AttendanceLog:
        return self.record_transition(
            team_id=team_id, channel_id=channel_id, user_id=user_id, action=AttendanceAction.END, now=now
        )

    def update_log(self, log_id: str, new_timestamp: datetime, *, now: datetime | None = None) -> AttendanceLog:
        """Overwrite the timestamp of one entry. Chronology with neighbours is not checked."""

        existing = self._attendance.get_by_id(log_id)
        if not existing:
            raise NotFoundError(f"attendance log not found: {log_id}")

        timestamp = format_timestamp(localize(new_timestamp, self._tz))
        if timestamp != existing.timestamp and not self._attendance.update_timestamp(log_id, timestamp):
            raise NotFoundError(f"attendance log not found: {log_id}")

        self._resync_status(existing.workplace_id, now=now)
        binding = self._workplaces.get_by_id(existing.workplace_id)
        logger.info("attendance log %s moved to %s", log_id, timestamp)
        return replace(existing, timestamp=timestamp, workplace_name=binding.workplace_name if binding else None)

    def delete_log(self, log_id: str, *, now: datetime | None = None) -> None:
        existing = self._attendance.get_by_id(log_id)
        if not existing:
            raise NotFoundError(f"attendance log not found: {log_id}")
        if not self._attendance.delete_by_id(log_id):
            raise NotFoundError(f"attendance log not found: {log_id}")

        self._resync_status(existing.workplace_id, now=now)
        logger.info("attendance log %s deleted", log_id)

    def _resync_status(self, workplace_id: str, *, now: datetime | None = None) -> None:
        # Edits can change which entry is the latest one.
        status = self._status_from_log(workplace_id)
        self._workplaces.set_status(workplace_id, status, updated_at=now or now_local(self._tz))
