from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta, tzinfo
from typing import Optional

from ..attendance.model import AttendanceLog
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import localize, now_local, parse_timestamp, parse_year_month, year_month_prefix
from ..workplaces.service import WorkplaceService
from .formatter import format_attendance
from .pairing import AdjacentPairingPolicy, PairingPolicy

logger = logging.getLogger(__name__)

NO_RECORDS_MESSAGE = "出勤記録がありません。"


@dataclass(frozen=True)
class MonthlyReport:
    workplace_name: str
    year_month: str
    logs: list[AttendanceLog]
    formatted: str

    @property
    def is_empty(self) -> bool:
        return not self.logs


def month_window(month_start: date) -> tuple[date, date]:
    """Stored dates that can hold entries of the month.

    Legacy rows keep the offset they were written with, so their stored date can
    be one day off the local date. The window adds that day on both sides.
    """

    next_month = (month_start.replace(day=28) + timedelta(days=4)).replace(day=1)
    return month_start - timedelta(days=1), next_month


class MonthlyReportService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        bindings: WorkplaceService,
        *,
        tz: tzinfo,
        policy: Optional[PairingPolicy] = None,
    ):
        self._attendance = attendance
        self._bindings = bindings
        self._tz = tz
        self._policy = policy or AdjacentPairingPolicy()

    def _in_month(self, log: AttendanceLog, month_start: date) -> bool:
        try:
            local = parse_timestamp(log.timestamp, self._tz)
        except ValueError:
            # kept so the report shows the parse error
            return log.timestamp.startswith(year_month_prefix(month_start))
        return (local.year, local.month) == (month_start.year, month_start.month)

    def monthly_report(
        self,
        *,
        team_id: str,
        channel_id: str,
        user_id: str,
        year_month: Optional[str] = None,
        now: datetime | None = None,
    ) -> MonthlyReport:
        """Attendance of the bound workplace for ``YYYYMM`` (default: current month)."""

        if not year_month:
            current = localize(now, self._tz) if now else now_local(self._tz)
            year_month = current.strftime("%Y%m")
        month_start = parse_year_month(year_month)

        binding = self._bindings.require_binding(team_id=team_id, channel_id=channel_id, user_id=user_id)
        first_day, last_day = month_window(month_start)
        logs = [
            replace(log, workplace_name=binding.workplace_name)
            for log in self._attendance.list_for_workplace_between(binding.binding_id, first_day, last_day)
            if self._in_month(log, month_start)
        ]
        logger.info("monthly report %s for %s: %d logs", year_month, binding.composite_key, len(logs))

        if not logs:
            return MonthlyReport(workplace_name=binding.workplace_name, year_month=year_month, logs=[], formatted="")

        formatted = format_attendance(
            logs, binding.workplace_name, tz=self._tz, month=month_start.month, policy=self._policy
        )
        return MonthlyReport(workplace_name=binding.workplace_name, year_month=year_month, logs=logs, formatted=formatted)
