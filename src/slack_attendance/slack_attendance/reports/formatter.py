"""Monthly attendance text report.

Logs are bucketed by calendar date in the reporting timezone, each day is sorted
and paired by a PairingPolicy, and the result is rendered as the Slack/REST text:

    勤務先: <workplace>
    -------------------------------------

    5月の勤怠記録
    -------------------------------------

    日付: 2025-05-01
    ・出勤 09:00 / 退勤 17:30（8時間30分）
    合計: 8時間30分
    -------------------------------------

    月間合計勤務時間: 8時間30分

Durations are truncated (never rounded) to whole minutes. The monthly total is a
float sum of hours; its minutes are int(fraction * 60).
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta, tzinfo
from typing import Iterable, Optional

from ..attendance.model import AttendanceLog
from ..common.datetime_utils import parse_timestamp
from ..core.constants import REPORT_SEPARATOR
from ..core.exceptions import TimestampParseError
from .pairing import AdjacentPairingPolicy, PairingPolicy, TimedEvent, WorkPair


@dataclass(frozen=True)
class DailySummary:
    day: date
    pairs: list[WorkPair] = field(default_factory=list)

    @property
    def total(self) -> timedelta:
        return sum((p.duration for p in self.pairs), timedelta())


@dataclass(frozen=True)
class MonthlySummary:
    days: list[DailySummary]
    total_hours: float


def summarize(logs: Iterable[AttendanceLog], tz: tzinfo, *, policy: Optional[PairingPolicy] = None) -> MonthlySummary:
    """Group, sort and pair ``logs``. Raises TimestampParseError on the first bad timestamp."""

    policy = policy or AdjacentPairingPolicy()
    by_date: dict[date, list[TimedEvent]] = defaultdict(list)

    for log in logs:
        try:
            at = parse_timestamp(log.timestamp, tz)
        except ValueError as e:
            raise TimestampParseError(f"failed to parse timestamp of {log.log_id}: {e}") from e
        by_date[at.date()].append(TimedEvent(at=at, action=log.action))

    days: list[DailySummary] = []
    total_hours = 0.0
    for day in sorted(by_date):
        events = sorted(by_date[day], key=lambda e: e.at)
        summary = DailySummary(day=day, pairs=policy.pair(events))
        total_hours += summary.total.total_seconds() / 3600
        days.append(summary)

    return MonthlySummary(days=days, total_hours=total_hours)


def format_duration(value: timedelta) -> str:
    minutes = int(value.total_seconds() // 60)
    return f"{minutes // 60}時間{minutes % 60}分"


def format_hours(hours: float) -> str:
    whole = int(hours)
    return f"{whole}時間{int((hours - whole) * 60)}分"


def render_summary(summary: MonthlySummary, workplace_name: str, *, month: Optional[int] = None) -> str:
    if month is None and summary.days:
        month = summary.days[0].day.month

    lines = [
        f"勤務先: {workplace_name}",
        REPORT_SEPARATOR,
        "",
        f"{month}月の勤怠記録" if month else "勤怠記録",
        REPORT_SEPARATOR,
        "",
    ]
    for day in summary.days:
        lines.append(f"日付: {day.day.isoformat()}")
        for p in day.pairs:
            lines.append(f"・出勤 {p.start:%H:%M} / 退勤 {p.end:%H:%M}（{format_duration(p.duration)}）")
        lines.append(f"合計: {format_duration(day.total)}")
        lines.append(REPORT_SEPARATOR)
        lines.append("")

    lines.append(f"月間合計勤務時間: {format_hours(summary.total_hours)}")
    return "\n".join(lines) + "\n"


def format_attendance(
    logs: Iterable[AttendanceLog],
    workplace_name: str,
    *,
    tz: tzinfo,
    month: Optional[int] = None,
    policy: Optional[PairingPolicy] = None,
) -> str:
    """Render the monthly report, or ``"Error: ..."`` if any timestamp is unparsable."""

    try:
        summary = summarize(logs, tz, policy=policy)
    except TimestampParseError as e:
        return f"Error: {e}"
    return render_summary(summary, workplace_name, month=month)
