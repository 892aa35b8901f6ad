from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Optional

import pytest
import pytz

from src.slack_attendance.slack_attendance.attendance.model import AttendanceLog
from src.slack_attendance.slack_attendance.container import build_services
from src.slack_attendance.slack_attendance.core.enums import AttendanceAction, WorkplaceStatus
from src.slack_attendance.slack_attendance.workplaces.model import WorkplaceBinding

TOKYO = pytz.timezone("Asia/Tokyo")


class InMemoryWorkplaces:
    def __init__(self):
        self.by_id: dict[str, WorkplaceBinding] = {}

    def get_by_composite_key(self, composite_key: str) -> Optional[WorkplaceBinding]:
        for b in self.by_id.values():
            if b.composite_key == composite_key and b.deleted_at is None:
                return b
        return None

    def get_by_id(self, binding_id: str) -> Optional[WorkplaceBinding]:
        return self.by_id.get(binding_id)

    def create(self, binding: WorkplaceBinding) -> bool:
        if self.get_by_composite_key(binding.composite_key):
            return False
        self.by_id[binding.binding_id] = binding
        return True

    def set_status(self, binding_id: str, status: WorkplaceStatus, *, updated_at: datetime) -> bool:
        b = self.by_id.get(binding_id)
        if not b:
            return False
        self.by_id[binding_id] = replace(b, status=status, updated_at=updated_at)
        return True


class InMemoryAttendance:
    def __init__(self, workplaces: InMemoryWorkplaces):
        self.workplaces = workplaces
        self.logs: dict[str, AttendanceLog] = {}
        self.range_queries: list[tuple[str, date, date]] = []

    def add(self, log: AttendanceLog) -> None:
        self.logs[log.log_id] = log

    def list_for_workplace(self, workplace_id: str):
        return [l for l in self.logs.values() if l.workplace_id == workplace_id]

    def list_for_workplace_between(self, workplace_id: str, first_day: date, last_day: date):
        # text comparison on the stored value, like the SQL range
        self.range_queries.append((workplace_id, first_day, last_day))
        low, high = first_day.isoformat(), (last_day + timedelta(days=1)).isoformat()
        return [l for l in self.list_for_workplace(workplace_id) if low <= l.timestamp < high]

    def get_by_id(self, log_id: str) -> Optional[AttendanceLog]:
        return self.logs.get(log_id)

    def append_transition(self, log, *, expected_status, new_status, updated_at) -> bool:
        b = self.workplaces.by_id.get(log.workplace_id)
        if b is None or b.status != expected_status:
            return False
        self.workplaces.by_id[b.binding_id] = replace(b, status=new_status, updated_at=updated_at)
        self.logs[log.log_id] = log
        return True

    def update_timestamp(self, log_id: str, timestamp: str) -> bool:
        if log_id not in self.logs:
            return False
        self.logs[log_id] = replace(self.logs[log_id], timestamp=timestamp)
        return True

    def delete_by_id(self, log_id: str) -> bool:
        return self.logs.pop(log_id, None) is not None


def make_binding(
    binding_id: str = "wp-1",
    *,
    team_id: str = "T1",
    channel_id: str = "C1",
    user_id: str = "U1",
    workplace_name: str = "Cafe",
    status: Optional[WorkplaceStatus] = WorkplaceStatus.NO_HISTORY,
) -> WorkplaceBinding:
    created = TOKYO.localize(datetime(2025, 4, 1, 9, 0))
    return WorkplaceBinding(
        binding_id=binding_id,
        team_id=team_id,
        channel_id=channel_id,
        user_id=user_id,
        workplace_name=workplace_name,
        created_at=created,
        updated_at=created,
        status=status,
    )


def make_log(log_id: str, action: AttendanceAction, timestamp: str, *, workplace_id: str = "wp-1") -> AttendanceLog:
    return AttendanceLog(
        log_id=log_id,
        team_id="T1",
        user_id="U1",
        channel_id="C1",
        workplace_id=workplace_id,
        action=action,
        timestamp=timestamp,
    )


@pytest.fixture
def tz():
    return TOKYO


@pytest.fixture
def fixed_now(tz):
    return tz.localize(datetime(2025, 5, 1, 9, 0))


@pytest.fixture
def workplaces():
    return InMemoryWorkplaces()


@pytest.fixture
def attendance(workplaces):
    return InMemoryAttendance(workplaces)


@pytest.fixture
def services(workplaces, attendance, tz):
    return build_services(workplaces_repo=workplaces, attendance_repo=attendance, tz=tz)


@pytest.fixture
def client(services, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    from src.slack_attendance.slack_attendance.main import create_app

    app = create_app(container=services)
    return app.test_client()
