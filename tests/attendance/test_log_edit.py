from __future__ import annotations

from datetime import datetime

import pytest

from conftest import make_binding, make_log
from src.slack_attendance.slack_attendance.core.enums import AttendanceAction, WorkplaceStatus
from src.slack_attendance.slack_attendance.core.exceptions import NotFoundError


@pytest.fixture
def day_logs(workplaces, attendance):
    workplaces.create(make_binding(status=WorkplaceStatus.ENDED))
    attendance.add(make_log("a-1", AttendanceAction.START, "2025-05-01T09:00:00.000000+09:00"))
    attendance.add(make_log("a-2", AttendanceAction.END, "2025-05-01T17:00:00.000000+09:00"))


def test_update_log_overwrites_timestamp(services, attendance, day_logs, tz):
    updated = services.attendance_service.update_log("a-2", datetime(2025, 5, 1, 18, 30))

    assert updated.timestamp == "2025-05-01T18:30:00.000000+09:00"
    assert updated.workplace_name == "Cafe"
    assert attendance.logs["a-2"].timestamp == "2025-05-01T18:30:00.000000+09:00"


def test_update_log_can_change_which_entry_is_latest(services, workplaces, day_logs, tz):
    # moving the end before the start leaves the start as the latest entry
    services.attendance_service.update_log("a-2", tz.localize(datetime(2025, 5, 1, 8, 0)))

    assert workplaces.by_id["wp-1"].status == WorkplaceStatus.STARTED


def test_update_unknown_log_raises_not_found(services, day_logs):
    with pytest.raises(NotFoundError):
        services.attendance_service.update_log("missing", datetime(2025, 5, 1, 18, 30))


def test_delete_latest_log_resyncs_status(services, attendance, workplaces, day_logs):
    services.attendance_service.delete_log("a-2")

    assert "a-2" not in attendance.logs
    assert workplaces.by_id["wp-1"].status == WorkplaceStatus.STARTED

    services.attendance_service.delete_log("a-1")
    assert workplaces.by_id["wp-1"].status == WorkplaceStatus.NO_HISTORY


def test_delete_unknown_log_raises_not_found(services, day_logs):
    with pytest.raises(NotFoundError):
        services.attendance_service.delete_log("missing")


def test_editing_a_legacy_entry_keeps_chronological_status(services, workplaces, attendance):
    workplaces.create(make_binding(status=WorkplaceStatus.ENDED))
    attendance.add(make_log("g-1", AttendanceAction.from_stored("checkin"), "2025-05-01 09:00:00 +0900 JST"))
    attendance.add(make_log("g-2", AttendanceAction.from_stored("checkout"), "2025-05-01 18:00:00 +0900 JST"))

    # the edited entry is rewritten in ISO form but is still the earlier one
    services.attendance_service.update_log("g-1", datetime(2025, 5, 1, 8, 30))

    assert attendance.logs["g-1"].timestamp == "2025-05-01T08:30:00.000000+09:00"
    assert workplaces.by_id["wp-1"].status == WorkplaceStatus.ENDED

    services.attendance_service.check_in(team_id="T1", channel_id="C1", user_id="U1")
