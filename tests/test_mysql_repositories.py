from __future__ import annotations

from datetime import date, datetime

import mysql.connector
import pytest

from conftest import make_log
from src.slack_attendance.slack_attendance.attendance.mysql_attendance_repository import MySQLAttendanceRepository
from src.slack_attendance.slack_attendance.core.enums import AttendanceAction, WorkplaceStatus
from src.slack_attendance.slack_attendance.core.exceptions import PersistenceError
from src.slack_attendance.slack_attendance.database.mysql_base import db_cursor


class FakeCursor:
    def __init__(self, rowcounts=(), rows=(), fail_on=None):
        self.executed = []
        self._rowcounts = list(rowcounts)
        self._rows = list(rows)
        self._fail_on = fail_on
        self.rowcount = 0
        self.closed = False

    def execute(self, sql, params=None):
        if self._fail_on and self._fail_on in sql:
            raise mysql.connector.Error("boom")
        self.executed.append((" ".join(sql.split()), params))
        self.rowcount = self._rowcounts.pop(0) if self._rowcounts else 0

    def fetchone(self):
        return self._rows.pop(0) if self._rows else None

    def fetchall(self):
        rows, self._rows = self._rows, []
        return rows

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, cursor):
        self._cursor = cursor
        self.commits = 0
        self.rollbacks = 0
        self.closed = False

    def cursor(self, dictionary=True):
        return self._cursor

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1

    def close(self):
        self.closed = True


class FakeFactory:
    def __init__(self, conn=None, error=None):
        self._conn = conn
        self._error = error

    def connect(self):
        if self._error:
            raise self._error
        return self._conn


def test_db_cursor_commits_and_closes():
    conn = FakeConnection(FakeCursor())

    with db_cursor(FakeFactory(conn), operation="test") as (_, cur):
        cur.execute("SELECT 1")

    assert (conn.commits, conn.rollbacks, conn.closed) == (1, 0, True)


def test_db_cursor_wraps_driver_errors():
    conn = FakeConnection(FakeCursor(fail_on="SELECT"))

    with pytest.raises(PersistenceError, match="failed to load rows: "):
        with db_cursor(FakeFactory(conn), operation="load rows") as (_, cur):
            cur.execute("SELECT 1")

    assert (conn.commits, conn.rollbacks, conn.closed) == (0, 1, True)


def test_db_cursor_wraps_connect_errors():
    factory = FakeFactory(error=mysql.connector.Error("refused"))

    with pytest.raises(PersistenceError, match="failed to connect test"):
        with db_cursor(factory, operation="connect test"):
            pass


def test_append_transition_updates_status_then_inserts(fixed_now):
    cur = FakeCursor(rowcounts=[1, 1])
    repo = MySQLAttendanceRepository(FakeFactory(FakeConnection(cur)))
    log = make_log("l-1", AttendanceAction.START, "2025-05-01T09:00:00.000000+09:00")

    ok = repo.append_transition(
        log, expected_status=WorkplaceStatus.NO_HISTORY, new_status=WorkplaceStatus.STARTED, updated_at=fixed_now
    )

    assert ok is True
    (update_sql, update_params), (insert_sql, insert_params) = cur.executed
    assert update_sql.startswith("UPDATE workplace_bindings")
    assert update_params == ("STARTED", datetime(2025, 5, 1, 9, 0), "wp-1", "NO_HISTORY")
    assert insert_sql.startswith("INSERT INTO attendance_logs")
    assert insert_params[5] == "start"


def test_append_transition_stops_when_status_moved(fixed_now):
    cur = FakeCursor(rowcounts=[0])
    conn = FakeConnection(cur)
    repo = MySQLAttendanceRepository(FakeFactory(conn))
    log = make_log("l-1", AttendanceAction.END, "2025-05-01T18:00:00.000000+09:00")

    ok = repo.append_transition(log, expected_status=None, new_status=WorkplaceStatus.ENDED, updated_at=fixed_now)

    assert ok is False
    assert len(cur.executed) == 1
    assert cur.executed[0][1][-1] is None
    assert conn.rollbacks == 1


def test_legacy_action_values_are_normalized():
    row = {
        "log_id": "old",
        "team_id": "T1",
        "user_id": "U1",
        "channel_id": "C1",
        "workplace_id": "wp-1",
        "action": "checkout",
        "timestamp": "2024-12-01 18:00:00.5 +0900 JST",
    }
    repo = MySQLAttendanceRepository(FakeFactory(FakeConnection(FakeCursor(rows=[row]))))

    log = repo.get_by_id("old")

    assert log.action == AttendanceAction.END


def test_month_range_query_bounds_are_stored_dates():
    cur = FakeCursor()
    repo = MySQLAttendanceRepository(FakeFactory(FakeConnection(cur)))

    repo.list_for_workplace_between("wp-1", date(2025, 4, 30), date(2025, 6, 1))

    sql, params = cur.executed[0]
    assert "timestamp >= %s AND timestamp < %s" in sql
    assert params == ("wp-1", "2025-04-30", "2025-06-02")
