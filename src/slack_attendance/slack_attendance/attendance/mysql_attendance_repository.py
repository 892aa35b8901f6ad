from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional, Sequence

from ..core.enums import AttendanceAction, WorkplaceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_db_datetime
from .model import AttendanceLog
from .repository import AttendanceRepository

_COLUMNS = "log_id, team_id, user_id, channel_id, workplace_id, action, timestamp"


def _row_to_log(r: dict) -> AttendanceLog:
    return AttendanceLog(
        log_id=r["log_id"],
        team_id=r["team_id"],
        user_id=r["user_id"],
        channel_id=r["channel_id"],
        workplace_id=r["workplace_id"],
        action=AttendanceAction.from_stored(r["action"]),
        timestamp=r["timestamp"],
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_workplace(self, workplace_id: str) -> Sequence[AttendanceLog]:
        with db_cursor(self._conn_factory, operation="get AttendanceLog list") as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_logs WHERE workplace_id=%s", (workplace_id,))
            return [_row_to_log(r) for r in fetchall(cur)]

    def list_for_workplace_between(self, workplace_id: str, first_day: date, last_day: date) -> Sequence[AttendanceLog]:
        # Stored timestamps start with YYYY-MM-DD in both layouts, so a text range selects by that date.
        with db_cursor(self._conn_factory, operation="get AttendanceLog list") as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_logs
                WHERE workplace_id=%s AND timestamp >= %s AND timestamp < %s
                """,
                (workplace_id, first_day.isoformat(), (last_day + timedelta(days=1)).isoformat()),
            )
            return [_row_to_log(r) for r in fetchall(cur)]

    def get_by_id(self, log_id: str) -> Optional[AttendanceLog]:
        with db_cursor(self._conn_factory, operation="get AttendanceLog") as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_logs WHERE log_id=%s", (log_id,))
            r = fetchone(cur)
            return _row_to_log(r) if r else None

    def append_transition(
        self,
        log: AttendanceLog,
        *,
        expected_status: Optional[WorkplaceStatus],
        new_status: WorkplaceStatus,
        updated_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory, operation="save AttendanceLog") as (conn, cur):
            # Compare-and-swap on the binding status; `<=>` also matches a NULL status.
            cur.execute(
                """
                UPDATE workplace_bindings
                SET status=%s, updated_at=%s
                WHERE binding_id=%s AND status <=> %s
                """,
                (
                    new_status.value,
                    to_db_datetime(updated_at),
                    log.workplace_id,
                    expected_status.value if expected_status else None,
                ),
            )
            if cur.rowcount != 1:
                conn.rollback()
                return False

            cur.execute(
                f"""
                INSERT INTO attendance_logs({_COLUMNS})
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    log.log_id,
                    log.team_id,
                    log.user_id,
                    log.channel_id,
                    log.workplace_id,
                    log.action.value,
                    log.timestamp,
                ),
            )
            return True

    def update_timestamp(self, log_id: str, timestamp: str) -> bool:
        with db_cursor(self._conn_factory, operation="update AttendanceLog") as (_, cur):
            cur.execute("UPDATE attendance_logs SET timestamp=%s WHERE log_id=%s", (timestamp, log_id))
            return cur.rowcount > 0

    def delete_by_id(self, log_id: str) -> bool:
        with db_cursor(self._conn_factory, operation="delete AttendanceLog") as (_, cur):
            cur.execute("DELETE FROM attendance_logs WHERE log_id=%s", (log_id,))
            return cur.rowcount > 0
