from __future__ import annotations

from dataclasses import dataclass
from datetime import tzinfo
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .common.datetime_utils import get_timezone
from .core.constants import DEFAULT_REPORT_TIMEZONE
from .database.connection import DBConfig, DatabaseConnection
from .reports.service import MonthlyReportService
from .workplaces.mysql_workplace_repository import MySQLWorkplaceRepository
from .workplaces.repository import WorkplaceRepository
from .workplaces.service import WorkplaceService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]
    tz: tzinfo

    workplaces_repo: WorkplaceRepository
    attendance_repo: AttendanceRepository

    workplace_service: WorkplaceService
    attendance_service: AttendanceService
    report_service: MonthlyReportService


def build_services(
    *,
    workplaces_repo: WorkplaceRepository,
    attendance_repo: AttendanceRepository,
    tz: tzinfo,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    workplace_service = WorkplaceService(workplaces_repo, tz=tz)
    attendance_service = AttendanceService(attendance_repo, workplaces_repo, workplace_service, tz=tz)
    report_service = MonthlyReportService(attendance_repo, workplace_service, tz=tz)

    return Container(
        conn=conn,
        tz=tz,
        workplaces_repo=workplaces_repo,
        attendance_repo=attendance_repo,
        workplace_service=workplace_service,
        attendance_service=attendance_service,
        report_service=report_service,
    )


def build_container(*, db_config: dict, report_timezone: str = DEFAULT_REPORT_TIMEZONE) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return build_services(
        workplaces_repo=MySQLWorkplaceRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        tz=get_timezone(report_timezone),
        conn=conn,
    )
