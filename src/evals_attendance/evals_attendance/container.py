from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService, TransactionSource
from .database.connection import DBConfig, DatabaseConnection
from .database.transaction import TransactionManager
from .events.mysql_event_repository import MySQLEventRepository
from .events.repository import EventRepository


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection | None

    events_repo: EventRepository
    attendance_repo: AttendanceRepository
    transactions: TransactionSource

    attendance_service: AttendanceService


def build_container(*, db_config: dict, year_start: date) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_settings(db_config))

    events_repo = MySQLEventRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    transactions = TransactionManager(conn)

    attendance_service = AttendanceService(
        events_repo,
        attendance_repo,
        transactions,
        year_start=year_start,
    )

    return Container(
        conn=conn,
        events_repo=events_repo,
        attendance_repo=attendance_repo,
        transactions=transactions,
        attendance_service=attendance_service,
    )
