from __future__ import annotations

from datetime import date, time
from typing import Optional, Sequence

from ..core.enums import ShiftType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_date, normalize_mysql_time
from .model import AttendanceReport
from .repository import AttendanceReportRepository

_COLUMNS = "id, user_id, name, work_date, check_in, check_out, shift_type, created_at"


def _row_to_report(row: dict) -> AttendanceReport:
    return AttendanceReport(
        id=int(row["id"]),
        user_id=int(row["user_id"]) if row.get("user_id") is not None else None,
        name=row["name"],
        work_date=normalize_mysql_date(row["work_date"]),
        check_in=normalize_mysql_time(row["check_in"]),
        check_out=normalize_mysql_time(row["check_out"]),
        shift_type=ShiftType(row.get("shift_type") or ShiftType.REGULAR.value),
        created_at=row.get("created_at"),
    )


class MySQLAttendanceReportRepository(AttendanceReportRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[AttendanceReport]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_reports ORDER BY work_date DESC, id DESC")
            return [_row_to_report(r) for r in fetchall(cur)]

    def get_by_id(self, report_id: int) -> Optional[AttendanceReport]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_reports WHERE id=%s", (report_id,))
            row = fetchone(cur)
            return _row_to_report(row) if row else None

    def create(
        self,
        *,
        user_id: Optional[int],
        name: str,
        work_date: date,
        check_in: time,
        check_out: time,
        shift_type: ShiftType,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_reports(user_id, name, work_date, check_in, check_out, shift_type)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (user_id, name, work_date, check_in, check_out, shift_type.value),
            )
            return int(cur.lastrowid)

    def delete_by_id(self, report_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_reports WHERE id=%s", (report_id,))
            return cur.rowcount > 0
