from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_date
from .model import UsageRecord
from .repository import UsageRecordRepository

_COLUMNS = "id, resident_id, date, is_used, disability_level, created_at, updated_at"


def _row_to_record(row: dict) -> UsageRecord:
    return UsageRecord(
        id=int(row["id"]),
        resident_id=int(row["resident_id"]),
        date=normalize_mysql_date(row["date"]),
        is_used=bool(row.get("is_used")),
        disability_level=str(row.get("disability_level") or ""),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class MySQLUsageRecordRepository(UsageRecordRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_between(self, start: date, end: date) -> Sequence[UsageRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM usage_records WHERE date BETWEEN %s AND %s ORDER BY resident_id, date",
                (start, end),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def get_for(self, *, resident_id: int, day: date) -> Optional[UsageRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM usage_records WHERE resident_id=%s AND date=%s",
                (resident_id, day),
            )
            row = fetchone(cur)
            return _row_to_record(row) if row else None

    def upsert(self, *, resident_id: int, day: date, is_used: bool, disability_level: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO usage_records(resident_id, date, is_used, disability_level)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    is_used=VALUES(is_used),
                    disability_level=VALUES(disability_level),
                    id=LAST_INSERT_ID(id)
                """,
                (resident_id, day, 1 if is_used else 0, disability_level),
            )
            return int(cur.lastrowid)

    def delete_by_resident(self, resident_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM usage_records WHERE resident_id=%s", (resident_id,))
            return int(cur.rowcount or 0)
