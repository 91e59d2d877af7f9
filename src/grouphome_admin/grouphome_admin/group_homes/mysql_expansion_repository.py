from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import ExpansionType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, decode_json_list, encode_json, fetchall, fetchone, normalize_mysql_date
from .model import ExpansionRecord
from .repository import ExpansionRepository

_COLUMNS = """
    id, property_name, unit_name, expansion_type, new_rooms, common_room,
    start_date, facility_code, created_at
"""


def _row_to_expansion(row: dict) -> ExpansionRecord:
    return ExpansionRecord(
        id=int(row["id"]),
        property_name=row["property_name"],
        unit_name=row["unit_name"],
        expansion_type=ExpansionType(row["expansion_type"]),
        new_rooms=tuple(str(r) for r in decode_json_list(row.get("new_rooms"))),
        common_room=row.get("common_room"),
        start_date=normalize_mysql_date(row.get("start_date")),
        facility_code=row.get("facility_code"),
        created_at=row.get("created_at"),
    )


class MySQLExpansionRepository(ExpansionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[ExpansionRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM expansions ORDER BY start_date DESC, id DESC")
            return [_row_to_expansion(r) for r in fetchall(cur)]

    def get_by_id(self, expansion_id: int) -> Optional[ExpansionRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM expansions WHERE id=%s", (expansion_id,))
            row = fetchone(cur)
            return _row_to_expansion(row) if row else None

    def create(
        self,
        *,
        property_name: str,
        unit_name: str,
        expansion_type: ExpansionType,
        new_rooms: Sequence[str],
        common_room: Optional[str],
        start_date: date,
        facility_code: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO expansions(
                    property_name, unit_name, expansion_type, new_rooms, common_room, start_date, facility_code
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    property_name,
                    unit_name,
                    expansion_type.value,
                    encode_json(list(new_rooms)),
                    common_room,
                    start_date,
                    facility_code,
                ),
            )
            return int(cur.lastrowid)

    def update(
        self,
        expansion_id: int,
        *,
        property_name: str,
        unit_name: str,
        expansion_type: ExpansionType,
        new_rooms: Sequence[str],
        common_room: Optional[str],
        start_date: date,
        facility_code: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE expansions
                SET property_name=%s, unit_name=%s, expansion_type=%s, new_rooms=%s,
                    common_room=%s, start_date=%s, facility_code=%s
                WHERE id=%s
                """,
                (
                    property_name,
                    unit_name,
                    expansion_type.value,
                    encode_json(list(new_rooms)),
                    common_room,
                    start_date,
                    facility_code,
                    expansion_id,
                ),
            )
            return cur.rowcount > 0

    def delete_by_id(self, expansion_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM expansions WHERE id=%s", (expansion_id,))
            return cur.rowcount > 0
