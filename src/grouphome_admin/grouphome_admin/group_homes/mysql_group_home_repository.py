from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, decode_json_list, encode_json, fetchall, fetchone, normalize_mysql_date
from .model import GroupHome
from .repository import GroupHomeRepository

_COLUMNS = """
    id, property_name, unit_name, postal_code, address, phone_number,
    common_room, resident_rooms, opening_date, facility_code, created_at
"""


def _row_to_group_home(row: dict) -> GroupHome:
    return GroupHome(
        id=int(row["id"]),
        property_name=row["property_name"],
        unit_name=row["unit_name"],
        postal_code=row.get("postal_code") or "",
        address=row.get("address") or "",
        phone_number=row.get("phone_number") or "",
        common_room=row.get("common_room") or "",
        resident_rooms=tuple(str(r) for r in decode_json_list(row.get("resident_rooms"))),
        opening_date=normalize_mysql_date(row.get("opening_date")),
        facility_code=row.get("facility_code") or "",
        created_at=row.get("created_at"),
    )


class MySQLGroupHomeRepository(GroupHomeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[GroupHome]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM group_homes ORDER BY property_name, unit_name, id")
            return [_row_to_group_home(r) for r in fetchall(cur)]

    def get_by_id(self, group_home_id: int) -> Optional[GroupHome]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM group_homes WHERE id=%s", (group_home_id,))
            row = fetchone(cur)
            return _row_to_group_home(row) if row else None

    def create(
        self,
        *,
        property_name: str,
        unit_name: str,
        postal_code: str,
        address: str,
        phone_number: str,
        common_room: str,
        resident_rooms: Sequence[str],
        opening_date: date,
        facility_code: str,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO group_homes(
                    property_name, unit_name, postal_code, address, phone_number,
                    common_room, resident_rooms, opening_date, facility_code
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    property_name,
                    unit_name,
                    postal_code,
                    address,
                    phone_number,
                    common_room,
                    encode_json(list(resident_rooms)),
                    opening_date,
                    facility_code,
                ),
            )
            return int(cur.lastrowid)

    def update(
        self,
        group_home_id: int,
        *,
        property_name: str,
        unit_name: str,
        postal_code: str,
        address: str,
        phone_number: str,
        common_room: str,
        resident_rooms: Sequence[str],
        opening_date: date,
        facility_code: str,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE group_homes
                SET property_name=%s, unit_name=%s, postal_code=%s, address=%s, phone_number=%s,
                    common_room=%s, resident_rooms=%s, opening_date=%s, facility_code=%s
                WHERE id=%s
                """,
                (
                    property_name,
                    unit_name,
                    postal_code,
                    address,
                    phone_number,
                    common_room,
                    encode_json(list(resident_rooms)),
                    opening_date,
                    facility_code,
                    group_home_id,
                ),
            )
            return cur.rowcount > 0

    def delete_by_id(self, group_home_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM group_homes WHERE id=%s", (group_home_id,))
            return cur.rowcount > 0
