from __future__ import annotations

from typing import Optional, Sequence

from ..common.serialization import to_row
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, decode_json_list, encode_json, fetchall, fetchone
from .model import GroupHomePreference, ShiftPreference
from .repository import ShiftPreferenceRepository

_COLUMNS = "id, user_id, user_name, target_year, target_month, preferences, notes, created_at, updated_at"


def _item_from_json(item: dict) -> GroupHomePreference:
    return GroupHomePreference(
        group_home_id=int(item.get("group_home_id") or 0),
        group_home_name=item.get("group_home_name") or "",
        unit_name=item.get("unit_name") or "",
        desired_days=int(item.get("desired_days") or 0),
    )


def _row_to_preference(row: dict) -> ShiftPreference:
    return ShiftPreference(
        id=int(row["id"]),
        user_id=int(row["user_id"]),
        user_name=row.get("user_name") or "",
        target_year=int(row["target_year"]),
        target_month=int(row["target_month"]),
        preferences=tuple(_item_from_json(i) for i in decode_json_list(row.get("preferences")) if isinstance(i, dict)),
        notes=row.get("notes"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def _encode_items(items: Sequence[GroupHomePreference]) -> str:
    return encode_json([to_row(i) for i in items])


class MySQLShiftPreferenceRepository(ShiftPreferenceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[ShiftPreference]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM shift_preferences ORDER BY target_year DESC, target_month DESC, id DESC")
            return [_row_to_preference(r) for r in fetchall(cur)]

    def get_by_id(self, preference_id: int) -> Optional[ShiftPreference]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM shift_preferences WHERE id=%s", (preference_id,))
            row = fetchone(cur)
            return _row_to_preference(row) if row else None

    def get_for_user_month(self, *, user_id: int, target_year: int, target_month: int) -> Optional[ShiftPreference]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM shift_preferences
                WHERE user_id=%s AND target_year=%s AND target_month=%s
                """,
                (user_id, target_year, target_month),
            )
            row = fetchone(cur)
            return _row_to_preference(row) if row else None

    def create(
        self,
        *,
        user_id: int,
        user_name: str,
        target_year: int,
        target_month: int,
        preferences: Sequence[GroupHomePreference],
        notes: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO shift_preferences(user_id, user_name, target_year, target_month, preferences, notes)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (user_id, user_name, target_year, target_month, _encode_items(preferences), notes),
            )
            return int(cur.lastrowid)

    def update_items(
        self, preference_id: int, *, preferences: Sequence[GroupHomePreference], notes: Optional[str]
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE shift_preferences SET preferences=%s, notes=%s WHERE id=%s",
                (_encode_items(preferences), notes, preference_id),
            )
            return cur.rowcount > 0

    def delete_by_id(self, preference_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM shift_preferences WHERE id=%s", (preference_id,))
            return cur.rowcount > 0

    def delete_by_user(self, user_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM shift_preferences WHERE user_id=%s", (user_id,))
            return int(cur.rowcount or 0)
