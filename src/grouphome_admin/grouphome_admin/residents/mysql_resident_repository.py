from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_date, placeholders
from .model import DisabilityHistory, Resident
from .repository import ResidentRepository

_RESIDENT_COLUMNS = """
    id, name, name_kana, disability_level, group_home_id, group_home_name, unit_name,
    room_number, move_in_date, move_out_date, status, created_at, updated_at
"""

_HISTORY_COLUMNS = "id, resident_id, disability_level, start_date, end_date, created_at"


def _row_to_history(row: dict) -> DisabilityHistory:
    return DisabilityHistory(
        id=int(row["id"]),
        resident_id=int(row["resident_id"]),
        disability_level=str(row["disability_level"]),
        start_date=normalize_mysql_date(row["start_date"]),
        end_date=normalize_mysql_date(row.get("end_date")),
        created_at=row.get("created_at"),
    )


def _row_to_resident(row: dict, histories: Sequence[DisabilityHistory]) -> Resident:
    return Resident(
        id=int(row["id"]),
        name=row["name"],
        name_kana=row.get("name_kana") or "",
        disability_level=str(row.get("disability_level") or ""),
        group_home_id=str(row.get("group_home_id") or ""),
        group_home_name=row.get("group_home_name") or "",
        unit_name=row.get("unit_name") or "",
        room_number=str(row.get("room_number") or ""),
        move_in_date=normalize_mysql_date(row.get("move_in_date")),
        move_out_date=normalize_mysql_date(row.get("move_out_date")),
        status=row.get("status") or "active",
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
        disability_history=tuple(histories),
    )


class MySQLResidentRepository(ResidentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _histories_for(self, cur, resident_ids: Sequence[int]) -> dict[int, list[DisabilityHistory]]:
        grouped: dict[int, list[DisabilityHistory]] = defaultdict(list)
        if not resident_ids:
            return grouped
        cur.execute(
            f"""
            SELECT {_HISTORY_COLUMNS}
            FROM disability_histories
            WHERE resident_id IN ({placeholders(resident_ids)})
            ORDER BY start_date DESC, id DESC
            """,
            tuple(resident_ids),
        )
        for r in fetchall(cur):
            h = _row_to_history(r)
            grouped[h.resident_id].append(h)
        return grouped

    def _load(self, cur, rows: list[dict]) -> list[Resident]:
        histories = self._histories_for(cur, [int(r["id"]) for r in rows])
        return [_row_to_resident(r, histories.get(int(r["id"]), [])) for r in rows]

    def list_all(self) -> Sequence[Resident]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_RESIDENT_COLUMNS} FROM residents ORDER BY id")
            return self._load(cur, fetchall(cur))

    def get_by_id(self, resident_id: int) -> Optional[Resident]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_RESIDENT_COLUMNS} FROM residents WHERE id=%s", (resident_id,))
            row = fetchone(cur)
            if not row:
                return None
            return self._load(cur, [row])[0]

    def list_by_group_home(self, group_home_id: str) -> Sequence[Resident]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_RESIDENT_COLUMNS} FROM residents WHERE group_home_id=%s ORDER BY id",
                (str(group_home_id),),
            )
            return self._load(cur, fetchall(cur))

    def create(
        self,
        *,
        name: str,
        name_kana: str,
        disability_level: str,
        group_home_id: str,
        group_home_name: str,
        unit_name: str,
        room_number: str,
        move_in_date: Optional[date],
        move_out_date: Optional[date],
        status: str,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO residents(
                    name, name_kana, disability_level, group_home_id, group_home_name, unit_name,
                    room_number, move_in_date, move_out_date, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    name,
                    name_kana,
                    disability_level,
                    group_home_id,
                    group_home_name,
                    unit_name,
                    room_number,
                    move_in_date,
                    move_out_date,
                    status,
                ),
            )
            return int(cur.lastrowid)

    def update(
        self,
        resident_id: int,
        *,
        name: str,
        name_kana: str,
        disability_level: str,
        group_home_id: str,
        group_home_name: str,
        unit_name: str,
        room_number: str,
        move_in_date: Optional[date],
        move_out_date: Optional[date],
        status: str,
        disability_histories: Optional[Sequence[tuple[str, date, Optional[date]]]] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE residents
                SET name=%s, name_kana=%s, disability_level=%s, group_home_id=%s, group_home_name=%s,
                    unit_name=%s, room_number=%s, move_in_date=%s, move_out_date=%s, status=%s
                WHERE id=%s
                """,
                (
                    name,
                    name_kana,
                    disability_level,
                    group_home_id,
                    group_home_name,
                    unit_name,
                    room_number,
                    move_in_date,
                    move_out_date,
                    status,
                    resident_id,
                ),
            )
            updated = cur.rowcount > 0
            # Same transaction as the row update so a failure rolls back both.
            if disability_histories is not None:
                self._write_disability_histories(cur, resident_id, disability_histories)
            return updated

    def delete_by_id(self, resident_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM disability_histories WHERE resident_id=%s", (resident_id,))
            cur.execute("DELETE FROM residents WHERE id=%s", (resident_id,))
            return cur.rowcount > 0

    def get_disability_history(self, history_id: int) -> Optional[DisabilityHistory]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_HISTORY_COLUMNS} FROM disability_histories WHERE id=%s", (history_id,))
            row = fetchone(cur)
            return _row_to_history(row) if row else None

    def list_disability_histories(self, resident_id: int) -> Sequence[DisabilityHistory]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._histories_for(cur, [resident_id]).get(resident_id, [])

    def add_disability_history(
        self, *, resident_id: int, disability_level: str, start_date: date, end_date: Optional[date]
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO disability_histories(resident_id, disability_level, start_date, end_date)
                VALUES(%s,%s,%s,%s)
                """,
                (resident_id, disability_level, start_date, end_date),
            )
            return int(cur.lastrowid)

    def update_disability_history(
        self, history_id: int, *, disability_level: str, start_date: date, end_date: Optional[date]
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE disability_histories
                SET disability_level=%s, start_date=%s, end_date=%s
                WHERE id=%s
                """,
                (disability_level, start_date, end_date, history_id),
            )
            return cur.rowcount > 0

    def delete_disability_history(self, history_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM disability_histories WHERE id=%s", (history_id,))
            return cur.rowcount > 0

    def _write_disability_histories(
        self, cur, resident_id: int, entries: Sequence[tuple[str, date, Optional[date]]]
    ) -> None:
        cur.execute("DELETE FROM disability_histories WHERE resident_id=%s", (resident_id,))
        for level, start_date, end_date in entries:
            cur.execute(
                """
                INSERT INTO disability_histories(resident_id, disability_level, start_date, end_date)
                VALUES(%s,%s,%s,%s)
                """,
                (resident_id, level, start_date, end_date),
            )
