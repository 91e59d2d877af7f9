from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_date, placeholders
from .model import DepartmentHistory, User
from .repository import UserRepository

_USER_COLUMNS = """
    id, name, email, position, employee_id, join_date, retirement_date,
    status, role, department, created_at
"""

_HISTORY_COLUMNS = "id, user_id, department_name, start_date, end_date, created_at"


def _row_to_history(row: dict) -> DepartmentHistory:
    return DepartmentHistory(
        id=int(row["id"]),
        user_id=int(row["user_id"]),
        department_name=row["department_name"],
        start_date=normalize_mysql_date(row["start_date"]),
        end_date=normalize_mysql_date(row.get("end_date")),
        created_at=row.get("created_at"),
    )


def _row_to_user(row: dict, histories: Sequence[DepartmentHistory]) -> User:
    return User(
        id=int(row["id"]),
        name=row["name"],
        email=row.get("email") or "",
        position=row.get("position") or "",
        employee_id=row.get("employee_id") or "",
        join_date=normalize_mysql_date(row.get("join_date")),
        retirement_date=normalize_mysql_date(row.get("retirement_date")),
        status=row.get("status") or "active",
        role=row.get("role") or "",
        department=row.get("department") or "",
        created_at=row.get("created_at"),
        department_history=tuple(histories),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _histories_for(self, cur, user_ids: Sequence[int]) -> dict[int, list[DepartmentHistory]]:
        grouped: dict[int, list[DepartmentHistory]] = defaultdict(list)
        if not user_ids:
            return grouped
        cur.execute(
            f"""
            SELECT {_HISTORY_COLUMNS}
            FROM department_histories
            WHERE user_id IN ({placeholders(user_ids)})
            ORDER BY start_date DESC, id DESC
            """,
            tuple(user_ids),
        )
        for r in fetchall(cur):
            h = _row_to_history(r)
            grouped[h.user_id].append(h)
        return grouped

    def list_all(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users ORDER BY id")
            rows = fetchall(cur)
            histories = self._histories_for(cur, [int(r["id"]) for r in rows])
            return [_row_to_user(r, histories.get(int(r["id"]), [])) for r in rows]

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE id=%s", (user_id,))
            row = fetchone(cur)
            if not row:
                return None
            histories = self._histories_for(cur, [int(row["id"])])
            return _row_to_user(row, histories.get(int(row["id"]), []))

    def create_user(
        self,
        *,
        name: str,
        email: str,
        position: str,
        employee_id: str,
        join_date: Optional[date],
        retirement_date: Optional[date],
        role: str,
        department: str,
        status: str,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(name, email, position, employee_id, join_date, retirement_date, role, department, status)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (name, email, position, employee_id, join_date, retirement_date, role, department, status),
            )
            return int(cur.lastrowid)

    def update_user(
        self,
        user_id: int,
        *,
        name: str,
        email: str,
        position: str,
        employee_id: str,
        join_date: Optional[date],
        retirement_date: Optional[date],
        role: str,
        department: str,
        status: str,
        department_histories: Optional[Sequence[tuple[str, date, Optional[date]]]] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE users
                SET name=%s, email=%s, position=%s, employee_id=%s, join_date=%s,
                    retirement_date=%s, role=%s, department=%s, status=%s
                WHERE id=%s
                """,
                (name, email, position, employee_id, join_date, retirement_date, role, department, status, user_id),
            )
            updated = cur.rowcount > 0
            # Same transaction as the row update so a failure rolls back both.
            if department_histories is not None:
                self._write_department_histories(cur, user_id, department_histories)
            return updated

    def delete_by_id(self, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM department_histories WHERE user_id=%s", (user_id,))
            cur.execute("DELETE FROM users WHERE id=%s", (user_id,))
            return cur.rowcount > 0

    def count_by_role(self, role: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS cnt FROM users WHERE role=%s", (role,))
            row = fetchone(cur)
            return int(row["cnt"]) if row else 0

    def count_by_department(self, department_name: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COUNT(DISTINCT u.id) AS cnt
                FROM users u
                LEFT JOIN department_histories h ON h.user_id = u.id
                WHERE u.department=%s OR h.department_name=%s
                """,
                (department_name, department_name),
            )
            row = fetchone(cur)
            return int(row["cnt"]) if row else 0

    def rename_department(self, old_name: str, new_name: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET department=%s WHERE department=%s", (new_name, old_name))
            cur.execute(
                "UPDATE department_histories SET department_name=%s WHERE department_name=%s",
                (new_name, old_name),
            )

    def get_department_history(self, history_id: int) -> Optional[DepartmentHistory]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_HISTORY_COLUMNS} FROM department_histories WHERE id=%s", (history_id,))
            row = fetchone(cur)
            return _row_to_history(row) if row else None

    def list_department_histories(self, user_id: int) -> Sequence[DepartmentHistory]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._histories_for(cur, [user_id]).get(user_id, [])

    def add_department_history(
        self, *, user_id: int, department_name: str, start_date: date, end_date: Optional[date]
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO department_histories(user_id, department_name, start_date, end_date)
                VALUES(%s,%s,%s,%s)
                """,
                (user_id, department_name, start_date, end_date),
            )
            return int(cur.lastrowid)

    def update_department_history(
        self, history_id: int, *, department_name: str, start_date: date, end_date: Optional[date]
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE department_histories
                SET department_name=%s, start_date=%s, end_date=%s
                WHERE id=%s
                """,
                (department_name, start_date, end_date, history_id),
            )
            return cur.rowcount > 0

    def delete_department_history(self, history_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM department_histories WHERE id=%s", (history_id,))
            return cur.rowcount > 0

    def _write_department_histories(
        self, cur, user_id: int, entries: Sequence[tuple[str, date, Optional[date]]]
    ) -> None:
        cur.execute("DELETE FROM department_histories WHERE user_id=%s", (user_id,))
        for department_name, start_date, end_date in entries:
            cur.execute(
                """
                INSERT INTO department_histories(user_id, department_name, start_date, end_date)
                VALUES(%s,%s,%s,%s)
                """,
                (user_id, department_name, start_date, end_date),
            )
