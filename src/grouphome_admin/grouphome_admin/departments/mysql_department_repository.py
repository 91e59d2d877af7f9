from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Department
from .repository import DepartmentRepository


def _row_to_department(row: dict) -> Department:
    return Department(id=int(row["id"]), name=row["name"], created_at=row.get("created_at"))


class MySQLDepartmentRepository(DepartmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name, created_at FROM departments ORDER BY name")
            return [_row_to_department(r) for r in fetchall(cur)]

    def get_by_id(self, department_id: int) -> Optional[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name, created_at FROM departments WHERE id=%s", (department_id,))
            row = fetchone(cur)
            return _row_to_department(row) if row else None

    def get_by_name(self, name: str) -> Optional[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name, created_at FROM departments WHERE name=%s", (name,))
            row = fetchone(cur)
            return _row_to_department(row) if row else None

    def create(self, *, name: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("INSERT INTO departments(name) VALUES(%s)", (name,))
            return int(cur.lastrowid)

    def update(self, department_id: int, *, name: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE departments SET name=%s WHERE id=%s", (name, department_id))
            return cur.rowcount > 0

    def delete_by_id(self, department_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM departments WHERE id=%s", (department_id,))
            return cur.rowcount > 0
