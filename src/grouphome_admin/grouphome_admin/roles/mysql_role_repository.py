from __future__ import annotations

from typing import Optional, Sequence

from ..auth.permissions import resolve_permissions
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, decode_json_list, encode_json, fetchall, fetchone
from .model import Role
from .repository import RoleRepository

_COLUMNS = "id, name, display_name, description, permissions, created_at"


def _row_to_role(row: dict) -> Role:
    return Role(
        id=int(row["id"]),
        name=row["name"],
        display_name=row.get("display_name") or row["name"],
        description=row.get("description") or "",
        permissions=resolve_permissions(decode_json_list(row.get("permissions"))),
        created_at=row.get("created_at"),
    )


class MySQLRoleRepository(RoleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Role]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM roles ORDER BY id")
            return [_row_to_role(r) for r in fetchall(cur)]

    def get_by_id(self, role_id: int) -> Optional[Role]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM roles WHERE id=%s", (role_id,))
            row = fetchone(cur)
            return _row_to_role(row) if row else None

    def get_by_name(self, name: str) -> Optional[Role]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM roles WHERE name=%s", (name,))
            row = fetchone(cur)
            return _row_to_role(row) if row else None

    def create(self, *, name: str, display_name: str, description: str, permissions: Sequence[str]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO roles(name, display_name, description, permissions) VALUES(%s,%s,%s,%s)",
                (name, display_name, description, encode_json(list(permissions))),
            )
            return int(cur.lastrowid)

    def update(
        self, role_id: int, *, name: str, display_name: str, description: str, permissions: Sequence[str]
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE roles
                SET name=%s, display_name=%s, description=%s, permissions=%s
                WHERE id=%s
                """,
                (name, display_name, description, encode_json(list(permissions)), role_id),
            )
            return cur.rowcount > 0

    def delete_by_id(self, role_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM roles WHERE id=%s", (role_id,))
            return cur.rowcount > 0
