from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

import mysql.connector

from ..auth.permissions import default_roles
from ..core.logging import get_logger
from .mysql_base import encode_json

logger = get_logger(__name__)

SQL_DIR = Path(__file__).resolve().parents[4] / "database"
SCHEMA_PATH = SQL_DIR / "schema.sql"
SEED_PATH = SQL_DIR / "seed.sql"


@dataclass(frozen=True)
class DBTarget:
    host: str
    port: int
    user: str
    password: str
    database: str

    def describe(self) -> str:
        return f"{self.user}@{self.host}:{self.port}/{self.database}"


def as_target(db_config: dict) -> DBTarget:
    return DBTarget(
        host=str(db_config.get("host", "localhost")),
        port=int(db_config.get("port", 3306)),
        user=str(db_config.get("user", "root")),
        password=str(db_config.get("password", "")),
        database=str(db_config.get("database", "grouphome_db")),
    )


def _connect(target: DBTarget, *, with_database: bool = True):
    kwargs = dict(host=target.host, port=target.port, user=target.user, password=target.password, use_pure=True)
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _strip_create_db_and_use(sql: str) -> str:
    # schema.sql may name a database; the configured one wins.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_line_comments(sql: str) -> str:
    return "\n".join(line for line in sql.splitlines() if not line.lstrip().startswith("--"))


def iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a script on `;`, ignoring semicolons inside quoted strings."""

    buf: list[str] = []
    quote = ""
    escape = False

    for ch in _strip_line_comments(sql):
        buf.append(ch)
        if escape:
            escape = False
            continue
        if ch == "\\":
            escape = True
            continue
        if quote:
            if ch == quote:
                quote = ""
            continue
        if ch in ("'", '"'):
            quote = ch
            continue
        if ch == ";":
            stmt = "".join(buf[:-1]).strip()
            buf.clear()
            if stmt:
                yield stmt

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _run_script(target: DBTarget, sql: str) -> int:
    conn = _connect(target)
    count = 0
    try:
        cur = conn.cursor()
        for stmt in iter_sql_statements(_strip_create_db_and_use(sql)):
            cur.execute(stmt)
            count += 1
        conn.commit()
    finally:
        conn.close()
    return count


def ensure_database_exists(db_config: dict) -> None:
    target = as_target(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path = SCHEMA_PATH) -> None:
    ensure_database_exists(db_config)
    target = as_target(db_config)
    count = _run_script(target, Path(schema_path).read_text(encoding="utf-8"))
    logger.info("schema applied to %s (%d statements)", target.describe(), count)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path = SEED_PATH) -> None:
    target = as_target(db_config)
    count = _run_script(target, Path(seed_path).read_text(encoding="utf-8"))
    logger.info("seed applied to %s (%d statements)", target.describe(), count)


def ensure_default_roles(db_config: dict) -> None:
    """Insert the system roles, or reset their permissions if they drifted."""

    target = as_target(db_config)
    conn = _connect(target)
    try:
        cur = conn.cursor()
        for role in default_roles():
            cur.execute(
                """
                INSERT INTO roles (name, display_name, description, permissions)
                VALUES (%s, %s, %s, %s)
                ON DUPLICATE KEY UPDATE
                    display_name=VALUES(display_name),
                    description=VALUES(description),
                    permissions=VALUES(permissions)
                """,
                (role.name, role.display_name, role.description, encode_json(list(role.permission_names))),
            )
        conn.commit()
    finally:
        conn.close()
    logger.info("system roles ensured on %s", target.describe())


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(as_target(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
