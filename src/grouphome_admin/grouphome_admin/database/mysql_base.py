from __future__ import annotations

import json
from contextlib import contextmanager
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Iterable, List, Optional

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def placeholders(values: Iterable[Any]) -> str:
    """`%s,%s,...` for an IN (...) clause."""
    return ",".join(["%s"] * len(list(values)))


def normalize_mysql_date(value: Any) -> Optional[date]:
    """DATE/DATETIME columns as `date`; zero dates and blanks become None."""

    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text or text.startswith("0000-00-00"):
        return None
    return datetime.strptime(text[:10], "%Y-%m-%d").date()


def normalize_mysql_time(value: Any) -> Optional[time]:
    """Normalize MySQL TIME values (time, timedelta or 'HH:MM[:SS]')."""

    if value is None:
        return None
    if isinstance(value, time):
        return value
    if isinstance(value, timedelta):
        total = int(value.total_seconds()) % 86400
        return time(hour=total // 3600, minute=(total % 3600) // 60, second=total % 60)
    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) < 2:
            raise ValueError(f"Invalid time string: {value!r}")
        seconds = int(parts[2]) if len(parts) >= 3 and parts[2] else 0
        return time(hour=int(parts[0]), minute=int(parts[1]), second=seconds)
    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")


def decode_json_list(value: Any) -> list:
    """JSON columns arrive as str, bytes or already-decoded lists."""

    if value is None or value == "":
        return []
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        value = json.loads(value)
    return list(value) if isinstance(value, (list, tuple)) else []


def encode_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)
