from __future__ import annotations

import calendar
from datetime import date, datetime, time
from typing import Any, Optional

from ..core.exceptions import ValidationError

# MySQL zero dates count as "no date".
_EMPTY_DATES = {"", "0000-00-00"}


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_optional_date(value: Any, field_name: str) -> Optional[date]:
    """Accept date/datetime/ISO string (date part only); blank means None."""

    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if text in _EMPTY_DATES:
        return None
    try:
        return parse_iso_date(text[:10])
    except ValueError:
        raise ValidationError(errors={field_name: "日付の形式が正しくありません（YYYY-MM-DD）"})


def parse_hhmm(value: Any, field_name: str) -> Optional[time]:
    if value is None or isinstance(value, time):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return datetime.strptime(text[:5], "%H:%M").time()
    except ValueError:
        raise ValidationError(errors={field_name: "時刻の形式が正しくありません（HH:MM）"})


def to_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def days_in_month(year: int, month: int) -> list[date]:
    last = calendar.monthrange(year, month)[1]
    return [date(year, month, day) for day in range(1, last + 1)]


def month_bounds(year: int, month: int) -> tuple[date, date]:
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def today_local() -> date:
    return now_local().date()
