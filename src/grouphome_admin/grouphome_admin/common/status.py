from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ..core.enums import EntityStatus
from .datetime_utils import to_date


def derive_status(terminal_date: Optional[date], now: date | datetime) -> EntityStatus:
    """Inactive once the move-out / retirement date has been reached.

    Pure: the caller supplies `now`. Datetimes compare by calendar date, so a
    terminal date equal to today is already inactive.
    """

    if terminal_date is not None and to_date(terminal_date) <= to_date(now):
        return EntityStatus.INACTIVE
    return EntityStatus.ACTIVE


def status_mismatch(stored: Optional[str], terminal_date: Optional[date], now: date | datetime) -> bool:
    """Stored status disagrees with the derived one (never auto-corrected)."""

    if not stored:
        return False
    return stored != derive_status(terminal_date, now).value
