from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class UsageRecord:
    """利用実績: one resident, one day, tagged with the level in effect that day."""

    id: int
    resident_id: int
    date: date
    is_used: bool
    disability_level: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
