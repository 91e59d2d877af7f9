from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class GroupHomePreference:
    group_home_id: int
    group_home_name: str
    unit_name: str
    desired_days: int


@dataclass(frozen=True)
class ShiftPreference:
    """One user's wishes for one month; at most one per (user, year, month)."""

    id: int
    user_id: int
    user_name: str
    target_year: int
    target_month: int
    preferences: tuple[GroupHomePreference, ...] = field(default_factory=tuple)
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def total_desired_days(self) -> int:
        return sum(p.desired_days for p in self.preferences)
