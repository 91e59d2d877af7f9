from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..core.enums import ShiftType


@dataclass(frozen=True)
class AttendanceReport:
    id: int
    user_id: Optional[int]
    name: str
    work_date: date
    check_in: time
    check_out: time
    shift_type: ShiftType
    created_at: Optional[datetime] = None

    @property
    def worked_minutes(self) -> int:
        return (self.check_out.hour * 60 + self.check_out.minute) - (self.check_in.hour * 60 + self.check_in.minute)
