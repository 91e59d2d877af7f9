from __future__ import annotations

from datetime import date, time
from typing import Optional, Protocol, Sequence

from ..core.enums import ShiftType
from .model import AttendanceReport


class AttendanceReportRepository(Protocol):
    def list_all(self) -> Sequence[AttendanceReport]:
        raise NotImplementedError

    def get_by_id(self, report_id: int) -> Optional[AttendanceReport]:
        raise NotImplementedError

    def create(
        self,
        *,
        user_id: Optional[int],
        name: str,
        work_date: date,
        check_in: time,
        check_out: time,
        shift_type: ShiftType,
    ) -> int:
        raise NotImplementedError

    def delete_by_id(self, report_id: int) -> bool:
        raise NotImplementedError
