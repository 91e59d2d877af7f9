from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..common.intervals import current_entry
from ..common.serialization import to_api
from ..common.status import derive_status, status_mismatch


@dataclass(frozen=True)
class DepartmentHistory:
    id: int
    user_id: int
    department_name: str
    start_date: date
    end_date: Optional[date] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class User:
    """職員。

    `department` and `status` are the stored columns; what callers should show
    is `current_department()` and `derive_status(...)`.
    """

    id: int
    name: str
    email: str
    position: str
    employee_id: str
    join_date: Optional[date]
    role: str
    department: str = ""
    status: str = "active"
    retirement_date: Optional[date] = None
    created_at: Optional[datetime] = None
    department_history: tuple[DepartmentHistory, ...] = field(default_factory=tuple)

    def current_department(self) -> str:
        entry = current_entry(self.department_history)
        return entry.department_name if entry is not None else self.department

    def to_dict(self, *, now: date | datetime) -> dict:
        data = to_api(self)
        data["department"] = self.current_department()
        data["status"] = derive_status(self.retirement_date, now).value
        data["statusMismatch"] = status_mismatch(self.status, self.retirement_date, now)
        data["departmentHistory"] = to_api(
            sorted(self.department_history, key=lambda h: h.start_date, reverse=True)
        )
        return data
