from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import DepartmentHistory, User


class UserRepository(Protocol):
    """Users together with their department history."""

    def list_all(self) -> Sequence[User]:
        raise NotImplementedError

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def create_user(
        self,
        *,
        name: str,
        email: str,
        position: str,
        employee_id: str,
        join_date: Optional[date],
        retirement_date: Optional[date],
        role: str,
        department: str,
        status: str,
    ) -> int:
        raise NotImplementedError

    def update_user(
        self,
        user_id: int,
        *,
        name: str,
        email: str,
        position: str,
        employee_id: str,
        join_date: Optional[date],
        retirement_date: Optional[date],
        role: str,
        department: str,
        status: str,
        department_histories: Optional[Sequence[tuple[str, date, Optional[date]]]] = None,
    ) -> bool:
        raise NotImplementedError

    def delete_by_id(self, user_id: int) -> bool:
        raise NotImplementedError

    def count_by_role(self, role: str) -> int:
        raise NotImplementedError

    def count_by_department(self, department_name: str) -> int:
        raise NotImplementedError

    def rename_department(self, old_name: str, new_name: str) -> None:
        raise NotImplementedError

    def get_department_history(self, history_id: int) -> Optional[DepartmentHistory]:
        raise NotImplementedError

    def list_department_histories(self, user_id: int) -> Sequence[DepartmentHistory]:
        raise NotImplementedError

    def add_department_history(
        self, *, user_id: int, department_name: str, start_date: date, end_date: Optional[date]
    ) -> int:
        raise NotImplementedError

    def update_department_history(
        self, history_id: int, *, department_name: str, start_date: date, end_date: Optional[date]
    ) -> bool:
        raise NotImplementedError

    def delete_department_history(self, history_id: int) -> bool:
        raise NotImplementedError
