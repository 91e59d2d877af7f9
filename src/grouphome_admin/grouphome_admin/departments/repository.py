from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Department


class DepartmentRepository(Protocol):
    def list_all(self) -> Sequence[Department]:
        raise NotImplementedError

    def get_by_id(self, department_id: int) -> Optional[Department]:
        raise NotImplementedError

    def get_by_name(self, name: str) -> Optional[Department]:
        raise NotImplementedError

    def create(self, *, name: str) -> int:
        raise NotImplementedError

    def update(self, department_id: int, *, name: str) -> bool:
        raise NotImplementedError

    def delete_by_id(self, department_id: int) -> bool:
        raise NotImplementedError
