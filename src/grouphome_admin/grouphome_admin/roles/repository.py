from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Role


class RoleRepository(Protocol):
    def list_all(self) -> Sequence[Role]:
        raise NotImplementedError

    def get_by_id(self, role_id: int) -> Optional[Role]:
        raise NotImplementedError

    def get_by_name(self, name: str) -> Optional[Role]:
        raise NotImplementedError

    def create(self, *, name: str, display_name: str, description: str, permissions: Sequence[str]) -> int:
        raise NotImplementedError

    def update(
        self, role_id: int, *, name: str, display_name: str, description: str, permissions: Sequence[str]
    ) -> bool:
        raise NotImplementedError

    def delete_by_id(self, role_id: int) -> bool:
        raise NotImplementedError
