from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

from ..users.model import User
from .permissions import DEFAULT_ROLE_TABLE, evaluate_guard, has_any_permission, has_permission


@dataclass(frozen=True)
class AuthContext:
    """Who is acting, and what their role allows. Built once per request."""

    user: Optional[User]
    role_table: Mapping[str, frozenset] = field(default_factory=lambda: DEFAULT_ROLE_TABLE)

    @property
    def user_id(self) -> Optional[int]:
        return self.user.id if self.user is not None else None

    @property
    def role(self) -> Optional[str]:
        return self.user.role if self.user is not None else None

    def has_permission(self, permission: str) -> bool:
        return has_permission(self.role_table, self.role, permission)

    def has_any_permission(self, permissions: Iterable[str]) -> bool:
        return has_any_permission(self.role_table, self.role, permissions)

    def allows(self, *, permission: Optional[str] = None, permissions=(), require_all: bool = False) -> bool:
        return evaluate_guard(
            self.role_table, self.role, permission=permission, permissions=permissions, require_all=require_all
        )

    def permissions(self) -> list[str]:
        if not self.role:
            return []
        return sorted(self.role_table.get(self.role, frozenset()))


ANONYMOUS = AuthContext(user=None)
