from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import SYSTEM_ROLE_NAMES


@dataclass(frozen=True)
class Permission:
    name: str
    display_name: str
    category: str
    description: str

    @property
    def id(self) -> str:
        return self.name


@dataclass(frozen=True)
class Role:
    id: int
    name: str
    display_name: str
    description: str
    permissions: tuple[Permission, ...] = field(default_factory=tuple)
    created_at: Optional[datetime] = None

    @property
    def is_system(self) -> bool:
        return self.name in SYSTEM_ROLE_NAMES

    @property
    def permission_names(self) -> frozenset[str]:
        return frozenset(p.name for p in self.permissions)
