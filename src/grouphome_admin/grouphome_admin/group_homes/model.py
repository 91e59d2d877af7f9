from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import ExpansionType

EXPANSION_KEY_PREFIX = "expansion_"


@dataclass(frozen=True)
class GroupHome:
    id: int
    property_name: str
    unit_name: str
    postal_code: str
    address: str
    phone_number: str
    common_room: str
    resident_rooms: tuple[str, ...] = field(default_factory=tuple)
    opening_date: Optional[date] = None
    facility_code: str = ""
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class ExpansionRecord:
    """増床記録: type A declares a new unit, type B adds rooms to one."""

    id: int
    property_name: str
    unit_name: str
    expansion_type: ExpansionType
    new_rooms: tuple[str, ...] = field(default_factory=tuple)
    common_room: Optional[str] = None
    start_date: Optional[date] = None
    facility_code: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class UnitOption:
    """One selectable unit: a group home row or a type-A expansion."""

    key: str
    property_name: str
    unit_name: str

    @property
    def label(self) -> str:
        return f"{self.property_name} - {self.unit_name}"

    @property
    def is_expansion(self) -> bool:
        return self.key.startswith(EXPANSION_KEY_PREFIX)
