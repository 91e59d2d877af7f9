from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import ExpansionType
from .model import ExpansionRecord, GroupHome


class GroupHomeRepository(Protocol):
    def list_all(self) -> Sequence[GroupHome]:
        raise NotImplementedError

    def get_by_id(self, group_home_id: int) -> Optional[GroupHome]:
        raise NotImplementedError

    def create(
        self,
        *,
        property_name: str,
        unit_name: str,
        postal_code: str,
        address: str,
        phone_number: str,
        common_room: str,
        resident_rooms: Sequence[str],
        opening_date: date,
        facility_code: str,
    ) -> int:
        raise NotImplementedError

    def update(
        self,
        group_home_id: int,
        *,
        property_name: str,
        unit_name: str,
        postal_code: str,
        address: str,
        phone_number: str,
        common_room: str,
        resident_rooms: Sequence[str],
        opening_date: date,
        facility_code: str,
    ) -> bool:
        raise NotImplementedError

    def delete_by_id(self, group_home_id: int) -> bool:
        raise NotImplementedError


class ExpansionRepository(Protocol):
    def list_all(self) -> Sequence[ExpansionRecord]:
        raise NotImplementedError

    def get_by_id(self, expansion_id: int) -> Optional[ExpansionRecord]:
        raise NotImplementedError

    def create(
        self,
        *,
        property_name: str,
        unit_name: str,
        expansion_type: ExpansionType,
        new_rooms: Sequence[str],
        common_room: Optional[str],
        start_date: date,
        facility_code: Optional[str],
    ) -> int:
        raise NotImplementedError

    def update(
        self,
        expansion_id: int,
        *,
        property_name: str,
        unit_name: str,
        expansion_type: ExpansionType,
        new_rooms: Sequence[str],
        common_room: Optional[str],
        start_date: date,
        facility_code: Optional[str],
    ) -> bool:
        raise NotImplementedError

    def delete_by_id(self, expansion_id: int) -> bool:
        raise NotImplementedError
