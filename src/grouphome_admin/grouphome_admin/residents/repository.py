from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import DisabilityHistory, Resident


class ResidentRepository(Protocol):
    """Residents together with their disability-level history."""

    def list_all(self) -> Sequence[Resident]:
        raise NotImplementedError

    def get_by_id(self, resident_id: int) -> Optional[Resident]:
        raise NotImplementedError

    def list_by_group_home(self, group_home_id: str) -> Sequence[Resident]:
        raise NotImplementedError

    def create(
        self,
        *,
        name: str,
        name_kana: str,
        disability_level: str,
        group_home_id: str,
        group_home_name: str,
        unit_name: str,
        room_number: str,
        move_in_date: Optional[date],
        move_out_date: Optional[date],
        status: str,
    ) -> int:
        raise NotImplementedError

    def update(
        self,
        resident_id: int,
        *,
        name: str,
        name_kana: str,
        disability_level: str,
        group_home_id: str,
        group_home_name: str,
        unit_name: str,
        room_number: str,
        move_in_date: Optional[date],
        move_out_date: Optional[date],
        status: str,
        disability_histories: Optional[Sequence[tuple[str, date, Optional[date]]]] = None,
    ) -> bool:
        raise NotImplementedError

    def delete_by_id(self, resident_id: int) -> bool:
        raise NotImplementedError

    def get_disability_history(self, history_id: int) -> Optional[DisabilityHistory]:
        raise NotImplementedError

    def list_disability_histories(self, resident_id: int) -> Sequence[DisabilityHistory]:
        raise NotImplementedError

    def add_disability_history(
        self, *, resident_id: int, disability_level: str, start_date: date, end_date: Optional[date]
    ) -> int:
        raise NotImplementedError

    def update_disability_history(
        self, history_id: int, *, disability_level: str, start_date: date, end_date: Optional[date]
    ) -> bool:
        raise NotImplementedError

    def delete_disability_history(self, history_id: int) -> bool:
        raise NotImplementedError
