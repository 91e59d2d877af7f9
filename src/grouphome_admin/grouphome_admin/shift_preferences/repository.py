from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import GroupHomePreference, ShiftPreference


class ShiftPreferenceRepository(Protocol):
    def list_all(self) -> Sequence[ShiftPreference]:
        raise NotImplementedError

    def get_by_id(self, preference_id: int) -> Optional[ShiftPreference]:
        raise NotImplementedError

    def get_for_user_month(self, *, user_id: int, target_year: int, target_month: int) -> Optional[ShiftPreference]:
        raise NotImplementedError

    def create(
        self,
        *,
        user_id: int,
        user_name: str,
        target_year: int,
        target_month: int,
        preferences: Sequence[GroupHomePreference],
        notes: Optional[str],
    ) -> int:
        raise NotImplementedError

    def update_items(
        self, preference_id: int, *, preferences: Sequence[GroupHomePreference], notes: Optional[str]
    ) -> bool:
        raise NotImplementedError

    def delete_by_id(self, preference_id: int) -> bool:
        raise NotImplementedError

    def delete_by_user(self, user_id: int) -> int:
        raise NotImplementedError
