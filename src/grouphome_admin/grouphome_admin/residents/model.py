from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..common.intervals import current_entry
from ..common.serialization import to_api
from ..common.status import derive_status, status_mismatch


@dataclass(frozen=True)
class DisabilityHistory:
    id: int
    resident_id: int
    disability_level: str
    start_date: date
    end_date: Optional[date] = None
    created_at: Optional[datetime] = None

    def covers(self, day: date) -> bool:
        return self.start_date <= day and (self.end_date is None or day <= self.end_date)


@dataclass(frozen=True)
class Resident:
    """利用者。`group_home_id` is a unit key (group home id or `expansion_<id>`)."""

    id: int
    name: str
    name_kana: str
    disability_level: str
    group_home_id: str = ""
    group_home_name: str = ""
    unit_name: str = ""
    room_number: str = ""
    move_in_date: Optional[date] = None
    move_out_date: Optional[date] = None
    status: str = "active"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    disability_history: tuple[DisabilityHistory, ...] = field(default_factory=tuple)

    def current_level(self) -> str:
        entry = current_entry(self.disability_history)
        return entry.disability_level if entry is not None else self.disability_level

    def level_on(self, day: date) -> str:
        """Level in effect on `day`.

        The entry covering the day wins; otherwise the latest entry that had
        started by then; otherwise the current level.
        """

        for h in self.disability_history:
            if h.start_date is not None and h.covers(day):
                return h.disability_level
        started = [h for h in self.disability_history if h.start_date is not None and h.start_date <= day]
        if started:
            return max(started, key=lambda h: h.start_date).disability_level
        return self.current_level()

    def active_during(self, first: date, last: date) -> bool:
        if self.move_in_date is not None and self.move_in_date > last:
            return False
        if self.move_out_date is not None and self.move_out_date < first:
            return False
        return True

    def to_dict(self, *, now: date | datetime) -> dict:
        data = to_api(self)
        data["disabilityLevel"] = self.current_level()
        data["status"] = derive_status(self.move_out_date, now).value
        data["statusMismatch"] = status_mismatch(self.status, self.move_out_date, now)
        data["disabilityHistory"] = to_api(
            sorted(self.disability_history, key=lambda h: h.start_date, reverse=True)
        )
        return data
