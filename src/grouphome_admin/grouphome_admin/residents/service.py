from __future__ import annotations

from datetime import date, datetime
from typing import Any, Callable, Mapping, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.intervals import (
    DISABILITY_HISTORY_MESSAGES,
    current_entry,
    validate_history_collection,
    validate_history_entry,
)
from ..common.sorting import percent
from ..common.status import derive_status
from ..common.validators import HIRAGANA_RE, FieldErrors, clean_text, read_date, read_list
from ..core.enums import DisabilityLevel, EntityStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..core.logging import get_logger
from ..group_homes.service import GroupHomeService
from .model import DisabilityHistory, Resident
from .repository import ResidentRepository

logger = get_logger(__name__)

_LEVELS = {lvl.value for lvl in DisabilityLevel}


def _read_level(errs: FieldErrors, value: Any, field: str) -> str:
    level = clean_text(value)
    if not level:
        errs.add(field, "障害支援区分を選択してください")
    elif level not in _LEVELS:
        errs.add(field, "障害支援区分が正しくありません")
    return level


class ResidentService:
    """Use case: residents (利用者) with disability-level history."""

    def __init__(
        self,
        residents: ResidentRepository,
        group_homes: GroupHomeService,
        usage_records=None,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._residents = residents
        self._group_homes = group_homes
        self._usage_records = usage_records
        self._clock = clock

    def now(self) -> datetime:
        return self._clock()

    def get_resident(self, resident_id: int) -> Resident:
        resident = self._residents.get_by_id(resident_id)
        if not resident:
            raise NotFoundError("利用者が見つかりません")
        return resident

    def list_residents(
        self,
        *,
        q: Optional[str] = None,
        group_home_id: Optional[str] = None,
        status: Optional[str] = None,
        disability_level: Optional[str] = None,
    ) -> list[Resident]:
        now = self.now()
        term = clean_text(q).lower()
        gh_key = clean_text(group_home_id)
        status = clean_text(status)
        level = clean_text(disability_level)

        out = []
        for r in self._residents.list_all():
            if term and not any(term in (v or "").lower() for v in (r.name, r.name_kana, r.room_number)):
                continue
            if gh_key and r.group_home_id != gh_key:
                continue
            if level and r.current_level() != level:
                continue
            if status and derive_status(r.move_out_date, now).value != status:
                continue
            out.append(r)
        return out

    def statistics(self) -> dict[str, Any]:
        now = self.now()
        residents = self._residents.list_all()
        active = sum(1 for r in residents if derive_status(r.move_out_date, now) == EntityStatus.ACTIVE)
        total_rooms = self._group_homes.total_rooms()
        return {
            "total": len(residents),
            "active": active,
            "inactive": len(residents) - active,
            "totalRooms": total_rooms,
            "occupancyRate": percent(active, total_rooms),
        }

    # ---- validation ----

    def _validate_resident(self, data: Mapping[str, Any], *, creating: bool, current: Optional[Resident] = None) -> dict:
        errs = FieldErrors()

        name = clean_text(data.get("name"))
        if not name:
            errs.add("name", "名前を入力してください")

        name_kana = clean_text(data.get("name_kana"))
        if not name_kana:
            errs.add("nameKana", "ふりがなを入力してください")
        elif not HIRAGANA_RE.match(name_kana):
            errs.add("nameKana", "ふりがなはひらがなで入力してください")

        raw_level = data.get("disability_level")
        if raw_level is None and current is not None:
            raw_level = current.disability_level
        level = _read_level(errs, raw_level, "disabilityLevel")

        disability_start_date = None
        if creating:
            disability_start_date = read_date(errs, data.get("disability_start_date"), "disabilityStartDate")
            if not errs.has("disabilityStartDate") and disability_start_date is None:
                errs.add("disabilityStartDate", "区分開始日を入力してください")

        unit_key = clean_text(data.get("group_home_id"))
        group_home_name = ""
        unit_name = ""
        if unit_key:
            unit = self._group_homes.resolve_unit(unit_key)
            if unit is None:
                errs.add("groupHomeId", "グループホームを選択してください")
            else:
                group_home_name, unit_name = unit.property_name, unit.unit_name

        move_in = read_date(errs, data.get("move_in_date"), "moveInDate")
        move_out = read_date(errs, data.get("move_out_date"), "moveOutDate")
        if move_in and move_out and move_out < move_in:
            errs.add("moveOutDate", "退居日は入居日以降にしてください")

        errs.raise_if_any()
        return {
            "name": name,
            "name_kana": name_kana,
            "disability_level": level,
            "disability_start_date": disability_start_date,
            "group_home_id": unit_key,
            "group_home_name": group_home_name,
            "unit_name": unit_name,
            "room_number": clean_text(data.get("room_number")),
            "move_in_date": move_in,
            "move_out_date": move_out,
        }

    def _parse_history_list(self, resident_id: int, raw: Sequence[Any]) -> list[DisabilityHistory]:
        entries: list[DisabilityHistory] = []
        list_errs = FieldErrors()
        items = read_list(list_errs, raw, "disabilityHistory")
        list_errs.raise_if_any()
        for i, item in enumerate(items):
            if not isinstance(item, Mapping):
                raise ValidationError(errors={"disabilityHistory": "障害支援区分履歴の形式が正しくありません"})
            errs = FieldErrors()
            level = _read_level(errs, item.get("disability_level"), "disabilityHistory")
            start = read_date(errs, item.get("start_date"), "disabilityHistory")
            end = read_date(errs, item.get("end_date"), "disabilityHistory")
            errs.raise_if_any()
            entries.append(
                DisabilityHistory(id=i, resident_id=resident_id, disability_level=level, start_date=start, end_date=end)
            )
        validate_history_collection(entries, messages=DISABILITY_HISTORY_MESSAGES, now=self.now())
        return entries

    def _row_fields(self, v: Mapping[str, Any], *, level: str) -> dict[str, Any]:
        return {
            "name": v["name"],
            "name_kana": v["name_kana"],
            "disability_level": level,
            "group_home_id": v["group_home_id"],
            "group_home_name": v["group_home_name"],
            "unit_name": v["unit_name"],
            "room_number": v["room_number"],
            "move_in_date": v["move_in_date"],
            "move_out_date": v["move_out_date"],
            "status": derive_status(v["move_out_date"], self.now()).value,
        }

    # ---- commands ----

    def create_resident(self, data: Mapping[str, Any]) -> Resident:
        v = self._validate_resident(data, creating=True)
        resident_id = self._residents.create(**self._row_fields(v, level=v["disability_level"]))
        self._residents.add_disability_history(
            resident_id=resident_id,
            disability_level=v["disability_level"],
            start_date=v["disability_start_date"],
            end_date=None,
        )
        logger.info("resident created: id=%s unit=%s", resident_id, v["group_home_id"] or "-")
        return self.get_resident(resident_id)

    def update_resident(self, resident_id: int, data: Mapping[str, Any]) -> Resident:
        resident = self.get_resident(resident_id)
        v = self._validate_resident(data, creating=False, current=resident)

        level = v["disability_level"]
        histories = None
        raw_history = data.get("disability_history")
        if raw_history is not None:
            entries = self._parse_history_list(resident.id, raw_history)
            histories = [(e.disability_level, e.start_date, e.end_date) for e in entries]
            current = current_entry(entries)
            if current is not None:
                level = current.disability_level
        elif current_entry(resident.disability_history) is not None:
            level = resident.current_level()

        self._residents.update(
            resident.id, disability_histories=histories, **self._row_fields(v, level=level)
        )
        logger.info("resident updated: id=%s", resident.id)
        return self.get_resident(resident.id)

    def delete_resident(self, resident_id: int) -> None:
        resident = self.get_resident(resident_id)
        if self._usage_records is not None:
            self._usage_records.delete_by_resident(resident.id)
        self._residents.delete_by_id(resident.id)
        logger.info("resident deleted: id=%s", resident.id)

    # ---- disability history ----

    def list_disability_history(self, resident_id: int) -> list[DisabilityHistory]:
        self.get_resident(resident_id)
        return sorted(
            self._residents.list_disability_histories(resident_id), key=lambda h: h.start_date, reverse=True
        )

    def _validate_history(
        self, resident_id: int, data: Mapping[str, Any], *, editing_id: Optional[int] = None
    ) -> tuple[str, date, Optional[date]]:
        errs = FieldErrors()
        level = _read_level(errs, data.get("disability_level"), "disabilityLevel")
        start = read_date(errs, data.get("start_date"), "startDate")
        end = read_date(errs, data.get("end_date"), "endDate")
        validate_history_entry(
            start_date=start,
            end_date=end,
            existing=self._residents.list_disability_histories(resident_id),
            messages=DISABILITY_HISTORY_MESSAGES,
            editing_id=editing_id,
            enforce_after_latest=True,
            errors=errs,
            now=self.now(),
        )
        errs.raise_if_any()
        return level, start, end

    def _sync_current_level(self, resident_id: int) -> None:
        resident = self.get_resident(resident_id)
        level = resident.current_level()
        if level != resident.disability_level:
            self._residents.update(
                resident.id,
                name=resident.name,
                name_kana=resident.name_kana,
                disability_level=level,
                group_home_id=resident.group_home_id,
                group_home_name=resident.group_home_name,
                unit_name=resident.unit_name,
                room_number=resident.room_number,
                move_in_date=resident.move_in_date,
                move_out_date=resident.move_out_date,
                status=derive_status(resident.move_out_date, self.now()).value,
            )

    def add_disability_history(self, resident_id: int, data: Mapping[str, Any]) -> DisabilityHistory:
        self.get_resident(resident_id)
        level, start, end = self._validate_history(resident_id, data)
        history_id = self._residents.add_disability_history(
            resident_id=resident_id, disability_level=level, start_date=start, end_date=end
        )
        self._sync_current_level(resident_id)
        logger.info("disability history added: resident=%s level=%s from %s", resident_id, level, start)
        return self._residents.get_disability_history(history_id)

    def update_disability_history(self, history_id: int, data: Mapping[str, Any]) -> DisabilityHistory:
        history = self._residents.get_disability_history(history_id)
        if not history:
            raise NotFoundError("障害支援区分履歴が見つかりません")
        level, start, end = self._validate_history(history.resident_id, data, editing_id=history.id)
        self._residents.update_disability_history(history.id, disability_level=level, start_date=start, end_date=end)
        self._sync_current_level(history.resident_id)
        return self._residents.get_disability_history(history.id)

    def delete_disability_history(self, history_id: int) -> None:
        history = self._residents.get_disability_history(history_id)
        if not history:
            raise NotFoundError("障害支援区分履歴が見つかりません")
        self._residents.delete_disability_history(history.id)
        self._sync_current_level(history.resident_id)
