from __future__ import annotations

from typing import Any, Mapping, Optional

from ..common.sorting import natural_key
from ..common.validators import PHONE_RE, POSTAL_CODE_RE, FieldErrors, clean_rooms, clean_text, read_date, read_list
from ..core.enums import ExpansionType
from ..core.exceptions import NotFoundError
from ..core.logging import get_logger
from .model import EXPANSION_KEY_PREFIX, ExpansionRecord, GroupHome, UnitOption
from .repository import ExpansionRepository, GroupHomeRepository

logger = get_logger(__name__)


def _same_property(a: str, b: str) -> bool:
    return clean_text(a).lower() == clean_text(b).lower()


class GroupHomeService:
    """Use case: group homes (物件/ユニット) and their expansion records."""

    def __init__(
        self,
        group_homes: GroupHomeRepository,
        expansions: ExpansionRepository,
        residents=None,
        usage_records=None,
        shift_preferences=None,
    ):
        self._group_homes = group_homes
        self._expansions = expansions
        self._residents = residents
        self._usage_records = usage_records
        self._shift_preferences = shift_preferences

    # ---- group homes ----

    def list_group_homes(self, *, q: Optional[str] = None, address: Optional[str] = None) -> list[GroupHome]:
        term = clean_text(q).lower()
        addr = clean_text(address).lower()
        out = []
        for gh in self._group_homes.list_all():
            if term and not any(term in v.lower() for v in (gh.property_name, gh.unit_name, gh.address)):
                continue
            if addr and addr not in gh.address.lower():
                continue
            out.append(gh)
        return out

    def get_group_home(self, group_home_id: int) -> GroupHome:
        gh = self._group_homes.get_by_id(group_home_id)
        if not gh:
            raise NotFoundError("グループホームが見つかりません")
        return gh

    def _validate_group_home(self, data: Mapping[str, Any]) -> dict[str, Any]:
        errs = FieldErrors()
        property_name = clean_text(data.get("property_name"))
        unit_name = clean_text(data.get("unit_name"))
        postal_code = clean_text(data.get("postal_code"))
        address = clean_text(data.get("address"))
        phone_number = clean_text(data.get("phone_number"))
        rooms = clean_rooms(read_list(errs, data.get("resident_rooms"), "residentRooms"))

        if not property_name:
            errs.add("propertyName", "物件名を入力してください")
        if not unit_name:
            errs.add("unitName", "ユニット名を入力してください")
        if not postal_code:
            errs.add("postalCode", "郵便番号を入力してください")
        elif not POSTAL_CODE_RE.match(postal_code):
            errs.add("postalCode", "正しい郵便番号を入力してください（例：123-4567）")
        if not address:
            errs.add("address", "所在地を入力してください")
        if not phone_number:
            errs.add("phoneNumber", "電話番号を入力してください")
        elif not PHONE_RE.match(phone_number):
            errs.add("phoneNumber", "正しい電話番号を入力してください")
        opening_date = read_date(errs, data.get("opening_date"), "openingDate")
        if not errs.has("openingDate") and opening_date is None:
            errs.add("openingDate", "開所日を入力してください")
        if not rooms:
            errs.add("residentRooms", "少なくとも1つの居室を入力してください")

        errs.raise_if_any()
        return {
            "property_name": property_name,
            "unit_name": unit_name,
            "postal_code": postal_code,
            "address": address,
            "phone_number": phone_number,
            "common_room": clean_text(data.get("common_room")),
            "resident_rooms": rooms,
            "opening_date": opening_date,
            "facility_code": clean_text(data.get("facility_code")),
        }

    def create_group_home(self, data: Mapping[str, Any]) -> GroupHome:
        v = self._validate_group_home(data)
        gh_id = self._group_homes.create(**v)
        logger.info("group home created: %s %s (%d rooms)", v["property_name"], v["unit_name"], len(v["resident_rooms"]))
        return self.get_group_home(gh_id)

    def update_group_home(self, group_home_id: int, data: Mapping[str, Any]) -> GroupHome:
        gh = self.get_group_home(group_home_id)
        v = self._validate_group_home(data)
        self._group_homes.update(gh.id, **v)
        return self.get_group_home(gh.id)

    def delete_group_home(self, group_home_id: int) -> None:
        """Delete and cascade: its residents (with usage records) and shift wishes."""

        gh = self.get_group_home(group_home_id)

        removed_residents = 0
        if self._residents is not None:
            for resident in self._residents.list_by_group_home(str(gh.id)):
                if self._usage_records is not None:
                    self._usage_records.delete_by_resident(resident.id)
                self._residents.delete_by_id(resident.id)
                removed_residents += 1

        if self._shift_preferences is not None:
            for pref in self._shift_preferences.list_all():
                kept = [p for p in pref.preferences if p.group_home_id != gh.id]
                if len(kept) == len(pref.preferences):
                    continue
                if kept:
                    self._shift_preferences.update_items(pref.id, preferences=kept, notes=pref.notes)
                else:
                    self._shift_preferences.delete_by_id(pref.id)

        self._group_homes.delete_by_id(gh.id)
        logger.info("group home deleted: id=%s (residents removed: %d)", gh.id, removed_residents)

    # ---- expansions ----

    def list_expansions(self, *, property_name: Optional[str] = None) -> list[ExpansionRecord]:
        items = list(self._expansions.list_all())
        if clean_text(property_name):
            items = [e for e in items if _same_property(e.property_name, property_name)]
        return items

    def expansions_for(self, group_home: GroupHome) -> list[ExpansionRecord]:
        return self.list_expansions(property_name=group_home.property_name)

    def get_expansion(self, expansion_id: int) -> ExpansionRecord:
        exp = self._expansions.get_by_id(expansion_id)
        if not exp:
            raise NotFoundError("増床記録が見つかりません")
        return exp

    def _validate_expansion(self, data: Mapping[str, Any]) -> dict[str, Any]:
        errs = FieldErrors()
        property_name = clean_text(data.get("property_name"))
        unit_name = clean_text(data.get("unit_name"))
        common_room = clean_text(data.get("common_room"))
        rooms = clean_rooms(read_list(errs, data.get("new_rooms"), "newRooms"))

        try:
            expansion_type = ExpansionType(clean_text(data.get("expansion_type")) or ExpansionType.NEW_UNIT.value)
        except ValueError:
            errs.add("expansionType", "増床タイプを選択してください")
            expansion_type = ExpansionType.NEW_UNIT

        if not property_name:
            errs.add("propertyName", "物件名を選択してください")
        if not unit_name:
            errs.add("unitName", "ユニット名を入力してください")
        start_date = read_date(errs, data.get("start_date"), "startDate")
        if not errs.has("startDate") and start_date is None:
            errs.add("startDate", "開始日を入力してください")
        if expansion_type == ExpansionType.NEW_UNIT and not common_room:
            errs.add("commonRoom", "共用室を入力してください")
        if not rooms:
            errs.add("newRooms", "少なくとも1つの居室を入力してください")

        errs.raise_if_any()
        return {
            "property_name": property_name,
            "unit_name": unit_name,
            "expansion_type": expansion_type,
            "new_rooms": rooms,
            "common_room": common_room if expansion_type == ExpansionType.NEW_UNIT else None,
            "start_date": start_date,
            "facility_code": clean_text(data.get("facility_code")) or None,
        }

    def create_expansion(self, data: Mapping[str, Any]) -> ExpansionRecord:
        v = self._validate_expansion(data)
        exp_id = self._expansions.create(**v)
        logger.info("expansion created: %s %s type=%s", v["property_name"], v["unit_name"], v["expansion_type"].value)
        return self.get_expansion(exp_id)

    def update_expansion(self, expansion_id: int, data: Mapping[str, Any]) -> ExpansionRecord:
        exp = self.get_expansion(expansion_id)
        v = self._validate_expansion(data)
        self._expansions.update(exp.id, **v)
        return self.get_expansion(exp.id)

    def delete_expansion(self, expansion_id: int) -> None:
        exp = self.get_expansion(expansion_id)
        self._expansions.delete_by_id(exp.id)
        logger.info("expansion deleted: id=%s", exp.id)

    # ---- units / rooms ----

    def property_names(self) -> list[str]:
        return sorted({gh.property_name for gh in self._group_homes.list_all()})

    def units_for_property(self, property_name: str) -> list[str]:
        units = {gh.unit_name for gh in self._group_homes.list_all() if gh.property_name == property_name}
        units |= {
            e.unit_name
            for e in self._expansions.list_all()
            if e.expansion_type == ExpansionType.NEW_UNIT and e.property_name == property_name
        }
        return sorted(units)

    def unit_catalogue(self) -> list[UnitOption]:
        """Group homes keyed by id, plus type-A units not already present."""

        units: dict[str, UnitOption] = {}
        for gh in self._group_homes.list_all():
            units.setdefault(
                f"{gh.property_name}-{gh.unit_name}",
                UnitOption(key=str(gh.id), property_name=gh.property_name, unit_name=gh.unit_name),
            )
        for e in self._expansions.list_all():
            if e.expansion_type != ExpansionType.NEW_UNIT:
                continue
            units.setdefault(
                f"{e.property_name}-{e.unit_name}",
                UnitOption(key=f"{EXPANSION_KEY_PREFIX}{e.id}", property_name=e.property_name, unit_name=e.unit_name),
            )
        return sorted(units.values(), key=lambda u: (u.property_name, u.unit_name))

    def resolve_unit(self, key: Any) -> Optional[UnitOption]:
        key_s = clean_text(key)
        if not key_s:
            return None
        for unit in self.unit_catalogue():
            if unit.key == key_s:
                return unit
        # A group home hidden by a same-named earlier row is still addressable by id.
        if key_s.isdigit():
            gh = self._group_homes.get_by_id(int(key_s))
            if gh:
                return UnitOption(key=str(gh.id), property_name=gh.property_name, unit_name=gh.unit_name)
        return None

    def available_rooms(self, property_name: str, unit_name: str) -> list[str]:
        rooms: set[str] = set()
        for gh in self._group_homes.list_all():
            if gh.property_name == property_name and gh.unit_name == unit_name:
                rooms.update(gh.resident_rooms)
        for e in self._expansions.list_all():
            if e.property_name == property_name and e.unit_name == unit_name:
                rooms.update(e.new_rooms)
        return sorted(rooms, key=natural_key)

    def total_rooms(self) -> int:
        base = sum(len(gh.resident_rooms) for gh in self._group_homes.list_all())
        added = sum(len(e.new_rooms) for e in self._expansions.list_all())
        return base + added

    def statistics(self) -> dict[str, int]:
        homes = self._group_homes.list_all()
        expansions = self._expansions.list_all()
        base = sum(len(gh.resident_rooms) for gh in homes)
        added = sum(len(e.new_rooms) for e in expansions)
        return {
            "facilityCount": len(homes),
            "expansionCount": len(expansions),
            "baseRooms": base,
            "expansionRooms": added,
            "totalRooms": base + added,
        }
