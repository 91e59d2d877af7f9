from __future__ import annotations

from collections import OrderedDict
from datetime import date
from typing import Any, Optional, Sequence

from ..common.datetime_utils import days_in_month, month_bounds, parse_optional_date
from ..common.sorting import room_sort_key
from ..common.validators import clean_text
from ..core.enums import DisabilityLevel
from ..core.exceptions import NotFoundError, ValidationError
from ..core.logging import get_logger
from ..residents.model import Resident
from ..residents.repository import ResidentRepository
from .model import UsageRecord
from .repository import UsageRecordRepository

logger = get_logger(__name__)

LEVEL_ORDER = [lvl.value for lvl in DisabilityLevel]


def residents_active_in_month(residents: Sequence[Resident], year: int, month: int) -> list[Resident]:
    first, last = month_bounds(year, month)
    return [r for r in residents if r.active_during(first, last)]


def group_key(resident: Resident) -> str:
    return f"{resident.group_home_name}-{resident.unit_name}"


def group_residents(residents: Sequence[Resident]) -> "OrderedDict[str, list[Resident]]":
    """Bucket by `groupHomeName-unitName`; rooms in numeric order, groups by key."""

    grouped: dict[str, list[Resident]] = {}
    for r in residents:
        grouped.setdefault(group_key(r), []).append(r)
    out: "OrderedDict[str, list[Resident]]" = OrderedDict()
    for key in sorted(grouped):
        out[key] = sorted(grouped[key], key=lambda r: room_sort_key(r.room_number))
    return out


def summarize_records(records: Sequence[UsageRecord]) -> dict[str, Any]:
    by_level: dict[str, int] = {}
    total = 0
    for rec in records:
        if not rec.is_used:
            continue
        total += 1
        by_level[rec.disability_level] = by_level.get(rec.disability_level, 0) + 1
    ordered = {lvl: by_level[lvl] for lvl in LEVEL_ORDER if lvl in by_level}
    ordered.update({k: v for k, v in by_level.items() if k not in ordered})
    return {"totalDays": total, "usageByLevel": ordered}


class UsageRecordService:
    """Use case: daily usage grid (利用実績) per month."""

    def __init__(self, records: UsageRecordRepository, residents: ResidentRepository):
        self._records = records
        self._residents = residents

    def _validate_month(self, year: Any, month: Any) -> tuple[int, int]:
        try:
            y, m = int(year), int(month)
        except (TypeError, ValueError):
            raise ValidationError(errors={"month": "対象年月を指定してください"})
        if not 1 <= m <= 12:
            raise ValidationError(errors={"month": "対象月は1〜12で入力してください"})
        return y, m

    def _month_records(self, year: int, month: int) -> dict[tuple[int, date], UsageRecord]:
        first, last = month_bounds(year, month)
        return {(r.resident_id, r.date): r for r in self._records.list_between(first, last)}

    def month_grid(self, year: Any, month: Any, *, group_home_id: Optional[str] = None) -> dict[str, Any]:
        y, m = self._validate_month(year, month)
        residents = residents_active_in_month(self._residents.list_all(), y, m)
        key = clean_text(group_home_id)
        if key:
            residents = [r for r in residents if r.group_home_id == key]

        records = self._month_records(y, m)
        days = days_in_month(y, m)

        groups = []
        all_records: list[UsageRecord] = []
        for unit_key, members in group_residents(residents).items():
            rows = []
            for r in members:
                cells = []
                mine = []
                for d in days:
                    rec = records.get((r.id, d))
                    level = rec.disability_level if rec else r.level_on(d)
                    cells.append({"date": d.isoformat(), "isUsed": bool(rec and rec.is_used), "disabilityLevel": level})
                    if rec:
                        mine.append(rec)
                all_records.extend(mine)
                rows.append(
                    {
                        "residentId": r.id,
                        "name": r.name,
                        "roomNumber": r.room_number,
                        "days": cells,
                        "summary": summarize_records(mine),
                    }
                )
            first = members[0]
            groups.append(
                {
                    "key": unit_key,
                    "groupHomeName": first.group_home_name,
                    "unitName": first.unit_name,
                    "residents": rows,
                }
            )

        return {
            "year": y,
            "month": m,
            "days": [d.isoformat() for d in days],
            "groups": groups,
            "summary": summarize_records(all_records),
        }

    def set_usage(self, *, resident_id: Any, day: Any, is_used: Optional[bool] = None) -> UsageRecord:
        """Upsert one cell; with `is_used` omitted the stored value is flipped."""

        resident = self._residents.get_by_id(int(resident_id)) if str(resident_id or "").isdigit() else None
        if resident is None:
            raise NotFoundError("利用者が見つかりません")
        d = parse_optional_date(day, "date")
        if d is None:
            raise ValidationError(errors={"date": "日付を入力してください"})

        if is_used is None:
            current = self._records.get_for(resident_id=resident.id, day=d)
            is_used = not (current.is_used if current else False)

        level = resident.level_on(d)
        self._records.upsert(resident_id=resident.id, day=d, is_used=bool(is_used), disability_level=level)
        logger.info("usage set: resident=%s %s used=%s level=%s", resident.id, d.isoformat(), is_used, level)
        return self._records.get_for(resident_id=resident.id, day=d)

    def monthly_summary(self, year: Any, month: Any) -> dict[str, Any]:
        y, m = self._validate_month(year, month)
        records = list(self._month_records(y, m).values())
        per_resident = {}
        for rec in records:
            per_resident.setdefault(rec.resident_id, []).append(rec)
        return {
            "year": y,
            "month": m,
            **summarize_records(records),
            "residents": [
                {"residentId": rid, **summarize_records(recs)} for rid, recs in sorted(per_resident.items())
            ],
        }

    def export_rows(self, year: Any, month: Any) -> tuple[list[str], list[dict[str, Any]]]:
        """Flatten the month grid for CSV: one row per resident, one column per day."""

        grid = self.month_grid(year, month)
        fieldnames = ["unit", "room_number", "name", *grid["days"], "total_days"]
        rows = []
        for group in grid["groups"]:
            for r in group["residents"]:
                row = {"unit": group["key"], "room_number": r["roomNumber"], "name": r["name"]}
                for cell in r["days"]:
                    row[cell["date"]] = cell["disabilityLevel"] if cell["isUsed"] else ""
                row["total_days"] = r["summary"]["totalDays"]
                rows.append(row)
        return fieldnames, rows
