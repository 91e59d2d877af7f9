"""Date-interval rules shared by department and disability histories.

An entry covers [start_date, end_date]; a missing end_date means the entry is
still current ("open"). Per owner at most one entry may be open and no two
entries may overlap.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable, Optional, Protocol, Sequence

from ..core.exceptions import ValidationError
from .datetime_utils import to_date, today_local
from .validators import FieldErrors


class DatedEntry(Protocol):
    id: Any
    start_date: Optional[date]
    end_date: Optional[date]


@dataclass(frozen=True)
class HistoryMessages:
    overlap: str
    multiple_open: str
    collection_field: str


DEPARTMENT_HISTORY_MESSAGES = HistoryMessages(
    overlap="他の部署履歴と期間が重複しています",
    multiple_open="現在所属中の部署は1つまでです。他の履歴に終了日を設定してください。",
    collection_field="departmentHistory",
)

DISABILITY_HISTORY_MESSAGES = HistoryMessages(
    overlap="他の障害支援区分履歴と期間が重複しています",
    multiple_open="現在適用中の障害支援区分は1つまでです。他の履歴に終了日を設定してください。",
    collection_field="disabilityHistory",
)


def intervals_conflict(
    new_start: date,
    new_end: Optional[date],
    existing_start: date,
    existing_end: Optional[date],
    *,
    now: Optional[date | datetime] = None,
) -> bool:
    """True when the two intervals cannot coexist for one owner."""

    if new_end is not None and existing_end is not None:
        return new_start <= existing_end and new_end >= existing_start
    if new_end is None and existing_end is None:
        return True
    if new_end is None:
        horizon = existing_end if existing_end is not None else to_date(now or today_local())
        return new_start <= horizon
    return new_end >= existing_start


def find_conflict(
    start: date,
    end: Optional[date],
    existing: Iterable[DatedEntry],
    *,
    exclude_id: Any = None,
    now: Optional[date | datetime] = None,
) -> Optional[DatedEntry]:
    for entry in existing:
        if entry.start_date is None:
            continue
        if exclude_id is not None and entry.id == exclude_id:
            continue
        if intervals_conflict(start, end, entry.start_date, entry.end_date, now=now):
            return entry
    return None


def latest_entry(entries: Iterable[DatedEntry]) -> Optional[DatedEntry]:
    dated = [e for e in entries if e.start_date is not None]
    if not dated:
        return None
    return max(dated, key=lambda e: e.start_date)


def open_entries(entries: Iterable[DatedEntry]) -> list[DatedEntry]:
    return [e for e in entries if e.end_date is None]


def current_entry(entries: Iterable[DatedEntry]) -> Optional[DatedEntry]:
    opened = open_entries(entries)
    return opened[0] if opened else None


def validate_history_entry(
    *,
    start_date: Optional[date],
    end_date: Optional[date],
    existing: Sequence[DatedEntry],
    messages: HistoryMessages,
    editing_id: Any = None,
    enforce_after_latest: bool = False,
    errors: Optional[FieldErrors] = None,
    now: Optional[date | datetime] = None,
) -> None:
    """Validate one added/edited entry against the owner's other entries.

    Raises ValidationError keyed by `startDate` / `endDate`. Pass an existing
    FieldErrors to merge with other form errors before raising.
    """

    errs = errors if errors is not None else FieldErrors()

    if start_date is None:
        errs.add("startDate", "開始日を入力してください")

    if start_date is not None and end_date is not None and end_date <= start_date:
        errs.add("endDate", "終了日は開始日より後にしてください")

    if start_date is not None:
        if find_conflict(start_date, end_date, existing, exclude_id=editing_id, now=now):
            errs.add("startDate", messages.overlap)

        if end_date is None:
            others_open = [e for e in open_entries(existing) if editing_id is None or e.id != editing_id]
            if others_open:
                errs.replace("endDate", messages.multiple_open)

        if enforce_after_latest and editing_id is None:
            latest = latest_entry(existing)
            if latest is not None and latest.end_date is not None and start_date < latest.end_date:
                errs.replace(
                    "startDate",
                    f"開始日は最新履歴の終了日 {latest.end_date.isoformat()} 以降にしてください",
                )

    if errors is None:
        errs.raise_if_any()


def validate_history_collection(
    entries: Sequence[DatedEntry],
    *,
    messages: HistoryMessages,
    now: Optional[date | datetime] = None,
) -> None:
    """Validate a whole history list submitted in one edit.

    This is how a previously open entry gets closed while a new open entry is
    added: the pair is checked together instead of one at a time.
    """

    for entry in entries:
        if entry.start_date is None:
            raise ValidationError(errors={messages.collection_field: "開始日を入力してください"})
        if entry.end_date is not None and entry.end_date <= entry.start_date:
            raise ValidationError(errors={messages.collection_field: "終了日は開始日より後にしてください"})

    if len(open_entries(entries)) > 1:
        raise ValidationError(errors={messages.collection_field: messages.multiple_open})

    for i, a in enumerate(entries):
        for b in entries[i + 1:]:
            if intervals_conflict(a.start_date, a.end_date, b.start_date, b.end_date, now=now):
                raise ValidationError(errors={messages.collection_field: messages.overlap})
