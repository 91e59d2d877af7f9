from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

import pytest

from src.grouphome_admin.grouphome_admin.common.intervals import (
    DEPARTMENT_HISTORY_MESSAGES,
    DISABILITY_HISTORY_MESSAGES,
    find_conflict,
    intervals_conflict,
    validate_history_collection,
    validate_history_entry,
)
from src.grouphome_admin.grouphome_admin.core.exceptions import ValidationError

NOW = date(2025, 6, 1)


@dataclass(frozen=True)
class Entry:
    id: int
    start_date: Optional[date]
    end_date: Optional[date] = None


@pytest.mark.parametrize(
    "new_start,new_end,ex_start,ex_end,expected",
    [
        # both closed
        (date(2024, 1, 1), date(2024, 3, 31), date(2024, 4, 1), date(2024, 6, 30), False),
        (date(2024, 1, 1), date(2024, 4, 1), date(2024, 4, 1), date(2024, 6, 30), True),
        (date(2024, 5, 1), date(2024, 5, 31), date(2024, 4, 1), date(2024, 6, 30), True),
        (date(2024, 7, 1), date(2024, 7, 31), date(2024, 4, 1), date(2024, 6, 30), False),
        # both open
        (date(2030, 1, 1), None, date(2020, 1, 1), None, True),
        # candidate open, existing closed
        (date(2024, 7, 1), None, date(2024, 4, 1), date(2024, 6, 30), False),
        (date(2024, 6, 30), None, date(2024, 4, 1), date(2024, 6, 30), True),
        # existing open, candidate closed
        (date(2023, 1, 1), date(2023, 12, 31), date(2024, 1, 1), None, False),
        (date(2023, 1, 1), date(2024, 1, 1), date(2024, 1, 1), None, True),
    ],
)
def test_intervals_conflict_truth_table(new_start, new_end, ex_start, ex_end, expected):
    assert intervals_conflict(new_start, new_end, ex_start, ex_end, now=NOW) is expected


def test_find_conflict_skips_the_entry_being_edited():
    existing = [Entry(1, date(2024, 1, 1), date(2024, 12, 31))]

    assert find_conflict(date(2024, 6, 1), None, existing, now=NOW) is existing[0]
    assert find_conflict(date(2024, 6, 1), None, existing, exclude_id=1, now=NOW) is None


def test_overlap_is_reported_on_start_date():
    existing = [Entry(1, date(2024, 1, 1), date(2024, 12, 31))]

    with pytest.raises(ValidationError) as exc:
        validate_history_entry(
            start_date=date(2024, 6, 1),
            end_date=date(2024, 8, 1),
            existing=existing,
            messages=DEPARTMENT_HISTORY_MESSAGES,
            now=NOW,
        )

    assert exc.value.errors == {"startDate": DEPARTMENT_HISTORY_MESSAGES.overlap}


def test_second_open_entry_is_rejected_on_end_date():
    existing = [Entry(1, date(2020, 1, 1), date(2023, 12, 31)), Entry(2, date(2024, 1, 1), None)]

    with pytest.raises(ValidationError) as exc:
        validate_history_entry(
            start_date=date(2026, 1, 1),
            end_date=None,
            existing=existing,
            messages=DEPARTMENT_HISTORY_MESSAGES,
            now=NOW,
        )

    assert exc.value.errors["endDate"] == DEPARTMENT_HISTORY_MESSAGES.multiple_open


def test_editing_the_open_entry_itself_is_allowed():
    existing = [Entry(1, date(2020, 1, 1), date(2023, 12, 31)), Entry(2, date(2024, 1, 1), None)]

    validate_history_entry(
        start_date=date(2024, 2, 1),
        end_date=None,
        existing=existing,
        messages=DEPARTMENT_HISTORY_MESSAGES,
        editing_id=2,
        now=NOW,
    )


def test_start_date_is_required_and_end_must_follow_start():
    with pytest.raises(ValidationError) as exc:
        validate_history_entry(
            start_date=None, end_date=None, existing=[], messages=DEPARTMENT_HISTORY_MESSAGES, now=NOW
        )
    assert exc.value.errors == {"startDate": "開始日を入力してください"}

    with pytest.raises(ValidationError) as exc:
        validate_history_entry(
            start_date=date(2024, 5, 1),
            end_date=date(2024, 5, 1),
            existing=[],
            messages=DEPARTMENT_HISTORY_MESSAGES,
            now=NOW,
        )
    assert exc.value.errors == {"endDate": "終了日は開始日より後にしてください"}


def test_disability_open_entry_after_open_2023_entry_is_rejected():
    existing = [Entry(1, date(2023, 1, 1), None)]

    with pytest.raises(ValidationError) as exc:
        validate_history_entry(
            start_date=date(2024, 1, 1),
            end_date=None,
            existing=existing,
            messages=DISABILITY_HISTORY_MESSAGES,
            enforce_after_latest=True,
            now=NOW,
        )

    assert exc.value.errors["startDate"] == DISABILITY_HISTORY_MESSAGES.overlap
    assert exc.value.errors["endDate"] == DISABILITY_HISTORY_MESSAGES.multiple_open


def test_disability_new_entry_must_start_after_latest_end():
    existing = [Entry(1, date(2023, 1, 1), date(2023, 12, 31))]

    with pytest.raises(ValidationError) as exc:
        validate_history_entry(
            start_date=date(2022, 1, 1),
            end_date=date(2022, 6, 30),
            existing=existing,
            messages=DISABILITY_HISTORY_MESSAGES,
            enforce_after_latest=True,
            now=NOW,
        )

    assert exc.value.errors["startDate"] == "開始日は最新履歴の終了日 2023-12-31 以降にしてください"


def test_errors_merge_into_caller_collector_without_raising():
    from src.grouphome_admin.grouphome_admin.common.validators import FieldErrors

    errs = FieldErrors()
    errs.add("departmentName", "部署を選択してください")
    validate_history_entry(
        start_date=None, end_date=None, existing=[], messages=DEPARTMENT_HISTORY_MESSAGES, errors=errs, now=NOW
    )

    assert errs.has("departmentName") and errs.has("startDate")


def test_collection_allows_closing_the_old_entry_while_adding_a_new_open_one():
    entries = [Entry(0, date(2023, 1, 1), date(2023, 12, 31)), Entry(1, date(2024, 1, 1), None)]

    validate_history_collection(entries, messages=DISABILITY_HISTORY_MESSAGES, now=NOW)


def test_collection_rejects_two_open_entries():
    entries = [Entry(0, date(2023, 1, 1), None), Entry(1, date(2024, 1, 1), None)]

    with pytest.raises(ValidationError) as exc:
        validate_history_collection(entries, messages=DISABILITY_HISTORY_MESSAGES, now=NOW)

    assert exc.value.errors == {"disabilityHistory": DISABILITY_HISTORY_MESSAGES.multiple_open}


def test_collection_rejects_overlapping_closed_entries():
    entries = [Entry(0, date(2023, 1, 1), date(2023, 12, 31)), Entry(1, date(2023, 6, 1), date(2024, 5, 31))]

    with pytest.raises(ValidationError) as exc:
        validate_history_collection(entries, messages=DEPARTMENT_HISTORY_MESSAGES, now=NOW)

    assert exc.value.errors == {"departmentHistory": DEPARTMENT_HISTORY_MESSAGES.overlap}
