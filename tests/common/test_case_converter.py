from __future__ import annotations

from datetime import date, datetime, time

import pytest

from src.grouphome_admin.grouphome_admin.attendance.model import AttendanceReport
from src.grouphome_admin.grouphome_admin.common.case_converter import (
    camel_key_to_snake,
    camel_to_snake,
    normalize_payload,
    snake_key_to_camel,
    snake_to_camel,
)
from src.grouphome_admin.grouphome_admin.common.serialization import to_api, to_row
from src.grouphome_admin.grouphome_admin.core.enums import ExpansionType, ShiftType
from src.grouphome_admin.grouphome_admin.departments.model import Department
from src.grouphome_admin.grouphome_admin.group_homes.model import ExpansionRecord, GroupHome
from src.grouphome_admin.grouphome_admin.residents.model import DisabilityHistory, Resident
from src.grouphome_admin.grouphome_admin.roles.model import Permission, Role
from src.grouphome_admin.grouphome_admin.shift_preferences.model import GroupHomePreference, ShiftPreference
from src.grouphome_admin.grouphome_admin.usage_records.model import UsageRecord
from src.grouphome_admin.grouphome_admin.users.model import DepartmentHistory, User

CREATED = datetime(2025, 1, 2, 3, 4, 5)

ENTITIES = [
    User(
        id=1,
        name="管理者 太郎",
        email="admin@example.com",
        position="施設長",
        employee_id="EMP001",
        join_date=date(2020, 4, 1),
        role="admin",
        department="総務部",
        retirement_date=None,
        created_at=CREATED,
        department_history=(
            DepartmentHistory(id=1, user_id=1, department_name="総務部", start_date=date(2020, 4, 1)),
        ),
    ),
    Department(id=1, name="営業部", created_at=CREATED),
    Role(
        id=1,
        name="admin",
        display_name="管理者",
        description="システム全体の管理権限",
        permissions=(Permission("system.settings", "システム設定", "システム", "システム全体の設定"),),
        created_at=CREATED,
    ),
    GroupHome(
        id=1,
        property_name="ひまわり荘",
        unit_name="A棟",
        postal_code="123-4567",
        address="東京都",
        phone_number="03-1234-5678",
        common_room="共用室",
        resident_rooms=("101", "102"),
        opening_date=date(2022, 4, 1),
        facility_code="1310000001",
        created_at=CREATED,
    ),
    ExpansionRecord(
        id=1,
        property_name="ひまわり荘",
        unit_name="B棟",
        expansion_type=ExpansionType.NEW_UNIT,
        new_rooms=("201",),
        common_room="共用室B",
        start_date=date(2024, 4, 1),
        created_at=CREATED,
    ),
    Resident(
        id=1,
        name="山田 一郎",
        name_kana="やまだ いちろう",
        disability_level="3",
        group_home_id="1",
        group_home_name="ひまわり荘",
        unit_name="A棟",
        room_number="101",
        move_in_date=date(2023, 1, 1),
        move_out_date=None,
        created_at=CREATED,
        updated_at=CREATED,
        disability_history=(
            DisabilityHistory(id=1, resident_id=1, disability_level="3", start_date=date(2023, 1, 1)),
        ),
    ),
    ShiftPreference(
        id=1,
        user_id=2,
        user_name="職員 花子",
        target_year=2025,
        target_month=7,
        preferences=(GroupHomePreference(group_home_id=1, group_home_name="ひまわり荘", unit_name="A棟", desired_days=10),),
        notes="夜勤希望",
        created_at=CREATED,
        updated_at=CREATED,
    ),
    UsageRecord(id=1, resident_id=1, date=date(2025, 6, 1), is_used=True, disability_level="3", created_at=CREATED),
    AttendanceReport(
        id=1,
        user_id=2,
        name="職員 花子",
        work_date=date(2025, 6, 1),
        check_in=time(9, 0),
        check_out=time(18, 0),
        shift_type=ShiftType.REGULAR,
        created_at=CREATED,
    ),
]


@pytest.mark.parametrize("entity", ENTITIES, ids=lambda e: type(e).__name__)
def test_snake_camel_round_trip_is_lossless(entity):
    row = to_row(entity)
    api = to_api(entity)

    assert snake_to_camel(row) == api
    assert camel_to_snake(api) == row


def test_api_keys_are_camel_case():
    api = to_api(ENTITIES[5])

    assert "nameKana" in api and "moveOutDate" in api
    assert api["disabilityHistory"][0]["residentId"] == 1


@pytest.mark.parametrize(
    "snake,camel",
    [("employee_id", "employeeId"), ("move_out_date", "moveOutDate"), ("name", "name"), ("is_used", "isUsed")],
)
def test_key_converters(snake, camel):
    assert snake_key_to_camel(snake) == camel
    assert camel_key_to_snake(camel) == snake


def test_normalize_payload_accepts_both_styles_and_prefers_camel_case():
    payload = {"moveInDate": "2024-01-01", "room_number": "101", "name_kana": "old", "nameKana": "new"}

    assert normalize_payload(payload) == {"move_in_date": "2024-01-01", "room_number": "101", "name_kana": "new"}


def test_normalize_payload_converts_nested_history_items():
    payload = {"departmentHistory": [{"departmentName": "営業部", "startDate": "2024-01-01", "endDate": None}]}

    assert normalize_payload(payload)["department_history"] == [
        {"department_name": "営業部", "start_date": "2024-01-01", "end_date": None}
    ]


def test_normalize_payload_ignores_non_objects():
    assert normalize_payload(None) == {}
    assert normalize_payload(["a"]) == {}
