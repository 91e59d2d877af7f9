from __future__ import annotations

from datetime import date

import pytest

from src.grouphome_admin.grouphome_admin.core.enums import ExpansionType
from src.grouphome_admin.grouphome_admin.core.exceptions import NotFoundError, ValidationError
from src.grouphome_admin.grouphome_admin.shift_preferences.model import GroupHomePreference


def _expansion(**overrides):
    data = {
        "property_name": "ひまわり荘",
        "unit_name": "B棟",
        "expansion_type": "A",
        "new_rooms": ["201", "", "202"],
        "common_room": "共用室B",
        "start_date": "2024-04-01",
    }
    data.update(overrides)
    return data


def test_create_drops_blank_rooms(container):
    gh = container.group_home_service.create_group_home(
        {
            "property_name": "さくら荘",
            "unit_name": "1F",
            "postal_code": "1234567",
            "address": "大阪府",
            "phone_number": "06-0000-0000",
            "resident_rooms": ["101", " ", "102"],
            "opening_date": "2023-01-01",
        }
    )

    assert gh.resident_rooms == ("101", "102")
    assert gh.opening_date == date(2023, 1, 1)


def test_group_home_validation(container):
    with pytest.raises(ValidationError) as exc:
        container.group_home_service.create_group_home(
            {"postal_code": "12-345", "phone_number": "03(1234)5678", "resident_rooms": [""]}
        )

    assert exc.value.errors == {
        "propertyName": "物件名を入力してください",
        "unitName": "ユニット名を入力してください",
        "postalCode": "正しい郵便番号を入力してください（例：123-4567）",
        "address": "所在地を入力してください",
        "phoneNumber": "正しい電話番号を入力してください",
        "openingDate": "開所日を入力してください",
        "residentRooms": "少なくとも1つの居室を入力してください",
    }


def test_list_filters(container, group_home):
    svc = container.group_home_service

    assert svc.list_group_homes(q="ひまわり") == [group_home]
    assert svc.list_group_homes(address="練馬") == [group_home]
    assert svc.list_group_homes(address="大阪") == []


def test_type_a_requires_common_room_and_type_b_clears_it(container):
    svc = container.group_home_service

    with pytest.raises(ValidationError) as exc:
        svc.create_expansion(_expansion(common_room=""))
    assert exc.value.errors == {"commonRoom": "共用室を入力してください"}

    b = svc.create_expansion(_expansion(expansion_type="B", unit_name="A棟", common_room="ignored"))
    assert b.expansion_type == ExpansionType.ADD_ROOMS
    assert b.common_room is None
    assert b.new_rooms == ("201", "202")


def test_expansion_validation(container):
    with pytest.raises(ValidationError) as exc:
        container.group_home_service.create_expansion({"expansion_type": "C", "new_rooms": []})

    assert exc.value.errors == {
        "expansionType": "増床タイプを選択してください",
        "propertyName": "物件名を選択してください",
        "unitName": "ユニット名を入力してください",
        "startDate": "開始日を入力してください",
        "commonRoom": "共用室を入力してください",
        "newRooms": "少なくとも1つの居室を入力してください",
    }


def test_expansions_match_property_case_insensitively(container, group_home):
    svc = container.group_home_service
    svc.create_expansion(_expansion(property_name=" ひまわり荘 "))
    svc.create_expansion(_expansion(property_name="Sakura"))

    assert len(svc.expansions_for(group_home)) == 1
    assert len(svc.list_expansions(property_name="sakura ")) == 1


def test_units_and_unit_catalogue(container, group_home):
    svc = container.group_home_service
    a = svc.create_expansion(_expansion())
    svc.create_expansion(_expansion(expansion_type="B", unit_name="C棟"))
    svc.create_expansion(_expansion(unit_name="A棟"))

    assert svc.units_for_property("ひまわり荘") == ["A棟", "B棟"]

    catalogue = svc.unit_catalogue()
    assert [(u.key, u.label) for u in catalogue] == [
        (str(group_home.id), "ひまわり荘 - A棟"),
        (f"expansion_{a.id}", "ひまわり荘 - B棟"),
    ]
    assert catalogue[1].is_expansion


def test_available_rooms_merge_and_sort_naturally(container, group_home):
    svc = container.group_home_service
    svc.create_expansion(_expansion(expansion_type="B", unit_name="A棟", new_rooms=["1001", "99", "101"]))

    assert svc.available_rooms("ひまわり荘", "A棟") == ["99", "101", "102", "103", "1001"]


def test_statistics(container, group_home):
    container.group_home_service.create_expansion(_expansion())

    assert container.group_home_service.statistics() == {
        "facilityCount": 1,
        "expansionCount": 1,
        "baseRooms": 3,
        "expansionRooms": 2,
        "totalRooms": 5,
    }


def test_delete_cascades_residents_usage_and_shift_preferences(container, group_home, demo_users):
    other = container.group_home_service.create_group_home(
        {
            "property_name": "さくら荘",
            "unit_name": "1F",
            "postal_code": "123-4567",
            "address": "大阪府",
            "phone_number": "06-0000-0000",
            "resident_rooms": ["1"],
            "opening_date": "2023-01-01",
        }
    )
    resident = container.resident_service.create_resident(
        {
            "name": "山田 一郎",
            "name_kana": "やまだ いちろう",
            "disability_level": "3",
            "disability_start_date": "2024-01-01",
            "group_home_id": str(group_home.id),
            "room_number": "101",
        }
    )
    container.usage_record_service.set_usage(resident_id=resident.id, day="2025-05-01", is_used=True)

    staff = demo_users["staff"]
    prefs = container.shift_preferences_repo
    only_here = prefs.create(
        user_id=staff.id,
        user_name=staff.name,
        target_year=2025,
        target_month=7,
        preferences=[GroupHomePreference(group_home.id, "ひまわり荘", "A棟", 5)],
        notes=None,
    )
    mixed = prefs.create(
        user_id=staff.id,
        user_name=staff.name,
        target_year=2025,
        target_month=8,
        preferences=[
            GroupHomePreference(group_home.id, "ひまわり荘", "A棟", 5),
            GroupHomePreference(other.id, "さくら荘", "1F", 3),
        ],
        notes="メモ",
    )

    container.group_home_service.delete_group_home(group_home.id)

    with pytest.raises(NotFoundError):
        container.group_home_service.get_group_home(group_home.id)
    assert container.residents_repo.get_by_id(resident.id) is None
    assert container.usage_records_repo.list_between(date(2025, 5, 1), date(2025, 5, 31)) == []
    assert prefs.get_by_id(only_here) is None
    kept = prefs.get_by_id(mixed)
    assert [p.group_home_id for p in kept.preferences] == [other.id]
    assert kept.notes == "メモ"


@pytest.mark.parametrize("rooms", ["101", 5, {"room": "101"}])
def test_rooms_must_be_an_array(container, rooms):
    with pytest.raises(ValidationError) as exc:
        container.group_home_service.create_group_home(
            {
                "property_name": "さくら荘",
                "unit_name": "1F",
                "postal_code": "1234567",
                "address": "大阪府",
                "phone_number": "06-0000-0000",
                "resident_rooms": rooms,
                "opening_date": "2023-01-01",
            }
        )

    assert exc.value.errors == {"residentRooms": "一覧の形式が正しくありません"}


def test_expansion_rooms_must_be_an_array(container):
    with pytest.raises(ValidationError) as exc:
        container.group_home_service.create_expansion(_expansion(new_rooms="201"))

    assert exc.value.errors == {"newRooms": "一覧の形式が正しくありません"}
