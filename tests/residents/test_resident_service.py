from __future__ import annotations

from datetime import date

import pytest

from src.grouphome_admin.grouphome_admin.core.exceptions import NotFoundError, ValidationError


def _resident(group_home, **overrides):
    data = {
        "name": "山田 一郎",
        "name_kana": "やまだ いちろう",
        "disability_level": "3",
        "disability_start_date": "2023-01-01",
        "group_home_id": str(group_home.id),
        "room_number": "101",
        "move_in_date": "2022-05-01",
    }
    data.update(overrides)
    return data


def test_create_records_initial_open_history(container, group_home):
    r = container.resident_service.create_resident(_resident(group_home))

    assert r.group_home_name == "ひまわり荘"
    assert r.unit_name == "A棟"
    assert [(h.disability_level, h.start_date, h.end_date) for h in r.disability_history] == [
        ("3", date(2023, 1, 1), None)
    ]


def test_required_fields(container):
    with pytest.raises(ValidationError) as exc:
        container.resident_service.create_resident({})

    assert exc.value.errors == {
        "name": "名前を入力してください",
        "nameKana": "ふりがなを入力してください",
        "disabilityLevel": "障害支援区分を選択してください",
        "disabilityStartDate": "区分開始日を入力してください",
    }


def test_field_format_errors(container, group_home):
    with pytest.raises(ValidationError) as exc:
        container.resident_service.create_resident(
            _resident(
                group_home,
                name_kana="ヤマダ",
                disability_level="7",
                group_home_id="999",
                move_in_date="2024-05-01",
                move_out_date="2024-04-30",
            )
        )

    assert exc.value.errors == {
        "nameKana": "ふりがなはひらがなで入力してください",
        "disabilityLevel": "障害支援区分が正しくありません",
        "groupHomeId": "グループホームを選択してください",
        "moveOutDate": "退居日は入居日以降にしてください",
    }


def test_status_follows_move_out_date(container, group_home, fixed_now):
    svc = container.resident_service
    moved_out = svc.create_resident(_resident(group_home, move_out_date="2025-01-01"))
    living = svc.create_resident(_resident(group_home, name="佐藤 花", room_number="102"))

    assert moved_out.to_dict(now=fixed_now)["status"] == "inactive"
    assert living.to_dict(now=fixed_now)["status"] == "active"
    assert living.to_dict(now=fixed_now)["moveOutDate"] is None
    assert [r.id for r in svc.list_residents(status="inactive")] == [moved_out.id]


def test_move_out_today_is_inactive(container, group_home, fixed_now):
    r = container.resident_service.create_resident(_resident(group_home, move_out_date=fixed_now.date().isoformat()))

    assert r.to_dict(now=fixed_now)["status"] == "inactive"


def test_stale_stored_status_is_flagged_not_corrected(container, group_home, fixed_now):
    r = container.resident_service.create_resident(_resident(group_home, move_out_date="2025-01-01"))
    container.residents_repo.update(r.id, status="active")

    data = container.resident_service.get_resident(r.id).to_dict(now=fixed_now)

    assert data["status"] == "inactive"
    assert data["statusMismatch"] is True


def test_second_open_history_is_rejected(container, group_home):
    svc = container.resident_service
    r = svc.create_resident(_resident(group_home))

    with pytest.raises(ValidationError) as exc:
        svc.add_disability_history(r.id, {"disability_level": "4", "start_date": "2024-01-01"})

    assert exc.value.errors == {
        "startDate": "他の障害支援区分履歴と期間が重複しています",
        "endDate": "現在適用中の障害支援区分は1つまでです。他の履歴に終了日を設定してください。",
    }


def test_closing_and_opening_together_via_update(container, group_home):
    svc = container.resident_service
    r = svc.create_resident(_resident(group_home))

    updated = svc.update_resident(
        r.id,
        _resident(
            group_home,
            disability_level=None,
            disability_history=[
                {"disability_level": "3", "start_date": "2023-01-01", "end_date": "2023-12-31"},
                {"disability_level": "4", "start_date": "2024-01-01", "end_date": None},
            ],
        ),
    )

    assert updated.current_level() == "4"
    assert updated.disability_level == "4"
    assert updated.level_on(date(2023, 6, 1)) == "3"
    assert updated.level_on(date(2024, 5, 1)) == "4"
    assert updated.level_on(date(2022, 1, 1)) == "4"


def test_update_rejects_two_open_entries(container, group_home):
    svc = container.resident_service
    r = svc.create_resident(_resident(group_home))

    with pytest.raises(ValidationError) as exc:
        svc.update_resident(
            r.id,
            _resident(
                group_home,
                disability_history=[
                    {"disability_level": "3", "start_date": "2023-01-01"},
                    {"disability_level": "4", "start_date": "2024-01-01"},
                ],
            ),
        )

    assert "disabilityHistory" in exc.value.errors


def test_new_entry_must_start_after_latest_end(container, group_home):
    svc = container.resident_service
    r = svc.create_resident(_resident(group_home))
    svc.update_resident(
        r.id,
        _resident(
            group_home,
            disability_history=[{"disability_level": "3", "start_date": "2023-01-01", "end_date": "2024-03-31"}],
        ),
    )

    with pytest.raises(ValidationError) as exc:
        svc.add_disability_history(r.id, {"disability_level": "4", "start_date": "2024-03-01"})
    assert exc.value.errors["startDate"] == "開始日は最新履歴の終了日 2024-03-31 以降にしてください"

    added = svc.add_disability_history(r.id, {"disability_level": "4", "start_date": "2024-04-01"})
    assert added.end_date is None
    assert svc.get_resident(r.id).disability_level == "4"


def test_delete_history_resyncs_level(container, group_home):
    svc = container.resident_service
    r = svc.create_resident(_resident(group_home))
    svc.update_resident(
        r.id,
        _resident(
            group_home,
            disability_history=[
                {"disability_level": "3", "start_date": "2023-01-01", "end_date": "2023-12-31"},
                {"disability_level": "5", "start_date": "2024-01-01"},
            ],
        ),
    )
    open_entry = next(h for h in svc.list_disability_history(r.id) if h.end_date is None)

    svc.delete_disability_history(open_entry.id)

    assert [h.disability_level for h in svc.list_disability_history(r.id)] == ["3"]
    with pytest.raises(NotFoundError):
        svc.delete_disability_history(open_entry.id)


def test_statistics_and_occupancy(container, group_home):
    svc = container.resident_service
    svc.create_resident(_resident(group_home))
    svc.create_resident(_resident(group_home, name="佐藤 花", room_number="102"))
    svc.create_resident(_resident(group_home, name="鈴木 次郎", room_number="103", move_out_date="2025-01-01"))

    assert svc.statistics() == {
        "total": 3,
        "active": 2,
        "inactive": 1,
        "totalRooms": 3,
        "occupancyRate": 67,
    }


def test_list_filters(container, group_home):
    svc = container.resident_service
    a = svc.create_resident(_resident(group_home))
    svc.create_resident(_resident(group_home, name="佐藤 花", name_kana="さとう はな", disability_level="5"))
    svc.create_resident(_resident(group_home, name="無所属", name_kana="むしょぞく", group_home_id=""))

    assert [r.id for r in svc.list_residents(q="やまだ")] == [a.id]
    assert len(svc.list_residents(group_home_id=str(group_home.id))) == 2
    assert [r.name for r in svc.list_residents(disability_level="5")] == ["佐藤 花"]


def test_delete_removes_usage_records(container, group_home):
    r = container.resident_service.create_resident(_resident(group_home))
    container.usage_record_service.set_usage(resident_id=r.id, day="2025-05-02", is_used=True)

    container.resident_service.delete_resident(r.id)

    assert container.usage_records_repo.list_between(date(2025, 5, 1), date(2025, 5, 31)) == []
    with pytest.raises(NotFoundError):
        container.resident_service.get_resident(r.id)


def test_history_list_must_be_an_array(container, group_home):
    svc = container.resident_service
    r = svc.create_resident(_resident(group_home))

    with pytest.raises(ValidationError) as exc:
        svc.update_resident(r.id, _resident(group_home, disability_history={"disability_level": "4"}))

    assert exc.value.errors == {"disabilityHistory": "一覧の形式が正しくありません"}


def test_failed_resident_write_keeps_previous_history(container, group_home, monkeypatch):
    svc = container.resident_service
    r = svc.create_resident(_resident(group_home))

    def fail(*args, **kwargs):
        raise RuntimeError("connection lost")

    monkeypatch.setattr(container.residents_repo, "update", fail)

    with pytest.raises(RuntimeError):
        svc.update_resident(
            r.id,
            _resident(
                group_home,
                disability_history=[
                    {"disability_level": "3", "start_date": "2023-01-01", "end_date": "2023-12-31"},
                    {"disability_level": "4", "start_date": "2024-01-01"},
                ],
            ),
        )

    assert [(h.disability_level, h.end_date) for h in svc.list_disability_history(r.id)] == [("3", None)]
