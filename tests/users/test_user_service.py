from __future__ import annotations

from datetime import date

import pytest

from src.grouphome_admin.grouphome_admin.core.exceptions import NotFoundError, ValidationError
from src.grouphome_admin.grouphome_admin.shift_preferences.model import GroupHomePreference


def _payload(**overrides):
    data = {
        "name": "新人 三郎",
        "email": "saburo@example.com",
        "position": "世話人",
        "employee_id": "EMP010",
        "join_date": "2024-04-01",
        "role": "staff",
        "department": "開発部",
        "department_start_date": "2024-04-01",
    }
    data.update(overrides)
    return data


def test_create_builds_initial_open_history(container):
    user = container.user_service.create_user(_payload())

    assert user.current_department() == "開発部"
    assert len(user.department_history) == 1
    assert user.department_history[0].end_date is None
    assert user.department_history[0].start_date == date(2024, 4, 1)
    assert user.status == "active"


def test_create_validation_messages(container):
    with pytest.raises(ValidationError) as exc:
        container.user_service.create_user(
            {"email": "not-an-email", "role": "ghost", "join_date": "2024-13-01"}
        )

    assert exc.value.errors == {
        "name": "名前を入力してください",
        "email": "有効なメールアドレスを入力してください",
        "department": "初期部署を選択してください",
        "joinDate": "日付の形式が正しくありません（YYYY-MM-DD）",
        "role": "存在しないロールです",
        "departmentStartDate": "部署開始日を入力してください",
    }


def test_retirement_must_follow_join_date(container):
    with pytest.raises(ValidationError) as exc:
        container.user_service.create_user(_payload(retirement_date="2024-04-01"))

    assert exc.value.errors == {"retirementDate": "退職日は入社日より後にしてください"}


def test_stored_status_follows_retirement_date(container, fixed_now):
    user = container.user_service.create_user(_payload(retirement_date="2025-05-31"))

    assert user.status == "inactive"
    assert user.to_dict(now=fixed_now)["statusMismatch"] is False


def test_mismatch_is_flagged_and_filterable(container, demo_users, fixed_now):
    staff = demo_users["staff"]
    container.users_repo.update_user(
        staff.id,
        name=staff.name,
        email=staff.email,
        position=staff.position,
        employee_id=staff.employee_id,
        join_date=staff.join_date,
        retirement_date=date(2025, 1, 1),
        role=staff.role,
        department=staff.department,
        status="active",
    )

    svc = container.user_service
    mismatched = svc.list_users(status="mismatch")

    assert [u.id for u in mismatched] == [staff.id]
    assert mismatched[0].to_dict(now=fixed_now)["status"] == "inactive"
    assert mismatched[0].to_dict(now=fixed_now)["statusMismatch"] is True
    assert svc.summarize(svc.list_users()) == {"total": 3, "active": 2, "inactive": 1, "mismatch": 1}


def test_list_filters(container, demo_users):
    svc = container.user_service

    assert [u.name for u in svc.list_users(q="PAYROLL@")] == ["給与 次郎"]
    assert [u.name for u in svc.list_users(department="営業部")] == ["職員 花子"]
    assert [u.name for u in svc.list_users(role="admin")] == ["管理者 太郎"]
    assert len(svc.list_users(status="active")) == 3


def test_update_with_history_list_recomputes_current_department(container, demo_users):
    staff = demo_users["staff"]
    updated = container.user_service.update_user(
        staff.id,
        _payload(
            name=staff.name,
            email=staff.email,
            department_history=[
                {"department_name": "営業部", "start_date": "2021-06-01", "end_date": "2024-12-31"},
                {"department_name": "開発部", "start_date": "2025-01-01", "end_date": None},
            ],
        ),
    )

    assert updated.current_department() == "開発部"
    assert updated.department == "開発部"
    assert len(updated.department_history) == 2


def test_update_with_two_open_entries_is_rejected(container, demo_users):
    staff = demo_users["staff"]

    with pytest.raises(ValidationError) as exc:
        container.user_service.update_user(
            staff.id,
            _payload(
                department_history=[
                    {"department_name": "営業部", "start_date": "2021-06-01"},
                    {"department_name": "開発部", "start_date": "2025-01-01"},
                ]
            ),
        )

    assert "departmentHistory" in exc.value.errors


def test_add_history_overlap_and_second_open(container, demo_users):
    staff = demo_users["staff"]

    with pytest.raises(ValidationError) as exc:
        container.user_service.add_department_history(
            staff.id, {"department_name": "開発部", "start_date": "2025-01-01"}
        )

    assert exc.value.errors["startDate"] == "他の部署履歴と期間が重複しています"
    assert exc.value.errors["endDate"] == "現在所属中の部署は1つまでです。他の履歴に終了日を設定してください。"


def test_closing_then_adding_moves_current_department(container, demo_users):
    svc = container.user_service
    staff = demo_users["staff"]
    open_entry = staff.department_history[0]

    svc.update_department_history(
        open_entry.id, {"department_name": "営業部", "start_date": "2020-04-01", "end_date": "2024-12-31"}
    )
    svc.add_department_history(staff.id, {"department_name": "経理部", "start_date": "2025-01-01"})

    assert svc.get_user(staff.id).department == "経理部"
    assert [h.department_name for h in svc.list_department_history(staff.id)] == ["経理部", "営業部"]


def test_history_requires_department_name(container, demo_users):
    with pytest.raises(ValidationError) as exc:
        container.user_service.add_department_history(
            demo_users["staff"].id, {"start_date": "2030-01-01", "end_date": "2030-02-01"}
        )

    assert exc.value.errors["departmentName"] == "部署を選択してください"


def test_delete_user_removes_shift_preferences(container, demo_users):
    staff = demo_users["staff"]
    container.shift_preferences_repo.create(
        user_id=staff.id,
        user_name=staff.name,
        target_year=2025,
        target_month=7,
        preferences=[GroupHomePreference(1, "ひまわり荘", "A棟", 5)],
        notes=None,
    )

    container.user_service.delete_user(staff.id)

    assert container.shift_preferences_repo.list_all() == []
    with pytest.raises(NotFoundError):
        container.user_service.get_user(staff.id)


def test_history_list_must_be_an_array(container, demo_users):
    staff = demo_users["staff"]

    with pytest.raises(ValidationError) as exc:
        container.user_service.update_user(staff.id, _payload(department_history="営業部"))

    assert exc.value.errors == {"departmentHistory": "一覧の形式が正しくありません"}
    assert [h.department_name for h in container.users_repo.list_department_histories(staff.id)] == ["営業部"]


def test_failed_user_write_keeps_previous_history(container, demo_users, monkeypatch):
    staff = demo_users["staff"]

    def fail(*args, **kwargs):
        raise RuntimeError("connection lost")

    monkeypatch.setattr(container.users_repo, "update_user", fail)

    with pytest.raises(RuntimeError):
        container.user_service.update_user(
            staff.id,
            _payload(
                name=staff.name,
                email=staff.email,
                department_history=[{"department_name": "開発部", "start_date": "2025-01-01"}],
            ),
        )

    histories = container.users_repo.list_department_histories(staff.id)
    assert [(h.department_name, h.end_date) for h in histories] == [("営業部", None)]
