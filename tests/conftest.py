from __future__ import annotations

from datetime import date, datetime

import pytest

from src.grouphome_admin.grouphome_admin.auth.context import AuthContext
from src.grouphome_admin.grouphome_admin.auth.permissions import default_roles
from src.grouphome_admin.grouphome_admin.container import assemble
from src.grouphome_admin.grouphome_admin.main import create_app
from tests.fakes import (
    FakeAttendanceRepo,
    FakeDepartmentsRepo,
    FakeExpansionsRepo,
    FakeGroupHomesRepo,
    FakeResidentsRepo,
    FakeRolesRepo,
    FakeShiftPreferencesRepo,
    FakeUsageRecordsRepo,
    FakeUsersRepo,
)

FIXED_NOW = datetime(2025, 6, 1, 10, 0, 0)

DEMO_DEPARTMENTS = ("営業部", "開発部", "マーケティング部", "人事部", "経理部", "総務部")


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def container(fixed_now):
    return assemble(
        users_repo=FakeUsersRepo(),
        departments_repo=FakeDepartmentsRepo(DEMO_DEPARTMENTS),
        roles_repo=FakeRolesRepo(default_roles()),
        group_homes_repo=FakeGroupHomesRepo(),
        expansions_repo=FakeExpansionsRepo(),
        residents_repo=FakeResidentsRepo(),
        shift_preferences_repo=FakeShiftPreferencesRepo(),
        usage_records_repo=FakeUsageRecordsRepo(),
        attendance_repo=FakeAttendanceRepo(),
        clock=lambda: fixed_now,
    )


def _add_user(container, *, name, email, role, department, join_date=date(2020, 4, 1), retirement_date=None):
    return container.user_service.create_user(
        {
            "name": name,
            "email": email,
            "position": "",
            "employee_id": "",
            "join_date": join_date,
            "retirement_date": retirement_date,
            "role": role,
            "department": department,
            "department_start_date": join_date,
        }
    )


@pytest.fixture
def demo_users(container):
    """管理者 / 職員 / 給与担当: one user per system role, admin first."""

    admin = _add_user(container, name="管理者 太郎", email="admin@example.com", role="admin", department="総務部")
    staff = _add_user(container, name="職員 花子", email="staff@example.com", role="staff", department="営業部")
    payroll = _add_user(container, name="給与 次郎", email="payroll@example.com", role="payroll", department="人事部")
    return {"admin": admin, "staff": staff, "payroll": payroll}


@pytest.fixture
def as_role(container, demo_users):
    """AuthContext factory for service-level tests."""

    def make(role: str) -> AuthContext:
        return AuthContext(user=demo_users[role], role_table=container.auth_service.role_table())

    return make


@pytest.fixture
def group_home(container):
    return container.group_home_service.create_group_home(
        {
            "property_name": "ひまわり荘",
            "unit_name": "A棟",
            "postal_code": "123-4567",
            "address": "東京都練馬区1-2-3",
            "phone_number": "03-1234-5678",
            "common_room": "共用室",
            "resident_rooms": ["101", "102", "103"],
            "opening_date": "2022-04-01",
        }
    )


@pytest.fixture
def app(container, demo_users):
    return create_app(container=container, settings={"TESTING": True, "SECRET_KEY": "test-secret"})


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(client, demo_users):
    """Switch the demo session to the user holding `role`."""

    def switch(role: str):
        resp = client.post("/api/session", json={"userId": demo_users[role].id})
        assert resp.status_code == 200
        return demo_users[role]

    return switch
