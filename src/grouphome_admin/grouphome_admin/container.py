from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceReportRepository
from .attendance.service import AttendanceService
from .auth.service import AuthService
from .common.datetime_utils import now_local
from .core.constants import DEFAULT_POOL_SIZE
from .database.connection import DBConfig, DatabaseConnection
from .departments.mysql_department_repository import MySQLDepartmentRepository
from .departments.service import DepartmentService
from .group_homes.mysql_expansion_repository import MySQLExpansionRepository
from .group_homes.mysql_group_home_repository import MySQLGroupHomeRepository
from .group_homes.service import GroupHomeService
from .residents.mysql_resident_repository import MySQLResidentRepository
from .residents.service import ResidentService
from .roles.mysql_role_repository import MySQLRoleRepository
from .roles.service import RoleService
from .shift_preferences.mysql_shift_preference_repository import MySQLShiftPreferenceRepository
from .shift_preferences.service import ShiftPreferenceService
from .usage_records.mysql_usage_record_repository import MySQLUsageRecordRepository
from .usage_records.service import UsageRecordService
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import UserService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]
    clock: Callable[[], datetime]

    users_repo: Any
    departments_repo: Any
    roles_repo: Any
    group_homes_repo: Any
    expansions_repo: Any
    residents_repo: Any
    shift_preferences_repo: Any
    usage_records_repo: Any
    attendance_repo: Any

    auth_service: AuthService
    user_service: UserService
    department_service: DepartmentService
    role_service: RoleService
    group_home_service: GroupHomeService
    resident_service: ResidentService
    shift_preference_service: ShiftPreferenceService
    usage_record_service: UsageRecordService
    attendance_service: AttendanceService


def assemble(
    *,
    users_repo,
    departments_repo,
    roles_repo,
    group_homes_repo,
    expansions_repo,
    residents_repo,
    shift_preferences_repo,
    usage_records_repo,
    attendance_repo,
    conn: Optional[DatabaseConnection] = None,
    clock: Callable[[], datetime] = now_local,
) -> Container:
    """Wire services over any set of repositories (MySQL or in-memory)."""

    group_home_service = GroupHomeService(
        group_homes_repo,
        expansions_repo,
        residents=residents_repo,
        usage_records=usage_records_repo,
        shift_preferences=shift_preferences_repo,
    )

    return Container(
        conn=conn,
        clock=clock,
        users_repo=users_repo,
        departments_repo=departments_repo,
        roles_repo=roles_repo,
        group_homes_repo=group_homes_repo,
        expansions_repo=expansions_repo,
        residents_repo=residents_repo,
        shift_preferences_repo=shift_preferences_repo,
        usage_records_repo=usage_records_repo,
        attendance_repo=attendance_repo,
        auth_service=AuthService(users_repo, roles_repo),
        user_service=UserService(users_repo, roles_repo, shift_preferences_repo, clock=clock),
        department_service=DepartmentService(departments_repo, users_repo),
        role_service=RoleService(roles_repo, users_repo),
        group_home_service=group_home_service,
        resident_service=ResidentService(residents_repo, group_home_service, usage_records_repo, clock=clock),
        shift_preference_service=ShiftPreferenceService(
            shift_preferences_repo, users_repo, group_homes_repo, clock=clock
        ),
        usage_record_service=UsageRecordService(usage_records_repo, residents_repo),
        attendance_service=AttendanceService(attendance_repo, clock=clock),
    )


def build_container(*, db_config: dict, pool_size: int = DEFAULT_POOL_SIZE) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
        pool_size=int(pool_size),
    )
    conn = DatabaseConnection.get_instance(config)

    return assemble(
        conn=conn,
        users_repo=MySQLUserRepository(conn),
        departments_repo=MySQLDepartmentRepository(conn),
        roles_repo=MySQLRoleRepository(conn),
        group_homes_repo=MySQLGroupHomeRepository(conn),
        expansions_repo=MySQLExpansionRepository(conn),
        residents_repo=MySQLResidentRepository(conn),
        shift_preferences_repo=MySQLShiftPreferenceRepository(conn),
        usage_records_repo=MySQLUsageRecordRepository(conn),
        attendance_repo=MySQLAttendanceReportRepository(conn),
    )
