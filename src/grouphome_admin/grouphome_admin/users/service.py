from __future__ import annotations

from datetime import date, datetime
from typing import Any, Callable, Mapping, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.intervals import (
    DEPARTMENT_HISTORY_MESSAGES,
    current_entry,
    validate_history_collection,
    validate_history_entry,
)
from ..common.status import derive_status, status_mismatch
from ..common.validators import EMAIL_RE, FieldErrors, clean_text, read_date, read_list
from ..core.enums import EntityStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..core.logging import get_logger
from ..roles.repository import RoleRepository
from .model import DepartmentHistory, User
from .repository import UserRepository

logger = get_logger(__name__)

STATUS_MISMATCH_FILTER = "mismatch"


class UserService:
    """Use case: staff (職員) maintenance with department history."""

    def __init__(
        self,
        users: UserRepository,
        roles: RoleRepository,
        shift_preferences=None,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._users = users
        self._roles = roles
        self._shift_preferences = shift_preferences
        self._clock = clock

    def now(self) -> datetime:
        return self._clock()

    # ---- queries ----

    def get_user(self, user_id: int) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("職員が見つかりません")
        return user

    def list_users(
        self,
        *,
        q: Optional[str] = None,
        department: Optional[str] = None,
        role: Optional[str] = None,
        status: Optional[str] = None,
    ) -> list[User]:
        now = self.now()
        term = clean_text(q).lower()
        department = clean_text(department)
        role = clean_text(role)
        status = clean_text(status)

        out: list[User] = []
        for u in self._users.list_all():
            if term and not any(term in (v or "").lower() for v in (u.name, u.email, u.employee_id)):
                continue
            if department and u.current_department() != department:
                continue
            if role and u.role != role:
                continue
            if status == STATUS_MISMATCH_FILTER:
                if not status_mismatch(u.status, u.retirement_date, now):
                    continue
            elif status and derive_status(u.retirement_date, now).value != status:
                continue
            out.append(u)
        return out

    def summarize(self, users: Sequence[User]) -> dict[str, int]:
        now = self.now()
        active = sum(1 for u in users if derive_status(u.retirement_date, now) == EntityStatus.ACTIVE)
        return {
            "total": len(users),
            "active": active,
            "inactive": len(users) - active,
            "mismatch": sum(1 for u in users if status_mismatch(u.status, u.retirement_date, now)),
        }

    # ---- validation ----

    def _validate_user(self, data: Mapping[str, Any], *, creating: bool) -> dict[str, Any]:
        errs = FieldErrors()

        name = clean_text(data.get("name"))
        if not name:
            errs.add("name", "名前を入力してください")

        email = clean_text(data.get("email"))
        if not email:
            errs.add("email", "メールアドレスを入力してください")
        elif not EMAIL_RE.match(email):
            errs.add("email", "有効なメールアドレスを入力してください")

        department = clean_text(data.get("department"))
        if creating and not department:
            errs.add("department", "初期部署を選択してください")

        join_date = read_date(errs, data.get("join_date"), "joinDate")
        if not errs.has("joinDate") and join_date is None:
            errs.add("joinDate", "入社日を入力してください")

        role = clean_text(data.get("role"))
        if not role:
            errs.add("role", "ロールを選択してください")
        elif self._roles.get_by_name(role) is None:
            errs.add("role", "存在しないロールです")

        retirement_date = read_date(errs, data.get("retirement_date"), "retirementDate")
        if retirement_date and join_date and retirement_date <= join_date:
            errs.add("retirementDate", "退職日は入社日より後にしてください")

        department_start_date = None
        if creating:
            department_start_date = read_date(errs, data.get("department_start_date"), "departmentStartDate")
            if not errs.has("departmentStartDate") and department_start_date is None:
                errs.add("departmentStartDate", "部署開始日を入力してください")

        errs.raise_if_any()
        return {
            "name": name,
            "email": email,
            "position": clean_text(data.get("position")),
            "employee_id": clean_text(data.get("employee_id")),
            "join_date": join_date,
            "retirement_date": retirement_date,
            "role": role,
            "department": department,
            "department_start_date": department_start_date,
        }

    def _parse_history_list(self, user_id: int, raw: Sequence[Any]) -> list[DepartmentHistory]:
        entries: list[DepartmentHistory] = []
        list_errs = FieldErrors()
        items = read_list(list_errs, raw, "departmentHistory")
        list_errs.raise_if_any()
        for i, item in enumerate(items):
            if not isinstance(item, Mapping):
                raise ValidationError(errors={"departmentHistory": "部署履歴の形式が正しくありません"})
            errs = FieldErrors()
            name = clean_text(item.get("department_name"))
            start = read_date(errs, item.get("start_date"), "departmentHistory")
            end = read_date(errs, item.get("end_date"), "departmentHistory")
            if not name:
                errs.add("departmentHistory", "部署を選択してください")
            errs.raise_if_any()
            entries.append(
                DepartmentHistory(id=i, user_id=user_id, department_name=name, start_date=start, end_date=end)
            )
        validate_history_collection(entries, messages=DEPARTMENT_HISTORY_MESSAGES, now=self.now())
        return entries

    # ---- commands ----

    def create_user(self, data: Mapping[str, Any]) -> User:
        v = self._validate_user(data, creating=True)
        status = derive_status(v["retirement_date"], self.now()).value
        user_id = self._users.create_user(
            name=v["name"],
            email=v["email"],
            position=v["position"],
            employee_id=v["employee_id"],
            join_date=v["join_date"],
            retirement_date=v["retirement_date"],
            role=v["role"],
            department=v["department"],
            status=status,
        )
        self._users.add_department_history(
            user_id=user_id,
            department_name=v["department"],
            start_date=v["department_start_date"],
            end_date=None,
        )
        logger.info("user created: id=%s role=%s department=%s", user_id, v["role"], v["department"])
        return self.get_user(user_id)

    def update_user(self, user_id: int, data: Mapping[str, Any]) -> User:
        user = self.get_user(user_id)
        v = self._validate_user(data, creating=False)

        department = user.current_department()
        histories = None
        raw_history = data.get("department_history")
        if raw_history is not None:
            entries = self._parse_history_list(user.id, raw_history)
            histories = [(e.department_name, e.start_date, e.end_date) for e in entries]
            current = current_entry(entries)
            if current is not None:
                department = current.department_name

        self._users.update_user(
            user.id,
            name=v["name"],
            email=v["email"],
            position=v["position"],
            employee_id=v["employee_id"],
            join_date=v["join_date"],
            retirement_date=v["retirement_date"],
            role=v["role"],
            department=department,
            status=derive_status(v["retirement_date"], self.now()).value,
            department_histories=histories,
        )
        logger.info("user updated: id=%s", user.id)
        return self.get_user(user.id)

    def delete_user(self, user_id: int) -> None:
        user = self.get_user(user_id)
        if self._shift_preferences is not None:
            self._shift_preferences.delete_by_user(user.id)
        self._users.delete_by_id(user.id)
        logger.info("user deleted: id=%s", user.id)

    # ---- department history ----

    def list_department_history(self, user_id: int) -> list[DepartmentHistory]:
        self.get_user(user_id)
        return sorted(self._users.list_department_histories(user_id), key=lambda h: h.start_date, reverse=True)

    def _validate_history(
        self, user_id: int, data: Mapping[str, Any], *, editing_id: Optional[int] = None
    ) -> tuple[str, date, Optional[date]]:
        errs = FieldErrors()
        name = clean_text(data.get("department_name"))
        if not name:
            errs.add("departmentName", "部署を選択してください")
        start = read_date(errs, data.get("start_date"), "startDate")
        end = read_date(errs, data.get("end_date"), "endDate")
        validate_history_entry(
            start_date=start,
            end_date=end,
            existing=self._users.list_department_histories(user_id),
            messages=DEPARTMENT_HISTORY_MESSAGES,
            editing_id=editing_id,
            errors=errs,
            now=self.now(),
        )
        errs.raise_if_any()
        return name, start, end

    def _sync_current_department(self, user_id: int) -> None:
        user = self.get_user(user_id)
        current = user.current_department()
        if current != user.department:
            self._users.update_user(
                user.id,
                name=user.name,
                email=user.email,
                position=user.position,
                employee_id=user.employee_id,
                join_date=user.join_date,
                retirement_date=user.retirement_date,
                role=user.role,
                department=current,
                status=derive_status(user.retirement_date, self.now()).value,
            )

    def add_department_history(self, user_id: int, data: Mapping[str, Any]) -> DepartmentHistory:
        self.get_user(user_id)
        name, start, end = self._validate_history(user_id, data)
        history_id = self._users.add_department_history(
            user_id=user_id, department_name=name, start_date=start, end_date=end
        )
        self._sync_current_department(user_id)
        logger.info("department history added: user=%s %s from %s", user_id, name, start)
        return self._users.get_department_history(history_id)

    def update_department_history(self, history_id: int, data: Mapping[str, Any]) -> DepartmentHistory:
        history = self._users.get_department_history(history_id)
        if not history:
            raise NotFoundError("部署履歴が見つかりません")
        name, start, end = self._validate_history(history.user_id, data, editing_id=history.id)
        self._users.update_department_history(history.id, department_name=name, start_date=start, end_date=end)
        self._sync_current_department(history.user_id)
        return self._users.get_department_history(history.id)

    def delete_department_history(self, history_id: int) -> None:
        history = self._users.get_department_history(history_id)
        if not history:
            raise NotFoundError("部署履歴が見つかりません")
        self._users.delete_department_history(history.id)
        self._sync_current_department(history.user_id)
