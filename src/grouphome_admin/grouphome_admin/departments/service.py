from __future__ import annotations

from typing import Any, Optional, Sequence

from ..common.validators import FieldErrors, clean_text
from ..core.constants import MIN_DEPARTMENT_NAME_LENGTH
from ..core.exceptions import ConflictError, NotFoundError
from ..core.logging import get_logger
from ..users.repository import UserRepository
from .model import Department
from .repository import DepartmentRepository

logger = get_logger(__name__)


class DepartmentService:
    """Use case: department master (部署マスタ)."""

    def __init__(self, departments: DepartmentRepository, users: UserRepository):
        self._departments = departments
        self._users = users

    def list_departments(self, *, q: Optional[str] = None) -> Sequence[Department]:
        items = list(self._departments.list_all())
        term = clean_text(q).lower()
        if term:
            items = [d for d in items if term in d.name.lower()]
        return items

    def get_department(self, department_id: int) -> Department:
        dept = self._departments.get_by_id(department_id)
        if not dept:
            raise NotFoundError("部署が見つかりません")
        return dept

    def _validate_name(self, name: Any, *, editing_id: Optional[int] = None) -> str:
        errs = FieldErrors()
        name_s = clean_text(name)
        if not name_s:
            errs.add("name", "部署名を入力してください")
        elif len(name_s) < MIN_DEPARTMENT_NAME_LENGTH:
            errs.add("name", "部署名は2文字以上で入力してください")
        else:
            existing = self._departments.get_by_name(name_s)
            if existing and existing.id != editing_id:
                errs.add("name", "この部署名は既に登録されています")
        errs.raise_if_any()
        return name_s

    def create_department(self, *, name: Any) -> Department:
        name_s = self._validate_name(name)
        dept_id = self._departments.create(name=name_s)
        logger.info("department created: %s", name_s)
        return self.get_department(dept_id)

    def rename_department(self, department_id: int, *, name: Any) -> Department:
        """Rename and carry the new name into every user's history."""

        dept = self.get_department(department_id)
        name_s = self._validate_name(name, editing_id=dept.id)
        if name_s != dept.name:
            self._departments.update(dept.id, name=name_s)
            self._users.rename_department(dept.name, name_s)
            logger.info("department renamed: %s -> %s", dept.name, name_s)
        return self.get_department(dept.id)

    def delete_department(self, department_id: int) -> None:
        dept = self.get_department(department_id)
        related = self._users.count_by_department(dept.name)
        if related:
            raise ConflictError(
                f"この部署には{related}名の職員が関連しているため削除できません。\n先に職員の部署履歴を変更してください。"
            )
        self._departments.delete_by_id(dept.id)
        logger.info("department deleted: %s", dept.name)
