from __future__ import annotations

from typing import Any, Optional, Sequence

from ..auth.permissions import build_role_table, catalogue_by_category, resolve_permissions
from ..common.validators import ROLE_NAME_RE, FieldErrors, clean_text, read_list
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..core.logging import get_logger
from ..users.repository import UserRepository
from .model import Role
from .repository import RoleRepository

logger = get_logger(__name__)


class RoleService:
    """Use case: role master maintenance."""

    def __init__(self, roles: RoleRepository, users: UserRepository):
        self._roles = roles
        self._users = users

    def list_roles(self) -> Sequence[Role]:
        return self._roles.list_all()

    def get_role(self, role_id: int) -> Role:
        role = self._roles.get_by_id(role_id)
        if not role:
            raise NotFoundError("ロールが見つかりません")
        return role

    def role_table(self) -> dict[str, frozenset]:
        return build_role_table(self._roles.list_all())

    def permission_catalogue(self):
        extra = [p for r in self._roles.list_all() for p in r.permissions]
        return catalogue_by_category(extra)

    def _validate(
        self,
        *,
        name: Any,
        display_name: Any,
        description: Any,
        permissions: Any,
        editing_id: Optional[int] = None,
    ) -> tuple[str, str, str, list[str]]:
        errs = FieldErrors()
        name_s = clean_text(name)
        display_s = clean_text(display_name)
        desc_s = clean_text(description)
        perm_names = [p.name for p in resolve_permissions(read_list(errs, permissions, "permissions"))]

        if not display_s:
            errs.add("displayName", "ロール表示名を入力してください")
        if not name_s:
            errs.add("name", "ロールIDを入力してください")
        elif not ROLE_NAME_RE.match(name_s):
            errs.add("name", "ロールIDは英字またはアンダースコアで始まり、英数字とアンダースコアのみ使用可能です")
        else:
            existing = self._roles.get_by_name(name_s)
            if existing and existing.id != editing_id:
                errs.add("name", "このロールIDは既に使用されています")
        if not desc_s:
            errs.add("description", "説明を入力してください")
        if not perm_names:
            errs.add("permissions", "少なくとも1つの権限を選択してください")

        errs.raise_if_any()
        return name_s, display_s, desc_s, perm_names

    def create_role(self, *, name: Any, display_name: Any, description: Any, permissions: Any) -> Role:
        name_s, display_s, desc_s, perm_names = self._validate(
            name=name, display_name=display_name, description=description, permissions=permissions
        )
        role_id = self._roles.create(name=name_s, display_name=display_s, description=desc_s, permissions=perm_names)
        logger.info("role created: %s (%d permissions)", name_s, len(perm_names))
        return self.get_role(role_id)

    def update_role(self, role_id: int, *, name: Any, display_name: Any, description: Any, permissions: Any) -> Role:
        role = self.get_role(role_id)
        if role.is_system:
            raise ConflictError("システムロールは編集できません。")
        name_s, display_s, desc_s, perm_names = self._validate(
            name=name,
            display_name=display_name,
            description=description,
            permissions=permissions,
            editing_id=role.id,
        )
        if name_s != role.name:
            in_use = self._users.count_by_role(role.name)
            if in_use:
                raise ValidationError(errors={"name": f"このロールは{in_use}名の職員に割り当てられているため変更できません"})
        self._roles.update(role.id, name=name_s, display_name=display_s, description=desc_s, permissions=perm_names)
        logger.info("role updated: %s", name_s)
        return self.get_role(role.id)

    def delete_role(self, role_id: int) -> None:
        role = self.get_role(role_id)
        if role.is_system:
            raise ConflictError("システムロールは削除できません。")
        in_use = self._users.count_by_role(role.name)
        if in_use:
            raise ConflictError(
                f"このロールは{in_use}名の職員に割り当てられているため削除できません。\n先に職員のロールを変更してください。"
            )
        self._roles.delete_by_id(role.id)
        logger.info("role deleted: %s", role.name)
