"""Permission catalogue, the seeded system roles and pure permission checks.

A "role table" is a plain mapping of role name -> permission names, built
either from DEFAULT_ROLES or from whatever the roles repository holds.
"""
from __future__ import annotations

from collections import OrderedDict
from typing import Iterable, Mapping, Optional, Sequence

from ..roles.model import Permission, Role

RoleTable = Mapping[str, frozenset]

OTHER_CATEGORY = "その他"


def _p(name: str, display_name: str, category: str, description: str) -> Permission:
    return Permission(name=name, display_name=display_name, category=category, description=description)


PERMISSION_CATALOGUE: "OrderedDict[str, Permission]" = OrderedDict(
    (p.name, p)
    for p in (
        _p("user.create", "職員登録", "職員管理", "新規職員の登録"),
        _p("user.edit", "職員編集", "職員管理", "職員情報の編集"),
        _p("user.delete", "職員削除", "職員管理", "職員の削除"),
        _p("user.view.all", "全職員閲覧", "職員管理", "全職員の情報閲覧"),
        _p("user.view.own", "自分の情報閲覧", "職員管理", "自分の職員情報閲覧"),
        _p("attendance.report.own", "自分の出勤報告", "出勤管理", "自分の出勤報告"),
        _p("attendance.view.own", "自分の出勤記録閲覧", "出勤管理", "自分の出勤記録閲覧"),
        _p("attendance.view.all", "全出勤記録閲覧", "出勤管理", "全職員の出勤記録閲覧"),
        _p("attendance.manage", "出勤管理", "出勤管理", "出勤記録の管理・集計"),
        _p("grouphome.create", "GH登録", "グループホーム", "グループホーム登録"),
        _p("grouphome.edit", "GH編集", "グループホーム", "グループホーム編集"),
        _p("grouphome.delete", "GH削除", "グループホーム", "グループホーム削除"),
        _p("department.manage", "部署管理", "部署管理", "部署マスタの管理"),
        _p("shift.create", "シフト作成", "シフト管理", "シフト予定の作成"),
        _p("shift.edit", "シフト編集", "シフト管理", "シフト予定の編集"),
        _p("shift.view.all", "全シフト閲覧", "シフト管理", "全職員のシフト閲覧"),
        _p("shift.preference.view.all", "全希望閲覧", "シフト管理", "全職員のシフト希望閲覧"),
        _p("shift.preference.own", "自分のシフト希望", "シフト管理", "自分のシフト希望の登録・編集"),
        _p("system.settings", "システム設定", "システム", "システム全体の設定"),
    )
)


DEFAULT_ROLES: tuple[tuple[str, str, str, tuple[str, ...]], ...] = (
    (
        "admin",
        "管理者",
        "システム全体の管理権限",
        (
            "user.create",
            "user.edit",
            "user.delete",
            "user.view.all",
            "attendance.view.all",
            "attendance.manage",
            "grouphome.create",
            "grouphome.edit",
            "grouphome.delete",
            "department.manage",
            "shift.create",
            "shift.edit",
            "shift.view.all",
            "shift.preference.view.all",
            "system.settings",
        ),
    ),
    (
        "staff",
        "一般職員",
        "基本的な職員権限",
        (
            "attendance.report.own",
            "attendance.view.own",
            "shift.view.all",
            "shift.preference.own",
            "user.view.own",
        ),
    ),
    (
        "payroll",
        "給与担当者",
        "給与計算・勤怠管理権限",
        (
            "attendance.view.all",
            "attendance.manage",
            "user.view.all",
            "shift.view.all",
            "shift.preference.view.all",
        ),
    ),
)


def resolve_permission(name: str) -> Permission:
    """Catalogue entry, or a placeholder for names the catalogue does not know."""

    known = PERMISSION_CATALOGUE.get(name)
    if known is not None:
        return known
    return Permission(name=name, display_name=name, category=OTHER_CATEGORY, description=name)


def resolve_permissions(names: Iterable[str]) -> tuple[Permission, ...]:
    seen: list[str] = []
    for n in names:
        n = str(n).strip()
        if n and n not in seen:
            seen.append(n)
    return tuple(resolve_permission(n) for n in seen)


def default_roles() -> list[Role]:
    return [
        Role(id=i, name=name, display_name=display, description=desc, permissions=resolve_permissions(perms))
        for i, (name, display, desc, perms) in enumerate(DEFAULT_ROLES, start=1)
    ]


def build_role_table(roles: Iterable[Role]) -> dict[str, frozenset]:
    return {r.name: r.permission_names for r in roles}


DEFAULT_ROLE_TABLE: dict[str, frozenset] = build_role_table(default_roles())


def catalogue_by_category(extra: Iterable[Permission] = ()) -> "OrderedDict[str, list[Permission]]":
    grouped: "OrderedDict[str, list[Permission]]" = OrderedDict()
    names = set()
    for p in list(PERMISSION_CATALOGUE.values()) + list(extra):
        if p.name in names:
            continue
        names.add(p.name)
        grouped.setdefault(p.category, []).append(p)
    return grouped


def has_permission(table: RoleTable, role: Optional[str], permission: str) -> bool:
    if not role:
        return False
    return permission in table.get(role, frozenset())


def has_any_permission(table: RoleTable, role: Optional[str], permissions: Iterable[str]) -> bool:
    return any(has_permission(table, role, p) for p in permissions)


def has_all_permissions(table: RoleTable, role: Optional[str], permissions: Iterable[str]) -> bool:
    perms = list(permissions)
    return bool(perms) and all(has_permission(table, role, p) for p in perms)


def evaluate_guard(
    table: RoleTable,
    role: Optional[str],
    *,
    permission: Optional[str] = None,
    permissions: Sequence[str] = (),
    require_all: bool = False,
) -> bool:
    """Show/allow decision; with nothing required everything is allowed."""

    if permission:
        return has_permission(table, role, permission)
    if permissions:
        if require_all:
            return has_all_permissions(table, role, permissions)
        return has_any_permission(table, role, permissions)
    return True
