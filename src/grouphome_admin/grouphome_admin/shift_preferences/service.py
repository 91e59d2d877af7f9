from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Mapping, Optional

from ..auth.context import AuthContext
from ..common.datetime_utils import now_local
from ..common.status import derive_status
from ..common.sorting import percent
from ..common.validators import FieldErrors, clean_text, read_int, read_list
from ..core.constants import MAX_DESIRED_DAYS
from ..core.enums import EntityStatus
from ..core.exceptions import AuthorizationError, NotFoundError
from ..core.logging import get_logger
from ..group_homes.repository import GroupHomeRepository
from ..users.repository import UserRepository
from .model import GroupHomePreference, ShiftPreference
from .repository import ShiftPreferenceRepository

logger = get_logger(__name__)

VIEW_ALL = "shift.preference.view.all"
VIEW_OWN = "shift.preference.own"


def _period_value(value: Any, default: int) -> int:
    """Blank means `default`; a value that is not a number is out of range (0)."""

    if value is None or value == "":
        return default
    parsed = read_int(value)
    return parsed if parsed is not None else 0


class ShiftPreferenceService:
    """Use case: monthly shift wishes (シフト希望)."""

    def __init__(
        self,
        preferences: ShiftPreferenceRepository,
        users: UserRepository,
        group_homes: GroupHomeRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._preferences = preferences
        self._users = users
        self._group_homes = group_homes
        self._clock = clock

    def visible_to(self, viewer: AuthContext) -> list[ShiftPreference]:
        if viewer.has_permission(VIEW_ALL):
            return list(self._preferences.list_all())
        if viewer.has_permission(VIEW_OWN) and viewer.user_id is not None:
            return [p for p in self._preferences.list_all() if p.user_id == viewer.user_id]
        return []

    def list_preferences(
        self,
        viewer: AuthContext,
        *,
        year: Optional[int] = None,
        month: Optional[int] = None,
        user_id: Optional[int] = None,
        q: Optional[str] = None,
    ) -> list[ShiftPreference]:
        term = clean_text(q).lower()
        out = []
        for p in self.visible_to(viewer):
            if year is not None and p.target_year != year:
                continue
            if month is not None and p.target_month != month:
                continue
            if user_id is not None and p.user_id != user_id:
                continue
            if term and term not in p.user_name.lower():
                continue
            out.append(p)
        return out

    def get_preference(self, preference_id: int, viewer: AuthContext) -> ShiftPreference:
        pref = self._preferences.get_by_id(preference_id)
        if not pref:
            raise NotFoundError("シフト希望が見つかりません")
        if not viewer.has_permission(VIEW_ALL) and pref.user_id != viewer.user_id:
            raise AuthorizationError("このシフト希望を参照する権限がありません")
        return pref

    def _parse_items(self, errs: FieldErrors, raw: Any) -> list[GroupHomePreference]:
        items: list[GroupHomePreference] = []
        homes = {gh.id: gh for gh in self._group_homes.list_all()}
        for entry in read_list(errs, raw, "preferences"):
            if not isinstance(entry, Mapping):
                continue
            gh_id = read_int(entry.get("group_home_id"))
            if gh_id is None:
                continue
            gh = homes.get(gh_id)
            days = read_int(entry.get("desired_days"))
            items.append(
                GroupHomePreference(
                    group_home_id=gh_id,
                    group_home_name=gh.property_name if gh else clean_text(entry.get("group_home_name")),
                    unit_name=gh.unit_name if gh else clean_text(entry.get("unit_name")),
                    desired_days=days if days is not None else -1,
                )
            )

        if not items:
            errs.add("preferences", "少なくとも1つのグループホームを選択してください")
            return items
        ids = [i.group_home_id for i in items]
        if len(set(ids)) != len(ids):
            errs.add("preferences", "同じグループホームが重複しています")
        if any(i.desired_days < 0 or i.desired_days > MAX_DESIRED_DAYS for i in items):
            errs.add("preferences", "勤務日数は0〜31日の範囲で入力してください")
        if any(i.group_home_id not in homes for i in items):
            errs.add("preferences", "存在しないグループホームが含まれています")
        return items

    def submit(self, data: Mapping[str, Any], viewer: AuthContext) -> ShiftPreference:
        """Create or replace the wish for (user, year, month)."""

        errs = FieldErrors()
        user_id = read_int(data.get("user_id"))
        if user_id is None and not viewer.has_permission(VIEW_ALL):
            user_id = viewer.user_id
        user = self._users.get_by_id(user_id) if user_id is not None else None
        if user is None:
            errs.add("userId", "職員を選択してください")

        now = self._clock()
        year = _period_value(data.get("target_year"), now.year)
        if year < 1:
            errs.add("targetYear", "対象年を正しく入力してください")
        month = _period_value(data.get("target_month"), now.month)
        if not 1 <= month <= 12:
            errs.add("targetMonth", "対象月は1〜12で入力してください")

        items = self._parse_items(errs, data.get("preferences"))
        errs.raise_if_any()

        if not viewer.has_permission(VIEW_ALL) and user.id != viewer.user_id:
            raise AuthorizationError("他の職員のシフト希望は登録できません")

        notes = clean_text(data.get("notes")) or None
        existing = self._preferences.get_for_user_month(user_id=user.id, target_year=year, target_month=month)
        if existing:
            self._preferences.update_items(existing.id, preferences=items, notes=notes)
            pref_id = existing.id
            logger.info("shift preference replaced: user=%s %d-%02d", user.id, year, month)
        else:
            pref_id = self._preferences.create(
                user_id=user.id,
                user_name=user.name,
                target_year=year,
                target_month=month,
                preferences=items,
                notes=notes,
            )
            logger.info("shift preference submitted: user=%s %d-%02d", user.id, year, month)
        return self._preferences.get_by_id(pref_id)

    def delete(self, preference_id: int, viewer: AuthContext) -> None:
        pref = self.get_preference(preference_id, viewer)
        self._preferences.delete_by_id(pref.id)

    def monthly_statistics(self, viewer: AuthContext, *, year: int, month: int) -> dict[str, Any]:
        now = self._clock()
        month_prefs = [p for p in self.visible_to(viewer) if p.target_year == year and p.target_month == month]
        active_users = [
            u for u in self._users.list_all() if derive_status(u.retirement_date, now) == EntityStatus.ACTIVE
        ]
        denominator = len(active_users) if viewer.has_permission(VIEW_ALL) else 1
        submitted = {p.user_id for p in month_prefs}
        not_submitted = [u for u in active_users if u.id not in submitted] if viewer.has_permission(VIEW_ALL) else []
        return {
            "year": year,
            "month": month,
            "totalSubmissions": len(month_prefs),
            "totalActiveUsers": denominator,
            "submissionRate": percent(len(month_prefs), denominator),
            "totalDesiredDays": sum(p.total_desired_days for p in month_prefs),
            "groupHomeCount": len(self._group_homes.list_all()),
            "notSubmitted": [{"id": u.id, "name": u.name} for u in not_submitted],
        }
