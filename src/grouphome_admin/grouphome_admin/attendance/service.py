from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Mapping, Sequence

from ..auth.context import AuthContext
from ..common.datetime_utils import now_local, parse_hhmm
from ..common.validators import FieldErrors, clean_text, read_date
from ..core.enums import ShiftType
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..core.logging import get_logger
from .model import AttendanceReport
from .repository import AttendanceReportRepository

logger = get_logger(__name__)

VIEW_ALL = "attendance.view.all"
VIEW_OWN = "attendance.view.own"
REPORT_OWN = "attendance.report.own"
MANAGE = "attendance.manage"


def format_work_time(minutes: float) -> str:
    """`X時間Y分`; the minutes part is omitted when zero."""

    hours = int(minutes // 60)
    rest = int(minutes % 60)
    return f"{hours}時間{rest}分" if rest > 0 else f"{hours}時間"


def average_work_time(reports: Sequence[AttendanceReport]) -> str:
    if not reports:
        return "0時間"
    total = sum(r.worked_minutes for r in reports)
    return format_work_time(total / len(reports))


class AttendanceService:
    """Use case: staff attendance reports (出勤報告)."""

    def __init__(self, reports: AttendanceReportRepository, *, clock: Callable[[], datetime] = now_local):
        self._reports = reports
        self._clock = clock

    def _is_own(self, report: AttendanceReport, viewer: AuthContext) -> bool:
        if viewer.user is None:
            return False
        if report.user_id is not None:
            return report.user_id == viewer.user_id
        return report.name == viewer.user.name

    def visible_to(self, viewer: AuthContext) -> list[AttendanceReport]:
        reports = list(self._reports.list_all())
        if viewer.has_permission(VIEW_ALL):
            return reports
        if viewer.has_permission(VIEW_OWN):
            return [r for r in reports if self._is_own(r, viewer)]
        return []

    def report(self, data: Mapping[str, Any], viewer: AuthContext) -> AttendanceReport:
        if not viewer.has_any_permission((REPORT_OWN, MANAGE)):
            raise AuthorizationError("出勤報告の権限がありません")

        errs = FieldErrors()
        name = clean_text(data.get("name")) or (viewer.user.name if viewer.user else "")
        if not name:
            errs.add("name", "名前を入力してください")

        check_in = check_out = None
        try:
            check_in = parse_hhmm(data.get("check_in"), "checkIn")
        except ValidationError as e:
            errs.add("checkIn", e.errors["checkIn"])
        try:
            check_out = parse_hhmm(data.get("check_out"), "checkOut")
        except ValidationError as e:
            errs.add("checkOut", e.errors["checkOut"])
        if check_in is None and not errs.has("checkIn"):
            errs.add("checkIn", "出勤時刻を入力してください")
        if check_out is None and not errs.has("checkOut"):
            errs.add("checkOut", "退勤時刻を入力してください")
        if check_in is not None and check_out is not None and check_out <= check_in:
            errs.add("checkOut", "退勤時刻は出勤時刻より後にしてください")

        try:
            shift_type = ShiftType(clean_text(data.get("shift_type")) or ShiftType.REGULAR.value)
        except ValueError:
            errs.add("shiftType", "勤務区分を選択してください")
            shift_type = ShiftType.REGULAR

        work_date = read_date(errs, data.get("work_date"), "workDate") or self._clock().date()
        errs.raise_if_any()

        user_id = viewer.user_id if viewer.user is not None and name == viewer.user.name else None
        report_id = self._reports.create(
            user_id=user_id,
            name=name,
            work_date=work_date,
            check_in=check_in,
            check_out=check_out,
            shift_type=shift_type,
        )
        logger.info("attendance reported: %s %s %s-%s", name, work_date, check_in, check_out)
        return self._reports.get_by_id(report_id)

    def delete(self, report_id: int, viewer: AuthContext) -> None:
        report = self._reports.get_by_id(report_id)
        if not report:
            raise NotFoundError("出勤記録が見つかりません")
        if not viewer.has_permission(MANAGE):
            raise AuthorizationError("出勤記録を削除する権限がありません")
        self._reports.delete_by_id(report.id)

    def statistics(self, viewer: AuthContext) -> dict[str, Any]:
        today = self._clock().date()
        visible = self.visible_to(viewer)
        return {
            "todayCount": sum(1 for r in self._reports.list_all() if r.work_date == today),
            "visibleCount": len(visible),
            "averageWorkTime": average_work_time(visible),
        }
