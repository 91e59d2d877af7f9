from __future__ import annotations

from flask import Flask

from ..api.http import json_body, ok, ok_raw
from ..auth.guards import current_auth, login_required, permission_required
from ..common.serialization import to_api
from ..container import Container


def register(app: Flask, container: Container) -> None:
    svc = container.attendance_service

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_list")
    @login_required
    def attendance_list():
        auth = current_auth()
        reports = svc.visible_to(auth)
        return ok_raw({"reports": to_api(reports), "statistics": svc.statistics(auth)})

    @app.route("/api/attendance", methods=["POST"], endpoint="attendance_report")
    @permission_required("attendance.report.own", "attendance.manage")
    def attendance_report():
        return ok(svc.report(json_body(), current_auth()), 201)

    @app.route("/api/attendance/<int:report_id>", methods=["DELETE"], endpoint="attendance_delete")
    @permission_required("attendance.manage")
    def attendance_delete(report_id: int):
        svc.delete(report_id, current_auth())
        return ok_raw({"deleted": True})
