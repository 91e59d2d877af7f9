from __future__ import annotations

import csv
import io

from flask import Flask

from ..api.http import arg, json_body, ok, ok_raw, period_args
from ..auth.guards import login_required, permission_required
from ..container import Container

EDIT_PERMISSIONS = ("grouphome.edit", "attendance.manage")


def register(app: Flask, container: Container) -> None:
    svc = container.usage_record_service

    @app.route("/api/usage-records", methods=["GET"], endpoint="usage_records_grid")
    @login_required
    def usage_records_grid():
        year, month = period_args(container.clock())
        return ok_raw(svc.month_grid(year, month, group_home_id=arg("group_home_id")))

    @app.route("/api/usage-records/summary", methods=["GET"], endpoint="usage_records_summary")
    @login_required
    def usage_records_summary():
        year, month = period_args(container.clock())
        return ok_raw(svc.monthly_summary(year, month))

    @app.route("/api/usage-records", methods=["PUT", "POST"], endpoint="usage_records_set")
    @permission_required(*EDIT_PERMISSIONS)
    def usage_records_set():
        body = json_body()
        is_used = body.get("is_used")
        record = svc.set_usage(
            resident_id=body.get("resident_id"),
            day=body.get("date"),
            is_used=None if is_used is None else bool(is_used),
        )
        return ok(record)

    @app.route("/api/usage-records.csv", methods=["GET"], endpoint="usage_records_csv")
    @login_required
    def usage_records_csv():
        year, month = period_args(container.clock())
        fieldnames, rows = svc.export_rows(year, month)

        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(rows)

        return app.response_class(
            out.getvalue().encode("utf-8-sig"),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename=usage_records_{year}{month:02d}.csv"},
        )
