from __future__ import annotations

from flask import Flask

from ..api.http import arg, int_arg, json_body, ok, ok_raw, period_args
from ..auth.guards import current_auth, permission_required
from ..container import Container

ANY_PREFERENCE_PERMISSION = ("shift.preference.view.all", "shift.preference.own")


def register(app: Flask, container: Container) -> None:
    svc = container.shift_preference_service

    @app.route("/api/shift-preferences", methods=["GET"], endpoint="shift_preferences_list")
    @permission_required(*ANY_PREFERENCE_PERMISSION)
    def shift_preferences_list():
        prefs = svc.list_preferences(
            current_auth(),
            year=int_arg("year"),
            month=int_arg("month"),
            user_id=int_arg("user_id"),
            q=arg("q"),
        )
        return ok(prefs)

    @app.route("/api/shift-preferences/statistics", methods=["GET"], endpoint="shift_preferences_statistics")
    @permission_required(*ANY_PREFERENCE_PERMISSION)
    def shift_preferences_statistics():
        year, month = period_args(container.clock())
        return ok_raw(svc.monthly_statistics(current_auth(), year=year, month=month))

    @app.route("/api/shift-preferences", methods=["POST"], endpoint="shift_preferences_submit")
    @permission_required(*ANY_PREFERENCE_PERMISSION)
    def shift_preferences_submit():
        return ok(svc.submit(json_body(), current_auth()), 201)

    @app.route("/api/shift-preferences/<int:preference_id>", methods=["GET"], endpoint="shift_preferences_get")
    @permission_required(*ANY_PREFERENCE_PERMISSION)
    def shift_preferences_get(preference_id: int):
        return ok(svc.get_preference(preference_id, current_auth()))

    @app.route("/api/shift-preferences/<int:preference_id>", methods=["PUT"], endpoint="shift_preferences_update")
    @permission_required(*ANY_PREFERENCE_PERMISSION)
    def shift_preferences_update(preference_id: int):
        pref = svc.get_preference(preference_id, current_auth())
        body = json_body()
        body.setdefault("user_id", pref.user_id)
        body.setdefault("target_year", pref.target_year)
        body.setdefault("target_month", pref.target_month)
        return ok(svc.submit(body, current_auth()))

    @app.route("/api/shift-preferences/<int:preference_id>", methods=["DELETE"], endpoint="shift_preferences_delete")
    @permission_required(*ANY_PREFERENCE_PERMISSION)
    def shift_preferences_delete(preference_id: int):
        svc.delete(preference_id, current_auth())
        return ok_raw({"deleted": True})
