from __future__ import annotations

from flask import Flask

from ..api.http import arg, int_arg, json_body, ok, ok_raw
from ..auth.guards import login_required, permission_required
from ..container import Container
from ..core.exceptions import ValidationError

# Reading needs any logged-in user; edits need a group-home permission.
EDIT_PERMISSIONS = ("grouphome.create", "grouphome.edit")


def register(app: Flask, container: Container) -> None:
    svc = container.resident_service

    def _present(resident) -> dict:
        return resident.to_dict(now=svc.now())

    @app.route("/api/residents", methods=["GET"], endpoint="residents_list")
    @login_required
    def residents_list():
        residents = svc.list_residents(
            q=arg("q"),
            group_home_id=arg("group_home_id"),
            status=arg("status"),
            disability_level=arg("disability_level"),
        )
        return ok_raw({"residents": [_present(r) for r in residents], "statistics": svc.statistics()})

    @app.route("/api/residents", methods=["POST"], endpoint="residents_create")
    @permission_required(*EDIT_PERMISSIONS)
    def residents_create():
        return ok_raw(_present(svc.create_resident(json_body())), 201)

    @app.route("/api/residents/<int:resident_id>", methods=["GET"], endpoint="residents_get")
    @login_required
    def residents_get(resident_id: int):
        return ok_raw(_present(svc.get_resident(resident_id)))

    @app.route("/api/residents/<int:resident_id>", methods=["PUT"], endpoint="residents_update")
    @permission_required(*EDIT_PERMISSIONS)
    def residents_update(resident_id: int):
        return ok_raw(_present(svc.update_resident(resident_id, json_body())))

    @app.route("/api/residents/<int:resident_id>", methods=["DELETE"], endpoint="residents_delete")
    @permission_required("grouphome.delete", "grouphome.edit")
    def residents_delete(resident_id: int):
        svc.delete_resident(resident_id)
        return ok_raw({"deleted": True})

    @app.route("/api/disability_histories", methods=["GET"], endpoint="disability_histories_list")
    @login_required
    def disability_histories_list():
        resident_id = int_arg("resident_id")
        if resident_id is None:
            raise ValidationError(errors={"residentId": "利用者を指定してください"})
        return ok(svc.list_disability_history(resident_id))

    @app.route("/api/disability_histories", methods=["POST"], endpoint="disability_histories_create")
    @permission_required(*EDIT_PERMISSIONS)
    def disability_histories_create():
        body = json_body()
        resident_id = body.get("resident_id")
        if not str(resident_id or "").isdigit():
            raise ValidationError(errors={"residentId": "利用者を指定してください"})
        return ok(svc.add_disability_history(int(resident_id), body), 201)

    @app.route("/api/disability_histories/<int:history_id>", methods=["PUT"], endpoint="disability_histories_update")
    @permission_required(*EDIT_PERMISSIONS)
    def disability_histories_update(history_id: int):
        return ok(svc.update_disability_history(history_id, json_body()))

    @app.route(
        "/api/disability_histories/<int:history_id>", methods=["DELETE"], endpoint="disability_histories_delete"
    )
    @permission_required(*EDIT_PERMISSIONS)
    def disability_histories_delete(history_id: int):
        svc.delete_disability_history(history_id)
        return ok_raw({"deleted": True})
