from __future__ import annotations

from flask import Flask

from ..api.http import arg, json_body, ok, ok_raw
from ..auth.guards import login_required, permission_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    svc = container.department_service

    @app.route("/api/departments", methods=["GET"], endpoint="departments_list")
    @login_required
    def departments_list():
        return ok(svc.list_departments(q=arg("q")))

    @app.route("/api/departments", methods=["POST"], endpoint="departments_create")
    @permission_required("department.manage")
    def departments_create():
        return ok(svc.create_department(name=json_body().get("name")), 201)

    @app.route("/api/departments/<int:department_id>", methods=["GET"], endpoint="departments_get")
    @login_required
    def departments_get(department_id: int):
        return ok(svc.get_department(department_id))

    @app.route("/api/departments/<int:department_id>", methods=["PUT"], endpoint="departments_update")
    @permission_required("department.manage")
    def departments_update(department_id: int):
        return ok(svc.rename_department(department_id, name=json_body().get("name")))

    @app.route("/api/departments/<int:department_id>", methods=["DELETE"], endpoint="departments_delete")
    @permission_required("department.manage")
    def departments_delete(department_id: int):
        svc.delete_department(department_id)
        return ok_raw({"deleted": True})
