from __future__ import annotations

from flask import Flask

from ..api.http import json_body, ok, ok_raw
from ..auth.guards import login_required, permission_required
from ..common.serialization import to_api
from ..container import Container


def _present(role) -> dict:
    data = to_api(role)
    data["isSystem"] = role.is_system
    return data


def register(app: Flask, container: Container) -> None:
    svc = container.role_service

    def _fields(body: dict) -> dict:
        return {
            "name": body.get("name"),
            "display_name": body.get("display_name"),
            "description": body.get("description"),
            "permissions": body.get("permissions"),
        }

    @app.route("/api/roles", methods=["GET"], endpoint="roles_list")
    @login_required
    def roles_list():
        return ok_raw([_present(r) for r in svc.list_roles()])

    @app.route("/api/roles/<int:role_id>", methods=["GET"], endpoint="roles_get")
    @login_required
    def roles_get(role_id: int):
        return ok_raw(_present(svc.get_role(role_id)))

    @app.route("/api/roles", methods=["POST"], endpoint="roles_create")
    @permission_required("system.settings")
    def roles_create():
        return ok_raw(_present(svc.create_role(**_fields(json_body()))), 201)

    @app.route("/api/roles/<int:role_id>", methods=["PUT"], endpoint="roles_update")
    @permission_required("system.settings")
    def roles_update(role_id: int):
        return ok_raw(_present(svc.update_role(role_id, **_fields(json_body()))))

    @app.route("/api/roles/<int:role_id>", methods=["DELETE"], endpoint="roles_delete")
    @permission_required("system.settings")
    def roles_delete(role_id: int):
        svc.delete_role(role_id)
        return ok_raw({"deleted": True})

    @app.route("/api/permissions", methods=["GET"], endpoint="permissions_catalogue")
    @login_required
    def permissions_catalogue():
        grouped = svc.permission_catalogue()
        return ok([{"category": category, "permissions": perms} for category, perms in grouped.items()])
