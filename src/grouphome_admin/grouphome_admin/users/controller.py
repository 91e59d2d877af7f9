from __future__ import annotations

from flask import Flask

from ..api.http import arg, json_body, ok, ok_raw
from ..auth.guards import current_auth, permission_required
from ..container import Container
from ..core.exceptions import AuthorizationError


def register(app: Flask, container: Container) -> None:
    svc = container.user_service

    def _present(user):
        return user.to_dict(now=svc.now())

    def _ensure_can_view(user_id: int) -> None:
        auth = current_auth()
        if auth.has_permission("user.view.all"):
            return
        if auth.has_permission("user.view.own") and auth.user_id == user_id:
            return
        raise AuthorizationError("この職員情報を参照する権限がありません")

    @app.route("/api/users", methods=["GET"], endpoint="users_list")
    @permission_required("user.view.all", "user.view.own")
    def users_list():
        users = svc.list_users(q=arg("q"), department=arg("department"), role=arg("role"), status=arg("status"))
        auth = current_auth()
        if not auth.has_permission("user.view.all"):
            users = [u for u in users if u.id == auth.user_id]
        return ok_raw({"users": [_present(u) for u in users], "summary": svc.summarize(users)})

    @app.route("/api/users", methods=["POST"], endpoint="users_create")
    @permission_required("user.create")
    def users_create():
        return ok_raw(_present(svc.create_user(json_body())), 201)

    @app.route("/api/users/<int:user_id>", methods=["GET"], endpoint="users_get")
    def users_get(user_id: int):
        _ensure_can_view(user_id)
        return ok_raw(_present(svc.get_user(user_id)))

    @app.route("/api/users/<int:user_id>", methods=["PUT"], endpoint="users_update")
    @permission_required("user.edit")
    def users_update(user_id: int):
        return ok_raw(_present(svc.update_user(user_id, json_body())))

    @app.route("/api/users/<int:user_id>", methods=["DELETE"], endpoint="users_delete")
    @permission_required("user.delete")
    def users_delete(user_id: int):
        svc.delete_user(user_id)
        return ok_raw({"deleted": True})

    @app.route("/api/users/<int:user_id>/department-histories", methods=["GET"], endpoint="department_histories_list")
    def department_histories_list(user_id: int):
        _ensure_can_view(user_id)
        return ok(svc.list_department_history(user_id))

    @app.route(
        "/api/users/<int:user_id>/department-histories", methods=["POST"], endpoint="department_histories_create"
    )
    @permission_required("user.edit")
    def department_histories_create(user_id: int):
        return ok(svc.add_department_history(user_id, json_body()), 201)

    @app.route("/api/department-histories/<int:history_id>", methods=["PUT"], endpoint="department_histories_update")
    @permission_required("user.edit")
    def department_histories_update(history_id: int):
        return ok(svc.update_department_history(history_id, json_body()))

    @app.route(
        "/api/department-histories/<int:history_id>", methods=["DELETE"], endpoint="department_histories_delete"
    )
    @permission_required("user.edit")
    def department_histories_delete(history_id: int):
        svc.delete_department_history(history_id)
        return ok_raw({"deleted": True})
