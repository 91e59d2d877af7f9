from __future__ import annotations

from flask import Flask, g, session

from ..api.http import json_body, ok_raw
from ..common.serialization import to_api
from ..common.validators import read_int
from ..container import Container
from ..core.exceptions import ValidationError
from .guards import current_auth

SESSION_USER_KEY = "user_id"
SESSION_LOGGED_OUT_KEY = "logged_out"


def _session_payload(container: Container) -> dict:
    auth = current_auth()
    if auth.user is None:
        return {"user": None, "role": None, "permissions": []}
    role = next((r for r in container.role_service.list_roles() if r.name == auth.role), None)
    return {
        "user": auth.user.to_dict(now=container.clock()),
        "role": to_api(role) if role else None,
        "permissions": auth.permissions(),
    }


def register(app: Flask, container: Container) -> None:
    @app.before_request
    def _load_auth_context():
        g.auth = container.auth_service.resolve(
            session.get(SESSION_USER_KEY),
            logged_out=bool(session.get(SESSION_LOGGED_OUT_KEY)),
        )

    @app.route("/api/session", methods=["GET"], endpoint="session_get")
    def session_get():
        return ok_raw(_session_payload(container))

    @app.route("/api/session", methods=["POST"], endpoint="session_switch")
    def session_switch():
        user_id = read_int(json_body().get("user_id"))
        if user_id is None:
            raise ValidationError(errors={"userId": "職員を選択してください"})
        g.auth = container.auth_service.switch_user(user_id)
        session[SESSION_USER_KEY] = user_id
        session.pop(SESSION_LOGGED_OUT_KEY, None)
        return ok_raw(_session_payload(container))

    @app.route("/api/session", methods=["DELETE"], endpoint="session_logout")
    def session_logout():
        session.clear()
        session[SESSION_LOGGED_OUT_KEY] = True
        return ok_raw({"user": None, "role": None, "permissions": []})
