from __future__ import annotations

from flask import Flask

from ..api.http import arg, json_body, ok, ok_raw
from ..auth.guards import login_required, permission_required
from ..common.serialization import to_api
from ..container import Container
from ..core.exceptions import NotFoundError


def register(app: Flask, container: Container) -> None:
    svc = container.group_home_service

    def _present(gh) -> dict:
        data = to_api(gh)
        data["expansions"] = to_api(svc.expansions_for(gh))
        return data

    @app.route("/api/group-homes", methods=["GET"], endpoint="group_homes_list")
    @login_required
    def group_homes_list():
        homes = svc.list_group_homes(q=arg("q"), address=arg("address"))
        return ok_raw([_present(gh) for gh in homes])

    @app.route("/api/group-homes/statistics", methods=["GET"], endpoint="group_homes_statistics")
    @login_required
    def group_homes_statistics():
        return ok_raw(svc.statistics())

    @app.route("/api/group-homes", methods=["POST"], endpoint="group_homes_create")
    @permission_required("grouphome.create")
    def group_homes_create():
        return ok_raw(_present(svc.create_group_home(json_body())), 201)

    @app.route("/api/group-homes/<int:group_home_id>", methods=["GET"], endpoint="group_homes_get")
    @login_required
    def group_homes_get(group_home_id: int):
        return ok_raw(_present(svc.get_group_home(group_home_id)))

    @app.route("/api/group-homes/<int:group_home_id>", methods=["PUT"], endpoint="group_homes_update")
    @permission_required("grouphome.edit")
    def group_homes_update(group_home_id: int):
        return ok_raw(_present(svc.update_group_home(group_home_id, json_body())))

    @app.route("/api/group-homes/<int:group_home_id>", methods=["DELETE"], endpoint="group_homes_delete")
    @permission_required("grouphome.delete")
    def group_homes_delete(group_home_id: int):
        svc.delete_group_home(group_home_id)
        return ok_raw({"deleted": True})

    @app.route("/api/expansions", methods=["GET"], endpoint="expansions_list")
    @login_required
    def expansions_list():
        return ok(svc.list_expansions(property_name=arg("property_name")))

    @app.route("/api/expansions", methods=["POST"], endpoint="expansions_create")
    @permission_required("grouphome.create", "grouphome.edit")
    def expansions_create():
        return ok(svc.create_expansion(json_body()), 201)

    @app.route("/api/expansions/<int:expansion_id>", methods=["GET"], endpoint="expansions_get")
    @login_required
    def expansions_get(expansion_id: int):
        return ok(svc.get_expansion(expansion_id))

    @app.route("/api/expansions/<int:expansion_id>", methods=["PUT"], endpoint="expansions_update")
    @permission_required("grouphome.edit")
    def expansions_update(expansion_id: int):
        return ok(svc.update_expansion(expansion_id, json_body()))

    @app.route("/api/expansions/<int:expansion_id>", methods=["DELETE"], endpoint="expansions_delete")
    @permission_required("grouphome.delete", "grouphome.edit")
    def expansions_delete(expansion_id: int):
        svc.delete_expansion(expansion_id)
        return ok_raw({"deleted": True})

    @app.route("/api/properties", methods=["GET"], endpoint="properties_list")
    @login_required
    def properties_list():
        return ok_raw(
            [{"propertyName": name, "units": svc.units_for_property(name)} for name in svc.property_names()]
        )

    @app.route("/api/units", methods=["GET"], endpoint="units_list")
    @login_required
    def units_list():
        return ok_raw(
            [
                {"key": u.key, "propertyName": u.property_name, "unitName": u.unit_name, "label": u.label}
                for u in svc.unit_catalogue()
            ]
        )

    @app.route("/api/units/rooms", methods=["GET"], endpoint="units_rooms")
    @login_required
    def units_rooms():
        key = arg("group_home_id")
        if key:
            unit = svc.resolve_unit(key)
            if unit is None:
                raise NotFoundError("ユニットが見つかりません")
            property_name, unit_name = unit.property_name, unit.unit_name
        else:
            property_name, unit_name = arg("property_name") or "", arg("unit_name") or ""
        return ok_raw(svc.available_rooms(property_name, unit_name))
