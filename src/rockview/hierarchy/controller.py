from __future__ import annotations

from typing import Callable, Iterable, Optional

from flask import Flask, jsonify, request

from ..common.http import arg_id, auth_guard, current_user, json_body
from ..common.serialization import to_jsonable, user_brief
from ..common.validators import require_id
from ..container import Container
from ..core.enums import Role
from .service import Seated

# Field on each record that shows the person filling its seat.
HOLDER_NAME_FIELD = {
    "district": "pastor_name",
    "area": "supervisor_name",
    "zone": "supervisor_name",
    "centre": "leader_name",
}


def seated_dict(seated: Seated, kind: str) -> dict:
    """Serialize a record with its seat: the real assignee wins over the stored name."""
    out = to_jsonable(seated.entity)
    holder = seated.holder
    out["is_assigned"] = seated.is_assigned
    out["is_full"] = seated.is_full
    out["assigned_user_name"] = holder.name if holder else None
    out["assigned_user_email"] = holder.email if holder else None
    out["assigned_user_phone"] = holder.phone if holder else None
    if holder:
        out[HOLDER_NAME_FIELD[kind]] = ", ".join(u.name for u in seated.holders)
    if kind == "centre":
        out["leaders"] = [user_brief(u) for u in seated.holders]
        out["leader_count"] = len(seated.holders)
        out["max_leaders"] = seated.capacity
    return out


def _id_list(name: str) -> Optional[Iterable[int]]:
    raw = request.args.get(name)
    if not raw:
        return None
    return [require_id(v, name) for v in raw.split(",") if v.strip()]


def _many(items, kind: str):
    return jsonify([seated_dict(s, kind) for s in items])


def register(app: Flask, container: Container) -> None:
    roles_required = auth_guard(container.users_repo)
    service = container.hierarchy_service

    def crud(
        path: str,
        kind: str,
        *,
        list_fn: Callable,
        get_fn: Callable,
        create_fn: Callable,
        update_fn: Callable,
        delete_fn: Callable,
        writers: tuple,
        label: str,
    ) -> None:
        prefix = path.strip("/").replace("-", "_").replace("/", "_")

        @app.route(path, methods=["GET"], endpoint=f"{prefix}_list")
        @roles_required()
        def list_view():
            return _many(list_fn(current_user()), kind)

        @app.route(f"{path}/<int:item_id>", methods=["GET"], endpoint=f"{prefix}_get")
        @roles_required()
        def get_view(item_id: int):
            return jsonify(seated_dict(get_fn(current_user(), item_id), kind))

        @app.route(path, methods=["POST"], endpoint=f"{prefix}_create")
        @roles_required(*writers)
        def create_view():
            return jsonify(seated_dict(create_fn(current_user(), json_body()), kind)), 201

        @app.route(f"{path}/<int:item_id>", methods=["PUT"], endpoint=f"{prefix}_update")
        @roles_required(*writers)
        def update_view(item_id: int):
            return jsonify(seated_dict(update_fn(current_user(), item_id, json_body()), kind))

        @app.route(f"{path}/<int:item_id>", methods=["DELETE"], endpoint=f"{prefix}_delete")
        @roles_required(*writers)
        def delete_view(item_id: int):
            delete_fn(current_user(), item_id)
            return jsonify({"message": f"{label} deleted successfully"})

    crud(
        "/api/districts",
        "district",
        list_fn=lambda actor: service.list_districts(actor),
        get_fn=lambda actor, i: service.get_district(i),
        create_fn=service.create_district,
        update_fn=service.update_district,
        delete_fn=service.delete_district,
        writers=(Role.ADMIN,),
        label="District",
    )
    crud(
        "/api/area-supervisors",
        "area",
        list_fn=lambda actor: service.list_areas(actor, district_id=arg_id("district_id")),
        get_fn=service.get_area,
        create_fn=service.create_area,
        update_fn=service.update_area,
        delete_fn=service.delete_area,
        writers=(Role.ADMIN, Role.DISTRICT_PASTOR),
        label="Area supervisor",
    )
    crud(
        "/api/zonal-supervisors",
        "zone",
        list_fn=lambda actor: service.list_zones(actor, district_id=arg_id("district_id")),
        get_fn=service.get_zone,
        create_fn=service.create_zone,
        update_fn=service.update_zone,
        delete_fn=service.delete_zone,
        writers=(Role.ADMIN, Role.DISTRICT_PASTOR),
        label="Zonal supervisor",
    )

    def list_centres(actor):
        ids = _id_list("area_supervisor_ids")
        single = arg_id("area_supervisor_id")
        if single is not None:
            ids = [single]
        return service.list_centres(actor, area_supervisor_ids=ids)

    crud(
        "/api/cith-centres",
        "centre",
        list_fn=list_centres,
        get_fn=service.get_centre,
        create_fn=service.create_centre,
        update_fn=service.update_centre,
        delete_fn=service.delete_centre,
        writers=(Role.ADMIN, Role.DISTRICT_PASTOR, Role.AREA_SUPERVISOR),
        label="CITH centre",
    )

    # -------- public listings for the registration form --------
    @app.route("/api/public/districts", methods=["GET"], endpoint="public_districts")
    def public_districts():
        return _many(service.public_districts(), "district")

    @app.route("/api/public/area-supervisors", methods=["GET"], endpoint="public_areas")
    def public_areas():
        return _many(service.public_areas(district_id=arg_id("district_id")), "area")

    @app.route("/api/public/zonal-supervisors", methods=["GET"], endpoint="public_zones")
    def public_zones():
        return _many(service.public_zones(district_id=arg_id("district_id")), "zone")

    @app.route("/api/public/cith-centres", methods=["GET"], endpoint="public_centres")
    def public_centres():
        return _many(service.public_centres(area_supervisor_id=arg_id("area_supervisor_id")), "centre")
