from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import arg_enum, auth_guard, current_user, json_body
from ..common.serialization import to_jsonable
from ..common.validators import parse_enum, require_non_empty
from ..container import Container
from ..core.enums import PositionRequestStatus, Role
from ..users.controller import _target_id


def register(app: Flask, container: Container) -> None:
    roles_required = auth_guard(container.users_repo)
    service = container.position_service

    @app.route("/api/auth/position-change-request", methods=["POST"], endpoint="positions_submit")
    @roles_required()
    def submit_request():
        body = json_body()
        role = parse_enum(Role, require_non_empty(body.get("new_role"), "New role"), "new_role")
        req = service.submit(current_user(), new_role=role, target_id=_target_id(body, role))
        return jsonify(to_jsonable(req)), 201

    @app.route("/api/auth/my-position-requests", methods=["GET"], endpoint="positions_mine")
    @roles_required()
    def my_requests():
        return jsonify([to_jsonable(r) for r in service.list_mine(current_user())])

    @app.route("/api/auth/position-change-request/<int:request_id>", methods=["DELETE"], endpoint="positions_cancel")
    @roles_required()
    def cancel_request(request_id: int):
        service.cancel(current_user(), request_id)
        return jsonify({"message": "Request cancelled"})

    @app.route("/api/auth/position-change-requests", methods=["GET"], endpoint="positions_list")
    @roles_required(Role.ADMIN)
    def list_requests():
        status = arg_enum(PositionRequestStatus, "status")
        return jsonify([to_jsonable(r) for r in service.list_all(current_user(), status=status)])

    @app.route("/api/auth/position-change-request/<int:request_id>/approve", methods=["PUT"], endpoint="positions_approve")
    @roles_required(Role.ADMIN)
    def approve_request(request_id: int):
        return jsonify(to_jsonable(service.approve(current_user(), request_id)))

    @app.route("/api/auth/position-change-request/<int:request_id>/reject", methods=["PUT"], endpoint="positions_reject")
    @roles_required(Role.ADMIN)
    def reject_request(request_id: int):
        body = json_body()
        return jsonify(to_jsonable(service.reject(current_user(), request_id, body.get("reason"))))
