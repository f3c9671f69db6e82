from __future__ import annotations

import logging

from flask import Flask, jsonify
from flask_jwt_extended import create_access_token

from ..common.http import auth_guard, current_user, json_body
from ..common.serialization import user_dict
from ..common.validators import optional_id, parse_enum, require_non_empty
from ..container import Container
from ..core.enums import Role
from .model import User

logger = logging.getLogger(__name__)


def _token_for(user: User) -> str:
    return create_access_token(identity=str(user.user_id), additional_claims={"role": user.role.value})


def _target_id(body: dict, role: Role):
    """Registration forms send the slot id under the role's own key or as target_id."""
    keys = {
        Role.DISTRICT_PASTOR: "district_id",
        Role.ZONAL_SUPERVISOR: "zonal_supervisor_id",
        Role.AREA_SUPERVISOR: "area_supervisor_id",
        Role.CITH_CENTRE: "cith_centre_id",
    }
    raw = body.get("target_id")
    if raw in (None, "") and role in keys:
        raw = body.get(keys[role])
    return optional_id(raw, "target_id")


def register(app: Flask, container: Container) -> None:
    roles_required = auth_guard(container.users_repo)
    auth = container.auth_service
    users = container.user_service

    @app.route("/api/auth/register", methods=["POST"], endpoint="auth_register")
    def register_user():
        body = json_body()
        role = parse_enum(Role, require_non_empty(body.get("role"), "Role"), "role")
        user = auth.register(
            email=body.get("email"),
            password=body.get("password"),
            name=body.get("name"),
            phone=body.get("phone"),
            role=role,
            target_id=_target_id(body, role),
        )
        return jsonify({"token": _token_for(user), "user": user_dict(user)}), 201

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def login():
        body = json_body()
        user = auth.authenticate(body.get("email"), body.get("password"))
        logger.info("User %s logged in", user.user_id)
        return jsonify({"token": _token_for(user), "user": user_dict(user)})

    @app.route("/api/auth/profile", methods=["GET"], endpoint="auth_profile")
    @roles_required()
    def profile():
        return jsonify(user_dict(current_user()))

    @app.route("/api/auth/profile", methods=["PUT"], endpoint="auth_profile_update")
    @roles_required()
    def update_profile():
        body = json_body()
        user = users.update_profile(current_user(), name=body.get("name"), phone=body.get("phone"))
        return jsonify(user_dict(user))

    @app.route("/api/auth/change-password", methods=["PUT"], endpoint="auth_change_password")
    @roles_required()
    def change_password():
        body = json_body()
        users.change_password(
            current_user(),
            current_password=body.get("current_password"),
            new_password=body.get("new_password"),
        )
        return jsonify({"message": "Password updated successfully"})

    @app.route("/api/auth/delete-account", methods=["DELETE"], endpoint="auth_delete_account")
    @roles_required()
    def delete_account():
        users.delete_account(current_user())
        return jsonify({"message": "Account deleted successfully"})

    # -------- user management --------
    @app.route("/api/users", methods=["GET"], endpoint="users_list")
    @roles_required(Role.ADMIN)
    def list_users():
        return jsonify([user_dict(u) for u in users.list_all(current_user())])

    @app.route("/api/users/hierarchy", methods=["GET"], endpoint="users_hierarchy")
    @roles_required()
    def hierarchy_users():
        return jsonify([user_dict(u) for u in users.list_hierarchy(current_user())])

    @app.route("/api/users/<int:user_id>", methods=["DELETE"], endpoint="users_delete")
    @roles_required(Role.ADMIN)
    def delete_user(user_id: int):
        users.delete_user(current_user(), user_id)
        return jsonify({"message": "User deleted successfully"})

    @app.route("/api/users/<int:user_id>/role", methods=["PUT"], endpoint="users_update_role")
    @roles_required(Role.ADMIN)
    def update_role(user_id: int):
        body = json_body()
        role = parse_enum(Role, require_non_empty(body.get("role"), "Role"), "role")
        user = users.update_role(current_user(), user_id, role=role, target_id=_target_id(body, role))
        return jsonify(user_dict(user))
