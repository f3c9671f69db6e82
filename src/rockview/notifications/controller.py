from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import arg_flag, auth_guard, current_user, page_request
from ..common.serialization import page_dict, to_jsonable
from ..container import Container
from ..core.constants import DEFAULT_NOTIFICATION_PAGE_SIZE


def register(app: Flask, container: Container) -> None:
    roles_required = auth_guard(container.users_repo)
    service = container.notification_service

    @app.route("/api/notifications", methods=["GET"], endpoint="notifications_list")
    @roles_required()
    def list_notifications():
        page = service.list_for(
            current_user(),
            page_request(DEFAULT_NOTIFICATION_PAGE_SIZE),
            unread_only=arg_flag("unread_only"),
        )
        return jsonify(page_dict(page, "notifications", to_jsonable))

    @app.route("/api/notifications/unread-count", methods=["GET"], endpoint="notifications_unread_count")
    @roles_required()
    def unread_count():
        return jsonify({"count": service.unread_count(current_user())})

    @app.route("/api/notifications/<int:notification_id>/read", methods=["PUT"], endpoint="notifications_read")
    @roles_required()
    def mark_read(notification_id: int):
        return jsonify(to_jsonable(service.mark_read(current_user(), notification_id)))

    @app.route("/api/notifications/mark-all-read", methods=["PUT"], endpoint="notifications_read_all")
    @roles_required()
    def mark_all_read():
        updated = service.mark_all_read(current_user())
        return jsonify({"message": "All notifications marked as read", "updated": updated})
