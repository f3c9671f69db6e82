from __future__ import annotations

from typing import Dict, Iterable

from flask import Flask, jsonify, request

from ..common.http import auth_guard, current_user, json_body, page_request
from ..common.serialization import page_dict, to_jsonable, user_brief
from ..common.validators import optional_id, parse_enum, require_id
from ..container import Container
from ..core.constants import DEFAULT_MESSAGE_PAGE_SIZE
from ..core.enums import MessageCategory, MessagePriority
from ..users.model import User
from .model import Message
from .service import INBOX


def message_dict(msg: Message, people: Dict[int, User]) -> dict:
    out = to_jsonable(msg)
    sender = people.get(msg.from_user_id)
    recipient = people.get(msg.to_user_id)
    out["from_user_name"] = sender.name if sender else None
    out["to_user_name"] = recipient.name if recipient else None
    return out


def register(app: Flask, container: Container) -> None:
    roles_required = auth_guard(container.users_repo)
    service = container.message_service
    users = container.users_repo

    def people_for(messages: Iterable[Message]) -> Dict[int, User]:
        ids = set()
        for m in messages:
            ids.update((m.from_user_id, m.to_user_id))
        return {u.user_id: u for u in users.get_many(ids)}

    @app.route("/api/messages/send", methods=["POST"], endpoint="messages_send")
    @roles_required()
    def send_message():
        body = json_body()
        msg = service.send(
            current_user(),
            to_user_id=require_id(body.get("to_user_id"), "to_user_id"),
            subject=body.get("subject"),
            content=body.get("content"),
            priority=parse_enum(MessagePriority, body.get("priority") or MessagePriority.NORMAL.value, "priority"),
            category=parse_enum(MessageCategory, body.get("category") or MessageCategory.GENERAL.value, "category"),
            reply_to_id=optional_id(body.get("reply_to_id"), "reply_to_id"),
        )
        return jsonify(message_dict(msg, people_for([msg]))), 201

    @app.route("/api/messages", methods=["GET"], endpoint="messages_list")
    @roles_required()
    def list_messages():
        box = (request.args.get("type") or INBOX).strip().lower()
        page = service.list(current_user(), box, page_request(DEFAULT_MESSAGE_PAGE_SIZE))
        people = people_for(page.items)
        return jsonify(page_dict(page, "messages", lambda m: message_dict(m, people)))

    @app.route("/api/messages/<int:message_id>", methods=["GET"], endpoint="messages_get")
    @roles_required()
    def get_message(message_id: int):
        msg = service.get(current_user(), message_id)
        return jsonify(message_dict(msg, people_for([msg])))

    @app.route("/api/messages/<int:message_id>", methods=["DELETE"], endpoint="messages_delete")
    @roles_required()
    def delete_message(message_id: int):
        service.delete(current_user(), message_id)
        return jsonify({"message": "Message deleted successfully"})

    @app.route("/api/messages/unread/count", methods=["GET"], endpoint="messages_unread_count")
    @roles_required()
    def unread_count():
        return jsonify({"count": service.unread_count(current_user())})

    @app.route("/api/messages/mark-read", methods=["PUT"], endpoint="messages_mark_read")
    @roles_required()
    def mark_read():
        updated = service.mark_read(current_user(), json_body().get("message_ids"))
        return jsonify({"message": "Messages marked as read", "updated": updated})

    @app.route("/api/messages/users", methods=["GET"], endpoint="messages_users")
    @roles_required()
    def available_users():
        return jsonify([user_brief(u) for u in service.available_users(current_user())])

    @app.route("/api/messages/conversations", methods=["GET"], endpoint="messages_conversations")
    @roles_required()
    def conversations():
        rows = service.conversations(current_user())
        people = people_for(c.last_message for c, _ in rows)
        return jsonify(
            [
                {
                    "user": user_brief(other),
                    "last_message": message_dict(c.last_message, people),
                    "unread_count": c.unread_count,
                }
                for c, other in rows
            ]
        )

    @app.route("/api/messages/conversation/<int:user_id>", methods=["GET"], endpoint="messages_conversation")
    @roles_required()
    def conversation(user_id: int):
        other, thread = service.conversation(current_user(), user_id)
        people = {current_user().user_id: current_user(), other.user_id: other}
        return jsonify({"user": user_brief(other), "messages": [message_dict(m, people) for m in thread]})
