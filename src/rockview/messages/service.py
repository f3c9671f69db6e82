from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from ..access.policy import VisibilityPolicy
from ..common.datetime_utils import now_local
from ..common.pagination import Page, PageRequest
from ..common.validators import require_id, require_non_empty
from ..core.enums import MessageCategory, MessagePriority, NotificationType
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..notifications.model import NewNotification
from ..notifications.service import Notifier
from ..users.model import User
from ..users.repository import UserRepository
from .model import Conversation, Message
from .repository import MessageRepository

logger = logging.getLogger(__name__)

INBOX = "inbox"
SENT = "sent"


class MessageService:
    def __init__(
        self,
        messages: MessageRepository,
        users: UserRepository,
        policy: VisibilityPolicy,
        notifier: Notifier,
        clock: Callable[[], datetime] = now_local,
    ):
        self._messages = messages
        self._users = users
        self._policy = policy
        self._notifier = notifier
        self._clock = clock

    def _get_for(self, user: User, message_id: int) -> Message:
        msg = self._messages.get(message_id)
        if not msg:
            raise NotFoundError("Message not found")
        if user.user_id not in (msg.from_user_id, msg.to_user_id):
            raise AuthorizationError("Access denied")
        return msg

    def send(
        self,
        sender: User,
        *,
        to_user_id: int,
        subject: Optional[str],
        content: Optional[str],
        priority: MessagePriority = MessagePriority.NORMAL,
        category: MessageCategory = MessageCategory.GENERAL,
        reply_to_id: Optional[int] = None,
    ) -> Message:
        subject = require_non_empty(subject, "Subject")
        content = require_non_empty(content, "Content")

        recipient = self._users.get_by_id(to_user_id)
        if not recipient or not recipient.is_active:
            raise NotFoundError("Recipient not found")
        if not self._policy.can_message(sender, recipient):
            raise AuthorizationError("You cannot message this user")

        if reply_to_id is not None:
            original = self._messages.get(reply_to_id)
            if not original or sender.user_id not in (original.from_user_id, original.to_user_id):
                raise ValidationError("The message being replied to does not exist")

        message_id = self._messages.create(
            from_user_id=sender.user_id,
            to_user_id=recipient.user_id,
            subject=subject,
            content=content,
            priority=priority,
            category=category,
            reply_to_id=reply_to_id,
        )
        logger.info("Message %s sent from user %s to user %s", message_id, sender.user_id, recipient.user_id)

        self._notifier.deliver(
            [
                NewNotification(
                    recipient_id=recipient.user_id,
                    sender_id=sender.user_id,
                    title=f"New message from {sender.name}",
                    message=subject,
                    type=NotificationType.MESSAGE,
                    action_url=f"/messages/{message_id}",
                    message_id=message_id,
                )
            ]
        )
        return self._get_for(sender, message_id)

    def list(self, user: User, box: str, page: PageRequest) -> Page[Message]:
        if box == INBOX:
            items = self._messages.list_inbox(user.user_id, offset=page.offset, limit=page.limit)
            total = self._messages.count_inbox(user.user_id)
        elif box == SENT:
            items = self._messages.list_sent(user.user_id, offset=page.offset, limit=page.limit)
            total = self._messages.count_sent(user.user_id)
        else:
            raise ValidationError("type must be inbox or sent")
        return Page(items=items, total=total, page=page.page, limit=page.limit)

    def get(self, user: User, message_id: int) -> Message:
        """Fetch one message; opening it as the recipient marks it read."""
        msg = self._get_for(user, message_id)
        if msg.to_user_id == user.user_id and not msg.is_read:
            self._messages.mark_read([msg.message_id], recipient_id=user.user_id, at=self._clock())
            msg = self._get_for(user, message_id)
        return msg

    def delete(self, user: User, message_id: int) -> None:
        msg = self._get_for(user, message_id)
        self._messages.delete(msg.message_id)

    def unread_count(self, user: User) -> int:
        return self._messages.count_unread(user.user_id)

    def mark_read(self, user: User, message_ids: Iterable) -> int:
        if message_ids is None or isinstance(message_ids, (str, bytes)):
            raise ValidationError("message_ids must be a list")
        ids = [require_id(i, "message_ids") for i in message_ids]
        if not ids:
            return 0
        return self._messages.mark_read(ids, recipient_id=user.user_id, at=self._clock())

    def available_users(self, user: User) -> List[User]:
        return self._policy.message_recipients(user)

    def conversations(self, user: User) -> List[Tuple[Conversation, User]]:
        convs = self._messages.conversations(user.user_id)
        people = {u.user_id: u for u in self._users.get_many(c.counterpart_id for c in convs)}
        return [(c, people[c.counterpart_id]) for c in convs if c.counterpart_id in people]

    def conversation(self, user: User, other_user_id: int) -> Tuple[User, Sequence[Message]]:
        other = self._users.get_by_id(other_user_id)
        if not other:
            raise NotFoundError("User not found")
        self._messages.mark_thread_read(recipient_id=user.user_id, counterpart_id=other.user_id, at=self._clock())
        return other, self._messages.thread(user.user_id, other.user_id)
