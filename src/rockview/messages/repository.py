from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import MessageCategory, MessagePriority
from .model import Conversation, Message


class MessageRepository(Protocol):
    def create(
        self,
        *,
        from_user_id: int,
        to_user_id: int,
        subject: str,
        content: str,
        priority: MessagePriority,
        category: MessageCategory,
        reply_to_id: Optional[int] = None,
    ) -> int:
        raise NotImplementedError

    def get(self, message_id: int) -> Optional[Message]:
        raise NotImplementedError

    def list_inbox(self, user_id: int, *, offset: int = 0, limit: int = 20) -> Sequence[Message]:
        raise NotImplementedError

    def count_inbox(self, user_id: int) -> int:
        raise NotImplementedError

    def list_sent(self, user_id: int, *, offset: int = 0, limit: int = 20) -> Sequence[Message]:
        raise NotImplementedError

    def count_sent(self, user_id: int) -> int:
        raise NotImplementedError

    def count_unread(self, user_id: int) -> int:
        raise NotImplementedError

    def mark_read(self, message_ids: Iterable[int], *, recipient_id: int, at: datetime) -> int:
        """Mark only messages addressed to ``recipient_id``; returns rows changed."""

        raise NotImplementedError

    def mark_thread_read(self, *, recipient_id: int, counterpart_id: int, at: datetime) -> int:
        raise NotImplementedError

    def delete(self, message_id: int) -> bool:
        raise NotImplementedError

    def thread(self, user_id: int, other_id: int) -> Sequence[Message]:
        """Both directions, oldest first."""

        raise NotImplementedError

    def conversations(self, user_id: int) -> Sequence[Conversation]:
        """One row per counterpart, most recent first."""

        raise NotImplementedError
