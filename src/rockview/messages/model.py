from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import MessageCategory, MessagePriority


@dataclass(frozen=True)
class Message:
    message_id: int
    from_user_id: int
    to_user_id: int
    subject: str
    content: str
    priority: MessagePriority = MessagePriority.NORMAL
    category: MessageCategory = MessageCategory.GENERAL
    is_read: bool = False
    read_at: Optional[datetime] = None
    reply_to_id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Conversation:
    """Latest message exchanged with one counterpart."""

    counterpart_id: int
    last_message: Message
    unread_count: int = 0
