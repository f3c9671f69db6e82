from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import NotificationType


@dataclass(frozen=True)
class Notification:
    notification_id: int
    recipient_id: int
    title: str
    message: str
    type: NotificationType
    is_read: bool = False
    sender_id: Optional[int] = None
    action_url: Optional[str] = None
    report_id: Optional[int] = None
    message_id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewNotification:
    """A notification row to be written; one per recipient."""

    recipient_id: int
    title: str
    message: str
    type: NotificationType
    sender_id: Optional[int] = None
    action_url: Optional[str] = None
    report_id: Optional[int] = None
    message_id: Optional[int] = None
