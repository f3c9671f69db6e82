from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import NewNotification, Notification


class NotificationRepository(Protocol):
    def create(self, n: NewNotification) -> int:
        raise NotImplementedError

    def get(self, notification_id: int) -> Optional[Notification]:
        raise NotImplementedError

    def list_for(self, recipient_id: int, *, unread_only: bool = False, offset: int = 0, limit: int = 20) -> Sequence[Notification]:
        raise NotImplementedError

    def count_for(self, recipient_id: int, *, unread_only: bool = False) -> int:
        raise NotImplementedError

    def mark_read(self, notification_id: int, *, recipient_id: int) -> bool:
        raise NotImplementedError

    def mark_all_read(self, recipient_id: int) -> int:
        raise NotImplementedError
