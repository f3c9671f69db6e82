from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import NotificationType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import NewNotification, Notification
from .repository import NotificationRepository

_COLUMNS = (
    "notification_id, recipient_id, sender_id, title, message, type, is_read, "
    "action_url, report_id, message_id, created_at"
)


def _notification(r: dict) -> Notification:
    return Notification(
        notification_id=int(r["notification_id"]),
        recipient_id=int(r["recipient_id"]),
        sender_id=r.get("sender_id"),
        title=r["title"],
        message=r["message"],
        type=NotificationType(r["type"]),
        is_read=bool(r.get("is_read")),
        action_url=r.get("action_url"),
        report_id=r.get("report_id"),
        message_id=r.get("message_id"),
        created_at=r.get("created_at"),
    )


class MySQLNotificationRepository(NotificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, n: NewNotification) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notifications(recipient_id, sender_id, title, message, type, action_url, report_id, message_id)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(n.recipient_id),
                    n.sender_id,
                    n.title,
                    n.message,
                    n.type.value,
                    n.action_url,
                    n.report_id,
                    n.message_id,
                ),
            )
            return int(cur.lastrowid)

    def get(self, notification_id: int) -> Optional[Notification]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM notifications WHERE notification_id=%s", (int(notification_id),))
            r = fetchone(cur)
            return _notification(r) if r else None

    def list_for(self, recipient_id: int, *, unread_only: bool = False, offset: int = 0, limit: int = 20) -> Sequence[Notification]:
        extra = " AND is_read=0" if unread_only else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM notifications
                WHERE recipient_id=%s{extra}
                ORDER BY created_at DESC, notification_id DESC
                LIMIT %s OFFSET %s
                """,
                (int(recipient_id), int(limit), int(offset)),
            )
            return [_notification(r) for r in fetchall(cur)]

    def count_for(self, recipient_id: int, *, unread_only: bool = False) -> int:
        extra = " AND is_read=0" if unread_only else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM notifications WHERE recipient_id=%s{extra}", (int(recipient_id),))
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def mark_read(self, notification_id: int, *, recipient_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE notifications SET is_read=1 WHERE notification_id=%s AND recipient_id=%s",
                (int(notification_id), int(recipient_id)),
            )
            return cur.rowcount >= 0

    def mark_all_read(self, recipient_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE notifications SET is_read=1 WHERE recipient_id=%s AND is_read=0", (int(recipient_id),))
            return int(cur.rowcount)
