from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from ..core.enums import MessageCategory, MessagePriority
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Conversation, Message
from .repository import MessageRepository

_COLUMNS = (
    "m.message_id, m.from_user_id, m.to_user_id, m.subject, m.content, m.priority, m.category, "
    "m.is_read, m.read_at, m.reply_to_id, m.created_at"
)


def _message(r: dict) -> Message:
    return Message(
        message_id=int(r["message_id"]),
        from_user_id=int(r["from_user_id"]),
        to_user_id=int(r["to_user_id"]),
        subject=r["subject"],
        content=r["content"],
        priority=MessagePriority(r["priority"]),
        category=MessageCategory(r["category"]),
        is_read=bool(r.get("is_read")),
        read_at=r.get("read_at"),
        reply_to_id=r.get("reply_to_id"),
        created_at=r.get("created_at"),
    )


class MySQLMessageRepository(MessageRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO messages(from_user_id, to_user_id, subject, content, priority, category, reply_to_id)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (int(from_user_id), int(to_user_id), subject, content, priority.value, category.value, reply_to_id),
            )
            return int(cur.lastrowid)

    def get(self, message_id: int) -> Optional[Message]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM messages m WHERE m.message_id=%s", (int(message_id),))
            r = fetchone(cur)
            return _message(r) if r else None

    def _page(self, column: str, user_id: int, offset: int, limit: int) -> Sequence[Message]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM messages m
                WHERE m.{column}=%s
                ORDER BY m.created_at DESC, m.message_id DESC
                LIMIT %s OFFSET %s
                """,
                (int(user_id), int(limit), int(offset)),
            )
            return [_message(r) for r in fetchall(cur)]

    def _count(self, sql: str, params: tuple) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def list_inbox(self, user_id: int, *, offset: int = 0, limit: int = 20) -> Sequence[Message]:
        return self._page("to_user_id", user_id, offset, limit)

    def count_inbox(self, user_id: int) -> int:
        return self._count("SELECT COUNT(*) AS n FROM messages WHERE to_user_id=%s", (int(user_id),))

    def list_sent(self, user_id: int, *, offset: int = 0, limit: int = 20) -> Sequence[Message]:
        return self._page("from_user_id", user_id, offset, limit)

    def count_sent(self, user_id: int) -> int:
        return self._count("SELECT COUNT(*) AS n FROM messages WHERE from_user_id=%s", (int(user_id),))

    def count_unread(self, user_id: int) -> int:
        return self._count("SELECT COUNT(*) AS n FROM messages WHERE to_user_id=%s AND is_read=0", (int(user_id),))

    def mark_read(self, message_ids: Iterable[int], *, recipient_id: int, at: datetime) -> int:
        ids_sql, params = in_clause("message_id", sorted({int(i) for i in message_ids}))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE messages SET is_read=1, read_at=%s WHERE {ids_sql} AND to_user_id=%s AND is_read=0",
                tuple([at] + params + [int(recipient_id)]),
            )
            return int(cur.rowcount)

    def mark_thread_read(self, *, recipient_id: int, counterpart_id: int, at: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE messages SET is_read=1, read_at=%s WHERE to_user_id=%s AND from_user_id=%s AND is_read=0",
                (at, int(recipient_id), int(counterpart_id)),
            )
            return int(cur.rowcount)

    def delete(self, message_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM messages WHERE message_id=%s", (int(message_id),))
            return cur.rowcount > 0

    def thread(self, user_id: int, other_id: int) -> Sequence[Message]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM messages m
                WHERE (m.from_user_id=%s AND m.to_user_id=%s) OR (m.from_user_id=%s AND m.to_user_id=%s)
                ORDER BY m.created_at ASC, m.message_id ASC
                """,
                (int(user_id), int(other_id), int(other_id), int(user_id)),
            )
            return [_message(r) for r in fetchall(cur)]

    def conversations(self, user_id: int) -> Sequence[Conversation]:
        uid = int(user_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}, t.other_id
                FROM messages m
                JOIN (
                    SELECT IF(from_user_id=%s, to_user_id, from_user_id) AS other_id, MAX(message_id) AS last_id
                    FROM messages
                    WHERE from_user_id=%s OR to_user_id=%s
                    GROUP BY other_id
                ) t ON t.last_id = m.message_id
                ORDER BY m.created_at DESC, m.message_id DESC
                """,
                (uid, uid, uid),
            )
            latest = fetchall(cur)

            cur.execute(
                "SELECT from_user_id, COUNT(*) AS n FROM messages WHERE to_user_id=%s AND is_read=0 GROUP BY from_user_id",
                (uid,),
            )
            unread = {int(r["from_user_id"]): int(r["n"]) for r in fetchall(cur)}

        out: List[Conversation] = []
        for r in latest:
            other = int(r["other_id"])
            out.append(Conversation(counterpart_id=other, last_message=_message(r), unread_count=unread.get(other, 0)))
        return out
