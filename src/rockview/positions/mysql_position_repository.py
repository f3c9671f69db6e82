from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Sequence

from ..core.enums import PositionRequestStatus, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, where
from .model import PositionChangeRequest
from .repository import PositionRequestRepository

_COLUMNS = (
    "request_id, user_id, current_role, new_role, target_id, status, created_at, "
    "reviewed_by, reviewed_at, rejection_reason"
)


def _request(r: dict) -> PositionChangeRequest:
    return PositionChangeRequest(
        request_id=int(r["request_id"]),
        user_id=int(r["user_id"]),
        current_role=Role(r["current_role"]),
        new_role=Role(r["new_role"]),
        target_id=int(r["target_id"]),
        status=PositionRequestStatus(r["status"]),
        created_at=r.get("created_at"),
        reviewed_by=r.get("reviewed_by"),
        reviewed_at=r.get("reviewed_at"),
        rejection_reason=r.get("rejection_reason"),
    )


class MySQLPositionRequestRepository(PositionRequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, user_id: int, current_role: Role, new_role: Role, target_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO position_change_requests(user_id, current_role, new_role, target_id, status)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(user_id), current_role.value, new_role.value, int(target_id), PositionRequestStatus.PENDING.value),
            )
            return int(cur.lastrowid)

    def get(self, request_id: int) -> Optional[PositionChangeRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM position_change_requests WHERE request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _request(r) if r else None

    def has_pending(self, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 FROM position_change_requests WHERE user_id=%s AND status=%s LIMIT 1",
                (int(user_id), PositionRequestStatus.PENDING.value),
            )
            return fetchone(cur) is not None

    def list(self, *, user_id: Optional[int] = None, status: Optional[PositionRequestStatus] = None) -> Sequence[PositionChangeRequest]:
        clauses: List[str] = []
        params: List[object] = []
        if user_id is not None:
            clauses.append("user_id=%s")
            params.append(int(user_id))
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM position_change_requests WHERE {where(clauses)} ORDER BY created_at DESC, request_id DESC",
                tuple(params),
            )
            return [_request(r) for r in fetchall(cur)]

    def decide(
        self,
        *,
        request_id: int,
        status: PositionRequestStatus,
        reviewed_by: int,
        at: datetime,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE position_change_requests
                SET status=%s, reviewed_by=%s, reviewed_at=%s, rejection_reason=%s
                WHERE request_id=%s AND status=%s
                """,
                (
                    status.value,
                    int(reviewed_by),
                    at,
                    rejection_reason,
                    int(request_id),
                    PositionRequestStatus.PENDING.value,
                ),
            )
            return cur.rowcount == 1

    def delete_pending(self, request_id: int, *, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM position_change_requests WHERE request_id=%s AND user_id=%s AND status=%s",
                (int(request_id), int(user_id), PositionRequestStatus.PENDING.value),
            )
            return cur.rowcount == 1
