from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import PositionRequestStatus, Role
from .model import PositionChangeRequest


class PositionRequestRepository(Protocol):
    def create(self, *, user_id: int, current_role: Role, new_role: Role, target_id: int) -> int:
        raise NotImplementedError

    def get(self, request_id: int) -> Optional[PositionChangeRequest]:
        raise NotImplementedError

    def has_pending(self, user_id: int) -> bool:
        raise NotImplementedError

    def list(self, *, user_id: Optional[int] = None, status: Optional[PositionRequestStatus] = None) -> Sequence[PositionChangeRequest]:
        raise NotImplementedError

    def decide(
        self,
        *,
        request_id: int,
        status: PositionRequestStatus,
        reviewed_by: int,
        at: datetime,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        """Close a pending request; False when it was no longer pending."""

        raise NotImplementedError

    def delete_pending(self, request_id: int, *, user_id: int) -> bool:
        raise NotImplementedError
