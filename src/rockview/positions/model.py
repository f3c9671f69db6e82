from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import PositionRequestStatus, Role


@dataclass(frozen=True)
class PositionChangeRequest:
    """A user's request to move to another role and hierarchy slot."""

    request_id: int
    user_id: int
    current_role: Role
    new_role: Role
    target_id: int
    status: PositionRequestStatus
    created_at: Optional[datetime] = None
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
