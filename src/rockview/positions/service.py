from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty
from ..core.enums import PositionRequestStatus, Role
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..users.model import User
from ..users.repository import UserRepository
from ..users.seats import SeatRules
from .model import PositionChangeRequest
from .repository import PositionRequestRepository

logger = logging.getLogger(__name__)


class PositionRequestService:
    def __init__(
        self,
        requests: PositionRequestRepository,
        users: UserRepository,
        seats: SeatRules,
        clock: Callable[[], datetime] = now_local,
    ):
        self._requests = requests
        self._users = users
        self._seats = seats
        self._clock = clock

    def submit(self, user: User, *, new_role: Role, target_id: Optional[int]) -> PositionChangeRequest:
        if new_role == Role.ADMIN:
            raise ValidationError("Admin positions cannot be requested")
        if self._requests.has_pending(user.user_id):
            raise ConflictError("You already have a pending position change request")
        if new_role == user.role and target_id == user.hierarchy_id:
            raise ValidationError("You already hold this position")

        try:
            self._seats.claim(new_role, target_id, exclude_user_id=user.user_id)
        except ConflictError:
            raise ConflictError("This position is not available")

        request_id = self._requests.create(
            user_id=user.user_id, current_role=user.role, new_role=new_role, target_id=int(target_id)
        )
        logger.info("User %s requested move to %s #%s", user.user_id, new_role.value, target_id)
        return self._get(request_id)

    def _get(self, request_id: int) -> PositionChangeRequest:
        req = self._requests.get(request_id)
        if not req:
            raise NotFoundError("Request not found")
        return req

    def list_mine(self, user: User) -> Sequence[PositionChangeRequest]:
        return self._requests.list(user_id=user.user_id)

    def cancel(self, user: User, request_id: int) -> None:
        req = self._get(request_id)
        if req.user_id != user.user_id:
            raise NotFoundError("Request not found")
        if req.status != PositionRequestStatus.PENDING or not self._requests.delete_pending(request_id, user_id=user.user_id):
            raise ValidationError("Only pending requests can be cancelled")

    def list_all(self, admin: User, *, status: Optional[PositionRequestStatus] = None) -> Sequence[PositionChangeRequest]:
        if not admin.is_admin:
            raise AuthorizationError("Only admins can review position requests")
        return self._requests.list(status=status)

    def approve(self, admin: User, request_id: int) -> PositionChangeRequest:
        if not admin.is_admin:
            raise AuthorizationError("Only admins can review position requests")
        req = self._get(request_id)
        if req.status != PositionRequestStatus.PENDING:
            raise ValidationError("Request has already been processed")

        user = self._users.get_by_id(req.user_id)
        if not user:
            raise NotFoundError("User not found")
        try:
            assignment = self._seats.claim(req.new_role, req.target_id, exclude_user_id=user.user_id)
        except ConflictError:
            raise ConflictError("Position is no longer available")

        if not self._requests.decide(
            request_id=req.request_id,
            status=PositionRequestStatus.APPROVED,
            reviewed_by=admin.user_id,
            at=self._clock(),
        ):
            raise ValidationError("Request has already been processed")

        self._users.assign_role(user.user_id, role=req.new_role, assignment=assignment)
        logger.info("Admin %s approved position request %s for user %s", admin.user_id, req.request_id, user.user_id)
        return self._get(req.request_id)

    def reject(self, admin: User, request_id: int, reason: Optional[str]) -> PositionChangeRequest:
        if not admin.is_admin:
            raise AuthorizationError("Only admins can review position requests")
        reason = require_non_empty(reason, "Rejection reason")
        req = self._get(request_id)
        if not self._requests.decide(
            request_id=req.request_id,
            status=PositionRequestStatus.REJECTED,
            reviewed_by=admin.user_id,
            at=self._clock(),
            rejection_reason=reason,
        ):
            raise ValidationError("Request has already been processed")
        return self._get(req.request_id)
