"""Seat rules: which hierarchy slots a user may be placed in.

One district pastor per district, one supervisor per area and per zone,
and at most ``MAX_CENTRE_LEADERS`` leaders per CITH centre.
"""

from __future__ import annotations

from typing import Optional

from ..core.constants import MAX_CENTRE_LEADERS
from ..core.enums import Role
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..hierarchy.repository import HierarchyRepository
from .model import Assignment
from .repository import UserRepository

_TARGET_LABEL = {
    Role.DISTRICT_PASTOR: "District",
    Role.ZONAL_SUPERVISOR: "Zonal supervisor",
    Role.AREA_SUPERVISOR: "Area supervisor",
    Role.CITH_CENTRE: "CITH centre",
}

_TAKEN_MESSAGE = {
    Role.DISTRICT_PASTOR: "This district already has a pastor assigned",
    Role.ZONAL_SUPERVISOR: "This zone already has a supervisor assigned",
    Role.AREA_SUPERVISOR: "This area already has a supervisor assigned",
    Role.CITH_CENTRE: f"This CITH centre already has the maximum number of leaders ({MAX_CENTRE_LEADERS})",
}


def seat_capacity(role: Role) -> int:
    return MAX_CENTRE_LEADERS if role == Role.CITH_CENTRE else 1


class SeatRules:
    def __init__(self, hierarchy: HierarchyRepository, users: UserRepository):
        self._hierarchy = hierarchy
        self._users = users

    def _target_exists(self, role: Role, target_id: int) -> bool:
        if role == Role.DISTRICT_PASTOR:
            return self._hierarchy.get_district(target_id) is not None
        if role == Role.ZONAL_SUPERVISOR:
            return self._hierarchy.get_zone(target_id) is not None
        if role == Role.AREA_SUPERVISOR:
            return self._hierarchy.get_area(target_id) is not None
        if role == Role.CITH_CENTRE:
            return self._hierarchy.get_centre(target_id) is not None
        return False

    def holders(self, role: Role, target_id: int, *, exclude_user_id: Optional[int] = None) -> int:
        return sum(1 for u in self._users.list_seat_holders(role, target_id) if u.user_id != exclude_user_id)

    def is_available(self, role: Role, target_id: int, *, exclude_user_id: Optional[int] = None) -> bool:
        return self.holders(role, target_id, exclude_user_id=exclude_user_id) < seat_capacity(role)

    def claim(self, role: Role, target_id: Optional[int], *, exclude_user_id: Optional[int] = None) -> Assignment:
        """Validate a seat for ``role`` and return the matching assignment columns.

        Admins carry no seat. Raises ConflictError when the seat is full.
        """
        if role == Role.ADMIN:
            return Assignment()
        label = _TARGET_LABEL[role]
        if target_id is None:
            raise ValidationError(f"{label} ID is required for the {role.value} role")
        if not self._target_exists(role, target_id):
            raise NotFoundError(f"{label} not found")
        if not self.is_available(role, target_id, exclude_user_id=exclude_user_id):
            raise ConflictError(_TAKEN_MESSAGE[role])
        return Assignment.for_role(role, target_id)
