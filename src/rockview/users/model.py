from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role

# Role -> the single hierarchy reference a user of that role carries.
ROLE_REFERENCE_FIELD = {
    Role.DISTRICT_PASTOR: "district_id",
    Role.ZONAL_SUPERVISOR: "zonal_supervisor_id",
    Role.AREA_SUPERVISOR: "area_supervisor_id",
    Role.CITH_CENTRE: "cith_centre_id",
}


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Note: plain data object, no database access.
    """

    user_id: int
    email: str
    password_hash: str
    name: str
    phone: str
    role: Role
    district_id: Optional[int] = None
    zonal_supervisor_id: Optional[int] = None
    area_supervisor_id: Optional[int] = None
    cith_centre_id: Optional[int] = None
    is_active: bool = True
    created_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def hierarchy_id(self) -> Optional[int]:
        """The id of the slot this user fills, or None for admins."""
        field_name = ROLE_REFERENCE_FIELD.get(self.role)
        return getattr(self, field_name) if field_name else None


@dataclass(frozen=True)
class Assignment:
    """Hierarchy reference columns for a role change; at most one is set."""

    district_id: Optional[int] = None
    zonal_supervisor_id: Optional[int] = None
    area_supervisor_id: Optional[int] = None
    cith_centre_id: Optional[int] = None

    @classmethod
    def for_role(cls, role: Role, target_id: Optional[int]) -> "Assignment":
        field_name = ROLE_REFERENCE_FIELD.get(role)
        if not field_name:
            return cls()
        return cls(**{field_name: target_id})
