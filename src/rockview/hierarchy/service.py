from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Generic, Iterable, List, Mapping, Optional, Sequence, TypeVar

from ..access.policy import Scope, VisibilityPolicy
from ..common.validators import optional_id, require_id, require_non_empty, require_non_negative_int
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..reports.repository import ReportRepository
from ..users.model import User
from ..users.repository import UserRepository
from ..users.seats import seat_capacity
from .model import AreaSupervisor, CithCentre, District, ZonalSupervisor
from .repository import HierarchyRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Seated(Generic[T]):
    """A hierarchy record with the users currently filling its seat."""

    entity: T
    holders: Sequence[User]
    capacity: int = 1

    @property
    def is_assigned(self) -> bool:
        return bool(self.holders)

    @property
    def is_full(self) -> bool:
        return len(self.holders) >= self.capacity

    @property
    def holder(self) -> Optional[User]:
        return self.holders[0] if self.holders else None


def _optional_text(payload: Mapping[str, Any], key: str) -> Optional[str]:
    value = payload.get(key)
    if value is None:
        return None
    return str(value).strip() or None


class HierarchyService:
    def __init__(
        self,
        hierarchy: HierarchyRepository,
        users: UserRepository,
        reports: ReportRepository,
        policy: VisibilityPolicy,
    ):
        self._hierarchy = hierarchy
        self._users = users
        self._reports = reports
        self._policy = policy

    # -------- helpers --------
    def _seated(self, role: Role, entity: T, target_id: int) -> Seated[T]:
        return Seated(entity=entity, holders=list(self._users.list_seat_holders(role, target_id)), capacity=seat_capacity(role))

    @staticmethod
    def _require_roles(actor: User, *roles: Role) -> None:
        if actor.role not in roles:
            raise AuthorizationError("Not authorized to manage this record")

    def _require_district(self, district_id: int) -> District:
        d = self._hierarchy.get_district(district_id)
        if not d:
            raise NotFoundError("District not found")
        return d

    def _require_area(self, area_supervisor_id: int) -> AreaSupervisor:
        a = self._hierarchy.get_area(area_supervisor_id)
        if not a:
            raise NotFoundError("Area supervisor not found")
        return a

    def _require_zone(self, zonal_supervisor_id: int) -> ZonalSupervisor:
        z = self._hierarchy.get_zone(zonal_supervisor_id)
        if not z:
            raise NotFoundError("Zonal supervisor not found")
        return z

    def _require_centre(self, cith_centre_id: int) -> CithCentre:
        c = self._hierarchy.get_centre(cith_centre_id)
        if not c:
            raise NotFoundError("CITH centre not found")
        return c

    def _check_district_owner(self, actor: User, district_id: int) -> None:
        """Admins manage every district, pastors only their own."""
        if actor.is_admin:
            return
        if actor.role == Role.DISTRICT_PASTOR and actor.district_id == district_id:
            return
        raise AuthorizationError("You can only manage records in your own district")

    def _check_area_owner(self, actor: User, area: AreaSupervisor) -> None:
        if actor.role == Role.AREA_SUPERVISOR and actor.area_supervisor_id == area.area_supervisor_id:
            return
        self._check_district_owner(actor, area.district_id)

    # -------- districts --------
    def list_districts(self, actor: User) -> List[Seated[District]]:
        scope = self._policy.scope_for(actor)
        return [
            self._seated(Role.DISTRICT_PASTOR, d, d.district_id)
            for d in self._hierarchy.list_districts()
            if scope.unrestricted or not scope.district_ids or d.district_id in scope.district_ids
        ]

    def get_district(self, district_id: int) -> Seated[District]:
        d = self._require_district(district_id)
        return self._seated(Role.DISTRICT_PASTOR, d, d.district_id)

    def _district_fields(self, payload: Mapping[str, Any], exclude_id: Optional[int] = None):
        name = require_non_empty(payload.get("name"), "Name")
        number = require_non_negative_int(payload.get("district_number"), "district_number")
        if self._hierarchy.district_number_taken(number, exclude_id=exclude_id):
            raise ConflictError("District number already exists")
        return name, number, _optional_text(payload, "description")

    def create_district(self, actor: User, payload: Mapping[str, Any]) -> Seated[District]:
        self._require_roles(actor, Role.ADMIN)
        name, number, description = self._district_fields(payload)
        district_id = self._hierarchy.create_district(name=name, district_number=number, description=description)
        logger.info("District %s created by user %s", district_id, actor.user_id)
        return self.get_district(district_id)

    def update_district(self, actor: User, district_id: int, payload: Mapping[str, Any]) -> Seated[District]:
        self._require_roles(actor, Role.ADMIN)
        self._require_district(district_id)
        name, number, description = self._district_fields(payload, exclude_id=district_id)
        self._hierarchy.update_district(district_id, name=name, district_number=number, description=description)
        return self.get_district(district_id)

    def delete_district(self, actor: User, district_id: int) -> None:
        self._require_roles(actor, Role.ADMIN)
        self._require_district(district_id)
        if self._hierarchy.list_areas(district_id=district_id):
            raise ConflictError("Cannot delete a district that still has area supervisors")
        if self._hierarchy.list_zones(district_id=district_id):
            raise ConflictError("Cannot delete a district that still has zonal supervisors")
        if self._users.list_seat_holders(Role.DISTRICT_PASTOR, district_id):
            raise ConflictError("Cannot delete a district that has a pastor assigned")
        self._hierarchy.delete_district(district_id)
        logger.info("District %s deleted by user %s", district_id, actor.user_id)

    # -------- areas --------
    def list_areas(self, actor: User, *, district_id: Optional[int] = None) -> List[Seated[AreaSupervisor]]:
        scope = self._policy.scope_for(actor)
        return [
            self._seated(Role.AREA_SUPERVISOR, a, a.area_supervisor_id)
            for a in self._hierarchy.list_areas(district_id=district_id)
            if scope.allows_area(a.area_supervisor_id)
        ]

    def get_area(self, actor: User, area_supervisor_id: int) -> Seated[AreaSupervisor]:
        a = self._require_area(area_supervisor_id)
        if not self._policy.scope_for(actor).allows_area(a.area_supervisor_id):
            raise AuthorizationError("Not authorized to view this area")
        return self._seated(Role.AREA_SUPERVISOR, a, a.area_supervisor_id)

    def _area_district(self, actor: User, payload: Mapping[str, Any]) -> int:
        district_id = optional_id(payload.get("district_id"), "district_id")
        if district_id is None and actor.role == Role.DISTRICT_PASTOR:
            district_id = actor.district_id
        if district_id is None:
            raise ValidationError("district_id is required")
        self._require_district(district_id)
        self._check_district_owner(actor, district_id)
        return district_id

    def create_area(self, actor: User, payload: Mapping[str, Any]) -> Seated[AreaSupervisor]:
        self._require_roles(actor, Role.ADMIN, Role.DISTRICT_PASTOR)
        name = require_non_empty(payload.get("name"), "Name")
        district_id = self._area_district(actor, payload)
        area_id = self._hierarchy.create_area(name=name, district_id=district_id)
        logger.info("Area %s created in district %s by user %s", area_id, district_id, actor.user_id)
        return self.get_area(actor, area_id)

    def update_area(self, actor: User, area_supervisor_id: int, payload: Mapping[str, Any]) -> Seated[AreaSupervisor]:
        self._require_roles(actor, Role.ADMIN, Role.DISTRICT_PASTOR)
        area = self._require_area(area_supervisor_id)
        self._check_district_owner(actor, area.district_id)
        name = require_non_empty(payload.get("name"), "Name")
        district_id = self._area_district(actor, payload) if payload.get("district_id") else area.district_id
        if district_id != area.district_id and self._hierarchy.get_zone_for_area(area.area_supervisor_id):
            raise ConflictError("Remove the area from its zone before moving it to another district")
        self._hierarchy.update_area(area_supervisor_id, name=name, district_id=district_id)
        return self.get_area(actor, area_supervisor_id)

    def delete_area(self, actor: User, area_supervisor_id: int) -> None:
        self._require_roles(actor, Role.ADMIN, Role.DISTRICT_PASTOR)
        area = self._require_area(area_supervisor_id)
        self._check_district_owner(actor, area.district_id)
        if self._hierarchy.list_centres(area_supervisor_ids=[area_supervisor_id]):
            raise ConflictError("Cannot delete an area supervisor that still has CITH centres")
        if self._users.list_seat_holders(Role.AREA_SUPERVISOR, area_supervisor_id):
            raise ConflictError("Cannot delete an area that has a supervisor assigned")
        if self._hierarchy.get_zone_for_area(area_supervisor_id):
            raise ConflictError("Cannot delete an area that still belongs to a zone")
        self._hierarchy.delete_area(area_supervisor_id)
        logger.info("Area %s deleted by user %s", area_supervisor_id, actor.user_id)

    # -------- zones --------
    def list_zones(self, actor: User, *, district_id: Optional[int] = None) -> List[Seated[ZonalSupervisor]]:
        scope = self._policy.scope_for(actor)
        return [
            self._seated(Role.ZONAL_SUPERVISOR, z, z.zonal_supervisor_id)
            for z in self._hierarchy.list_zones(district_id=district_id)
            if scope.unrestricted or z.zonal_supervisor_id in scope.zone_ids
        ]

    def get_zone(self, actor: User, zonal_supervisor_id: int) -> Seated[ZonalSupervisor]:
        z = self._require_zone(zonal_supervisor_id)
        scope = self._policy.scope_for(actor)
        if not (scope.unrestricted or z.zonal_supervisor_id in scope.zone_ids):
            raise AuthorizationError("Not authorized to view this zone")
        return self._seated(Role.ZONAL_SUPERVISOR, z, z.zonal_supervisor_id)

    def _zone_areas(self, district_id: int, raw: Any, *, zone_id: Optional[int] = None) -> List[int]:
        if raw is None:
            return []
        if isinstance(raw, (str, bytes)) or not isinstance(raw, Iterable):
            raise ValidationError("area_supervisor_ids must be a list")
        ids = sorted({require_id(v, "area_supervisor_ids") for v in raw})
        for area_id in ids:
            area = self._require_area(area_id)
            if area.district_id != district_id:
                raise ValidationError(f"Area {area.name} is not in this district")
            owner = self._hierarchy.get_zone_for_area(area_id)
            if owner and owner.zonal_supervisor_id != zone_id:
                raise ConflictError(f"Area {area.name} already belongs to {owner.name}")
        return ids

    def create_zone(self, actor: User, payload: Mapping[str, Any]) -> Seated[ZonalSupervisor]:
        self._require_roles(actor, Role.ADMIN, Role.DISTRICT_PASTOR)
        name = require_non_empty(payload.get("name"), "Name")
        district_id = self._area_district(actor, payload)
        area_ids = self._zone_areas(district_id, payload.get("area_supervisor_ids"))
        zone_id = self._hierarchy.create_zone(name=name, district_id=district_id, area_supervisor_ids=area_ids)
        logger.info("Zone %s created in district %s by user %s", zone_id, district_id, actor.user_id)
        return self.get_zone(actor, zone_id)

    def update_zone(self, actor: User, zonal_supervisor_id: int, payload: Mapping[str, Any]) -> Seated[ZonalSupervisor]:
        self._require_roles(actor, Role.ADMIN, Role.DISTRICT_PASTOR)
        zone = self._require_zone(zonal_supervisor_id)
        self._check_district_owner(actor, zone.district_id)
        name = require_non_empty(payload.get("name"), "Name")
        if "area_supervisor_ids" in payload:
            area_ids = self._zone_areas(zone.district_id, payload.get("area_supervisor_ids"), zone_id=zonal_supervisor_id)
        else:
            area_ids = sorted(zone.area_supervisor_ids)
        self._hierarchy.update_zone(zonal_supervisor_id, name=name, district_id=zone.district_id, area_supervisor_ids=area_ids)
        return self.get_zone(actor, zonal_supervisor_id)

    def delete_zone(self, actor: User, zonal_supervisor_id: int) -> None:
        self._require_roles(actor, Role.ADMIN, Role.DISTRICT_PASTOR)
        zone = self._require_zone(zonal_supervisor_id)
        self._check_district_owner(actor, zone.district_id)
        if self._users.list_seat_holders(Role.ZONAL_SUPERVISOR, zonal_supervisor_id):
            raise ConflictError("Cannot delete a zone that has a supervisor assigned")
        self._hierarchy.delete_zone(zonal_supervisor_id)
        logger.info("Zone %s deleted by user %s", zonal_supervisor_id, actor.user_id)

    # -------- centres --------
    def list_centres(self, actor: User, *, area_supervisor_ids: Optional[Iterable[int]] = None) -> List[Seated[CithCentre]]:
        scope: Scope = self._policy.scope_for(actor)
        ids = None if area_supervisor_ids is None else frozenset(area_supervisor_ids)
        return [
            self._seated(Role.CITH_CENTRE, c, c.cith_centre_id)
            for c in self._hierarchy.list_centres(area_supervisor_ids=ids)
            if scope.allows_centre(c.cith_centre_id)
        ]

    def get_centre(self, actor: User, cith_centre_id: int) -> Seated[CithCentre]:
        c = self._require_centre(cith_centre_id)
        if not self._policy.scope_for(actor).allows_centre(c.cith_centre_id):
            raise AuthorizationError("Not authorized to view this CITH centre")
        return self._seated(Role.CITH_CENTRE, c, c.cith_centre_id)

    def _centre_fields(self, actor: User, payload: Mapping[str, Any], current: Optional[CithCentre] = None):
        name = require_non_empty(payload.get("name"), "Name")
        location = require_non_empty(payload.get("location"), "Location")
        area_id = optional_id(payload.get("area_supervisor_id"), "area_supervisor_id")
        if area_id is None:
            if current is not None:
                area_id = current.area_supervisor_id
            elif actor.role == Role.AREA_SUPERVISOR:
                area_id = actor.area_supervisor_id
        if area_id is None:
            raise ValidationError("area_supervisor_id is required")
        self._check_area_owner(actor, self._require_area(area_id))
        return dict(
            name=name,
            location=location,
            area_supervisor_id=area_id,
            leader_name=_optional_text(payload, "leader_name"),
            contact_email=_optional_text(payload, "contact_email"),
            contact_phone=_optional_text(payload, "contact_phone"),
        )

    def create_centre(self, actor: User, payload: Mapping[str, Any]) -> Seated[CithCentre]:
        self._require_roles(actor, Role.ADMIN, Role.DISTRICT_PASTOR, Role.AREA_SUPERVISOR)
        fields = self._centre_fields(actor, payload)
        centre_id = self._hierarchy.create_centre(**fields)
        logger.info("CITH centre %s created by user %s", centre_id, actor.user_id)
        return self.get_centre(actor, centre_id)

    def update_centre(self, actor: User, cith_centre_id: int, payload: Mapping[str, Any]) -> Seated[CithCentre]:
        self._require_roles(actor, Role.ADMIN, Role.DISTRICT_PASTOR, Role.AREA_SUPERVISOR)
        centre = self._require_centre(cith_centre_id)
        self._check_area_owner(actor, self._require_area(centre.area_supervisor_id))
        fields = self._centre_fields(actor, payload, current=centre)
        self._hierarchy.update_centre(cith_centre_id, **fields)
        return self.get_centre(actor, cith_centre_id)

    def delete_centre(self, actor: User, cith_centre_id: int) -> None:
        self._require_roles(actor, Role.ADMIN, Role.DISTRICT_PASTOR, Role.AREA_SUPERVISOR)
        centre = self._require_centre(cith_centre_id)
        self._check_area_owner(actor, self._require_area(centre.area_supervisor_id))
        if self._reports.count_for_centre(cith_centre_id):
            raise ConflictError("Cannot delete a CITH centre that has reports")
        if self._users.list_seat_holders(Role.CITH_CENTRE, cith_centre_id):
            raise ConflictError("Cannot delete a CITH centre that has leaders assigned")
        self._hierarchy.delete_centre(cith_centre_id)
        logger.info("CITH centre %s deleted by user %s", cith_centre_id, actor.user_id)

    # -------- public listings for registration --------
    def public_districts(self) -> List[Seated[District]]:
        return [self._seated(Role.DISTRICT_PASTOR, d, d.district_id) for d in self._hierarchy.list_districts()]

    def public_areas(self, *, district_id: Optional[int] = None) -> List[Seated[AreaSupervisor]]:
        return [
            self._seated(Role.AREA_SUPERVISOR, a, a.area_supervisor_id)
            for a in self._hierarchy.list_areas(district_id=district_id)
        ]

    def public_zones(self, *, district_id: Optional[int] = None) -> List[Seated[ZonalSupervisor]]:
        return [
            self._seated(Role.ZONAL_SUPERVISOR, z, z.zonal_supervisor_id)
            for z in self._hierarchy.list_zones(district_id=district_id)
        ]

    def public_centres(self, *, area_supervisor_id: Optional[int] = None) -> List[Seated[CithCentre]]:
        ids = None if area_supervisor_id is None else [area_supervisor_id]
        return [self._seated(Role.CITH_CENTRE, c, c.cith_centre_id) for c in self._hierarchy.list_centres(area_supervisor_ids=ids)]
