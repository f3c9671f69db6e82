"""Role-keyed visibility and messaging rules.

Every read or write path that has to answer "which centres may this user
see?" goes through :class:`VisibilityPolicy`. The policy is computed from
the stores on every call; nothing is cached across requests because
hierarchy membership can change at any time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, List, Optional, Sequence

from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError
from ..hierarchy.model import CentreLineage
from ..hierarchy.repository import HierarchyRepository
from ..users.model import User
from ..users.repository import UserRepository

# Position of each non-admin role in the chain, leaves lowest.
ROLE_RANK = {
    Role.CITH_CENTRE: 0,
    Role.AREA_SUPERVISOR: 1,
    Role.ZONAL_SUPERVISOR: 2,
    Role.DISTRICT_PASTOR: 3,
}

# Supervisors a user may message directly upward.
ADJACENT_SUPERVISORS = {
    Role.CITH_CENTRE: frozenset({Role.AREA_SUPERVISOR}),
    Role.AREA_SUPERVISOR: frozenset({Role.ZONAL_SUPERVISOR, Role.DISTRICT_PASTOR}),
    Role.ZONAL_SUPERVISOR: frozenset({Role.DISTRICT_PASTOR}),
}


@dataclass(frozen=True)
class Scope:
    """The slice of the hierarchy a user can read."""

    unrestricted: bool = False
    district_ids: FrozenSet[int] = field(default_factory=frozenset)
    zone_ids: FrozenSet[int] = field(default_factory=frozenset)
    area_ids: FrozenSet[int] = field(default_factory=frozenset)
    centre_ids: FrozenSet[int] = field(default_factory=frozenset)

    def allows_centre(self, cith_centre_id: int) -> bool:
        return self.unrestricted or int(cith_centre_id) in self.centre_ids

    def allows_area(self, area_supervisor_id: int) -> bool:
        return self.unrestricted or int(area_supervisor_id) in self.area_ids

    def allows_district(self, district_id: int) -> bool:
        return self.unrestricted or int(district_id) in self.district_ids

    def centre_filter(self) -> Optional[FrozenSet[int]]:
        """Centre ids for a query filter; None means no restriction."""
        return None if self.unrestricted else self.centre_ids


class VisibilityPolicy:
    def __init__(self, hierarchy: HierarchyRepository, users: UserRepository):
        self._hierarchy = hierarchy
        self._users = users
        self._resolvers: Dict[Role, Callable[[User], Scope]] = {
            Role.ADMIN: self._admin_scope,
            Role.DISTRICT_PASTOR: self._district_scope,
            Role.ZONAL_SUPERVISOR: self._zone_scope,
            Role.AREA_SUPERVISOR: self._area_scope,
            Role.CITH_CENTRE: self._centre_scope,
        }

    # -------- scopes --------
    def scope_for(self, user: User) -> Scope:
        return self._resolvers[user.role](user)

    @staticmethod
    def _admin_scope(user: User) -> Scope:
        return Scope(unrestricted=True)

    def _district_scope(self, user: User) -> Scope:
        if not user.district_id:
            return Scope()
        area_ids = frozenset(a.area_supervisor_id for a in self._hierarchy.list_areas(district_id=user.district_id))
        zone_ids = frozenset(z.zonal_supervisor_id for z in self._hierarchy.list_zones(district_id=user.district_id))
        return Scope(
            district_ids=frozenset({user.district_id}),
            zone_ids=zone_ids,
            area_ids=area_ids,
            centre_ids=self._centres_under(area_ids),
        )

    def _zone_scope(self, user: User) -> Scope:
        zone = self._hierarchy.get_zone(user.zonal_supervisor_id) if user.zonal_supervisor_id else None
        if not zone:
            return Scope()
        return Scope(
            zone_ids=frozenset({zone.zonal_supervisor_id}),
            area_ids=zone.area_supervisor_ids,
            centre_ids=self._centres_under(zone.area_supervisor_ids),
        )

    def _area_scope(self, user: User) -> Scope:
        if not user.area_supervisor_id:
            return Scope()
        area_ids = frozenset({user.area_supervisor_id})
        return Scope(area_ids=area_ids, centre_ids=self._centres_under(area_ids))

    @staticmethod
    def _centre_scope(user: User) -> Scope:
        if not user.cith_centre_id:
            return Scope()
        return Scope(centre_ids=frozenset({user.cith_centre_id}))

    def _centres_under(self, area_ids: FrozenSet[int]) -> FrozenSet[int]:
        if not area_ids:
            return frozenset()
        return frozenset(c.cith_centre_id for c in self._hierarchy.list_centres(area_supervisor_ids=area_ids))

    # -------- lineage --------
    def lineage(self, cith_centre_id: int) -> CentreLineage:
        centre = self._hierarchy.get_centre(cith_centre_id)
        if not centre:
            raise NotFoundError("CITH centre not found")
        area = self._hierarchy.get_area(centre.area_supervisor_id)
        if not area:
            raise NotFoundError("Area supervisor not found")
        return CentreLineage(
            centre=centre,
            area=area,
            district_id=area.district_id,
            zone=self._hierarchy.get_zone_for_area(area.area_supervisor_id),
        )

    def require_centre(self, user: User, cith_centre_id: int, *, action: str = "access") -> None:
        if not self.scope_for(user).allows_centre(cith_centre_id):
            raise AuthorizationError(f"Not authorized to {action} this report")

    # -------- messaging --------
    def _holds_position_in(self, holder: User, target: User, scope: Optional[Scope] = None) -> bool:
        scope = scope or self.scope_for(holder)
        if target.role == Role.CITH_CENTRE:
            return bool(target.cith_centre_id) and scope.allows_centre(target.cith_centre_id)
        if target.role == Role.AREA_SUPERVISOR:
            return bool(target.area_supervisor_id) and scope.allows_area(target.area_supervisor_id)
        if target.role == Role.ZONAL_SUPERVISOR:
            return bool(target.zonal_supervisor_id) and (
                scope.unrestricted or target.zonal_supervisor_id in scope.zone_ids
            )
        if target.role == Role.DISTRICT_PASTOR:
            return bool(target.district_id) and scope.allows_district(target.district_id)
        return False

    def can_message(self, sender: User, recipient: User) -> bool:
        """Admins reach everyone; others reach down their scope or one step up."""
        if sender.user_id == recipient.user_id:
            return False
        if sender.is_admin or recipient.is_admin:
            return True

        sender_rank = ROLE_RANK[sender.role]
        recipient_rank = ROLE_RANK[recipient.role]
        if recipient_rank < sender_rank:
            return self._holds_position_in(sender, recipient)
        if recipient_rank > sender_rank:
            return recipient.role in ADJACENT_SUPERVISORS.get(sender.role, frozenset()) and self._holds_position_in(
                recipient, sender
            )
        return False

    def message_recipients(self, sender: User) -> List[User]:
        if sender.is_admin:
            return [u for u in self._users.list_all() if u.user_id != sender.user_id]

        out: Dict[int, User] = {u.user_id: u for u in self._users.list_by_role(Role.ADMIN)}

        scope = self.scope_for(sender)
        rank = ROLE_RANK[sender.role]
        for u in self._users.list_in_hierarchy(
            zonal_supervisor_ids=scope.zone_ids,
            area_supervisor_ids=scope.area_ids,
            cith_centre_ids=scope.centre_ids,
        ):
            if u.role in ROLE_RANK and ROLE_RANK[u.role] < rank:
                out[u.user_id] = u

        for u in self._upward_candidates(sender):
            if self.can_message(sender, u):
                out[u.user_id] = u

        out.pop(sender.user_id, None)
        return sorted(out.values(), key=lambda u: (u.role.value, u.name))

    def _upward_candidates(self, sender: User) -> Sequence[User]:
        if sender.role == Role.CITH_CENTRE and sender.cith_centre_id:
            centre = self._hierarchy.get_centre(sender.cith_centre_id)
            if centre:
                return self._users.list_seat_holders(Role.AREA_SUPERVISOR, centre.area_supervisor_id)
        elif sender.role == Role.AREA_SUPERVISOR and sender.area_supervisor_id:
            area = self._hierarchy.get_area(sender.area_supervisor_id)
            if area:
                found = list(self._users.list_seat_holders(Role.DISTRICT_PASTOR, area.district_id))
                zone = self._hierarchy.get_zone_for_area(area.area_supervisor_id)
                if zone:
                    found.extend(self._users.list_seat_holders(Role.ZONAL_SUPERVISOR, zone.zonal_supervisor_id))
                return found
        elif sender.role == Role.ZONAL_SUPERVISOR and sender.zonal_supervisor_id:
            zone = self._hierarchy.get_zone(sender.zonal_supervisor_id)
            if zone:
                return self._users.list_seat_holders(Role.DISTRICT_PASTOR, zone.district_id)
        return []
