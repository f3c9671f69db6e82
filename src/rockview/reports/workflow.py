"""Approval state machine for weekly reports.

The legal moves are listed in ``TRANSITIONS``: one row per
(current state, acting role), each carrying the state it leads to and the
hierarchy check the actor has to pass. Whether the zonal step applies is a
property of the report's area: areas grouped into a zone need zonal
approval before the district pastor can act, other areas go straight from
area approval to district approval. A report already zonal approved moves
on to the district pastor whatever its area's current zone.

Admin overrides are not part of the table; see ``admin_approval_target``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..core.enums import ReportStatus, Role
from ..core.exceptions import InvalidTransitionError, ValidationError
from ..hierarchy.model import CentreLineage
from ..users.model import User


class Ownership(str, Enum):
    AREA = "area"
    ZONE = "zone"
    DISTRICT = "district"


@dataclass(frozen=True)
class Transition:
    source: ReportStatus
    role: Role
    target: ReportStatus
    ownership: Ownership
    # None: applies to every report; True/False: only when the area is (not) zoned.
    zoned: Optional[bool] = None

    def applies(self, zoned: bool) -> bool:
        return self.zoned is None or self.zoned == zoned


TRANSITIONS = (
    Transition(ReportStatus.PENDING, Role.AREA_SUPERVISOR, ReportStatus.AREA_APPROVED, Ownership.AREA),
    Transition(ReportStatus.AREA_APPROVED, Role.ZONAL_SUPERVISOR, ReportStatus.ZONAL_APPROVED, Ownership.ZONE, zoned=True),
    Transition(ReportStatus.AREA_APPROVED, Role.DISTRICT_PASTOR, ReportStatus.DISTRICT_APPROVED, Ownership.DISTRICT, zoned=False),
    # A zonal stamp stays valid even if the area has since left its zone.
    Transition(ReportStatus.ZONAL_APPROVED, Role.DISTRICT_PASTOR, ReportStatus.DISTRICT_APPROVED, Ownership.DISTRICT),
)

APPROVER_ROLES = frozenset(t.role for t in TRANSITIONS)

ROLE_OWNERSHIP = {t.role: t.ownership for t in TRANSITIONS}

APPROVAL_CHAIN = (
    ReportStatus.PENDING,
    ReportStatus.AREA_APPROVED,
    ReportStatus.ZONAL_APPROVED,
    ReportStatus.DISTRICT_APPROVED,
)

# Statuses an owner may still edit or delete.
EDITABLE_STATUSES = (ReportStatus.PENDING, ReportStatus.REJECTED)


def chain_for(zoned: bool) -> tuple:
    if zoned:
        return APPROVAL_CHAIN
    return tuple(s for s in APPROVAL_CHAIN if s != ReportStatus.ZONAL_APPROVED)


def find_transition(status: ReportStatus, role: Role, zoned: bool) -> Optional[Transition]:
    for t in TRANSITIONS:
        if t.source == status and t.role == role and t.applies(zoned):
            return t
    return None


def expected_source(role: Role, zoned: bool) -> Optional[ReportStatus]:
    for t in TRANSITIONS:
        if t.role == role and t.applies(zoned):
            return t.source
    return None


def owns(actor: User, lineage: CentreLineage) -> bool:
    """Whether the actor's slot sits above the report's centre."""
    ownership = ROLE_OWNERSHIP.get(actor.role)
    if ownership == Ownership.AREA:
        return actor.area_supervisor_id is not None and actor.area_supervisor_id == lineage.area.area_supervisor_id
    if ownership == Ownership.ZONE:
        return (
            lineage.zone is not None
            and actor.zonal_supervisor_id is not None
            and actor.zonal_supervisor_id == lineage.zone.zonal_supervisor_id
        )
    if ownership == Ownership.DISTRICT:
        return actor.district_id is not None and actor.district_id == lineage.district_id
    return False


def next_transition(status: ReportStatus, role: Role, zoned: bool) -> Transition:
    t = find_transition(status, role, zoned)
    if t:
        return t
    source = expected_source(role, zoned)
    if source is None:
        raise InvalidTransitionError("Reports from this centre do not need your approval")
    raise InvalidTransitionError(f"Report is not in {source.value} status")


def admin_approval_target(current: ReportStatus, requested: Optional[ReportStatus], zoned: bool) -> ReportStatus:
    """Target of an admin approval: the requested level or the next one."""
    chain = chain_for(zoned or current == ReportStatus.ZONAL_APPROVED)
    if requested is None:
        if current == ReportStatus.REJECTED:
            return chain[1]
        if current == ReportStatus.DISTRICT_APPROVED:
            raise InvalidTransitionError("Report is already district approved")
        return chain[chain.index(current) + 1]

    if requested not in chain[1:]:
        raise ValidationError("Target approval level is invalid for this report")
    if current != ReportStatus.REJECTED and chain.index(requested) <= chain.index(current):
        raise InvalidTransitionError(f"Report is already {current.value}")
    return requested


def next_pending_role(status: ReportStatus, zoned: bool) -> Optional[Role]:
    """Role whose approval the report now waits for, if any."""
    for t in TRANSITIONS:
        if t.source == status and t.applies(zoned):
            return t.role
    return None
