from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import FrozenSet, Optional

from ..core.constants import UNASSIGNED


@dataclass(frozen=True)
class District:
    """Root of the hierarchy."""

    district_id: int
    name: str
    district_number: int
    pastor_name: str = UNASSIGNED
    description: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class AreaSupervisor:
    """An area inside a district; first approval level."""

    area_supervisor_id: int
    name: str
    district_id: int
    supervisor_name: str = UNASSIGNED
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class ZonalSupervisor:
    """Optional layer grouping several areas of one district."""

    zonal_supervisor_id: int
    name: str
    district_id: int
    area_supervisor_ids: FrozenSet[int] = field(default_factory=frozenset)
    supervisor_name: str = UNASSIGNED
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class CithCentre:
    cith_centre_id: int
    name: str
    location: str
    area_supervisor_id: int
    leader_name: str = UNASSIGNED
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class CentreLineage:
    """A centre together with every level above it."""

    centre: CithCentre
    area: AreaSupervisor
    district_id: int
    zone: Optional[ZonalSupervisor] = None
