from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from .model import AreaSupervisor, CithCentre, District, ZonalSupervisor


class HierarchyRepository(Protocol):
    """Storage for districts, areas, zones and centres.

    Note: services depend on this interface, not on a concrete database.
    """

    # Districts
    def get_district(self, district_id: int) -> Optional[District]:
        raise NotImplementedError

    def list_districts(self) -> Sequence[District]:
        raise NotImplementedError

    def district_number_taken(self, district_number: int, *, exclude_id: Optional[int] = None) -> bool:
        raise NotImplementedError

    def create_district(self, *, name: str, district_number: int, description: Optional[str]) -> int:
        raise NotImplementedError

    def update_district(self, district_id: int, *, name: str, district_number: int, description: Optional[str]) -> bool:
        raise NotImplementedError

    def delete_district(self, district_id: int) -> bool:
        raise NotImplementedError

    # Areas
    def get_area(self, area_supervisor_id: int) -> Optional[AreaSupervisor]:
        raise NotImplementedError

    def list_areas(self, *, district_id: Optional[int] = None) -> Sequence[AreaSupervisor]:
        raise NotImplementedError

    def create_area(self, *, name: str, district_id: int) -> int:
        raise NotImplementedError

    def update_area(self, area_supervisor_id: int, *, name: str, district_id: int) -> bool:
        raise NotImplementedError

    def delete_area(self, area_supervisor_id: int) -> bool:
        raise NotImplementedError

    # Zones
    def get_zone(self, zonal_supervisor_id: int) -> Optional[ZonalSupervisor]:
        raise NotImplementedError

    def get_zone_for_area(self, area_supervisor_id: int) -> Optional[ZonalSupervisor]:
        raise NotImplementedError

    def list_zones(self, *, district_id: Optional[int] = None) -> Sequence[ZonalSupervisor]:
        raise NotImplementedError

    def create_zone(self, *, name: str, district_id: int, area_supervisor_ids: Iterable[int]) -> int:
        raise NotImplementedError

    def update_zone(self, zonal_supervisor_id: int, *, name: str, district_id: int, area_supervisor_ids: Iterable[int]) -> bool:
        raise NotImplementedError

    def delete_zone(self, zonal_supervisor_id: int) -> bool:
        raise NotImplementedError

    # Centres
    def get_centre(self, cith_centre_id: int) -> Optional[CithCentre]:
        raise NotImplementedError

    def list_centres(self, *, area_supervisor_ids: Optional[Iterable[int]] = None) -> Sequence[CithCentre]:
        """All centres, or only those under the given areas when a set is passed."""

        raise NotImplementedError

    def create_centre(
        self,
        *,
        name: str,
        location: str,
        area_supervisor_id: int,
        leader_name: Optional[str] = None,
        contact_email: Optional[str] = None,
        contact_phone: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def update_centre(
        self,
        cith_centre_id: int,
        *,
        name: str,
        location: str,
        area_supervisor_id: int,
        leader_name: Optional[str] = None,
        contact_email: Optional[str] = None,
        contact_phone: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def delete_centre(self, cith_centre_id: int) -> bool:
        raise NotImplementedError
