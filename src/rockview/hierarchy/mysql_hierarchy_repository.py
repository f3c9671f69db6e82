from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..core.constants import UNASSIGNED
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import AreaSupervisor, CithCentre, District, ZonalSupervisor
from .repository import HierarchyRepository


def _district(r: dict) -> District:
    return District(
        district_id=int(r["district_id"]),
        name=r["name"],
        district_number=int(r["district_number"]),
        pastor_name=r.get("pastor_name") or UNASSIGNED,
        description=r.get("description"),
        created_at=r.get("created_at"),
    )


def _area(r: dict) -> AreaSupervisor:
    return AreaSupervisor(
        area_supervisor_id=int(r["area_supervisor_id"]),
        name=r["name"],
        district_id=int(r["district_id"]),
        supervisor_name=r.get("supervisor_name") or UNASSIGNED,
        created_at=r.get("created_at"),
    )


def _centre(r: dict) -> CithCentre:
    return CithCentre(
        cith_centre_id=int(r["cith_centre_id"]),
        name=r["name"],
        location=r["location"],
        area_supervisor_id=int(r["area_supervisor_id"]),
        leader_name=r.get("leader_name") or UNASSIGNED,
        contact_email=r.get("contact_email"),
        contact_phone=r.get("contact_phone"),
        created_at=r.get("created_at"),
    )


class MySQLHierarchyRepository(HierarchyRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # -------- Districts --------
    def get_district(self, district_id: int) -> Optional[District]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT district_id, name, district_number, pastor_name, description, created_at
                FROM districts
                WHERE district_id=%s
                """,
                (int(district_id),),
            )
            row = fetchone(cur)
            return _district(row) if row else None

    def list_districts(self) -> Sequence[District]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT district_id, name, district_number, pastor_name, description, created_at
                FROM districts
                ORDER BY district_number
                """
            )
            return [_district(r) for r in fetchall(cur)]

    def district_number_taken(self, district_number: int, *, exclude_id: Optional[int] = None) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS n FROM districts WHERE district_number=%s AND district_id<>%s",
                (int(district_number), int(exclude_id or 0)),
            )
            return int(fetchone(cur)["n"]) > 0

    def create_district(self, *, name: str, district_number: int, description: Optional[str]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO districts(name, district_number, description) VALUES(%s,%s,%s)",
                (name, int(district_number), description),
            )
            return int(cur.lastrowid)

    def update_district(self, district_id: int, *, name: str, district_number: int, description: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE districts SET name=%s, district_number=%s, description=%s WHERE district_id=%s",
                (name, int(district_number), description, int(district_id)),
            )
            return cur.rowcount >= 0

    def delete_district(self, district_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM districts WHERE district_id=%s", (int(district_id),))
            return cur.rowcount > 0

    # -------- Areas --------
    def get_area(self, area_supervisor_id: int) -> Optional[AreaSupervisor]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT area_supervisor_id, name, district_id, supervisor_name, created_at
                FROM area_supervisors
                WHERE area_supervisor_id=%s
                """,
                (int(area_supervisor_id),),
            )
            row = fetchone(cur)
            return _area(row) if row else None

    def list_areas(self, *, district_id: Optional[int] = None) -> Sequence[AreaSupervisor]:
        clauses = ["1=1"]
        params: list[object] = []
        if district_id is not None:
            clauses.append("district_id=%s")
            params.append(int(district_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT area_supervisor_id, name, district_id, supervisor_name, created_at
                FROM area_supervisors
                WHERE {" AND ".join(clauses)}
                ORDER BY name
                """,
                tuple(params),
            )
            return [_area(r) for r in fetchall(cur)]

    def create_area(self, *, name: str, district_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO area_supervisors(name, district_id) VALUES(%s,%s)",
                (name, int(district_id)),
            )
            return int(cur.lastrowid)

    def update_area(self, area_supervisor_id: int, *, name: str, district_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE area_supervisors SET name=%s, district_id=%s WHERE area_supervisor_id=%s",
                (name, int(district_id), int(area_supervisor_id)),
            )
            return cur.rowcount >= 0

    def delete_area(self, area_supervisor_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM area_supervisors WHERE area_supervisor_id=%s", (int(area_supervisor_id),))
            return cur.rowcount > 0

    # -------- Zones --------
    def _load_zones(self, cur, where_sql: str, params: tuple) -> list[ZonalSupervisor]:
        cur.execute(
            f"""
            SELECT z.zonal_supervisor_id, z.name, z.district_id, z.supervisor_name, z.created_at
            FROM zonal_supervisors z
            WHERE {where_sql}
            ORDER BY z.name
            """,
            params,
        )
        rows = fetchall(cur)
        if not rows:
            return []

        ids_sql, ids = in_clause("zonal_supervisor_id", [int(r["zonal_supervisor_id"]) for r in rows])
        cur.execute(
            f"SELECT zonal_supervisor_id, area_supervisor_id FROM zonal_supervisor_areas WHERE {ids_sql}",
            tuple(ids),
        )
        members: dict[int, set[int]] = {}
        for m in fetchall(cur):
            members.setdefault(int(m["zonal_supervisor_id"]), set()).add(int(m["area_supervisor_id"]))

        return [
            ZonalSupervisor(
                zonal_supervisor_id=int(r["zonal_supervisor_id"]),
                name=r["name"],
                district_id=int(r["district_id"]),
                area_supervisor_ids=frozenset(members.get(int(r["zonal_supervisor_id"]), set())),
                supervisor_name=r.get("supervisor_name") or UNASSIGNED,
                created_at=r.get("created_at"),
            )
            for r in rows
        ]

    def get_zone(self, zonal_supervisor_id: int) -> Optional[ZonalSupervisor]:
        with db_cursor(self._conn_factory) as (_, cur):
            zones = self._load_zones(cur, "z.zonal_supervisor_id=%s", (int(zonal_supervisor_id),))
            return zones[0] if zones else None

    def get_zone_for_area(self, area_supervisor_id: int) -> Optional[ZonalSupervisor]:
        with db_cursor(self._conn_factory) as (_, cur):
            zones = self._load_zones(
                cur,
                "z.zonal_supervisor_id IN (SELECT zonal_supervisor_id FROM zonal_supervisor_areas WHERE area_supervisor_id=%s)",
                (int(area_supervisor_id),),
            )
            return zones[0] if zones else None

    def list_zones(self, *, district_id: Optional[int] = None) -> Sequence[ZonalSupervisor]:
        with db_cursor(self._conn_factory) as (_, cur):
            if district_id is None:
                return self._load_zones(cur, "1=1", ())
            return self._load_zones(cur, "z.district_id=%s", (int(district_id),))

    @staticmethod
    def _replace_zone_areas(cur, zonal_supervisor_id: int, area_supervisor_ids: Iterable[int]) -> None:
        cur.execute("DELETE FROM zonal_supervisor_areas WHERE zonal_supervisor_id=%s", (int(zonal_supervisor_id),))
        for area_id in sorted({int(a) for a in area_supervisor_ids}):
            cur.execute(
                "INSERT INTO zonal_supervisor_areas(zonal_supervisor_id, area_supervisor_id) VALUES(%s,%s)",
                (int(zonal_supervisor_id), area_id),
            )

    def create_zone(self, *, name: str, district_id: int, area_supervisor_ids: Iterable[int]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO zonal_supervisors(name, district_id) VALUES(%s,%s)",
                (name, int(district_id)),
            )
            zone_id = int(cur.lastrowid)
            self._replace_zone_areas(cur, zone_id, area_supervisor_ids)
            return zone_id

    def update_zone(self, zonal_supervisor_id: int, *, name: str, district_id: int, area_supervisor_ids: Iterable[int]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE zonal_supervisors SET name=%s, district_id=%s WHERE zonal_supervisor_id=%s",
                (name, int(district_id), int(zonal_supervisor_id)),
            )
            self._replace_zone_areas(cur, zonal_supervisor_id, area_supervisor_ids)
            return True

    def delete_zone(self, zonal_supervisor_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM zonal_supervisors WHERE zonal_supervisor_id=%s", (int(zonal_supervisor_id),))
            return cur.rowcount > 0

    # -------- Centres --------
    _CENTRE_COLUMNS = (
        "cith_centre_id, name, location, area_supervisor_id, leader_name, contact_email, contact_phone, created_at"
    )

    def get_centre(self, cith_centre_id: int) -> Optional[CithCentre]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {self._CENTRE_COLUMNS} FROM cith_centres WHERE cith_centre_id=%s",
                (int(cith_centre_id),),
            )
            row = fetchone(cur)
            return _centre(row) if row else None

    def list_centres(self, *, area_supervisor_ids: Optional[Iterable[int]] = None) -> Sequence[CithCentre]:
        where_sql, params = "1=1", []
        if area_supervisor_ids is not None:
            where_sql, params = in_clause("area_supervisor_id", [int(a) for a in area_supervisor_ids])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {self._CENTRE_COLUMNS} FROM cith_centres WHERE {where_sql} ORDER BY name",
                tuple(params),
            )
            return [_centre(r) for r in fetchall(cur)]

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO cith_centres(name, location, area_supervisor_id, leader_name, contact_email, contact_phone)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (name, location, int(area_supervisor_id), leader_name or UNASSIGNED, contact_email, contact_phone),
            )
            return int(cur.lastrowid)

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE cith_centres
                SET name=%s, location=%s, area_supervisor_id=%s,
                    leader_name=%s, contact_email=%s, contact_phone=%s
                WHERE cith_centre_id=%s
                """,
                (
                    name,
                    location,
                    int(area_supervisor_id),
                    leader_name or UNASSIGNED,
                    contact_email,
                    contact_phone,
                    int(cith_centre_id),
                ),
            )
            return cur.rowcount >= 0

    def delete_centre(self, cith_centre_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM cith_centres WHERE cith_centre_id=%s", (int(cith_centre_id),))
            return cur.rowcount > 0
