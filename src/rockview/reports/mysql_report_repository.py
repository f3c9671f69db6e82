from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple

import mysql.connector

from ..core.enums import EventType, MeetingMode, ReportStatus
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, where
from .model import ApprovalStamps, ReportData, ReportFilter, ReportTotals, WeeklyReport
from .repository import ReportRepository

_COLUMNS = (
    "report_id, cith_centre_id, week, event_type, event_description, "
    "male, female, children, offerings, number_of_testimonies, number_of_first_timers, "
    "first_timers_followed_up, first_timers_converted_to_cith, mode_of_meeting, remarks, "
    "status, submitted_by, submitted_at, "
    "area_approved_by, area_approved_at, zonal_approved_by, zonal_approved_at, "
    "district_approved_by, district_approved_at, rejected_by, rejected_at, rejection_reason"
)

# Approver columns stamped when a report enters the given status.
_STAMP_COLUMNS = {
    ReportStatus.AREA_APPROVED: ("area_approved_by", "area_approved_at"),
    ReportStatus.ZONAL_APPROVED: ("zonal_approved_by", "zonal_approved_at"),
    ReportStatus.DISTRICT_APPROVED: ("district_approved_by", "district_approved_at"),
    ReportStatus.REJECTED: ("rejected_by", "rejected_at"),
}


def _opt_int(v) -> Optional[int]:
    return int(v) if v is not None else None


def _report(r: dict) -> WeeklyReport:
    return WeeklyReport(
        report_id=int(r["report_id"]),
        cith_centre_id=int(r["cith_centre_id"]),
        week=r["week"],
        event_type=EventType(r["event_type"]),
        event_description=r.get("event_description"),
        data=ReportData(
            male=int(r["male"]),
            female=int(r["female"]),
            children=int(r["children"]),
            offerings=Decimal(str(r["offerings"])),
            number_of_testimonies=int(r["number_of_testimonies"]),
            number_of_first_timers=int(r["number_of_first_timers"]),
            first_timers_followed_up=int(r["first_timers_followed_up"]),
            first_timers_converted_to_cith=int(r["first_timers_converted_to_cith"]),
            mode_of_meeting=MeetingMode(r["mode_of_meeting"]),
            remarks=r.get("remarks"),
        ),
        status=ReportStatus(r["status"]),
        submitted_by=int(r["submitted_by"]),
        submitted_at=r["submitted_at"],
        area_approved_by=_opt_int(r.get("area_approved_by")),
        area_approved_at=r.get("area_approved_at"),
        zonal_approved_by=_opt_int(r.get("zonal_approved_by")),
        zonal_approved_at=r.get("zonal_approved_at"),
        district_approved_by=_opt_int(r.get("district_approved_by")),
        district_approved_at=r.get("district_approved_at"),
        rejected_by=_opt_int(r.get("rejected_by")),
        rejected_at=r.get("rejected_at"),
        rejection_reason=r.get("rejection_reason"),
    )


def _data_params(data: ReportData) -> tuple:
    return (
        data.male,
        data.female,
        data.children,
        data.offerings,
        data.number_of_testimonies,
        data.number_of_first_timers,
        data.first_timers_followed_up,
        data.first_timers_converted_to_cith,
        data.mode_of_meeting.value,
        data.remarks,
    )


def _filter_sql(flt: ReportFilter) -> Tuple[str, List[object]]:
    clauses: List[str] = []
    params: List[object] = []

    if flt.cith_centre_ids is not None:
        clause, p = in_clause("cith_centre_id", sorted(flt.cith_centre_ids))
        clauses.append(clause)
        params.extend(p)
    if flt.status is not None:
        clauses.append("status=%s")
        params.append(flt.status.value)
    if flt.week is not None:
        clauses.append("week=%s")
        params.append(flt.week)
    if flt.event_type is not None:
        clauses.append("event_type=%s")
        params.append(flt.event_type.value)
    if flt.start_date is not None:
        clauses.append("week>=%s")
        params.append(flt.start_date)
    if flt.end_date is not None:
        clauses.append("week<=%s")
        params.append(flt.end_date)

    return where(clauses), params


class MySQLReportRepository(ReportRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        cith_centre_id: int,
        week: date,
        event_type: EventType,
        event_description: Optional[str],
        data: ReportData,
        submitted_by: int,
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO weekly_reports(
                        cith_centre_id, week, event_type, event_description,
                        male, female, children, offerings, number_of_testimonies, number_of_first_timers,
                        first_timers_followed_up, first_timers_converted_to_cith, mode_of_meeting, remarks,
                        status, submitted_by
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (int(cith_centre_id), week, event_type.value, event_description)
                    + _data_params(data)
                    + (ReportStatus.PENDING.value, int(submitted_by)),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError:
            # uq_reports_centre_week_event lost a race with a concurrent submit
            raise ConflictError("A report for this week and event type already exists")

    def get(self, report_id: int) -> Optional[WeeklyReport]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM weekly_reports WHERE report_id=%s", (int(report_id),))
            r = fetchone(cur)
            return _report(r) if r else None

    def exists(self, *, cith_centre_id: int, week: date, event_type: EventType, exclude_id: Optional[int] = None) -> bool:
        sql = "SELECT 1 FROM weekly_reports WHERE cith_centre_id=%s AND week=%s AND event_type=%s"
        params: List[object] = [int(cith_centre_id), week, event_type.value]
        if exclude_id is not None:
            sql += " AND report_id<>%s"
            params.append(int(exclude_id))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql + " LIMIT 1", tuple(params))
            return fetchone(cur) is not None

    def list(self, flt: ReportFilter, *, offset: int = 0, limit: int = 10) -> Sequence[WeeklyReport]:
        where_sql, params = _filter_sql(flt)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM weekly_reports
                WHERE {where_sql}
                ORDER BY week DESC, submitted_at DESC, report_id DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params + [int(limit), int(offset)]),
            )
            return [_report(r) for r in fetchall(cur)]

    def count(self, flt: ReportFilter) -> int:
        where_sql, params = _filter_sql(flt)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM weekly_reports WHERE {where_sql}", tuple(params))
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def count_by_status(self, flt: ReportFilter) -> Dict[ReportStatus, int]:
        where_sql, params = _filter_sql(flt)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT status, COUNT(*) AS n FROM weekly_reports WHERE {where_sql} GROUP BY status",
                tuple(params),
            )
            counts = {s: 0 for s in ReportStatus}
            for r in fetchall(cur):
                counts[ReportStatus(r["status"])] = int(r["n"])
            return counts

    def count_for_centre(self, cith_centre_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM weekly_reports WHERE cith_centre_id=%s", (int(cith_centre_id),))
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def totals(self, flt: ReportFilter) -> ReportTotals:
        where_sql, params = _filter_sql(flt)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT COUNT(*) AS total_reports,
                       COALESCE(SUM(male), 0) AS total_male,
                       COALESCE(SUM(female), 0) AS total_female,
                       COALESCE(SUM(children), 0) AS total_children,
                       COALESCE(SUM(offerings), 0) AS total_offerings,
                       COALESCE(SUM(number_of_testimonies), 0) AS total_testimonies,
                       COALESCE(SUM(number_of_first_timers), 0) AS total_first_timers,
                       COALESCE(SUM(first_timers_followed_up), 0) AS total_first_timers_followed_up,
                       COALESCE(SUM(first_timers_converted_to_cith), 0) AS total_first_timers_converted
                FROM weekly_reports
                WHERE {where_sql}
                """,
                tuple(params),
            )
            r = fetchone(cur)
            if not r:
                return ReportTotals()
            return ReportTotals(
                total_reports=int(r["total_reports"]),
                total_male=int(r["total_male"]),
                total_female=int(r["total_female"]),
                total_children=int(r["total_children"]),
                total_offerings=Decimal(str(r["total_offerings"])),
                total_testimonies=int(r["total_testimonies"]),
                total_first_timers=int(r["total_first_timers"]),
                total_first_timers_followed_up=int(r["total_first_timers_followed_up"]),
                total_first_timers_converted=int(r["total_first_timers_converted"]),
            )

    def transition(
        self,
        *,
        report_id: int,
        expected: ReportStatus,
        target: ReportStatus,
        actor_id: int,
        at: datetime,
        reason: Optional[str] = None,
    ) -> bool:
        by_col, at_col = _STAMP_COLUMNS[target]
        sets = ["status=%s", f"{by_col}=%s", f"{at_col}=%s"]
        params: List[object] = [target.value, int(actor_id), at]
        if target == ReportStatus.REJECTED:
            sets.append("rejection_reason=%s")
            params.append(reason)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE weekly_reports SET {', '.join(sets)} WHERE report_id=%s AND status=%s",
                tuple(params + [int(report_id), expected.value]),
            )
            return cur.rowcount == 1

    def update_content(
        self,
        *,
        report_id: int,
        expected: ReportStatus,
        week: date,
        event_type: EventType,
        event_description: Optional[str],
        data: ReportData,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE weekly_reports
                SET week=%s, event_type=%s, event_description=%s,
                    male=%s, female=%s, children=%s, offerings=%s, number_of_testimonies=%s,
                    number_of_first_timers=%s, first_timers_followed_up=%s,
                    first_timers_converted_to_cith=%s, mode_of_meeting=%s, remarks=%s,
                    status=%s, rejected_by=NULL, rejected_at=NULL, rejection_reason=NULL
                WHERE report_id=%s AND status=%s
                """,
                (week, event_type.value, event_description)
                + _data_params(data)
                + (ReportStatus.PENDING.value, int(report_id), expected.value),
            )
            return cur.rowcount == 1

    def admin_overwrite(
        self,
        *,
        report_id: int,
        event_type: EventType,
        event_description: Optional[str],
        data: ReportData,
        status: ReportStatus,
        stamps: ApprovalStamps,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE weekly_reports
                SET event_type=%s, event_description=%s,
                    male=%s, female=%s, children=%s, offerings=%s, number_of_testimonies=%s,
                    number_of_first_timers=%s, first_timers_followed_up=%s,
                    first_timers_converted_to_cith=%s, mode_of_meeting=%s, remarks=%s,
                    status=%s,
                    area_approved_by=%s, area_approved_at=%s,
                    zonal_approved_by=%s, zonal_approved_at=%s,
                    district_approved_by=%s, district_approved_at=%s,
                    rejected_by=%s, rejected_at=%s, rejection_reason=%s
                WHERE report_id=%s
                """,
                (event_type.value, event_description)
                + _data_params(data)
                + (
                    status.value,
                    stamps.area_approved_by,
                    stamps.area_approved_at,
                    stamps.zonal_approved_by,
                    stamps.zonal_approved_at,
                    stamps.district_approved_by,
                    stamps.district_approved_at,
                    stamps.rejected_by,
                    stamps.rejected_at,
                    stamps.rejection_reason,
                    int(report_id),
                ),
            )
            return cur.rowcount >= 0

    def delete(self, report_id: int, *, allowed: Sequence[ReportStatus]) -> bool:
        sql = "DELETE FROM weekly_reports WHERE report_id=%s"
        params: List[object] = [int(report_id)]
        if allowed:
            clause, p = in_clause("status", [s.value for s in allowed])
            sql += f" AND {clause}"
            params.extend(p)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return cur.rowcount == 1
