from __future__ import annotations

import io
import logging
from datetime import date
from typing import Dict, List, Optional

import pandas as pd

from ..access.policy import VisibilityPolicy
from ..core.enums import ReportStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..hierarchy.model import CentreLineage
from ..hierarchy.repository import HierarchyRepository
from ..reports.model import ReportFilter, WeeklyReport
from ..reports.repository import ReportRepository
from ..users.model import User
from ..users.repository import UserRepository

logger = logging.getLogger(__name__)

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
SHEET_NAME = "Weekly Reports"

COLUMNS = [
    "District",
    "Area",
    "CITH Centre",
    "Location",
    "Week",
    "Event Type",
    "Event Description",
    "Male",
    "Female",
    "Children",
    "Total Attendance",
    "Offerings",
    "Testimonies",
    "First Timers",
    "Followed Up",
    "Converted to CITH",
    "Mode of Meeting",
    "Remarks",
    "Submitted By",
    "Area Approved By",
    "Zonal Approved By",
    "District Approved By",
    "Status",
]


class ExportService:
    """Scoped spreadsheet export of district-approved reports."""

    def __init__(
        self,
        reports: ReportRepository,
        hierarchy: HierarchyRepository,
        users: UserRepository,
        policy: VisibilityPolicy,
    ):
        self._reports = reports
        self._hierarchy = hierarchy
        self._users = users
        self._policy = policy

    def _approved(self, actor: User, start_date: Optional[date], end_date: Optional[date]) -> List[WeeklyReport]:
        if start_date and end_date and start_date > end_date:
            raise ValidationError("start_date cannot be after end_date")
        flt = ReportFilter(
            cith_centre_ids=self._policy.scope_for(actor).centre_filter(),
            status=ReportStatus.DISTRICT_APPROVED,
            start_date=start_date,
            end_date=end_date,
        )
        total = self._reports.count(flt)
        if not total:
            return []
        return list(self._reports.list(flt, offset=0, limit=total))

    def build_rows(self, actor: User, *, start_date: Optional[date] = None, end_date: Optional[date] = None) -> List[dict]:
        reports = self._approved(actor, start_date, end_date)

        lineages: Dict[int, CentreLineage] = {}
        for cid in {r.cith_centre_id for r in reports}:
            lineages[cid] = self._policy.lineage(cid)

        people = set()
        for r in reports:
            people.update(
                uid
                for uid in (r.submitted_by, r.area_approved_by, r.zonal_approved_by, r.district_approved_by)
                if uid is not None
            )
        names = {u.user_id: u.name for u in self._users.get_many(people)}
        districts = {d.district_id: d.name for d in self._hierarchy.list_districts()}

        def name_of(uid: Optional[int]) -> str:
            return names.get(uid, "") if uid is not None else ""

        rows: List[dict] = []
        for r in reports:
            lineage = lineages[r.cith_centre_id]
            d = r.data
            rows.append(
                {
                    "District": districts.get(lineage.district_id, ""),
                    "Area": lineage.area.name,
                    "CITH Centre": lineage.centre.name,
                    "Location": lineage.centre.location,
                    "Week": r.week.isoformat(),
                    "Event Type": r.event_type.value,
                    "Event Description": r.event_description or "",
                    "Male": d.male,
                    "Female": d.female,
                    "Children": d.children,
                    "Total Attendance": d.total_attendance,
                    "Offerings": float(d.offerings),
                    "Testimonies": d.number_of_testimonies,
                    "First Timers": d.number_of_first_timers,
                    "Followed Up": d.first_timers_followed_up,
                    "Converted to CITH": d.first_timers_converted_to_cith,
                    "Mode of Meeting": d.mode_of_meeting.value,
                    "Remarks": d.remarks or "",
                    "Submitted By": name_of(r.submitted_by),
                    "Area Approved By": name_of(r.area_approved_by),
                    "Zonal Approved By": name_of(r.zonal_approved_by),
                    "District Approved By": name_of(r.district_approved_by),
                    "Status": r.status.value,
                }
            )
        return rows

    def export_excel(self, actor: User, *, start_date: Optional[date] = None, end_date: Optional[date] = None) -> io.BytesIO:
        rows = self.build_rows(actor, start_date=start_date, end_date=end_date)
        if not rows:
            raise NotFoundError("No approved reports found for the selected period")

        df = pd.DataFrame(rows, columns=COLUMNS)

        # Write the workbook in memory
        output = io.BytesIO()
        with pd.ExcelWriter(output, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name=SHEET_NAME)
        output.seek(0)

        logger.info("User %s exported %d report(s)", actor.user_id, len(rows))
        return output


def export_filename(start_date: Optional[date], end_date: Optional[date]) -> str:
    if start_date and end_date:
        return f"rockview_reports_{start_date.isoformat()}_{end_date.isoformat()}.xlsx"
    return "rockview_reports.xlsx"
