from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import EventType, MeetingMode, ReportStatus


@dataclass(frozen=True)
class ReportData:
    """Attendance, offering and first-timer figures for one meeting."""

    male: int
    female: int
    children: int
    offerings: Decimal
    number_of_testimonies: int
    number_of_first_timers: int
    first_timers_followed_up: int
    first_timers_converted_to_cith: int
    mode_of_meeting: MeetingMode
    remarks: Optional[str] = None

    @property
    def total_attendance(self) -> int:
        return self.male + self.female + self.children


@dataclass(frozen=True)
class WeeklyReport:
    report_id: int
    cith_centre_id: int
    week: date
    event_type: EventType
    data: ReportData
    status: ReportStatus
    submitted_by: int
    submitted_at: datetime
    event_description: Optional[str] = None
    area_approved_by: Optional[int] = None
    area_approved_at: Optional[datetime] = None
    zonal_approved_by: Optional[int] = None
    zonal_approved_at: Optional[datetime] = None
    district_approved_by: Optional[int] = None
    district_approved_at: Optional[datetime] = None
    rejected_by: Optional[int] = None
    rejected_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None


@dataclass(frozen=True)
class ApprovalStamps:
    """Approver columns written by the admin comprehensive edit."""

    area_approved_by: Optional[int] = None
    area_approved_at: Optional[datetime] = None
    zonal_approved_by: Optional[int] = None
    zonal_approved_at: Optional[datetime] = None
    district_approved_by: Optional[int] = None
    district_approved_at: Optional[datetime] = None
    rejected_by: Optional[int] = None
    rejected_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None

    @classmethod
    def of(cls, report: WeeklyReport) -> "ApprovalStamps":
        return cls(
            area_approved_by=report.area_approved_by,
            area_approved_at=report.area_approved_at,
            zonal_approved_by=report.zonal_approved_by,
            zonal_approved_at=report.zonal_approved_at,
            district_approved_by=report.district_approved_by,
            district_approved_at=report.district_approved_at,
            rejected_by=report.rejected_by,
            rejected_at=report.rejected_at,
            rejection_reason=report.rejection_reason,
        )


@dataclass(frozen=True)
class ReportFilter:
    """List filters; ``cith_centre_ids=None`` means unrestricted."""

    cith_centre_ids: Optional[frozenset] = None
    status: Optional[ReportStatus] = None
    week: Optional[date] = None
    event_type: Optional[EventType] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


@dataclass(frozen=True)
class ReportTotals:
    """Sums over a set of reports."""

    total_reports: int = 0
    total_male: int = 0
    total_female: int = 0
    total_children: int = 0
    total_offerings: Decimal = Decimal("0")
    total_testimonies: int = 0
    total_first_timers: int = 0
    total_first_timers_followed_up: int = 0
    total_first_timers_converted: int = 0

    @property
    def total_attendance(self) -> int:
        return self.total_male + self.total_female + self.total_children
