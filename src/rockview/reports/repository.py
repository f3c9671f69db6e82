from __future__ import annotations

from datetime import date, datetime
from typing import Dict, Optional, Protocol, Sequence

from ..core.enums import EventType, ReportStatus
from .model import ApprovalStamps, ReportData, ReportFilter, ReportTotals, WeeklyReport


class ReportRepository(Protocol):
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
        raise NotImplementedError

    def get(self, report_id: int) -> Optional[WeeklyReport]:
        raise NotImplementedError

    def exists(self, *, cith_centre_id: int, week: date, event_type: EventType, exclude_id: Optional[int] = None) -> bool:
        raise NotImplementedError

    def list(self, flt: ReportFilter, *, offset: int = 0, limit: int = 10) -> Sequence[WeeklyReport]:
        raise NotImplementedError

    def count(self, flt: ReportFilter) -> int:
        raise NotImplementedError

    def count_by_status(self, flt: ReportFilter) -> Dict[ReportStatus, int]:
        raise NotImplementedError

    def count_for_centre(self, cith_centre_id: int) -> int:
        raise NotImplementedError

    def totals(self, flt: ReportFilter) -> ReportTotals:
        raise NotImplementedError

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
        """Move ``expected`` -> ``target`` in one conditional update.

        Stamps the approver column that belongs to ``target`` (or the rejection
        columns). Returns False when the row was not in ``expected`` any more.
        """

        raise NotImplementedError

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
        """Owner edit: rewrite content and return the report to pending.

        Conditional on the status still being ``expected``.
        """

        raise NotImplementedError

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
        raise NotImplementedError

    def delete(self, report_id: int, *, allowed: Sequence[ReportStatus]) -> bool:
        """Delete only while the status is one of ``allowed`` (all when empty)."""

        raise NotImplementedError
