from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Mapping, Optional

from ..access.policy import VisibilityPolicy
from ..common.datetime_utils import now_local, week_start
from ..common.pagination import Page, PageRequest
from ..common.validators import parse_enum, require_non_empty, require_non_negative_int
from ..core.constants import DEFAULT_RECENT_LIMIT
from ..core.enums import EventType, MeetingMode, ReportStatus, Role
from ..core.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from ..notifications.service import ReportNotifier
from ..users.model import User
from . import workflow
from .model import ApprovalStamps, ReportData, ReportFilter, ReportTotals, WeeklyReport
from .repository import ReportRepository

logger = logging.getLogger(__name__)

_COUNT_FIELDS = (
    "male",
    "female",
    "children",
    "number_of_testimonies",
    "number_of_first_timers",
    "first_timers_followed_up",
    "first_timers_converted_to_cith",
)


def _offerings(value: Any) -> Decimal:
    if value is None or value == "" or isinstance(value, bool):
        raise ValidationError("offerings is required")
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise ValidationError("offerings must be a number")
    if not amount.is_finite():
        raise ValidationError("offerings must be a number")
    if amount < 0:
        raise ValidationError("offerings cannot be negative")
    return amount.quantize(Decimal("0.01"))


def parse_report_data(payload: Mapping[str, Any], base: Optional[ReportData] = None) -> ReportData:
    """Validate report figures; missing keys fall back to ``base`` when given."""
    if not isinstance(payload, Mapping):
        raise ValidationError("data must be an object")

    def pick(key: str) -> Any:
        if key in payload:
            return payload[key]
        return getattr(base, key) if base is not None else None

    counts = {key: require_non_negative_int(pick(key), key) for key in _COUNT_FIELDS}

    if counts["first_timers_followed_up"] > counts["number_of_first_timers"]:
        raise ValidationError("first_timers_followed_up cannot exceed number_of_first_timers")
    if counts["first_timers_converted_to_cith"] > counts["first_timers_followed_up"]:
        raise ValidationError("first_timers_converted_to_cith cannot exceed first_timers_followed_up")

    mode = pick("mode_of_meeting")
    if mode is None or mode == "":
        raise ValidationError("mode_of_meeting is required")

    remarks = pick("remarks")
    remarks = str(remarks).strip() if remarks is not None else None

    return ReportData(
        offerings=_offerings(pick("offerings")),
        mode_of_meeting=parse_enum(MeetingMode, mode, "mode_of_meeting"),
        remarks=remarks or None,
        **counts,
    )


@dataclass(frozen=True)
class ReportQuery:
    """List parameters as they arrive from the caller."""

    status: Optional[ReportStatus] = None
    week: Optional[date] = None
    event_type: Optional[EventType] = None
    cith_centre_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class ReportService:
    def __init__(
        self,
        reports: ReportRepository,
        policy: VisibilityPolicy,
        notifier: ReportNotifier,
        clock: Callable[[], datetime] = now_local,
    ):
        self._reports = reports
        self._policy = policy
        self._notifier = notifier
        self._clock = clock

    # -------- helpers --------
    def _get(self, report_id: int) -> WeeklyReport:
        report = self._reports.get(report_id)
        if not report:
            raise NotFoundError("Report not found")
        return report

    def _scoped_filter(self, actor: User, query: ReportQuery, *, status: Optional[ReportStatus] = None) -> ReportFilter:
        scope = self._policy.scope_for(actor)
        centres = scope.centre_filter()
        if query.cith_centre_id is not None:
            centres = frozenset({query.cith_centre_id}) if scope.allows_centre(query.cith_centre_id) else frozenset()
        if query.start_date and query.end_date and query.start_date > query.end_date:
            raise ValidationError("start_date cannot be after end_date")
        return ReportFilter(
            cith_centre_ids=centres,
            status=status or query.status,
            week=week_start(query.week) if query.week else None,
            event_type=query.event_type,
            start_date=query.start_date,
            end_date=query.end_date,
        )

    @staticmethod
    def _event(payload: Mapping[str, Any], default: EventType) -> EventType:
        raw = payload.get("event_type")
        if raw is None or raw == "":
            return default
        return parse_enum(EventType, raw, "event_type")

    @staticmethod
    def _description(payload: Mapping[str, Any], default: Optional[str]) -> Optional[str]:
        if "event_description" not in payload:
            return default
        value = payload.get("event_description")
        return (str(value).strip() or None) if value is not None else None

    # -------- submission --------
    def submit(self, actor: User, payload: Mapping[str, Any], *, week: date) -> WeeklyReport:
        if actor.role != Role.CITH_CENTRE:
            raise AuthorizationError("Only CITH centres can submit reports")
        if not actor.cith_centre_id:
            raise ValidationError("Your account is not linked to a CITH centre")

        lineage = self._policy.lineage(actor.cith_centre_id)
        data = parse_report_data(payload.get("data") or {})
        event_type = self._event(payload, EventType.REGULAR_SERVICE)
        event_description = self._description(payload, None)
        normalized = week_start(week)

        if self._reports.exists(cith_centre_id=actor.cith_centre_id, week=normalized, event_type=event_type):
            raise ConflictError("A report for this week and event type already exists")

        report_id = self._reports.create(
            cith_centre_id=actor.cith_centre_id,
            week=normalized,
            event_type=event_type,
            event_description=event_description,
            data=data,
            submitted_by=actor.user_id,
        )
        report = self._get(report_id)
        logger.info("Report %s submitted by user %s for centre %s", report_id, actor.user_id, actor.cith_centre_id)
        self._notifier.report_submitted(report, lineage, actor)
        return report

    # -------- reads --------
    def get(self, actor: User, report_id: int) -> WeeklyReport:
        report = self._get(report_id)
        self._policy.require_centre(actor, report.cith_centre_id, action="view")
        return report

    def list(self, actor: User, query: ReportQuery, page: PageRequest) -> Page[WeeklyReport]:
        flt = self._scoped_filter(actor, query)
        items = self._reports.list(flt, offset=page.offset, limit=page.limit)
        return Page(items=items, total=self._reports.count(flt), page=page.page, limit=page.limit)

    def recent(self, actor: User, limit: int = DEFAULT_RECENT_LIMIT):
        flt = self._scoped_filter(actor, ReportQuery())
        return self._reports.list(flt, offset=0, limit=max(1, int(limit)))

    def stats(self, actor: User, query: Optional[ReportQuery] = None) -> Dict[str, int]:
        flt = self._scoped_filter(actor, query or ReportQuery())
        counts = self._reports.count_by_status(flt)
        out = {status.value: int(counts.get(status, 0)) for status in ReportStatus}
        out["total"] = sum(out.values())
        return out

    def summary(self, actor: User, *, start_date: Optional[date] = None, end_date: Optional[date] = None) -> ReportTotals:
        """Totals over district-approved reports visible to the actor."""
        query = ReportQuery(start_date=start_date, end_date=end_date)
        return self._reports.totals(self._scoped_filter(actor, query, status=ReportStatus.DISTRICT_APPROVED))

    # -------- approval --------
    def approve(self, actor: User, report_id: int, *, target: Optional[ReportStatus] = None) -> WeeklyReport:
        report = self._get(report_id)
        lineage = self._policy.lineage(report.cith_centre_id)
        zoned = lineage.zone is not None

        if actor.is_admin:
            next_status = workflow.admin_approval_target(report.status, target, zoned)
        else:
            if actor.role not in workflow.APPROVER_ROLES:
                raise AuthorizationError("Not authorized to approve reports")
            if not workflow.owns(actor, lineage):
                raise AuthorizationError("Not authorized to approve this report")
            next_status = workflow.next_transition(report.status, actor.role, zoned).target

        ok = self._reports.transition(
            report_id=report.report_id,
            expected=report.status,
            target=next_status,
            actor_id=actor.user_id,
            at=self._clock(),
        )
        if not ok:
            raise InvalidTransitionError("Report was changed by someone else; reload and try again")

        updated = self._get(report.report_id)
        logger.info("Report %s moved %s -> %s by user %s", report.report_id, report.status.value, next_status.value, actor.user_id)
        self._notifier.report_approved(updated, lineage, actor)
        return updated

    def reject(self, actor: User, report_id: int, reason: Optional[str]) -> WeeklyReport:
        reason = require_non_empty(reason, "Rejection reason")
        report = self._get(report_id)
        lineage = self._policy.lineage(report.cith_centre_id)

        if actor.is_admin:
            if report.status == ReportStatus.REJECTED:
                raise InvalidTransitionError("Report is already rejected")
        else:
            if actor.role not in workflow.APPROVER_ROLES:
                raise AuthorizationError("Not authorized to reject reports")
            if not workflow.owns(actor, lineage):
                raise AuthorizationError("Not authorized to reject this report")
            workflow.next_transition(report.status, actor.role, lineage.zone is not None)

        ok = self._reports.transition(
            report_id=report.report_id,
            expected=report.status,
            target=ReportStatus.REJECTED,
            actor_id=actor.user_id,
            at=self._clock(),
            reason=reason,
        )
        if not ok:
            raise InvalidTransitionError("Report was changed by someone else; reload and try again")

        updated = self._get(report.report_id)
        logger.info("Report %s rejected by user %s", report.report_id, actor.user_id)
        self._notifier.report_rejected(updated, lineage, actor)
        return updated

    # -------- owner edits --------
    def update(self, actor: User, report_id: int, payload: Mapping[str, Any], *, week: Optional[date] = None) -> WeeklyReport:
        report = self._get(report_id)
        if report.submitted_by != actor.user_id:
            raise AuthorizationError("Only the submitter can edit this report")
        if report.status not in workflow.EDITABLE_STATUSES:
            raise InvalidTransitionError("Only pending or rejected reports can be edited")

        new_week = week_start(week) if week else report.week
        event_type = self._event(payload, report.event_type)
        data = parse_report_data(payload.get("data") or {}, base=report.data)
        description = self._description(payload, report.event_description)

        if self._reports.exists(
            cith_centre_id=report.cith_centre_id, week=new_week, event_type=event_type, exclude_id=report.report_id
        ):
            raise ConflictError("A report for this week and event type already exists")

        ok = self._reports.update_content(
            report_id=report.report_id,
            expected=report.status,
            week=new_week,
            event_type=event_type,
            event_description=description,
            data=data,
        )
        if not ok:
            raise InvalidTransitionError("Report was changed by someone else; reload and try again")
        return self._get(report.report_id)

    def delete(self, actor: User, report_id: int) -> None:
        report = self._get(report_id)
        if actor.is_admin:
            allowed: tuple = ()
        else:
            if report.submitted_by != actor.user_id:
                raise AuthorizationError("Only the submitter can delete this report")
            if report.status not in workflow.EDITABLE_STATUSES:
                raise InvalidTransitionError("Only pending or rejected reports can be deleted")
            allowed = workflow.EDITABLE_STATUSES

        if not self._reports.delete(report.report_id, allowed=allowed):
            raise InvalidTransitionError("Report was changed by someone else; reload and try again")
        logger.info("Report %s deleted by user %s", report.report_id, actor.user_id)

    # -------- admin override --------
    def admin_edit(self, actor: User, report_id: int, payload: Mapping[str, Any]) -> WeeklyReport:
        """Rewrite a report and place it at any status, outside the transition table.

        ``target_status`` defaults to the current status. With ``reset_approvals``
        every stamp is cleared first; levels the target implies are then stamped
        with the admin unless already stamped, and levels above it are cleared.
        """
        if not actor.is_admin:
            raise AuthorizationError("Only admins can use the comprehensive edit")

        report = self._get(report_id)
        lineage = self._policy.lineage(report.cith_centre_id)
        zoned = lineage.zone is not None

        raw_target = payload.get("target_status")
        target = parse_enum(ReportStatus, raw_target, "target_status") if raw_target else report.status
        if target == ReportStatus.ZONAL_APPROVED and not zoned:
            raise ValidationError("This centre's area is not part of a zone")

        event_type = self._event(payload, report.event_type)
        data = parse_report_data(payload.get("data") or {}, base=report.data)
        description = self._description(payload, report.event_description)
        if event_type != report.event_type and self._reports.exists(
            cith_centre_id=report.cith_centre_id, week=report.week, event_type=event_type, exclude_id=report.report_id
        ):
            raise ConflictError("A report for this week and event type already exists")

        stamps = ApprovalStamps() if payload.get("reset_approvals") else ApprovalStamps.of(report)
        stamps = self._restamp(stamps, target, zoned, actor, payload.get("rejection_reason"))

        self._reports.admin_overwrite(
            report_id=report.report_id,
            event_type=event_type,
            event_description=description,
            data=data,
            status=target,
            stamps=stamps,
        )
        logger.warning(
            "Admin %s overrode report %s: %s -> %s (reset=%s)",
            actor.user_id,
            report.report_id,
            report.status.value,
            target.value,
            bool(payload.get("reset_approvals")),
        )
        return self._get(report.report_id)

    def _restamp(
        self,
        stamps: ApprovalStamps,
        target: ReportStatus,
        zoned: bool,
        actor: User,
        rejection_reason: Optional[str],
    ) -> ApprovalStamps:
        now = self._clock()

        if target == ReportStatus.REJECTED:
            reason = require_non_empty(rejection_reason or stamps.rejection_reason, "Rejection reason")
            return replace(stamps, rejected_by=actor.user_id, rejected_at=now, rejection_reason=reason)

        stamps = replace(stamps, rejected_by=None, rejected_at=None, rejection_reason=None)
        chain = workflow.chain_for(zoned)
        reached = chain.index(target)
        levels = (
            (ReportStatus.AREA_APPROVED, "area_approved_by", "area_approved_at"),
            (ReportStatus.ZONAL_APPROVED, "zonal_approved_by", "zonal_approved_at"),
            (ReportStatus.DISTRICT_APPROVED, "district_approved_by", "district_approved_at"),
        )
        for status, by_field, at_field in levels:
            implied = status in chain and chain.index(status) <= reached
            if implied and getattr(stamps, by_field) is None:
                stamps = replace(stamps, **{by_field: actor.user_id, at_field: now})
            elif not implied:
                stamps = replace(stamps, **{by_field: None, at_field: None})
        return stamps
