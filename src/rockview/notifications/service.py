from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, List, Optional

from ..common.pagination import Page, PageRequest
from ..core.enums import NotificationType, Role
from ..core.exceptions import NotFoundError
from ..hierarchy.model import CentreLineage
from ..reports.model import WeeklyReport
from ..reports.workflow import next_pending_role
from ..users.model import User
from ..users.repository import UserRepository
from .model import NewNotification, Notification
from .repository import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(self, notifications: NotificationRepository):
        self._notifications = notifications

    def list_for(self, user: User, page: PageRequest, *, unread_only: bool = False) -> Page[Notification]:
        items = self._notifications.list_for(
            user.user_id, unread_only=unread_only, offset=page.offset, limit=page.limit
        )
        total = self._notifications.count_for(user.user_id, unread_only=unread_only)
        return Page(items=items, total=total, page=page.page, limit=page.limit)

    def unread_count(self, user: User) -> int:
        return self._notifications.count_for(user.user_id, unread_only=True)

    def mark_read(self, user: User, notification_id: int) -> Notification:
        n = self._notifications.get(notification_id)
        if not n or n.recipient_id != user.user_id:
            raise NotFoundError("Notification not found")
        self._notifications.mark_read(notification_id, recipient_id=user.user_id)
        return self._notifications.get(notification_id) or n

    def mark_all_read(self, user: User) -> int:
        return self._notifications.mark_all_read(user.user_id)


class Notifier:
    """Best-effort delivery: a failed row is logged, never raised."""

    def __init__(self, notifications: NotificationRepository):
        self._notifications = notifications

    def deliver(self, rows: Iterable[NewNotification]) -> int:
        sent = 0
        for row in rows:
            try:
                self._notifications.create(row)
                sent += 1
            except Exception:
                logger.exception("Failed to deliver notification to user %s", row.recipient_id)
        return sent


class ReportNotifier:
    """Fans report events out to the supervisors above the centre and to admins."""

    def __init__(self, notifier: Notifier, users: UserRepository):
        self._notifier = notifier
        self._users = users

    # -------- events --------
    def report_submitted(self, report: WeeklyReport, lineage: CentreLineage, submitter: User) -> int:
        def build() -> List[NewNotification]:
            recipients = self._supervisors_of(lineage)
            recipients.update(self._admins())
            return self._rows(
                recipients,
                exclude=submitter.user_id,
                title="New report submitted",
                message=f"{lineage.centre.name} submitted a report for the week of {report.week.isoformat()}",
                type=NotificationType.REPORT_SUBMITTED,
                sender_id=submitter.user_id,
                report_id=report.report_id,
            )

        return self._send("report_submitted", report.report_id, build)

    def report_approved(self, report: WeeklyReport, lineage: CentreLineage, actor: User) -> int:
        def build() -> List[NewNotification]:
            recipients = self._by_id([report.submitted_by])
            waiting_on = next_pending_role(report.status, lineage.zone is not None)
            if waiting_on is not None:
                recipients.update(self._seat_holders(waiting_on, lineage))
            recipients.update(self._admins())
            level = report.status.value.replace("_", " ")
            return self._rows(
                recipients,
                exclude=actor.user_id,
                title="Report approved",
                message=f"The report from {lineage.centre.name} for the week of {report.week.isoformat()} is now {level}",
                type=NotificationType.REPORT_APPROVED,
                sender_id=actor.user_id,
                report_id=report.report_id,
            )

        return self._send("report_approved", report.report_id, build)

    def report_rejected(self, report: WeeklyReport, lineage: CentreLineage, actor: User) -> int:
        def build() -> List[NewNotification]:
            recipients = self._by_id([report.submitted_by])
            recipients.update(self._seat_holders(Role.AREA_SUPERVISOR, lineage))
            recipients.update(self._admins())
            return self._rows(
                recipients,
                exclude=actor.user_id,
                title="Report rejected",
                message=(
                    f"The report from {lineage.centre.name} for the week of {report.week.isoformat()} "
                    f"was rejected: {report.rejection_reason or ''}"
                ).strip(),
                type=NotificationType.REPORT_REJECTED,
                sender_id=actor.user_id,
                report_id=report.report_id,
            )

        return self._send("report_rejected", report.report_id, build)

    # -------- helpers --------
    def _send(self, event: str, report_id: int, build: Callable[[], List[NewNotification]]) -> int:
        try:
            rows = build()
        except Exception:
            logger.exception("Could not resolve %s recipients for report %s", event, report_id)
            return 0
        sent = self._notifier.deliver(rows)
        logger.info("%s for report %s: %d notification(s)", event, report_id, sent)
        return sent

    @staticmethod
    def _rows(
        recipients: Dict[int, User],
        *,
        exclude: int,
        title: str,
        message: str,
        type: NotificationType,
        sender_id: Optional[int],
        report_id: int,
    ) -> List[NewNotification]:
        return [
            NewNotification(
                recipient_id=uid,
                title=title,
                message=message,
                type=type,
                sender_id=sender_id,
                action_url=f"/reports/{report_id}",
                report_id=report_id,
            )
            for uid in sorted(recipients)
            if uid != exclude
        ]

    def _admins(self) -> Dict[int, User]:
        return {u.user_id: u for u in self._users.list_by_role(Role.ADMIN) if u.is_active}

    def _by_id(self, ids: Iterable[int]) -> Dict[int, User]:
        return {u.user_id: u for u in self._users.get_many(ids)}

    def _seat_holders(self, role: Role, lineage: CentreLineage) -> Dict[int, User]:
        target: Optional[int]
        if role == Role.AREA_SUPERVISOR:
            target = lineage.area.area_supervisor_id
        elif role == Role.ZONAL_SUPERVISOR:
            target = lineage.zone.zonal_supervisor_id if lineage.zone else None
        elif role == Role.DISTRICT_PASTOR:
            target = lineage.district_id
        else:
            target = None
        if target is None:
            return {}
        return {u.user_id: u for u in self._users.list_seat_holders(role, target)}

    def _supervisors_of(self, lineage: CentreLineage) -> Dict[int, User]:
        out: Dict[int, User] = {}
        for role in (Role.AREA_SUPERVISOR, Role.ZONAL_SUPERVISOR, Role.DISTRICT_PASTOR):
            out.update(self._seat_holders(role, lineage))
        return out
