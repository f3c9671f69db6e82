from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .access.policy import VisibilityPolicy
from .database.connection import DBConfig, DatabaseConnection
from .export.service import ExportService
from .hierarchy.mysql_hierarchy_repository import MySQLHierarchyRepository
from .hierarchy.repository import HierarchyRepository
from .hierarchy.service import HierarchyService
from .messages.mysql_message_repository import MySQLMessageRepository
from .messages.repository import MessageRepository
from .messages.service import MessageService
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .notifications.repository import NotificationRepository
from .notifications.service import NotificationService, Notifier, ReportNotifier
from .positions.mysql_position_repository import MySQLPositionRequestRepository
from .positions.repository import PositionRequestRepository
from .positions.service import PositionRequestService
from .reports.mysql_report_repository import MySQLReportRepository
from .reports.repository import ReportRepository
from .reports.service import ReportService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.seats import SeatRules
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    hierarchy_repo: HierarchyRepository
    reports_repo: ReportRepository
    notifications_repo: NotificationRepository
    messages_repo: MessageRepository
    positions_repo: PositionRequestRepository

    policy: VisibilityPolicy
    auth_service: AuthService
    user_service: UserService
    hierarchy_service: HierarchyService
    report_service: ReportService
    notification_service: NotificationService
    message_service: MessageService
    position_service: PositionRequestService
    export_service: ExportService


def assemble(
    *,
    users_repo: UserRepository,
    hierarchy_repo: HierarchyRepository,
    reports_repo: ReportRepository,
    notifications_repo: NotificationRepository,
    messages_repo: MessageRepository,
    positions_repo: PositionRequestRepository,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services over any set of repositories (MySQL or in-memory)."""
    policy = VisibilityPolicy(hierarchy_repo, users_repo)
    seats = SeatRules(hierarchy_repo, users_repo)
    notifier = Notifier(notifications_repo)

    return Container(
        conn=conn,
        users_repo=users_repo,
        hierarchy_repo=hierarchy_repo,
        reports_repo=reports_repo,
        notifications_repo=notifications_repo,
        messages_repo=messages_repo,
        positions_repo=positions_repo,
        policy=policy,
        auth_service=AuthService(users_repo, seats),
        user_service=UserService(users_repo, seats, policy),
        hierarchy_service=HierarchyService(hierarchy_repo, users_repo, reports_repo, policy),
        report_service=ReportService(reports_repo, policy, ReportNotifier(notifier, users_repo)),
        notification_service=NotificationService(notifications_repo),
        message_service=MessageService(messages_repo, users_repo, policy, notifier),
        position_service=PositionRequestService(positions_repo, users_repo, seats),
        export_service=ExportService(reports_repo, hierarchy_repo, users_repo, policy),
    )


def build_container(*, db_config: dict) -> Container:
    config = DBConfig.from_dict(db_config)
    conn = DatabaseConnection.get_instance(config)

    return assemble(
        conn=conn,
        users_repo=MySQLUserRepository(conn),
        hierarchy_repo=MySQLHierarchyRepository(conn),
        reports_repo=MySQLReportRepository(conn),
        notifications_repo=MySQLNotificationRepository(conn),
        messages_repo=MySQLMessageRepository(conn),
        positions_repo=MySQLPositionRequestRepository(conn),
    )
