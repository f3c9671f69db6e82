"""In-memory repositories and a small seeded hierarchy for service and API tests."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from werkzeug.security import generate_password_hash

from rockview.container import Container, assemble
from rockview.core.constants import UNASSIGNED
from rockview.core.enums import (
    MessageCategory,
    MessagePriority,
    PositionRequestStatus,
    ReportStatus,
    Role,
)
from rockview.core.exceptions import ConflictError
from rockview.hierarchy.model import AreaSupervisor, CithCentre, District, ZonalSupervisor
from rockview.messages.model import Conversation, Message
from rockview.notifications.model import NewNotification, Notification
from rockview.positions.model import PositionChangeRequest
from rockview.reports.model import ApprovalStamps, ReportFilter, ReportTotals, WeeklyReport
from rockview.users.model import ROLE_REFERENCE_FIELD, Assignment, User

BASE_TIME = datetime(2024, 1, 1, 9, 0, 0)
FAST_HASH = "pbkdf2:sha256:1000"


class InMemoryUsers:
    def __init__(self):
        self.rows: Dict[int, User] = {}
        self._next = 1

    def add(self, name: str, role: Role, *, email: Optional[str] = None, password: str = "secret123", **refs) -> User:
        user_id = self.create_user(
            email=email or f"{name.lower().replace(' ', '.')}@rockview.test",
            password_hash=generate_password_hash(password, method=FAST_HASH),
            name=name,
            phone="08011112222",
            role=role,
            assignment=Assignment(**refs),
        )
        return self.rows[user_id]

    def get_by_id(self, user_id):
        return self.rows.get(int(user_id))

    def get_by_email(self, email):
        for u in self.rows.values():
            if u.email.lower() == email.lower():
                return u
        return None

    def get_many(self, user_ids):
        return [self.rows[i] for i in sorted(set(user_ids)) if i in self.rows]

    def create_user(self, *, email, password_hash, name, phone, role, assignment):
        user_id = self._next
        self._next += 1
        self.rows[user_id] = User(
            user_id=user_id,
            email=email,
            password_hash=password_hash,
            name=name,
            phone=phone,
            role=role,
            district_id=assignment.district_id,
            zonal_supervisor_id=assignment.zonal_supervisor_id,
            area_supervisor_id=assignment.area_supervisor_id,
            cith_centre_id=assignment.cith_centre_id,
            created_at=BASE_TIME + timedelta(minutes=user_id),
        )
        return user_id

    def update_profile(self, user_id, *, name, phone):
        self.rows[user_id] = replace(self.rows[user_id], name=name, phone=phone)
        return True

    def update_password(self, user_id, *, password_hash):
        self.rows[user_id] = replace(self.rows[user_id], password_hash=password_hash)
        return True

    def assign_role(self, user_id, *, role, assignment):
        self.rows[user_id] = replace(
            self.rows[user_id],
            role=role,
            district_id=assignment.district_id,
            zonal_supervisor_id=assignment.zonal_supervisor_id,
            area_supervisor_id=assignment.area_supervisor_id,
            cith_centre_id=assignment.cith_centre_id,
        )
        return True

    def delete_by_id(self, user_id):
        return self.rows.pop(user_id, None) is not None

    def list_all(self):
        return sorted(self.rows.values(), key=lambda u: u.user_id, reverse=True)

    def list_by_role(self, role):
        return [u for u in sorted(self.rows.values(), key=lambda u: u.user_id) if u.role == role]

    def list_seat_holders(self, role, target_id):
        column = ROLE_REFERENCE_FIELD.get(role)
        if not column:
            return []
        return [u for u in self.list_by_role(role) if getattr(u, column) == target_id]

    def list_in_hierarchy(self, *, district_ids=(), zonal_supervisor_ids=(), area_supervisor_ids=(), cith_centre_ids=()):
        wanted = {
            "district_id": set(district_ids),
            "zonal_supervisor_id": set(zonal_supervisor_ids),
            "area_supervisor_id": set(area_supervisor_ids),
            "cith_centre_id": set(cith_centre_ids),
        }
        found = [
            u for u in self.rows.values()
            if any(getattr(u, column) in ids for column, ids in wanted.items() if ids)
        ]
        return sorted(found, key=lambda u: u.name)


class InMemoryHierarchy:
    def __init__(self):
        self.districts: Dict[int, District] = {}
        self.areas: Dict[int, AreaSupervisor] = {}
        self.zones: Dict[int, ZonalSupervisor] = {}
        self.centres: Dict[int, CithCentre] = {}
        self._next = 1

    def _id(self) -> int:
        value = self._next
        self._next += 1
        return value

    # Districts
    def get_district(self, district_id):
        return self.districts.get(district_id)

    def list_districts(self):
        return sorted(self.districts.values(), key=lambda d: d.district_number)

    def district_number_taken(self, district_number, *, exclude_id=None):
        return any(d.district_number == district_number and d.district_id != exclude_id for d in self.districts.values())

    def create_district(self, *, name, district_number, description):
        district_id = self._id()
        self.districts[district_id] = District(district_id, name, district_number, description=description)
        return district_id

    def update_district(self, district_id, *, name, district_number, description):
        self.districts[district_id] = replace(
            self.districts[district_id], name=name, district_number=district_number, description=description
        )
        return True

    def delete_district(self, district_id):
        return self.districts.pop(district_id, None) is not None

    # Areas
    def get_area(self, area_supervisor_id):
        return self.areas.get(area_supervisor_id)

    def list_areas(self, *, district_id=None):
        rows = [a for a in self.areas.values() if district_id is None or a.district_id == district_id]
        return sorted(rows, key=lambda a: a.name)

    def create_area(self, *, name, district_id):
        area_id = self._id()
        self.areas[area_id] = AreaSupervisor(area_id, name, district_id)
        return area_id

    def update_area(self, area_supervisor_id, *, name, district_id):
        self.areas[area_supervisor_id] = replace(self.areas[area_supervisor_id], name=name, district_id=district_id)
        return True

    def delete_area(self, area_supervisor_id):
        return self.areas.pop(area_supervisor_id, None) is not None

    # Zones
    def get_zone(self, zonal_supervisor_id):
        return self.zones.get(zonal_supervisor_id)

    def get_zone_for_area(self, area_supervisor_id):
        for z in self.zones.values():
            if area_supervisor_id in z.area_supervisor_ids:
                return z
        return None

    def list_zones(self, *, district_id=None):
        rows = [z for z in self.zones.values() if district_id is None or z.district_id == district_id]
        return sorted(rows, key=lambda z: z.name)

    def create_zone(self, *, name, district_id, area_supervisor_ids):
        zone_id = self._id()
        self.zones[zone_id] = ZonalSupervisor(zone_id, name, district_id, frozenset(area_supervisor_ids))
        return zone_id

    def update_zone(self, zonal_supervisor_id, *, name, district_id, area_supervisor_ids):
        self.zones[zonal_supervisor_id] = replace(
            self.zones[zonal_supervisor_id],
            name=name,
            district_id=district_id,
            area_supervisor_ids=frozenset(area_supervisor_ids),
        )
        return True

    def delete_zone(self, zonal_supervisor_id):
        return self.zones.pop(zonal_supervisor_id, None) is not None

    # Centres
    def get_centre(self, cith_centre_id):
        return self.centres.get(cith_centre_id)

    def list_centres(self, *, area_supervisor_ids=None):
        ids = None if area_supervisor_ids is None else set(area_supervisor_ids)
        rows = [c for c in self.centres.values() if ids is None or c.area_supervisor_id in ids]
        return sorted(rows, key=lambda c: c.name)

    def create_centre(self, *, name, location, area_supervisor_id, leader_name=None, contact_email=None, contact_phone=None):
        centre_id = self._id()
        self.centres[centre_id] = CithCentre(
            centre_id,
            name,
            location,
            area_supervisor_id,
            leader_name=leader_name or UNASSIGNED,
            contact_email=contact_email,
            contact_phone=contact_phone,
        )
        return centre_id

    def update_centre(self, cith_centre_id, *, name, location, area_supervisor_id, leader_name=None, contact_email=None, contact_phone=None):
        self.centres[cith_centre_id] = replace(
            self.centres[cith_centre_id],
            name=name,
            location=location,
            area_supervisor_id=area_supervisor_id,
            leader_name=leader_name or UNASSIGNED,
            contact_email=contact_email,
            contact_phone=contact_phone,
        )
        return True

    def delete_centre(self, cith_centre_id):
        return self.centres.pop(cith_centre_id, None) is not None


_STAMP_FIELDS = {
    ReportStatus.AREA_APPROVED: ("area_approved_by", "area_approved_at"),
    ReportStatus.ZONAL_APPROVED: ("zonal_approved_by", "zonal_approved_at"),
    ReportStatus.DISTRICT_APPROVED: ("district_approved_by", "district_approved_at"),
    ReportStatus.REJECTED: ("rejected_by", "rejected_at"),
}


class InMemoryReports:
    def __init__(self):
        self.rows: Dict[int, WeeklyReport] = {}
        self._next = 1
        # Runs inside every conditional write, before the status check.
        self.before_write: Optional[Callable[[int], None]] = None

    def force_status(self, report_id: int, status: ReportStatus) -> None:
        self.rows[report_id] = replace(self.rows[report_id], status=status)

    def _match(self, r: WeeklyReport, flt: ReportFilter) -> bool:
        if flt.cith_centre_ids is not None and r.cith_centre_id not in flt.cith_centre_ids:
            return False
        if flt.status is not None and r.status != flt.status:
            return False
        if flt.week is not None and r.week != flt.week:
            return False
        if flt.event_type is not None and r.event_type != flt.event_type:
            return False
        if flt.start_date is not None and r.week < flt.start_date:
            return False
        if flt.end_date is not None and r.week > flt.end_date:
            return False
        return True

    def _matching(self, flt: ReportFilter) -> List[WeeklyReport]:
        rows = [r for r in self.rows.values() if self._match(r, flt)]
        return sorted(rows, key=lambda r: (r.week, r.submitted_at, r.report_id), reverse=True)

    def _hook(self, report_id: int) -> None:
        if self.before_write is not None:
            self.before_write(report_id)

    def create(self, *, cith_centre_id, week, event_type, event_description, data, submitted_by):
        if self.exists(cith_centre_id=cith_centre_id, week=week, event_type=event_type):
            raise ConflictError("A report for this week and event type already exists")
        report_id = self._next
        self._next += 1
        self.rows[report_id] = WeeklyReport(
            report_id=report_id,
            cith_centre_id=cith_centre_id,
            week=week,
            event_type=event_type,
            event_description=event_description,
            data=data,
            status=ReportStatus.PENDING,
            submitted_by=submitted_by,
            submitted_at=BASE_TIME + timedelta(hours=report_id),
        )
        return report_id

    def get(self, report_id):
        return self.rows.get(report_id)

    def exists(self, *, cith_centre_id, week, event_type, exclude_id=None):
        return any(
            r.cith_centre_id == cith_centre_id and r.week == week and r.event_type == event_type and r.report_id != exclude_id
            for r in self.rows.values()
        )

    def list(self, flt, *, offset=0, limit=10):
        return self._matching(flt)[offset: offset + limit]

    def count(self, flt):
        return len(self._matching(flt))

    def count_by_status(self, flt):
        out: Dict[ReportStatus, int] = {}
        for r in self._matching(flt):
            out[r.status] = out.get(r.status, 0) + 1
        return out

    def count_for_centre(self, cith_centre_id):
        return sum(1 for r in self.rows.values() if r.cith_centre_id == cith_centre_id)

    def totals(self, flt):
        rows = self._matching(flt)
        return ReportTotals(
            total_reports=len(rows),
            total_male=sum(r.data.male for r in rows),
            total_female=sum(r.data.female for r in rows),
            total_children=sum(r.data.children for r in rows),
            total_offerings=sum((r.data.offerings for r in rows), Decimal("0")),
            total_testimonies=sum(r.data.number_of_testimonies for r in rows),
            total_first_timers=sum(r.data.number_of_first_timers for r in rows),
            total_first_timers_followed_up=sum(r.data.first_timers_followed_up for r in rows),
            total_first_timers_converted=sum(r.data.first_timers_converted_to_cith for r in rows),
        )

    def transition(self, *, report_id, expected, target, actor_id, at, reason=None):
        self._hook(report_id)
        r = self.rows.get(report_id)
        if not r or r.status != expected:
            return False
        by_field, at_field = _STAMP_FIELDS[target]
        changes = {"status": target, by_field: actor_id, at_field: at}
        if target == ReportStatus.REJECTED:
            changes["rejection_reason"] = reason
        self.rows[report_id] = replace(r, **changes)
        return True

    def update_content(self, *, report_id, expected, week, event_type, event_description, data):
        self._hook(report_id)
        r = self.rows.get(report_id)
        if not r or r.status != expected:
            return False
        self.rows[report_id] = replace(
            r,
            week=week,
            event_type=event_type,
            event_description=event_description,
            data=data,
            status=ReportStatus.PENDING,
            rejected_by=None,
            rejected_at=None,
            rejection_reason=None,
        )
        return True

    def admin_overwrite(self, *, report_id, event_type, event_description, data, status, stamps: ApprovalStamps):
        r = self.rows[report_id]
        self.rows[report_id] = replace(
            r,
            event_type=event_type,
            event_description=event_description,
            data=data,
            status=status,
            area_approved_by=stamps.area_approved_by,
            area_approved_at=stamps.area_approved_at,
            zonal_approved_by=stamps.zonal_approved_by,
            zonal_approved_at=stamps.zonal_approved_at,
            district_approved_by=stamps.district_approved_by,
            district_approved_at=stamps.district_approved_at,
            rejected_by=stamps.rejected_by,
            rejected_at=stamps.rejected_at,
            rejection_reason=stamps.rejection_reason,
        )
        return True

    def delete(self, report_id, *, allowed=()):
        self._hook(report_id)
        r = self.rows.get(report_id)
        if not r or (allowed and r.status not in allowed):
            return False
        del self.rows[report_id]
        return True


class InMemoryNotifications:
    def __init__(self):
        self.rows: Dict[int, Notification] = {}
        self._next = 1
        # Recipients whose rows fail to write, to exercise best-effort delivery.
        self.fail_for: set = set()

    def for_user(self, user_id: int) -> List[Notification]:
        return [n for n in self.rows.values() if n.recipient_id == user_id]

    def create(self, n: NewNotification):
        if n.recipient_id in self.fail_for:
            raise RuntimeError("notification store unavailable")
        notification_id = self._next
        self._next += 1
        self.rows[notification_id] = Notification(
            notification_id=notification_id,
            recipient_id=n.recipient_id,
            title=n.title,
            message=n.message,
            type=n.type,
            sender_id=n.sender_id,
            action_url=n.action_url,
            report_id=n.report_id,
            message_id=n.message_id,
            created_at=BASE_TIME + timedelta(seconds=notification_id),
        )
        return notification_id

    def get(self, notification_id):
        return self.rows.get(notification_id)

    def _mine(self, recipient_id, unread_only):
        rows = [n for n in self.for_user(recipient_id) if not (unread_only and n.is_read)]
        return sorted(rows, key=lambda n: n.notification_id, reverse=True)

    def list_for(self, recipient_id, *, unread_only=False, offset=0, limit=20):
        return self._mine(recipient_id, unread_only)[offset: offset + limit]

    def count_for(self, recipient_id, *, unread_only=False):
        return len(self._mine(recipient_id, unread_only))

    def mark_read(self, notification_id, *, recipient_id):
        n = self.rows.get(notification_id)
        if not n or n.recipient_id != recipient_id:
            return False
        self.rows[notification_id] = replace(n, is_read=True)
        return True

    def mark_all_read(self, recipient_id):
        changed = 0
        for n in self._mine(recipient_id, True):
            self.rows[n.notification_id] = replace(n, is_read=True)
            changed += 1
        return changed


class InMemoryMessages:
    def __init__(self):
        self.rows: Dict[int, Message] = {}
        self._next = 1

    def create(self, *, from_user_id, to_user_id, subject, content, priority, category, reply_to_id=None):
        message_id = self._next
        self._next += 1
        self.rows[message_id] = Message(
            message_id=message_id,
            from_user_id=from_user_id,
            to_user_id=to_user_id,
            subject=subject,
            content=content,
            priority=priority,
            category=category,
            reply_to_id=reply_to_id,
            created_at=BASE_TIME + timedelta(seconds=message_id),
        )
        return message_id

    def get(self, message_id):
        return self.rows.get(message_id)

    def _newest_first(self, rows):
        return sorted(rows, key=lambda m: m.message_id, reverse=True)

    def list_inbox(self, user_id, *, offset=0, limit=20):
        return self._newest_first(m for m in self.rows.values() if m.to_user_id == user_id)[offset: offset + limit]

    def count_inbox(self, user_id):
        return sum(1 for m in self.rows.values() if m.to_user_id == user_id)

    def list_sent(self, user_id, *, offset=0, limit=20):
        return self._newest_first(m for m in self.rows.values() if m.from_user_id == user_id)[offset: offset + limit]

    def count_sent(self, user_id):
        return sum(1 for m in self.rows.values() if m.from_user_id == user_id)

    def count_unread(self, user_id):
        return sum(1 for m in self.rows.values() if m.to_user_id == user_id and not m.is_read)

    def mark_read(self, message_ids, *, recipient_id, at):
        changed = 0
        for message_id in message_ids:
            m = self.rows.get(message_id)
            if m and m.to_user_id == recipient_id and not m.is_read:
                self.rows[message_id] = replace(m, is_read=True, read_at=at)
                changed += 1
        return changed

    def mark_thread_read(self, *, recipient_id, counterpart_id, at):
        ids = [m.message_id for m in self.rows.values() if m.to_user_id == recipient_id and m.from_user_id == counterpart_id]
        return self.mark_read(ids, recipient_id=recipient_id, at=at)

    def delete(self, message_id):
        return self.rows.pop(message_id, None) is not None

    def thread(self, user_id, other_id):
        pair = {user_id, other_id}
        return sorted(
            (m for m in self.rows.values() if {m.from_user_id, m.to_user_id} == pair),
            key=lambda m: m.message_id,
        )

    def conversations(self, user_id):
        latest: Dict[int, Message] = {}
        unread: Dict[int, int] = {}
        for m in sorted(self.rows.values(), key=lambda m: m.message_id):
            if user_id not in (m.from_user_id, m.to_user_id):
                continue
            other = m.to_user_id if m.from_user_id == user_id else m.from_user_id
            latest[other] = m
            if m.to_user_id == user_id and not m.is_read:
                unread[other] = unread.get(other, 0) + 1
        convs = [Conversation(other, m, unread.get(other, 0)) for other, m in latest.items()]
        return sorted(convs, key=lambda c: c.last_message.message_id, reverse=True)


class InMemoryPositionRequests:
    def __init__(self):
        self.rows: Dict[int, PositionChangeRequest] = {}
        self._next = 1

    def create(self, *, user_id, current_role, new_role, target_id):
        request_id = self._next
        self._next += 1
        self.rows[request_id] = PositionChangeRequest(
            request_id=request_id,
            user_id=user_id,
            current_role=current_role,
            new_role=new_role,
            target_id=target_id,
            status=PositionRequestStatus.PENDING,
            created_at=BASE_TIME + timedelta(minutes=request_id),
        )
        return request_id

    def get(self, request_id):
        return self.rows.get(request_id)

    def has_pending(self, user_id):
        return any(r.user_id == user_id and r.status == PositionRequestStatus.PENDING for r in self.rows.values())

    def list(self, *, user_id=None, status=None):
        rows = [
            r for r in self.rows.values()
            if (user_id is None or r.user_id == user_id) and (status is None or r.status == status)
        ]
        return sorted(rows, key=lambda r: r.request_id, reverse=True)

    def decide(self, *, request_id, status, reviewed_by, at, rejection_reason=None):
        r = self.rows.get(request_id)
        if not r or r.status != PositionRequestStatus.PENDING:
            return False
        self.rows[request_id] = replace(
            r, status=status, reviewed_by=reviewed_by, reviewed_at=at, rejection_reason=rejection_reason
        )
        return True

    def delete_pending(self, request_id, *, user_id):
        r = self.rows.get(request_id)
        if not r or r.user_id != user_id or r.status != PositionRequestStatus.PENDING:
            return False
        del self.rows[request_id]
        return True


@dataclass
class World:
    """Two districts; district one has a zoned area (A) and an unzoned one (B)."""

    container: Container
    users: InMemoryUsers
    hierarchy: InMemoryHierarchy
    reports: InMemoryReports
    notifications: InMemoryNotifications
    messages: InMemoryMessages
    positions: InMemoryPositionRequests

    district: District
    other_district: District
    area_a: AreaSupervisor
    area_b: AreaSupervisor
    area_c: AreaSupervisor
    zone: ZonalSupervisor
    centre_a: CithCentre
    centre_b: CithCentre
    centre_c: CithCentre

    admin: User
    pastor: User
    zonal: User
    area_a_sup: User
    area_b_sup: User
    area_c_sup: User
    leader_a: User
    leader_b: User
    leader_c: User

    def reload(self, user: User) -> User:
        return self.users.get_by_id(user.user_id)


def build_world() -> World:
    users = InMemoryUsers()
    hierarchy = InMemoryHierarchy()
    reports = InMemoryReports()
    notifications = InMemoryNotifications()
    messages = InMemoryMessages()
    positions = InMemoryPositionRequests()

    d1 = hierarchy.create_district(name="Lagos Island", district_number=1, description=None)
    d2 = hierarchy.create_district(name="Ikeja", district_number=2, description=None)
    a = hierarchy.create_area(name="Ajah Area", district_id=d1)
    b = hierarchy.create_area(name="Lekki Area", district_id=d1)
    c = hierarchy.create_area(name="Ogba Area", district_id=d2)
    z = hierarchy.create_zone(name="Island Zone", district_id=d1, area_supervisor_ids=[a])
    ca = hierarchy.create_centre(name="Abraham Adesanya Centre", location="Ajah", area_supervisor_id=a)
    cb = hierarchy.create_centre(name="Chevron Centre", location="Lekki", area_supervisor_id=b)
    cc = hierarchy.create_centre(name="Ogba Centre", location="Ogba", area_supervisor_id=c)

    admin = users.add("Admin", Role.ADMIN, password="admin123")
    pastor = users.add("Pastor Ade", Role.DISTRICT_PASTOR, district_id=d1)
    zonal = users.add("Zonal Bisi", Role.ZONAL_SUPERVISOR, zonal_supervisor_id=z)
    area_a_sup = users.add("Area Chidi", Role.AREA_SUPERVISOR, area_supervisor_id=a)
    area_b_sup = users.add("Area Dayo", Role.AREA_SUPERVISOR, area_supervisor_id=b)
    area_c_sup = users.add("Area Efe", Role.AREA_SUPERVISOR, area_supervisor_id=c)
    leader_a = users.add("Leader Funke", Role.CITH_CENTRE, cith_centre_id=ca)
    leader_b = users.add("Leader Gbenga", Role.CITH_CENTRE, cith_centre_id=cb)
    leader_c = users.add("Leader Hauwa", Role.CITH_CENTRE, cith_centre_id=cc)

    container = assemble(
        users_repo=users,
        hierarchy_repo=hierarchy,
        reports_repo=reports,
        notifications_repo=notifications,
        messages_repo=messages,
        positions_repo=positions,
    )
    return World(
        container=container,
        users=users,
        hierarchy=hierarchy,
        reports=reports,
        notifications=notifications,
        messages=messages,
        positions=positions,
        district=hierarchy.get_district(d1),
        other_district=hierarchy.get_district(d2),
        area_a=hierarchy.get_area(a),
        area_b=hierarchy.get_area(b),
        area_c=hierarchy.get_area(c),
        zone=hierarchy.get_zone(z),
        centre_a=hierarchy.get_centre(ca),
        centre_b=hierarchy.get_centre(cb),
        centre_c=hierarchy.get_centre(cc),
        admin=admin,
        pastor=pastor,
        zonal=zonal,
        area_a_sup=area_a_sup,
        area_b_sup=area_b_sup,
        area_c_sup=area_c_sup,
        leader_a=leader_a,
        leader_b=leader_b,
        leader_c=leader_c,
    )


def report_payload(**overrides) -> dict:
    data = {
        "male": 10,
        "female": 10,
        "children": 5,
        "offerings": "1500.50",
        "number_of_testimonies": 2,
        "number_of_first_timers": 4,
        "first_timers_followed_up": 3,
        "first_timers_converted_to_cith": 1,
        "mode_of_meeting": "physical",
    }
    event = {k: overrides.pop(k) for k in ("event_type", "event_description") if k in overrides}
    data.update(overrides)
    return {"data": data, **event}


# A Wednesday; its week starts on Sunday 2024-03-10.
SAMPLE_DAY = date(2024, 3, 13)
SAMPLE_WEEK = date(2024, 3, 10)


def message_kwargs(to_user_id: int, **overrides) -> dict:
    kwargs = {
        "to_user_id": to_user_id,
        "subject": "Weekly meeting",
        "content": "Please confirm attendance figures.",
        "priority": MessagePriority.NORMAL,
        "category": MessageCategory.GENERAL,
    }
    kwargs.update(overrides)
    return kwargs


def ids(rows: Iterable) -> Sequence[int]:
    return sorted(getattr(r, "user_id") for r in rows)

