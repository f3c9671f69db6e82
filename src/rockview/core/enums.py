from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles, one per level of the church hierarchy."""

    ADMIN = "admin"
    DISTRICT_PASTOR = "district_pastor"
    ZONAL_SUPERVISOR = "zonal_supervisor"
    AREA_SUPERVISOR = "area_supervisor"
    CITH_CENTRE = "cith_centre"


class ReportStatus(str, Enum):
    """Approval state of a weekly report."""

    PENDING = "pending"
    AREA_APPROVED = "area_approved"
    ZONAL_APPROVED = "zonal_approved"
    DISTRICT_APPROVED = "district_approved"
    REJECTED = "rejected"


class EventType(str, Enum):
    REGULAR_SERVICE = "regular_service"
    SINGLES_DAY = "singles_day"
    YOUTH_DAY = "youth_day"
    WOMENS_DAY = "womens_day"
    MENS_DAY = "mens_day"
    HARVEST = "harvest"
    THANKSGIVING = "thanksgiving"
    SPECIAL_CRUSADE = "special_crusade"
    BAPTISM_SERVICE = "baptism_service"
    COMMUNION_SERVICE = "communion_service"
    PRAYER_MEETING = "prayer_meeting"
    OTHER = "other"


class MeetingMode(str, Enum):
    PHYSICAL = "physical"
    VIRTUAL = "virtual"
    HYBRID = "hybrid"


class NotificationType(str, Enum):
    REPORT_SUBMITTED = "report_submitted"
    REPORT_APPROVED = "report_approved"
    REPORT_REJECTED = "report_rejected"
    SYSTEM = "system"
    MESSAGE = "message"


class MessagePriority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class MessageCategory(str, Enum):
    GENERAL = "general"
    REPORT = "report"
    ANNOUNCEMENT = "announcement"
    PRAYER_REQUEST = "prayer_request"
    ADMINISTRATIVE = "administrative"


class PositionRequestStatus(str, Enum):
    """Review state of a position change request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
