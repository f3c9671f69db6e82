from __future__ import annotations

import pytest

from rockview.common.pagination import PageRequest
from rockview.core.enums import NotificationType
from rockview.core.exceptions import NotFoundError
from tests.fakes import SAMPLE_DAY, report_payload


def _submit_and_reject(world):
    service = world.container.report_service
    report = service.submit(world.leader_a, report_payload(), week=SAMPLE_DAY)
    service.approve(world.area_a_sup, report.report_id)
    service.reject(world.zonal, report.report_id, "Figures look doubled")
    return report


def test_rejection_reaches_submitter_and_area_supervisor(world):
    report = _submit_and_reject(world)

    leader_notes = world.notifications.for_user(world.leader_a.user_id)
    assert [n.type for n in leader_notes] == [NotificationType.REPORT_APPROVED, NotificationType.REPORT_REJECTED]
    assert "Figures look doubled" in leader_notes[-1].message
    assert leader_notes[-1].report_id == report.report_id

    area_types = [n.type for n in world.notifications.for_user(world.area_a_sup.user_id)]
    assert area_types == [NotificationType.REPORT_SUBMITTED, NotificationType.REPORT_REJECTED]
    zonal_types = [n.type for n in world.notifications.for_user(world.zonal.user_id)]
    assert NotificationType.REPORT_REJECTED not in zonal_types


def test_listing_and_read_flags(world):
    _submit_and_reject(world)
    service = world.container.notification_service

    page = service.list_for(world.admin, PageRequest(page=1, limit=2))
    assert page.total == 3
    assert [n.notification_id for n in page.items] == sorted((n.notification_id for n in page.items), reverse=True)

    first = page.items[0]
    assert service.mark_read(world.admin, first.notification_id).is_read
    assert service.unread_count(world.admin) == 2
    assert service.list_for(world.admin, PageRequest(), unread_only=True).total == 2

    with pytest.raises(NotFoundError):
        service.mark_read(world.leader_a, first.notification_id)

    assert service.mark_all_read(world.admin) == 2
    assert service.unread_count(world.admin) == 0
