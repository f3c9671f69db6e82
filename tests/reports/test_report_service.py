from __future__ import annotations

from decimal import Decimal

import pytest

from rockview.common.pagination import PageRequest
from rockview.core.enums import EventType, ReportStatus
from rockview.core.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidTransitionError,
    ValidationError,
)
from rockview.reports.service import ReportQuery
from tests.fakes import SAMPLE_DAY, SAMPLE_WEEK, report_payload


def _submit(world, leader=None, **overrides):
    leader = leader or world.leader_a
    return world.container.report_service.submit(leader, report_payload(**overrides), week=SAMPLE_DAY)


# -------- submission --------
def test_submit_normalizes_week_and_computes_total(world):
    report = _submit(world)

    assert report.status == ReportStatus.PENDING
    assert report.week == SAMPLE_WEEK
    assert report.cith_centre_id == world.centre_a.cith_centre_id
    assert report.data.total_attendance == 25
    assert report.data.offerings == Decimal("1500.50")
    assert report.event_type == EventType.REGULAR_SERVICE


def test_duplicate_week_and_event_is_a_conflict(world):
    _submit(world)
    with pytest.raises(ConflictError):
        _submit(world)
    # another event type in the same week is fine
    special = _submit(world, event_type="youth_day", event_description="Youth rally")
    assert special.event_description == "Youth rally"


@pytest.mark.parametrize(
    "overrides",
    [
        {"male": -1},
        {"first_timers_followed_up": 5},
        {"first_timers_converted_to_cith": 4},
        {"offerings": "-3"},
        {"offerings": "lots"},
        {"mode_of_meeting": "carrier pigeon"},
        {"female": 2.5},
    ],
)
def test_invalid_figures_are_rejected(world, overrides):
    with pytest.raises(ValidationError):
        _submit(world, **overrides)
    assert world.reports.rows == {}


def test_only_centre_leaders_submit(world):
    with pytest.raises(AuthorizationError):
        world.container.report_service.submit(world.area_a_sup, report_payload(), week=SAMPLE_DAY)


def test_submit_notifies_every_level_above_and_admins(world):
    _submit(world)

    notified = {n.recipient_id for n in world.notifications.rows.values()}
    assert notified == {
        world.area_a_sup.user_id,
        world.zonal.user_id,
        world.pastor.user_id,
        world.admin.user_id,
    }


def test_failed_notification_does_not_fail_submission(world):
    world.notifications.fail_for = {world.admin.user_id}

    report = _submit(world)

    assert world.reports.get(report.report_id) is not None
    assert world.notifications.for_user(world.area_a_sup.user_id)
    assert not world.notifications.for_user(world.admin.user_id)


# -------- approval chain --------
def test_zoned_report_goes_through_area_zone_and_district(world):
    service = world.container.report_service
    report = _submit(world)

    r1 = service.approve(world.area_a_sup, report.report_id)
    assert r1.status == ReportStatus.AREA_APPROVED
    assert r1.area_approved_by == world.area_a_sup.user_id

    with pytest.raises(InvalidTransitionError):
        service.approve(world.pastor, report.report_id)

    r2 = service.approve(world.zonal, report.report_id)
    assert r2.status == ReportStatus.ZONAL_APPROVED
    assert r2.zonal_approved_by == world.zonal.user_id

    r3 = service.approve(world.pastor, report.report_id)
    assert r3.status == ReportStatus.DISTRICT_APPROVED
    assert r3.district_approved_by == world.pastor.user_id
    assert r3.area_approved_at is not None and r3.district_approved_at is not None


def test_unzoned_report_skips_the_zonal_step(world):
    service = world.container.report_service
    report = _submit(world, leader=world.leader_b)

    service.approve(world.area_b_sup, report.report_id)
    # Area B sits outside the zone, so the zonal supervisor has no say over it.
    with pytest.raises(AuthorizationError):
        service.approve(world.zonal, report.report_id)

    done = service.approve(world.pastor, report.report_id)
    assert done.status == ReportStatus.DISTRICT_APPROVED
    assert done.zonal_approved_by is None


def test_zonal_supervisor_waits_for_area_approval(world):
    service = world.container.report_service
    report = _submit(world)

    with pytest.raises(InvalidTransitionError, match="area_approved"):
        service.approve(world.zonal, report.report_id)
    with pytest.raises(InvalidTransitionError):
        service.reject(world.zonal, report.report_id, "Too early")


def _zonal_approved_then_unzoned(world):
    service = world.container.report_service
    report = _submit(world)
    service.approve(world.area_a_sup, report.report_id)
    service.approve(world.zonal, report.report_id)
    world.container.hierarchy_service.update_zone(
        world.admin, world.zone.zonal_supervisor_id, {"name": "Island Zone", "area_supervisor_ids": []}
    )
    return report


def test_pastor_finishes_a_zonal_approved_report_after_its_area_leaves_the_zone(world):
    report = _zonal_approved_then_unzoned(world)

    done = world.container.report_service.approve(world.pastor, report.report_id)
    assert done.status == ReportStatus.DISTRICT_APPROVED
    assert done.zonal_approved_by == world.zonal.user_id
    assert done.district_approved_by == world.pastor.user_id


def test_admin_finishes_a_zonal_approved_report_after_its_area_leaves_the_zone(world):
    report = _zonal_approved_then_unzoned(world)

    done = world.container.report_service.approve(world.admin, report.report_id)
    assert done.status == ReportStatus.DISTRICT_APPROVED


def test_pastor_can_reject_a_zonal_approved_report_after_unzoning(world):
    report = _zonal_approved_then_unzoned(world)

    rejected = world.container.report_service.reject(world.pastor, report.report_id, "Recount")
    assert rejected.status == ReportStatus.REJECTED


def test_approving_twice_is_an_invalid_transition(world):
    service = world.container.report_service
    report = _submit(world)
    service.approve(world.area_a_sup, report.report_id)

    with pytest.raises(InvalidTransitionError):
        service.approve(world.area_a_sup, report.report_id)


def test_supervisor_of_another_area_cannot_approve(world):
    report = _submit(world)
    with pytest.raises(AuthorizationError):
        world.container.report_service.approve(world.area_b_sup, report.report_id)
    with pytest.raises(AuthorizationError):
        world.container.report_service.approve(world.leader_a, report.report_id)


def test_lost_race_surfaces_as_invalid_transition(world):
    report = _submit(world)
    world.reports.before_write = lambda rid: world.reports.force_status(rid, ReportStatus.REJECTED)

    with pytest.raises(InvalidTransitionError, match="changed by someone else"):
        world.container.report_service.approve(world.area_a_sup, report.report_id)
    assert world.reports.get(report.report_id).area_approved_by is None


def test_approval_notifies_submitter_and_next_approver(world):
    report = _submit(world)
    world.notifications.rows.clear()

    world.container.report_service.approve(world.area_a_sup, report.report_id)

    notified = {n.recipient_id for n in world.notifications.rows.values()}
    assert notified == {world.leader_a.user_id, world.zonal.user_id, world.admin.user_id}


def test_admin_can_jump_to_district_approved(world):
    report = _submit(world)
    done = world.container.report_service.approve(
        world.admin, report.report_id, target=ReportStatus.DISTRICT_APPROVED
    )
    assert done.status == ReportStatus.DISTRICT_APPROVED
    assert done.district_approved_by == world.admin.user_id


# -------- rejection --------
def test_reject_requires_a_reason(world):
    report = _submit(world)
    with pytest.raises(ValidationError):
        world.container.report_service.reject(world.area_a_sup, report.report_id, "   ")


def test_reject_records_reason_and_owner_resubmits(world):
    service = world.container.report_service
    report = _submit(world)

    rejected = service.reject(world.area_a_sup, report.report_id, "Offerings do not add up")
    assert rejected.status == ReportStatus.REJECTED
    assert rejected.rejected_by == world.area_a_sup.user_id
    assert rejected.rejection_reason == "Offerings do not add up"

    with pytest.raises(InvalidTransitionError):
        service.approve(world.area_a_sup, report.report_id)

    fixed = service.update(world.leader_a, report.report_id, report_payload(offerings="1600"))
    assert fixed.status == ReportStatus.PENDING
    assert fixed.rejection_reason is None and fixed.rejected_by is None
    assert fixed.data.offerings == Decimal("1600.00")


def test_pastor_cannot_reject_before_their_turn(world):
    report = _submit(world)
    with pytest.raises(InvalidTransitionError):
        world.container.report_service.reject(world.pastor, report.report_id, "Too early")


def _approved_by(world, approvers):
    report = _submit(world)
    for approver in approvers:
        world.container.report_service.approve(approver, report.report_id)
    return report


@pytest.mark.parametrize(
    "steps, status",
    [
        (0, ReportStatus.PENDING),
        (1, ReportStatus.AREA_APPROVED),
        (2, ReportStatus.ZONAL_APPROVED),
        (3, ReportStatus.DISTRICT_APPROVED),
    ],
)
def test_admin_rejects_at_any_state(world, steps, status):
    approvers = [world.area_a_sup, world.zonal, world.pastor][:steps]
    report = _approved_by(world, approvers)
    assert world.reports.get(report.report_id).status == status

    rejected = world.container.report_service.reject(world.admin, report.report_id, "Duplicate entry")
    assert rejected.status == ReportStatus.REJECTED
    assert rejected.rejected_by == world.admin.user_id


def test_admin_cannot_reject_twice(world):
    service = world.container.report_service
    report = _submit(world)
    service.reject(world.admin, report.report_id, "Duplicate entry")

    with pytest.raises(InvalidTransitionError, match="already rejected"):
        service.reject(world.admin, report.report_id, "Again")


# -------- owner edits --------
def test_owner_cannot_edit_after_approval_started(world):
    service = world.container.report_service
    report = _submit(world)
    service.approve(world.area_a_sup, report.report_id)

    with pytest.raises(InvalidTransitionError):
        service.update(world.leader_a, report.report_id, report_payload())
    with pytest.raises(InvalidTransitionError):
        service.delete(world.leader_a, report.report_id)


def test_update_merges_missing_figures(world):
    report = _submit(world)
    updated = world.container.report_service.update(world.leader_a, report.report_id, {"data": {"male": 20}})
    assert updated.data.male == 20
    assert updated.data.total_attendance == 35


def test_resaving_an_unchanged_report_succeeds(world):
    report = _submit(world)
    again = world.container.report_service.update(world.leader_a, report.report_id, report_payload())
    assert again.status == ReportStatus.PENDING
    assert again.data == report.data


@pytest.mark.parametrize("data", ["female", [1, 2], 12])
def test_report_figures_must_be_an_object(world, data):
    service = world.container.report_service
    with pytest.raises(ValidationError, match="data must be an object"):
        service.submit(world.leader_a, {"data": data}, week=SAMPLE_DAY)

    report = _submit(world)
    with pytest.raises(ValidationError, match="data must be an object"):
        service.update(world.leader_a, report.report_id, {"data": data})


def test_update_cannot_collide_with_another_report(world):
    service = world.container.report_service
    _submit(world)
    youth = _submit(world, event_type="youth_day")

    with pytest.raises(ConflictError):
        service.update(world.leader_a, youth.report_id, {"event_type": "regular_service"})


def test_only_the_submitter_edits_or_deletes(world):
    service = world.container.report_service
    report = _submit(world)

    with pytest.raises(AuthorizationError):
        service.update(world.area_a_sup, report.report_id, report_payload())
    with pytest.raises(AuthorizationError):
        service.delete(world.leader_b, report.report_id)

    service.delete(world.leader_a, report.report_id)
    assert world.reports.get(report.report_id) is None


def test_admin_deletes_in_any_status(world):
    service = world.container.report_service
    report = _submit(world)
    service.approve(world.area_a_sup, report.report_id)

    service.delete(world.admin, report.report_id)
    assert world.reports.rows == {}


# -------- admin comprehensive edit --------
def test_admin_edit_stamps_every_implied_level(world):
    report = _submit(world)
    edited = world.container.report_service.admin_edit(
        world.admin, report.report_id, {"target_status": "district_approved", "data": {"children": 15}}
    )
    assert edited.status == ReportStatus.DISTRICT_APPROVED
    assert edited.area_approved_by == world.admin.user_id
    assert edited.zonal_approved_by == world.admin.user_id
    assert edited.district_approved_by == world.admin.user_id
    assert edited.data.total_attendance == 35


def test_admin_edit_reset_clears_levels_above_target(world):
    service = world.container.report_service
    report = _submit(world)
    service.approve(world.area_a_sup, report.report_id)
    service.approve(world.zonal, report.report_id)

    edited = service.admin_edit(world.admin, report.report_id, {"target_status": "area_approved", "reset_approvals": True})
    assert edited.status == ReportStatus.AREA_APPROVED
    assert edited.area_approved_by == world.admin.user_id
    assert edited.zonal_approved_by is None

    kept = service.admin_edit(world.admin, report.report_id, {"target_status": "pending"})
    assert kept.area_approved_by is None


def test_admin_edit_rules(world):
    service = world.container.report_service
    unzoned = _submit(world, leader=world.leader_b)

    with pytest.raises(ValidationError):
        service.admin_edit(world.admin, unzoned.report_id, {"target_status": "zonal_approved"})
    with pytest.raises(ValidationError):
        service.admin_edit(world.admin, unzoned.report_id, {"target_status": "rejected"})
    with pytest.raises(AuthorizationError):
        service.admin_edit(world.pastor, unzoned.report_id, {"target_status": "pending"})

    rejected = service.admin_edit(
        world.admin, unzoned.report_id, {"target_status": "rejected", "rejection_reason": "Duplicate entry"}
    )
    assert rejected.status == ReportStatus.REJECTED
    assert rejected.rejection_reason == "Duplicate entry"


# -------- reads and scope --------
def test_list_is_scoped_by_role(world):
    service = world.container.report_service
    a = _submit(world)
    b = _submit(world, leader=world.leader_b)
    c = _submit(world, leader=world.leader_c)
    page = PageRequest(page=1, limit=50)

    def visible(user, **query):
        return {r.report_id for r in service.list(user, ReportQuery(**query), page).items}

    assert visible(world.admin) == {a.report_id, b.report_id, c.report_id}
    assert visible(world.pastor) == {a.report_id, b.report_id}
    assert visible(world.zonal) == {a.report_id}
    assert visible(world.area_b_sup) == {b.report_id}
    assert visible(world.leader_c) == {c.report_id}
    assert visible(world.leader_c, cith_centre_id=world.centre_a.cith_centre_id) == set()
    assert visible(world.pastor, week=SAMPLE_DAY, status=ReportStatus.PENDING) == {a.report_id, b.report_id}


def test_get_outside_scope_is_forbidden(world):
    report = _submit(world)
    with pytest.raises(AuthorizationError):
        world.container.report_service.get(world.area_b_sup, report.report_id)
    assert world.container.report_service.get(world.zonal, report.report_id).report_id == report.report_id


def test_stats_and_summary(world):
    service = world.container.report_service
    a = _submit(world)
    b = _submit(world, leader=world.leader_b)
    service.approve(world.area_b_sup, b.report_id)
    service.approve(world.pastor, b.report_id)

    stats = service.stats(world.pastor)
    assert stats["pending"] == 1
    assert stats["district_approved"] == 1
    assert stats["total"] == 2

    totals = service.summary(world.pastor)
    assert totals.total_reports == 1
    assert totals.total_attendance == 25
    assert totals.total_offerings == Decimal("1500.50")

    assert service.summary(world.area_a_sup).total_reports == 0
    assert [r.report_id for r in service.recent(world.admin, 1)] in ([a.report_id], [b.report_id])


def test_date_range_must_be_ordered(world):
    with pytest.raises(ValidationError):
        world.container.report_service.list(
            world.admin,
            ReportQuery(start_date=SAMPLE_DAY, end_date=SAMPLE_WEEK),
            PageRequest(),
        )
