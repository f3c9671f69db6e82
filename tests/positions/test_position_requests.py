from __future__ import annotations

import pytest

from rockview.core.enums import PositionRequestStatus, Role
from rockview.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError


def test_request_and_approve_moves_the_user(world):
    service = world.container.position_service
    req = service.submit(world.leader_c, new_role=Role.DISTRICT_PASTOR, target_id=world.other_district.district_id)
    assert req.status == PositionRequestStatus.PENDING
    assert req.current_role == Role.CITH_CENTRE

    with pytest.raises(ConflictError, match="pending"):
        service.submit(world.leader_c, new_role=Role.CITH_CENTRE, target_id=world.centre_b.cith_centre_id)

    done = service.approve(world.admin, req.request_id)
    assert done.status == PositionRequestStatus.APPROVED
    assert done.reviewed_by == world.admin.user_id

    moved = world.reload(world.leader_c)
    assert moved.role == Role.DISTRICT_PASTOR
    assert moved.district_id == world.other_district.district_id
    assert moved.cith_centre_id is None

    with pytest.raises(ValidationError):
        service.approve(world.admin, req.request_id)


def test_filled_positions_cannot_be_requested(world):
    service = world.container.position_service
    with pytest.raises(ConflictError, match="not available"):
        service.submit(world.leader_b, new_role=Role.AREA_SUPERVISOR, target_id=world.area_a.area_supervisor_id)
    with pytest.raises(ValidationError):
        service.submit(world.leader_b, new_role=Role.ADMIN, target_id=None)
    with pytest.raises(ValidationError):
        service.submit(world.leader_b, new_role=Role.CITH_CENTRE, target_id=world.centre_b.cith_centre_id)


def test_position_taken_before_approval(world):
    service = world.container.position_service
    req = service.submit(world.leader_a, new_role=Role.DISTRICT_PASTOR, target_id=world.other_district.district_id)
    world.users.add("Fast Pastor", Role.DISTRICT_PASTOR, district_id=world.other_district.district_id)

    with pytest.raises(ConflictError, match="no longer available"):
        service.approve(world.admin, req.request_id)
    assert world.positions.get(req.request_id).status == PositionRequestStatus.PENDING


def test_reject_and_cancel(world):
    service = world.container.position_service
    req = service.submit(world.leader_b, new_role=Role.CITH_CENTRE, target_id=world.centre_c.cith_centre_id)

    with pytest.raises(AuthorizationError):
        service.reject(world.pastor, req.request_id, "No")
    with pytest.raises(ValidationError):
        service.reject(world.admin, req.request_id, "")

    rejected = service.reject(world.admin, req.request_id, "Centre C is closing")
    assert rejected.status == PositionRequestStatus.REJECTED
    assert rejected.rejection_reason == "Centre C is closing"

    with pytest.raises(ValidationError):
        service.cancel(world.leader_b, req.request_id)

    again = service.submit(world.leader_b, new_role=Role.CITH_CENTRE, target_id=world.centre_c.cith_centre_id)
    with pytest.raises(NotFoundError):
        service.cancel(world.leader_a, again.request_id)
    service.cancel(world.leader_b, again.request_id)
    assert world.positions.get(again.request_id) is None

    assert [r.request_id for r in service.list_mine(world.leader_b)] == [req.request_id]
    assert [r.request_id for r in service.list_all(world.admin, status=PositionRequestStatus.REJECTED)] == [req.request_id]
    with pytest.raises(AuthorizationError):
        service.list_all(world.leader_b)
