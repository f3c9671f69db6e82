from __future__ import annotations

import pytest

from rockview.core.enums import Role
from rockview.core.exceptions import AuthorizationError


def test_scopes_per_role(world):
    policy = world.container.policy
    a, b, c = world.centre_a.cith_centre_id, world.centre_b.cith_centre_id, world.centre_c.cith_centre_id

    admin = policy.scope_for(world.admin)
    assert admin.unrestricted and admin.centre_filter() is None

    assert policy.scope_for(world.pastor).centre_ids == {a, b}
    assert policy.scope_for(world.zonal).centre_ids == {a}
    assert policy.scope_for(world.area_b_sup).centre_ids == {b}
    assert policy.scope_for(world.leader_c).centre_ids == {c}


def test_unassigned_user_sees_nothing(world):
    loose = world.users.add("Loose Pastor", Role.DISTRICT_PASTOR)
    scope = world.container.policy.scope_for(loose)
    assert scope.centre_filter() == frozenset()
    with pytest.raises(AuthorizationError):
        world.container.policy.require_centre(loose, world.centre_a.cith_centre_id)


def test_scope_follows_hierarchy_changes(world):
    policy = world.container.policy
    assert world.centre_b.cith_centre_id not in policy.scope_for(world.zonal).centre_ids

    world.hierarchy.update_zone(
        world.zone.zonal_supervisor_id,
        name=world.zone.name,
        district_id=world.district.district_id,
        area_supervisor_ids=[world.area_a.area_supervisor_id, world.area_b.area_supervisor_id],
    )
    assert world.centre_b.cith_centre_id in policy.scope_for(world.zonal).centre_ids


def test_lineage_reports_zone_membership(world):
    policy = world.container.policy
    assert policy.lineage(world.centre_a.cith_centre_id).zone == world.zone
    lineage_b = policy.lineage(world.centre_b.cith_centre_id)
    assert lineage_b.zone is None
    assert lineage_b.district_id == world.district.district_id


@pytest.mark.parametrize(
    "sender, recipient, allowed",
    [
        ("admin", "leader_c", True),
        ("leader_c", "admin", True),
        ("pastor", "leader_a", True),
        ("pastor", "leader_c", False),
        ("zonal", "area_a_sup", True),
        ("zonal", "area_b_sup", False),
        ("area_a_sup", "leader_a", True),
        ("area_a_sup", "leader_b", False),
        ("leader_a", "area_a_sup", True),
        ("leader_a", "area_b_sup", False),
        ("leader_a", "pastor", False),
        ("area_a_sup", "zonal", True),
        ("area_a_sup", "pastor", True),
        ("area_b_sup", "zonal", False),
        ("zonal", "pastor", True),
        ("leader_a", "leader_b", False),
        ("area_a_sup", "area_b_sup", False),
        ("pastor", "pastor", False),
    ],
)
def test_can_message(world, sender, recipient, allowed):
    policy = world.container.policy
    assert policy.can_message(getattr(world, sender), getattr(world, recipient)) is allowed


def test_message_recipients_match_can_message(world):
    policy = world.container.policy
    for sender in (world.pastor, world.zonal, world.area_a_sup, world.leader_a):
        listed = policy.message_recipients(sender)
        assert listed, sender.name
        assert all(policy.can_message(sender, u) for u in listed)
        everyone = [u for u in world.users.list_all() if u.user_id != sender.user_id]
        reachable = {u.user_id for u in everyone if policy.can_message(sender, u)}
        assert {u.user_id for u in listed} == reachable
