from __future__ import annotations

from datetime import timedelta

import pytest

from dmphub.domain.errors import NotFoundError
from dmphub.domain.model import ApiClient, PlanVisibility, PrivilegeLevel
from dmphub.domain.visibility import (
    PUBLIC_SCOPE,
    can_view,
    find_visible_plan,
    list_visible,
    listing_scope,
)
from tests.helpers.plans import FIXED_NOW, FakePlanRepository, make_org, make_plan, make_user


def test_cross_org_user_sees_nothing() -> None:
    o1, o2 = make_org("Org One"), make_org("Org Two")
    user = make_user("u@one.edu", org=o1)
    stranger = make_user("s@two.edu", org=o2)
    plan = make_plan(org=o2, owner=stranger, visibility=PlanVisibility.PRIVATE)
    plans = FakePlanRepository([plan])

    caller = user.as_caller()

    assert not can_view(plan, caller)
    assert plan not in list_visible(caller, plans=plans)


def test_org_admin_listing_is_wider_than_single_lookup() -> None:
    o1, o2 = make_org("Org One"), make_org("Org Two")
    admin = make_user("admin@one.edu", org=o1, privilege=PrivilegeLevel.ORG_ADMIN)
    colleague = make_user("colleague@one.edu", org=o1)
    # plan filed under another org but owned by a member of the admin's org
    other_org_plan = make_plan(org=o2, owner=colleague)
    # a colleague holds a non-owner role on a plan owned elsewhere
    outsider = make_user("outsider@two.edu", org=o2)
    shared_plan = make_plan(org=o2, owner=outsider)
    shared_plan.grant_role(colleague, editor=True)
    plans = FakePlanRepository([other_org_plan, shared_plan])

    caller = admin.as_caller()
    listed = list_visible(caller, plans=plans)

    assert other_org_plan in listed
    assert shared_plan in listed
    # the owner's org matches, so the single lookup agrees here
    assert can_view(other_org_plan, caller)
    # neither the plan's org nor its owner's org is the admin's org
    assert not can_view(shared_plan, caller)


def test_ordinary_user_in_same_org_lists_only_flagged_or_owned_plans() -> None:
    org = make_org()
    user = make_user("u@example.edu", org=org)
    colleague = make_user("c@example.edu", org=org)
    private_plan = make_plan("Private", org=org, owner=colleague)
    organisational_plan = make_plan(
        "Shared", org=org, owner=colleague, visibility=PlanVisibility.ORGANISATIONAL
    )
    plans = FakePlanRepository([private_plan, organisational_plan])

    caller = user.as_caller()
    listed = list_visible(caller, plans=plans)

    assert organisational_plan in listed
    assert private_plan not in listed
    # single lookup has no organisational flag branch
    assert can_view(private_plan, caller)


def test_user_lists_plans_they_hold_a_role_on() -> None:
    user = make_user("u@one.edu", org=make_org("Org One"))
    owner = make_user("o@two.edu", org=make_org("Org Two"))
    plan = make_plan(owner=owner)
    plan.grant_role(user, commenter=True)
    plans = FakePlanRepository([plan])

    assert list_visible(user.as_caller(), plans=plans) == [plan]


@pytest.mark.parametrize(
    "privilege",
    [PrivilegeLevel.USER, PrivilegeLevel.ORG_ADMIN, PrivilegeLevel.SUPER_ADMIN],
)
def test_public_plans_are_listed_for_every_user(privilege: PrivilegeLevel) -> None:
    public_plan = make_plan(visibility=PlanVisibility.PUBLIC, org=make_org("Elsewhere"))
    plans = FakePlanRepository([public_plan])
    user = make_user(org=make_org(), privilege=privilege)

    assert list_visible(user.as_caller(), plans=plans) == [public_plan]


def test_public_plans_are_listed_for_api_clients() -> None:
    public_plan = make_plan(visibility=PlanVisibility.PUBLIC)
    plans = FakePlanRepository([public_plan])
    client = ApiClient(name="Harvester")

    assert list_visible(client.as_caller(), plans=plans) == [public_plan]
    assert can_view(public_plan, client.as_caller())


def test_api_client_sees_its_own_submissions_only() -> None:
    client = ApiClient(name="Harvester")
    other = ApiClient(name="Other")
    own = make_plan("Own", api_client=client)
    foreign = make_plan("Foreign", api_client=other)
    plans = FakePlanRepository([own, foreign])

    caller = client.as_caller()

    assert list_visible(caller, plans=plans) == [own]
    assert can_view(own, caller)
    assert not can_view(foreign, caller)


def test_user_without_org_never_matches_on_org() -> None:
    user = make_user(org=None)
    plan = make_plan(org=None, owner=make_user("o@example.edu", org=None))

    assert not can_view(plan, user.as_caller())


def test_listing_is_newest_first() -> None:
    older = make_plan("Older", visibility=PlanVisibility.PUBLIC, created_at=FIXED_NOW)
    newer = make_plan(
        "Newer",
        visibility=PlanVisibility.PUBLIC,
        created_at=FIXED_NOW + timedelta(days=1),
    )
    plans = FakePlanRepository([older, newer])

    assert list_visible(make_user().as_caller(), plans=plans) == [newer, older]


def test_empty_listing_is_empty_list() -> None:
    assert list_visible(make_user().as_caller(), plans=FakePlanRepository()) == []


def test_listing_scope_per_caller() -> None:
    org = make_org()
    admin = make_user(org=org, privilege=PrivilegeLevel.SUPER_ADMIN)
    client = ApiClient(name="Harvester")

    admin_scope = listing_scope(admin.as_caller())
    client_scope = listing_scope(client.as_caller())

    assert admin_scope.org_wide
    assert admin_scope.org_id == org.id
    assert admin_scope.member_user_id == admin.id
    assert client_scope.api_client_id == client.id
    assert client_scope.org_id is None
    assert PUBLIC_SCOPE.includes(make_plan(visibility=PlanVisibility.PUBLIC))
    assert not PUBLIC_SCOPE.includes(make_plan())


def test_find_visible_plan_hides_existence() -> None:
    org = make_org()
    user = make_user(org=org)
    hidden = make_plan(org=make_org("Elsewhere"))
    visible = make_plan(org=org)
    plans = FakePlanRepository([hidden, visible])

    assert find_visible_plan(visible.id, user.as_caller(), plans=plans) is visible
    with pytest.raises(NotFoundError, match="Plan not found"):
        find_visible_plan(hidden.id, user.as_caller(), plans=plans)
    with pytest.raises(NotFoundError, match="Plan not found"):
        find_visible_plan(make_plan().id, user.as_caller(), plans=plans)
