"""Who may see which plans.

Two independent rules live here and they intentionally disagree:

* ``can_view`` decides whether a caller may open one plan. Users see plans of
  their organisation (directly or through the owner); API clients see their
  own submissions and public plans. There is no admin carve-out and the
  organisational flag is not consulted.
* ``list_visible`` decides what appears in a caller's listing. Everyone sees
  public plans; API clients add their own submissions; users add plans they
  hold a role on and organisationally visible plans of their organisation;
  organisation admins add every plan that a member of their organisation holds
  a role on.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from dmphub.domain.errors import NotFoundError
from dmphub.domain.model import ApiClientCaller, UserCaller

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from dmphub.domain.model import Caller, Plan
    from dmphub.domain.ports.persistence import PlanRepository


@dataclass(frozen=True, slots=True)
class ListingScope:
    """Storage-neutral description of a caller's listing.

    Public plans are always in scope; each populated field widens it.
    """

    api_client_id: UUID | None = None
    member_user_id: UUID | None = None
    org_id: UUID | None = None
    org_wide: bool = False

    def includes(self, plan: Plan) -> bool:
        if plan.publicly_visible:
            return True
        if self.api_client_id is not None and plan.api_client_id == self.api_client_id:
            return True
        if self.member_user_id is not None and any(
            role.user.id == self.member_user_id for role in plan.roles
        ):
            return True
        if self.org_id is None:
            return False
        if plan.organisationally_visible and plan.org_id == self.org_id:
            return True
        return self.org_wide and any(role.user.org_id == self.org_id for role in plan.roles)


PUBLIC_SCOPE = ListingScope()


def listing_scope(caller: Caller) -> ListingScope:
    match caller:
        case ApiClientCaller(client_id=client_id):
            return ListingScope(api_client_id=client_id)
        case UserCaller(user_id=user_id, org_id=org_id):
            return ListingScope(
                member_user_id=user_id,
                org_id=org_id,
                org_wide=caller.can_org_admin,
            )
        case _:
            return PUBLIC_SCOPE


def can_view(plan: Plan, caller: Caller) -> bool:
    """Single-plan access check. A missing organisation never matches."""

    match caller:
        case UserCaller(org_id=org_id):
            if org_id is None:
                return False
            owner = plan.owner
            return plan.org_id == org_id or (owner is not None and owner.org_id == org_id)
        case ApiClientCaller(client_id=client_id):
            return plan.api_client_id == client_id or plan.publicly_visible
        case _:
            return False


def list_visible(caller: Caller, *, plans: PlanRepository) -> list[Plan]:
    return list(plans.find_in_scope(listing_scope(caller)))


def find_visible_plan(plan_id: UUID, caller: Caller, *, plans: PlanRepository) -> Plan:
    """Return the plan if ``caller`` may open it, else raise ``NotFoundError``."""

    plan = plans.get(plan_id)
    if plan is None or not can_view(plan, caller):
        raise NotFoundError("Plan not found")
    return plan
