"""Attach ownership and roles to a freshly ingested plan."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from dmphub.domain.identity import resolve_contributor
from dmphub.domain.model import CuratorAdministratorPolicy, utcnow

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from datetime import datetime

    from dmphub.domain.model import Caller, Contributor, Plan, Role
    from dmphub.domain.ports.persistence import UserRepository


log = getLogger(__name__)


def assign_roles(
    plan: Plan,
    contributors: Iterable[Contributor],
    *,
    inviting_caller: Caller,
    users: UserRepository,
    curator_administrators: CuratorAdministratorPolicy = CuratorAdministratorPolicy.NONE,
    clock: Callable[[], datetime] = utcnow,
) -> list[Role]:
    """Grant a role on ``plan`` to every data curator in document order.

    The first curator owns the plan (``creator``) unless the plan already has an
    owner. Later curators get ``editor``, plus ``administrator`` when
    ``curator_administrators`` is ``CO_CURATORS``. Other contributors are skipped.
    """

    granted: list[Role] = []
    for contributor in contributors:
        if not contributor.is_data_curator:
            continue

        user = resolve_contributor(
            contributor,
            inviting_caller=inviting_caller,
            users=users,
            clock=clock,
        )

        if plan.creator_role is None:
            role = plan.grant_role(user, creator=True)
        elif plan.owner is user:
            role = plan.creator_role
        else:
            role = plan.grant_role(
                user,
                editor=True,
                administrator=curator_administrators is CuratorAdministratorPolicy.CO_CURATORS,
            )

        if role is not None and role not in granted:
            granted.append(role)

    log.info("Assigned %d role(s) on plan %s", len(granted), plan.id)
    return granted
