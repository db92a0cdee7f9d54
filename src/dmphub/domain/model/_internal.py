"""Private helpers for mutating internal domain state.

Only domain model code should import this module.
"""

# ruff: noqa: SLF001

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dmphub.domain.model.plan import Contributor, Plan, Role


def attach_role_to_plan(plan: Plan, role: Role) -> None:
    if role not in plan._roles:
        plan._roles.append(role)


def attach_contributor_to_plan(plan: Plan, contributor: Contributor) -> None:
    if contributor not in plan._contributors:
        plan._contributors.append(contributor)
