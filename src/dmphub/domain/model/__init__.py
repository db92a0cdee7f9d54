"""Public domain model surface."""

from __future__ import annotations

from dmphub.domain.model.caller import ApiClientCaller, Caller, UserCaller, caller_reference
from dmphub.domain.model.entity import Entity, EntityRef, new_id, utcnow
from dmphub.domain.model.enums import (
    ContributorRole,
    CuratorAdministratorPolicy,
    EntityType,
    IdentifierScheme,
    PlanVisibility,
    PrivilegeLevel,
)
from dmphub.domain.model.identifiers import (
    IdentifiableMixin,
    Identifier,
    IdentifierCollection,
    IdentifierKey,
    Scheme,
    normalize_scheme,
)
from dmphub.domain.model.org import Org
from dmphub.domain.model.plan import Contributor, Plan, Role
from dmphub.domain.model.user import ApiClient, User

__all__ = [  # noqa: RUF022
    # base
    "Entity",
    "EntityRef",
    "new_id",
    "utcnow",
    # identifiers
    "Identifier",
    "IdentifierCollection",
    "IdentifierKey",
    "IdentifiableMixin",
    "Scheme",
    "normalize_scheme",
    # accounts
    "Org",
    "User",
    "ApiClient",
    # plans
    "Plan",
    "Role",
    "Contributor",
    # callers
    "Caller",
    "UserCaller",
    "ApiClientCaller",
    "caller_reference",
    # enums
    "ContributorRole",
    "CuratorAdministratorPolicy",
    "EntityType",
    "IdentifierScheme",
    "PlanVisibility",
    "PrivilegeLevel",
]
