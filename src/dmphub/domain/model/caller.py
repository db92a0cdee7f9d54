"""Authenticated actors making a request.

A caller is a tagged variant: either a user or an API client. Policy code
dispatches on it with ``match`` and never consults a global "current caller".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from dmphub.domain.model.enums import EntityType, PrivilegeLevel

if TYPE_CHECKING:
    from uuid import UUID


@dataclass(frozen=True, slots=True)
class UserCaller:
    user_id: UUID
    org_id: UUID | None = None
    privilege: PrivilegeLevel = PrivilegeLevel.USER

    @property
    def can_org_admin(self) -> bool:
        return self.privilege in (PrivilegeLevel.ORG_ADMIN, PrivilegeLevel.SUPER_ADMIN)


@dataclass(frozen=True, slots=True)
class ApiClientCaller:
    client_id: UUID


type Caller = UserCaller | ApiClientCaller


def caller_reference(caller: Caller) -> tuple[EntityType, UUID]:
    """Return the typed reference recorded for audit trails (e.g. ``invited_by``)."""

    match caller:
        case UserCaller(user_id=user_id):
            return EntityType.USER, user_id
        case ApiClientCaller(client_id=client_id):
            return EntityType.API_CLIENT, client_id
