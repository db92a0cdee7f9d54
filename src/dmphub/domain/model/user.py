"""Accounts and API credentials that act on plans."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

from dmphub.domain.model.caller import ApiClientCaller, UserCaller, caller_reference
from dmphub.domain.model.entity import Entity, utcnow
from dmphub.domain.model.enums import EntityType, PrivilegeLevel
from dmphub.domain.model.identifiers import IdentifiableMixin

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from dmphub.domain.model.caller import Caller
    from dmphub.domain.model.org import Org


@dataclass(eq=False, kw_only=True)
class User(IdentifiableMixin):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.USER

    email: str
    firstname: str | None = None
    surname: str = ""
    org: Org | None = None
    privilege: PrivilegeLevel = PrivilegeLevel.USER
    active: bool = True

    # invitation audit trail; set when the account was provisioned on someone's behalf
    invited_by_type: EntityType | None = None
    invited_by_id: UUID | None = None
    invited_at: datetime | None = None

    created_at: datetime = field(default_factory=utcnow)

    @classmethod
    def invite(
        cls,
        *,
        email: str,
        firstname: str | None,
        surname: str,
        org: Org | None,
        invited_by: Caller,
        invited_at: datetime | None = None,
    ) -> User:
        """Provision an account that exists but has not been activated by its owner."""

        inviter_type, inviter_id = caller_reference(invited_by)
        return cls(
            email=email,
            firstname=firstname,
            surname=surname,
            org=org,
            active=False,
            invited_by_type=inviter_type,
            invited_by_id=inviter_id,
            invited_at=invited_at or utcnow(),
        )

    @property
    def org_id(self) -> UUID | None:
        return self.org.id if self.org is not None else None

    @property
    def name(self) -> str:
        return " ".join(part for part in (self.firstname, self.surname) if part)

    @property
    def can_org_admin(self) -> bool:
        return self.privilege in (PrivilegeLevel.ORG_ADMIN, PrivilegeLevel.SUPER_ADMIN)

    @property
    def is_pending_invitation(self) -> bool:
        return self.invited_at is not None and not self.active

    def accept_invitation(self) -> None:
        if not self.is_pending_invitation:
            raise ValueError("user has no pending invitation")
        self.active = True

    def as_caller(self) -> UserCaller:
        return UserCaller(user_id=self.id, org_id=self.org_id, privilege=self.privilege)


@dataclass(eq=False, kw_only=True)
class ApiClient(Entity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.API_CLIENT

    name: str
    contact_email: str | None = None
    org: Org | None = None
    created_at: datetime = field(default_factory=utcnow)

    @property
    def org_id(self) -> UUID | None:
        return self.org.id if self.org is not None else None

    def as_caller(self) -> ApiClientCaller:
        return ApiClientCaller(client_id=self.id)
