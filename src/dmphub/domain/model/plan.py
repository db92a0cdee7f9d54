"""The plan aggregate: plan, its roles and its document contributors."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

from dmphub.domain.model import _internal
from dmphub.domain.model.entity import Entity, utcnow
from dmphub.domain.model.enums import ContributorRole, EntityType, PlanVisibility
from dmphub.domain.model.identifiers import IdentifiableMixin

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime
    from uuid import UUID

    from dmphub.domain.model.org import Org
    from dmphub.domain.model.user import User


@dataclass(eq=False, kw_only=True)
class Plan(IdentifiableMixin):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.PLAN

    title: str
    description: str | None = None
    org: Org | None = None
    api_client_id: UUID | None = None
    visibility: PlanVisibility = PlanVisibility.PRIVATE

    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime | None = None

    _roles: list[Role] = field(default_factory=list["Role"], repr=False, init=False)
    _contributors: list[Contributor] = field(
        default_factory=list["Contributor"], repr=False, init=False
    )

    @property
    def org_id(self) -> UUID | None:
        return self.org.id if self.org is not None else None

    @property
    def publicly_visible(self) -> bool:
        return self.visibility == PlanVisibility.PUBLIC

    @property
    def organisationally_visible(self) -> bool:
        return self.visibility == PlanVisibility.ORGANISATIONAL

    @property
    def roles(self) -> tuple[Role, ...]:
        return tuple(self._roles)

    @property
    def contributors(self) -> tuple[Contributor, ...]:
        return tuple(self._contributors)

    @property
    def creator_role(self) -> Role | None:
        for role in self._roles:
            if role.creator:
                return role
        return None

    @property
    def owner(self) -> User | None:
        role = self.creator_role
        return role.user if role is not None else None

    def role_for(self, user: User) -> Role | None:
        for role in self._roles:
            if role.user.id == user.id:
                return role
        return None

    def grant_role(
        self,
        user: User,
        *,
        creator: bool = False,
        administrator: bool = False,
        editor: bool = False,
        commenter: bool = False,
    ) -> Role:
        """Give ``user`` a role on this plan, widening an existing role if there is one.

        Raises ``ValueError`` when a second user would become creator.
        """

        existing = self.role_for(user)
        current_creator = self.creator_role
        if creator and current_creator is not None and current_creator is not existing:
            raise ValueError("plan already has a creator")

        if existing is not None:
            existing.creator = existing.creator or creator
            existing.administrator = existing.administrator or administrator
            existing.editor = existing.editor or editor
            existing.commenter = existing.commenter or commenter
            return existing

        return Role(
            user=user,
            plan=self,
            creator=creator,
            administrator=administrator,
            editor=editor,
            commenter=commenter,
        )

    def add_contributor(
        self,
        *,
        name: str | None = None,
        email: str | None = None,
        org: Org | None = None,
        roles: Iterable[ContributorRole] = (),
    ) -> Contributor:
        return Contributor(plan=self, name=name, email=email, org=org, roles=set(roles))

    def contributors_with_role(self, role: ContributorRole) -> tuple[Contributor, ...]:
        return tuple(c for c in self._contributors if role in c.roles)

    def stamp_api_client(self, client_id: UUID) -> None:
        self.api_client_id = client_id
        self.updated_at = utcnow()


@dataclass(eq=False, kw_only=True)
class Role(Entity):
    """Grants a user capabilities on a plan. One role per (user, plan)."""

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.ROLE

    user: User = field(repr=False)
    plan: Plan = field(repr=False)

    creator: bool = False
    administrator: bool = False
    editor: bool = False
    commenter: bool = False

    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        _internal.attach_role_to_plan(self.plan, self)

    @property
    def can_administer(self) -> bool:
        return self.creator or self.administrator

    @property
    def can_edit(self) -> bool:
        return self.can_administer or self.editor


@dataclass(eq=False, kw_only=True)
class Contributor(IdentifiableMixin):
    """A person named inside a submitted document; not an account."""

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.CONTRIBUTOR

    plan: Plan = field(repr=False)

    name: str | None = None
    email: str | None = None
    org: Org | None = None
    roles: set[ContributorRole] = field(default_factory=set["ContributorRole"])

    def __post_init__(self) -> None:
        _internal.attach_contributor_to_plan(self.plan, self)

    @property
    def is_data_curator(self) -> bool:
        return ContributorRole.DATA_CURATION in self.roles
