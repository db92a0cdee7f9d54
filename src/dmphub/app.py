"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from dmphub.adapters.madmp import MadmpDeserializer
from dmphub.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, is_started, startup
from dmphub.config import get_ingest_config
from dmphub.domain.errors import NotFoundError
from dmphub.domain.ingestion import ingest_plan
from dmphub.domain.model import (
    ApiClient,
    IdentifierScheme,
    Org,
    PrivilegeLevel,
    User,
    utcnow,
)
from dmphub.domain.ports.unit_of_work import PlanRepositories, PlanUnitOfWork
from dmphub.domain.visibility import find_visible_plan, list_visible

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime
    from uuid import UUID

    from dmphub.config import IngestConfig
    from dmphub.domain.model import Caller, Plan
    from dmphub.domain.ports.parsing import PlanDeserializer

UnitOfWorkFactory = Callable[[], PlanUnitOfWork]
DeserializerFactory = Callable[[PlanRepositories], "PlanDeserializer"]


log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RoleView:
    email: str
    creator: bool
    administrator: bool
    editor: bool
    commenter: bool


@dataclass(frozen=True, slots=True)
class ContributorView:
    name: str | None
    email: str | None
    roles: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class PlanView:
    """Detached snapshot of a plan, safe to use once its unit of work is closed."""

    id: UUID
    title: str
    description: str | None
    visibility: str
    org: str | None
    api_client_id: UUID | None
    dmp_id: str | None
    created_at: datetime
    owner: str | None
    roles: tuple[RoleView, ...] = field(default_factory=tuple)
    contributors: tuple[ContributorView, ...] = field(default_factory=tuple)

    @classmethod
    def from_plan(cls, plan: Plan) -> PlanView:
        dmp_id = plan.identifiers[0] if plan.identifiers else None
        owner = plan.owner
        return cls(
            id=plan.id,
            title=plan.title,
            description=plan.description,
            visibility=plan.visibility.value,
            org=plan.org.name if plan.org is not None else None,
            api_client_id=plan.api_client_id,
            dmp_id=dmp_id.value if dmp_id is not None else None,
            created_at=plan.created_at,
            owner=owner.email if owner is not None else None,
            roles=tuple(
                RoleView(
                    email=role.user.email,
                    creator=role.creator,
                    administrator=role.administrator,
                    editor=role.editor,
                    commenter=role.commenter,
                )
                for role in plan.roles
            ),
            contributors=tuple(
                ContributorView(
                    name=contributor.name,
                    email=contributor.email,
                    roles=tuple(sorted(role.value for role in contributor.roles)),
                )
                for contributor in plan.contributors
            ),
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "id": str(self.id),
            "title": self.title,
            "description": self.description,
            "visibility": self.visibility,
            "org": self.org,
            "api_client_id": str(self.api_client_id) if self.api_client_id else None,
            "dmp_id": self.dmp_id,
            "created_at": self.created_at.isoformat(),
            "owner": self.owner,
            "roles": [
                {
                    "email": role.email,
                    "creator": role.creator,
                    "administrator": role.administrator,
                    "editor": role.editor,
                    "commenter": role.commenter,
                }
                for role in self.roles
            ],
            "contributors": [
                {"name": c.name, "email": c.email, "roles": list(c.roles)}
                for c in self.contributors
            ],
        }


def _unit_of_work(unit_of_work_factory: UnitOfWorkFactory | None) -> PlanUnitOfWork:
    if unit_of_work_factory is not None:
        return unit_of_work_factory()
    if not is_started():
        startup()
    return SqlAlchemyUnitOfWork()


def resolve_caller(
    repositories: PlanRepositories,
    *,
    user_email: str | None = None,
    api_client_id: UUID | None = None,
) -> Caller:
    """Look up the principal acting on a request.

    Exactly one of ``user_email`` and ``api_client_id`` must be given. Unknown
    principals raise ``NotFoundError``.
    """

    if user_email is not None and api_client_id is None:
        user = repositories.users.get_by_email(user_email)
        if user is None:
            raise NotFoundError(f"Unknown user {user_email!r}")
        return user.as_caller()
    if api_client_id is not None and user_email is None:
        client = repositories.api_clients.get(api_client_id)
        if client is None:
            raise NotFoundError(f"Unknown API client {api_client_id}")
        return client.as_caller()
    raise ValueError("Specify exactly one of a user email or an API client id")


def _lookup_org(repositories: PlanRepositories, org_name: str | None) -> Org | None:
    if org_name is None:
        return None
    org = repositories.orgs.get_by_name(org_name)
    if org is None:
        raise NotFoundError(f"Unknown organisation {org_name!r}")
    return org


def create_plan(
    document: Mapping[str, object],
    *,
    user_email: str | None = None,
    api_client_id: UUID | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    deserializer_factory: DeserializerFactory | None = None,
    config: IngestConfig | None = None,
    clock: Callable[[], datetime] = utcnow,
) -> PlanView:
    """Ingest a plan document on behalf of a user or API client and commit it."""

    effective_config = config or get_ingest_config()
    with _unit_of_work(unit_of_work_factory) as uow:
        repositories = uow.repositories
        caller = resolve_caller(
            repositories, user_email=user_email, api_client_id=api_client_id
        )
        deserializer = (
            deserializer_factory(repositories)
            if deserializer_factory is not None
            else MadmpDeserializer(repositories, clock=clock)
        )
        plan = ingest_plan(
            document,
            caller,
            deserializer=deserializer,
            repositories=repositories,
            tolerance=effective_config.duplicate_tolerance,
            curator_administrators=effective_config.curator_administrators,
            clock=clock,
        )
        view = PlanView.from_plan(plan)
        uow.commit()
    log.info("Stored plan %s for %s", view.id, user_email or api_client_id)
    return view


def show_plan(
    plan_id: UUID,
    *,
    user_email: str | None = None,
    api_client_id: UUID | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> PlanView:
    with _unit_of_work(unit_of_work_factory) as uow:
        repositories = uow.repositories
        caller = resolve_caller(
            repositories, user_email=user_email, api_client_id=api_client_id
        )
        plan = find_visible_plan(plan_id, caller, plans=repositories.plans)
        return PlanView.from_plan(plan)


def list_plans(
    *,
    user_email: str | None = None,
    api_client_id: UUID | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[PlanView]:
    with _unit_of_work(unit_of_work_factory) as uow:
        repositories = uow.repositories
        caller = resolve_caller(
            repositories, user_email=user_email, api_client_id=api_client_id
        )
        return [
            PlanView.from_plan(plan)
            for plan in list_visible(caller, plans=repositories.plans)
        ]


def create_org(
    name: str,
    *,
    abbreviation: str | None = None,
    ror_id: str | None = None,
    managed: bool = True,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Org:
    with _unit_of_work(unit_of_work_factory) as uow:
        org = Org(name=name, abbreviation=abbreviation, managed=managed)
        if ror_id is not None:
            org.add_identifier(IdentifierScheme.ROR, ror_id)
        uow.repositories.orgs.add(org)
        uow.commit()
    log.info("Created organisation %s (%r)", org.id, org.name)
    return org


def create_user(
    email: str,
    *,
    firstname: str | None = None,
    surname: str = "",
    org_name: str | None = None,
    privilege: PrivilegeLevel = PrivilegeLevel.USER,
    orcid: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> User:
    with _unit_of_work(unit_of_work_factory) as uow:
        repositories = uow.repositories
        user = User(
            email=email,
            firstname=firstname,
            surname=surname,
            org=_lookup_org(repositories, org_name),
            privilege=privilege,
        )
        if orcid is not None:
            user.add_identifier(IdentifierScheme.ORCID, orcid)
        repositories.users.add(user)
        uow.commit()
    log.info("Created user %s (%s)", user.id, user.email)
    return user


def accept_invitation(
    email: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> User:
    with _unit_of_work(unit_of_work_factory) as uow:
        user = uow.repositories.users.get_by_email(email)
        if user is None:
            raise NotFoundError(f"Unknown user {email!r}")
        user.accept_invitation()
        uow.commit()
    log.info("Activated invited user %s", user.id)
    return user


def create_api_client(
    name: str,
    *,
    contact_email: str | None = None,
    org_name: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> ApiClient:
    with _unit_of_work(unit_of_work_factory) as uow:
        repositories = uow.repositories
        client = ApiClient(
            name=name,
            contact_email=contact_email,
            org=_lookup_org(repositories, org_name),
        )
        repositories.api_clients.add(client)
        uow.commit()
    log.info("Created API client %s (%r)", client.id, client.name)
    return client
