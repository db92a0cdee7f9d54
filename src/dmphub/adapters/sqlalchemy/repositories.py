"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

import uuid
from logging import getLogger
from typing import TYPE_CHECKING, cast

from sqlalchemy import and_, or_, select
from sqlalchemy.exc import IntegrityError

from dmphub.adapters.sqlalchemy.mappings import (
    identifier_table,
    org_table,
    plan_table,
    role_table,
    user_table,
)
from dmphub.domain.errors import DuplicateError, ProvisioningError
from dmphub.domain.model import (
    ApiClient,
    EntityType,
    IdentifiableMixin,
    Org,
    Plan,
    PlanVisibility,
    Scheme,
    User,
    normalize_scheme,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy import ColumnElement
    from sqlalchemy.orm import Session

    from dmphub.domain.visibility import ListingScope


log = getLogger(__name__)


class SqlAlchemyRepository[TEntity]:
    def __init__(self, session: Session, entity_cls: type[TEntity]) -> None:
        self.session = session
        self._entity_cls = entity_cls

    def add(self, entity: TEntity) -> None:
        self.session.add(entity)

    def get(self, entity_id: uuid.UUID) -> TEntity | None:
        return self.session.get(self._entity_cls, entity_id)


class SqlAlchemyIdentifiedRepository[TEntity: IdentifiableMixin](SqlAlchemyRepository[TEntity]):
    """Shared helpers for repositories managing entities that own identifiers."""

    def __init__(
        self,
        session: Session,
        entity_cls: type[TEntity],
        entity_type: EntityType,
    ) -> None:
        super().__init__(session, entity_cls)
        self._entity_type = entity_type

    def get_by_identifier(self, scheme: Scheme, value: str) -> TEntity | None:
        stmt = (
            select(identifier_table.c.owner_id)
            .where(identifier_table.c.scheme == normalize_scheme(scheme))
            .where(identifier_table.c.value == value)
            .where(identifier_table.c.owner_type == self._entity_type)
            .limit(1)
        )
        entity_id = self.session.execute(stmt).scalar_one_or_none()
        if not isinstance(entity_id, uuid.UUID):
            return None
        return self.session.get(self._entity_cls, entity_id)


class SqlAlchemyPlanRepository(SqlAlchemyIdentifiedRepository[Plan]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Plan, EntityType.PLAN)

    def add(self, entity: Plan) -> None:
        self.session.add(entity)
        try:
            self.session.flush()
        except IntegrityError as exc:
            log.warning("Plan %s collided with a stored plan: %s", entity.id, exc.orig)
            raise DuplicateError from exc

    def find_in_scope(self, scope: ListingScope) -> Sequence[Plan]:
        stmt = (
            select(Plan)
            .where(or_(*_scope_conditions(scope)))
            .order_by(plan_table.c.created_at.desc(), plan_table.c.id)
        )
        return self.session.execute(stmt).scalars().all()


def _scope_conditions(scope: ListingScope) -> list[ColumnElement[bool]]:
    conditions: list[ColumnElement[bool]] = [
        plan_table.c.visibility == PlanVisibility.PUBLIC,
    ]
    if scope.api_client_id is not None:
        conditions.append(plan_table.c.api_client_id == scope.api_client_id)
    if scope.member_user_id is not None:
        member_plans = select(role_table.c._plan_id).where(  # noqa: SLF001
            role_table.c._user_id == scope.member_user_id  # noqa: SLF001
        )
        conditions.append(plan_table.c.id.in_(member_plans))
    if scope.org_id is not None:
        conditions.append(
            and_(
                plan_table.c.visibility == PlanVisibility.ORGANISATIONAL,
                plan_table.c._org_id == scope.org_id,  # noqa: SLF001
            )
        )
        if scope.org_wide:
            org_plans = (
                select(role_table.c._plan_id)  # noqa: SLF001
                .join(user_table, user_table.c.id == role_table.c._user_id)  # noqa: SLF001
                .where(user_table.c._org_id == scope.org_id)  # noqa: SLF001
            )
            conditions.append(plan_table.c.id.in_(org_plans))
    return conditions


class SqlAlchemyUserRepository(SqlAlchemyIdentifiedRepository[User]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, User, EntityType.USER)

    def add(self, entity: User) -> None:
        try:
            with self.session.begin_nested():
                self.session.add(entity)
        except IntegrityError as exc:
            raise ProvisioningError(f"Could not store user {entity.email!r}: {exc.orig}") from exc

    def get_by_email(self, email: str) -> User | None:
        stmt = select(User).where(user_table.c.email == email).limit(1)
        return self.session.execute(stmt).scalar_one_or_none()


class SqlAlchemyApiClientRepository(SqlAlchemyRepository[ApiClient]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, ApiClient)


class SqlAlchemyOrgRepository(SqlAlchemyIdentifiedRepository[Org]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, Org, EntityType.ORG)

    def get_by_name(self, name: str) -> Org | None:
        stmt = select(Org).where(org_table.c.name == name).limit(1)
        return self.session.execute(stmt).scalar_one_or_none()


if TYPE_CHECKING:
    from dmphub.domain.ports.persistence import (
        ApiClientRepository,
        OrgRepository,
        PlanRepository,
        UserRepository,
    )

    _session_stub = cast("Session", object())
    _plan_repo: PlanRepository = SqlAlchemyPlanRepository(_session_stub)
    _user_repo: UserRepository = SqlAlchemyUserRepository(_session_stub)
    _client_repo: ApiClientRepository = SqlAlchemyApiClientRepository(_session_stub)
    _org_repo: OrgRepository = SqlAlchemyOrgRepository(_session_stub)
