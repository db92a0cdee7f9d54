"""SQLAlchemy mapping metadata for the dmphub domain model."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    and_,
    func,
    orm,
    text,
)
from sqlalchemy.orm import configure_mappers, relationship

from dmphub.domain.model import (
    ApiClient,
    Contributor,
    ContributorRole,
    EntityType,
    Identifier,
    Org,
    Plan,
    PlanVisibility,
    PrivilegeLevel,
    Role,
    Scheme,
    User,
    normalize_scheme,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class SchemeType(TypeDecorator[str]):
    impl = String
    cache_ok = True

    def process_bind_param(self, value: Scheme | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return str(normalize_scheme(value))

    def process_result_value(self, value: str | None, dialect: Dialect) -> Scheme | None:
        _ = dialect
        if value is None:
            return None
        return normalize_scheme(value)


class ContributorRoleSetType(TypeDecorator[set[ContributorRole]]):
    impl = String
    cache_ok = True

    def process_bind_param(
        self, value: set[ContributorRole] | None, dialect: Dialect
    ) -> str | None:
        _ = dialect
        if value is None:
            return None
        payload = sorted(role.value for role in value)
        return json.dumps(payload)

    def process_result_value(self, value: str | None, dialect: Dialect) -> set[ContributorRole]:
        _ = dialect
        if value is None:
            return set()
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return set()
        items = cast(list[Any], loaded)
        roles: set[ContributorRole] = set()
        for item in items:
            if isinstance(item, str):
                roles.add(ContributorRole(item))
        return roles


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Core tables -----------------------------------------------------------------

org_table = Table(
    "org",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False),
    Column("abbreviation", String, nullable=True),
    Column("managed", Boolean, nullable=False, default=False),
    UniqueConstraint("name", name="uq_org_name"),
)

user_table = Table(
    "user_account",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("email", String, nullable=False),
    Column("firstname", String, nullable=True),
    Column("surname", String, nullable=False, default=""),
    Column(
        "org_id",
        UUIDColumnType,
        ForeignKey("org.id", ondelete="SET NULL"),
        key="_org_id",
        nullable=True,
    ),
    Column("privilege", Enum(PrivilegeLevel, native_enum=False), nullable=False),
    Column("active", Boolean, nullable=False, default=True),
    Column("invited_by_type", Enum(EntityType, native_enum=False), nullable=True),
    Column("invited_by_id", UUIDColumnType, nullable=True),
    Column("invited_at", UTCDateTime(), nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    UniqueConstraint("email", name="uq_user_account_email"),
    Index("ix_user_account_org_id", "_org_id"),
)

api_client_table = Table(
    "api_client",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False),
    Column("contact_email", String, nullable=True),
    Column(
        "org_id",
        UUIDColumnType,
        ForeignKey("org.id", ondelete="SET NULL"),
        key="_org_id",
        nullable=True,
    ),
    Column("created_at", UTCDateTime(), nullable=False),
    UniqueConstraint("name", name="uq_api_client_name"),
)

plan_table = Table(
    "plan",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("title", String, nullable=False),
    Column("description", Text, nullable=True),
    Column(
        "org_id",
        UUIDColumnType,
        ForeignKey("org.id", ondelete="SET NULL"),
        key="_org_id",
        nullable=True,
    ),
    Column(
        "api_client_id",
        UUIDColumnType,
        ForeignKey("api_client.id", ondelete="SET NULL"),
        nullable=True,
    ),
    Column("visibility", Enum(PlanVisibility, native_enum=False), nullable=False),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=True),
    Index("ix_plan_visibility_org", "visibility", "_org_id"),
    Index("ix_plan_api_client_id", "api_client_id"),
)

role_table = Table(
    "role",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "user_id",
        UUIDColumnType,
        ForeignKey("user_account.id", ondelete="CASCADE"),
        key="_user_id",
        nullable=False,
    ),
    Column(
        "plan_id",
        UUIDColumnType,
        ForeignKey("plan.id", ondelete="CASCADE"),
        key="_plan_id",
        nullable=False,
    ),
    Column("creator", Boolean, nullable=False, default=False),
    Column("administrator", Boolean, nullable=False, default=False),
    Column("editor", Boolean, nullable=False, default=False),
    Column("commenter", Boolean, nullable=False, default=False),
    Column("created_at", UTCDateTime(), nullable=False),
    UniqueConstraint("_user_id", "_plan_id", name="uq_role_user_plan"),
    Index("ix_role_plan_id", "_plan_id"),
)

contributor_table = Table(
    "contributor",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "plan_id",
        UUIDColumnType,
        ForeignKey("plan.id", ondelete="CASCADE"),
        key="_plan_id",
        nullable=False,
    ),
    Column("name", String, nullable=True),
    Column("email", String, nullable=True),
    Column(
        "org_id",
        UUIDColumnType,
        ForeignKey("org.id", ondelete="SET NULL"),
        key="_org_id",
        nullable=True,
    ),
    Column("roles", ContributorRoleSetType(), nullable=False),
)

identifier_table = Table(
    "identifier",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("scheme", SchemeType(), nullable=False),
    Column("value", String, nullable=False),
    Column("owner_type", Enum(EntityType, native_enum=False), nullable=False),
    Column("owner_id", UUIDColumnType, nullable=False),
    Column("created_at", UTCDateTime(), nullable=True, server_default=func.now()),
    # contributor identifiers repeat across plans
    Index(
        "uq_identifier_scheme_value_owner",
        "scheme",
        "value",
        "owner_type",
        unique=True,
        sqlite_where=text("owner_type != 'CONTRIBUTOR'"),
        postgresql_where=text("owner_type != 'CONTRIBUTOR'"),
    ),
    Index("ix_identifier_owner", "owner_type", "owner_id"),
)


def _identifiers_relationship(
    entity_table: Table, entity_type: EntityType
) -> orm.RelationshipProperty[Identifier]:
    # no delete-orphan: an Identifier has one of several parents
    return relationship(
        Identifier,
        cascade="all",
        primaryjoin=and_(
            identifier_table.c.owner_id == entity_table.c.id,
            identifier_table.c.owner_type == entity_type,
        ),
        foreign_keys=[identifier_table.c.owner_id],
        overlaps="_identifiers",
    )


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(
        Org,
        org_table,
        properties={
            "_identifiers": _identifiers_relationship(org_table, EntityType.ORG),
        },
    )

    mapper_registry.map_imperatively(
        User,
        user_table,
        properties={
            "org": relationship(Org),
            "_identifiers": _identifiers_relationship(user_table, EntityType.USER),
        },
    )

    mapper_registry.map_imperatively(
        ApiClient,
        api_client_table,
        properties={
            "org": relationship(Org),
        },
    )

    mapper_registry.map_imperatively(
        Plan,
        plan_table,
        properties={
            "org": relationship(Org),
            "_identifiers": _identifiers_relationship(plan_table, EntityType.PLAN),
            "_roles": relationship(
                Role,
                back_populates="plan",
                cascade="all, delete-orphan",
            ),
            "_contributors": relationship(
                Contributor,
                back_populates="plan",
                cascade="all, delete-orphan",
            ),
        },
    )

    mapper_registry.map_imperatively(
        Role,
        role_table,
        properties={
            "plan": relationship(Plan, back_populates="_roles"),
            "user": relationship(User),
        },
    )

    mapper_registry.map_imperatively(
        Contributor,
        contributor_table,
        properties={
            "plan": relationship(Plan, back_populates="_contributors"),
            "org": relationship(Org),
            "_identifiers": _identifiers_relationship(
                contributor_table,
                EntityType.CONTRIBUTOR,
            ),
        },
    )

    mapper_registry.map_imperatively(
        Identifier,
        identifier_table,
    )

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
