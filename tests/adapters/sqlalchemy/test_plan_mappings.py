from __future__ import annotations

from datetime import UTC
from typing import TYPE_CHECKING

from sqlalchemy import inspect, select

from dmphub.adapters.sqlalchemy.mappings import identifier_table, mapper_registry
from dmphub.domain.model import (
    ContributorRole,
    EntityType,
    IdentifierScheme,
    Plan,
    PlanVisibility,
    User,
)
from tests.helpers.plans import add_curator, make_org, make_plan, make_user

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine
    from sqlalchemy.orm import Session


def test_migrations_create_every_mapped_table(sqlite_engine: Engine) -> None:
    table_names = set(inspect(sqlite_engine).get_table_names())

    assert set(mapper_registry.metadata.tables) <= table_names
    assert "alembic_version" in table_names


def test_plan_aggregate_round_trips(sqlite_session: Session) -> None:
    org = make_org()
    owner = make_user(org=org)
    plan = make_plan(
        org=org,
        owner=owner,
        visibility=PlanVisibility.ORGANISATIONAL,
        dmp_id="10.1234/abc",
    )
    add_curator(plan, name="Jane Doe", email="jane@example.org", orcid="0000-0002-1825-0097")
    plan.add_contributor(name="Bob", roles=[ContributorRole.INVESTIGATION])
    sqlite_session.add(plan)
    sqlite_session.commit()
    sqlite_session.expunge_all()

    loaded = sqlite_session.get(Plan, plan.id)

    assert loaded is not None
    assert loaded is not plan
    assert loaded.title == plan.title
    assert loaded.visibility is PlanVisibility.ORGANISATIONAL
    assert loaded.org_id == org.id
    assert loaded.created_at.tzinfo is not None
    assert loaded.created_at == plan.created_at.astimezone(UTC)
    owner_loaded = loaded.owner
    assert owner_loaded is not None
    assert owner_loaded.email == owner.email
    assert owner_loaded.org_id == org.id
    roles_by_email = {c.email: c.roles for c in loaded.contributors}
    assert roles_by_email == {
        "jane@example.org": {ContributorRole.DATA_CURATION},
        None: {ContributorRole.INVESTIGATION},
    }
    dmp_id = loaded.identifier_for(IdentifierScheme.DOI)
    assert dmp_id is not None
    assert dmp_id.value == "10.1234/abc"
    assert dmp_id.owner_type is EntityType.PLAN


def test_identifiers_stay_with_their_owner_type(sqlite_session: Session) -> None:
    user = make_user()
    user.add_identifier(IdentifierScheme.ORCID, "0000-0002-1825-0097")
    plan = make_plan()
    add_curator(plan, name="Ada", email=user.email, orcid="0000-0002-1825-0097")
    sqlite_session.add_all([user, plan])
    sqlite_session.commit()
    sqlite_session.expunge_all()

    rows = sqlite_session.execute(
        select(identifier_table.c.owner_type, identifier_table.c.owner_id).where(
            identifier_table.c.value == "0000-0002-1825-0097"
        )
    ).all()
    loaded_user = sqlite_session.get(User, user.id)

    assert {row.owner_type for row in rows} == {EntityType.USER, EntityType.CONTRIBUTOR}
    assert loaded_user is not None
    assert [i.value for i in loaded_user.identifiers] == ["0000-0002-1825-0097"]


def test_invited_user_round_trips(sqlite_session: Session) -> None:
    inviter = make_user("inviter@example.edu")
    invited = User.invite(
        email="jane@example.org",
        firstname="Jane",
        surname="Doe",
        org=None,
        invited_by=inviter.as_caller(),
    )
    sqlite_session.add_all([inviter, invited])
    sqlite_session.commit()
    sqlite_session.expunge_all()

    loaded = sqlite_session.get(User, invited.id)

    assert loaded is not None
    assert loaded.is_pending_invitation
    assert loaded.invited_by_type is EntityType.USER
    assert loaded.invited_by_id == inviter.id
