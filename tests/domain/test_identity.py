from __future__ import annotations

import pytest

from dmphub.domain.errors import ProvisioningError
from dmphub.domain.identity import resolve_contributor, split_contributor_name
from dmphub.domain.model import ApiClient, EntityType, IdentifierScheme, User
from tests.helpers.plans import (
    FIXED_NOW,
    FakeUserRepository,
    add_curator,
    fixed_clock,
    make_org,
    make_plan,
    make_user,
)


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("Jane Q. Doe", ("Jane", "Doe")),
        ("Jane Doe", ("Jane", "Doe")),
        ("Cher", (None, "Cher")),
        ("  ", (None, "")),
        (None, (None, "")),
    ],
)
def test_split_contributor_name(name: str | None, expected: tuple[str | None, str]) -> None:
    assert split_contributor_name(name) == expected


def test_resolve_prefers_identifier_match_over_email() -> None:
    by_orcid = make_user("orcid-holder@example.edu")
    by_orcid.add_identifier(IdentifierScheme.ORCID, "0000-0002-1825-0097")
    by_email = make_user("jane@example.edu")
    users = FakeUserRepository([by_orcid, by_email])
    plan = make_plan()
    add_curator(plan, name="Jane Doe", email="jane@example.edu", orcid="0000-0002-1825-0097")

    resolved = resolve_contributor(
        plan.contributors[0], inviting_caller=by_email.as_caller(), users=users
    )

    assert resolved is by_orcid
    assert users.added == []


def test_resolve_falls_back_to_email() -> None:
    existing = make_user("jane@example.edu")
    users = FakeUserRepository([existing])
    plan = make_plan()
    add_curator(plan, name="Jane Doe", email="jane@example.edu", orcid="0000-0001-0000-0000")

    resolved = resolve_contributor(
        plan.contributors[0], inviting_caller=existing.as_caller(), users=users
    )

    assert resolved is existing


def test_resolve_provisions_invited_user_with_identifiers() -> None:
    client = ApiClient(name="Harvester")
    org = make_org()
    users = FakeUserRepository()
    plan = make_plan()
    add_curator(
        plan,
        name="Jane Q. Doe",
        email="jane@example.org",
        org=org,
        orcid="0000-0002-1825-0097",
    )

    user = resolve_contributor(
        plan.contributors[0],
        inviting_caller=client.as_caller(),
        users=users,
        clock=fixed_clock(),
    )

    assert users.added == [user]
    assert user.email == "jane@example.org"
    assert (user.firstname, user.surname) == ("Jane", "Doe")
    assert user.org is org
    assert not user.active
    assert user.invited_at == FIXED_NOW
    assert (user.invited_by_type, user.invited_by_id) == (EntityType.API_CLIENT, client.id)
    identifier = user.identifier_for(IdentifierScheme.ORCID)
    assert identifier is not None
    assert identifier.value == "0000-0002-1825-0097"
    assert identifier.owner_type is EntityType.USER


def test_resolve_is_idempotent() -> None:
    users = FakeUserRepository()
    caller = make_user("submitter@example.edu").as_caller()
    plan = make_plan()
    add_curator(plan, name="Jane Doe", email="jane@example.org")
    contributor = plan.contributors[0]

    first = resolve_contributor(contributor, inviting_caller=caller, users=users)
    second = resolve_contributor(contributor, inviting_caller=caller, users=users)

    assert first is second
    assert len(users.added) == 1


def test_resolve_without_email_cannot_provision() -> None:
    users = FakeUserRepository()
    plan = make_plan()
    add_curator(plan, name="Anonymous Curator", email=None)

    with pytest.raises(ProvisioningError):
        resolve_contributor(
            plan.contributors[0],
            inviting_caller=make_user().as_caller(),
            users=users,
        )

    assert users.added == []


class _RacingUserRepository(FakeUserRepository):
    """Another ingestion stores the same email between lookup and insert."""

    def __init__(self, winner: User) -> None:
        super().__init__()
        self._winner = winner
        self._lookups = 0

    def get_by_email(self, email: str) -> User | None:
        self._lookups += 1
        if self._lookups == 1:
            return None
        return self._winner if email == self._winner.email else None

    def add(self, entity: User) -> None:
        raise ProvisioningError(f"email {entity.email!r} already taken")


def test_resolve_retries_lookup_after_concurrent_provisioning() -> None:
    winner = make_user("jane@example.org")
    users = _RacingUserRepository(winner)
    plan = make_plan()
    add_curator(plan, name="Jane Doe", email="jane@example.org")

    resolved = resolve_contributor(
        plan.contributors[0], inviting_caller=winner.as_caller(), users=users
    )

    assert resolved is winner
