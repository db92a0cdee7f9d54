"""Map document contributors onto user accounts.

Lookup order is identifiers first (any one matching ``(scheme, value)`` wins),
then exact email. A contributor that matches nothing is provisioned as an
invited account attributed to the caller whose submission named them. When the
insert collides with an account created in the meantime, the lookup is retried
once and the existing account is returned.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from dmphub.domain.errors import ProvisioningError
from dmphub.domain.model import User, utcnow

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from dmphub.domain.model import Caller, Contributor
    from dmphub.domain.ports.persistence import UserRepository


log = getLogger(__name__)


def split_contributor_name(name: str | None) -> tuple[str | None, str]:
    """Split a free-text name into ``(firstname, surname)``.

    Only the first and last tokens survive; a single token is the surname.
    """

    names = name.split() if name else []
    if len(names) > 1:
        return names[0], names[-1]
    return None, names[0] if names else ""


def find_existing_user(contributor: Contributor, *, users: UserRepository) -> User | None:
    for identifier in contributor.identifiers:
        user = users.get_by_identifier(identifier.scheme, identifier.value)
        if user is not None:
            return user
    if contributor.email:
        return users.get_by_email(contributor.email)
    return None


def resolve_contributor(
    contributor: Contributor,
    *,
    inviting_caller: Caller,
    users: UserRepository,
    clock: Callable[[], datetime] = utcnow,
) -> User:
    """Return the account for ``contributor``, provisioning an invited one if needed."""

    existing = find_existing_user(contributor, users=users)
    if existing is not None:
        return existing

    if not contributor.email:
        raise ProvisioningError(
            f"Cannot invite contributor {contributor.name!r}: no email address and no "
            "matching account"
        )

    firstname, surname = split_contributor_name(contributor.name)
    user = User.invite(
        email=contributor.email,
        firstname=firstname,
        surname=surname,
        org=contributor.org,
        invited_by=inviting_caller,
        invited_at=clock(),
    )
    for identifier in contributor.identifiers:
        user.add_identifier(identifier.scheme, identifier.value)

    try:
        users.add(user)
    except ProvisioningError:
        # a concurrent ingestion may have provisioned the same person first
        concurrent = find_existing_user(contributor, users=users)
        if concurrent is None:
            raise
        log.info(
            "Reusing concurrently provisioned user %s (%s)", concurrent.id, concurrent.email
        )
        return concurrent

    log.info(
        "Invited user %s (%s) with %d identifier(s)",
        user.id,
        user.email,
        len(user.identifiers),
    )
    return user
