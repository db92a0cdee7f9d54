"""Ports for persisting domain aggregates."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from dmphub.domain.model import ApiClient, Org, Plan, Scheme, User

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from dmphub.domain.visibility import ListingScope


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...

    def get(self, entity_id: UUID) -> TEntity | None: ...


@runtime_checkable
class PlanRepository(Repository[Plan], Protocol):
    """Persistence contract for plans.

    ``add`` raises ``DuplicateError`` when the plan's identifiers collide with a
    stored plan.
    """

    def get_by_identifier(self, scheme: Scheme, value: str) -> Plan | None: ...

    def find_in_scope(self, scope: ListingScope) -> Sequence[Plan]: ...


@runtime_checkable
class UserRepository(Repository[User], Protocol):
    """Persistence contract for users.

    ``add`` raises ``ProvisioningError`` on email or identifier collisions.
    """

    def get_by_email(self, email: str) -> User | None: ...

    def get_by_identifier(self, scheme: Scheme, value: str) -> User | None: ...


@runtime_checkable
class ApiClientRepository(Repository[ApiClient], Protocol):
    """Persistence contract for API clients."""


@runtime_checkable
class OrgRepository(Repository[Org], Protocol):
    """Persistence contract for organisations."""

    def get_by_name(self, name: str) -> Org | None: ...

    def get_by_identifier(self, scheme: Scheme, value: str) -> Org | None: ...
