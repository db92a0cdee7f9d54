"""Identifiers owned by typed references.

Important: Identifier points to (owner_type, owner_id), not to a concrete FK.
The same (scheme, value) may exist once per owner type, so an ORCID can sit on
both a contributor record and the user account it resolved to. Contributor
identifiers are exempt: every plan keeps its own contributor rows.
"""

from __future__ import annotations

from abc import ABC
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar, Protocol

from dmphub.domain.model.entity import Entity
from dmphub.domain.model.enums import EntityType, IdentifierScheme

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID


type Scheme = str | IdentifierScheme
type IdentifierKey = tuple[Scheme, str]


def normalize_scheme(scheme: str) -> Scheme:
    """Lowercase a scheme name and promote it to a known scheme where possible."""

    normalized = scheme.strip().lower()
    try:
        return IdentifierScheme(normalized)
    except ValueError:
        return normalized


@dataclass(eq=False, kw_only=True)
class Identifier(Entity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.IDENTIFIER

    scheme: Scheme
    value: str

    owner_type: EntityType
    owner_id: UUID

    created_at: datetime | None = None

    @property
    def key(self) -> IdentifierKey:
        return (self.scheme, self.value)


class IdentifierCollection(Protocol):
    """Read-only access to owned identifiers."""

    @property
    def identifiers(self) -> tuple[Identifier, ...]: ...


@dataclass(eq=False, kw_only=True)
class IdentifiableMixin(Entity, ABC):
    """Capability: owns Identifiers."""

    _identifiers: list[Identifier] = field(
        default_factory=list["Identifier"], repr=False, init=False
    )

    @property
    def identifiers(self) -> tuple[Identifier, ...]:
        return tuple(self._identifiers)

    def add_identifier(self, scheme: Scheme, value: str, *, replace: bool = False) -> Identifier:
        """Attach ``(scheme, value)`` unless this owner already carries it."""

        resolved_scheme = normalize_scheme(scheme)
        if replace:
            self._identifiers[:] = [i for i in self._identifiers if i.scheme != resolved_scheme]
        for existing in self._identifiers:
            if existing.scheme == resolved_scheme and existing.value == value:
                return existing
        identifier = Identifier(
            scheme=resolved_scheme,
            value=value,
            owner_type=self.entity_type,
            owner_id=self.id,
        )
        self._identifiers.append(identifier)
        return identifier

    def identifier_for(self, scheme: Scheme) -> Identifier | None:
        resolved_scheme = normalize_scheme(scheme)
        for identifier in self._identifiers:
            if identifier.scheme == resolved_scheme:
                return identifier
        return None
