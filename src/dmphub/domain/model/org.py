"""Organisations that own users, plans and API clients."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from dmphub.domain.model.enums import EntityType
from dmphub.domain.model.identifiers import IdentifiableMixin


@dataclass(eq=False, kw_only=True)
class Org(IdentifiableMixin):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.ORG

    name: str
    abbreviation: str | None = None
    managed: bool = False
