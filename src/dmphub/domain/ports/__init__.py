"""Domain port definitions for adapters."""

from __future__ import annotations

from .parsing import PlanDeserializer
from .persistence import (
    ApiClientRepository,
    OrgRepository,
    PlanRepository,
    Repository,
    UserRepository,
)
from .unit_of_work import PlanRepositories, PlanUnitOfWork, RepositoryCollection, UnitOfWork

__all__ = [
    "ApiClientRepository",
    "OrgRepository",
    "PlanDeserializer",
    "PlanRepositories",
    "PlanRepository",
    "PlanUnitOfWork",
    "Repository",
    "RepositoryCollection",
    "UnitOfWork",
    "UserRepository",
]
