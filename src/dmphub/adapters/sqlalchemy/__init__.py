"""SQLAlchemy adapter package for dmphub."""

from __future__ import annotations

from .mappings import (
    create_all_tables,
    mapper_registry,
    start_mappers,
)
from .repositories import (
    SqlAlchemyApiClientRepository,
    SqlAlchemyOrgRepository,
    SqlAlchemyPlanRepository,
    SqlAlchemyUserRepository,
)
from .unit_of_work import (
    SqlAlchemyUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyApiClientRepository",
    "SqlAlchemyOrgRepository",
    "SqlAlchemyPlanRepository",
    "SqlAlchemyUnitOfWork",
    "SqlAlchemyUserRepository",
    "StartupError",
    "configured_engine",
    "create_all_tables",
    "is_started",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
