"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_var
from .errors import ConfigurationError
from .ingest import DEFAULT_DUPLICATE_TOLERANCE, IngestConfig, get_ingest_config
from .logging import configure_logging
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "DEFAULT_DUPLICATE_TOLERANCE",
    "ConfigurationError",
    "DatabaseConfig",
    "IngestConfig",
    "StorageConfig",
    "configure_logging",
    "get_database_config",
    "get_ingest_config",
    "get_storage_config",
    "optional_env_var",
]
