"""Plan ingestion defaults."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from dmphub.domain.ingestion import DUPLICATE_TOLERANCE
from dmphub.domain.model import CuratorAdministratorPolicy

from .env import optional_env_var
from .errors import ConfigurationError

DEFAULT_DUPLICATE_TOLERANCE = DUPLICATE_TOLERANCE


@dataclass(frozen=True, slots=True)
class IngestConfig:
    duplicate_tolerance: timedelta = DEFAULT_DUPLICATE_TOLERANCE
    curator_administrators: CuratorAdministratorPolicy = CuratorAdministratorPolicy.NONE


def get_ingest_config() -> IngestConfig:
    tolerance = DEFAULT_DUPLICATE_TOLERANCE
    raw_tolerance = optional_env_var("DMPHUB_DUPLICATE_TOLERANCE_SECONDS")
    if raw_tolerance is not None:
        try:
            seconds = float(raw_tolerance)
        except ValueError as exc:
            raise ConfigurationError(
                f"DMPHUB_DUPLICATE_TOLERANCE_SECONDS must be a number, got {raw_tolerance!r}"
            ) from exc
        if seconds < 0:
            raise ConfigurationError("DMPHUB_DUPLICATE_TOLERANCE_SECONDS must be non-negative")
        tolerance = timedelta(seconds=seconds)

    policy = CuratorAdministratorPolicy.NONE
    raw_policy = optional_env_var("DMPHUB_CURATOR_ADMINISTRATORS")
    if raw_policy is not None:
        try:
            policy = CuratorAdministratorPolicy(raw_policy.lower())
        except ValueError as exc:
            allowed = ", ".join(member.value for member in CuratorAdministratorPolicy)
            raise ConfigurationError(
                f"DMPHUB_CURATOR_ADMINISTRATORS must be one of: {allowed}"
            ) from exc

    return IngestConfig(duplicate_tolerance=tolerance, curator_administrators=policy)
