"""Errors raised by plan ingestion and access checks."""

from __future__ import annotations

DUPLICATE_PLAN_MESSAGE = "Plan already exists. Send an update instead."


class DmpHubError(Exception):
    """Base class for errors surfaced to callers of the plan API."""


class ParseError(DmpHubError):
    """Raised when a submitted document cannot be parsed into a plan."""


class DuplicateError(DmpHubError):
    """Raised when a create request resolves to a plan that already exists."""

    def __init__(self, message: str = DUPLICATE_PLAN_MESSAGE) -> None:
        super().__init__(message)


class NotFoundError(DmpHubError):
    """Raised when a resource is missing or not visible to the caller.

    Both cases share this error so responses do not reveal whether a plan exists.
    """


class ProvisioningError(DmpHubError):
    """Raised when an account cannot be provisioned for a contributor."""
