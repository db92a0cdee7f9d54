"""Port for turning submitted documents into persisted plans."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

    from dmphub.domain.model import IdentifierKey, Plan


@runtime_checkable
class PlanDeserializer(Protocol):
    """Parser contract used by plan ingestion.

    Both methods raise ``ParseError`` for malformed documents.
    """

    def dmp_id(self, document: Mapping[str, object]) -> IdentifierKey | None:
        """Return the document's external plan identifier, if it carries one."""
        ...

    def deserialize(self, document: Mapping[str, object]) -> Plan:
        """Find or create the plan described by ``document`` and add it to storage."""
        ...
