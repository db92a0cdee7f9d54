"""Public interface for the maDMP document adapter."""

from __future__ import annotations

from .schema import DmpEnvelope, DmpPayload
from .translator import MadmpDeserializer, load_document, parse_dmp

__all__ = [
    "DmpEnvelope",
    "DmpPayload",
    "MadmpDeserializer",
    "load_document",
    "parse_dmp",
]
