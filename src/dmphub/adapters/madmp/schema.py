"""Pydantic models describing RDA DMP Common Standard (maDMP) payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class MadmpBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class IdentifierPayload(MadmpBaseModel):
    identifier: str
    type: str = "other"

    @field_validator("identifier", "type")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()


class AffiliationPayload(MadmpBaseModel):
    name: str | None = None
    abbreviation: str | None = None
    affiliation_id: IdentifierPayload | None = None

    _normalize_name = field_validator("name", "abbreviation", mode="before")(_blank_to_none)


class PersonPayload(MadmpBaseModel):
    name: str | None = None
    mbox: str | None = None
    affiliation: AffiliationPayload | None = None

    _normalize_strings = field_validator("name", "mbox", mode="before")(_blank_to_none)


class ContactPayload(PersonPayload):
    contact_id: IdentifierPayload | None = None


class ContributorPayload(PersonPayload):
    contributor_id: IdentifierPayload | None = None
    role: list[str] = Field(default_factory=list)


class DmpPayload(MadmpBaseModel):
    title: str = Field(min_length=1)
    description: str | None = None
    dmp_id: IdentifierPayload | None = None
    contact: ContactPayload | None = None
    contributor: list[ContributorPayload] = Field(default_factory=list)
    dmproadmap_privacy: str | None = None


class DmpItem(MadmpBaseModel):
    dmp: DmpPayload


class DmpEnvelope(MadmpBaseModel):
    items: list[DmpItem] = Field(min_length=1)
