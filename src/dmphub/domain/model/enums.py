"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EntityType(StrEnum):
    """Typed-reference discriminator for polymorphic ownership (Identifier, invitations)."""

    ORG = "org"
    USER = "user"
    API_CLIENT = "api_client"
    PLAN = "plan"
    ROLE = "role"
    CONTRIBUTOR = "contributor"
    IDENTIFIER = "identifier"


class IdentifierScheme(StrEnum):
    DOI = "doi"
    ARK = "ark"
    URL = "url"
    ORCID = "orcid"
    ROR = "ror"
    FUNDREF = "fundref"
    OTHER = "other"


class PrivilegeLevel(StrEnum):
    USER = "user"
    ORG_ADMIN = "org_admin"
    SUPER_ADMIN = "super_admin"


class PlanVisibility(StrEnum):
    PUBLIC = "public"
    ORGANISATIONAL = "organisational"
    PRIVATE = "private"
    TEST = "test"


class ContributorRole(StrEnum):
    """CRediT contribution roles as used by maDMP documents."""

    CONCEPTUALIZATION = "conceptualization"
    DATA_CURATION = "data_curation"
    FORMAL_ANALYSIS = "formal_analysis"
    FUNDING_ACQUISITION = "funding_acquisition"
    INVESTIGATION = "investigation"
    METHODOLOGY = "methodology"
    PROJECT_ADMINISTRATION = "project_administration"
    RESOURCES = "resources"
    SOFTWARE = "software"
    SUPERVISION = "supervision"
    VALIDATION = "validation"
    VISUALIZATION = "visualization"
    WRITING_ORIGINAL_DRAFT = "writing_original_draft"
    WRITING_REVIEW_EDITING = "writing_review_editing"
    OTHER = "other"


class CuratorAdministratorPolicy(StrEnum):
    """Whether data curators other than the plan owner administer the plan."""

    NONE = "none"
    CO_CURATORS = "co_curators"
