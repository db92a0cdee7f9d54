"""Translate maDMP documents into plan aggregates.

Documents arrive as ``{"items": [{"dmp": {...}}]}``. Only the first item is
read. Plans, organisations and contributors are looked up before anything new
is created, so submitting the same document twice hands back the stored plan.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, cast

from pydantic import ValidationError

from dmphub.domain.errors import ParseError
from dmphub.domain.model import (
    ContributorRole,
    IdentifierScheme,
    Org,
    Plan,
    PlanVisibility,
    normalize_scheme,
    utcnow,
)

from .schema import (
    AffiliationPayload,
    DmpEnvelope,
    DmpPayload,
    IdentifierPayload,
    PersonPayload,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping
    from datetime import datetime

    from dmphub.domain.model import IdentifierKey
    from dmphub.domain.ports.unit_of_work import PlanRepositories


log = getLogger(__name__)

_VISIBILITY_BY_PRIVACY: dict[str, PlanVisibility] = {
    "public": PlanVisibility.PUBLIC,
    "organisational": PlanVisibility.ORGANISATIONAL,
    "organizational": PlanVisibility.ORGANISATIONAL,
}


def load_document(raw: str | bytes) -> dict[str, object]:
    """Decode a JSON document, raising ``ParseError`` unless it is an object."""

    try:
        loaded = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Document is not valid JSON: {exc.msg}") from exc
    if not isinstance(loaded, dict):
        raise ParseError("Document must be a JSON object")
    return cast(dict[str, object], loaded)


def parse_dmp(document: Mapping[str, object]) -> DmpPayload:
    try:
        envelope = DmpEnvelope.model_validate(document)
    except ValidationError as exc:
        raise ParseError(f"Invalid DMP document: {exc}") from exc
    return envelope.items[0].dmp


def identifier_key(payload: IdentifierPayload) -> IdentifierKey:
    return normalize_scheme(payload.type), payload.identifier


def contributor_role(value: str) -> ContributorRole:
    """Map a CRediT role URL or bare role name onto a ``ContributorRole``."""

    segment = value.strip().rstrip("/").rsplit("/", 1)[-1]
    try:
        return ContributorRole(segment.lower().replace("-", "_"))
    except ValueError:
        return ContributorRole.OTHER


def plan_visibility(privacy: str | None) -> PlanVisibility:
    if privacy is None:
        return PlanVisibility.PRIVATE
    return _VISIBILITY_BY_PRIVACY.get(privacy.strip().lower(), PlanVisibility.PRIVATE)


def plan_id_from_url(url: str) -> uuid.UUID | None:
    segment = url.rstrip("/").rsplit("/", 1)[-1]
    try:
        return uuid.UUID(segment)
    except ValueError:
        return None


@dataclass(kw_only=True)
class _Person:
    name: str | None
    email: str | None
    affiliation: AffiliationPayload | None
    identifier: IdentifierPayload | None
    roles: set[ContributorRole] = field(default_factory=set["ContributorRole"])


def _email_key(email: str | None) -> str | None:
    return email.lower() if email is not None else None


def collect_people(payload: DmpPayload) -> list[_Person]:
    """Return the contact followed by the contributors, merged by email.

    The contact is always tagged ``data_curation``; a contributor sharing its
    email address adds roles to that entry instead of producing a new one.
    """

    people: list[_Person] = []
    by_email: dict[str, _Person] = {}

    def _merge(
        person: PersonPayload,
        identifier: IdentifierPayload | None,
        roles: Iterable[ContributorRole],
    ) -> None:
        key = _email_key(person.mbox)
        existing = by_email.get(key) if key is not None else None
        if existing is not None:
            existing.roles.update(roles)
            existing.name = existing.name or person.name
            existing.affiliation = existing.affiliation or person.affiliation
            existing.identifier = existing.identifier or identifier
            return
        entry = _Person(
            name=person.name,
            email=person.mbox,
            affiliation=person.affiliation,
            identifier=identifier,
            roles=set(roles),
        )
        people.append(entry)
        if key is not None:
            by_email[key] = entry

    if payload.contact is not None:
        _merge(payload.contact, payload.contact.contact_id, [ContributorRole.DATA_CURATION])
    for contributor in payload.contributor:
        _merge(
            contributor,
            contributor.contributor_id,
            [contributor_role(role) for role in contributor.role],
        )
    return people


class MadmpDeserializer:
    """Find or create plans described by maDMP documents.

    New plans are added to ``repositories.plans`` before being returned.
    """

    def __init__(
        self,
        repositories: PlanRepositories,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._repositories = repositories
        self._clock = clock

    def dmp_id(self, document: Mapping[str, object]) -> IdentifierKey | None:
        payload = parse_dmp(document)
        if payload.dmp_id is None:
            return None
        return identifier_key(payload.dmp_id)

    def deserialize(self, document: Mapping[str, object]) -> Plan:
        payload = parse_dmp(document)

        existing = self._find_plan(payload.dmp_id)
        if existing is not None:
            log.debug("Document resolved to stored plan %s", existing.id)
            return existing

        orgs: dict[str, Org] = {}
        people = collect_people(payload)
        plan = Plan(
            title=payload.title,
            description=payload.description,
            visibility=plan_visibility(payload.dmproadmap_privacy),
            created_at=self._clock(),
        )
        if payload.dmp_id is not None:
            plan.add_identifier(*identifier_key(payload.dmp_id))

        for person in people:
            contributor = plan.add_contributor(
                name=person.name,
                email=person.email,
                org=self._resolve_org(person.affiliation, orgs),
                roles=person.roles,
            )
            if person.identifier is not None:
                contributor.add_identifier(*identifier_key(person.identifier))

        if people and plan.org is None:
            plan.org = plan.contributors[0].org

        self._repositories.plans.add(plan)
        log.info("Created plan %s with %d contributor(s)", plan.id, len(people))
        return plan

    def _find_plan(self, dmp_id: IdentifierPayload | None) -> Plan | None:
        if dmp_id is None:
            return None
        plans = self._repositories.plans
        found = plans.get_by_identifier(*identifier_key(dmp_id))
        if found is not None:
            return found
        if normalize_scheme(dmp_id.type) != IdentifierScheme.URL:
            return None
        plan_id = plan_id_from_url(dmp_id.identifier)
        return plans.get(plan_id) if plan_id is not None else None

    def _resolve_org(
        self,
        affiliation: AffiliationPayload | None,
        seen: dict[str, Org],
    ) -> Org | None:
        if affiliation is None:
            return None

        org_repo = self._repositories.orgs
        ror = affiliation.affiliation_id
        cache_key = (ror.identifier if ror is not None else None) or affiliation.name
        if cache_key is None:
            return None
        if cache_key in seen:
            return seen[cache_key]

        org: Org | None = None
        if ror is not None:
            org = org_repo.get_by_identifier(*identifier_key(ror))
        if org is None and affiliation.name is not None:
            org = org_repo.get_by_name(affiliation.name)
        if org is None and affiliation.name is not None:
            org = Org(name=affiliation.name, abbreviation=affiliation.abbreviation)
            if ror is not None:
                org.add_identifier(*identifier_key(ror))
            org_repo.add(org)
            log.info("Registered organisation %r from affiliation", org.name)

        if org is not None:
            seen[cache_key] = org
        return org
