"""Create plans from submitted documents exactly once."""

from __future__ import annotations

from datetime import UTC, timedelta
from logging import getLogger
from typing import TYPE_CHECKING

from dmphub.domain.errors import DuplicateError
from dmphub.domain.model import (
    ApiClientCaller,
    CuratorAdministratorPolicy,
    UserCaller,
    utcnow,
)
from dmphub.domain.roles import assign_roles

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from datetime import datetime

    from dmphub.domain.model import Caller, Plan
    from dmphub.domain.ports.parsing import PlanDeserializer
    from dmphub.domain.ports.unit_of_work import PlanRepositories


DUPLICATE_TOLERANCE = timedelta(minutes=1)

log = getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def predates_request(
    plan: Plan,
    *,
    started_at: datetime,
    tolerance: timedelta = DUPLICATE_TOLERANCE,
) -> bool:
    """Return whether ``plan`` existed before the request that produced it.

    The parser find-or-creates, so a plan stamped more than ``tolerance`` before
    the request started was found rather than created.
    """

    return _as_utc(plan.created_at) < _as_utc(started_at) - tolerance


def ingest_plan(
    document: Mapping[str, object],
    caller: Caller,
    *,
    deserializer: PlanDeserializer,
    repositories: PlanRepositories,
    tolerance: timedelta = DUPLICATE_TOLERANCE,
    curator_administrators: CuratorAdministratorPolicy = CuratorAdministratorPolicy.NONE,
    clock: Callable[[], datetime] = utcnow,
) -> Plan:
    """Create the plan described by ``document`` on behalf of ``caller``.

    Raises ``DuplicateError`` when the document names a known DMP ID or the
    parser hands back a plan older than the request, and lets ``ParseError``
    from the deserializer propagate. Runs inside the caller's unit of work and
    does not commit.
    """

    dmp_id = deserializer.dmp_id(document)
    if dmp_id is not None and repositories.plans.get_by_identifier(*dmp_id) is not None:
        log.info("Rejected submission for known DMP ID %s:%s", *dmp_id)
        raise DuplicateError

    started_at = clock()
    plan = deserializer.deserialize(document)

    if predates_request(plan, started_at=started_at, tolerance=tolerance):
        log.info(
            "Rejected submission resolving to existing plan %s (created %s)",
            plan.id,
            plan.created_at,
        )
        raise DuplicateError

    match caller:
        case ApiClientCaller(client_id=client_id):
            plan.stamp_api_client(client_id)
        case UserCaller(org_id=org_id) if plan.org is None and org_id is not None:
            plan.org = repositories.orgs.get(org_id)

    assign_roles(
        plan,
        plan.contributors,
        inviting_caller=caller,
        users=repositories.users,
        curator_administrators=curator_administrators,
        clock=clock,
    )
    log.info("Ingested plan %s (%r)", plan.id, plan.title)
    return plan
