# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING
from uuid import UUID

from dotenv import load_dotenv

from dmphub.adapters.madmp import load_document
from dmphub.app import (
    accept_invitation,
    create_api_client,
    create_org,
    create_plan,
    create_user,
    list_plans,
    show_plan,
)
from dmphub.config import configure_logging
from dmphub.domain.errors import DmpHubError, DuplicateError, ParseError
from dmphub.domain.model import PrivilegeLevel

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)

EXIT_FAILURE = 1
EXIT_USAGE = 2


def _add_caller_arguments(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--as-user", metavar="EMAIL", help="Act as the user with this email")
    group.add_argument(
        "--as-client",
        metavar="ID",
        type=str,
        help="Act as the API client with this id",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dmphub",
        description="Ingest data management plans and query the plans a caller may see",
    )
    parser.add_argument("--verbose", action="store_true", help="Log at DEBUG level")
    subparsers = parser.add_subparsers(dest="command", required=True)

    orgs = subparsers.add_parser("orgs", help="Organisation management commands")
    orgs_sub = orgs.add_subparsers(dest="orgs_command", required=True)
    org_create = orgs_sub.add_parser("create", help="Register an organisation")
    org_create.add_argument("--name", required=True, help="Unique organisation name")
    org_create.add_argument("--abbreviation", help="Short name")
    org_create.add_argument("--ror", help="ROR identifier of the organisation")

    users = subparsers.add_parser("users", help="User management commands")
    users_sub = users.add_subparsers(dest="users_command", required=True)
    user_create = users_sub.add_parser("create", help="Create an active user")
    user_create.add_argument("--email", required=True, help="Unique email address")
    user_create.add_argument("--firstname", help="Given name")
    user_create.add_argument("--surname", default="", help="Family name")
    user_create.add_argument("--org", help="Name of the user's organisation")
    user_create.add_argument(
        "--privilege",
        choices=[level.value for level in PrivilegeLevel],
        default=PrivilegeLevel.USER.value,
        help="Privilege level (default: %(default)s)",
    )
    user_create.add_argument("--orcid", help="ORCID iD to record for the user")
    user_accept = users_sub.add_parser("accept", help="Activate an invited user")
    user_accept.add_argument("--email", required=True, help="Email of the invited user")

    clients = subparsers.add_parser("api-clients", help="API client management commands")
    clients_sub = clients.add_subparsers(dest="clients_command", required=True)
    client_create = clients_sub.add_parser("create", help="Register an API client")
    client_create.add_argument("--name", required=True, help="Unique client name")
    client_create.add_argument("--contact-email", help="Contact address for the client")
    client_create.add_argument("--org", help="Name of the client's organisation")

    plans = subparsers.add_parser("plans", help="Plan commands")
    plans_sub = plans.add_subparsers(dest="plans_command", required=True)
    plan_create = plans_sub.add_parser("create", help="Ingest a maDMP JSON document")
    plan_create.add_argument(
        "document",
        help="Path to the JSON document, or '-' to read standard input",
    )
    _add_caller_arguments(plan_create)
    plan_show = plans_sub.add_parser("show", help="Show one plan visible to the caller")
    plan_show.add_argument("plan_id", help="Plan id")
    _add_caller_arguments(plan_show)
    plan_list = plans_sub.add_parser("list", help="List plans visible to the caller")
    _add_caller_arguments(plan_list)

    return parser


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    return _build_parser().parse_args(list(argv))


def _parse_uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise ValueError(f"Invalid UUID: {value}") from exc


def _read_document(source: str) -> dict[str, object]:
    raw = sys.stdin.read() if source == "-" else Path(source).read_text(encoding="utf-8")
    return load_document(raw)


def _caller(args: argparse.Namespace) -> tuple[str | None, UUID | None]:
    if args.as_user is not None:
        return args.as_user, None
    return None, _parse_uuid(args.as_client)


def _emit(payload: object) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True))


def _run(args: argparse.Namespace) -> object:
    match args.command:
        case "orgs":
            org = create_org(args.name, abbreviation=args.abbreviation, ror_id=args.ror)
            return {"id": str(org.id), "name": org.name}
        case "users" if args.users_command == "create":
            user = create_user(
                args.email,
                firstname=args.firstname,
                surname=args.surname,
                org_name=args.org,
                privilege=PrivilegeLevel(args.privilege),
                orcid=args.orcid,
            )
            return {"id": str(user.id), "email": user.email}
        case "users":
            user = accept_invitation(args.email)
            return {"id": str(user.id), "email": user.email, "active": user.active}
        case "api-clients":
            client = create_api_client(
                args.name,
                contact_email=args.contact_email,
                org_name=args.org,
            )
            return {"id": str(client.id), "name": client.name}
        case "plans" if args.plans_command == "create":
            email, client_id = _caller(args)
            document = _read_document(args.document)
            return create_plan(document, user_email=email, api_client_id=client_id).to_dict()
        case "plans" if args.plans_command == "show":
            email, client_id = _caller(args)
            plan_id = _parse_uuid(args.plan_id)
            return show_plan(plan_id, user_email=email, api_client_id=client_id).to_dict()
        case "plans":
            email, client_id = _caller(args)
            views = list_plans(user_email=email, api_client_id=client_id)
            return [view.to_dict() for view in views]
        case _:
            raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        result = _run(parsed_args)
    except (ValueError, ParseError, DuplicateError) as exc:
        log.error("Request rejected: %s", exc)  # noqa: TRY400
        sys.exit(EXIT_USAGE)
    except DmpHubError as exc:
        log.error("%s", exc)  # noqa: TRY400
        sys.exit(EXIT_FAILURE)
    except Exception:
        log.exception("Fatal error")
        sys.exit(EXIT_FAILURE)

    _emit(result)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
