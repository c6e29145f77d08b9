"""Command line entry point: ``snow-incident``.

Connection settings come from SERVICENOW_* environment variables or a
``.env`` file, e.g.::

    SERVICENOW_INSTANCE=dev12345.service-now.com
    SERVICENOW_USERNAME=admin
    SERVICENOW_PASSWORD=...

    snow-incident incident get --requester "Tuter, Abel"
    snow-incident incident update INC0010165 --state 2 --work-notes "Investigating"
"""
import argparse
import sys
from typing import Any, Dict, List, Optional

from .config import Settings
from .servicenow_api.client import ServiceNowClient
from .tools.filters import (
    ByAccountName,
    ByEmail,
    ByFullName,
    ByNumber,
    ByOpaqueId,
    ByRequester,
    ByShortDescriptionFragment,
    NullDirectory,
    PosixAccountDirectory,
    classify_requester,
    resolve_user_sys_id,
)
from .tools.incident import IncidentClient, IncidentFields, IncidentUpdateFields
from .tools.user import UserClient
from .utils.error_handler import ServiceNowError
from .utils.logging import get_logger, setup_logging
from .utils.response_formatter import format_records

logger = get_logger(__name__)

# (flag, payload key, help)
_FIELD_OPTIONS = [
    ("--short-description", "short_description", "One-line summary"),
    ("--description", "description", "Full description"),
    ("--category", "category", "hardware or software_service"),
    ("--symptom", "u_symptom", "slow_performance, error_message, crash, unable_to_launch_connect or access_issue"),
    ("--contact-type", "contact_type", "email, call, im, walk-in, non_user_query or self-service"),
    ("--impact", "impact", "1 (high) to 3 (low)"),
    ("--urgency", "urgency", "1 (high) to 3 (low)"),
    ("--priority", "priority", "1 (critical) to 4 (low)"),
    ("--assignment-group", "assignment_group", "Assignment group"),
    ("--assigned-to", "assigned_to", "Assignee"),
    ("--cmdb-ci", "cmdb_ci", "Configuration item"),
    ("--comments", "comments", "Additional comments"),
    ("--work-notes", "work_notes", "Work notes"),
    ("--close-code", "close_code", "Close code"),
    ("--close-notes", "close_notes", "Close notes"),
]


def _add_field_options(parser: argparse.ArgumentParser) -> None:
    for flag, dest, help_text in _FIELD_OPTIONS:
        parser.add_argument(flag, dest=dest, help=help_text)
    parser.add_argument(
        "--caller",
        help="Caller as email, 'Last, First', account name or sys_id",
    )
    parser.add_argument(
        "--suppress-notification",
        dest="u_suppress_notification",
        action="store_true",
        default=None,
        help="Suppress notifications to the caller",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="snow-incident", description="ServiceNow incident and user lookups")
    parser.add_argument("--fields", help="Comma-separated fields to print")
    parser.add_argument(
        "--directory",
        choices=["none", "posix"],
        default="none",
        help="Account directory used to recognize bare requester names",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    user = commands.add_parser("user", help="Look up users")
    by = user.add_mutually_exclusive_group(required=True)
    by.add_argument("--email")
    by.add_argument("--account")
    by.add_argument("--name", help="'Last, First'")
    by.add_argument("--sys-id")

    incident = commands.add_parser("incident", help="Read, create or update incidents")
    actions = incident.add_subparsers(dest="action", required=True)

    get = actions.add_parser("get", help="Find incidents")
    by = get.add_mutually_exclusive_group(required=True)
    by.add_argument("--number")
    by.add_argument("--search", help="Text contained in the short description")
    by.add_argument("--requester", help="Email, 'Last, First', account name or sys_id")

    create = actions.add_parser("create", help="Create an incident")
    _add_field_options(create)

    update = actions.add_parser("update", help="Update an incident")
    update.add_argument("number", help="Incident number")
    update.add_argument("--state", dest="incident_state", help="1, 2, 3, 6, 7 or 8")
    _add_field_options(update)

    return parser


def _user_query(args: argparse.Namespace, directory: Any):
    if args.email:
        return ByEmail(email=args.email)
    if args.account:
        return ByAccountName(account_name=args.account)
    if args.sys_id:
        return ByOpaqueId(sys_id=args.sys_id)
    query = classify_requester(args.name, directory)
    if not isinstance(query, ByFullName):
        raise ValueError("--name must be given as 'Last, First'")
    return query


def _incident_query(args: argparse.Namespace):
    if args.number:
        return ByNumber(number=args.number)
    if args.search:
        return ByShortDescriptionFragment(fragment=args.search)
    return ByRequester(requester=args.requester)


def _collect_fields(args: argparse.Namespace) -> Dict[str, Any]:
    keys = [dest for _, dest, _ in _FIELD_OPTIONS] + ["u_suppress_notification", "incident_state"]
    return {key: getattr(args, key) for key in keys if getattr(args, key, None) is not None}


def run(args: argparse.Namespace, settings: Settings, snow_client: Optional[ServiceNowClient] = None) -> Any:
    """Execute a parsed command and return its records."""
    credential = settings.credential()
    endpoint = settings.endpoint()
    snow_client = snow_client or ServiceNowClient(settings)
    directory = PosixAccountDirectory() if args.directory == "posix" else NullDirectory()
    users = UserClient(snow_client)

    if args.command == "user":
        return users.get(credential, endpoint, _user_query(args, directory))

    incidents = IncidentClient(snow_client, users, directory)
    if args.action == "get":
        return incidents.get(credential, endpoint, _incident_query(args))

    fields = _collect_fields(args)
    # validate before the caller lookup goes out
    (IncidentFields if args.action == "create" else IncidentUpdateFields).parse(fields)
    if args.caller:
        caller = classify_requester(args.caller, directory)
        fields["caller_id"] = resolve_user_sys_id(caller, users.lookup(credential, endpoint))

    if args.action == "create":
        return incidents.create(credential, endpoint, fields)
    return incidents.update(credential, endpoint, args.number, fields)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings()
    setup_logging(log_level=settings.log_level, log_file=settings.log_file, log_json=settings.log_json)

    try:
        result = run(args, settings)
    except ServiceNowError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"error: {e.message}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    fields = [field.strip() for field in args.fields.split(",")] if args.fields else None
    print(format_records(result, fields))
    return 0


if __name__ == "__main__":
    sys.exit(main())
