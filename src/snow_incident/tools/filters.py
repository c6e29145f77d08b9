"""
Resolution of user and incident identifiers into Table API filters.

A requester can be given as an email, a ``"Last, First"`` name, a
directory account name or a ``sys_id``. Strings are classified in that
order; anything that is not recognized is assumed to be a ``sys_id``
already, so opaque identifiers always work.
"""
import logging
import sys
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, Union, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..servicenow_api.query import LIKE, TableQueryFilter
from ..utils.error_handler import AmbiguousUserError, InvalidFieldError, NotFoundError, UserNotFoundError

if sys.platform != "win32":
    import pwd
else:
    pwd = None

logger = logging.getLogger(__name__)


class _Identifier(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)


class ByAccountName(_Identifier):
    """Identify a user by ``user_name``."""

    account_name: str = Field(..., min_length=1, description="Account name (user_name)")


class ByEmail(_Identifier):
    """Identify a user by email address."""

    email: str = Field(..., min_length=3, pattern=r"@", description="Email address")


class ByFullName(_Identifier):
    """Identify a user by first and last name."""

    first_name: str = Field(..., min_length=1, description="First name")
    last_name: str = Field(..., min_length=1, description="Last name")


class ByOpaqueId(_Identifier):
    """Identify a user by ``sys_id``."""

    sys_id: str = Field(..., min_length=1, description="User sys_id")


UserQuery = Union[ByAccountName, ByEmail, ByFullName, ByOpaqueId]


class ByNumber(_Identifier):
    """Identify an incident by its number, e.g. INC0010165."""

    number: str = Field(..., min_length=1, description="Incident number")


class ByShortDescriptionFragment(_Identifier):
    """Match incidents whose short description contains a fragment."""

    fragment: str = Field(..., min_length=1, description="Text contained in short_description")


class ByRequester(_Identifier):
    """Match incidents logged for a caller."""

    requester: Union[ByAccountName, ByEmail, ByFullName, ByOpaqueId, str] = Field(
        ..., description="Email, 'Last, First', account name, sys_id, or a user identifier"
    )


IncidentQuery = Union[ByNumber, ByShortDescriptionFragment, ByRequester]

UserLookup = Callable[[UserQuery], List[Dict[str, Any]]]


@runtime_checkable
class DirectoryLookup(Protocol):
    """Answers whether an account name is known to a directory."""

    def account_exists(self, name: str) -> bool:
        ...


class NullDirectory:
    """Directory that knows no accounts."""

    def account_exists(self, name: str) -> bool:
        return False


class StaticDirectory:
    """Directory backed by a fixed set of account names (case-insensitive)."""

    def __init__(self, accounts: Iterable[str]):
        self.accounts = {account.lower() for account in accounts}

    def account_exists(self, name: str) -> bool:
        return name.lower() in self.accounts


class PosixAccountDirectory:
    """Directory backed by the local POSIX account database."""

    def account_exists(self, name: str) -> bool:
        if pwd is None:
            return False
        try:
            pwd.getpwnam(name)
        except KeyError:
            return False
        return True


@dataclass(frozen=True)
class ResolvedQuery:
    """A filter plus the record limit to request with it."""

    filter: TableQueryFilter
    limit: Optional[int] = None


def resolve_user(query: UserQuery) -> TableQueryFilter:
    """
    Build the sys_user filter for a user identifier.

    Args:
        query: One user identifier

    Returns:
        Filter selecting the user
    """
    if isinstance(query, ByAccountName):
        return TableQueryFilter.where("user_name", query.account_name)
    if isinstance(query, ByEmail):
        return TableQueryFilter.where("email", query.email)
    if isinstance(query, ByFullName):
        return TableQueryFilter.where("first_name", query.first_name).and_where("last_name", query.last_name)
    if isinstance(query, ByOpaqueId):
        return TableQueryFilter.where("sys_id", query.sys_id)
    raise TypeError(f"Unsupported user identifier: {type(query).__name__}")


def classify_requester(requester: str, directory: Optional[DirectoryLookup] = None) -> UserQuery:
    """
    Decide what kind of user identifier a requester string is.

    Args:
        requester: Email, "Last, First", account name or sys_id
        directory: Account existence check; unknown names fall through to sys_id

    Returns:
        The user identifier to look up, or ByOpaqueId for a sys_id

    Raises:
        InvalidFieldError: For an empty requester, or a name missing either half
    """
    requester = requester.strip()
    if not requester:
        raise InvalidFieldError("Requester must not be empty")

    try:
        if "@" in requester:
            return ByEmail(email=requester)

        if "," in requester:
            last_name, first_name = requester.split(",", 1)
            return ByFullName(first_name=first_name.strip(), last_name=last_name.strip())
    except ValidationError as e:
        raise InvalidFieldError(
            f"Requester {requester!r} is not a valid email or 'Last, First' name",
            details={"requester": requester},
        ) from e

    if directory is not None and directory.account_exists(requester):
        return ByAccountName(account_name=requester)

    return ByOpaqueId(sys_id=requester)


def resolve_user_sys_id(query: UserQuery, lookup_user: UserLookup) -> str:
    """
    Get the sys_id of exactly one user.

    Raises:
        UserNotFoundError: If no user matches
        AmbiguousUserError: If more than one user matches
    """
    if isinstance(query, ByOpaqueId):
        return query.sys_id

    try:
        users = lookup_user(query)
    except UserNotFoundError:
        raise
    except NotFoundError as e:
        raise UserNotFoundError(f"No user matches {query!r}", e.status_code, e.details) from e

    if not users:
        raise UserNotFoundError(f"No user matches {query!r}")
    if len(users) > 1:
        raise AmbiguousUserError(f"{len(users)} users match {query!r}", matches=len(users))

    sys_id = users[0].get("sys_id")
    if not sys_id:
        raise UserNotFoundError(f"User matching {query!r} has no sys_id")
    return sys_id


def resolve_incident(
    query: IncidentQuery,
    lookup_user: UserLookup,
    directory: Optional[DirectoryLookup] = None,
) -> ResolvedQuery:
    """
    Build the incident filter for an incident identifier.

    Requester lookups call ``lookup_user`` once to turn the requester into a
    sys_id before the incident query is built.

    Args:
        query: One incident identifier
        lookup_user: Returns the sys_user records matching a user identifier
        directory: Account existence check for bare requester names

    Returns:
        Filter and record limit
    """
    if isinstance(query, ByNumber):
        return ResolvedQuery(TableQueryFilter.where("number", query.number), limit=1)

    if isinstance(query, ByShortDescriptionFragment):
        return ResolvedQuery(TableQueryFilter.where("short_description", query.fragment, operator=LIKE))

    if isinstance(query, ByRequester):
        requester = query.requester
        if isinstance(requester, str):
            user_query = classify_requester(requester, directory)
        else:
            user_query = requester
        logger.debug("Requester resolved as %s", type(user_query).__name__)
        sys_id = resolve_user_sys_id(user_query, lookup_user)
        return ResolvedQuery(TableQueryFilter.where("caller_id", sys_id))

    raise TypeError(f"Unsupported incident identifier: {type(query).__name__}")
