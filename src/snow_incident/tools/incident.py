"""
Incident lookups, creation and updates against the incident table.
"""
import logging
from enum import Enum, IntEnum
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..auth.auth_manager import AuthManager
from ..config import Credential, ServiceNowEndpoint
from ..servicenow_api.client import ServiceNowClient
from ..servicenow_api.query import encode_query
from ..utils.error_handler import InvalidFieldError, NotFoundError, RemoteError
from ..utils.response_formatter import as_record_list
from .filters import ByNumber, DirectoryLookup, IncidentQuery, NullDirectory, resolve_incident
from .user import UserClient

logger = logging.getLogger(__name__)

INCIDENT_TABLE = "incident"


class Category(str, Enum):
    HARDWARE = "hardware"
    SOFTWARE_SERVICE = "software_service"


class Symptom(str, Enum):
    SLOW_PERFORMANCE = "slow_performance"
    ERROR_MESSAGE = "error_message"
    CRASH = "crash"
    UNABLE_TO_LAUNCH_CONNECT = "unable_to_launch_connect"
    ACCESS_ISSUE = "access_issue"


class ContactType(str, Enum):
    EMAIL = "email"
    CALL = "call"
    IM = "im"
    WALK_IN = "walk-in"
    NON_USER_QUERY = "non_user_query"
    SELF_SERVICE = "self-service"


class Impact(IntEnum):
    HIGH = 1
    MEDIUM = 2
    LOW = 3


class Urgency(IntEnum):
    HIGH = 1
    MEDIUM = 2
    LOW = 3


class Priority(IntEnum):
    CRITICAL = 1
    HIGH = 2
    MODERATE = 3
    LOW = 4


class IncidentState(IntEnum):
    NEW = 1
    IN_PROGRESS = 2
    ON_HOLD = 3
    RESOLVED = 6
    CLOSED = 7
    CANCELED = 8


def _enum_number(value: Any) -> Any:
    # bool and float would otherwise coerce silently to 1 or 2
    if isinstance(value, (bool, float)):
        raise ValueError(f"expected an integer code, got {value!r}")
    if isinstance(value, str) and value.strip().isdigit():
        return int(value)
    return value


def _validation_message(e: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in error['loc']) or 'fields'}: {error['msg']}" for error in e.errors()
    )


class IncidentFields(BaseModel):
    """Fields accepted when creating an incident. Unset fields are never sent."""

    model_config = ConfigDict(extra="forbid")

    caller_id: Optional[str] = Field(None, description="sys_id of the caller")
    short_description: Optional[str] = Field(None, description="One-line summary")
    description: Optional[str] = Field(None, description="Full description")
    category: Optional[Category] = None
    u_symptom: Optional[Symptom] = None
    contact_type: Optional[ContactType] = None
    impact: Optional[Impact] = None
    urgency: Optional[Urgency] = None
    priority: Optional[Priority] = None
    assignment_group: Optional[str] = None
    assigned_to: Optional[str] = None
    cmdb_ci: Optional[str] = Field(None, description="Configuration item")
    comments: Optional[str] = Field(None, description="Additional comments, visible to the caller")
    work_notes: Optional[str] = None
    close_code: Optional[str] = None
    close_notes: Optional[str] = None
    u_suppress_notification: Optional[bool] = Field(None, description="Suppress notifications to the caller")

    @field_validator("impact", "urgency", "priority", mode="before")
    @classmethod
    def _numeric_codes(cls, value: Any) -> Any:
        return _enum_number(value)

    @classmethod
    def parse(cls, fields: Union["IncidentFields", Mapping[str, Any]]) -> "IncidentFields":
        """
        Validate caller-supplied fields.

        Raises:
            InvalidFieldError: For unknown fields or values outside the enumerations
        """
        if type(fields) is cls:
            return fields
        if isinstance(fields, BaseModel):
            fields = fields.model_dump(exclude_unset=True)
        try:
            return cls.model_validate(dict(fields))
        except ValidationError as e:
            logger.error("Invalid incident fields: %s", _validation_message(e))
            raise InvalidFieldError(
                f"Invalid incident fields: {_validation_message(e)}",
                details={"errors": e.errors(include_url=False)},
            ) from e

    def to_payload(self) -> Dict[str, Any]:
        """JSON body holding only the fields that were set."""
        return self.model_dump(mode="json", exclude_unset=True, exclude_none=True)


class IncidentUpdateFields(IncidentFields):
    """Fields accepted when updating an incident."""

    incident_state: Optional[IncidentState] = None

    @field_validator("incident_state", mode="before")
    @classmethod
    def _numeric_state(cls, value: Any) -> Any:
        return _enum_number(value)


def _single_record(result: Any) -> Dict[str, Any]:
    records = as_record_list(result)
    if not records:
        raise RemoteError("Response did not contain an incident record", details={"body": result})
    return records[0]


class IncidentClient:
    """Read, create and update ServiceNow incidents."""

    def __init__(
        self,
        snow_client: Optional[ServiceNowClient] = None,
        user_client: Optional[UserClient] = None,
        directory: Optional[DirectoryLookup] = None,
    ):
        self.snow_client = snow_client or ServiceNowClient()
        self.user_client = user_client or UserClient(self.snow_client)
        self.directory = directory or NullDirectory()

    def get(self, credential: Credential, endpoint: ServiceNowEndpoint, query: IncidentQuery) -> List[Dict[str, Any]]:
        """
        Get the incidents matching an identifier.

        Args:
            credential: Basic auth credential
            endpoint: ServiceNow instance
            query: ByNumber, ByShortDescriptionFragment or ByRequester

        Returns:
            List of incident records

        Raises:
            NotFoundError: If no incident matches
            UserNotFoundError: If a requester matches no user
            AmbiguousUserError: If a requester matches several users
        """
        headers = AuthManager(credential).get_headers()
        resolved = resolve_incident(query, self.user_client.lookup(credential, endpoint), self.directory)
        url = f"{endpoint.api_url}/{INCIDENT_TABLE}?{encode_query(resolved.filter, resolved.limit)}"
        logger.info("Getting incidents by %s", type(query).__name__)

        incidents = as_record_list(self.snow_client.get(url, headers=headers, item_type="incident"))
        if not incidents:
            raise NotFoundError(f"No incident matches {query!r}", details={"url": url})
        return incidents

    def create(
        self,
        credential: Credential,
        endpoint: ServiceNowEndpoint,
        fields: Union[IncidentFields, Mapping[str, Any]],
    ) -> Dict[str, Any]:
        """
        Create an incident from the supplied fields only.

        Raises:
            InvalidFieldError: Before any request, for invalid fields
        """
        payload = IncidentFields.parse(fields).to_payload()
        headers = AuthManager(credential).get_headers(mutating=True)
        logger.info("Creating incident with fields: %s", sorted(payload))

        result = self.snow_client.post(
            f"{endpoint.api_url}/{INCIDENT_TABLE}", json=payload, headers=headers, item_type="incident"
        )
        incident = _single_record(result)
        logger.info("Created incident %s", incident.get("number"))
        return incident

    def update(
        self,
        credential: Credential,
        endpoint: ServiceNowEndpoint,
        incident_number: str,
        fields: Union[IncidentFields, Mapping[str, Any]],
    ) -> Dict[str, Any]:
        """
        Update the supplied fields of an incident, leaving the others untouched.

        The incident number is resolved to a sys_id first; nothing is sent
        if that lookup fails.

        Raises:
            InvalidFieldError: Before any request, for invalid or no fields
            NotFoundError: If the incident number matches nothing
        """
        payload = IncidentUpdateFields.parse(fields).to_payload()
        if not payload:
            raise InvalidFieldError("No incident fields to update")
        headers = AuthManager(credential).get_headers(mutating=True)

        incident = self.get(credential, endpoint, ByNumber(number=incident_number))[0]
        sys_id = incident.get("sys_id")
        if not sys_id:
            raise NotFoundError(f"Incident {incident_number} has no sys_id")

        logger.info("Updating incident %s with fields: %s", incident_number, sorted(payload))
        result = self.snow_client.put(
            f"{endpoint.api_url}/{INCIDENT_TABLE}/{sys_id}", json=payload, headers=headers, item_type="incident"
        )
        return _single_record(result)
