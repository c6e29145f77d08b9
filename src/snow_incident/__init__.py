"""Client for the ServiceNow Table API incident and sys_user tables."""
from .auth.auth_manager import AuthManager, build_headers
from .config import Credential, ServiceNowEndpoint, Settings
from .servicenow_api.client import ServiceNowClient
from .servicenow_api.query import TableQueryFilter, encode_query
from .tools.filters import (
    ByAccountName,
    ByEmail,
    ByFullName,
    ByNumber,
    ByOpaqueId,
    ByRequester,
    ByShortDescriptionFragment,
    DirectoryLookup,
    NullDirectory,
    PosixAccountDirectory,
    StaticDirectory,
    classify_requester,
    resolve_incident,
    resolve_user,
)
from .tools.incident import (
    Category,
    ContactType,
    Impact,
    IncidentClient,
    IncidentFields,
    IncidentState,
    IncidentUpdateFields,
    Priority,
    Symptom,
    Urgency,
)
from .tools.user import UserClient
from .utils.error_handler import (
    AmbiguousUserError,
    AuthenticationError,
    EncodingError,
    InvalidFieldError,
    NotFoundError,
    RemoteError,
    ServiceNowError,
    TransportError,
    UserNotFoundError,
)

__version__ = "0.1.0"
