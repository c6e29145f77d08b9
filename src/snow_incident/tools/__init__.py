from .filters import (
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
from .incident import IncidentClient, IncidentFields, IncidentUpdateFields
from .user import UserClient
