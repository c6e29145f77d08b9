"""
User lookups against the sys_user table.
"""
import logging
from typing import Any, Dict, List, Optional

from ..auth.auth_manager import AuthManager
from ..config import Credential, ServiceNowEndpoint
from ..servicenow_api.client import ServiceNowClient
from ..servicenow_api.query import encode_query
from ..utils.error_handler import UserNotFoundError
from ..utils.response_formatter import as_record_list
from .filters import UserLookup, UserQuery, resolve_user

logger = logging.getLogger(__name__)

USER_TABLE = "sys_user"


class UserClient:
    """Read-only access to ServiceNow users."""

    def __init__(self, snow_client: Optional[ServiceNowClient] = None):
        self.snow_client = snow_client or ServiceNowClient()

    def get(self, credential: Credential, endpoint: ServiceNowEndpoint, query: UserQuery) -> List[Dict[str, Any]]:
        """
        Get the users matching an identifier.

        Args:
            credential: Basic auth credential
            endpoint: ServiceNow instance
            query: ByAccountName, ByEmail, ByFullName or ByOpaqueId

        Returns:
            List of sys_user records

        Raises:
            UserNotFoundError: If no user matches
        """
        headers = AuthManager(credential).get_headers()
        url = f"{endpoint.api_url}/{USER_TABLE}?{encode_query(resolve_user(query))}"
        logger.info("Getting users by %s", type(query).__name__)

        users = as_record_list(self.snow_client.get(url, headers=headers, item_type="user"))
        if not users:
            raise UserNotFoundError(f"No user matches {query!r}", details={"url": url})
        return users

    def lookup(self, credential: Credential, endpoint: ServiceNowEndpoint) -> UserLookup:
        """Bind credential and endpoint into a single-argument user lookup."""

        def lookup_user(query: UserQuery) -> List[Dict[str, Any]]:
            return self.get(credential, endpoint, query)

        return lookup_user
