"""
Authentication header construction for ServiceNow Table API requests.
"""
import base64
import logging
from typing import Dict

from ..config import Credential
from ..utils.error_handler import EncodingError

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


def _encode_basic(username: str, password: str) -> str:
    auth = f"{username}:{password}"
    try:
        auth_bytes = auth.encode("ascii")
    except UnicodeEncodeError as e:
        logger.error("Credentials for Basic auth must be ASCII")
        raise EncodingError("Username and password must contain only ASCII characters") from e
    return base64.b64encode(auth_bytes).decode("ascii")


def build_headers(credential: Credential, mutating: bool = False) -> Dict[str, str]:
    """
    Build the headers sent with every Table API request.

    Args:
        credential: Username and password for Basic auth
        mutating: Add a JSON Content-Type for POST/PUT requests

    Returns:
        Dictionary of request headers

    Raises:
        EncodingError: If the credential is not ASCII
    """
    return AuthManager(credential).get_headers(mutating=mutating)


class AuthManager:
    """
    Produces request headers for a single credential.
    """

    def __init__(self, credential: Credential):
        self.credential = credential

    def get_auth_header(self) -> Dict[str, str]:
        """
        Get authorization header for ServiceNow API requests.

        Returns:
            Dictionary containing the Authorization header
        """
        b64_auth = _encode_basic(self.credential.username, self.credential.password.get_secret_value())
        return {"Authorization": f"Basic {b64_auth}"}

    def get_headers(self, mutating: bool = False) -> Dict[str, str]:
        """Get complete headers for a request."""
        headers = self.get_auth_header()
        headers["Accept"] = JSON_CONTENT_TYPE
        if mutating:
            headers["Content-Type"] = JSON_CONTENT_TYPE
        return headers
