"""Error taxonomy and HTTP status mapping."""
import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)


class ServiceNowError(Exception):
    """Base error for ServiceNow API interactions."""

    def __init__(self, message: str, status_code: Optional[int] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details or {}


class AuthenticationError(ServiceNowError):
    """Credentials were rejected by the instance (HTTP 401)."""


class NotFoundError(ServiceNowError):
    """A lookup matched no records."""


class UserNotFoundError(NotFoundError):
    """A user lookup matched no records."""


class AmbiguousUserError(ServiceNowError):
    """A user lookup matched more than one record."""

    def __init__(self, message: str, matches: int, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details=details)
        self.matches = matches


class InvalidFieldError(ServiceNowError, ValueError):
    """A field value is outside the set the Table API recognizes."""


class EncodingError(ServiceNowError, ValueError):
    """Credentials cannot be encoded into a Basic auth header."""


class TransportError(ServiceNowError):
    """The request never produced an HTTP response."""


class RemoteError(ServiceNowError):
    """Any other non-success response from the instance."""


def _error_message(response: httpx.Response) -> str:
    """Pull the ServiceNow error message out of a response body."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase

    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        message = error.get("message") or ""
        detail = error.get("detail")
        if detail and isinstance(detail, str):
            return f"{message}: {detail}" if message else detail
        if message:
            return message
    return response.text or response.reason_phrase


def handle_http_error(response: httpx.Response, item_type: str, method: str = "", url: str = "") -> None:
    """
    Raise the typed error matching a non-success response.

    Args:
        response: Response returned by the instance
        item_type: Type of item being handled (e.g., "incident", "user")
        method: HTTP method of the failed request
        url: URL of the failed request

    Raises:
        AuthenticationError: For 401 responses
        NotFoundError: For 404 responses
        RemoteError: For any other non-2xx response
    """
    if response.is_success:
        return

    status_code = response.status_code
    message = _error_message(response)
    details = {"url": url, "method": method}
    logger.error("HTTP %s for %s: %s", status_code, item_type, message)

    if status_code == 401:
        raise AuthenticationError(f"Authentication failed: {message}", status_code, details)
    if status_code == 404:
        raise NotFoundError(f"{item_type.title()} not found: {message}", status_code, details)
    raise RemoteError(f"Failed to access {item_type} (HTTP {status_code}): {message}", status_code, details)


def handle_network_error(e: httpx.TransportError, item_type: str) -> TransportError:
    """
    Convert a transport failure into a TransportError.

    Args:
        e: Network error raised by httpx
        item_type: Type of item being handled

    Returns:
        The error to raise
    """
    logger.error("Network error for %s: %s", item_type, str(e))
    return TransportError(
        f"Network error while accessing {item_type}: {str(e)}",
        details={"type": e.__class__.__name__},
    )
