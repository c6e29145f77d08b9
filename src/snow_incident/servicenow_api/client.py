"""
Thin ServiceNow HTTP client used by the table clients.

Provides get/post/put methods that:
- Send the headers built by the caller
- Use an injected httpx.Client, or a short-lived one with secure defaults
- Retry transport failures with tenacity; POST is only retried when the
  connection was never made, so a create is never sent twice
- Raise typed errors for non-2xx responses and unwrap the result envelope
"""
import logging
import time
from typing import Any, Dict, Optional

import httpx
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..config import Settings
from ..utils.error_handler import RemoteError, handle_http_error, handle_network_error

logger = logging.getLogger(__name__)

# Methods that may be re-sent after the request left the client
IDEMPOTENT_METHODS = frozenset({"GET", "PUT"})

# The request never reached the instance, so any method may be re-sent
UNSENT_ERRORS = (httpx.ConnectError, httpx.ConnectTimeout)


class ServiceNowClient:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.Client] = None,
        retry_wait: Any = None,
    ):
        """
        Args:
            settings: Timeout, retry and TLS settings
            http_client: Client to send requests with; the caller owns it
            retry_wait: tenacity wait strategy between transport retries
        """
        self.settings = settings or Settings()
        self.http_client = http_client
        self.retry_wait = retry_wait or wait_exponential(multiplier=1, min=1, max=10)

    def _client(self) -> httpx.Client:
        return httpx.Client(
            timeout=self.settings.timeout,
            verify=self.settings.verify_ssl,
        )

    def _send(self, method: str, url: str, headers: Dict[str, str], json: Optional[Dict[str, Any]]) -> httpx.Response:
        if self.http_client is not None:
            return self.http_client.request(method, url, headers=headers, json=json)
        with self._client() as client:
            return client.request(method, url, headers=headers, json=json)

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: Dict[str, str],
        json: Optional[Dict[str, Any]] = None,
        item_type: str = "record",
    ) -> Any:
        """
        Send one request and return the unwrapped ``result``.

        Args:
            method: HTTP method
            url: Full request URL, query string included
            headers: Request headers
            json: JSON request body
            item_type: Type of record, used in error messages

        Returns:
            The ``result`` member of the response envelope

        Raises:
            AuthenticationError: For 401 responses
            NotFoundError: For 404 responses
            RemoteError: For other non-2xx responses or a malformed envelope
            TransportError: When no response was received after all retries
        """
        logger.info("%s %s", method, url)
        if json is not None:
            logger.debug("Request body: %s", json)

        retryer = Retrying(
            stop=stop_after_attempt(self.settings.max_retries),
            wait=self.retry_wait,
            retry=retry_if_exception_type(
                httpx.TransportError if method.upper() in IDEMPOTENT_METHODS else UNSENT_ERRORS
            ),
            before_sleep=lambda state: logger.warning(
                "Network error on attempt %d, retrying: %s", state.attempt_number, state.outcome.exception()
            ),
            reraise=True,
        )

        start_time = time.time()
        try:
            response = retryer(self._send, method, url, headers, json)
        except httpx.TransportError as e:
            raise handle_network_error(e, item_type) from e
        duration = time.time() - start_time
        logger.info("%s %s completed in %.2fs with status %s", method, url, duration, response.status_code)

        handle_http_error(response, item_type, method=method, url=url)

        try:
            data = response.json()
        except ValueError as e:
            raise RemoteError(
                f"Invalid JSON response for {item_type}: {str(e)}", response.status_code
            ) from e
        logger.debug("Response data: %s", data)

        if not isinstance(data, dict) or "result" not in data:
            raise RemoteError(
                f"Response for {item_type} has no result envelope", response.status_code, {"body": data}
            )
        return data["result"]

    def get(self, url: str, *, headers: Dict[str, str], item_type: str = "record") -> Any:
        return self.request("GET", url, headers=headers, item_type=item_type)

    def post(self, url: str, *, json: Dict[str, Any], headers: Dict[str, str], item_type: str = "record") -> Any:
        return self.request("POST", url, headers=headers, json=json, item_type=item_type)

    def put(self, url: str, *, json: Dict[str, Any], headers: Dict[str, str], item_type: str = "record") -> Any:
        return self.request("PUT", url, headers=headers, json=json, item_type=item_type)
