"""
Tests for the ServiceNow HTTP client.
"""
import json
from unittest.mock import MagicMock, patch

import httpx
import pytest
from tenacity import wait_none

from snow_incident.config import Settings
from snow_incident.servicenow_api.client import ServiceNowClient
from snow_incident.utils.error_handler import (
    AuthenticationError,
    NotFoundError,
    RemoteError,
    TransportError,
)

URL = "https://dev12345.service-now.com/api/now/table/incident"
HEADERS = {"Accept": "application/json"}


def _client(handler, max_retries: int = 3) -> ServiceNowClient:
    return ServiceNowClient(
        Settings(_env_file=None, max_retries=max_retries),
        http_client=httpx.Client(transport=httpx.MockTransport(handler)),
        retry_wait=wait_none(),
    )


def test_unwraps_result():
    client = _client(lambda request: httpx.Response(200, json={"result": {"number": "INC0010165"}}))

    assert client.get(URL, headers=HEADERS) == {"number": "INC0010165"}


def test_sends_json_body():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(201, json={"result": {"sys_id": "abc123"}})

    client = _client(handler)
    client.post(URL, json={"impact": 2}, headers=HEADERS)

    assert seen[0].method == "POST"
    assert json.loads(seen[0].content) == {"impact": 2}


def test_retries_transport_errors_then_succeeds():
    attempts = []

    def handler(request):
        attempts.append(request)
        if len(attempts) < 3:
            raise httpx.ReadTimeout("timed out", request=request)
        return httpx.Response(200, json={"result": []})

    assert _client(handler, max_retries=3).get(URL, headers=HEADERS) == []
    assert len(attempts) == 3


def test_gives_up_after_max_retries():
    attempts = []

    def handler(request):
        attempts.append(request)
        raise httpx.ConnectError("Connection refused", request=request)

    with pytest.raises(TransportError) as excinfo:
        _client(handler, max_retries=2).get(URL, headers=HEADERS)

    assert len(attempts) == 2
    assert "Connection refused" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)


@pytest.mark.parametrize("method,attempts", [("GET", 3), ("PUT", 3), ("POST", 1)])
def test_read_timeouts_retried_only_for_idempotent_methods(method, attempts):
    seen = []

    def handler(request):
        seen.append(request)
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(TransportError):
        _client(handler, max_retries=3).request(method, URL, headers=HEADERS, json={"impact": 2})

    assert len(seen) == attempts


def test_status_errors_are_not_retried():
    attempts = []

    def handler(request):
        attempts.append(request)
        return httpx.Response(503, text="Service Unavailable")

    with pytest.raises(RemoteError) as excinfo:
        _client(handler).get(URL, headers=HEADERS)

    assert len(attempts) == 1
    assert excinfo.value.status_code == 503
    assert "Service Unavailable" in str(excinfo.value)


@pytest.mark.parametrize("status_code,error", [
    (401, AuthenticationError),
    (404, NotFoundError),
    (403, RemoteError),
    (400, RemoteError),
])
def test_status_mapping(status_code, error):
    client = _client(lambda request: httpx.Response(status_code, json={"error": {"message": "nope"}}))

    with pytest.raises(error) as excinfo:
        client.get(URL, headers=HEADERS)

    assert excinfo.value.status_code == status_code
    assert excinfo.value.details["url"] == URL


@pytest.mark.parametrize("response", [
    httpx.Response(200, text="<html>login</html>"),
    httpx.Response(200, json={"records": []}),
    httpx.Response(200, json=[{"number": "INC0010165"}]),
])
def test_malformed_envelope(response):
    client = _client(lambda request: response)

    with pytest.raises(RemoteError):
        client.get(URL, headers=HEADERS)


def test_short_lived_client_uses_settings():
    """Without an injected client, one is created per request and closed"""
    response = httpx.Response(200, json={"result": []})
    http_client = MagicMock()
    http_client.request.return_value = response
    http_client.__enter__.return_value = http_client
    http_client.__exit__.return_value = False

    settings = Settings(_env_file=None, timeout=5, verify_ssl=False)
    with patch("snow_incident.servicenow_api.client.httpx.Client", return_value=http_client) as factory:
        assert ServiceNowClient(settings).get(URL, headers=HEADERS) == []

    factory.assert_called_once_with(timeout=5, verify=False)
    http_client.request.assert_called_once_with("GET", URL, headers=HEADERS, json=None)
    http_client.__exit__.assert_called_once()
