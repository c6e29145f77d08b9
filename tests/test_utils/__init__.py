"""Test utilities for the ServiceNow table client."""

from .snow_client import StubInstance, sysparm_query
from .mock_data import (
    MOCK_AUTH_ERROR,
    MOCK_EMPTY_ENVELOPE,
    MOCK_INCIDENT_DATA,
    MOCK_INCIDENT_ENVELOPE,
    MOCK_OTHER_USER_DATA,
    MOCK_SERVER_ERROR,
    MOCK_USER_DATA,
    MOCK_USER_ENVELOPE,
)

__all__ = [
    'StubInstance',
    'sysparm_query',
    'MOCK_AUTH_ERROR',
    'MOCK_EMPTY_ENVELOPE',
    'MOCK_INCIDENT_DATA',
    'MOCK_INCIDENT_ENVELOPE',
    'MOCK_OTHER_USER_DATA',
    'MOCK_SERVER_ERROR',
    'MOCK_USER_DATA',
    'MOCK_USER_ENVELOPE',
]
