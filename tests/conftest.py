"""
Test configuration and fixtures.
"""
import os
import sys

import pytest

# Add src directory to Python path
src_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if src_dir not in sys.path:
    sys.path.insert(0, src_dir)

from snow_incident.config import Credential, ServiceNowEndpoint
from tests.test_utils import StubInstance


@pytest.fixture
def credential() -> Credential:
    """Credential used for every stubbed call."""
    return Credential(username="test_user", password="test_pass")


@pytest.fixture
def endpoint() -> ServiceNowEndpoint:
    """Instance host used for every stubbed call."""
    return ServiceNowEndpoint(base_uri="dev12345.service-now.com")


@pytest.fixture
def instance() -> StubInstance:
    """Stub instance with no routes registered."""
    return StubInstance()


def pytest_collection_modifyitems(items):
    """Add markers based on test location and name."""
    for item in items:
        if "cli" in item.nodeid:
            item.add_marker(pytest.mark.cli)
        else:
            item.add_marker(pytest.mark.unit)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "cli: mark test as a command line test")
