"""Fixtures for API tests: a TestClient over an in-memory chain."""

import pytest
from fastapi.testclient import TestClient

from dexroute.api.endpoints import get_service
from dexroute.api.main import app
from tests.helpers import make_service


@pytest.fixture
def service(funded_chain):
    return make_service(funded_chain)


@pytest.fixture
def client(service):
    """Test client whose endpoints use the in-memory service."""
    app.dependency_overrides[get_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()
