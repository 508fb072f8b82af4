"""
Integration test configuration
"""
import pytest
from fastapi.testclient import TestClient

from gatekeeper.app.main import app
from gatekeeper.db.base import get_db


@pytest.fixture
def client(session_factory):
    """FastAPI test client with one fresh session per request."""
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    test_client = TestClient(app)
    yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def api():
    return "/api/v1"


@pytest.fixture
def topology(client, api):
    """Village -> node -> gate device created through the API."""
    assert client.post(f"{api}/topology/villages", json={"id": "village-1", "name": "Poonch"}).status_code == 201
    assert client.post(
        f"{api}/topology/nodes",
        json={"id": "node-1", "village_id": "village-1", "node_name": "Main Gate", "node_type": "gate"},
    ).status_code == 201
    response = client.post(
        f"{api}/topology/devices",
        json={"id": "device-1", "node_id": "node-1", "device_name": "Main Gate Device", "device_type": "gate"},
    )
    assert response.status_code == 201
    return response.json()
