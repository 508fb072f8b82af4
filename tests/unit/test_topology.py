from datetime import datetime

import pytest

from gatekeeper.core.errors import DuplicateId, ForeignKeyViolation, NotFound
from gatekeeper.services import TopologyRegistry


@pytest.fixture
def registry(db_session):
    return TopologyRegistry(db_session)


def test_resolve_device_walks_to_village(registry, gate_device):
    device, node, village = registry.resolve_device("device-1")

    assert device.id == "device-1"
    assert node.id == "node-1"
    assert village.name == "Poonch"


def test_resolve_unknown_or_auth_only_device(registry, gate_device):
    registry.register_device({"id": "console", "device_name": "Console", "device_type": "admin"})

    with pytest.raises(ForeignKeyViolation):
        registry.resolve_device("missing")
    with pytest.raises(ForeignKeyViolation):
        registry.resolve_device("console")


def test_node_requires_existing_village(registry):
    with pytest.raises(ForeignKeyViolation):
        registry.create_node({"village_id": "nowhere", "node_name": "Gate"})


def test_device_requires_existing_node(registry):
    with pytest.raises(ForeignKeyViolation):
        registry.register_device({"node_id": "nowhere", "device_name": "Gate", "device_type": "gate"})


def test_duplicate_ids_and_certificates(registry, gate_device):
    with pytest.raises(DuplicateId):
        registry.create_village({"id": "village-1", "name": "Again"})

    registry.register_device({"device_name": "Tablet", "device_type": "tablet", "node_id": "node-1", "cert_fingerprint": "ab:cd"})
    with pytest.raises(DuplicateId):
        registry.register_device({"device_name": "Clone", "device_type": "tablet", "cert_fingerprint": "ab:cd"})


def test_touch_device(registry, gate_device):
    seen = datetime(2026, 3, 1, 10, 0)

    device = registry.touch_device("device-1", seen_at=seen)

    assert device.last_seen_at == seen
    with pytest.raises(NotFound):
        registry.touch_device("missing")
