"""Registry of villages, nodes and capture devices."""

import logging
from datetime import datetime
from typing import Any, Dict, Optional, Tuple, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gatekeeper.core.errors import DuplicateId, ForeignKeyViolation, NotFound, coerce
from gatekeeper.db.base import atomic
from gatekeeper.models.topology import Device, Node, Village
from gatekeeper.repositories.topology_repo import DeviceRepository, NodeRepository, VillageRepository
from gatekeeper.schemas.topology import DeviceCreate, NodeCreate, VillageCreate

logger = logging.getLogger(__name__)


class TopologyRegistry:
    """
    Village -> Node -> Device hierarchy.

    The entry ledger resolves every submitting device through here: a
    device must hang off a node, and the node off a village, before it
    may record events.
    """

    def __init__(self, db: Session):
        self.db = db
        self.villages = VillageRepository(db)
        self.nodes = NodeRepository(db)
        self.devices = DeviceRepository(db)

    def _insert(self, obj, kind: str):
        if obj.id and self.db.get(type(obj), obj.id) is not None:
            raise DuplicateId(f"{kind} {obj.id} already exists", details={"id": obj.id})
        try:
            with atomic(self.db):
                self.db.add(obj)
                self.db.flush()
        except IntegrityError as e:
            raise DuplicateId(f"{kind} conflicts with an existing record", details={"error": str(e.orig)}) from e
        logger.info(f"Registered {kind.lower()} {obj.id}")
        return obj

    def create_village(self, data: Union[VillageCreate, Dict[str, Any]]) -> Village:
        data = coerce(VillageCreate, data)
        return self._insert(Village(**data.model_dump(exclude_none=True)), "Village")

    def create_node(self, data: Union[NodeCreate, Dict[str, Any]]) -> Node:
        """
        Raises:
            ForeignKeyViolation: village does not exist
        """
        data = coerce(NodeCreate, data)
        if not self.villages.exists(data.village_id):
            raise ForeignKeyViolation(
                f"Village {data.village_id} does not exist",
                details={"village_id": data.village_id},
            )
        return self._insert(Node(**data.model_dump(exclude_none=True)), "Node")

    def register_device(self, data: Union[DeviceCreate, Dict[str, Any]]) -> Device:
        """
        Register a capture device. ``node_id`` may be omitted for auth-only
        devices, which can authenticate but never record entries.

        Raises:
            ForeignKeyViolation: node does not exist
            DuplicateId: id or certificate fingerprint already registered
        """
        data = coerce(DeviceCreate, data)
        if data.node_id is not None and not self.nodes.exists(data.node_id):
            raise ForeignKeyViolation(f"Node {data.node_id} does not exist", details={"node_id": data.node_id})
        if data.cert_fingerprint and self.devices.get_by_cert_fingerprint(data.cert_fingerprint):
            raise DuplicateId(
                "Certificate fingerprint already registered",
                details={"cert_fingerprint": data.cert_fingerprint},
            )
        return self._insert(Device(**data.model_dump(exclude_none=True)), "Device")

    def get_device(self, device_id: str) -> Device:
        device = self.devices.get(device_id)
        if device is None:
            raise NotFound(f"Device {device_id} not found", details={"device_id": device_id})
        return device

    def resolve_device(self, device_id: str) -> Tuple[Device, Node, Village]:
        """
        Resolve a device to its node and village.

        Raises:
            ForeignKeyViolation: unknown device, or device not attached to a
                node in an existing village
        """
        resolved = self.devices.get_with_topology(device_id)
        if resolved is None:
            raise ForeignKeyViolation(f"Device {device_id} does not exist", details={"device_id": device_id})

        device, node, village = resolved
        if node is None or village is None:
            raise ForeignKeyViolation(
                f"Device {device_id} is not attached to a node",
                details={"device_id": device_id, "node_id": device.node_id},
            )
        return device, node, village

    def touch_device(self, device_id: str, seen_at: Optional[datetime] = None) -> Device:
        """Record that a device was just seen."""
        with atomic(self.db):
            device = self.get_device(device_id)
            device.last_seen_at = seen_at or datetime.utcnow()
            self.db.flush()
        return device
