"""Village, node and device repositories."""
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from gatekeeper.models.topology import Device, Node, Village
from .base import BaseRepository


class VillageRepository(BaseRepository[Village]):

    def __init__(self, db: Session):
        super().__init__(Village, db)


class NodeRepository(BaseRepository[Node]):

    def __init__(self, db: Session):
        super().__init__(Node, db)


class DeviceRepository(BaseRepository[Device]):

    def __init__(self, db: Session):
        super().__init__(Device, db)

    def get_by_cert_fingerprint(self, cert_fingerprint: str) -> Optional[Device]:
        return self.db.query(Device).filter(Device.cert_fingerprint == cert_fingerprint).first()

    def get_with_topology(self, device_id: str) -> Optional[Tuple[Device, Optional[Node], Optional[Village]]]:
        """
        Load a device together with its node and village in one query.

        Returns:
            (device, node, village) or None for an unknown device. Node and
            village are None for auth-only devices.
        """
        row = (
            self.db.query(Device, Node, Village)
            .outerjoin(Node, Node.id == Device.node_id)
            .outerjoin(Village, Village.id == Node.village_id)
            .filter(Device.id == device_id)
            .first()
        )
        if row is None:
            return None
        return row[0], row[1], row[2]
