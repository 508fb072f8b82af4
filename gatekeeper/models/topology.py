"""Village -> Node -> Device topology."""
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from gatekeeper.db.base import Base
from .base import TimestampMixin, enum_type
from .enums import DeviceType
from .person import generate_id


class Village(Base, TimestampMixin):
    """Settlement protected by one or more nodes."""

    __tablename__ = 'villages'

    id = Column(String(255), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False, index=True)

    nodes = relationship('Node', back_populates='village')

    def __repr__(self) -> str:
        return f'<Village(id={self.id}, name={self.name})>'


class Node(Base, TimestampMixin):
    """Physical location grouping (gate, checkpoint) inside a village."""

    __tablename__ = 'nodes'

    id = Column(String(255), primary_key=True, default=generate_id)
    village_id = Column(String(255), ForeignKey('villages.id'), nullable=False, index=True)
    node_name = Column(String(255), nullable=False)
    node_type = Column(String(50), nullable=True)  # gate, checkpoint, entrance, ...
    location_description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    village = relationship('Village', back_populates='nodes')
    devices = relationship('Device', back_populates='node')

    def __repr__(self) -> str:
        return f'<Node(id={self.id}, name={self.node_name}, village_id={self.village_id})>'


class Device(Base, TimestampMixin):
    """
    Capture device.

    ``node_id`` is NULL for auth-only devices; those can never record
    entry events.
    """

    __tablename__ = 'devices'

    id = Column(String(255), primary_key=True, default=generate_id)
    node_id = Column(String(255), ForeignKey('nodes.id'), nullable=True, index=True)
    device_name = Column(String(255), nullable=False)
    device_type = Column(enum_type(DeviceType, 'device_type'), nullable=False, index=True)
    cert_fingerprint = Column(String(255), nullable=True, unique=True)
    is_active = Column(Boolean, default=True, nullable=False)
    operator_name = Column(String(255), nullable=True)
    last_seen_at = Column(DateTime, nullable=True)

    node = relationship('Node', back_populates='devices')

    def __repr__(self) -> str:
        return f'<Device(id={self.id}, name={self.device_name}, node_id={self.node_id})>'
