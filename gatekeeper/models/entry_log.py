"""Entry/exit event ledger model."""
from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Float, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from gatekeeper.db.base import Base
from .base import CreatedAtMixin, enum_type
from .enums import BiometricMethod, Direction, MatchType
from .person import generate_id


class EntryLog(Base, CreatedAtMixin):
    """Write-once entry/exit event, unique per caller-supplied request_id."""

    __tablename__ = 'entry_logs'
    __table_args__ = (
        CheckConstraint(
            'confidence_score >= 0 AND confidence_score <= 1',
            name='ck_entry_logs_confidence_range',
        ),
        Index('ix_entry_logs_person_timestamp', 'person_id', 'timestamp'),
        Index('ix_entry_logs_device_timestamp', 'device_id', 'timestamp'),
    )

    id = Column(String(255), primary_key=True, default=generate_id)
    # Idempotency key. Nullable only to tolerate legacy rows.
    request_id = Column(String(255), unique=True, nullable=True)

    person_id = Column(String(255), ForeignKey('persons.id'), nullable=False, index=True)
    person_name = Column(String(255), nullable=True)  # Denormalized for display
    device_id = Column(String(255), ForeignKey('devices.id'), nullable=False, index=True)

    biometric_method = Column(enum_type(BiometricMethod, 'biometric_method'), nullable=False, index=True)
    match_type = Column(enum_type(MatchType, 'match_type'), nullable=False)
    direction = Column(enum_type(Direction, 'direction'), nullable=False, index=True)
    confidence_score = Column(Float, nullable=False, default=0.0)
    timestamp = Column(DateTime, nullable=False, index=True)

    image_url = Column(Text, nullable=True)
    remarks = Column(Text, nullable=True)

    # Vehicle details (optional)
    vehicle_type = Column(String(50), nullable=True)
    vehicle_number = Column(String(50), nullable=True)
    vehicle_make_model = Column(String(255), nullable=True)
    vehicle_remarks = Column(Text, nullable=True)

    # Captured offline by the device and delivered later in a sync batch
    is_synced = Column(Boolean, nullable=False, default=False, index=True)

    person = relationship('Person')
    device = relationship('Device')

    def __repr__(self) -> str:
        return f'<EntryLog(id={self.id}, request_id={self.request_id}, direction={self.direction})>'
