"""Import all models for Alembic."""
from .base import TimestampMixin, CreatedAtMixin
from .enums import (
    PersonCategory,
    PersonStatus,
    Gender,
    IdProofType,
    RelationshipType,
    VehicleType,
    PhotoType,
    DeviceType,
    BiometricMethod,
    MatchType,
    Direction,
    AuditAction,
    MovementType,
)
from .person import (
    Person,
    PersonRelationship,
    PersonVehicle,
    PersonPhoto,
    PersonSocialMedia,
    PersonEducation,
    PersonProfessional,
    PersonRemark,
    PersonRegistrationMovement,
)
from .topology import Village, Node, Device
from .biometric import FaceEmbedding, FingerprintTemplate, EMBEDDING_DIMENSION
from .entry_log import EntryLog
from .audit_log import PersonAudit

__all__ = [
    "TimestampMixin",
    "CreatedAtMixin",
    "PersonCategory",
    "PersonStatus",
    "Gender",
    "IdProofType",
    "RelationshipType",
    "VehicleType",
    "PhotoType",
    "DeviceType",
    "BiometricMethod",
    "MatchType",
    "Direction",
    "AuditAction",
    "MovementType",
    "Person",
    "PersonRelationship",
    "PersonVehicle",
    "PersonPhoto",
    "PersonSocialMedia",
    "PersonEducation",
    "PersonProfessional",
    "PersonRemark",
    "PersonRegistrationMovement",
    "Village",
    "Node",
    "Device",
    "FaceEmbedding",
    "FingerprintTemplate",
    "EMBEDDING_DIMENSION",
    "EntryLog",
    "PersonAudit",
]
