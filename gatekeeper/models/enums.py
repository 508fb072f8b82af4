"""Enums for database models."""
import enum


class PersonCategory(str, enum.Enum):
    """Registry category of a person."""
    resident = "resident"
    visitor = "visitor"
    staff = "staff"
    guest = "guest"


class PersonStatus(str, enum.Enum):
    """Person lifecycle state. Only active <-> deactivated transitions exist."""
    active = "active"
    deactivated = "deactivated"


class Gender(str, enum.Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    OTHER = "OTHER"


class IdProofType(str, enum.Enum):
    """Accepted identity documents."""
    AADHAR = "AADHAR"
    PAN = "PAN"
    DL = "DL"
    VOTER_ID = "VOTER_ID"
    PASSPORT = "PASSPORT"


class RelationshipType(str, enum.Enum):
    FATHER = "FATHER"
    MOTHER = "MOTHER"
    SON = "SON"
    DAUGHTER = "DAUGHTER"
    BROTHER = "BROTHER"
    SISTER = "SISTER"
    SPOUSE = "SPOUSE"
    FRIEND = "FRIEND"
    OTHER = "OTHER"


class VehicleType(str, enum.Enum):
    """Vehicle types registered against a person."""
    CAR = "CAR"
    BIKE = "BIKE"
    SCOOTER = "SCOOTER"
    TRUCK = "TRUCK"
    OTHER = "OTHER"


class PhotoType(str, enum.Enum):
    front = "front"
    side = "side"
    back = "back"
    other = "other"


class DeviceType(str, enum.Enum):
    """Device kinds. Only devices attached to a node can record entries."""
    mobile = "mobile"
    tablet = "tablet"
    admin = "admin"
    gate = "gate"


class BiometricMethod(str, enum.Enum):
    face = "face"
    fingerprint = "fingerprint"
    manual = "manual"


class MatchType(str, enum.Enum):
    """How the identity behind an entry was confirmed."""
    mobile_auto = "mobile_auto"
    server_confirm = "server_confirm"
    manual = "manual"


class Direction(str, enum.Enum):
    """Entry direction at a gate."""
    in_ = "in"
    out = "out"


class AuditAction(str, enum.Enum):
    """Person audit action types."""
    created = "created"
    updated = "updated"
    deleted = "deleted"


class MovementType(str, enum.Enum):
    """Registration movement recorded against a person."""
    ENTRY = "ENTRY"
    EXIT = "EXIT"
