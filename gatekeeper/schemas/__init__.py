"""
Request/response schemas package.

Pydantic models used by the services for input validation and by the
HTTP layer for serialization.
"""

from .person import (
    PersonCreate,
    PersonUpdate,
    PersonInDB,
    RelationshipCreate,
    VehicleCreate,
    PhotoCreate,
    AuditRecordInDB,
)
from .entry import EntryCreate, EntryLogInDB, VehicleInfo
from .biometric import MatchResponse, MatchCandidateOut
from .topology import VillageCreate, NodeCreate, DeviceCreate

__all__ = [
    "PersonCreate",
    "PersonUpdate",
    "PersonInDB",
    "RelationshipCreate",
    "VehicleCreate",
    "PhotoCreate",
    "AuditRecordInDB",
    "EntryCreate",
    "EntryLogInDB",
    "VehicleInfo",
    "MatchResponse",
    "MatchCandidateOut",
    "VillageCreate",
    "NodeCreate",
    "DeviceCreate",
]
