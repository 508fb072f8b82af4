"""Entry ledger schemas."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from gatekeeper.models.enums import BiometricMethod, Direction, MatchType
from gatekeeper.utils.validators import to_naive_utc


class VehicleInfo(BaseModel):
    """Vehicle seen with the person at the gate."""
    model_config = ConfigDict(extra="forbid")

    vehicle_type: Optional[str] = Field(None, max_length=50)
    vehicle_number: Optional[str] = Field(None, max_length=50)
    make_model: Optional[str] = Field(None, max_length=255)
    remarks: Optional[str] = None


class EntryCreate(BaseModel):
    """Entry event as submitted by a gateway device."""
    model_config = ConfigDict(extra="forbid")

    request_id: str = Field(..., min_length=1, max_length=255, description="Caller-generated idempotency key")
    person_id: str = Field(..., min_length=1, max_length=255)
    device_id: str = Field(..., min_length=1, max_length=255)
    biometric_method: BiometricMethod
    match_type: MatchType
    direction: Direction
    confidence_score: float = Field(..., ge=0.0, le=1.0)
    timestamp: datetime
    vehicle: Optional[VehicleInfo] = None
    image_url: Optional[str] = None
    remarks: Optional[str] = None
    is_synced: bool = Field(False, description="Captured offline and delivered in a later sync batch")

    @field_validator("timestamp")
    @classmethod
    def naive_utc(cls, v: datetime) -> datetime:
        return to_naive_utc(v)


class EntryLogInDB(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    request_id: Optional[str]
    person_id: str
    person_name: Optional[str] = None
    device_id: str
    biometric_method: BiometricMethod
    match_type: MatchType
    direction: Direction
    confidence_score: float
    timestamp: datetime
    image_url: Optional[str] = None
    remarks: Optional[str] = None
    vehicle_type: Optional[str] = None
    vehicle_number: Optional[str] = None
    vehicle_make_model: Optional[str] = None
    vehicle_remarks: Optional[str] = None
    is_synced: bool = False
    created_at: datetime


class EntryListResponse(BaseModel):
    entries: List[EntryLogInDB]
    total: int
    skip: int
    limit: int
