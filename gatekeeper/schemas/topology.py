"""Village, node and device schemas."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from gatekeeper.models.enums import DeviceType


class VillageCreate(BaseModel):
    id: Optional[str] = Field(None, min_length=1, max_length=255)
    name: str = Field(..., min_length=1, max_length=255)


class VillageInDB(VillageCreate):
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime


class NodeCreate(BaseModel):
    id: Optional[str] = Field(None, min_length=1, max_length=255)
    village_id: str = Field(..., min_length=1)
    node_name: str = Field(..., min_length=1, max_length=255)
    node_type: Optional[str] = Field(None, max_length=50)
    location_description: Optional[str] = None
    is_active: bool = True


class NodeInDB(NodeCreate):
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime


class DeviceCreate(BaseModel):
    id: Optional[str] = Field(None, min_length=1, max_length=255)
    node_id: Optional[str] = Field(None, description="NULL for auth-only devices")
    device_name: str = Field(..., min_length=1, max_length=255)
    device_type: DeviceType
    cert_fingerprint: Optional[str] = Field(None, max_length=255)
    is_active: bool = True
    operator_name: Optional[str] = Field(None, max_length=255)


class DeviceInDB(DeviceCreate):
    model_config = ConfigDict(from_attributes=True)

    id: str
    last_seen_at: Optional[datetime] = None
    created_at: datetime
