"""Person schemas for enrollment, editing and display."""
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from gatekeeper.models.enums import (
    AuditAction,
    Gender,
    IdProofType,
    MovementType,
    PersonCategory,
    PersonStatus,
    PhotoType,
    RelationshipType,
    VehicleType,
)
from gatekeeper.utils.validators import to_naive_utc


# Fields a patch may never carry; they change only through dedicated operations
PROTECTED_FIELDS = {"id", "version", "status", "created_at", "updated_at"}

# Columns that are NOT NULL and therefore may not be cleared by a patch
REQUIRED_FIELDS = {"name", "phone", "category"}


# Base schemas
class PersonBase(BaseModel):
    """Editable person attributes."""
    first_name: Optional[str] = Field(None, max_length=255)
    last_name: Optional[str] = Field(None, max_length=255)
    alias: Optional[str] = Field(None, max_length=255)
    gender: Optional[Gender] = None
    age: Optional[int] = Field(None, ge=0, le=150)
    date_of_birth: Optional[date] = None
    religion: Optional[str] = Field(None, max_length=100)
    contact_number: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = None
    id_proof_type: Optional[IdProofType] = None
    id_proof_number: Optional[str] = Field(None, max_length=100)
    id_type: Optional[str] = Field(None, max_length=50)
    id_number: Optional[str] = Field(None, max_length=100)
    village_id: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = None
    thumbnail_url: Optional[str] = None


class PersonCreate(PersonBase):
    """
    Enrollment draft.

    ``id`` may be supplied by the caller; one is generated otherwise.
    ``name`` may be omitted when ``first_name`` is given.
    """
    model_config = ConfigDict(extra="forbid")

    id: Optional[str] = Field(None, min_length=1, max_length=255, description="Caller-supplied person ID")
    name: Optional[str] = Field(None, max_length=255, description="Display name")
    phone: str = Field(..., min_length=1, max_length=50)
    category: PersonCategory

    @field_validator("name", "phone", "first_name", "last_name", "alias")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @model_validator(mode="after")
    def fill_name(self):
        if not self.name:
            parts = [p for p in (self.first_name, self.last_name) if p]
            if not parts:
                raise ValueError("name or first_name is required")
            self.name = " ".join(parts)
        if not self.phone:
            raise ValueError("phone is required")
        return self


class PersonUpdate(PersonBase):
    """Patch applied by PersonDirectory.update; only set fields are written."""
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone: Optional[str] = Field(None, min_length=1, max_length=50)
    category: Optional[PersonCategory] = None
    last_verified_at: Optional[datetime] = None

    @field_validator("last_verified_at")
    @classmethod
    def naive_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)

    @model_validator(mode="after")
    def required_fields_not_cleared(self):
        for field in REQUIRED_FIELDS & self.model_fields_set:
            if getattr(self, field) is None:
                raise ValueError(f"{field} cannot be cleared")
        return self


class PersonInDB(PersonBase):
    """Person schema with database fields."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    phone: str
    category: PersonCategory
    status: PersonStatus
    version: int
    email: Optional[str] = None
    last_verified_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class PersonListResponse(BaseModel):
    """Paginated person list."""
    persons: List[PersonInDB]
    total: int
    skip: int
    limit: int
    has_more: bool


# Versioned requests
class PersonPatchRequest(BaseModel):
    """Update request; ``version`` is the version the caller last read."""
    version: int = Field(..., ge=0)
    changes: PersonUpdate


class VersionedRequest(BaseModel):
    """Body for status toggles."""
    version: int = Field(..., ge=0)


# Owned records
class RelationshipCreate(BaseModel):
    """New relationship edge."""
    model_config = ConfigDict(extra="forbid")

    related_person_id: Optional[str] = None
    related_person_name: Optional[str] = Field(None, max_length=255)
    relationship_type: RelationshipType

    @model_validator(mode="after")
    def target_present(self):
        if not self.related_person_id and not self.related_person_name:
            raise ValueError("related_person_id or related_person_name is required")
        return self


class RelationshipInDB(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    person_id: str
    related_person_id: Optional[str]
    related_person_name: Optional[str]
    relationship_type: RelationshipType
    created_at: datetime


class VehicleCreate(BaseModel):
    """Vehicle registered against a person."""
    model_config = ConfigDict(extra="forbid")

    vehicle_type: VehicleType
    vehicle_number: str = Field(..., min_length=1, max_length=100)
    make_model: Optional[str] = Field(None, max_length=255)
    remarks: Optional[str] = None


class VehicleInDB(VehicleCreate):
    model_config = ConfigDict(from_attributes=True)

    id: str
    person_id: str
    created_at: datetime


class PhotoCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    photo_url: str = Field(..., min_length=1)
    photo_type: PhotoType = PhotoType.front


class PhotoInDB(PhotoCreate):
    model_config = ConfigDict(from_attributes=True)

    id: str
    person_id: str
    created_at: datetime


class SocialMediaCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    platform: str = Field(..., min_length=1, max_length=100)
    account_id: str = Field(..., min_length=1, max_length=255)

    @field_validator("platform", "account_id")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class SocialMediaInDB(SocialMediaCreate):
    model_config = ConfigDict(from_attributes=True)

    id: str
    person_id: str
    created_at: datetime


class EducationCreate(BaseModel):
    """Education entry; at least one field must be filled."""
    model_config = ConfigDict(extra="forbid")

    qualification: Optional[str] = Field(None, max_length=255)
    institution: Optional[str] = Field(None, max_length=255)
    education_info: Optional[str] = None

    @model_validator(mode="after")
    def not_empty(self):
        if not any((self.qualification, self.institution, self.education_info)):
            raise ValueError("qualification, institution or education_info is required")
        return self


class EducationInDB(EducationCreate):
    model_config = ConfigDict(from_attributes=True)

    id: str
    person_id: str
    created_at: datetime


class ProfessionalCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    profession: Optional[str] = Field(None, max_length=255)
    profession_description: Optional[str] = None

    @model_validator(mode="after")
    def not_empty(self):
        if not (self.profession or self.profession_description):
            raise ValueError("profession or profession_description is required")
        return self


class ProfessionalInDB(ProfessionalCreate):
    model_config = ConfigDict(from_attributes=True)

    id: str
    person_id: str
    created_at: datetime


class RemarkCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    content: str = Field(..., min_length=1)


class RemarkInDB(RemarkCreate):
    model_config = ConfigDict(from_attributes=True)

    id: str
    person_id: str
    created_at: datetime


class MovementCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    movement_type: MovementType


class MovementInDB(MovementCreate):
    model_config = ConfigDict(from_attributes=True)

    id: str
    person_id: str
    created_at: datetime


class PersonRecordsResponse(BaseModel):
    """Everything a person owns besides biometric samples."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    version: int
    relationships: List[RelationshipInDB]
    vehicles: List[VehicleInDB]
    photos: List[PhotoInDB]
    social_media: List[SocialMediaInDB]
    education: List[EducationInDB]
    professional: List[ProfessionalInDB]
    remarks: List[RemarkInDB]
    registration_movements: List[MovementInDB]


class RelationshipRequest(VersionedRequest):
    relationship: RelationshipCreate


class VehicleRequest(VersionedRequest):
    vehicle: VehicleCreate


class PhotoRequest(VersionedRequest):
    photo: PhotoCreate


class SocialMediaRequest(VersionedRequest):
    account: SocialMediaCreate


class EducationRequest(VersionedRequest):
    education: EducationCreate


class ProfessionalRequest(VersionedRequest):
    professional: ProfessionalCreate


class RemarkRequest(VersionedRequest):
    remark: RemarkCreate


class MovementRequest(VersionedRequest):
    movement: MovementCreate


# Audit
class AuditRecordInDB(BaseModel):
    """Audit trail entry."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    person_id: str
    action: AuditAction
    changed_fields: Optional[Dict[str, Any]] = None
    changed_by: Optional[str] = None
    old_version: int
    new_version: int
    created_at: datetime


class AuditHistoryResponse(BaseModel):
    person_id: str
    records: List[AuditRecordInDB]
    total: int
