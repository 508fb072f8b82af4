"""Biometric enrollment and matching schemas."""
import base64
import binascii
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _decode_b64(value: str) -> bytes:
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        raise ValueError("must be valid base64")


class EmbeddingEnrollRequest(BaseModel):
    """Face embedding produced by the capture service."""
    embedding: List[float] = Field(..., description="512-dimensional face embedding")
    quality_score: Optional[float] = Field(None, description="Capture quality in [0, 1]")
    photo_id: Optional[str] = Field(None, max_length=255)


class TemplateEnrollRequest(BaseModel):
    """Fingerprint template, base64-encoded for JSON transport."""
    template: str = Field(..., description="Base64-encoded template bytes")
    finger_position: Optional[str] = Field(None, max_length=50)
    quality_score: Optional[float] = None

    @field_validator("template")
    @classmethod
    def check_base64(cls, v):
        _decode_b64(v)
        return v

    @property
    def template_bytes(self) -> bytes:
        return _decode_b64(self.template)


class FaceMatchRequest(BaseModel):
    probe: List[float]
    top_k: Optional[int] = Field(None, ge=1, le=100)
    threshold: Optional[float] = Field(None, ge=0.0)
    active_only: bool = False


class FingerprintMatchRequest(BaseModel):
    probe: str = Field(..., description="Base64-encoded probe template")
    top_k: Optional[int] = Field(None, ge=1, le=100)
    threshold: Optional[float] = Field(None, ge=0.0)
    finger_position: Optional[str] = None
    active_only: bool = False

    @field_validator("probe")
    @classmethod
    def check_base64(cls, v):
        _decode_b64(v)
        return v

    @property
    def probe_bytes(self) -> bytes:
        return _decode_b64(self.probe)


class SampleInDB(BaseModel):
    """Enrolled sample without its vector/template payload."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    person_id: str
    quality_score: Optional[float] = None
    is_deleted: bool
    created_at: datetime


class MatchCandidateOut(BaseModel):
    person_id: str
    sample_id: str
    distance: float
    enrolled_at: datetime


class MatchResponse(BaseModel):
    """Ranked candidates; ``matched`` is False for an unmatched probe."""
    matched: bool
    threshold: float
    best_distance: Optional[float] = None
    candidates: List[MatchCandidateOut] = Field(default_factory=list)
