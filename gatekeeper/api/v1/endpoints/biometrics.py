"""
Biometric API
=============

Enrollment, soft deletion and 1:N matching of face embeddings and
fingerprint templates.

An unmatched probe is a normal 200 response with ``matched: false``; the
gate then falls back to manual verification.
"""

from typing import List
import logging

from fastapi import APIRouter, Depends, Path, Query, status

from gatekeeper.api.deps import get_biometric_index
from gatekeeper.schemas.biometric import (
    EmbeddingEnrollRequest,
    FaceMatchRequest,
    FingerprintMatchRequest,
    MatchCandidateOut,
    MatchResponse,
    SampleInDB,
    TemplateEnrollRequest,
)
from gatekeeper.services.biometric import BiometricIndex, MatchResult

router = APIRouter()
logger = logging.getLogger(__name__)


def _to_response(result: MatchResult) -> MatchResponse:
    return MatchResponse(
        matched=result.matched,
        threshold=result.threshold,
        best_distance=result.best_distance,
        candidates=[
            MatchCandidateOut(
                person_id=c.person_id,
                sample_id=c.sample_id,
                distance=c.distance,
                enrolled_at=c.enrolled_at,
            )
            for c in result.candidates
        ],
    )


# =============================================================================
# Enrollment
# =============================================================================

@router.post(
    "/persons/{person_id}/embeddings",
    response_model=SampleInDB,
    status_code=status.HTTP_201_CREATED,
)
def enroll_embedding(
    body: EmbeddingEnrollRequest,
    person_id: str = Path(..., description="Person ID"),
    index: BiometricIndex = Depends(get_biometric_index),
):
    """Append a 512-dimensional face embedding to a person."""
    return index.enroll_embedding(
        person_id,
        body.embedding,
        quality_score=body.quality_score,
        photo_id=body.photo_id,
    )


@router.post(
    "/persons/{person_id}/templates",
    response_model=SampleInDB,
    status_code=status.HTTP_201_CREATED,
)
def enroll_template(
    body: TemplateEnrollRequest,
    person_id: str = Path(..., description="Person ID"),
    index: BiometricIndex = Depends(get_biometric_index),
):
    """Append a fingerprint template (base64) to a person."""
    return index.enroll_template(
        person_id,
        body.template_bytes,
        position=body.finger_position,
        quality_score=body.quality_score,
    )


@router.get("/persons/{person_id}/samples", response_model=List[SampleInDB])
def list_samples(
    person_id: str = Path(..., description="Person ID"),
    include_deleted: bool = Query(False),
    index: BiometricIndex = Depends(get_biometric_index),
):
    return index.samples_for(person_id, include_deleted=include_deleted)


@router.delete("/samples/{sample_id}", response_model=SampleInDB)
def delete_sample(
    sample_id: str = Path(..., description="Embedding or template ID"),
    index: BiometricIndex = Depends(get_biometric_index),
):
    """Soft-delete a sample so it is never matched again."""
    return index.soft_delete(sample_id)


# =============================================================================
# Matching
# =============================================================================

@router.post("/match/face", response_model=MatchResponse)
def match_face(
    body: FaceMatchRequest,
    index: BiometricIndex = Depends(get_biometric_index),
):
    result = index.match_face(
        body.probe,
        top_k=body.top_k,
        threshold=body.threshold,
        active_only=body.active_only,
    )
    return _to_response(result)


@router.post("/match/fingerprint", response_model=MatchResponse)
def match_fingerprint(
    body: FingerprintMatchRequest,
    index: BiometricIndex = Depends(get_biometric_index),
):
    """
    **Errors:**
    - 503 when no template scorer is configured
    """
    result = index.match_fingerprint(
        body.probe_bytes,
        top_k=body.top_k,
        threshold=body.threshold,
        finger_position=body.finger_position,
        active_only=body.active_only,
    )
    return _to_response(result)
