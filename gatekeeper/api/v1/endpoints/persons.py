"""
Person Directory API
====================

Enrollment and versioned editing of persons.

Every mutating call carries the ``version`` the caller last read. A stale
version answers 409 with the stored version in ``details``; re-read and
retry.
"""

from typing import Optional
import logging

from fastapi import APIRouter, Depends, Path, Query, status

from gatekeeper.api.deps import get_actor, get_person_directory
from gatekeeper.models.enums import PersonCategory, PersonStatus
from gatekeeper.schemas.person import (
    AuditHistoryResponse,
    AuditRecordInDB,
    EducationRequest,
    MovementRequest,
    PersonCreate,
    PersonInDB,
    PersonListResponse,
    PersonPatchRequest,
    PersonRecordsResponse,
    PhotoRequest,
    ProfessionalRequest,
    RelationshipRequest,
    RemarkRequest,
    SocialMediaRequest,
    VehicleRequest,
    VersionedRequest,
)
from gatekeeper.services.person_directory import PersonDirectory

router = APIRouter()
logger = logging.getLogger(__name__)

MAX_LIST_LIMIT = 500


# =============================================================================
# Core Person Operations
# =============================================================================

@router.get("", response_model=PersonListResponse)
def list_persons(
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=MAX_LIST_LIMIT, description="Number of records to return"),
    status_filter: Optional[PersonStatus] = Query(None, alias="status"),
    category: Optional[PersonCategory] = Query(None),
    village_id: Optional[str] = Query(None),
    directory: PersonDirectory = Depends(get_person_directory),
):
    """List persons, newest first."""
    persons, total = directory.list(
        skip=skip,
        limit=limit,
        status=status_filter,
        category=category,
        village_id=village_id,
    )
    return PersonListResponse(
        persons=[PersonInDB.model_validate(p) for p in persons],
        total=total,
        skip=skip,
        limit=limit,
        has_more=(skip + len(persons)) < total,
    )


@router.post("", response_model=PersonInDB, status_code=status.HTTP_201_CREATED)
def create_person(
    person_data: PersonCreate,
    directory: PersonDirectory = Depends(get_person_directory),
    actor: Optional[str] = Depends(get_actor),
):
    """
    Enroll a person at version 0.

    **Errors:**
    - 409 when a person with the same ``id`` already exists
    """
    return directory.enroll(person_data, changed_by=actor)


@router.get("/{person_id}", response_model=PersonInDB)
def get_person(
    person_id: str = Path(..., description="Person ID"),
    directory: PersonDirectory = Depends(get_person_directory),
):
    return directory.get(person_id)


@router.patch("/{person_id}", response_model=PersonInDB)
def update_person(
    body: PersonPatchRequest,
    person_id: str = Path(..., description="Person ID"),
    directory: PersonDirectory = Depends(get_person_directory),
    actor: Optional[str] = Depends(get_actor),
):
    """
    Apply a partial update iff the person is still at ``version``.

    Only fields present in ``changes`` are written.
    """
    return directory.update(person_id, body.version, body.changes, changed_by=actor)


@router.post("/{person_id}/deactivate", response_model=PersonInDB)
def deactivate_person(
    body: VersionedRequest,
    person_id: str = Path(..., description="Person ID"),
    directory: PersonDirectory = Depends(get_person_directory),
    actor: Optional[str] = Depends(get_actor),
):
    return directory.deactivate(person_id, body.version, changed_by=actor)


@router.post("/{person_id}/reactivate", response_model=PersonInDB)
def reactivate_person(
    body: VersionedRequest,
    person_id: str = Path(..., description="Person ID"),
    directory: PersonDirectory = Depends(get_person_directory),
    actor: Optional[str] = Depends(get_actor),
):
    return directory.reactivate(person_id, body.version, changed_by=actor)


@router.get("/{person_id}/history", response_model=AuditHistoryResponse)
def get_person_history(
    person_id: str = Path(..., description="Person ID"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=MAX_LIST_LIMIT),
    directory: PersonDirectory = Depends(get_person_directory),
):
    """Audit records of a person, newest version first."""
    records, total = directory.history(person_id, skip=skip, limit=limit)
    return AuditHistoryResponse(
        person_id=person_id,
        records=[AuditRecordInDB.model_validate(r) for r in records],
        total=total,
    )


# =============================================================================
# Owned Records
# =============================================================================

@router.post("/{person_id}/relationships", response_model=PersonInDB)
def add_relationship(
    body: RelationshipRequest,
    person_id: str = Path(..., description="Person ID"),
    directory: PersonDirectory = Depends(get_person_directory),
    actor: Optional[str] = Depends(get_actor),
):
    return directory.add_relationship(person_id, body.version, body.relationship, changed_by=actor)


@router.delete("/{person_id}/relationships/{relationship_id}", response_model=PersonInDB)
def remove_relationship(
    body: VersionedRequest,
    person_id: str = Path(..., description="Person ID"),
    relationship_id: str = Path(..., description="Relationship ID"),
    directory: PersonDirectory = Depends(get_person_directory),
    actor: Optional[str] = Depends(get_actor),
):
    return directory.remove_relationship(person_id, body.version, relationship_id, changed_by=actor)


@router.post("/{person_id}/vehicles", response_model=PersonInDB)
def add_vehicle(
    body: VehicleRequest,
    person_id: str = Path(..., description="Person ID"),
    directory: PersonDirectory = Depends(get_person_directory),
    actor: Optional[str] = Depends(get_actor),
):
    return directory.add_vehicle(person_id, body.version, body.vehicle, changed_by=actor)


@router.post("/{person_id}/photos", response_model=PersonInDB)
def add_photo(
    body: PhotoRequest,
    person_id: str = Path(..., description="Person ID"),
    directory: PersonDirectory = Depends(get_person_directory),
    actor: Optional[str] = Depends(get_actor),
):
    return directory.add_photo(person_id, body.version, body.photo, changed_by=actor)


@router.get("/{person_id}/records", response_model=PersonRecordsResponse)
def get_person_records(
    person_id: str = Path(..., description="Person ID"),
    directory: PersonDirectory = Depends(get_person_directory),
):
    """Owned records: relationships, vehicles, photos, accounts, education, work, remarks, movements."""
    return directory.get(person_id)


@router.post("/{person_id}/social-media", response_model=PersonInDB)
def add_social_media(
    body: SocialMediaRequest,
    person_id: str = Path(..., description="Person ID"),
    directory: PersonDirectory = Depends(get_person_directory),
    actor: Optional[str] = Depends(get_actor),
):
    return directory.add_social_media(person_id, body.version, body.account, changed_by=actor)


@router.post("/{person_id}/education", response_model=PersonInDB)
def add_education(
    body: EducationRequest,
    person_id: str = Path(..., description="Person ID"),
    directory: PersonDirectory = Depends(get_person_directory),
    actor: Optional[str] = Depends(get_actor),
):
    return directory.add_education(person_id, body.version, body.education, changed_by=actor)


@router.post("/{person_id}/professional", response_model=PersonInDB)
def add_professional(
    body: ProfessionalRequest,
    person_id: str = Path(..., description="Person ID"),
    directory: PersonDirectory = Depends(get_person_directory),
    actor: Optional[str] = Depends(get_actor),
):
    return directory.add_professional(person_id, body.version, body.professional, changed_by=actor)


@router.post("/{person_id}/remarks", response_model=PersonInDB)
def add_remark(
    body: RemarkRequest,
    person_id: str = Path(..., description="Person ID"),
    directory: PersonDirectory = Depends(get_person_directory),
    actor: Optional[str] = Depends(get_actor),
):
    return directory.add_remark(person_id, body.version, body.remark, changed_by=actor)


@router.post("/{person_id}/movements", response_model=PersonInDB)
def record_registration_movement(
    body: MovementRequest,
    person_id: str = Path(..., description="Person ID"),
    directory: PersonDirectory = Depends(get_person_directory),
    actor: Optional[str] = Depends(get_actor),
):
    return directory.record_registration_movement(person_id, body.version, body.movement, changed_by=actor)
