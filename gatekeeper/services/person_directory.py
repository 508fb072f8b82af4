"""
Person Directory
================

Registry of enrolled persons with optimistic concurrency.

Every mutation is a single transaction that

1. checks the caller's ``expected_version`` against the stored version,
2. writes the new values and bumps ``version`` by exactly one,
3. appends one audit record,

and commits all of it or none of it. The version check is repeated inside
the UPDATE statement, so of several writers holding the same version only
one can win; the rest get ``VersionConflict``.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gatekeeper.core.audit_log import AuditTrail, diff_fields
from gatekeeper.core.errors import (
    DuplicateId,
    NotFound,
    ValidationError,
    VersionConflict,
    coerce,
)
from gatekeeper.db.base import atomic
from gatekeeper.models.audit_log import PersonAudit
from gatekeeper.models.enums import AuditAction, PersonCategory, PersonStatus
from gatekeeper.models.person import (
    Person,
    PersonEducation,
    PersonPhoto,
    PersonProfessional,
    PersonRegistrationMovement,
    PersonRelationship,
    PersonRemark,
    PersonSocialMedia,
    PersonVehicle,
)
from gatekeeper.repositories.person_repo import PersonRepository
from gatekeeper.schemas.person import (
    PROTECTED_FIELDS,
    EducationCreate,
    MovementCreate,
    PersonCreate,
    PersonUpdate,
    PhotoCreate,
    ProfessionalCreate,
    RelationshipCreate,
    RemarkCreate,
    SocialMediaCreate,
    VehicleCreate,
)

logger = logging.getLogger(__name__)

PatchLike = Union[PersonUpdate, Dict[str, Any]]


class PersonDirectory:
    """Service for enrolling and editing persons."""

    def __init__(self, db: Session):
        self.db = db
        self.repo = PersonRepository(db)
        self.audit = AuditTrail(db)

    # =========================================================================
    # Reads
    # =========================================================================

    def get(self, person_id: str) -> Person:
        """
        Get the current state of a person.

        Raises:
            NotFound: no person with this id
        """
        person = self.repo.get_by_id(person_id, refresh=True)
        if person is None:
            raise NotFound(f"Person {person_id} not found", details={"person_id": person_id})
        return person

    def list(
        self,
        skip: int = 0,
        limit: int = 100,
        status: Optional[PersonStatus] = None,
        category: Optional[PersonCategory] = None,
        village_id: Optional[str] = None,
    ) -> Tuple[List[Person], int]:
        """List persons, newest first."""
        return self.repo.list_persons(skip=skip, limit=limit, status=status, category=category, village_id=village_id)

    def history(self, person_id: str, skip: int = 0, limit: int = 100) -> Tuple[List[PersonAudit], int]:
        """Audit history of a person, newest first."""
        self.get(person_id)
        return self.audit.history(person_id, skip=skip, limit=limit)

    # =========================================================================
    # Enrollment
    # =========================================================================

    def enroll(self, draft: Union[PersonCreate, Dict[str, Any]], changed_by: Optional[str] = None) -> Person:
        """
        Enroll a new person at version 0.

        Args:
            draft: Enrollment data
            changed_by: Actor recorded in the audit trail

        Returns:
            The created person

        Raises:
            ValidationError: required fields missing or malformed
            DuplicateId: a person with the same id already exists
        """
        draft = coerce(PersonCreate, draft)
        values = draft.model_dump(exclude_none=True)

        if draft.id and self.repo.exists(draft.id):
            raise DuplicateId(f"Person {draft.id} already exists", details={"person_id": draft.id})

        try:
            with atomic(self.db):
                person = Person(**values, version=0, status=PersonStatus.active)
                self.repo.add(person)
                self.audit.append(
                    person_id=person.id,
                    action=AuditAction.created,
                    old_version=-1,
                    new_version=0,
                    changed_fields=diff_fields({}, values),
                    changed_by=changed_by,
                )
        except IntegrityError as e:
            # Lost a race against a concurrent enrollment of the same id
            raise DuplicateId(
                f"Person {values.get('id')} already exists",
                details={"person_id": values.get("id")},
            ) from e

        logger.info(f"Enrolled person {person.id} ({person.category.value})")
        return self.get(person.id)

    # =========================================================================
    # Versioned mutations
    # =========================================================================

    def _mutate(
        self,
        person_id: str,
        expected_version: int,
        action: AuditAction,
        values: Dict[str, Any],
        changed_by: Optional[str] = None,
        guard: Optional[Callable[[Person], None]] = None,
        extra: Optional[Callable[[Person], Dict[str, Any]]] = None,
    ) -> Person:
        """
        Apply one versioned, audited mutation.

        Args:
            person_id: Person to mutate
            expected_version: Version the caller last read
            action: Audit action to record
            values: Column values to write on the person row
            changed_by: Actor recorded in the audit trail
            guard: Called with the current person before writing; may raise
            extra: Writes owned records and returns their audit diff entries

        Raises:
            NotFound: unknown person
            VersionConflict: stored version differs from expected_version
        """
        with atomic(self.db):
            current = self.repo.get_by_id(person_id, refresh=True)
            if current is None:
                raise NotFound(f"Person {person_id} not found", details={"person_id": person_id})
            if current.version != expected_version:
                logger.info(
                    f"Version conflict on person {person_id}: "
                    f"expected {expected_version}, stored {current.version}"
                )
                raise VersionConflict(person_id, expected_version, current.version)
            if guard is not None:
                guard(current)

            old_values = {field: getattr(current, field) for field in values}
            changes = diff_fields(old_values, values)

            if not self.repo.compare_and_set(person_id, expected_version, values):
                actual = self.repo.current_version(person_id)
                logger.info(f"Lost concurrent update on person {person_id} at version {expected_version}")
                raise VersionConflict(person_id, expected_version, actual)

            if extra is not None:
                changes.update(extra(current))

            self.audit.append(
                person_id=person_id,
                action=action,
                old_version=expected_version,
                new_version=expected_version + 1,
                changed_fields=changes,
                changed_by=changed_by,
            )

        logger.info(
            f"Person {person_id} {action.value}: v{expected_version}->v{expected_version + 1} "
            f"fields={sorted(changes)}"
        )
        return self.get(person_id)

    def update(
        self,
        person_id: str,
        expected_version: int,
        patch: PatchLike,
        changed_by: Optional[str] = None,
    ) -> Person:
        """
        Apply a patch iff the person is still at ``expected_version``.

        Only fields explicitly set in the patch are written. Every accepted
        patch is a mutation, even one that repeats the stored values: the
        version moves on and an audit record (with an empty diff) is
        appended, so two writers holding the same version never both win.

        Raises:
            ValidationError: malformed patch or protected field
            NotFound: unknown person
            VersionConflict: stale version; re-read and retry
        """
        if isinstance(patch, dict):
            protected = PROTECTED_FIELDS & set(patch)
            if protected:
                raise ValidationError(
                    f"Fields cannot be patched: {', '.join(sorted(protected))}",
                    details={"fields": sorted(protected)},
                )
        patch = coerce(PersonUpdate, patch)
        values = patch.model_dump(exclude_unset=True)
        if not values:
            raise ValidationError("Patch is empty")

        return self._mutate(person_id, expected_version, AuditAction.updated, values, changed_by)

    def deactivate(self, person_id: str, expected_version: int, changed_by: Optional[str] = None) -> Person:
        """
        Deactivate a person (audited as ``deleted``).

        Raises:
            ValidationError: already deactivated
        """
        def guard(person: Person) -> None:
            if person.status == PersonStatus.deactivated:
                raise ValidationError(f"Person {person_id} is already deactivated")

        return self._mutate(
            person_id,
            expected_version,
            AuditAction.deleted,
            {"status": PersonStatus.deactivated},
            changed_by,
            guard=guard,
        )

    def reactivate(self, person_id: str, expected_version: int, changed_by: Optional[str] = None) -> Person:
        """
        Reactivate a deactivated person (audited as ``updated``).

        Raises:
            ValidationError: already active
        """
        def guard(person: Person) -> None:
            if person.status == PersonStatus.active:
                raise ValidationError(f"Person {person_id} is already active")

        return self._mutate(
            person_id,
            expected_version,
            AuditAction.updated,
            {"status": PersonStatus.active},
            changed_by,
            guard=guard,
        )

    # =========================================================================
    # Owned records
    # =========================================================================

    def add_relationship(
        self,
        person_id: str,
        expected_version: int,
        relationship: Union[RelationshipCreate, Dict[str, Any]],
        changed_by: Optional[str] = None,
    ) -> Person:
        """
        Add a relationship edge to another (possibly unenrolled) person.

        Raises:
            ValidationError: self-reference or duplicate edge
            NotFound: related person id does not resolve
        """
        relationship = coerce(RelationshipCreate, relationship)
        related_id = relationship.related_person_id

        if related_id == person_id:
            raise ValidationError("A person cannot be related to themselves")
        if related_id and not self.repo.exists(related_id):
            raise NotFound(f"Related person {related_id} not found", details={"person_id": related_id})

        def guard(person: Person) -> None:
            if self.repo.find_relationship(person_id, related_id, relationship.relationship_type):
                raise ValidationError(
                    "Relationship already exists",
                    details={"related_person_id": related_id, "type": relationship.relationship_type.value},
                )

        def write(person: Person) -> Dict[str, Any]:
            edge = PersonRelationship(person_id=person_id, **relationship.model_dump())
            self.db.add(edge)
            self.db.flush()
            return {"relationships": {"old": None, "new": {
                "id": edge.id,
                "related_person_id": related_id,
                "related_person_name": relationship.related_person_name,
                "relationship_type": relationship.relationship_type.value,
            }}}

        return self._mutate(person_id, expected_version, AuditAction.updated, {}, changed_by, guard=guard, extra=write)

    def remove_relationship(
        self,
        person_id: str,
        expected_version: int,
        relationship_id: str,
        changed_by: Optional[str] = None,
    ) -> Person:
        """Remove a relationship edge owned by the person."""
        def guard(person: Person) -> None:
            if self.repo.get_relationship(person_id, relationship_id) is None:
                raise NotFound(f"Relationship {relationship_id} not found")

        def write(person: Person) -> Dict[str, Any]:
            edge = self.repo.get_relationship(person_id, relationship_id)
            removed = {
                "id": edge.id,
                "related_person_id": edge.related_person_id,
                "relationship_type": edge.relationship_type.value,
            }
            self.db.delete(edge)
            self.db.flush()
            return {"relationships": {"old": removed, "new": None}}

        return self._mutate(person_id, expected_version, AuditAction.updated, {}, changed_by, guard=guard, extra=write)

    def add_vehicle(
        self,
        person_id: str,
        expected_version: int,
        vehicle: Union[VehicleCreate, Dict[str, Any]],
        changed_by: Optional[str] = None,
    ) -> Person:
        """Register a vehicle against a person."""
        vehicle = coerce(VehicleCreate, vehicle)

        def write(person: Person) -> Dict[str, Any]:
            row = PersonVehicle(person_id=person_id, **vehicle.model_dump())
            self.db.add(row)
            self.db.flush()
            return {"vehicles": {"old": None, "new": {
                "id": row.id,
                "vehicle_type": vehicle.vehicle_type.value,
                "vehicle_number": vehicle.vehicle_number,
            }}}

        return self._mutate(person_id, expected_version, AuditAction.updated, {}, changed_by, extra=write)

    def add_photo(
        self,
        person_id: str,
        expected_version: int,
        photo: Union[PhotoCreate, Dict[str, Any]],
        changed_by: Optional[str] = None,
    ) -> Person:
        """Attach a reference photo to a person."""
        photo = coerce(PhotoCreate, photo)

        def write(person: Person) -> Dict[str, Any]:
            row = PersonPhoto(person_id=person_id, **photo.model_dump())
            self.db.add(row)
            self.db.flush()
            return {"photos": {"old": None, "new": {"id": row.id, "photo_url": row.photo_url}}}

        return self._mutate(person_id, expected_version, AuditAction.updated, {}, changed_by, extra=write)

    def _add_owned(
        self,
        person_id: str,
        expected_version: int,
        model: type,
        field: str,
        payload: Any,
        changed_by: Optional[str] = None,
        guard: Optional[Callable[[Person], None]] = None,
    ) -> Person:
        """Insert one owned row as a versioned mutation; ``field`` names it in the audit diff."""
        def write(person: Person) -> Dict[str, Any]:
            row = model(person_id=person_id, **payload.model_dump())
            self.db.add(row)
            self.db.flush()
            return {field: {"old": None, "new": {"id": row.id, **payload.model_dump(mode="json")}}}

        return self._mutate(person_id, expected_version, AuditAction.updated, {}, changed_by, guard=guard, extra=write)

    def add_social_media(
        self,
        person_id: str,
        expected_version: int,
        account: Union[SocialMediaCreate, Dict[str, Any]],
        changed_by: Optional[str] = None,
    ) -> Person:
        """
        Link a social media account to a person.

        Raises:
            ValidationError: the person already has this platform/account pair
        """
        account = coerce(SocialMediaCreate, account)

        def guard(person: Person) -> None:
            if self.repo.find_social_media(person_id, account.platform, account.account_id):
                raise ValidationError(
                    "Social media account already linked",
                    details={"platform": account.platform, "account_id": account.account_id},
                )

        return self._add_owned(
            person_id, expected_version, PersonSocialMedia, "social_media", account, changed_by, guard=guard
        )

    def add_education(
        self,
        person_id: str,
        expected_version: int,
        education: Union[EducationCreate, Dict[str, Any]],
        changed_by: Optional[str] = None,
    ) -> Person:
        education = coerce(EducationCreate, education)
        return self._add_owned(person_id, expected_version, PersonEducation, "education", education, changed_by)

    def add_professional(
        self,
        person_id: str,
        expected_version: int,
        professional: Union[ProfessionalCreate, Dict[str, Any]],
        changed_by: Optional[str] = None,
    ) -> Person:
        professional = coerce(ProfessionalCreate, professional)
        return self._add_owned(
            person_id, expected_version, PersonProfessional, "professional", professional, changed_by
        )

    def add_remark(
        self,
        person_id: str,
        expected_version: int,
        remark: Union[RemarkCreate, Dict[str, Any]],
        changed_by: Optional[str] = None,
    ) -> Person:
        """Append a free-text guard remark to a person."""
        remark = coerce(RemarkCreate, remark)
        return self._add_owned(person_id, expected_version, PersonRemark, "remarks", remark, changed_by)

    def record_registration_movement(
        self,
        person_id: str,
        expected_version: int,
        movement: Union[MovementCreate, Dict[str, Any]],
        changed_by: Optional[str] = None,
    ) -> Person:
        """
        Record that a person's registration moved into or out of the village.

        This is a registry fact, unrelated to gate entry events.
        """
        movement = coerce(MovementCreate, movement)
        return self._add_owned(
            person_id, expected_version, PersonRegistrationMovement, "registration_movements", movement, changed_by
        )
