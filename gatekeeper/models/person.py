"""Person aggregate and the records it owns."""
import uuid

from sqlalchemy import BigInteger, Column, Date, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from gatekeeper.db.base import Base
from .base import TimestampMixin, CreatedAtMixin, enum_type
from .enums import (
    Gender,
    IdProofType,
    MovementType,
    PersonCategory,
    PersonStatus,
    PhotoType,
    RelationshipType,
    VehicleType,
)


def generate_id() -> str:
    return str(uuid.uuid4())


class Person(Base, TimestampMixin):
    """Enrolled person. Never hard-deleted; deactivated instead."""

    __tablename__ = 'persons'

    id = Column(String(255), primary_key=True, default=generate_id)

    # Identity
    name = Column(String(255), nullable=False)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    alias = Column(String(255), nullable=True)
    gender = Column(enum_type(Gender, 'gender'), nullable=True)
    age = Column(Integer, nullable=True)
    date_of_birth = Column(Date, nullable=True)
    religion = Column(String(100), nullable=True)

    # Contact and identity documents
    phone = Column(String(50), nullable=False, index=True)
    contact_number = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    id_proof_type = Column(enum_type(IdProofType, 'id_proof_type'), nullable=True)
    id_proof_number = Column(String(100), nullable=True)
    # Free-form secondary identity document
    id_type = Column(String(50), nullable=True)
    id_number = Column(String(100), nullable=True)

    # Registry placement
    category = Column(enum_type(PersonCategory, 'person_category'), nullable=False, index=True)
    status = Column(
        enum_type(PersonStatus, 'person_status'),
        nullable=False,
        default=PersonStatus.active,
        index=True,
    )
    village_id = Column(String(255), nullable=True, index=True)
    address = Column(Text, nullable=True)
    thumbnail_url = Column(Text, nullable=True)
    last_verified_at = Column(DateTime, nullable=True, index=True)

    # Optimistic concurrency; bumped by exactly one per mutation
    version = Column(BigInteger, nullable=False, default=0)

    # Relationships
    embeddings = relationship('FaceEmbedding', back_populates='person', lazy='select')
    templates = relationship('FingerprintTemplate', back_populates='person', lazy='select')
    photos = relationship('PersonPhoto', back_populates='person', order_by='PersonPhoto.created_at')
    vehicles = relationship('PersonVehicle', back_populates='person', order_by='PersonVehicle.created_at')
    relationships = relationship(
        'PersonRelationship',
        back_populates='person',
        foreign_keys='PersonRelationship.person_id',
        order_by='PersonRelationship.created_at',
    )
    social_media = relationship('PersonSocialMedia', back_populates='person', order_by='PersonSocialMedia.created_at')
    education = relationship('PersonEducation', back_populates='person', order_by='PersonEducation.created_at')
    professional = relationship('PersonProfessional', back_populates='person', order_by='PersonProfessional.created_at')
    remarks = relationship('PersonRemark', back_populates='person', order_by='PersonRemark.created_at')
    registration_movements = relationship(
        'PersonRegistrationMovement',
        back_populates='person',
        order_by='PersonRegistrationMovement.created_at',
    )

    @property
    def is_active(self) -> bool:
        return self.status == PersonStatus.active

    def __repr__(self) -> str:
        return f'<Person(id={self.id}, name={self.name}, version={self.version})>'


class PersonRelationship(Base, CreatedAtMixin):
    """
    Directed edge between two persons.

    ``related_person_id`` is nulled (not cascaded) when the related person
    row goes away; ``related_person_name`` covers relatives who were never
    enrolled.
    """

    __tablename__ = 'person_relationships'
    __table_args__ = (
        UniqueConstraint('person_id', 'related_person_id', 'relationship_type', name='uq_person_relationship_edge'),
    )

    id = Column(String(255), primary_key=True, default=generate_id)
    person_id = Column(String(255), ForeignKey('persons.id', ondelete='CASCADE'), nullable=False, index=True)
    related_person_id = Column(String(255), ForeignKey('persons.id', ondelete='SET NULL'), nullable=True, index=True)
    related_person_name = Column(String(255), nullable=True)
    relationship_type = Column(enum_type(RelationshipType, 'relationship_type'), nullable=False)

    person = relationship('Person', back_populates='relationships', foreign_keys=[person_id])

    def __repr__(self) -> str:
        return (
            f'<PersonRelationship(person_id={self.person_id}, '
            f'related_person_id={self.related_person_id}, type={self.relationship_type})>'
        )


class PersonVehicle(Base, CreatedAtMixin):
    """Vehicle registered to a person."""

    __tablename__ = 'person_vehicles'

    id = Column(String(255), primary_key=True, default=generate_id)
    person_id = Column(String(255), ForeignKey('persons.id', ondelete='CASCADE'), nullable=False, index=True)
    vehicle_type = Column(enum_type(VehicleType, 'vehicle_type'), nullable=False)
    vehicle_number = Column(String(100), nullable=False)
    make_model = Column(String(255), nullable=True)
    remarks = Column(Text, nullable=True)

    person = relationship('Person', back_populates='vehicles')


class PersonPhoto(Base, CreatedAtMixin):
    """Reference photo captured at enrollment."""

    __tablename__ = 'person_photos'

    id = Column(String(255), primary_key=True, default=generate_id)
    person_id = Column(String(255), ForeignKey('persons.id', ondelete='CASCADE'), nullable=False, index=True)
    photo_url = Column(Text, nullable=False)
    photo_type = Column(enum_type(PhotoType, 'photo_type'), nullable=False)

    person = relationship('Person', back_populates='photos')


class PersonSocialMedia(Base, CreatedAtMixin):
    """Social media account linked to a person."""

    __tablename__ = 'person_social_media'
    __table_args__ = (
        UniqueConstraint('person_id', 'platform', 'account_id', name='uq_person_social_media_account'),
    )

    id = Column(String(255), primary_key=True, default=generate_id)
    person_id = Column(String(255), ForeignKey('persons.id', ondelete='CASCADE'), nullable=False, index=True)
    platform = Column(String(100), nullable=False)
    account_id = Column(String(255), nullable=False)

    person = relationship('Person', back_populates='social_media')


class PersonEducation(Base, CreatedAtMixin):
    __tablename__ = 'person_education'

    id = Column(String(255), primary_key=True, default=generate_id)
    person_id = Column(String(255), ForeignKey('persons.id', ondelete='CASCADE'), nullable=False, index=True)
    qualification = Column(String(255), nullable=True)
    institution = Column(String(255), nullable=True)
    education_info = Column(Text, nullable=True)

    person = relationship('Person', back_populates='education')


class PersonProfessional(Base, CreatedAtMixin):
    __tablename__ = 'person_professional'

    id = Column(String(255), primary_key=True, default=generate_id)
    person_id = Column(String(255), ForeignKey('persons.id', ondelete='CASCADE'), nullable=False, index=True)
    profession = Column(String(255), nullable=True)
    profession_description = Column(Text, nullable=True)

    person = relationship('Person', back_populates='professional')


class PersonRemark(Base, CreatedAtMixin):
    """Operator note about a person."""

    __tablename__ = 'person_remarks'

    id = Column(String(255), primary_key=True, default=generate_id)
    person_id = Column(String(255), ForeignKey('persons.id', ondelete='CASCADE'), nullable=False, index=True)
    content = Column(Text, nullable=False)

    person = relationship('Person', back_populates='remarks')


class PersonRegistrationMovement(Base, CreatedAtMixin):
    """
    Entry or exit noted by the registration desk.

    Separate from the gate entry ledger: these rows belong to the person
    record and are versioned with it.
    """

    __tablename__ = 'person_registration_movement'

    id = Column(String(255), primary_key=True, default=generate_id)
    person_id = Column(String(255), ForeignKey('persons.id', ondelete='CASCADE'), nullable=False, index=True)
    movement_type = Column(enum_type(MovementType, 'movement_type'), nullable=False)

    person = relationship('Person', back_populates='registration_movements')
