"""Face embedding and fingerprint template models."""
import threading
import time

from sqlalchemy import BigInteger, Boolean, Column, Float, ForeignKey, Index, LargeBinary, String
from sqlalchemy.orm import relationship
from pgvector.sqlalchemy import Vector

from gatekeeper.db.base import Base
from .base import CreatedAtMixin
from .person import generate_id

# Face embedding dimension produced by the capture service. Bit-exact.
EMBEDDING_DIMENSION = 512

_seq_lock = threading.Lock()
_last_seq = 0


def next_enrollment_seq() -> int:
    """
    Enrollment order key shared by all biometric samples.

    Nanosecond wall clock, forced strictly increasing within the process,
    so samples enrolled within one clock tick still order by insertion.
    """
    global _last_seq
    with _seq_lock:
        _last_seq = max(time.time_ns(), _last_seq + 1)
        return _last_seq


class FaceEmbedding(Base, CreatedAtMixin):
    """Face embedding enrolled for a person."""

    __tablename__ = 'person_face_embeddings'
    __table_args__ = (
        Index('ix_person_face_embeddings_live', 'person_id', 'is_deleted'),
    )

    id = Column(String(255), primary_key=True, default=generate_id)
    person_id = Column(String(255), ForeignKey('persons.id', ondelete='CASCADE'), nullable=False, index=True)

    # Face embedding (512-dimensional vector)
    embedding = Column(Vector(EMBEDDING_DIMENSION), nullable=False)

    photo_id = Column(String(255), nullable=True)
    quality_score = Column(Float, nullable=True)

    # Soft delete; rows are kept for audit
    is_deleted = Column(Boolean, default=False, nullable=False)

    # Insertion order; breaks distance ties in favour of the newest sample
    enrolled_seq = Column(BigInteger, nullable=False, default=next_enrollment_seq, index=True)

    person = relationship('Person', back_populates='embeddings')

    def __repr__(self) -> str:
        return f'<FaceEmbedding(id={self.id}, person_id={self.person_id}, is_deleted={self.is_deleted})>'


class FingerprintTemplate(Base, CreatedAtMixin):
    """Opaque fingerprint template enrolled for a person."""

    __tablename__ = 'person_fingerprint_templates'
    __table_args__ = (
        Index('ix_person_fingerprint_templates_live', 'person_id', 'is_deleted'),
    )

    id = Column(String(255), primary_key=True, default=generate_id)
    person_id = Column(String(255), ForeignKey('persons.id', ondelete='CASCADE'), nullable=False, index=True)
    template = Column(LargeBinary, nullable=False)
    finger_position = Column(String(50), nullable=True)
    quality_score = Column(Float, nullable=True)
    is_deleted = Column(Boolean, default=False, nullable=False)

    # Insertion order; breaks distance ties in favour of the newest sample
    enrolled_seq = Column(BigInteger, nullable=False, default=next_enrollment_seq, index=True)

    person = relationship('Person', back_populates='templates')

    def __repr__(self) -> str:
        return f'<FingerprintTemplate(id={self.id}, person_id={self.person_id}, position={self.finger_position})>'
