"""Biometric sample repository."""
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from gatekeeper.models.biometric import FaceEmbedding, FingerprintTemplate
from gatekeeper.models.enums import PersonStatus
from gatekeeper.models.person import Person
from .base import BaseRepository


class FaceEmbeddingRepository(BaseRepository[FaceEmbedding]):
    """Face embedding storage and candidate selection."""

    def __init__(self, db: Session):
        super().__init__(FaceEmbedding, db)

    def _live(self, active_only: bool):
        query = self.db.query(FaceEmbedding).filter(FaceEmbedding.is_deleted.is_(False))
        if active_only:
            query = query.join(Person, Person.id == FaceEmbedding.person_id).filter(
                Person.status == PersonStatus.active
            )
        return query

    def live_embeddings(self, active_only: bool = False) -> List[FaceEmbedding]:
        """All non-deleted embeddings, read in a single statement."""
        return self._live(active_only).all()

    def nearest(
        self,
        probe: Sequence[float],
        limit: int,
        active_only: bool = False,
    ) -> List[tuple]:
        """
        Nearest non-deleted embeddings by L2 distance, computed by pgvector.

        Returns:
            List of (FaceEmbedding, distance), nearest first, newest first on ties
        """
        distance = FaceEmbedding.embedding.l2_distance(probe).label("distance")
        query = (
            self._live(active_only)
            .add_columns(distance)
            .order_by(distance, FaceEmbedding.enrolled_seq.desc(), FaceEmbedding.id.desc())
            .limit(limit)
        )
        return [(row[0], float(row[1])) for row in query.all()]

    def for_person(self, person_id: str, include_deleted: bool = False) -> List[FaceEmbedding]:
        query = self.db.query(FaceEmbedding).filter(FaceEmbedding.person_id == person_id)
        if not include_deleted:
            query = query.filter(FaceEmbedding.is_deleted.is_(False))
        return query.order_by(FaceEmbedding.enrolled_seq.desc()).all()


class FingerprintTemplateRepository(BaseRepository[FingerprintTemplate]):
    """Fingerprint template storage and candidate selection."""

    def __init__(self, db: Session):
        super().__init__(FingerprintTemplate, db)

    def live_templates(
        self,
        finger_position: Optional[str] = None,
        active_only: bool = False,
    ) -> List[FingerprintTemplate]:
        """All non-deleted templates, optionally for one finger position."""
        query = self.db.query(FingerprintTemplate).filter(FingerprintTemplate.is_deleted.is_(False))
        if finger_position:
            query = query.filter(FingerprintTemplate.finger_position == finger_position)
        if active_only:
            query = query.join(Person, Person.id == FingerprintTemplate.person_id).filter(
                Person.status == PersonStatus.active
            )
        return query.all()

    def for_person(self, person_id: str, include_deleted: bool = False) -> List[FingerprintTemplate]:
        query = self.db.query(FingerprintTemplate).filter(FingerprintTemplate.person_id == person_id)
        if not include_deleted:
            query = query.filter(FingerprintTemplate.is_deleted.is_(False))
        return query.order_by(FingerprintTemplate.enrolled_seq.desc()).all()
