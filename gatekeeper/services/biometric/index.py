"""
Biometric Index
===============

Stores face embeddings and fingerprint templates per person and ranks them
against a probe.

Face distances are Euclidean (L2). On PostgreSQL the ordering is pushed
into pgvector; elsewhere the candidate set is loaded and ranked with numpy.
Fingerprint comparison belongs to an external scorer; this module only
builds the candidate set and applies the ranking/threshold policy.

Each match reads its candidates with a single SELECT, so it observes a
committed point-in-time snapshot: enrollments and soft deletes still in
flight in other transactions are invisible.
"""

import logging
from typing import List, Optional, Protocol, Sequence

import numpy as np
from sqlalchemy.orm import Session

from gatekeeper.app.config import settings
from gatekeeper.core.errors import NotFound, ScorerUnavailable, ValidationError
from gatekeeper.db.base import atomic
from gatekeeper.models.biometric import FaceEmbedding, FingerprintTemplate
from gatekeeper.repositories.biometric_repo import FaceEmbeddingRepository, FingerprintTemplateRepository
from gatekeeper.repositories.person_repo import PersonRepository
from .matching import (
    MatchResult,
    ScoredSample,
    l2_distances,
    rank,
    validate_embedding,
    validate_match_params,
    validate_quality,
)

logger = logging.getLogger(__name__)

# pgvector returns one row per sample; over-fetch so per-person dedup still
# leaves top_k persons in the common case.
PGVECTOR_OVERFETCH = 8
PGVECTOR_MIN_FETCH = 50


def _scored(sample, distance: float) -> ScoredSample:
    return ScoredSample(
        person_id=sample.person_id,
        sample_id=sample.id,
        distance=float(distance),
        enrolled_at=sample.created_at,
        enrolled_seq=sample.enrolled_seq,
    )


class TemplateScorer(Protocol):
    """External fingerprint comparison capability."""

    def distance(self, probe: bytes, template: bytes) -> float:
        """Dissimilarity between two templates; 0 is a perfect match."""
        ...


class BiometricIndex:
    """Enrollment, soft deletion and matching of biometric samples."""

    def __init__(self, db: Session, template_scorer: Optional[TemplateScorer] = None):
        self.db = db
        self.persons = PersonRepository(db)
        self.embeddings = FaceEmbeddingRepository(db)
        self.templates = FingerprintTemplateRepository(db)
        self.template_scorer = template_scorer

    def _require_person(self, person_id: str) -> None:
        if not self.persons.exists(person_id):
            raise NotFound(f"Person {person_id} not found", details={"person_id": person_id})

    # =========================================================================
    # Enrollment
    # =========================================================================

    def enroll_embedding(
        self,
        person_id: str,
        vector: Sequence[float],
        quality_score: Optional[float] = None,
        photo_id: Optional[str] = None,
    ) -> FaceEmbedding:
        """
        Append a face embedding for a person.

        Args:
            person_id: Owner of the sample
            vector: 512-dimensional embedding
            quality_score: Capture quality in [0, 1]
            photo_id: Source photo reference

        Raises:
            ValidationError: bad dimension, non-finite values or quality
            NotFound: unknown person
        """
        arr = validate_embedding(vector)
        quality = validate_quality(quality_score)
        self._require_person(person_id)

        with atomic(self.db):
            sample = self.embeddings.add(FaceEmbedding(
                person_id=person_id,
                embedding=arr.astype(np.float32),
                quality_score=quality,
                photo_id=photo_id,
                is_deleted=False,
            ))

        logger.info(f"Enrolled face embedding {sample.id} for person {person_id}")
        return sample

    def enroll_template(
        self,
        person_id: str,
        blob: bytes,
        position: Optional[str] = None,
        quality_score: Optional[float] = None,
    ) -> FingerprintTemplate:
        """
        Append a fingerprint template for a person.

        Raises:
            ValidationError: empty template or bad quality
            NotFound: unknown person
        """
        if not isinstance(blob, (bytes, bytearray)) or not blob:
            raise ValidationError("Template must be non-empty bytes")
        quality = validate_quality(quality_score)
        self._require_person(person_id)

        with atomic(self.db):
            sample = self.templates.add(FingerprintTemplate(
                person_id=person_id,
                template=bytes(blob),
                finger_position=position,
                quality_score=quality,
                is_deleted=False,
            ))

        logger.info(f"Enrolled fingerprint template {sample.id} ({position}) for person {person_id}")
        return sample

    def soft_delete(self, sample_id: str):
        """
        Exclude a sample from future matches. The row itself is kept.

        Deleting an already deleted sample is a no-op.

        Returns:
            The FaceEmbedding or FingerprintTemplate that was marked

        Raises:
            NotFound: no sample with this id
        """
        with atomic(self.db):
            sample = self.embeddings.get(sample_id) or self.templates.get(sample_id)
            if sample is None:
                raise NotFound(f"Biometric sample {sample_id} not found", details={"sample_id": sample_id})
            if not sample.is_deleted:
                sample.is_deleted = True
                self.db.flush()
                logger.info(f"Soft-deleted biometric sample {sample_id} of person {sample.person_id}")
        return sample

    def samples_for(self, person_id: str, include_deleted: bool = False) -> List:
        """All embeddings and templates of a person, newest first."""
        self._require_person(person_id)
        samples = self.embeddings.for_person(person_id, include_deleted) + \
            self.templates.for_person(person_id, include_deleted)
        return sorted(samples, key=lambda s: s.enrolled_seq, reverse=True)

    # =========================================================================
    # Matching
    # =========================================================================

    def match_face(
        self,
        probe: Sequence[float],
        top_k: Optional[int] = None,
        threshold: Optional[float] = None,
        active_only: bool = False,
    ) -> MatchResult:
        """
        Rank persons by the L2 distance of their closest live embedding.

        Args:
            probe: 512-dimensional embedding of the captured face
            top_k: Maximum persons to return
            threshold: Maximum accepted distance
            active_only: Skip deactivated persons

        Returns:
            MatchResult; ``unmatched`` when the best distance exceeds threshold
        """
        top_k = settings.FACE_MATCH_TOP_K if top_k is None else top_k
        threshold = settings.FACE_MATCH_THRESHOLD if threshold is None else threshold
        validate_match_params(top_k, threshold)
        probe_arr = validate_embedding(probe)

        if self.db.get_bind().dialect.name == "postgresql":
            scored = self._score_faces_pgvector(probe_arr, top_k, active_only)
        else:
            scored = self._score_faces_numpy(probe_arr, active_only)

        result = rank(scored, top_k, threshold)
        self._log_result("face", result)
        return result

    def _score_faces_pgvector(self, probe: np.ndarray, top_k: int, active_only: bool) -> List[ScoredSample]:
        limit = max(top_k * PGVECTOR_OVERFETCH, PGVECTOR_MIN_FETCH)
        rows = self.embeddings.nearest(probe.tolist(), limit=limit, active_only=active_only)
        return [_scored(e, distance) for e, distance in rows]

    def _score_faces_numpy(self, probe: np.ndarray, active_only: bool) -> List[ScoredSample]:
        live = self.embeddings.live_embeddings(active_only=active_only)
        if not live:
            return []
        matrix = np.vstack([np.asarray(e.embedding, dtype=np.float64) for e in live])
        distances = l2_distances(probe, matrix)
        return [_scored(e, d) for e, d in zip(live, distances)]

    def match_fingerprint(
        self,
        probe_template: bytes,
        top_k: Optional[int] = None,
        threshold: Optional[float] = None,
        finger_position: Optional[str] = None,
        active_only: bool = False,
    ) -> MatchResult:
        """
        Rank persons by the scorer's distance to their closest live template.

        Raises:
            ScorerUnavailable: no template scorer configured
            ValidationError: empty probe or bad parameters
        """
        if self.template_scorer is None:
            raise ScorerUnavailable("No fingerprint template scorer is configured")
        if not isinstance(probe_template, (bytes, bytearray)) or not probe_template:
            raise ValidationError("Probe template must be non-empty bytes")

        top_k = settings.FINGERPRINT_MATCH_TOP_K if top_k is None else top_k
        threshold = settings.FINGERPRINT_MATCH_THRESHOLD if threshold is None else threshold
        validate_match_params(top_k, threshold)

        scored = []
        for template in self.templates.live_templates(finger_position=finger_position, active_only=active_only):
            distance = float(self.template_scorer.distance(bytes(probe_template), template.template))
            if not np.isfinite(distance):
                logger.warning(f"Scorer returned non-finite distance for template {template.id}; skipped")
                continue
            scored.append(_scored(template, distance))

        result = rank(scored, top_k, threshold)
        self._log_result("fingerprint", result)
        return result

    def _log_result(self, modality: str, result: MatchResult) -> None:
        if result.matched:
            logger.info(
                f"{modality} match: {len(result.candidates)} candidate(s), "
                f"best {result.best.person_id} at {result.best.distance:.4f}"
            )
        else:
            logger.info(f"{modality} probe unmatched (best distance {result.best_distance}, threshold {result.threshold})")
