"""
Ranking and threshold policy shared by face and fingerprint matching.

Pure functions over already-scored samples: no database access, no
comparison algorithm. Given identical inputs they always produce the same
ranking.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

import numpy as np

from gatekeeper.core.errors import ValidationError
from gatekeeper.models.biometric import EMBEDDING_DIMENSION


@dataclass(frozen=True)
class ScoredSample:
    """One stored sample with its distance to the probe."""
    person_id: str
    sample_id: str
    distance: float
    enrolled_at: datetime
    enrolled_seq: int


@dataclass(frozen=True)
class MatchCandidate:
    """Best sample of one person."""
    person_id: str
    sample_id: str
    distance: float
    enrolled_at: datetime


@dataclass
class MatchResult:
    """
    Outcome of a match call.

    An unmatched probe is a normal result (manual fallback follows), so it
    is returned as data rather than raised.
    """
    threshold: float
    candidates: List[MatchCandidate] = field(default_factory=list)
    best_distance: Optional[float] = None

    @property
    def matched(self) -> bool:
        return bool(self.candidates)

    @property
    def unmatched(self) -> bool:
        return not self.candidates

    @property
    def best(self) -> Optional[MatchCandidate]:
        return self.candidates[0] if self.candidates else None


def validate_embedding(vector: Sequence[float]) -> np.ndarray:
    """
    Check a face embedding and return it as a float64 array.

    Raises:
        ValidationError: wrong dimension or non-finite values
    """
    try:
        arr = np.asarray(vector, dtype=np.float64)
    except (TypeError, ValueError):
        raise ValidationError("Embedding must be a sequence of numbers")

    if arr.ndim != 1 or arr.shape[0] != EMBEDDING_DIMENSION:
        raise ValidationError(
            f"Embedding must have exactly {EMBEDDING_DIMENSION} dimensions",
            details={"expected": EMBEDDING_DIMENSION, "actual": int(arr.size)},
        )
    if not np.all(np.isfinite(arr)):
        raise ValidationError("Embedding contains non-finite values")
    return arr


def validate_quality(quality_score: Optional[float]) -> Optional[float]:
    """Quality scores are optional; when given they must lie in [0, 1]."""
    if quality_score is None:
        return None
    if not isinstance(quality_score, (int, float)) or not math.isfinite(quality_score):
        raise ValidationError("quality_score must be a finite number")
    if not 0.0 <= quality_score <= 1.0:
        raise ValidationError("quality_score must be between 0 and 1", details={"quality_score": quality_score})
    return float(quality_score)


def validate_match_params(top_k: int, threshold: float) -> None:
    if not isinstance(top_k, int) or top_k < 1:
        raise ValidationError("top_k must be a positive integer", details={"top_k": top_k})
    if not isinstance(threshold, (int, float)) or not math.isfinite(threshold) or threshold < 0:
        raise ValidationError("threshold must be a non-negative number", details={"threshold": threshold})


def l2_distances(probe: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """Euclidean distance from ``probe`` to each row of ``matrix``."""
    if matrix.size == 0:
        return np.empty(0, dtype=np.float64)
    return np.linalg.norm(matrix.astype(np.float64) - probe, axis=1)


def rank(scored: Iterable[ScoredSample], top_k: int, threshold: float) -> MatchResult:
    """
    Rank scored samples into per-person candidates.

    Ordering is ascending distance; equal distances prefer the most
    recently enrolled sample by insertion order (then the larger sample
    id, so the order is total). Each person appears once, represented by
    their best sample. Only candidates within ``threshold`` are kept; an
    empty list means the probe is unmatched.
    """
    samples = list(scored)
    # Stable sorts, least significant key first
    samples.sort(key=lambda s: s.sample_id, reverse=True)
    samples.sort(key=lambda s: s.enrolled_seq, reverse=True)
    samples.sort(key=lambda s: s.distance)

    result = MatchResult(threshold=float(threshold))
    if not samples:
        return result

    result.best_distance = float(samples[0].distance)

    seen = set()
    for sample in samples:
        if sample.distance > threshold:
            break
        if sample.person_id in seen:
            continue
        seen.add(sample.person_id)
        result.candidates.append(MatchCandidate(
            person_id=sample.person_id,
            sample_id=sample.sample_id,
            distance=float(sample.distance),
            enrolled_at=sample.enrolled_at,
        ))
        if len(result.candidates) >= top_k:
            break

    return result
