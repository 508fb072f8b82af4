"""Biometric enrollment and matching."""

from .index import BiometricIndex, TemplateScorer
from .matching import MatchCandidate, MatchResult

__all__ = [
    "BiometricIndex",
    "TemplateScorer",
    "MatchCandidate",
    "MatchResult",
]
