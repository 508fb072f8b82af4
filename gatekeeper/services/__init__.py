"""Domain services."""

from .biometric import BiometricIndex, MatchCandidate, MatchResult, TemplateScorer
from .entry_ledger import EntryLedger
from .person_directory import PersonDirectory
from .search import SearchHit, SearchIndex
from .topology import TopologyRegistry

__all__ = [
    "PersonDirectory",
    "BiometricIndex",
    "TemplateScorer",
    "MatchCandidate",
    "MatchResult",
    "EntryLedger",
    "SearchIndex",
    "SearchHit",
    "TopologyRegistry",
]
