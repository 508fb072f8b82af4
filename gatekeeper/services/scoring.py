# gatekeeper/services/scoring.py
"""
Relevance scoring for operator search.

Pure functions: no database access. ``score_fields`` takes the searchable
field values of one person and the query tokens and returns a score plus
the fields that contributed to it.
"""

import re
from difflib import SequenceMatcher
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

# ---------------------------------------------------------------------
# Weight table
# ---------------------------------------------------------------------

FIELD_GROUPS: Dict[str, Tuple[str, ...]] = {
    "name": ("name", "first_name", "last_name", "alias"),
    "contact": ("phone", "contact_number", "id_proof_number", "id_number", "email"),
    "address": ("address",),
}

GROUP_WEIGHTS: Dict[str, float] = {
    "name": 3.0,
    "contact": 2.0,
    "address": 1.0,
}

SEARCHABLE_FIELDS: Tuple[str, ...] = tuple(f for fields in FIELD_GROUPS.values() for f in fields)

# ---------------------------------------------------------------------
# Token match strengths
# ---------------------------------------------------------------------

EXACT = 1.0
PREFIX = 0.75
FUZZY_FACTOR = 0.6
FUZZY_MIN_RATIO = 0.8
SUBSTRING = 0.5

_TOKEN_RE = re.compile(r"[^\W_]+", re.UNICODE)


def tokenize(text: Optional[str]) -> List[str]:
    """Lowercase alphanumeric tokens of ``text``."""
    if not text:
        return []
    return _TOKEN_RE.findall(text.lower())


def token_strength(query_token: str, value_tokens: Iterable[str]) -> float:
    """
    Best strength with which ``query_token`` matches any token of a value.

    exact 1.0 > prefix 0.75 > fuzzy 0.6 * ratio > substring 0.5
    """
    best = 0.0
    for token in value_tokens:
        if token == query_token:
            return EXACT
        if token.startswith(query_token):
            best = max(best, PREFIX)
            continue
        ratio = SequenceMatcher(None, query_token, token).ratio()
        if ratio >= FUZZY_MIN_RATIO:
            best = max(best, FUZZY_FACTOR * ratio)
        if query_token in token:
            best = max(best, SUBSTRING)
    return best


def score_fields(
    values: Mapping[str, Optional[str]],
    query_tokens: List[str],
) -> Tuple[float, List[str]]:
    """
    Score one person's field values against the query tokens.

    For every query token and every field group, the best strength in the
    group is multiplied by the group weight; the score is the sum.

    Args:
        values: Field name -> value (missing or None fields are skipped)
        query_tokens: Output of ``tokenize``

    Returns:
        Tuple of (score, sorted list of contributing field names)
    """
    tokenized = {f: tokenize(values.get(f)) for f in SEARCHABLE_FIELDS}
    score = 0.0
    matched = set()

    for query_token in query_tokens:
        for group, fields in FIELD_GROUPS.items():
            best = 0.0
            best_field = None
            for f in fields:
                strength = token_strength(query_token, tokenized[f])
                if strength > best:
                    best, best_field = strength, f
            if best_field is not None:
                score += GROUP_WEIGHTS[group] * best
                matched.add(best_field)

    return score, sorted(matched)
