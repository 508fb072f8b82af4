"""Operator search over enrolled persons."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List

from sqlalchemy.orm import Session

from gatekeeper.app.config import settings
from gatekeeper.core.errors import ValidationError
from gatekeeper.models.person import Person
from gatekeeper.repositories.person_repo import PersonRepository
from .scoring import FIELD_GROUPS, GROUP_WEIGHTS, SEARCHABLE_FIELDS, score_fields, tokenize

logger = logging.getLogger(__name__)

MAX_RESULTS = 100


@dataclass
class SearchHit:
    person: Person
    score: float
    matched_fields: List[str]


class SearchIndex:
    """
    Ranked free-text search.

    On PostgreSQL candidates are narrowed and pre-ranked with pg_trgm
    (containment or word similarity per token), so typos anywhere in a
    word still reach the scorer. Other backends stream every eligible
    person. Either way the final ranking is ``scoring.score_fields``.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = PersonRepository(db)

    def search(self, query: str, limit: int = 20, include_deactivated: bool = False) -> List[SearchHit]:
        """
        Search persons by name, contact, identity and address fields.

        Results are ordered by score, then most recently verified
        (never-verified last), then id.

        Raises:
            ValidationError: empty query or bad limit
        """
        tokens = tokenize(query)
        if not tokens:
            raise ValidationError("Search query must contain at least one letter or digit")
        if limit < 1 or limit > MAX_RESULTS:
            raise ValidationError(f"limit must be between 1 and {MAX_RESULTS}", details={"limit": limit})

        if self.db.get_bind().dialect.name == "postgresql":
            candidates = self.repo.trigram_candidates(
                sorted(set(tokens)),
                FIELD_GROUPS,
                GROUP_WEIGHTS,
                include_deactivated=include_deactivated,
                limit=settings.SEARCH_CANDIDATE_LIMIT,
                similarity_threshold=settings.SEARCH_TRIGRAM_THRESHOLD,
            )
        else:
            candidates = self.repo.iter_search_candidates(include_deactivated=include_deactivated)

        hits = []
        scanned = 0
        for person in candidates:
            scanned += 1
            values = {f: getattr(person, f) for f in SEARCHABLE_FIELDS}
            score, matched = score_fields(values, tokens)
            if score > 0:
                hits.append(SearchHit(person=person, score=score, matched_fields=matched))

        # Stable sorts, least significant key first
        hits.sort(key=lambda h: h.person.id)
        hits.sort(key=lambda h: h.person.last_verified_at or datetime.min, reverse=True)
        hits.sort(key=lambda h: h.score, reverse=True)

        logger.debug(f"Search {query!r}: {scanned} candidates, {len(hits)} hits")
        return hits[:limit]
