"""Person repository for database operations."""
from datetime import datetime
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple
import logging

from sqlalchemy import func, or_, text, update
from sqlalchemy.orm import Session

from gatekeeper.models.enums import PersonCategory, PersonStatus
from gatekeeper.models.person import Person, PersonRelationship, PersonSocialMedia
from .base import BaseRepository

logger = logging.getLogger(__name__)


class PersonRepository(BaseRepository[Person]):
    """Repository for person operations."""

    def __init__(self, db: Session):
        super().__init__(Person, db)

    def get_by_id(self, person_id: str, refresh: bool = False) -> Optional[Person]:
        """
        Get person by ID.

        Args:
            person_id: Person ID
            refresh: Re-read the row even if the session already holds it
        """
        if refresh:
            return (
                self.db.query(Person)
                .filter(Person.id == person_id)
                .populate_existing()
                .first()
            )
        return self.db.get(Person, person_id)

    def compare_and_set(
        self,
        person_id: str,
        expected_version: int,
        values: Dict[str, Any],
    ) -> bool:
        """
        Write ``values`` and bump the version iff the stored version matches.

        The version check happens inside the UPDATE statement itself, so two
        writers holding the same version can never both succeed.

        Returns:
            True if exactly one row was updated
        """
        stmt = (
            update(Person)
            .where(Person.id == person_id, Person.version == expected_version)
            .values(**values, version=Person.version + 1, updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        return result.rowcount == 1

    def current_version(self, person_id: str) -> Optional[int]:
        """Read the committed version without loading the full row."""
        return self.db.query(Person.version).filter(Person.id == person_id).scalar()

    def list_persons(
        self,
        skip: int = 0,
        limit: int = 100,
        status: Optional[PersonStatus] = None,
        category: Optional[PersonCategory] = None,
        village_id: Optional[str] = None,
    ) -> Tuple[List[Person], int]:
        """Get persons with pagination and optional filters."""
        return self.get_multi(
            skip=skip,
            limit=limit,
            order_by='created_at',
            filters={'status': status, 'category': category, 'village_id': village_id},
        )

    def iter_search_candidates(self, include_deactivated: bool = False, batch_size: int = 500) -> Iterator[Person]:
        """Every person eligible for search, streamed in id order."""
        query = self.db.query(Person)
        if not include_deactivated:
            query = query.filter(Person.status == PersonStatus.active)
        return query.order_by(Person.id).yield_per(batch_size)

    def trigram_candidates_query(
        self,
        tokens: Sequence[str],
        field_groups: Mapping[str, Sequence[str]],
        group_weights: Mapping[str, float],
        include_deactivated: bool = False,
        limit: int = 500,
    ):
        """
        PostgreSQL candidate query narrowed and ordered with pg_trgm.

        A person qualifies when any searchable column contains a token or is
        word-similar to it (``%>``, served by the trigram GIN indexes). Rows
        are ordered by the group-weighted best word similarity per token, so
        cutting at ``limit`` drops the weakest candidates, never arbitrary ones.
        """
        matches = []
        relevance = []
        for token in tokens:
            for group, columns in field_groups.items():
                similarities = []
                for column in columns:
                    col = getattr(Person, column)
                    matches.append(col.ilike(f"%{token}%"))
                    matches.append(col.op("%>")(token))
                    similarities.append(func.coalesce(func.word_similarity(token, col), 0.0))
                relevance.append(group_weights[group] * func.greatest(*similarities))

        query = self.db.query(Person).filter(or_(*matches))
        if not include_deactivated:
            query = query.filter(Person.status == PersonStatus.active)

        score = relevance[0]
        for term in relevance[1:]:
            score = score + term
        return query.order_by(score.desc(), Person.id).limit(limit)

    def trigram_candidates(
        self,
        tokens: Sequence[str],
        field_groups: Mapping[str, Sequence[str]],
        group_weights: Mapping[str, float],
        include_deactivated: bool = False,
        limit: int = 500,
        similarity_threshold: float = 0.3,
    ) -> List[Person]:
        """Run ``trigram_candidates_query`` with a transaction-local similarity threshold."""
        if not tokens:
            return []
        self.db.execute(
            text("SELECT set_config('pg_trgm.word_similarity_threshold', :threshold, true)"),
            {"threshold": str(similarity_threshold)},
        )
        query = self.trigram_candidates_query(
            tokens,
            field_groups,
            group_weights,
            include_deactivated=include_deactivated,
            limit=limit,
        )
        return query.all()

    def get_relationship(self, person_id: str, relationship_id: str) -> Optional[PersonRelationship]:
        """Get one relationship edge owned by a person."""
        return self.db.query(PersonRelationship).filter(
            PersonRelationship.id == relationship_id,
            PersonRelationship.person_id == person_id,
        ).first()

    def find_relationship(
        self,
        person_id: str,
        related_person_id: Optional[str],
        relationship_type: Any,
    ) -> Optional[PersonRelationship]:
        """Find an existing edge by its natural key."""
        if related_person_id is None:
            return None
        return self.db.query(PersonRelationship).filter(
            PersonRelationship.person_id == person_id,
            PersonRelationship.related_person_id == related_person_id,
            PersonRelationship.relationship_type == relationship_type,
        ).first()

    def find_social_media(self, person_id: str, platform: str, account_id: str) -> Optional[PersonSocialMedia]:
        return self.db.query(PersonSocialMedia).filter(
            PersonSocialMedia.person_id == person_id,
            PersonSocialMedia.platform == platform,
            PersonSocialMedia.account_id == account_id,
        ).first()
