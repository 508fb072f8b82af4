"""Operator search API."""

import logging

from fastapi import APIRouter, Depends, Query

from gatekeeper.api.deps import get_search_index
from gatekeeper.schemas.person import PersonInDB
from gatekeeper.schemas.search import SearchHitOut, SearchResponse
from gatekeeper.services.search import MAX_RESULTS, SearchIndex

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=SearchResponse)
def search_persons(
    q: str = Query(..., min_length=1, max_length=200, description="Free-text query"),
    limit: int = Query(20, ge=1, le=MAX_RESULTS),
    include_deactivated: bool = Query(False),
    index: SearchIndex = Depends(get_search_index),
):
    """
    Ranked search over names, aliases, phone numbers, ID numbers, email
    and address.
    """
    hits = index.search(q, limit=limit, include_deactivated=include_deactivated)
    return SearchResponse(
        query=q,
        results=[
            SearchHitOut(
                person=PersonInDB.model_validate(h.person),
                score=h.score,
                matched_fields=h.matched_fields,
            )
            for h in hits
        ],
        total=len(hits),
    )
