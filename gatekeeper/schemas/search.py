"""Operator search schemas."""
from typing import List

from pydantic import BaseModel

from gatekeeper.schemas.person import PersonInDB


class SearchHitOut(BaseModel):
    person: PersonInDB
    score: float
    matched_fields: List[str]


class SearchResponse(BaseModel):
    query: str
    results: List[SearchHitOut]
    total: int
