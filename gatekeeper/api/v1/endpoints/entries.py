"""
Entry Ledger API
================

Gateway devices post entry/exit events here. ``request_id`` makes the call
idempotent: a new event answers 201, a replay answers 200 with the event
stored by the first call.
"""

from datetime import datetime
from typing import Optional
import logging

from fastapi import APIRouter, Depends, Path, Query, Response, status

from gatekeeper.api.deps import get_entry_ledger
from gatekeeper.core.retry import retry_on_exception
from gatekeeper.models.enums import Direction
from gatekeeper.schemas.entry import EntryCreate, EntryListResponse, EntryLogInDB
from gatekeeper.services.entry_ledger import EntryLedger

router = APIRouter()
logger = logging.getLogger(__name__)

MAX_LIST_LIMIT = 500


@retry_on_exception()
def _submit(ledger: EntryLedger, entry: EntryCreate):
    return ledger.submit(
        request_id=entry.request_id,
        person_id=entry.person_id,
        device_id=entry.device_id,
        method=entry.biometric_method,
        match_type=entry.match_type,
        direction=entry.direction,
        confidence=entry.confidence_score,
        timestamp=entry.timestamp,
        vehicle=entry.vehicle.model_dump() if entry.vehicle else None,
        image_url=entry.image_url,
        remarks=entry.remarks,
        is_synced=entry.is_synced,
    )


@router.post("", response_model=EntryLogInDB, status_code=status.HTTP_201_CREATED)
def record_entry(
    entry: EntryCreate,
    response: Response,
    ledger: EntryLedger = Depends(get_entry_ledger),
):
    """
    Record an entry or exit.

    Transient storage failures are retried here; the call is idempotent on
    ``request_id`` so a retry can never store the event twice.

    **Errors:**
    - 422 when the person or device cannot be resolved
    - 503 when storage stays unavailable after retries
    """
    event, created = _submit(ledger, entry)
    if not created:
        response.status_code = status.HTTP_200_OK
    return event


@router.get("", response_model=EntryListResponse)
def list_entries(
    person_id: Optional[str] = Query(None),
    device_id: Optional[str] = Query(None),
    direction: Optional[Direction] = Query(None),
    since: Optional[datetime] = Query(None),
    until: Optional[datetime] = Query(None),
    is_synced: Optional[bool] = Query(None, description="Filter on offline sync delivery"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=MAX_LIST_LIMIT),
    ledger: EntryLedger = Depends(get_entry_ledger),
):
    """Entry events, newest first."""
    events, total = ledger.list_events(
        person_id=person_id,
        device_id=device_id,
        direction=direction,
        since=since,
        until=until,
        is_synced=is_synced,
        skip=skip,
        limit=limit,
    )
    return EntryListResponse(
        entries=[EntryLogInDB.model_validate(e) for e in events],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.get("/{event_id}", response_model=EntryLogInDB)
def get_entry(
    event_id: str = Path(..., description="Entry event ID"),
    ledger: EntryLedger = Depends(get_entry_ledger),
):
    return ledger.get(event_id)
