"""
Entry Ledger
============

Append-only log of entry/exit events submitted by gateway devices.

Submission is idempotent on ``request_id``: the first write wins and every
replay, even one with a different payload, gets the stored event back.
Events are never updated or deleted.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from gatekeeper.core.errors import ForeignKeyViolation, NotFound, ValidationError, coerce
from gatekeeper.db.base import atomic
from gatekeeper.models.entry_log import EntryLog
from gatekeeper.models.enums import Direction
from gatekeeper.repositories.entry_repo import EntryLogRepository
from gatekeeper.repositories.person_repo import PersonRepository
from gatekeeper.schemas.entry import EntryCreate
from .topology import TopologyRegistry

logger = logging.getLogger(__name__)


class EntryLedger:
    """Service for recording and querying entry events."""

    def __init__(self, db: Session):
        self.db = db
        self.repo = EntryLogRepository(db)
        self.persons = PersonRepository(db)
        self.topology = TopologyRegistry(db)

    def submit(
        self,
        request_id: str,
        person_id: str,
        device_id: str,
        method,
        match_type,
        direction,
        confidence: float,
        timestamp: datetime,
        vehicle: Optional[Dict[str, Any]] = None,
        image_url: Optional[str] = None,
        remarks: Optional[str] = None,
        is_synced: bool = False,
    ) -> Tuple[EntryLog, bool]:
        """
        Store an entry event unless ``request_id`` was already recorded.

        Returns:
            Tuple of (event, created). ``created`` is False for a replay, in
            which case the originally stored event is returned unchanged.

        Raises:
            ValidationError: malformed event (confidence outside [0, 1], ...)
            ForeignKeyViolation: unknown person, or device not resolvable to
                a node and village
        """
        if not request_id:
            raise ValidationError("request_id is required")

        existing = self.repo.get_by_request_id(request_id)
        if existing is not None:
            logger.info(f"Replay of request {request_id}; returning event {existing.id}")
            return existing, False

        entry = coerce(EntryCreate, {
            "request_id": request_id,
            "person_id": person_id,
            "device_id": device_id,
            "biometric_method": method,
            "match_type": match_type,
            "direction": direction,
            "confidence_score": confidence,
            "timestamp": timestamp,
            "vehicle": vehicle,
            "image_url": image_url,
            "remarks": remarks,
            "is_synced": is_synced,
        })

        with atomic(self.db):
            person = self.persons.get(entry.person_id)
            if person is None:
                raise ForeignKeyViolation(
                    f"Person {entry.person_id} does not exist",
                    details={"person_id": entry.person_id},
                )
            self.topology.resolve_device(entry.device_id)

            event = EntryLog(
                request_id=entry.request_id,
                person_id=entry.person_id,
                person_name=person.name,
                device_id=entry.device_id,
                biometric_method=entry.biometric_method,
                match_type=entry.match_type,
                direction=entry.direction,
                confidence_score=entry.confidence_score,
                timestamp=entry.timestamp,
                image_url=entry.image_url,
                remarks=entry.remarks,
                is_synced=entry.is_synced,
            )
            if entry.vehicle is not None:
                event.vehicle_type = entry.vehicle.vehicle_type
                event.vehicle_number = entry.vehicle.vehicle_number
                event.vehicle_make_model = entry.vehicle.make_model
                event.vehicle_remarks = entry.vehicle.remarks

            stored, created = self.repo.insert_if_absent(event)
            if stored is None:
                raise ForeignKeyViolation(
                    "Entry event references records that no longer exist",
                    details={"person_id": entry.person_id, "device_id": entry.device_id},
                )

        if created:
            logger.info(
                f"Recorded {stored.direction.value} event {stored.id} for person {stored.person_id} "
                f"at device {stored.device_id} (request {request_id})"
            )
        return stored, created

    def record(self, *args, **kwargs) -> EntryLog:
        """Same as ``submit`` but returns only the stored event."""
        event, _ = self.submit(*args, **kwargs)
        return event

    def get(self, event_id: str) -> EntryLog:
        event = self.repo.get(event_id)
        if event is None:
            raise NotFound(f"Entry event {event_id} not found", details={"event_id": event_id})
        return event

    def get_by_request_id(self, request_id: str) -> Optional[EntryLog]:
        return self.repo.get_by_request_id(request_id)

    def list_events(
        self,
        person_id: Optional[str] = None,
        device_id: Optional[str] = None,
        direction: Optional[Direction] = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        is_synced: Optional[bool] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> Tuple[List[EntryLog], int]:
        """Events newest first, with total count."""
        return self.repo.list_events(
            person_id=person_id,
            device_id=device_id,
            direction=direction,
            since=since,
            until=until,
            is_synced=is_synced,
            skip=skip,
            limit=limit,
        )
