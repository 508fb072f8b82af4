"""Entry log repository."""
from datetime import datetime
from typing import List, Optional, Tuple
import logging

from sqlalchemy import desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gatekeeper.models.entry_log import EntryLog
from gatekeeper.models.enums import Direction
from .base import BaseRepository

logger = logging.getLogger(__name__)


class EntryLogRepository(BaseRepository[EntryLog]):
    """Repository for entry/exit events."""

    def __init__(self, db: Session):
        super().__init__(EntryLog, db)

    def get_by_request_id(self, request_id: str) -> Optional[EntryLog]:
        """Get the event stored for an idempotency key."""
        return self.db.query(EntryLog).filter(EntryLog.request_id == request_id).first()

    def insert_if_absent(self, event: EntryLog) -> Tuple[Optional[EntryLog], bool]:
        """
        Insert ``event`` unless its request_id is already stored.

        The insert runs inside a SAVEPOINT. If the unique constraint on
        ``request_id`` rejects it (a concurrent duplicate won the race), the
        savepoint is rolled back and the stored row is returned instead.

        Returns:
            Tuple of (stored event, created). The event is None when the
            insert failed for a reason other than a duplicate request_id.
        """
        savepoint = self.db.begin_nested()
        try:
            self.db.add(event)
            self.db.flush()
        except IntegrityError as e:
            savepoint.rollback()
            existing = self.get_by_request_id(event.request_id)
            if existing is None:
                logger.warning(f"Entry insert for {event.request_id} rejected: {e.orig}")
                return None, False
            logger.info(f"Concurrent duplicate for request {event.request_id} resolved to {existing.id}")
            return existing, False
        savepoint.commit()
        return event, True

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
        """
        Query events, newest first.

        Returns:
            Tuple of (events, total count)
        """
        query = self.db.query(EntryLog)

        if person_id:
            query = query.filter(EntryLog.person_id == person_id)
        if device_id:
            query = query.filter(EntryLog.device_id == device_id)
        if direction:
            query = query.filter(EntryLog.direction == direction)
        if since:
            query = query.filter(EntryLog.timestamp >= since)
        if until:
            query = query.filter(EntryLog.timestamp <= until)
        if is_synced is not None:
            query = query.filter(EntryLog.is_synced == is_synced)

        total = query.count()
        events = (
            query.order_by(desc(EntryLog.timestamp), desc(EntryLog.id))
            .offset(skip)
            .limit(limit)
            .all()
        )
        return events, total
