"""
Person Audit Trail
==================

Append-only log of person-record mutations.

Records are added to the caller's session and committed together with the
mutation they describe, so a mutation never exists without its record and
vice versa. Unlike best-effort request logging, storage errors here are
never swallowed: a failed append must abort the whole unit of work.
"""

import logging
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from sqlalchemy import desc
from sqlalchemy.orm import Session

from gatekeeper.core.errors import ValidationError
from gatekeeper.models.audit_log import PersonAudit
from gatekeeper.models.enums import AuditAction


logger = logging.getLogger(__name__)


def _jsonable(value: Any) -> Any:
    """Coerce column values into something a JSON column accepts."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def diff_fields(old: Dict[str, Any], new: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    """
    Build the ``changed_fields`` payload for an audit record.

    Args:
        old: Field values before the mutation
        new: Field values after the mutation (only keys present are compared)

    Returns:
        ``{field: {"old": ..., "new": ...}}`` for fields whose value changed
    """
    changes = {}
    for field, new_value in new.items():
        old_value = old.get(field)
        if _jsonable(old_value) != _jsonable(new_value):
            changes[field] = {"old": _jsonable(old_value), "new": _jsonable(new_value)}
    return changes


class AuditTrail:
    """
    Append-only access to ``person_audit``.

    The only write is :meth:`append`; there is deliberately no update or
    delete method.
    """

    def __init__(self, db: Session):
        self.db = db

    def append(
        self,
        person_id: str,
        action: Union[str, AuditAction],
        old_version: int,
        new_version: int,
        changed_fields: Optional[Dict[str, Any]] = None,
        changed_by: Optional[str] = None,
    ) -> PersonAudit:
        """
        Append an audit record to the current transaction.

        Args:
            person_id: Person the mutation applied to
            action: created, updated or deleted
            old_version: Person version before the mutation
            new_version: Person version after the mutation (old + 1)
            changed_fields: Field diff as produced by :func:`diff_fields`
            changed_by: Actor identifier, if known

        Returns:
            The pending PersonAudit row (flushed, not committed)

        Raises:
            ValidationError: action unknown or versions not consecutive
        """
        try:
            action_enum = AuditAction(action)
        except ValueError:
            raise ValidationError(f"Invalid audit action: {action}")

        if new_version != old_version + 1:
            raise ValidationError(
                "Audit versions must be consecutive",
                details={"old_version": old_version, "new_version": new_version},
            )

        record = PersonAudit(
            person_id=person_id,
            action=action_enum,
            old_version=old_version,
            new_version=new_version,
            changed_fields=changed_fields or None,
            changed_by=changed_by,
        )
        self.db.add(record)
        self.db.flush()

        logger.debug(
            f"Audit record appended: {action_enum.value} on person {person_id} "
            f"v{old_version}->v{new_version} by {changed_by}"
        )
        return record

    def history(
        self,
        person_id: str,
        skip: int = 0,
        limit: int = 100,
    ) -> Tuple[List[PersonAudit], int]:
        """
        Get the audit history of a person, newest first.

        Returns:
            Tuple of (records, total count)
        """
        query = self.db.query(PersonAudit).filter(PersonAudit.person_id == person_id)
        total = query.count()
        records = (
            query.order_by(desc(PersonAudit.new_version))
            .offset(skip)
            .limit(limit)
            .all()
        )
        return records, total

    def count(self, person_id: str) -> int:
        """Count audit records for a person."""
        return self.db.query(PersonAudit).filter(PersonAudit.person_id == person_id).count()
