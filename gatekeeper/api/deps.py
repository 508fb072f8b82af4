"""Dependencies for API endpoints."""
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from gatekeeper.db.base import get_db
from gatekeeper.services import (
    BiometricIndex,
    EntryLedger,
    PersonDirectory,
    SearchIndex,
    TemplateScorer,
    TopologyRegistry,
)


def get_actor(x_actor_id: Optional[str] = Header(None, max_length=255)) -> Optional[str]:
    """Operator or device recorded as ``changed_by`` in the audit trail."""
    return x_actor_id


def get_template_scorer() -> Optional[TemplateScorer]:
    """
    Fingerprint template scorer.

    No scorer ships with the service; deployments override this dependency
    with their vendor SDK adapter. Without one, fingerprint matching
    answers 503.
    """
    return None


def get_person_directory(db: Session = Depends(get_db)) -> PersonDirectory:
    return PersonDirectory(db)


def get_biometric_index(
    db: Session = Depends(get_db),
    scorer: Optional[TemplateScorer] = Depends(get_template_scorer),
) -> BiometricIndex:
    return BiometricIndex(db, template_scorer=scorer)


def get_entry_ledger(db: Session = Depends(get_db)) -> EntryLedger:
    return EntryLedger(db)


def get_search_index(db: Session = Depends(get_db)) -> SearchIndex:
    return SearchIndex(db)


def get_topology_registry(db: Session = Depends(get_db)) -> TopologyRegistry:
    return TopologyRegistry(db)
