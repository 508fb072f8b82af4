# gatekeeper/utils/validators.py

from datetime import datetime, timezone
from typing import Optional


# ---------------------------------------------------------------------
# Timestamps
# ---------------------------------------------------------------------

def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalise a timestamp for a ``timestamp without time zone`` column.

    Aware values are converted to UTC and stripped of their offset; naive
    values are taken to be UTC already and returned unchanged.
    """
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
