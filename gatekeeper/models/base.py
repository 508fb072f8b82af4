"""Base model with common fields and utilities."""
from datetime import datetime

from sqlalchemy import Column, DateTime, Enum as SQLEnum


class TimestampMixin:
    """Mixin for created_at and updated_at timestamps."""

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class CreatedAtMixin:
    """Mixin for write-once rows that only carry a creation timestamp."""

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)


def enum_type(enum_cls, name: str) -> SQLEnum:
    """VARCHAR + CHECK enum storing member values, not member names."""
    return SQLEnum(
        enum_cls,
        name=name,
        native_enum=False,
        create_constraint=True,
        length=50,
        values_callable=lambda members: [m.value for m in members],
        validate_strings=True,
    )
