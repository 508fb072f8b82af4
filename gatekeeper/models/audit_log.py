"""Person audit trail model."""
from sqlalchemy import BigInteger, CheckConstraint, Column, ForeignKey, JSON, String
from sqlalchemy.dialects.postgresql import JSONB

from gatekeeper.db.base import Base
from .base import CreatedAtMixin, enum_type
from .enums import AuditAction
from .person import generate_id


class PersonAudit(Base, CreatedAtMixin):
    """Immutable record of one person mutation."""

    __tablename__ = 'person_audit'
    __table_args__ = (
        CheckConstraint('new_version = old_version + 1', name='ck_person_audit_version_step'),
    )

    id = Column(String(255), primary_key=True, default=generate_id)
    person_id = Column(String(255), ForeignKey('persons.id', ondelete='CASCADE'), nullable=False, index=True)

    action = Column(enum_type(AuditAction, 'audit_action'), nullable=False)
    changed_fields = Column(JSON().with_variant(JSONB(), 'postgresql'), nullable=True)
    changed_by = Column(String(255), nullable=True)

    old_version = Column(BigInteger, nullable=False)
    new_version = Column(BigInteger, nullable=False)

    def __repr__(self) -> str:
        return (
            f'<PersonAudit(person_id={self.person_id}, action={self.action}, '
            f'{self.old_version}->{self.new_version})>'
        )
