"""
Audit trail models.

Every review or moderation decision produces exactly one AuditEntry, written
in the same transaction as the status change. Bulk calls additionally leave
one BulkOperation summary row.
"""
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, Integer, String, Text, event

from club_review.database import Base


class AuditEntry(Base):
    """
    Immutable record of one transition decision.

    Invariants:
    - Once written, never edited or deleted
    - Append-only
    - action is the new status for review decisions, or the moderation
      action type (e.g. "content_removal") for moderation decisions
    """
    __tablename__ = "audit_entries"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    entity_kind = Column(String, nullable=False, index=True)
    target_id = Column(Integer, nullable=False, index=True)
    actor_id = Column(String, nullable=False, index=True)
    action = Column(String, nullable=False, index=True)
    notes = Column(Text, nullable=True)
    from_status = Column(String, nullable=True)
    to_status = Column(String, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)


class BulkOperation(Base):
    """Summary of one bulk transition call. Not an audit entry for any target."""
    __tablename__ = "bulk_operations"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    entity_kind = Column(String, nullable=False, index=True)
    actor_id = Column(String, nullable=False, index=True)
    action = Column(String, nullable=False)
    requested_count = Column(Integer, nullable=False)
    successful_count = Column(Integer, nullable=False)
    failed_count = Column(Integer, nullable=False)
    details = Column(JSON, nullable=True)  # {"failed": [{"id": .., "error": ..}]}
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)


class AuditImmutabilityError(Exception):
    """Raised when code tries to change or remove an audit entry."""


@event.listens_for(AuditEntry, "before_update")
def _refuse_audit_update(mapper, connection, target):
    raise AuditImmutabilityError(
        f"IMMUTABILITY VIOLATION: audit entry {target.id} cannot be modified"
    )


@event.listens_for(AuditEntry, "before_delete")
def _refuse_audit_delete(mapper, connection, target):
    raise AuditImmutabilityError(
        f"IMMUTABILITY VIOLATION: audit entry {target.id} cannot be deleted"
    )
