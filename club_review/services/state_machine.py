"""
State machine that applies review and moderation decisions.

This is the only writer of entity status and audit entries. Every status
change goes through transition(), which updates the entity and appends
exactly one audit entry in a single database transaction.
"""
import logging
from datetime import datetime
from enum import Enum
from typing import List, Optional

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from club_review.models.audit import AuditEntry
from club_review.services.collaborators import (
    AdminRoleAuthorizer,
    Authorizer,
    LoggingNotifier,
    Notifier,
)
from club_review.services.errors import (
    ConflictError,
    NotFoundError,
    StoreUnavailableError,
    UnauthorizedError,
    ValidationError,
)
from club_review.services.workflows import Workflow

logger = logging.getLogger(__name__)


def clean_notes(notes: Optional[str]) -> Optional[str]:
    if notes is None:
        return None
    notes = notes.strip()
    return notes or None


class StateMachine:
    """Validates and applies status transitions for one workflow."""

    def __init__(
        self,
        db: Session,
        workflow: Workflow,
        authorizer: Optional[Authorizer] = None,
        notifier: Optional[Notifier] = None,
    ):
        self.db = db
        self.workflow = workflow
        self.authorizer = authorizer or AdminRoleAuthorizer(db)
        self.notifier = notifier or LoggingNotifier()

    def get(self, target_id: int):
        """Return the entity or raise NotFoundError."""
        entity = self.db.get(self.workflow.model, target_id)
        if entity is None:
            raise NotFoundError(f"{self.workflow.label.capitalize()} {target_id} not found")
        return entity

    def parse_status(self, value) -> Enum:
        try:
            return self.workflow.parse_status(value)
        except ValueError:
            allowed = ", ".join(s.value for s in self.workflow.statuses)
            raise ValidationError(
                f"Invalid status '{value}' for {self.workflow.label}. Allowed: {allowed}"
            ) from None

    def authorize(self, actor_id: str) -> None:
        if not self.authorizer.is_admin(actor_id):
            raise UnauthorizedError("Admin privileges required")

    def transition(
        self,
        target_id: int,
        new_status,
        actor_id: str,
        notes: Optional[str] = None,
        *,
        action: Optional[str] = None,
        expected_status=None,
        expected_version: Optional[int] = None,
    ):
        """
        Move one entity to ``new_status`` and log the decision.

        Invariants:
        - Status change and audit entry are committed together or not at all
        - Exactly one audit entry per successful call, repeats included
        - A concurrent writer is detected through the version column; the
          loser gets ConflictError and writes nothing
        """
        status = self.parse_status(new_status)
        notes = clean_notes(notes)
        try:
            self.authorize(actor_id)
            entity = self.get(target_id)
            current = entity.status
            read_version = entity.version

            self._check_preconditions(entity, expected_status, expected_version)

            if not self.workflow.allows(current, status):
                raise ValidationError(
                    f"Cannot move {self.workflow.label} from {current.value} to {status.value}"
                )
            if status in self.workflow.notes_required and notes is None:
                raise ValidationError(
                    f"A reason is required to mark a {self.workflow.label} as {status.value}"
                )

            now = datetime.utcnow()
            model = self.workflow.model
            updated = self.db.query(model).filter(
                model.id == target_id,
                model.version == read_version,
            ).update(
                {
                    model.status: status,
                    model.version: read_version + 1,
                    model.review_notes: notes,
                    model.reviewed_by: actor_id,
                    model.reviewed_at: now,
                    model.updated_at: now,
                },
                synchronize_session=False,
            )
            if updated == 0:
                self.db.rollback()
                latest = self.db.get(model, target_id)
                raise ConflictError(
                    f"This {self.workflow.label} was already decided by another administrator",
                    current_status=latest.status.value if latest is not None else None,
                )

            entry = AuditEntry(
                entity_kind=self.workflow.kind.value,
                target_id=target_id,
                actor_id=actor_id,
                action=action or status.value,
                notes=notes,
                from_status=current.value,
                to_status=status.value,
                created_at=now,
            )
            self.db.add(entry)
            self.db.commit()
        except OperationalError as exc:
            self.db.rollback()
            logger.error("Store unavailable while updating %s %s", self.workflow.kind.value, target_id)
            raise StoreUnavailableError("The database is unavailable, please retry") from exc
        except ConflictError as exc:
            logger.warning(
                "Conflict on %s %s: now %s", self.workflow.kind.value, target_id, exc.current_status
            )
            raise

        self.db.refresh(entity)
        self.db.refresh(entry)
        logger.info(
            "%s %s: %s -> %s by %s",
            self.workflow.kind.value, target_id, entry.from_status, entry.to_status, actor_id,
        )
        self._notify(entity, entry)
        return entity

    def history_for(self, target_id: int) -> List[AuditEntry]:
        """Audit entries for one entity, oldest first."""
        try:
            self.get(target_id)
            return self.db.query(AuditEntry).filter(
                AuditEntry.entity_kind == self.workflow.kind.value,
                AuditEntry.target_id == target_id,
            ).order_by(AuditEntry.created_at.asc(), AuditEntry.id.asc()).all()
        except OperationalError as exc:
            raise StoreUnavailableError("The database is unavailable, please retry") from exc

    def _check_preconditions(self, entity, expected_status, expected_version) -> None:
        if expected_status is not None:
            expected = self.parse_status(expected_status)
            if entity.status != expected:
                raise ConflictError(
                    f"This {self.workflow.label} was already decided by another administrator "
                    f"(expected {expected.value}, found {entity.status.value})",
                    current_status=entity.status.value,
                )
        if expected_version is not None and entity.version != expected_version:
            raise ConflictError(
                f"This {self.workflow.label} changed since it was loaded",
                current_status=entity.status.value,
            )

    def _notify(self, entity, entry: AuditEntry) -> None:
        # Delivery problems must never undo a committed decision
        try:
            self.notifier.notify(self.workflow.kind.value, entity, entry)
        except Exception:
            logger.warning(
                "Notifier failed for %s %s", self.workflow.kind.value, entry.target_id, exc_info=True
            )
