"""Collaborators the engine consults but does not own: authorization and notification."""
import logging
from typing import Protocol

from sqlalchemy.orm import Session

from club_review.models.audit import AuditEntry
from club_review.models.domain import AdminRole

logger = logging.getLogger(__name__)


class Authorizer(Protocol):
    def is_admin(self, actor_id: str) -> bool:
        ...


class Notifier(Protocol):
    def notify(self, kind: str, entity, entry: AuditEntry) -> None:
        ...


class AdminRoleAuthorizer:
    """Looks the actor up in the admin_roles table."""

    def __init__(self, db: Session):
        self.db = db

    def is_admin(self, actor_id: str) -> bool:
        if not actor_id:
            return False
        role = self.db.query(AdminRole).filter(AdminRole.user_id == actor_id).first()
        return bool(role and role.is_admin)


class LoggingNotifier:
    """Default notifier. Delivery is handled elsewhere; we only record the intent."""

    def notify(self, kind: str, entity, entry: AuditEntry) -> None:
        logger.info(
            "Notification queued: %s %s -> %s by %s",
            kind, entry.target_id, entry.to_status, entry.actor_id,
        )
