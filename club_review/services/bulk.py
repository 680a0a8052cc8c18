"""Bulk transitions: one decision applied to many records, each succeeding or failing on its own."""
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from sqlalchemy import text
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from club_review.config import get_settings
from club_review.models.audit import BulkOperation
from club_review.services.errors import (
    ModerationError,
    StoreUnavailableError,
    ValidationError,
)
from club_review.services.state_machine import StateMachine, clean_notes

logger = logging.getLogger(__name__)


@dataclass
class BulkFailure:
    id: int
    error: str
    message: str


@dataclass
class BulkResult:
    """
    Outcome of a bulk call.

    Invariant: successful ids and failed ids partition the requested ids.
    """
    successful: List[int] = field(default_factory=list)
    failed: List[BulkFailure] = field(default_factory=list)

    @property
    def successful_count(self) -> int:
        return len(self.successful)

    @property
    def failed_count(self) -> int:
        return len(self.failed)


def dedupe(ids: Iterable[int]) -> List[int]:
    """Drop repeated ids, keeping the first occurrence order."""
    seen = set()
    unique = []
    for target_id in ids:
        if target_id not in seen:
            seen.add(target_id)
            unique.append(target_id)
    return unique


class BulkCoordinator:
    """Applies a StateMachine transition to a list of ids in input order."""

    def __init__(self, state_machine: StateMachine, max_batch_size: Optional[int] = None):
        self.sm = state_machine
        self.db = state_machine.db
        self.max_batch_size = max_batch_size or get_settings().max_bulk_size

    def bulk_transition(
        self,
        target_ids: Iterable[int],
        new_status,
        actor_id: str,
        notes: Optional[str] = None,
        *,
        action: Optional[str] = None,
        expected_status=None,
    ) -> BulkResult:
        """
        Transition every id independently.

        Raises (instead of returning a result) only for problems that affect
        the whole batch: empty or oversized input, an invalid status, an
        unauthorized actor or an unreachable store.
        """
        ids = dedupe(target_ids)
        if not ids:
            raise ValidationError("No ids provided")
        if len(ids) > self.max_batch_size:
            raise ValidationError(
                f"Too many ids in one request ({len(ids)} > {self.max_batch_size})"
            )
        status = self.sm.parse_status(new_status)
        if expected_status is not None:
            expected_status = self.sm.parse_status(expected_status)

        self._ping()
        try:
            self.sm.authorize(actor_id)
        except OperationalError as exc:
            raise StoreUnavailableError("The database is unavailable, please retry") from exc

        result = BulkResult()
        for target_id in ids:
            try:
                self.sm.transition(
                    target_id,
                    status,
                    actor_id,
                    notes,
                    action=action,
                    expected_status=expected_status,
                )
            except ModerationError as exc:
                result.failed.append(BulkFailure(id=target_id, error=exc.kind, message=exc.message))
            else:
                result.successful.append(target_id)

        logger.info(
            "Bulk %s on %s by %s: %d succeeded, %d failed",
            action or status.value, self.sm.workflow.kind.value, actor_id,
            result.successful_count, result.failed_count,
        )
        self._record(result, action or status.value, actor_id, len(ids), notes)
        return result

    def _ping(self) -> None:
        try:
            self.db.execute(text("SELECT 1"))
        except OperationalError as exc:
            self.db.rollback()
            raise StoreUnavailableError("The database is unavailable, please retry") from exc

    def _record(
        self,
        result: BulkResult,
        action: str,
        actor_id: str,
        requested: int,
        notes: Optional[str],
    ) -> None:
        details: Dict = {
            "failed": [{"id": f.id, "error": f.error} for f in result.failed],
            "notes": clean_notes(notes),
        }
        try:
            self.db.add(BulkOperation(
                entity_kind=self.sm.workflow.kind.value,
                actor_id=actor_id,
                action=action,
                requested_count=requested,
                successful_count=result.successful_count,
                failed_count=result.failed_count,
                details=details,
            ))
            self.db.commit()
        except SQLAlchemyError:
            # Items are already applied; the summary row is informational
            self.db.rollback()
            logger.warning("Could not record bulk operation summary", exc_info=True)
