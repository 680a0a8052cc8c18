"""
Review engine facade.

One generic engine, parameterized by a Workflow, instantiated for club
applications, content reports and member accounts. The subclasses only add
vocabulary (approve, moderate, suspend); all writes still go through the
shared StateMachine.
"""
from typing import Any, Iterable, List, Mapping, Optional

from sqlalchemy.orm import Session

from club_review.models.audit import AuditEntry
from club_review.models.domain import ContentReport
from club_review.models.enums import (
    AccountStatus,
    ApplicationStatus,
    ContentType,
    ModerationActionType,
    ReportStatus,
)
from club_review.services.bulk import BulkCoordinator, BulkResult
from club_review.services.collaborators import Authorizer, Notifier
from club_review.services.errors import ValidationError
from club_review.services.queries import ListFilter, Page, ReviewQueries
from club_review.services.state_machine import StateMachine
from club_review.services.stats import StatisticsAggregator
from club_review.services.workflows import (
    CLUB_APPLICATIONS,
    CONTENT_REPORTS,
    MEMBER_ACCOUNTS,
    Workflow,
)


class ReviewEngine:
    """The five operations the admin UI relies on, for one workflow."""

    def __init__(
        self,
        db: Session,
        workflow: Workflow,
        authorizer: Optional[Authorizer] = None,
        notifier: Optional[Notifier] = None,
    ):
        self.db = db
        self.workflow = workflow
        self.state_machine = StateMachine(db, workflow, authorizer=authorizer, notifier=notifier)
        self.bulk = BulkCoordinator(self.state_machine)
        self.queries = ReviewQueries(db, workflow)
        self.aggregator = StatisticsAggregator(db, workflow)

    def transition(self, target_id: int, new_status, actor_id: str, notes: Optional[str] = None, **kwargs):
        return self.state_machine.transition(target_id, new_status, actor_id, notes, **kwargs)

    def bulk_transition(
        self,
        target_ids: Iterable[int],
        new_status,
        actor_id: str,
        notes: Optional[str] = None,
        **kwargs,
    ) -> BulkResult:
        return self.bulk.bulk_transition(target_ids, new_status, actor_id, notes, **kwargs)

    def list(self, filters: Optional[ListFilter] = None, page: int = 1, limit: Optional[int] = None) -> Page:
        return self.queries.list(filters, page=page, limit=limit)

    def get(self, target_id: int):
        return self.queries.get(target_id)

    def stats(self, scope: Optional[Mapping[str, Any]] = None) -> dict:
        return self.aggregator.stats(scope)

    def history_for(self, target_id: int) -> List[AuditEntry]:
        return self.state_machine.history_for(target_id)


class ClubApplicationEngine(ReviewEngine):
    """Approval of club self-registrations."""

    def __init__(self, db: Session, authorizer: Optional[Authorizer] = None, notifier: Optional[Notifier] = None):
        super().__init__(db, CLUB_APPLICATIONS, authorizer=authorizer, notifier=notifier)

    def approve(self, club_id: int, actor_id: str, notes: Optional[str] = None, **kwargs):
        return self.transition(club_id, ApplicationStatus.APPROVED, actor_id, notes, **kwargs)

    def reject(self, club_id: int, actor_id: str, reason: str, **kwargs):
        return self.transition(club_id, ApplicationStatus.REJECTED, actor_id, reason, **kwargs)

    def reopen(self, club_id: int, actor_id: str, notes: Optional[str] = None, **kwargs):
        """Send a decided application back to pending. Audited like any decision."""
        return self.transition(club_id, ApplicationStatus.PENDING, actor_id, notes, **kwargs)

    def bulk_approve(
        self,
        club_ids: Iterable[int],
        actor_id: str,
        notes: Optional[str] = None,
        expected_status=ApplicationStatus.PENDING,
    ) -> BulkResult:
        return self.bulk_transition(
            club_ids, ApplicationStatus.APPROVED, actor_id, notes, expected_status=expected_status
        )

    def bulk_reject(
        self,
        club_ids: Iterable[int],
        actor_id: str,
        reason: str,
        expected_status=ApplicationStatus.PENDING,
    ) -> BulkResult:
        return self.bulk_transition(
            club_ids, ApplicationStatus.REJECTED, actor_id, reason, expected_status=expected_status
        )


# What each moderation decision does to the report it answers
MODERATION_OUTCOMES = {
    ModerationActionType.WARNING: ReportStatus.RESOLVED,
    ModerationActionType.CONTENT_REMOVAL: ReportStatus.RESOLVED,
    ModerationActionType.ACCOUNT_SUSPENSION: ReportStatus.RESOLVED,
    ModerationActionType.DISMISSAL: ReportStatus.DISMISSED,
}


class ContentModerationEngine(ReviewEngine):
    """Decisions on reported content."""

    def __init__(self, db: Session, authorizer: Optional[Authorizer] = None, notifier: Optional[Notifier] = None):
        super().__init__(db, CONTENT_REPORTS, authorizer=authorizer, notifier=notifier)

    @staticmethod
    def outcome_for(action_type) -> ReportStatus:
        try:
            action = ModerationActionType(action_type)
            return MODERATION_OUTCOMES[action]
        except (ValueError, KeyError):
            allowed = ", ".join(a.value for a in MODERATION_OUTCOMES)
            raise ValidationError(
                f"Invalid moderation action '{action_type}'. Allowed: {allowed}"
            ) from None

    def moderate(self, report_id: int, action_type, actor_id: str, reason: str, **kwargs):
        status = self.outcome_for(action_type)
        action = ModerationActionType(action_type).value
        return self.transition(report_id, status, actor_id, reason, action=action, **kwargs)

    def moderate_content(
        self,
        content_type: str,
        content_id: str,
        action_type,
        actor_id: str,
        reason: str,
    ) -> BulkResult:
        """Apply one decision to every pending report about the same content."""
        status = self.outcome_for(action_type)
        action = ModerationActionType(action_type).value
        try:
            content_type = ContentType(content_type)
        except ValueError:
            raise ValidationError(f"Invalid content type '{content_type}'") from None
        report_ids = [
            row.id
            for row in self.db.query(ContentReport.id).filter(
                ContentReport.content_type == content_type,
                ContentReport.content_id == content_id,
                ContentReport.status == ReportStatus.PENDING,
            ).order_by(ContentReport.id.asc())
        ]
        if not report_ids:
            raise ValidationError(f"No pending reports for {content_type.value} {content_id}")
        return self.bulk_transition(
            report_ids, status, actor_id, reason,
            action=action, expected_status=ReportStatus.PENDING,
        )


class MemberSuspensionEngine(ReviewEngine):
    """Suspending and reinstating member accounts."""

    def __init__(self, db: Session, authorizer: Optional[Authorizer] = None, notifier: Optional[Notifier] = None):
        super().__init__(db, MEMBER_ACCOUNTS, authorizer=authorizer, notifier=notifier)

    def suspend(self, member_id: int, actor_id: str, reason: str, **kwargs):
        return self.transition(
            member_id, AccountStatus.SUSPENDED, actor_id, reason,
            action=ModerationActionType.ACCOUNT_SUSPENSION.value, **kwargs
        )

    def reinstate(self, member_id: int, actor_id: str, notes: Optional[str] = None, **kwargs):
        return self.transition(
            member_id, AccountStatus.ACTIVE, actor_id, notes,
            action=ModerationActionType.REINSTATEMENT.value, **kwargs
        )
