"""API routes for club application review, content moderation and member suspension."""
from datetime import datetime
from typing import Callable, List, Optional, Type

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from club_review.api.schemas import (
    AuditEntryResponse,
    BulkApproveRequest,
    BulkOperationResponse,
    BulkRejectRequest,
    BulkResultResponse,
    BulkTransitionRequest,
    ClubCreate,
    ClubResponse,
    ClubReviewResponse,
    ContentModerationRequest,
    ContentReportCreate,
    ContentReportResponse,
    DecisionRequest,
    ErrorResponse,
    MemberResponse,
    ModerateRequest,
    PageResponse,
    ReasonRequest,
    TransitionRequest,
)
from club_review.database import get_db
from club_review.models.domain import Club, ContentReport
from club_review.models.enums import SortOrder
from club_review.services.bulk import BulkResult
from club_review.services.engine import (
    ClubApplicationEngine,
    ContentModerationEngine,
    MemberSuspensionEngine,
    ReviewEngine,
)
from club_review.services.errors import ModerationError
from club_review.services.queries import ActivityQueries, ListFilter, Page

ERROR_STATUS = {
    "NotFound": status.HTTP_404_NOT_FOUND,
    "Unauthorized": status.HTTP_403_FORBIDDEN,
    "Conflict": status.HTTP_409_CONFLICT,
    "ValidationError": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "StoreUnavailable": status.HTTP_503_SERVICE_UNAVAILABLE,
}

ERROR_RESPONSES = {
    code: {"model": ErrorResponse}
    for code in (403, 404, 409, 422, 503)
}


def to_http(exc: ModerationError) -> HTTPException:
    """Translate a refused decision into an HTTP error with a structured body."""
    return HTTPException(
        status_code=ERROR_STATUS.get(exc.kind, status.HTTP_400_BAD_REQUEST),
        detail=exc.to_dict(),
    )


def page_response(page: Page, schema: Type) -> dict:
    return {
        "items": [schema.model_validate(item) for item in page.items],
        "count": page.count,
        "page": page.page,
        "limit": page.limit,
        "total_pages": page.total_pages,
    }


def bulk_response(result: BulkResult) -> BulkResultResponse:
    return BulkResultResponse(
        successful=result.successful,
        failed=[{"id": f.id, "error": f.error, "message": f.message} for f in result.failed],
        successful_count=result.successful_count,
        failed_count=result.failed_count,
    )


def get_club_engine(db: Session = Depends(get_db)) -> ClubApplicationEngine:
    return ClubApplicationEngine(db)


def get_report_engine(db: Session = Depends(get_db)) -> ContentModerationEngine:
    return ContentModerationEngine(db)


def get_member_engine(db: Session = Depends(get_db)) -> MemberSuspensionEngine:
    return MemberSuspensionEngine(db)


def build_review_router(
    prefix: str,
    tag: str,
    engine_dependency: Callable[..., ReviewEngine],
    response_model: Type,
) -> APIRouter:
    """Endpoints every workflow shares: list, stats, detail, history and transitions."""
    router = APIRouter(prefix=prefix, tags=[tag], responses=ERROR_RESPONSES)

    @router.get("", response_model=PageResponse[response_model])
    def list_records(
        status_filter: Optional[str] = Query(None, alias="status"),
        search: Optional[str] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        sort_by: str = "created_at",
        sort_order: SortOrder = SortOrder.DESC,
        page: int = 1,
        limit: Optional[int] = None,
        engine: ReviewEngine = Depends(engine_dependency),
    ):
        """
        Paginated listing. ``status`` defaults to the initial status;
        pass ``all`` for every record.
        """
        filters = ListFilter(
            status=status_filter,
            search=search,
            date_from=date_from,
            date_to=date_to,
            sort_by=sort_by,
            sort_order=sort_order,
        )
        try:
            result = engine.list(filters, page=page, limit=limit)
        except ModerationError as e:
            raise to_http(e)
        return page_response(result, response_model)

    @router.get("/stats", response_model=dict)
    def get_stats(request: Request, engine: ReviewEngine = Depends(engine_dependency)):
        """Counts per status. Query parameters narrow the scope, e.g. ?location=Leeds."""
        try:
            return engine.stats(dict(request.query_params))
        except ModerationError as e:
            raise to_http(e)

    @router.post("/bulk-transition", response_model=BulkResultResponse)
    def bulk_transition(data: BulkTransitionRequest, engine: ReviewEngine = Depends(engine_dependency)):
        """Apply one status to many records; each id succeeds or fails on its own."""
        try:
            result = engine.bulk_transition(
                data.ids, data.status, data.actor_id, data.notes,
                expected_status=data.expected_status,
            )
        except ModerationError as e:
            raise to_http(e)
        return bulk_response(result)

    @router.get("/{target_id}", response_model=response_model)
    def get_record(target_id: int, engine: ReviewEngine = Depends(engine_dependency)):
        try:
            return engine.get(target_id)
        except ModerationError as e:
            raise to_http(e)

    @router.get("/{target_id}/history", response_model=List[AuditEntryResponse])
    def get_history(target_id: int, engine: ReviewEngine = Depends(engine_dependency)):
        """Decision history, oldest first."""
        try:
            return engine.history_for(target_id)
        except ModerationError as e:
            raise to_http(e)

    @router.post("/{target_id}/transition", response_model=response_model)
    def transition(target_id: int, data: TransitionRequest, engine: ReviewEngine = Depends(engine_dependency)):
        try:
            return engine.transition(
                target_id, data.status, data.actor_id, data.notes,
                expected_status=data.expected_status,
                expected_version=data.expected_version,
            )
        except ModerationError as e:
            raise to_http(e)

    return router


# Club applications
club_router = build_review_router(
    "/club-applications", "Club applications", get_club_engine, ClubResponse
)


@club_router.post("", response_model=ClubResponse, status_code=status.HTTP_201_CREATED)
def submit_club_application(data: ClubCreate, db: Session = Depends(get_db)):
    """Register a club. It stays pending until an administrator decides."""
    club = Club(**data.model_dump())
    db.add(club)
    db.commit()
    db.refresh(club)
    return club


@club_router.post("/bulk-approve", response_model=BulkResultResponse)
def bulk_approve(data: BulkApproveRequest, engine: ClubApplicationEngine = Depends(get_club_engine)):
    try:
        result = engine.bulk_approve(data.ids, data.actor_id, data.notes, expected_status=data.expected_status)
    except ModerationError as e:
        raise to_http(e)
    return bulk_response(result)


@club_router.post("/bulk-reject", response_model=BulkResultResponse)
def bulk_reject(data: BulkRejectRequest, engine: ClubApplicationEngine = Depends(get_club_engine)):
    try:
        result = engine.bulk_reject(data.ids, data.actor_id, data.reason, expected_status=data.expected_status)
    except ModerationError as e:
        raise to_http(e)
    return bulk_response(result)


@club_router.get("/{club_id}/review", response_model=ClubReviewResponse)
def get_club_review(club_id: int, engine: ClubApplicationEngine = Depends(get_club_engine)):
    """Everything the review screen shows: the application and its decision history."""
    try:
        return ClubReviewResponse(
            club=ClubResponse.model_validate(engine.get(club_id)),
            history=[AuditEntryResponse.model_validate(e) for e in engine.history_for(club_id)],
        )
    except ModerationError as e:
        raise to_http(e)


@club_router.post("/{club_id}/approve", response_model=ClubResponse)
def approve_club(club_id: int, data: DecisionRequest, engine: ClubApplicationEngine = Depends(get_club_engine)):
    try:
        return engine.approve(club_id, data.actor_id, data.notes, expected_version=data.expected_version)
    except ModerationError as e:
        raise to_http(e)


@club_router.post("/{club_id}/reject", response_model=ClubResponse)
def reject_club(club_id: int, data: ReasonRequest, engine: ClubApplicationEngine = Depends(get_club_engine)):
    """Reject an application. A reason is required."""
    try:
        return engine.reject(club_id, data.actor_id, data.reason, expected_version=data.expected_version)
    except ModerationError as e:
        raise to_http(e)


@club_router.post("/{club_id}/reopen", response_model=ClubResponse)
def reopen_club(club_id: int, data: DecisionRequest, engine: ClubApplicationEngine = Depends(get_club_engine)):
    try:
        return engine.reopen(club_id, data.actor_id, data.notes, expected_version=data.expected_version)
    except ModerationError as e:
        raise to_http(e)


# Content reports
report_router = build_review_router(
    "/content-reports", "Content moderation", get_report_engine, ContentReportResponse
)


@report_router.post("", response_model=ContentReportResponse, status_code=status.HTTP_201_CREATED)
def submit_report(data: ContentReportCreate, db: Session = Depends(get_db)):
    report = ContentReport(**data.model_dump())
    db.add(report)
    db.commit()
    db.refresh(report)
    return report


@report_router.post("/content-moderation", response_model=BulkResultResponse)
def moderate_content(data: ContentModerationRequest, engine: ContentModerationEngine = Depends(get_report_engine)):
    """Answer every pending report about one piece of content with the same decision."""
    try:
        result = engine.moderate_content(
            data.content_type, data.content_id, data.action_type, data.actor_id, data.reason
        )
    except ModerationError as e:
        raise to_http(e)
    return bulk_response(result)


@report_router.post("/{report_id}/moderate", response_model=ContentReportResponse)
def moderate_report(report_id: int, data: ModerateRequest, engine: ContentModerationEngine = Depends(get_report_engine)):
    try:
        return engine.moderate(
            report_id, data.action_type, data.actor_id, data.reason,
            expected_version=data.expected_version,
        )
    except ModerationError as e:
        raise to_http(e)


# Member accounts
member_router = build_review_router(
    "/members", "Member accounts", get_member_engine, MemberResponse
)


@member_router.post("/{member_id}/suspend", response_model=MemberResponse)
def suspend_member(member_id: int, data: ReasonRequest, engine: MemberSuspensionEngine = Depends(get_member_engine)):
    try:
        return engine.suspend(member_id, data.actor_id, data.reason, expected_version=data.expected_version)
    except ModerationError as e:
        raise to_http(e)


@member_router.post("/{member_id}/reinstate", response_model=MemberResponse)
def reinstate_member(member_id: int, data: DecisionRequest, engine: MemberSuspensionEngine = Depends(get_member_engine)):
    try:
        return engine.reinstate(member_id, data.actor_id, data.notes, expected_version=data.expected_version)
    except ModerationError as e:
        raise to_http(e)


# Audit trail
audit_router = APIRouter(tags=["Audit"], responses=ERROR_RESPONSES)


@audit_router.get("/audit-entries", response_model=PageResponse[AuditEntryResponse])
def list_audit_entries(
    entity_kind: Optional[str] = None,
    actor_id: Optional[str] = None,
    action: Optional[str] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    page: int = 1,
    limit: Optional[int] = None,
    db: Session = Depends(get_db),
):
    """Admin activity across every workflow, newest first."""
    try:
        result = ActivityQueries(db).list_activity(
            entity_kind=entity_kind,
            actor_id=actor_id,
            action=action,
            date_from=date_from,
            date_to=date_to,
            page=page,
            limit=limit,
        )
    except ModerationError as e:
        raise to_http(e)
    return page_response(result, AuditEntryResponse)


@audit_router.get("/bulk-operations", response_model=List[BulkOperationResponse])
def list_bulk_operations(actor_id: Optional[str] = None, limit: int = 50, db: Session = Depends(get_db)):
    try:
        return ActivityQueries(db).list_bulk_operations(actor_id=actor_id, limit=limit)
    except ModerationError as e:
        raise to_http(e)


router = APIRouter()
router.include_router(club_router)
router.include_router(report_router)
router.include_router(member_router)
router.include_router(audit_router)
