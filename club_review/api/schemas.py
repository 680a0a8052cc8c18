"""Pydantic schemas for request/response validation."""
from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from club_review.models.enums import (
    AccountStatus,
    ApplicationStatus,
    ContentType,
    ModerationActionType,
    ReportStatus,
)

T = TypeVar("T")


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class ReviewFields(ORMModel):
    id: int
    version: int
    review_notes: Optional[str]
    reviewed_by: Optional[str]
    reviewed_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime


# Entity schemas
class ClubCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    location: Optional[str] = None
    contact_email: EmailStr
    contact_phone: Optional[str] = None
    website_url: Optional[str] = None


class ClubResponse(ReviewFields):
    name: str
    description: Optional[str]
    location: Optional[str]
    contact_email: str
    contact_phone: Optional[str]
    website_url: Optional[str]
    status: ApplicationStatus


class ContentReportCreate(BaseModel):
    reporter_id: str = Field(..., min_length=1)
    content_type: ContentType
    content_id: str = Field(..., min_length=1)
    reason: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None


class ContentReportResponse(ReviewFields):
    reporter_id: str
    content_type: ContentType
    content_id: str
    reason: str
    description: Optional[str]
    status: ReportStatus


class MemberResponse(ReviewFields):
    user_id: str
    email: str
    display_name: Optional[str]
    status: AccountStatus


# Audit schemas
class AuditEntryResponse(ORMModel):
    id: int
    entity_kind: str
    target_id: int
    actor_id: str
    action: str
    notes: Optional[str]
    from_status: Optional[str]
    to_status: str
    created_at: datetime


class BulkOperationResponse(ORMModel):
    id: int
    entity_kind: str
    actor_id: str
    action: str
    requested_count: int
    successful_count: int
    failed_count: int
    details: Optional[dict]
    created_at: datetime


class PageResponse(BaseModel, Generic[T]):
    items: List[T]
    count: int
    page: int
    limit: int
    total_pages: int


class ClubReviewResponse(BaseModel):
    """A club application together with its decision history."""
    club: ClubResponse
    history: List[AuditEntryResponse]


# Decision requests
class TransitionRequest(BaseModel):
    status: str
    actor_id: str
    notes: Optional[str] = Field(None, max_length=2000)
    expected_status: Optional[str] = None
    expected_version: Optional[int] = None


class DecisionRequest(BaseModel):
    actor_id: str
    notes: Optional[str] = Field(None, max_length=2000)
    expected_version: Optional[int] = None


class ReasonRequest(BaseModel):
    actor_id: str
    reason: str = Field(..., min_length=1, max_length=2000)
    expected_version: Optional[int] = None


class BulkTransitionRequest(BaseModel):
    ids: List[int] = Field(..., min_length=1)
    status: str
    actor_id: str
    notes: Optional[str] = Field(None, max_length=2000)
    expected_status: Optional[str] = None


class BulkApproveRequest(BaseModel):
    ids: List[int] = Field(..., min_length=1)
    actor_id: str
    notes: Optional[str] = Field(None, max_length=2000)
    # Only items still pending are approved; anything decided meanwhile is a Conflict
    expected_status: Optional[ApplicationStatus] = ApplicationStatus.PENDING


class BulkRejectRequest(BaseModel):
    ids: List[int] = Field(..., min_length=1)
    actor_id: str
    reason: str = Field(..., min_length=1, max_length=2000)
    expected_status: Optional[ApplicationStatus] = ApplicationStatus.PENDING


class ModerateRequest(BaseModel):
    action_type: ModerationActionType
    actor_id: str
    reason: str = Field(..., min_length=1, max_length=2000)
    expected_version: Optional[int] = None


class ContentModerationRequest(BaseModel):
    content_type: ContentType
    content_id: str = Field(..., min_length=1)
    action_type: ModerationActionType
    actor_id: str
    reason: str = Field(..., min_length=1, max_length=2000)


class BulkFailureResponse(BaseModel):
    id: int
    error: str
    message: str


class BulkResultResponse(BaseModel):
    successful: List[int]
    failed: List[BulkFailureResponse]
    successful_count: int
    failed_count: int


# Error response
class ErrorResponse(BaseModel):
    """Body of a refused decision."""
    error: str
    message: str
    current_status: Optional[str] = None
