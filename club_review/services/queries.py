"""Read side: paginated, filtered listings of reviewed records and of the audit trail."""
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generic, List, Optional, TypeVar

from sqlalchemy import or_
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from club_review.config import get_settings
from club_review.models.audit import AuditEntry, BulkOperation
from club_review.models.enums import SortOrder
from club_review.services.errors import (
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from club_review.services.workflows import Workflow

T = TypeVar("T")

ALL_STATUSES = "all"


@dataclass
class ListFilter:
    status: Optional[str] = None  # None = the workflow's initial status, "all" = no filter
    search: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    sort_by: str = "created_at"
    sort_order: SortOrder = SortOrder.DESC


@dataclass
class Page(Generic[T]):
    items: List[T] = field(default_factory=list)
    count: int = 0
    page: int = 1
    limit: int = 10
    total_pages: int = 0


def check_paging(page: int, limit: int) -> None:
    max_size = get_settings().max_page_size
    if limit is None or limit <= 0:
        raise ValidationError("limit must be a positive integer")
    if limit > max_size:
        raise ValidationError(f"limit must not exceed {max_size}")
    if page is None or page <= 0:
        raise ValidationError("page must be 1 or greater")


def check_date_range(date_from: Optional[datetime], date_to: Optional[datetime]) -> None:
    if date_from and date_to and date_from > date_to:
        raise ValidationError("date_from must not be after date_to")


def like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def paginate(query, page: int, limit: int) -> Page:
    """Count, then slice. Pages past the end come back empty."""
    count = query.order_by(None).count()
    offset = (page - 1) * limit
    items = query.offset(offset).limit(limit).all() if offset < count else []
    return Page(
        items=items,
        count=count,
        page=page,
        limit=limit,
        total_pages=math.ceil(count / limit),
    )


class ReviewQueries:
    """Listing and lookup over one workflow's records."""

    def __init__(self, db: Session, workflow: Workflow):
        self.db = db
        self.workflow = workflow

    def get(self, target_id: int):
        try:
            entity = self.db.get(self.workflow.model, target_id)
        except OperationalError as exc:
            raise StoreUnavailableError("The database is unavailable, please retry") from exc
        if entity is None:
            raise NotFoundError(f"{self.workflow.label.capitalize()} {target_id} not found")
        return entity

    def list(self, filters: Optional[ListFilter] = None, page: int = 1, limit: Optional[int] = None) -> Page:
        """
        Filtered listing.

        Ordering is stable: the sort column, then id in the same direction, so
        identical data always yields identical pages.
        """
        filters = filters or ListFilter()
        if limit is None:
            limit = get_settings().default_page_size
        check_paging(page, limit)
        check_date_range(filters.date_from, filters.date_to)
        if filters.sort_by not in self.workflow.sort_fields:
            raise ValidationError(
                f"Cannot sort by '{filters.sort_by}'. Allowed: {', '.join(self.workflow.sort_fields)}"
            )

        model = self.workflow.model
        query = self.db.query(model)

        status = filters.status
        if status is None:
            query = query.filter(model.status == self.workflow.initial_status)
        elif status != ALL_STATUSES:
            try:
                parsed = self.workflow.parse_status(status)
            except ValueError:
                raise ValidationError(f"Invalid status filter '{status}'") from None
            query = query.filter(model.status == parsed)

        if filters.search and filters.search.strip():
            pattern = like_pattern(filters.search.strip())
            query = query.filter(or_(*[
                getattr(model, name).ilike(pattern, escape="\\")
                for name in self.workflow.search_fields
            ]))

        if filters.date_from:
            query = query.filter(model.created_at >= filters.date_from)
        if filters.date_to:
            query = query.filter(model.created_at <= filters.date_to)

        try:
            sort_order = SortOrder(filters.sort_order)
        except ValueError:
            raise ValidationError(f"Invalid sort order '{filters.sort_order}'. Allowed: asc, desc") from None

        column = getattr(model, filters.sort_by)
        if sort_order == SortOrder.ASC:
            query = query.order_by(column.asc(), model.id.asc())
        else:
            query = query.order_by(column.desc(), model.id.desc())

        try:
            return paginate(query, page, limit)
        except OperationalError as exc:
            raise StoreUnavailableError("The database is unavailable, please retry") from exc


class ActivityQueries:
    """Cross-workflow views of the audit trail for the admin activity screen."""

    def __init__(self, db: Session):
        self.db = db

    def list_activity(
        self,
        entity_kind: Optional[str] = None,
        actor_id: Optional[str] = None,
        action: Optional[str] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> Page:
        if limit is None:
            limit = get_settings().default_page_size
        check_paging(page, limit)
        check_date_range(date_from, date_to)

        query = self.db.query(AuditEntry)
        if entity_kind:
            query = query.filter(AuditEntry.entity_kind == entity_kind)
        if actor_id:
            query = query.filter(AuditEntry.actor_id == actor_id)
        if action:
            query = query.filter(AuditEntry.action == action)
        if date_from:
            query = query.filter(AuditEntry.created_at >= date_from)
        if date_to:
            query = query.filter(AuditEntry.created_at <= date_to)
        query = query.order_by(AuditEntry.created_at.desc(), AuditEntry.id.desc())

        try:
            return paginate(query, page, limit)
        except OperationalError as exc:
            raise StoreUnavailableError("The database is unavailable, please retry") from exc

    def list_bulk_operations(self, actor_id: Optional[str] = None, limit: int = 50) -> List[Any]:
        if limit <= 0:
            raise ValidationError("limit must be a positive integer")
        query = self.db.query(BulkOperation)
        if actor_id:
            query = query.filter(BulkOperation.actor_id == actor_id)
        return query.order_by(BulkOperation.created_at.desc(), BulkOperation.id.desc()).limit(limit).all()
