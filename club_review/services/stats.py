"""Dashboard statistics, derived from live rows on every read."""
from typing import Any, Dict, Mapping, Optional

from sqlalchemy import Enum as SQLEnum, func
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from club_review.services.errors import StoreUnavailableError, ValidationError
from club_review.services.workflows import Workflow


class StatisticsAggregator:
    """Counts records per status. Nothing is cached, so there is no counter to drift."""

    def __init__(self, db: Session, workflow: Workflow):
        self.db = db
        self.workflow = workflow

    def stats(self, scope: Optional[Mapping[str, Any]] = None) -> Dict[str, int]:
        """
        Return ``{<status>: count, ..., "total": n}``.

        ``scope`` narrows the count with equality filters on the workflow's
        scope fields, e.g. ``{"location": "Leeds"}``.
        """
        model = self.workflow.model
        query = self.db.query(model.status, func.count(model.id))

        for name, value in (scope or {}).items():
            if name not in self.workflow.scope_fields:
                allowed = ", ".join(self.workflow.scope_fields) or "none"
                raise ValidationError(f"Cannot scope statistics by '{name}'. Allowed: {allowed}")
            if value is not None:
                column = getattr(model, name)
                query = query.filter(column == self._scope_value(column, name, value))

        try:
            rows = query.group_by(model.status).all()
        except OperationalError as exc:
            raise StoreUnavailableError("The database is unavailable, please retry") from exc

        counts = {status.value: 0 for status in self.workflow.statuses}
        for status, count in rows:
            counts[self.workflow.parse_status(status).value] = count
        # Computed from the same snapshot, so the categories always add up
        counts["total"] = sum(counts.values())
        return counts

    @staticmethod
    def _scope_value(column, name: str, value):
        enum_class = column.type.enum_class if isinstance(column.type, SQLEnum) else None
        if enum_class is None:
            return value
        try:
            return enum_class(value)
        except ValueError:
            allowed = ", ".join(e.value for e in enum_class)
            raise ValidationError(f"Invalid {name} '{value}'. Allowed: {allowed}") from None
