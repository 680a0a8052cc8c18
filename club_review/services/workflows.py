"""
Workflow definitions.

The review engine is generic; a Workflow tells it which table to govern,
which statuses exist, which moves between them are legal and which fields
the listing can search, sort and scope by.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple, Type

from club_review.models.domain import Club, ContentReport, Member
from club_review.models.enums import (
    AccountStatus,
    ApplicationStatus,
    EntityKind,
    ReportStatus,
)


@dataclass(frozen=True)
class Workflow:
    kind: EntityKind
    model: Type
    status_enum: Type[Enum]
    initial_status: Enum
    # None means every status may move to every status
    transitions: Optional[Dict[Enum, FrozenSet[Enum]]] = None
    notes_required: FrozenSet[Enum] = frozenset()
    search_fields: Tuple[str, ...] = ()
    sort_fields: Tuple[str, ...] = ("created_at", "updated_at")
    scope_fields: Tuple[str, ...] = ()
    label: str = field(default="record")

    @property
    def statuses(self) -> Tuple[Enum, ...]:
        return tuple(self.status_enum)

    def parse_status(self, value) -> Enum:
        """Coerce ``value`` into this workflow's status enum or raise ValueError."""
        if isinstance(value, self.status_enum):
            return value
        return self.status_enum(value)

    def allows(self, current: Enum, new: Enum) -> bool:
        if self.transitions is None:
            return True
        if current == new:
            return True
        return new in self.transitions.get(current, frozenset())


CLUB_APPLICATIONS = Workflow(
    kind=EntityKind.CLUB_APPLICATION,
    model=Club,
    status_enum=ApplicationStatus,
    initial_status=ApplicationStatus.PENDING,
    notes_required=frozenset({ApplicationStatus.REJECTED}),
    search_fields=("name", "contact_email", "description"),
    sort_fields=("created_at", "updated_at", "name", "location"),
    scope_fields=("location",),
    label="club application",
)

CONTENT_REPORTS = Workflow(
    kind=EntityKind.CONTENT_REPORT,
    model=ContentReport,
    status_enum=ReportStatus,
    initial_status=ReportStatus.PENDING,
    transitions={
        ReportStatus.PENDING: frozenset(
            {ReportStatus.REVIEWED, ReportStatus.RESOLVED, ReportStatus.DISMISSED}
        ),
        ReportStatus.REVIEWED: frozenset(
            {ReportStatus.RESOLVED, ReportStatus.DISMISSED, ReportStatus.PENDING}
        ),
        ReportStatus.RESOLVED: frozenset({ReportStatus.PENDING}),
        ReportStatus.DISMISSED: frozenset({ReportStatus.PENDING}),
    },
    notes_required=frozenset(
        {ReportStatus.REVIEWED, ReportStatus.RESOLVED, ReportStatus.DISMISSED}
    ),
    search_fields=("reason", "description"),
    scope_fields=("content_type", "content_id"),
    label="content report",
)

MEMBER_ACCOUNTS = Workflow(
    kind=EntityKind.MEMBER_ACCOUNT,
    model=Member,
    status_enum=AccountStatus,
    initial_status=AccountStatus.ACTIVE,
    notes_required=frozenset({AccountStatus.SUSPENDED}),
    search_fields=("display_name", "email"),
    sort_fields=("created_at", "updated_at", "display_name"),
    label="member account",
)

WORKFLOWS = {wf.kind: wf for wf in (CLUB_APPLICATIONS, CONTENT_REPORTS, MEMBER_ACCOUNTS)}
