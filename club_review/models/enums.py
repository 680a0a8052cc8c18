"""Enums for the review engine - the closed set of statuses and actions per entity kind."""
from enum import Enum


class EntityKind(str, Enum):
    """Kinds of records governed by the review engine."""
    CLUB_APPLICATION = "club_application"
    CONTENT_REPORT = "content_report"
    MEMBER_ACCOUNT = "member_account"


class ApplicationStatus(str, Enum):
    """Lifecycle of a club's self-registration."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ReportStatus(str, Enum):
    """Lifecycle of a content report."""
    PENDING = "pending"
    REVIEWED = "reviewed"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"


class AccountStatus(str, Enum):
    """Whether a member may use the platform."""
    ACTIVE = "active"
    SUSPENDED = "suspended"


class ContentType(str, Enum):
    """Things a user can report."""
    OPPORTUNITY = "opportunity"
    PROFILE = "profile"
    MESSAGE = "message"
    CLUB = "club"


class ModerationActionType(str, Enum):
    """Decisions a moderator can take on reported content or a member."""
    WARNING = "warning"
    CONTENT_REMOVAL = "content_removal"
    ACCOUNT_SUSPENSION = "account_suspension"
    DISMISSAL = "dismissal"
    REINSTATEMENT = "reinstatement"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"
