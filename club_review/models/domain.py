"""Domain models - the records whose status the review engine governs."""
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Enum as SQLEnum, Integer, String, Text

from club_review.database import Base
from club_review.models.enums import (
    AccountStatus,
    ApplicationStatus,
    ContentType,
    ReportStatus,
)


class ReviewableMixin:
    """
    Columns shared by every entity under review.

    Invariants:
    - version starts at 1 and increases by exactly one per transition
    - reviewed_by/reviewed_at/review_notes describe the latest decision only;
      the full trail lives in the audit log
    """
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    version = Column(Integer, nullable=False, default=1)

    review_notes = Column(Text, nullable=True)
    reviewed_by = Column(String, nullable=True)
    reviewed_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class Club(ReviewableMixin, Base):
    """
    A club's self-registration: pending until an administrator decides.

    Only approved clubs are visible in the public directory.
    """
    __tablename__ = "clubs"

    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String, nullable=True, index=True)
    contact_email = Column(String, nullable=False)
    contact_phone = Column(String, nullable=True)
    website_url = Column(String, nullable=True)

    status = Column(
        SQLEnum(ApplicationStatus),
        nullable=False,
        default=ApplicationStatus.PENDING,
        index=True,
    )


class ContentReport(ReviewableMixin, Base):
    """A user's report about a piece of content, awaiting a moderation decision."""
    __tablename__ = "content_reports"

    reporter_id = Column(String, nullable=False, index=True)
    content_type = Column(SQLEnum(ContentType), nullable=False, index=True)
    content_id = Column(String, nullable=False, index=True)
    reason = Column(String, nullable=False)
    description = Column(Text, nullable=True)

    status = Column(
        SQLEnum(ReportStatus),
        nullable=False,
        default=ReportStatus.PENDING,
        index=True,
    )


class Member(ReviewableMixin, Base):
    """A platform member account that moderators can suspend and reinstate."""
    __tablename__ = "members"

    user_id = Column(String, nullable=False, unique=True, index=True)
    email = Column(String, nullable=False)
    display_name = Column(String, nullable=True)

    status = Column(
        SQLEnum(AccountStatus),
        nullable=False,
        default=AccountStatus.ACTIVE,
        index=True,
    )


class AdminRole(Base):
    """Platform administrators. Consulted before any transition."""
    __tablename__ = "admin_roles"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(String, nullable=False, unique=True, index=True)
    email = Column(String, nullable=False, unique=True)
    is_admin = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
