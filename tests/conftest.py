"""Pytest configuration and shared fixtures."""
import os

# Keep the application module from touching a file database on import
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from club_review.database import Base, get_db
from club_review.models.domain import AdminRole, Club, ContentReport, Member
from club_review.models.enums import ContentType
from club_review.models import audit  # noqa: F401

ADMIN_ID = "admin_1"
OTHER_ADMIN_ID = "admin_2"
MEMBER_ID = "member_99"


@pytest.fixture
def db_session():
    """Create a fresh in-memory database for each test."""
    # One shared connection so the TestClient thread sees the same database
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)

    TestingSessionLocal = sessionmaker(bind=engine)
    session = TestingSessionLocal()

    yield session

    session.close()
    engine.dispose()


@pytest.fixture
def admins(db_session):
    """Two administrators; MEMBER_ID has no admin role."""
    db_session.add_all([
        AdminRole(user_id=ADMIN_ID, email="admin1@example.com"),
        AdminRole(user_id=OTHER_ADMIN_ID, email="admin2@example.com"),
    ])
    db_session.commit()
    return [ADMIN_ID, OTHER_ADMIN_ID]


def make_club(db_session, name="Leeds Rowing Club", **kwargs):
    values = {
        "contact_email": "hello@example.com",
        "location": "Leeds",
        "description": "Rowing on the Aire",
    }
    values.update(kwargs)
    club = Club(name=name, **values)
    db_session.add(club)
    db_session.commit()
    db_session.refresh(club)
    return club


def make_report(db_session, content_id="opp_1", content_type=ContentType.OPPORTUNITY, **kwargs):
    values = {"reporter_id": "user_7", "reason": "Spam"}
    values.update(kwargs)
    report = ContentReport(content_type=content_type, content_id=content_id, **values)
    db_session.add(report)
    db_session.commit()
    db_session.refresh(report)
    return report


@pytest.fixture
def sample_club(db_session):
    """A pending club application."""
    return make_club(db_session)


@pytest.fixture
def sample_clubs(db_session):
    """Three pending club applications, A, B and C."""
    return [
        make_club(db_session, name="Club A", contact_email="a@example.com"),
        make_club(db_session, name="Club B", contact_email="b@example.com"),
        make_club(db_session, name="Club C", contact_email="c@example.com"),
    ]


@pytest.fixture
def sample_report(db_session):
    """A pending report about an opportunity."""
    return make_report(db_session)


@pytest.fixture
def sample_member(db_session):
    """An active member account."""
    member = Member(user_id="user_42", email="sam@example.com", display_name="Sam")
    db_session.add(member)
    db_session.commit()
    db_session.refresh(member)
    return member


class RecordingNotifier:
    def __init__(self):
        self.calls = []

    def notify(self, kind, entity, entry):
        self.calls.append((kind, entity.id, entry.to_status))


class FailingNotifier:
    def notify(self, kind, entity, entry):
        raise RuntimeError("mail server down")


@pytest.fixture
def client(db_session):
    """TestClient bound to the per-test database."""
    from club_review.main import app

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
